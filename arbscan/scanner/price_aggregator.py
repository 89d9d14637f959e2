"""Price aggregation across venues."""

import asyncio
from typing import Sequence

from arbscan.api.provider import DataProvider, ProviderResult
from arbscan.models import PricesBySymbol
from arbscan.scanner.pair_registry import PairMap, symbols_for_exchange
from arbscan.utils.logger import get_logger

logger = get_logger("arbscan.price_aggregator")


async def collect_prices(
    providers: Sequence[DataProvider],
    pair_map: PairMap,
) -> PricesBySymbol:
    """
    Fetch last prices from every venue and merge them by symbol.

    Each venue is asked, in one batched call, only for the symbols the
    registry lists for it; venues with no listed symbols are skipped. All
    venues are queried concurrently and a failing venue contributes nothing.

    Args:
        providers: One provider per venue
        pair_map: Output of ``collect_pairs``

    Returns:
        Mapping of symbol to venue to price
    """

    async def fetch(provider: DataProvider) -> ProviderResult:
        symbols = symbols_for_exchange(pair_map, provider.name)
        if not symbols:
            logger.debug(f"{provider.name}: no registered symbols, skipping prices")
            return ProviderResult.success(provider.name, {})
        return await provider.fetch_prices(symbols)

    results = await asyncio.gather(*(fetch(provider) for provider in providers))

    prices: PricesBySymbol = {}
    for result in results:
        if not result.ok:
            logger.info(f"{result.exchange}: no prices ({result.error})")
            continue
        for symbol, price in (result.value or {}).items():
            prices.setdefault(symbol, {})[result.exchange] = price

    logger.info(f"Collected prices for {len(prices)} symbols")
    return prices
