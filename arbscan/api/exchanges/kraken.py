"""Kraken spot market data."""

import asyncio
from typing import Any, Dict, List, Optional

from arbscan.api.provider import Capability, ExchangeAPIError, SymbolLookupCache
from arbscan.api.rest_client import HttpDataProvider, as_list, dig, non_negative, positive
from arbscan.models import OrderBook, Pair, Ticker24h
from arbscan.utils.logger import get_logger

logger = get_logger("arbscan.kraken")

BOOK_DEPTH = 50
TICKER_BATCH_SIZE = 50
UNKNOWN_PAIR_ERROR = "Unknown asset pair"

# Kraken's legacy asset codes that differ from the rest of the market
ASSET_ALIASES = {
    "XBT": "BTC",
    "XDG": "DOGE",
}


def normalize_kraken_asset(asset: str) -> str:
    """Translate a Kraken asset code to the common ticker."""
    asset = asset.upper()
    return ASSET_ALIASES.get(asset, asset)


class KrakenProvider(HttpDataProvider):
    """
    Kraken public REST API (0/public).

    Kraken prices and books are keyed by its own pair ids (``XBTUSDT``), so
    the provider keeps a ``SymbolLookupCache`` from canonical symbols to pair
    ids, filled by pair discovery.
    """

    base_url = "https://api.kraken.com"
    requests_per_second = 1.0
    capabilities = frozenset({Capability.TICKERS_24H, Capability.ORDER_BOOK})

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._pair_ids = SymbolLookupCache()

    def lookup_caches(self) -> List[SymbolLookupCache]:
        return [self._pair_ids]

    async def _get_result(self, endpoint: str, params: Optional[Dict[str, Any]] = None) -> dict:
        """Request an endpoint; Kraken reports failures in an ``error`` array."""
        payload = await self._request(endpoint, params=params)
        errors = as_list(dig(payload, "error"))
        if errors:
            raise ExchangeAPIError(self.name, 200, "; ".join(str(e) for e in errors))
        result = dig(payload, "result")
        return result if isinstance(result, dict) else {}

    async def _ensure_pair_ids(self) -> None:
        if not self._pair_ids.is_populated:
            await self._load_pairs()

    async def _load_pairs(self) -> List[Pair]:
        result = await self._get_result("0/public/AssetPairs")

        pairs: List[Pair] = []
        pair_ids: Dict[str, str] = {}
        for pair_id, info in result.items():
            raw_base, _, raw_quote = str(info.get("wsname", "")).partition("/")
            if not raw_base or raw_quote.upper() != self.quote:
                continue
            if info.get("status", "online") != "online":
                continue
            pair = Pair.from_assets(normalize_kraken_asset(raw_base), raw_quote)
            pairs.append(pair)
            pair_ids[pair.symbol] = pair_id

        self._pair_ids.replace(pair_ids)
        return pairs

    async def _tickers_by_symbol(self, symbols: List[str]) -> Dict[str, dict]:
        await self._ensure_pair_ids()
        pair_ids = [pid for pid in (self._pair_ids.venue_id(s) for s in symbols) if pid]
        if not pair_ids:
            return {}

        chunks = [
            pair_ids[i:i + TICKER_BATCH_SIZE]
            for i in range(0, len(pair_ids), TICKER_BATCH_SIZE)
        ]
        results = await asyncio.gather(*(self._ticker_chunk(chunk) for chunk in chunks))

        tickers: Dict[str, dict] = {}
        for result in results:
            for pair_id, ticker in result.items():
                symbol = self._pair_ids.symbol(pair_id)
                if symbol and isinstance(ticker, dict):
                    tickers[symbol] = ticker
        return tickers

    async def _ticker_chunk(self, pair_ids: List[str]) -> dict:
        """
        Query tickers for one batch of pair ids.

        Kraken rejects the whole batch if any id is unknown. On that error the
        pair list is reloaded and the batch retried once with the ids that
        are still listed.
        """
        try:
            return await self._get_result("0/public/Ticker", {"pair": ",".join(pair_ids)})
        except ExchangeAPIError as e:
            if UNKNOWN_PAIR_ERROR not in e.message:
                raise
            logger.warning(f"{self.name} rejected a stale pair id; reloading pairs: {e.message}")

        await self._load_pairs()
        listed = [pid for pid in pair_ids if self._pair_ids.symbol(pid) is not None]
        if not listed:
            return {}
        return await self._get_result("0/public/Ticker", {"pair": ",".join(listed)})

    async def _load_prices(self, symbols: List[str]) -> Dict[str, Any]:
        tickers = await self._tickers_by_symbol(symbols)
        # c = [last trade price, lot volume]
        return {symbol: _first(ticker.get("c")) for symbol, ticker in tickers.items()}

    async def _load_tickers(self, symbols: List[str]) -> Dict[str, Ticker24h]:
        tickers = await self._tickers_by_symbol(symbols)

        result: Dict[str, Ticker24h] = {}
        for symbol, ticker in tickers.items():
            # v = [today, last 24h] base volume; p = [today, last 24h] vwap
            base_volume = non_negative(_second(ticker.get("v")))
            vwap = non_negative(_second(ticker.get("p")))
            quote_volume = base_volume * vwap if base_volume is not None and vwap is not None else None
            result[symbol] = Ticker24h(
                last=positive(_first(ticker.get("c"))),
                quote_volume_24h=quote_volume,
            )
        return result

    async def _load_order_book(self, symbol: str) -> Optional[OrderBook]:
        await self._ensure_pair_ids()
        pair_id = self._pair_ids.venue_id(symbol)
        if pair_id is None:
            return None

        result = await self._get_result("0/public/Depth", {"pair": pair_id, "count": BOOK_DEPTH})
        book = next(iter(result.values()), None)
        if not isinstance(book, dict):
            return None
        return OrderBook.from_raw(as_list(book.get("bids")), as_list(book.get("asks")))


def _first(values: Any) -> Any:
    values = as_list(values)
    return values[0] if values else None


def _second(values: Any) -> Any:
    values = as_list(values)
    return values[1] if len(values) > 1 else None
