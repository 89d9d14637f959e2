"""Pair registry: which venues list which symbols."""

import asyncio
from typing import Dict, List, Sequence

from arbscan.api.provider import DataProvider
from arbscan.utils.logger import get_logger

logger = get_logger("arbscan.pair_registry")

# symbol -> venue names listing it
PairMap = Dict[str, List[str]]


async def collect_pairs(providers: Sequence[DataProvider]) -> PairMap:
    """
    Ask every provider for its tradable pairs concurrently.

    A provider that fails or lists nothing contributes no entries.

    Args:
        providers: One provider per venue

    Returns:
        Mapping of symbol to the names of venues trading it
    """
    results = await asyncio.gather(*(provider.fetch_pairs() for provider in providers))

    pair_map: PairMap = {}
    for result in results:
        if not result.ok:
            logger.info(f"{result.exchange}: no pairs ({result.error})")
            continue

        pairs = result.value or []
        logger.debug(f"{result.exchange}: {len(pairs)} pairs")
        for pair in pairs:
            venues = pair_map.setdefault(pair.symbol, [])
            if result.exchange not in venues:
                venues.append(result.exchange)

    logger.info(f"Pair registry: {len(pair_map)} symbols across {len(providers)} exchanges")
    return pair_map


def symbols_for_exchange(pair_map: PairMap, exchange: str) -> List[str]:
    """Symbols the given venue trades according to the registry."""
    return [symbol for symbol, venues in pair_map.items() if exchange in venues]
