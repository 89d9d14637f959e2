"""Venue adapters and provider construction."""

from typing import Dict, List, Optional, Type

import aiohttp

from config.settings import FeeOverride, Settings
from arbscan.api.exchanges.binance import BinanceProvider
from arbscan.api.exchanges.bitget import BitgetProvider
from arbscan.api.exchanges.huobi import HuobiProvider
from arbscan.api.exchanges.kraken import KrakenProvider
from arbscan.api.exchanges.kucoin import KucoinProvider
from arbscan.api.exchanges.okx import OkxProvider
from arbscan.api.rest_client import HttpDataProvider
from arbscan.models import ExchangeFees
from arbscan.utils.logger import get_logger

logger = get_logger("arbscan.exchanges")

EXCHANGE_CLASSES: Dict[str, Type[HttpDataProvider]] = {
    "binance": BinanceProvider,
    "okx": OkxProvider,
    "kucoin": KucoinProvider,
    "kraken": KrakenProvider,
    "bitget": BitgetProvider,
    "huobi": HuobiProvider,
}

DEFAULT_FEES: Dict[str, ExchangeFees] = {
    name: ExchangeFees(taker_fee_percent=0.1) for name in EXCHANGE_CLASSES
}


def resolve_fees(
    name: str,
    overrides: Optional[Dict[str, FeeOverride]] = None,
) -> ExchangeFees:
    """Fees for a venue: the override if one is configured, else the default."""
    override = (overrides or {}).get(name.lower())
    if override is not None:
        return ExchangeFees(
            taker_fee_percent=override.taker_fee_percent,
            transfer_fee_percent=override.transfer_fee_percent,
        )
    return DEFAULT_FEES.get(name, ExchangeFees(taker_fee_percent=0.1))


def build_providers(
    settings: Settings,
    session: Optional[aiohttp.ClientSession] = None,
) -> List[HttpDataProvider]:
    """
    Build the enabled venue providers.

    Args:
        settings: Application settings (enabled venues, fee overrides, timeout)
        session: Shared aiohttp session; each provider creates one otherwise

    Returns:
        Providers in registry order
    """
    overrides = settings.fee_overrides()
    requested = settings.exchange_names or list(EXCHANGE_CLASSES)

    providers: List[HttpDataProvider] = []
    for name in requested:
        provider_cls = EXCHANGE_CLASSES.get(name)
        if provider_cls is None:
            logger.warning(f"Unknown exchange '{name}' in ENABLED_EXCHANGES; skipping")
            continue
        providers.append(
            provider_cls(
                name,
                resolve_fees(name, overrides),
                quote=settings.settlement_currency,
                session=session,
                timeout_seconds=settings.http_timeout_seconds,
            )
        )

    logger.info(f"Configured exchanges: {', '.join(p.name for p in providers) or 'none'}")
    return providers


__all__ = [
    "BinanceProvider",
    "BitgetProvider",
    "DEFAULT_FEES",
    "EXCHANGE_CLASSES",
    "HuobiProvider",
    "KrakenProvider",
    "KucoinProvider",
    "OkxProvider",
    "build_providers",
    "resolve_fees",
]
