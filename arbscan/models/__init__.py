"""Data models."""

from arbscan.models.currency import CurrencyInfo, NetworkInfo, canonical_network
from arbscan.models.market import (
    ExchangeFees,
    Pair,
    PriceByExchange,
    PricesBySymbol,
    Ticker24h,
    normalize_symbol,
)
from arbscan.models.orderbook import OrderBook, OrderBookLevel

__all__ = [
    # Market models
    "ExchangeFees",
    "Pair",
    "PriceByExchange",
    "PricesBySymbol",
    "Ticker24h",
    "normalize_symbol",
    # OrderBook models
    "OrderBook",
    "OrderBookLevel",
    # Currency models
    "CurrencyInfo",
    "NetworkInfo",
    "canonical_network",
]
