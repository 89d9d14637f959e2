"""
Data provider contract for exchange venues.

Every venue adapter implements the ``_load_*`` coroutines. Callers only use the
``fetch_*`` wrappers, which never raise for venue I/O problems: they return a
``ProviderResult`` that is either ``ok``, ``failed`` (with a reason) or
``unsupported`` when the venue does not offer an optional operation.
"""

import asyncio
import math
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, FrozenSet, Generic, List, Optional, TypeVar

import aiohttp

from arbscan.models import CurrencyInfo, ExchangeFees, OrderBook, Pair, Ticker24h
from arbscan.utils.logger import get_logger

logger = get_logger("arbscan.provider")

T = TypeVar("T")


class ExchangeAPIError(Exception):
    """Exception for venue API errors (HTTP status or error payload)."""

    def __init__(self, exchange: str, status: int, message: str) -> None:
        self.exchange = exchange
        self.status = status
        self.message = message
        super().__init__(f"[{exchange}] {status}: {message}")


# Failures that degrade a provider call instead of aborting a scan
PROVIDER_ERRORS = (
    aiohttp.ClientError,
    asyncio.TimeoutError,
    ExchangeAPIError,
    ValueError,
    KeyError,
    TypeError,
    IndexError,
    AttributeError,
)


class Capability(str, Enum):
    """Optional provider operations."""
    TICKERS_24H = "tickers_24h"
    ORDER_BOOK = "order_book"
    CURRENCIES = "currencies"


class ResultStatus(str, Enum):
    """Outcome of a provider call."""
    OK = "ok"
    FAILED = "failed"
    UNSUPPORTED = "unsupported"


@dataclass(frozen=True)
class ProviderResult(Generic[T]):
    """Typed outcome of a provider call."""

    exchange: str
    status: ResultStatus
    value: Optional[T] = None
    error: Optional[str] = None

    @classmethod
    def success(cls, exchange: str, value: T) -> "ProviderResult[T]":
        return cls(exchange=exchange, status=ResultStatus.OK, value=value)

    @classmethod
    def failure(cls, exchange: str, error: str) -> "ProviderResult[T]":
        return cls(exchange=exchange, status=ResultStatus.FAILED, error=error)

    @classmethod
    def unsupported(cls, exchange: str) -> "ProviderResult[T]":
        return cls(exchange=exchange, status=ResultStatus.UNSUPPORTED)

    @property
    def ok(self) -> bool:
        return self.status == ResultStatus.OK

    def value_or(self, default: T) -> T:
        """Return the value if the call succeeded, otherwise ``default``."""
        if self.ok and self.value is not None:
            return self.value
        return default


class SymbolLookupCache:
    """
    Maps canonical symbols to a venue's own market identifiers.

    Populated on first use by the owning provider and kept until
    ``invalidate`` is called.
    """

    def __init__(self) -> None:
        self._by_symbol: Dict[str, str] = {}
        self._by_venue_id: Dict[str, str] = {}
        self._populated = False

    @property
    def is_populated(self) -> bool:
        return self._populated

    def replace(self, mapping: Dict[str, str]) -> None:
        """Replace the whole table with ``symbol -> venue id`` entries."""
        self._by_symbol = dict(mapping)
        self._by_venue_id = {venue_id: symbol for symbol, venue_id in mapping.items()}
        self._populated = True

    def venue_id(self, symbol: str) -> Optional[str]:
        return self._by_symbol.get(symbol)

    def symbol(self, venue_id: str) -> Optional[str]:
        return self._by_venue_id.get(venue_id)

    def invalidate(self) -> None:
        """Forget every entry; the next lookup repopulates the table."""
        self._by_symbol.clear()
        self._by_venue_id.clear()
        self._populated = False

    def __len__(self) -> int:
        return len(self._by_symbol)


class DataProvider(ABC):
    """Abstract base class for venue data providers."""

    capabilities: FrozenSet[Capability] = frozenset()

    def __init__(self, name: str, fees: ExchangeFees, quote: str = "USDT") -> None:
        """
        Initialize the provider.

        Args:
            name: Venue name used throughout the scan
            fees: Immutable fee snapshot for this venue
            quote: Settlement currency; only pairs quoted in it are reported
        """
        self.name = name
        self.fees = fees
        self.quote = quote.upper()

    def supports(self, capability: Capability) -> bool:
        return capability in self.capabilities

    # ==================== Adapter hooks ====================

    @abstractmethod
    async def _load_pairs(self) -> List[Pair]:
        """Fetch tradable pairs quoted in the settlement currency."""

    @abstractmethod
    async def _load_prices(self, symbols: List[str]) -> Dict[str, Any]:
        """Fetch raw last prices for the given canonical symbols."""

    async def _load_tickers(self, symbols: List[str]) -> Dict[str, Ticker24h]:
        raise NotImplementedError

    async def _load_order_book(self, symbol: str) -> Optional[OrderBook]:
        raise NotImplementedError

    async def _load_currencies(self) -> Dict[str, CurrencyInfo]:
        raise NotImplementedError

    # ==================== Guarded operations ====================

    async def fetch_pairs(self) -> ProviderResult[List[Pair]]:
        """Discover tradable pairs."""
        result = await self._guard("pairs", self._load_pairs)
        if not result.ok:
            return result
        pairs = [pair for pair in result.value or [] if pair.quote == self.quote]
        return ProviderResult.success(self.name, pairs)

    async def fetch_prices(self, symbols: List[str]) -> ProviderResult[Dict[str, float]]:
        """Fetch last prices; unparseable or non-positive prices are dropped."""
        if not symbols:
            return ProviderResult.success(self.name, {})

        result = await self._guard("prices", lambda: self._load_prices(symbols))
        if not result.ok:
            return result

        wanted = set(symbols)
        prices: Dict[str, float] = {}
        for symbol, raw in (result.value or {}).items():
            price = _to_price(raw)
            if symbol in wanted and price is not None:
                prices[symbol] = price
        return ProviderResult.success(self.name, prices)

    async def fetch_tickers(self, symbols: List[str]) -> ProviderResult[Dict[str, Ticker24h]]:
        """Fetch 24h tickers (optional operation)."""
        if not self.supports(Capability.TICKERS_24H):
            return ProviderResult.unsupported(self.name)
        return await self._guard("tickers", lambda: self._load_tickers(symbols))

    async def fetch_order_book(self, symbol: str) -> ProviderResult[OrderBook]:
        """Fetch order book depth (optional operation)."""
        if not self.supports(Capability.ORDER_BOOK):
            return ProviderResult.unsupported(self.name)
        result = await self._guard(f"order book {symbol}", lambda: self._load_order_book(symbol))
        if result.ok and result.value is None:
            return ProviderResult.failure(self.name, f"no order book for {symbol}")
        return result

    async def fetch_currencies(self) -> ProviderResult[Dict[str, CurrencyInfo]]:
        """Fetch currency transfer metadata (optional operation)."""
        if not self.supports(Capability.CURRENCIES):
            return ProviderResult.unsupported(self.name)
        return await self._guard("currencies", self._load_currencies)

    async def _guard(
        self,
        operation: str,
        call: Callable[[], Awaitable[T]],
    ) -> ProviderResult[T]:
        try:
            value = await call()
        except PROVIDER_ERRORS as e:
            error = str(e) or type(e).__name__
            logger.warning(f"{self.name} {operation} failed: {error}")
            return ProviderResult.failure(self.name, error)
        return ProviderResult.success(self.name, value)

    # ==================== Lifecycle ====================

    def lookup_caches(self) -> List[SymbolLookupCache]:
        """Identifier caches owned by this provider."""
        return []

    def refresh(self) -> None:
        """Invalidate identifier caches so they repopulate on next use."""
        for cache in self.lookup_caches():
            cache.invalidate()

    async def close(self) -> None:
        """Release network resources."""

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name})"


def parse_float(raw: object) -> Optional[float]:
    """Parse a venue number (often a string); None if missing or non-finite."""
    if raw is None or isinstance(raw, bool):
        return None
    try:
        value = float(raw)
    except (TypeError, ValueError):
        return None
    return value if math.isfinite(value) else None


def _to_price(raw: object) -> Optional[float]:
    price = parse_float(raw)
    if price is None or price <= 0:
        return None
    return price
