"""In-memory data provider for tests and offline runs."""

from collections import Counter
from typing import Dict, FrozenSet, Iterable, List, Optional, Set

from arbscan.api.provider import Capability, DataProvider, ExchangeAPIError
from arbscan.models import CurrencyInfo, ExchangeFees, NetworkInfo, OrderBook, Pair, Ticker24h


class MockDataProvider(DataProvider):
    """
    Mock implementation of a venue for testing.

    Holds configurable pairs, prices, tickers, books and currencies. Any
    operation listed in ``failing`` raises ``ExchangeAPIError`` so the
    provider-boundary failure handling can be exercised. ``calls`` counts
    every adapter hook invocation.
    """

    def __init__(
        self,
        name: str,
        fees: Optional[ExchangeFees] = None,
        quote: str = "USDT",
        capabilities: Optional[Iterable[Capability]] = None,
    ) -> None:
        super().__init__(name, fees or ExchangeFees(taker_fee_percent=0.1), quote)
        self.capabilities: FrozenSet[Capability] = frozenset(
            capabilities if capabilities is not None else Capability
        )
        self._pairs: Dict[str, Pair] = {}
        self._prices: Dict[str, object] = {}
        self._tickers: Dict[str, Ticker24h] = {}
        self._books: Dict[str, OrderBook] = {}
        self._currencies: Optional[Dict[str, CurrencyInfo]] = {}
        self.failing: Set[str] = set()
        self.calls: Counter = Counter()

    # ==================== Configuration ====================

    def add_market(
        self,
        base: str,
        price: object,
        volume_24h: Optional[float] = None,
        book: Optional[OrderBook] = None,
    ) -> Pair:
        """List a pair with its price and, optionally, its 24h volume and book."""
        pair = Pair.from_assets(base, self.quote)
        self._pairs[pair.symbol] = pair
        self._prices[pair.symbol] = price
        if volume_24h is not None:
            self._tickers[pair.symbol] = Ticker24h(quote_volume_24h=volume_24h)
        if book is not None:
            self._books[pair.symbol] = book
        return pair

    def add_pair(self, pair: Pair) -> None:
        self._pairs[pair.symbol] = pair

    def set_price(self, symbol: str, price: object) -> None:
        self._prices[symbol] = price

    def set_ticker(self, symbol: str, ticker: Ticker24h) -> None:
        self._tickers[symbol] = ticker

    def set_order_book(self, symbol: str, book: OrderBook) -> None:
        self._books[symbol] = book

    def add_currency(self, code: str, networks: Optional[List[NetworkInfo]]) -> None:
        if self._currencies is None:
            self._currencies = {}
        info = CurrencyInfo(code=code, networks=networks)
        self._currencies[info.code] = info

    def fail(self, *operations: str) -> None:
        """Make the named operations ('pairs', 'prices', ...) raise."""
        self.failing.update(operations)

    def clear(self) -> None:
        """Clear all mock data."""
        self._pairs.clear()
        self._prices.clear()
        self._tickers.clear()
        self._books.clear()
        self._currencies = {}
        self.failing.clear()
        self.calls.clear()

    def _record(self, operation: str) -> None:
        self.calls[operation] += 1
        if operation in self.failing:
            raise ExchangeAPIError(self.name, 503, f"{operation} unavailable")

    # ==================== Adapter hooks ====================

    async def _load_pairs(self) -> List[Pair]:
        self._record("pairs")
        return list(self._pairs.values())

    async def _load_prices(self, symbols: List[str]) -> Dict[str, object]:
        self._record("prices")
        return {s: self._prices[s] for s in symbols if s in self._prices}

    async def _load_tickers(self, symbols: List[str]) -> Dict[str, Ticker24h]:
        self._record("tickers")
        return {s: self._tickers[s] for s in symbols if s in self._tickers}

    async def _load_order_book(self, symbol: str) -> Optional[OrderBook]:
        self._record("order_book")
        return self._books.get(symbol)

    async def _load_currencies(self) -> Dict[str, CurrencyInfo]:
        self._record("currencies")
        return dict(self._currencies or {})


def create_sample_book(
    best_bid: float,
    best_ask: float,
    levels: int = 5,
    amount: float = 1.0,
    step_percent: float = 0.05,
) -> OrderBook:
    """
    Create a symmetric order book around the given best prices.

    Args:
        best_bid: Highest bid price
        best_ask: Lowest ask price
        levels: Number of levels per side
        amount: Base amount at every level
        step_percent: Price distance between consecutive levels (%)

    Returns:
        OrderBook with sample data
    """
    step = step_percent / 100
    bids = [[best_bid * (1 - step * i), amount] for i in range(levels)]
    asks = [[best_ask * (1 + step * i), amount] for i in range(levels)]
    return OrderBook.from_raw(bids, asks)
