"""Binance spot market data."""

from typing import Any, Dict, List, Optional

from arbscan.api.provider import Capability
from arbscan.api.rest_client import HttpDataProvider, as_list, dig, non_negative, positive
from arbscan.models import OrderBook, Pair, Ticker24h

BOOK_DEPTH = 50


class BinanceProvider(HttpDataProvider):
    """Binance public REST API (api/v3)."""

    base_url = "https://api.binance.com"
    requests_per_second = 10.0
    capabilities = frozenset({Capability.TICKERS_24H, Capability.ORDER_BOOK})

    async def _load_pairs(self) -> List[Pair]:
        data = await self._request("api/v3/exchangeInfo")

        return [
            Pair.from_assets(entry["baseAsset"], entry["quoteAsset"])
            for entry in as_list(dig(data, "symbols"))
            if entry.get("status") == "TRADING" and entry.get("quoteAsset") == self.quote
        ]

    async def _load_prices(self, symbols: List[str]) -> Dict[str, Any]:
        data = await self._request("api/v3/ticker/price")
        wanted = set(symbols)

        return {
            entry["symbol"]: entry.get("price")
            for entry in as_list(data)
            if entry.get("symbol") in wanted
        }

    async def _load_tickers(self, symbols: List[str]) -> Dict[str, Ticker24h]:
        data = await self._request("api/v3/ticker/24hr")
        wanted = set(symbols)

        tickers: Dict[str, Ticker24h] = {}
        for entry in as_list(data):
            symbol = entry.get("symbol")
            if symbol not in wanted:
                continue
            tickers[symbol] = Ticker24h(
                last=positive(entry.get("lastPrice")),
                quote_volume_24h=non_negative(entry.get("quoteVolume")),
            )
        return tickers

    async def _load_order_book(self, symbol: str) -> Optional[OrderBook]:
        data = await self._request(
            "api/v3/depth", params={"symbol": symbol, "limit": BOOK_DEPTH}
        )
        if not isinstance(data, dict):
            return None
        return OrderBook.from_raw(as_list(data.get("bids")), as_list(data.get("asks")))
