"""OKX spot market data."""

from typing import Any, Dict, List, Optional

from arbscan.api.provider import Capability, ExchangeAPIError
from arbscan.api.rest_client import HttpDataProvider, as_list, non_negative, positive
from arbscan.models import OrderBook, Pair, Ticker24h, normalize_symbol

BOOK_DEPTH = 50


class OkxProvider(HttpDataProvider):
    """OKX public REST API (api/v5)."""

    base_url = "https://www.okx.com"
    requests_per_second = 10.0
    capabilities = frozenset({Capability.TICKERS_24H, Capability.ORDER_BOOK})

    async def _get_data(self, endpoint: str, params: Optional[Dict[str, Any]] = None) -> list:
        """Request an endpoint and unwrap OKX's ``{"code", "msg", "data"}`` envelope."""
        payload = await self._request(endpoint, params=params)
        code = str(payload.get("code", "0")) if isinstance(payload, dict) else "0"
        if code != "0":
            raise ExchangeAPIError(self.name, 200, f"code {code}: {payload.get('msg', '')}")
        return as_list(payload.get("data") if isinstance(payload, dict) else None)

    def _inst_id(self, symbol: str) -> str:
        return f"{symbol[: -len(self.quote)]}-{self.quote}"

    async def _spot_tickers(self, symbols: List[str]) -> Dict[str, dict]:
        wanted = set(symbols)
        tickers: Dict[str, dict] = {}
        for entry in await self._get_data("api/v5/market/tickers", {"instType": "SPOT"}):
            symbol = _symbol_from_inst_id(str(entry.get("instId", "")))
            if symbol in wanted:
                tickers[symbol] = entry
        return tickers

    async def _load_pairs(self) -> List[Pair]:
        instruments = await self._get_data("api/v5/public/instruments", {"instType": "SPOT"})

        return [
            Pair.from_assets(entry["baseCcy"], entry["quoteCcy"])
            for entry in instruments
            if entry.get("quoteCcy") == self.quote and entry.get("state") == "live"
        ]

    async def _load_prices(self, symbols: List[str]) -> Dict[str, Any]:
        tickers = await self._spot_tickers(symbols)
        return {symbol: entry.get("last") for symbol, entry in tickers.items()}

    async def _load_tickers(self, symbols: List[str]) -> Dict[str, Ticker24h]:
        tickers = await self._spot_tickers(symbols)

        # volCcy24h is quoted in the quote currency for spot instruments
        return {
            symbol: Ticker24h(
                last=positive(entry.get("last")),
                quote_volume_24h=non_negative(entry.get("volCcy24h")),
            )
            for symbol, entry in tickers.items()
        }

    async def _load_order_book(self, symbol: str) -> Optional[OrderBook]:
        data = await self._get_data(
            "api/v5/market/books", {"instId": self._inst_id(symbol), "sz": BOOK_DEPTH}
        )
        if not data:
            return None
        book = data[0]
        return OrderBook.from_raw(as_list(book.get("bids")), as_list(book.get("asks")))


def _symbol_from_inst_id(inst_id: str) -> str:
    """Canonical symbol for an OKX instrument id such as ``BTC-USDT``."""
    base, _, quote = inst_id.partition("-")
    return normalize_symbol(base, quote)
