"""Bitget spot market data, including public deposit/withdraw network flags."""

from typing import Any, Dict, List, Optional

from arbscan.api.provider import Capability, ExchangeAPIError
from arbscan.api.rest_client import HttpDataProvider, as_list, flag, non_negative, positive
from arbscan.models import CurrencyInfo, NetworkInfo, OrderBook, Pair, Ticker24h

SUCCESS_CODE = "00000"
BOOK_DEPTH = 50


class BitgetProvider(HttpDataProvider):
    """Bitget public REST API (api/v2)."""

    base_url = "https://api.bitget.com"
    requests_per_second = 10.0
    capabilities = frozenset(
        {Capability.TICKERS_24H, Capability.ORDER_BOOK, Capability.CURRENCIES}
    )

    async def _get_data(self, endpoint: str, params: Optional[Dict[str, Any]] = None) -> Any:
        """Request an endpoint and unwrap Bitget's ``{"code", "msg", "data"}`` envelope."""
        payload = await self._request(endpoint, params=params)
        if not isinstance(payload, dict):
            return None
        code = str(payload.get("code") or SUCCESS_CODE)
        if code != SUCCESS_CODE:
            raise ExchangeAPIError(self.name, 200, f"code {code}: {payload.get('msg', '')}")
        return payload.get("data")

    async def _spot_tickers(self, symbols: List[str]) -> Dict[str, dict]:
        wanted = set(symbols)
        tickers: Dict[str, dict] = {}
        for entry in as_list(await self._get_data("api/v2/spot/market/tickers")):
            symbol = str(entry.get("symbol", "")).upper()
            if symbol in wanted:
                tickers[symbol] = entry
        return tickers

    async def _load_pairs(self) -> List[Pair]:
        data = await self._get_data("api/v2/spot/public/symbols")

        return [
            Pair.from_assets(entry["baseCoin"], entry["quoteCoin"])
            for entry in as_list(data)
            if str(entry.get("quoteCoin", "")).upper() == self.quote
            and entry.get("status") == "online"
        ]

    async def _load_prices(self, symbols: List[str]) -> Dict[str, Any]:
        tickers = await self._spot_tickers(symbols)
        return {symbol: entry.get("lastPr") for symbol, entry in tickers.items()}

    async def _load_tickers(self, symbols: List[str]) -> Dict[str, Ticker24h]:
        tickers = await self._spot_tickers(symbols)

        return {
            symbol: Ticker24h(
                last=positive(entry.get("lastPr")),
                quote_volume_24h=non_negative(entry.get("quoteVolume")),
            )
            for symbol, entry in tickers.items()
        }

    async def _load_order_book(self, symbol: str) -> Optional[OrderBook]:
        data = await self._get_data(
            "api/v2/spot/market/orderbook",
            params={"symbol": symbol, "type": "step0", "limit": BOOK_DEPTH},
        )
        if not isinstance(data, dict):
            return None
        return OrderBook.from_raw(as_list(data.get("bids")), as_list(data.get("asks")))

    async def _load_currencies(self) -> Dict[str, CurrencyInfo]:
        data = await self._get_data("api/v2/spot/public/coins")

        currencies: Dict[str, CurrencyInfo] = {}
        for entry in as_list(data):
            code = entry.get("coin")
            if not code:
                continue
            chains = entry.get("chains")
            networks = None
            if isinstance(chains, list):
                networks = [
                    NetworkInfo(
                        network=chain["chain"],
                        deposit_enabled=flag(chain.get("rechargeable")),
                        withdraw_enabled=flag(chain.get("withdrawable")),
                    )
                    for chain in chains
                    if chain.get("chain")
                ]
            info = CurrencyInfo(code=code, networks=networks)
            currencies[info.code] = info
        return currencies
