"""KuCoin spot market data, including public deposit/withdraw network flags."""

from typing import Any, Dict, List, Optional

from arbscan.api.provider import Capability, ExchangeAPIError
from arbscan.api.rest_client import HttpDataProvider, as_list, dig, non_negative, positive
from arbscan.models import CurrencyInfo, NetworkInfo, OrderBook, Pair, Ticker24h, normalize_symbol

SUCCESS_CODE = "200000"


class KucoinProvider(HttpDataProvider):
    """KuCoin public REST API."""

    base_url = "https://api.kucoin.com"
    requests_per_second = 10.0
    capabilities = frozenset(
        {Capability.TICKERS_24H, Capability.ORDER_BOOK, Capability.CURRENCIES}
    )

    async def _get_data(self, endpoint: str, params: Optional[Dict[str, Any]] = None) -> Any:
        """Request an endpoint and unwrap KuCoin's ``{"code", "data"}`` envelope."""
        payload = await self._request(endpoint, params=params)
        code = str(dig(payload, "code") or SUCCESS_CODE)
        if code != SUCCESS_CODE:
            raise ExchangeAPIError(self.name, 200, f"code {code}: {dig(payload, 'msg') or ''}")
        return dig(payload, "data")

    async def _all_tickers(self, symbols: List[str]) -> Dict[str, dict]:
        data = await self._get_data("api/v1/market/allTickers")
        wanted = set(symbols)

        tickers: Dict[str, dict] = {}
        for entry in as_list(dig(data, "ticker")):
            base, _, quote = str(entry.get("symbol", "")).partition("-")
            if not base or not quote:
                continue
            symbol = normalize_symbol(base, quote)
            if symbol in wanted:
                tickers[symbol] = entry
        return tickers

    async def _load_pairs(self) -> List[Pair]:
        data = await self._get_data("api/v2/symbols")

        return [
            Pair.from_assets(entry["baseCurrency"], entry["quoteCurrency"])
            for entry in as_list(data)
            if str(entry.get("quoteCurrency", "")).upper() == self.quote
            and entry.get("enableTrading")
        ]

    async def _load_prices(self, symbols: List[str]) -> Dict[str, Any]:
        tickers = await self._all_tickers(symbols)
        return {symbol: entry.get("last") for symbol, entry in tickers.items()}

    async def _load_tickers(self, symbols: List[str]) -> Dict[str, Ticker24h]:
        tickers = await self._all_tickers(symbols)

        return {
            symbol: Ticker24h(
                last=positive(entry.get("last")),
                quote_volume_24h=non_negative(entry.get("volValue")),
            )
            for symbol, entry in tickers.items()
        }

    async def _load_order_book(self, symbol: str) -> Optional[OrderBook]:
        market = f"{symbol[: -len(self.quote)]}-{self.quote}"
        data = await self._get_data(
            "api/v1/market/orderbook/level2_20", params={"symbol": market}
        )
        if not isinstance(data, dict):
            return None
        return OrderBook.from_raw(as_list(data.get("bids")), as_list(data.get("asks")))

    async def _load_currencies(self) -> Dict[str, CurrencyInfo]:
        data = await self._get_data("api/v3/currencies")

        currencies: Dict[str, CurrencyInfo] = {}
        for entry in as_list(data):
            code = entry.get("currency")
            if not code:
                continue
            chains = entry.get("chains")
            networks = None
            if isinstance(chains, list):
                networks = [
                    NetworkInfo(
                        network=chain.get("chainName") or chain.get("chainId"),
                        deposit_enabled=chain.get("isDepositEnabled"),
                        withdraw_enabled=chain.get("isWithdrawEnabled"),
                    )
                    for chain in chains
                    if chain.get("chainName") or chain.get("chainId")
                ]
            info = CurrencyInfo(code=code, networks=networks)
            currencies[info.code] = info
        return currencies
