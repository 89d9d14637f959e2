"""HTX (Huobi) spot market data, including public deposit/withdraw network flags."""

from typing import Any, Dict, List, Optional

from arbscan.api.provider import Capability, ExchangeAPIError
from arbscan.api.rest_client import HttpDataProvider, as_list, dig, flag, non_negative, positive
from arbscan.models import CurrencyInfo, NetworkInfo, OrderBook, Pair, Ticker24h

# Largest depth the merged-depth endpoint serves
BOOK_DEPTH = 20

TRANSFER_ALLOWED = ("allowed",)
TRANSFER_PROHIBITED = ("prohibited",)


class HuobiProvider(HttpDataProvider):
    """
    HTX public REST API.

    Market endpoints answer ``{"status": "ok", ...}``; the v2 reference
    endpoints answer ``{"code": 200, ...}``. Symbols are lower-case on the
    wire (``btcusdt``).
    """

    base_url = "https://api.huobi.pro"
    requests_per_second = 10.0
    capabilities = frozenset(
        {Capability.TICKERS_24H, Capability.ORDER_BOOK, Capability.CURRENCIES}
    )

    async def _get_v1(self, endpoint: str, params: Optional[Dict[str, Any]] = None) -> dict:
        payload = await self._request(endpoint, params=params)
        if not isinstance(payload, dict):
            return {}
        if payload.get("status", "ok") != "ok":
            raise ExchangeAPIError(
                self.name, 200, f"{payload.get('err-code', 'error')}: {payload.get('err-msg', '')}"
            )
        return payload

    async def _spot_tickers(self, symbols: List[str]) -> Dict[str, dict]:
        payload = await self._get_v1("market/tickers")
        wanted = set(symbols)

        tickers: Dict[str, dict] = {}
        for entry in as_list(payload.get("data")):
            symbol = str(entry.get("symbol", "")).upper()
            if symbol in wanted:
                tickers[symbol] = entry
        return tickers

    async def _load_pairs(self) -> List[Pair]:
        payload = await self._get_v1("v1/common/symbols")

        return [
            Pair.from_assets(entry["base-currency"], entry["quote-currency"])
            for entry in as_list(payload.get("data"))
            if str(entry.get("quote-currency", "")).upper() == self.quote
            and str(entry.get("state", "")).lower() == "online"
        ]

    async def _load_prices(self, symbols: List[str]) -> Dict[str, Any]:
        tickers = await self._spot_tickers(symbols)
        return {symbol: entry.get("close") for symbol, entry in tickers.items()}

    async def _load_tickers(self, symbols: List[str]) -> Dict[str, Ticker24h]:
        tickers = await self._spot_tickers(symbols)

        # vol is the 24h turnover in the quote currency; amount is base volume
        return {
            symbol: Ticker24h(
                last=positive(entry.get("close")),
                quote_volume_24h=non_negative(entry.get("vol")),
            )
            for symbol, entry in tickers.items()
        }

    async def _load_order_book(self, symbol: str) -> Optional[OrderBook]:
        payload = await self._get_v1(
            "market/depth",
            params={"symbol": symbol.lower(), "type": "step0", "depth": BOOK_DEPTH},
        )
        tick = payload.get("tick")
        if not isinstance(tick, dict):
            return None
        return OrderBook.from_raw(as_list(tick.get("bids")), as_list(tick.get("asks")))

    async def _load_currencies(self) -> Dict[str, CurrencyInfo]:
        payload = await self._request("v2/reference/currencies")
        code = dig(payload, "code")
        if code is not None and str(code) != "200":
            raise ExchangeAPIError(self.name, 200, f"code {code}: {dig(payload, 'message') or ''}")

        currencies: Dict[str, CurrencyInfo] = {}
        for entry in as_list(dig(payload, "data")):
            currency = entry.get("currency")
            if not currency:
                continue
            chains = entry.get("chains")
            networks = None
            if isinstance(chains, list):
                networks = [
                    NetworkInfo(
                        network=chain.get("displayName") or chain.get("chain"),
                        deposit_enabled=flag(
                            chain.get("depositStatus"), TRANSFER_ALLOWED, TRANSFER_PROHIBITED
                        ),
                        withdraw_enabled=flag(
                            chain.get("withdrawStatus"), TRANSFER_ALLOWED, TRANSFER_PROHIBITED
                        ),
                    )
                    for chain in chains
                    if chain.get("displayName") or chain.get("chain")
                ]
            info = CurrencyInfo(code=currency, networks=networks)
            currencies[info.code] = info
        return currencies
