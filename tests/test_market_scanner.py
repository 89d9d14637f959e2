"""End-to-end tests for ArbitrageScanner against in-memory venues."""

import pytest

from arbscan.api import MockDataProvider
from arbscan.models import ExchangeFees, NetworkInfo, OrderBook
from arbscan.scanner.market_scanner import ArbitrageScanner, ScanResult
from config.strategy_params import StrategyParams

NETWORKS = {
    "BTC": [NetworkInfo(network="BTC", deposit_enabled=True, withdraw_enabled=True)],
    "ETH": [NetworkInfo(network="ERC20", deposit_enabled=True, withdraw_enabled=True)],
    "SOL": [NetworkInfo(network="SOL", deposit_enabled=True, withdraw_enabled=True)],
}


def venue(name: str, markets: dict) -> MockDataProvider:
    """Venue quoting each base at ``price`` with a deep book at that price."""
    provider = MockDataProvider(name, ExchangeFees(taker_fee_percent=0.1))
    for base, price in markets.items():
        provider.add_market(
            base,
            price,
            volume_24h=5_000_000,
            book=OrderBook.from_raw([[price, 1_000]], [[price, 1_000]]),
        )
        provider.add_currency(base, NETWORKS[base])
    return provider


@pytest.fixture
def config():
    return StrategyParams(
        min_diff_percent=0.5,
        min_volume_24h=50_000,
        trade_amount_usd=1000,
        min_real_profit_usd=10,
    )


@pytest.fixture
def providers():
    return [
        venue("binance", {"BTC": 100.0, "ETH": 100.0, "SOL": 20.0}),
        venue("okx", {"BTC": 101.0}),
        venue("kucoin", {"BTC": 103.0, "ETH": 100.8}),
    ]


class TestArbitrageScanner:
    """Tests for ArbitrageScanner."""

    @pytest.mark.asyncio
    async def test_scan_returns_validated_only(self, providers, config):
        scanner = ArbitrageScanner(providers, config)

        opportunities = await scanner.scan()

        assert [o.symbol for o in opportunities] == ["BTCUSDT"]
        btc = opportunities[0]
        assert btc.buy.exchange == "binance"
        assert btc.sell.exchange == "kucoin"
        assert btc.exchanges == {"binance": 100.0, "okx": 101.0, "kucoin": 103.0}
        assert btc.real_profit_usd >= config.min_real_profit_usd

    @pytest.mark.asyncio
    async def test_scan_all_keeps_rejected(self, providers, config):
        """Test a 0.6% ETH spread is detected but fails the 10 USDT profit floor."""
        scanner = ArbitrageScanner(providers, config)

        result = await scanner.scan_all()

        assert isinstance(result, ScanResult)
        assert [o.symbol for o in result.candidates] == ["BTCUSDT", "ETHUSDT"]
        assert [o.symbol for o in result.validated] == ["BTCUSDT"]
        eth = result.rejected[0]
        assert eth.symbol == "ETHUSDT"
        assert "real profit" in eth.validation.reasons[0]

        data = result.to_dict()
        assert [o["symbol"] for o in data["rejected"]] == ["ETHUSDT"]

    @pytest.mark.asyncio
    async def test_single_venue_symbol_never_reported(self, providers, config):
        scanner = ArbitrageScanner(providers, config)

        result = await scanner.scan_all(0.0)

        assert "SOLUSDT" not in {o.symbol for o in result.candidates}

    @pytest.mark.asyncio
    async def test_results_sorted_by_net_diff(self, providers, config):
        providers[0].add_market(
            "SOL", 20.0, volume_24h=5_000_000, book=OrderBook.from_raw([[20, 1_000]], [[20, 1_000]])
        )
        providers[2].add_market(
            "SOL", 21.0, volume_24h=5_000_000, book=OrderBook.from_raw([[21, 1_000]], [[21, 1_000]])
        )
        providers[2].add_currency("SOL", NETWORKS["SOL"])
        scanner = ArbitrageScanner(providers, config)

        opportunities = await scanner.scan()

        assert [o.symbol for o in opportunities] == ["SOLUSDT", "BTCUSDT"]
        assert opportunities[0].net_diff >= opportunities[1].net_diff

    @pytest.mark.asyncio
    async def test_custom_threshold(self, providers, config):
        scanner = ArbitrageScanner(providers, config)

        assert await scanner.scan(5.0) == []

    @pytest.mark.asyncio
    async def test_failing_venue_degrades_scan(self, providers, config):
        """Test a venue that fails every call does not abort the scan."""
        providers[2].fail("pairs", "prices", "tickers", "order_book", "currencies")
        scanner = ArbitrageScanner(providers, config)

        result = await scanner.scan_all()

        # binance -> okx nets 0.8% but only about 8 USDT on a 1000 USDT trade
        assert [o.symbol for o in result.candidates] == ["BTCUSDT"]
        assert result.candidates[0].sell.exchange == "okx"
        assert result.validated == []

    @pytest.mark.asyncio
    async def test_all_venues_down(self, providers, config):
        for provider in providers:
            provider.fail("pairs")
        scanner = ArbitrageScanner(providers, config)

        result = await scanner.scan_all()

        assert result.candidates == []
        assert result.validated == []

    @pytest.mark.asyncio
    async def test_find_candidates_skips_validation(self, providers, config):
        scanner = ArbitrageScanner(providers, config)

        candidates = await scanner.find_candidates()

        assert all(c.validation is None for c in candidates)
        assert all(p.calls["order_book"] == 0 for p in providers)

    @pytest.mark.asyncio
    async def test_refresh_and_close(self, providers, config):
        scanner = ArbitrageScanner(providers, config)

        scanner.refresh()
        await scanner.close()

        assert scanner.providers == providers
