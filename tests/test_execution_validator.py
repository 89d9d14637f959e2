"""Tests for ExecutionValidator."""

from typing import Optional

import pytest

from arbscan.api import Capability, MockDataProvider
from arbscan.models import ExchangeFees, NetworkInfo, OrderBook
from arbscan.scanner.execution_validator import ExecutionValidator
from arbscan.scanner.opportunity import (
    ArbitrageOpportunity,
    TransferStatus,
    ValidationStatus,
)
from arbscan.scanner.spread_analyzer import SpreadAnalyzer
from config.strategy_params import StrategyParams

BTC_NETWORK = NetworkInfo(network="BTC", deposit_enabled=True, withdraw_enabled=True)


def make_venue(
    name: str,
    price: float,
    book: Optional[OrderBook],
    volume: Optional[float] = 1_000_000,
    capabilities=None,
) -> MockDataProvider:
    provider = MockDataProvider(name, ExchangeFees(taker_fee_percent=0.1), capabilities=capabilities)
    provider.add_market("BTC", price, volume_24h=volume, book=book)
    provider.add_currency("BTC", [BTC_NETWORK])
    return provider


def detect(providers, symbol: str = "BTCUSDT") -> ArbitrageOpportunity:
    analyzer = SpreadAnalyzer({p.name: p.fees for p in providers}, StrategyParams())
    prices = {p.name: p._prices[symbol] for p in providers}
    return analyzer.analyze_symbol(symbol, prices, 0.0)


@pytest.fixture
def buy_venue():
    """Deep asks at 100."""
    return make_venue("binance", 100.0, OrderBook.from_raw([[99.9, 50]], [[100, 50]]))


@pytest.fixture
def sell_venue():
    """Deep bids at 103."""
    return make_venue("kucoin", 103.0, OrderBook.from_raw([[103, 50]], [[103.1, 50]]))


async def run(validator: ExecutionValidator, candidate: ArbitrageOpportunity):
    reference = await validator.prefetch([candidate])
    return await validator.validate(candidate, reference)


class TestExecutionValidator:
    """Tests for ExecutionValidator class."""

    @pytest.mark.asyncio
    async def test_executable_candidate_validated(self, strategy, buy_venue, sell_venue):
        """Test 1000 USDT bought at 100 and sold at 103 with 0.1% fees."""
        candidate = detect([buy_venue, sell_venue])
        validator = ExecutionValidator([buy_venue, sell_venue], strategy)

        validation = await run(validator, candidate)

        assert validation.status == ValidationStatus.VALIDATED
        assert validation.reasons == []
        assert candidate.is_validated
        assert candidate.trade_amount_usd == 1000
        # cost 1001, proceeds 10 * 103 * 0.999 = 1028.97
        assert candidate.real_profit_usd == pytest.approx(27.97, abs=0.01)
        assert candidate.net_diff == pytest.approx(27.97 / 1001 * 100, abs=0.01)
        assert validation.buy.base_amount == pytest.approx(10)
        assert validation.sell.executable_price == pytest.approx(103)
        assert validation.transfer.status == TransferStatus.OK
        assert validation.transfer.network == "BTC"

    @pytest.mark.asyncio
    async def test_net_diff_replaced_by_depth_aware_estimate(self, strategy, buy_venue):
        """Test a thinner sell book lowers net_diff from the detection value."""
        sell_venue = make_venue(
            "kucoin", 103.0, OrderBook.from_raw([[103, 5], [102, 20]], [[103.1, 5]])
        )
        candidate = detect([buy_venue, sell_venue])
        detected = candidate.net_diff
        validator = ExecutionValidator([buy_venue, sell_venue], strategy)

        await run(validator, candidate)

        # proceeds (5 * 103 + 5 * 102) * 0.999 = 1023.975
        assert candidate.is_validated
        assert candidate.real_profit_usd == pytest.approx(22.975, abs=0.01)
        assert candidate.net_diff == pytest.approx(2.30, abs=0.01)
        assert candidate.net_diff < detected
        assert candidate.validation.sell.slippage_percent == pytest.approx(0.4854, abs=0.001)

    @pytest.mark.asyncio
    async def test_low_volume_rejected_before_depth(self, strategy, buy_venue):
        sell_venue = make_venue(
            "kucoin", 103.0, OrderBook.from_raw([[103, 50]], [[103.1, 50]]), volume=10_000
        )
        candidate = detect([buy_venue, sell_venue])
        validator = ExecutionValidator([buy_venue, sell_venue], strategy)

        validation = await run(validator, candidate)

        assert validation.status == ValidationStatus.REJECTED
        assert len(validation.reasons) == 1
        assert "below minimum" in validation.reasons[0]
        assert "kucoin" in validation.reasons[0]
        assert validation.sell.volume_24h == 10_000
        assert buy_venue.calls["order_book"] == 0
        assert sell_venue.calls["order_book"] == 0
        assert candidate.real_profit_usd is None

    @pytest.mark.asyncio
    async def test_unknown_volume_rejected(self, strategy, sell_venue):
        buy_venue = make_venue(
            "binance", 100.0, OrderBook.from_raw([[99.9, 50]], [[100, 50]]), volume=None
        )
        candidate = detect([buy_venue, sell_venue])
        validator = ExecutionValidator([buy_venue, sell_venue], strategy)

        validation = await run(validator, candidate)

        assert not validation.is_validated
        assert validation.reasons == ["24h volume unknown on binance (buy leg)"]

    @pytest.mark.asyncio
    async def test_ticker_failure_rejects(self, strategy, buy_venue, sell_venue):
        sell_venue.fail("tickers")
        candidate = detect([buy_venue, sell_venue])
        validator = ExecutionValidator([buy_venue, sell_venue], strategy)

        validation = await run(validator, candidate)

        assert validation.reasons == ["24h volume unknown on kucoin (sell leg)"]

    @pytest.mark.asyncio
    async def test_excess_slippage_rejected(self, strategy, sell_venue):
        """Test a thin ask side pushes VWAP well above the best ask."""
        buy_venue = make_venue(
            "binance", 100.0, OrderBook.from_raw([[99.9, 50]], [[100, 1], [120, 100]])
        )
        candidate = detect([buy_venue, sell_venue])
        validator = ExecutionValidator([buy_venue, sell_venue], strategy)

        validation = await run(validator, candidate)

        assert validation.status == ValidationStatus.REJECTED
        assert any("buy slippage" in reason for reason in validation.reasons)
        assert validation.buy.slippage_percent > strategy.max_slippage_percent
        assert validation.transfer is None

    @pytest.mark.asyncio
    async def test_insufficient_buy_depth(self, strategy, sell_venue):
        buy_venue = make_venue("binance", 100.0, OrderBook.from_raw([[99.9, 50]], [[100, 1]]))
        candidate = detect([buy_venue, sell_venue])
        validator = ExecutionValidator([buy_venue, sell_venue], strategy)

        validation = await run(validator, candidate)

        assert len(validation.reasons) == 1
        assert "insufficient buy-side depth" in validation.reasons[0]

    @pytest.mark.asyncio
    async def test_insufficient_sell_depth(self, strategy, buy_venue):
        sell_venue = make_venue("kucoin", 103.0, OrderBook.from_raw([[103, 1]], [[103.1, 50]]))
        candidate = detect([buy_venue, sell_venue])
        validator = ExecutionValidator([buy_venue, sell_venue], strategy)

        validation = await run(validator, candidate)

        assert len(validation.reasons) == 1
        assert "insufficient sell-side depth" in validation.reasons[0]

    @pytest.mark.asyncio
    async def test_missing_order_book_rejected(self, strategy, sell_venue):
        buy_venue = make_venue("binance", 100.0, None)
        candidate = detect([buy_venue, sell_venue])
        validator = ExecutionValidator([buy_venue, sell_venue], strategy)

        validation = await run(validator, candidate)

        assert validation.reasons == ["order book unavailable on binance (buy leg)"]

    @pytest.mark.asyncio
    async def test_blocked_transfer_rejected(self, strategy, buy_venue, sell_venue):
        buy_venue.add_currency("BTC", [NetworkInfo(network="ERC20", withdraw_enabled=True)])
        sell_venue.add_currency("BTC", [NetworkInfo(network="TRC20", deposit_enabled=True)])
        candidate = detect([buy_venue, sell_venue])
        validator = ExecutionValidator([buy_venue, sell_venue], strategy)

        validation = await run(validator, candidate)

        assert validation.status == ValidationStatus.REJECTED
        assert validation.transfer.status == TransferStatus.BLOCKED
        assert "no common network" in validation.reasons[0]
        assert validation.buy.executable_price == pytest.approx(100)

    @pytest.mark.asyncio
    async def test_currencies_unsupported_rejected(self, strategy, buy_venue):
        sell_venue = make_venue(
            "kraken",
            103.0,
            OrderBook.from_raw([[103, 50]], [[103.1, 50]]),
            capabilities=[Capability.TICKERS_24H, Capability.ORDER_BOOK],
        )
        candidate = detect([buy_venue, sell_venue])
        validator = ExecutionValidator([buy_venue, sell_venue], strategy)

        validation = await run(validator, candidate)

        assert validation.transfer.status == TransferStatus.UNAVAILABLE
        assert not candidate.is_validated

    @pytest.mark.asyncio
    async def test_profit_below_minimum_rejected(self, buy_venue, sell_venue):
        config = StrategyParams(trade_amount_usd=1000, min_real_profit_usd=50)
        candidate = detect([buy_venue, sell_venue])
        detected = candidate.net_diff
        validator = ExecutionValidator([buy_venue, sell_venue], config)

        validation = await run(validator, candidate)

        assert validation.status == ValidationStatus.REJECTED
        assert "real profit" in validation.reasons[0]
        assert candidate.real_profit_usd == pytest.approx(27.97, abs=0.01)
        assert candidate.net_diff == detected

    @pytest.mark.asyncio
    async def test_reference_data_fetched_once_per_venue(self, strategy, buy_venue, sell_venue):
        """Test tickers and currencies are fetched once per scan, not per candidate."""
        for venue, price in ((buy_venue, 10.0), (sell_venue, 10.5)):
            venue.add_market("ETH", price, volume_24h=1_000_000, book=OrderBook.from_raw(
                [[price, 500]], [[price, 500]]
            ))
            venue.add_currency("ETH", [NetworkInfo(network="ERC20", deposit_enabled=True, withdraw_enabled=True)])
        candidates = [detect([buy_venue, sell_venue]), detect([buy_venue, sell_venue], "ETHUSDT")]
        validator = ExecutionValidator([buy_venue, sell_venue], strategy)

        results = await validator.validate_all(candidates)

        assert all(c.is_validated for c in results)
        for venue in (buy_venue, sell_venue):
            assert venue.calls["tickers"] == 1
            assert venue.calls["currencies"] == 1
            assert venue.calls["order_book"] == 2

    @pytest.mark.asyncio
    async def test_validate_all_empty(self, strategy, buy_venue):
        validator = ExecutionValidator([buy_venue], strategy)

        assert await validator.validate_all([]) == []
        assert buy_venue.calls["tickers"] == 0
