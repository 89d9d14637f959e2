"""Pytest configuration and shared fixtures."""

import sys
from pathlib import Path

import pytest

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from arbscan.models import ExchangeFees  # noqa: E402
from config.strategy_params import StrategyParams  # noqa: E402


def pytest_configure(config):
    """Configure pytest."""
    config.addinivalue_line(
        "markers", "asyncio: mark test as an async test"
    )


@pytest.fixture
def fees():
    """Default 0.1% taker fee with no transfer fee."""
    return ExchangeFees(taker_fee_percent=0.1)


@pytest.fixture
def strategy():
    """Strategy with a 1000 USDT trade so small spreads clear the profit floor."""
    return StrategyParams(
        min_diff_percent=0.5,
        min_volume_24h=50_000,
        max_slippage_percent=0.8,
        trade_amount_usd=1000,
        min_real_profit_usd=5,
    )
