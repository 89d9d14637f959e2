"""Tests for environment settings and strategy parameters."""

import pytest

from config.settings import Settings, get_settings
from config.strategy_params import DEFAULT_STRATEGY, StrategyParams

ENV_VARS = [
    "MIN_DIFF_PERCENT",
    "MIN_24H_VOLUME",
    "MAX_SLIPPAGE_PERCENT",
    "MIN_REAL_PROFIT_USD",
    "DEFAULT_TRADE_AMOUNT",
    "SETTLEMENT_CURRENCY",
    "ENABLED_EXCHANGES",
    "EXCHANGE_FEES_JSON",
    "EXCHANGE_FEES",
    "HTTP_TIMEOUT_SECONDS",
    "LOG_LEVEL",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Start every test from an empty environment."""
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


def load() -> Settings:
    return Settings(_env_file=None)


class TestSettings:
    """Tests for Settings."""

    def test_defaults(self):
        settings = load()

        assert settings.min_diff_percent == 0.5
        assert settings.min_24h_volume == 50_000
        assert settings.max_slippage_percent == 0.8
        assert settings.min_real_profit_usd == 5
        assert settings.default_trade_amount == 100
        assert settings.settlement_currency == "USDT"
        assert settings.http_timeout_seconds == 8.0
        assert settings.exchange_names == []
        assert settings.fee_overrides() == {}

    def test_reads_environment(self, monkeypatch):
        monkeypatch.setenv("MIN_DIFF_PERCENT", "1.25")
        monkeypatch.setenv("MIN_24H_VOLUME", "1000")
        monkeypatch.setenv("SETTLEMENT_CURRENCY", "usdc")

        settings = load()

        assert settings.min_diff_percent == 1.25
        assert settings.min_24h_volume == 1000
        assert settings.settlement_currency == "USDC"

    @pytest.mark.parametrize("raw", ["abc", "NaN", "inf", ""])
    def test_invalid_number_falls_back_to_default(self, monkeypatch, raw):
        """Test unparseable numbers use the default instead of failing."""
        monkeypatch.setenv("MAX_SLIPPAGE_PERCENT", raw)

        assert load().max_slippage_percent == 0.8

    @pytest.mark.parametrize(
        "var, raw, field, default",
        [
            ("DEFAULT_TRADE_AMOUNT", "0", "default_trade_amount", 100),
            ("DEFAULT_TRADE_AMOUNT", "-50", "default_trade_amount", 100),
            ("MIN_24H_VOLUME", "-1", "min_24h_volume", 50_000),
            ("MAX_SLIPPAGE_PERCENT", "-0.5", "max_slippage_percent", 0.8),
            ("HTTP_TIMEOUT_SECONDS", "0", "http_timeout_seconds", 8.0),
        ],
    )
    def test_out_of_range_number_falls_back_to_default(self, monkeypatch, var, raw, field, default):
        monkeypatch.setenv(var, raw)

        assert getattr(load(), field) == default

    def test_zero_allowed_where_bound_inclusive(self, monkeypatch):
        monkeypatch.setenv("MIN_24H_VOLUME", "0")
        monkeypatch.setenv("MAX_SLIPPAGE_PERCENT", "0")

        settings = load()

        assert settings.min_24h_volume == 0
        assert settings.max_slippage_percent == 0

    def test_enabled_exchanges_parsed(self, monkeypatch):
        monkeypatch.setenv("ENABLED_EXCHANGES", " Binance , okx ,,")

        assert load().exchange_names == ["binance", "okx"]

    def test_get_settings_is_cached(self):
        assert get_settings() is get_settings()


class TestFeeOverrides:
    """Tests for the fee override table."""

    def test_keys_lower_cased(self, monkeypatch):
        monkeypatch.setenv(
            "EXCHANGE_FEES_JSON",
            '{"Binance": {"takerFeePercent": 0.075, "transferFeePercent": 0.01}}',
        )

        overrides = load().fee_overrides()

        assert set(overrides) == {"binance"}
        assert overrides["binance"].taker_fee_percent == pytest.approx(0.075)
        assert overrides["binance"].transfer_fee_percent == pytest.approx(0.01)

    def test_non_numeric_values_become_zero(self, monkeypatch):
        monkeypatch.setenv(
            "EXCHANGE_FEES_JSON",
            '{"okx": {"takerFeePercent": "cheap"}, "kraken": null}',
        )

        overrides = load().fee_overrides()

        assert overrides["okx"].taker_fee_percent == 0.0
        assert overrides["okx"].transfer_fee_percent == 0.0
        assert overrides["kraken"].taker_fee_percent == 0.0
        assert overrides["kraken"].transfer_fee_percent == 0.0

    def test_legacy_variable_name(self, monkeypatch):
        monkeypatch.setenv("EXCHANGE_FEES", '{"kucoin": {"takerFeePercent": 0.08}}')

        overrides = load().fee_overrides()

        assert overrides["kucoin"].taker_fee_percent == pytest.approx(0.08)

    @pytest.mark.parametrize("raw", ["{not json", "[1, 2]"])
    def test_malformed_document_ignored(self, monkeypatch, raw):
        monkeypatch.setenv("EXCHANGE_FEES_JSON", raw)

        assert load().fee_overrides() == {}


class TestStrategyParams:
    """Tests for StrategyParams."""

    def test_defaults(self):
        assert DEFAULT_STRATEGY.min_diff_percent == 0.5
        assert DEFAULT_STRATEGY.min_volume_24h == 50_000
        assert DEFAULT_STRATEGY.trade_amount_usd == 100
        assert DEFAULT_STRATEGY.settlement_currency == "USDT"

    def test_from_settings(self, monkeypatch):
        monkeypatch.setenv("DEFAULT_TRADE_AMOUNT", "250")
        monkeypatch.setenv("MIN_REAL_PROFIT_USD", "2")

        params = StrategyParams.from_settings(load())

        assert params.trade_amount_usd == 250
        assert params.min_real_profit_usd == 2
        assert params.max_slippage_percent == 0.8

    def test_from_settings_with_out_of_range_environment(self, monkeypatch):
        """Test bad thresholds in the environment still yield usable parameters."""
        monkeypatch.setenv("DEFAULT_TRADE_AMOUNT", "0")
        monkeypatch.setenv("MIN_24H_VOLUME", "-1")
        monkeypatch.setenv("MAX_SLIPPAGE_PERCENT", "-3")

        params = StrategyParams.from_settings(load())

        assert params.trade_amount_usd == 100
        assert params.min_volume_24h == 50_000
        assert params.max_slippage_percent == 0.8

    def test_trade_amount_must_be_positive(self):
        with pytest.raises(ValueError):
            StrategyParams(trade_amount_usd=0)
