"""Tests for cross-venue transferability."""

import pytest

from arbscan.models import CurrencyInfo, NetworkInfo
from arbscan.scanner.opportunity import TransferStatus
from arbscan.scanner.transfer import base_asset_from_symbol, check_transferability


def table(code: str, *networks: NetworkInfo):
    return {code: CurrencyInfo(code=code, networks=list(networks))}


def net(name: str, deposit=None, withdraw=None) -> NetworkInfo:
    return NetworkInfo(network=name, deposit_enabled=deposit, withdraw_enabled=withdraw)


class TestBaseAsset:
    """Tests for base_asset_from_symbol."""

    @pytest.mark.parametrize(
        "symbol, expected",
        [("BTCUSDT", "BTC"), ("ethusdt", "ETH"), ("USDT", "USDT"), ("BTCEUR", "BTCEUR")],
    )
    def test_strips_settlement_suffix(self, symbol, expected):
        assert base_asset_from_symbol(symbol, "USDT") == expected


class TestCheckTransferability:
    """Tests for check_transferability."""

    def test_no_common_network_blocked(self):
        check = check_transferability(
            "BTC",
            "binance",
            "kucoin",
            table("BTC", net("ERC20", withdraw=True)),
            table("BTC", net("TRC20", deposit=True)),
        )

        assert check.status == TransferStatus.BLOCKED
        assert "no common network" in check.reason

    def test_common_network_ok(self):
        check = check_transferability(
            "btc",
            "binance",
            "kucoin",
            table("BTC", net("ERC20", withdraw=False), net("TRC20", withdraw=True)),
            table("BTC", net("TRC20", deposit=True)),
        )

        assert check.status == TransferStatus.OK
        assert check.network == "TRC20"
        assert check.asset == "BTC"

    def test_first_network_in_buy_venue_order(self):
        check = check_transferability(
            "USDT",
            "binance",
            "kucoin",
            table("USDT", net("SOL", withdraw=True), net("TRC20", withdraw=True)),
            table("USDT", net("TRC20", deposit=True), net("SOL", deposit=True)),
        )

        assert check.network == "SOL"

    def test_disabled_deposit_blocked(self):
        check = check_transferability(
            "BTC",
            "binance",
            "kucoin",
            table("BTC", net("BTC", withdraw=True)),
            table("BTC", net("BTC", deposit=False)),
        )

        assert check.status == TransferStatus.BLOCKED

    def test_metadata_unavailable(self):
        check = check_transferability(
            "BTC", "binance", "kucoin", None, table("BTC", net("BTC", deposit=True))
        )

        assert check.status == TransferStatus.UNAVAILABLE
        assert "binance" in check.reason
        assert not check.is_ok

    def test_asset_missing_unknown(self):
        check = check_transferability(
            "BTC",
            "binance",
            "kucoin",
            table("BTC", net("BTC", withdraw=True)),
            table("ETH", net("ERC20", deposit=True)),
        )

        assert check.status == TransferStatus.UNKNOWN
        assert "kucoin" in check.reason

    def test_empty_networks_unknown(self):
        check = check_transferability(
            "BTC",
            "binance",
            "kucoin",
            {"BTC": CurrencyInfo(code="BTC", networks=None)},
            table("BTC", net("BTC", deposit=True)),
        )

        assert check.status == TransferStatus.UNKNOWN

    def test_missing_flags_unknown(self):
        """Test networks without explicit flags never pass."""
        check = check_transferability(
            "BTC",
            "binance",
            "kucoin",
            table("BTC", net("BTC", withdraw=True)),
            table("BTC", net("BTC")),
        )

        assert check.status == TransferStatus.UNKNOWN
        assert "deposit status" in check.reason

    def test_venue_spellings_of_same_chain_match(self):
        """Test ETH on one venue and ERC20 on another are the same network."""
        check = check_transferability(
            "USDT",
            "bitget",
            "kucoin",
            table("USDT", net("ETH", withdraw=True)),
            table("USDT", net("TRX", deposit=True), net("ERC20", deposit=True)),
        )

        assert check.status == TransferStatus.OK
        assert check.network == "ERC20"
