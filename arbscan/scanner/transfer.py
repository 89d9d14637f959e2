"""Cross-venue transferability: can the bought asset reach the sell venue?"""

from typing import Dict, List, Optional

from arbscan.models import CurrencyInfo, NetworkInfo
from arbscan.scanner.opportunity import TransferCheck, TransferStatus

CurrencyTable = Dict[str, CurrencyInfo]


def base_asset_from_symbol(symbol: str, quote: str) -> str:
    """Strip the settlement-currency suffix from a canonical symbol."""
    symbol = symbol.upper()
    quote = quote.upper()
    if quote and symbol.endswith(quote) and len(symbol) > len(quote):
        return symbol[: -len(quote)]
    return symbol


def check_transferability(
    asset: str,
    buy_exchange: str,
    sell_exchange: str,
    buy_currencies: Optional[CurrencyTable],
    sell_currencies: Optional[CurrencyTable],
) -> TransferCheck:
    """
    Find a network that is withdraw-enabled on the buy venue and
    deposit-enabled on the sell venue.

    Missing or ambiguous metadata never passes: ``None`` tables give
    ``unavailable``; an unknown asset, an empty networks list, or networks
    without the needed flag give ``unknown``.

    Args:
        asset: Base asset code
        buy_exchange: Venue the asset is bought on (withdrawn from)
        sell_exchange: Venue the asset is sold on (deposited to)
        buy_currencies: Currency metadata of the buy venue, None if unavailable
        sell_currencies: Currency metadata of the sell venue, None if unavailable

    Returns:
        TransferCheck with the chosen network when status is ``ok``
    """
    asset = asset.upper()

    missing = [
        name
        for name, table in ((buy_exchange, buy_currencies), (sell_exchange, sell_currencies))
        if table is None
    ]
    if missing:
        return TransferCheck(
            status=TransferStatus.UNAVAILABLE,
            asset=asset,
            reason=f"currency metadata unavailable on {', '.join(missing)}",
        )

    buy_networks = _networks(buy_currencies, asset)
    sell_networks = _networks(sell_currencies, asset)
    if not buy_networks or not sell_networks:
        where = buy_exchange if not buy_networks else sell_exchange
        return TransferCheck(
            status=TransferStatus.UNKNOWN,
            asset=asset,
            reason=f"no network information for {asset} on {where}",
        )

    withdrawable = [n.network for n in buy_networks if n.withdraw_enabled is True]
    depositable = {n.network for n in sell_networks if n.deposit_enabled is True}

    if not withdrawable and all(n.withdraw_enabled is None for n in buy_networks):
        return TransferCheck(
            status=TransferStatus.UNKNOWN,
            asset=asset,
            reason=f"withdrawal status of {asset} unknown on {buy_exchange}",
        )
    if not depositable and all(n.deposit_enabled is None for n in sell_networks):
        return TransferCheck(
            status=TransferStatus.UNKNOWN,
            asset=asset,
            reason=f"deposit status of {asset} unknown on {sell_exchange}",
        )

    for network in withdrawable:
        if network in depositable:
            return TransferCheck(status=TransferStatus.OK, asset=asset, network=network)

    return TransferCheck(
        status=TransferStatus.BLOCKED,
        asset=asset,
        reason=(
            f"no common network to withdraw {asset} from {buy_exchange} "
            f"and deposit to {sell_exchange}"
        ),
    )


def _networks(table: CurrencyTable, asset: str) -> List[NetworkInfo]:
    info = table.get(asset)
    if info is None or not info.networks:
        return []
    return list(info.networks)
