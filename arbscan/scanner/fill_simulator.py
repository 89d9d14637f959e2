"""Order book fill simulation (VWAP and slippage)."""

from dataclasses import dataclass
from typing import Optional, Sequence

from arbscan.models import OrderBookLevel

# Residual below this is treated as filled (float rounding while walking levels)
FILL_TOLERANCE = 1e-9


@dataclass(frozen=True)
class FillResult:
    """
    Outcome of walking one side of a book.

    Attributes:
        best_price: Price of the first level consumed
        executable_price: Volume-weighted average price of the fill
        base_amount: Base asset bought or sold
        quote_amount: Settlement currency spent or received
        slippage_percent: Adverse distance from best to executable price (%)
    """

    best_price: float
    executable_price: float
    base_amount: float
    quote_amount: float
    slippage_percent: float


def simulate_buy(asks: Sequence[OrderBookLevel], notional: float) -> Optional[FillResult]:
    """
    Spend ``notional`` of settlement currency against the asks, best first.

    Args:
        asks: Ask levels sorted by price ascending
        notional: Settlement currency to spend

    Returns:
        FillResult, or None if the book cannot absorb the whole notional
    """
    if notional <= 0 or not asks:
        return None

    remaining = notional
    base_amount = 0.0
    for level in asks:
        level_quote = level.price * level.amount
        if level_quote >= remaining:
            base_amount += remaining / level.price
            remaining = 0.0
            break
        base_amount += level.amount
        remaining -= level_quote

    if remaining > FILL_TOLERANCE * notional:
        return None

    best = asks[0].price
    executable = notional / base_amount
    return FillResult(
        best_price=best,
        executable_price=executable,
        base_amount=base_amount,
        quote_amount=notional,
        slippage_percent=max(0.0, (executable - best) / best * 100),
    )


def simulate_sell(bids: Sequence[OrderBookLevel], base_amount: float) -> Optional[FillResult]:
    """
    Sell exactly ``base_amount`` into the bids, best first.

    Args:
        bids: Bid levels sorted by price descending
        base_amount: Base asset to sell

    Returns:
        FillResult, or None if the book cannot absorb the whole amount
    """
    if base_amount <= 0 or not bids:
        return None

    remaining = base_amount
    proceeds = 0.0
    for level in bids:
        take = min(level.amount, remaining)
        proceeds += take * level.price
        remaining -= take
        if remaining <= 0:
            break

    if remaining > FILL_TOLERANCE * base_amount:
        return None

    best = bids[0].price
    executable = proceeds / base_amount
    return FillResult(
        best_price=best,
        executable_price=executable,
        base_amount=base_amount,
        quote_amount=proceeds,
        slippage_percent=max(0.0, (best - executable) / best * 100),
    )
