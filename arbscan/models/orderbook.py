"""Order book models."""

import math
from typing import Iterable, List, Sequence, Tuple

from pydantic import BaseModel, Field, model_validator


class OrderBookLevel(BaseModel):
    """Single price level in the order book."""

    price: float = Field(..., gt=0, allow_inf_nan=False, description="Price in settlement currency")
    amount: float = Field(..., gt=0, allow_inf_nan=False, description="Quantity of the base asset")


class OrderBook(BaseModel):
    """Bid and ask depth for one symbol on one venue."""

    bids: List[OrderBookLevel] = Field(
        default_factory=list,
        description="Bids (sorted by price descending)"
    )
    asks: List[OrderBookLevel] = Field(
        default_factory=list,
        description="Asks (sorted by price ascending)"
    )

    @model_validator(mode="after")
    def _check_sorted(self) -> "OrderBook":
        for better, worse in zip(self.bids, self.bids[1:]):
            if worse.price > better.price:
                raise ValueError("bids must be sorted by price descending")
        for better, worse in zip(self.asks, self.asks[1:]):
            if worse.price < better.price:
                raise ValueError("asks must be sorted by price ascending")
        return self

    @classmethod
    def from_raw(
        cls,
        bids: Iterable[Sequence],
        asks: Iterable[Sequence],
    ) -> "OrderBook":
        """
        Build an order book from raw ``[price, amount, ...]`` rows.

        Rows that do not parse, or that carry non-positive or non-finite
        values, are dropped. Each side is sorted into book order.
        """
        return cls(
            bids=[
                OrderBookLevel(price=p, amount=a)
                for p, a in sorted(_parse_levels(bids), key=lambda x: x[0], reverse=True)
            ],
            asks=[
                OrderBookLevel(price=p, amount=a)
                for p, a in sorted(_parse_levels(asks), key=lambda x: x[0])
            ],
        )


def _parse_levels(rows: Iterable[Sequence]) -> List[Tuple[float, float]]:
    levels: List[Tuple[float, float]] = []
    for row in rows:
        try:
            price = float(row[0])
            amount = float(row[1])
        except (TypeError, ValueError, IndexError):
            continue
        if math.isfinite(price) and math.isfinite(amount) and price > 0 and amount > 0:
            levels.append((price, amount))
    return levels
