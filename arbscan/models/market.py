"""Pair, fee and ticker models shared by providers and the scanner."""

from typing import Dict, Optional

from pydantic import BaseModel, ConfigDict, Field

# venue name -> last price
PriceByExchange = Dict[str, float]

# symbol -> venue name -> last price
PricesBySymbol = Dict[str, PriceByExchange]


def normalize_symbol(base: str, quote: str) -> str:
    """Canonical symbol: upper-case concatenation of base and quote."""
    return f"{base}{quote}".upper()


class Pair(BaseModel):
    """A spot trading pair listed on one venue."""

    base: str = Field(..., min_length=1, description="Traded asset")
    quote: str = Field(..., min_length=1, description="Settlement asset")
    symbol: str = Field(..., description="Canonical BASEQUOTE symbol")

    model_config = ConfigDict(frozen=True)

    @classmethod
    def from_assets(cls, base: str, quote: str) -> "Pair":
        """Build a pair with upper-cased assets and canonical symbol."""
        return cls(
            base=base.upper(),
            quote=quote.upper(),
            symbol=normalize_symbol(base, quote),
        )


class ExchangeFees(BaseModel):
    """Fee schedule of one venue, as percentages."""

    taker_fee_percent: float = Field(..., ge=0, allow_inf_nan=False)
    transfer_fee_percent: float = Field(default=0.0, ge=0, allow_inf_nan=False)

    model_config = ConfigDict(frozen=True)

    @property
    def total_fee_percent(self) -> float:
        """Taker fee plus transfer fee."""
        return self.taker_fee_percent + self.transfer_fee_percent


class Ticker24h(BaseModel):
    """24-hour ticker summary; missing fields mean unknown."""

    last: Optional[float] = Field(None, gt=0, allow_inf_nan=False)
    quote_volume_24h: Optional[float] = Field(
        None,
        ge=0,
        allow_inf_nan=False,
        description="24h traded volume in the settlement currency",
    )
