"""Arbitrage opportunity data model and validation records."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional

from arbscan.models.market import PriceByExchange


class TradeSide(str, Enum):
    """Direction of a leg."""
    BUY = "buy"
    SELL = "sell"


class ValidationStatus(str, Enum):
    """Terminal state of a validated candidate."""
    VALIDATED = "validated"
    REJECTED = "rejected"


class TransferStatus(str, Enum):
    """Outcome of the cross-venue transferability check."""
    OK = "ok"
    BLOCKED = "blocked"
    UNKNOWN = "unknown"
    UNAVAILABLE = "unavailable"


@dataclass(frozen=True)
class OpportunityLeg:
    """
    One side of an opportunity on one venue.

    Attributes:
        exchange: Venue name
        price: Raw last price
        effective_price: Price adjusted by the total fee in the trade direction
        fee_percent_applied: Taker plus transfer fee percent used for the adjustment
    """

    exchange: str
    price: float
    effective_price: float
    fee_percent_applied: float

    def to_dict(self) -> dict:
        return {
            "exchange": self.exchange,
            "price": self.price,
            "effectivePrice": self.effective_price,
            "feePercentApplied": self.fee_percent_applied,
        }


@dataclass(frozen=True)
class LegExecution:
    """Per-leg facts gathered while validating a candidate."""

    exchange: str
    volume_24h: Optional[float] = None
    best_price: Optional[float] = None
    executable_price: Optional[float] = None
    base_amount: Optional[float] = None
    slippage_percent: Optional[float] = None

    def to_dict(self) -> dict:
        data = {
            "exchange": self.exchange,
            "volume24h": self.volume_24h,
            "bestPrice": self.best_price,
            "executablePrice": self.executable_price,
            "baseAmount": self.base_amount,
            "slippagePercent": self.slippage_percent,
        }
        return {key: value for key, value in data.items() if value is not None}


@dataclass(frozen=True)
class TransferCheck:
    """Result of matching withdraw networks on the buy venue with deposit networks on the sell venue."""

    status: TransferStatus
    asset: str
    network: Optional[str] = None
    reason: Optional[str] = None

    @property
    def is_ok(self) -> bool:
        return self.status == TransferStatus.OK

    def to_dict(self) -> dict:
        data = {"status": self.status.value, "asset": self.asset}
        if self.network is not None:
            data["network"] = self.network
        if self.reason is not None:
            data["reason"] = self.reason
        return data


@dataclass(frozen=True)
class OpportunityValidation:
    """Terminal validation record attached to a candidate."""

    status: ValidationStatus
    reasons: List[str] = field(default_factory=list)
    buy: Optional[LegExecution] = None
    sell: Optional[LegExecution] = None
    transfer: Optional[TransferCheck] = None

    @property
    def is_validated(self) -> bool:
        return self.status == ValidationStatus.VALIDATED

    def to_dict(self) -> dict:
        data: dict = {"status": self.status.value}
        if self.reasons:
            data["reasons"] = list(self.reasons)
        if self.buy is not None:
            data["buy"] = self.buy.to_dict()
        if self.sell is not None:
            data["sell"] = self.sell.to_dict()
        if self.transfer is not None:
            data["transfer"] = self.transfer.to_dict()
        return data


@dataclass
class ArbitrageOpportunity:
    """
    A cross-venue price discrepancy for one symbol.

    Attributes:
        symbol: Canonical symbol (e.g. 'BTCUSDT')
        min_price: Lowest raw price across all quoting venues
        max_price: Highest raw price across all quoting venues
        diff: Gross spread (%) between min and max raw price
        net_diff: Fee-adjusted spread (%) between the chosen legs; replaced by
            the depth-aware estimate once the candidate is validated
        buy: Leg with the lowest effective buy price
        sell: Leg with the highest effective sell price
        exchanges: Raw price of every venue quoting the symbol
        trade_amount_usd: Notional used for the fill simulation
        real_profit_usd: Simulated profit after fees and depth
        validation: Validation record
    """

    symbol: str
    min_price: float
    max_price: float
    diff: float
    net_diff: float
    buy: OpportunityLeg
    sell: OpportunityLeg
    exchanges: PriceByExchange
    trade_amount_usd: Optional[float] = None
    real_profit_usd: Optional[float] = None
    validation: Optional[OpportunityValidation] = None

    def __post_init__(self) -> None:
        """Validate opportunity data after initialization."""
        if self.min_price <= 0:
            raise ValueError(f"min_price must be positive, got {self.min_price}")
        if self.max_price < self.min_price:
            raise ValueError(
                f"max_price ({self.max_price}) cannot be below min_price ({self.min_price})"
            )
        if len(self.exchanges) < 2:
            raise ValueError(f"{self.symbol} needs quotes from at least two exchanges")

    @property
    def is_validated(self) -> bool:
        """Whether the candidate passed every execution check."""
        return self.validation is not None and self.validation.is_validated

    def to_dict(self) -> dict:
        """Convert opportunity to dictionary format."""
        data: Dict[str, object] = {
            "symbol": self.symbol,
            "min": self.min_price,
            "max": self.max_price,
            "diff": self.diff,
            "netDiff": self.net_diff,
            "buy": self.buy.to_dict(),
            "sell": self.sell.to_dict(),
            "exchanges": dict(self.exchanges),
        }
        if self.trade_amount_usd is not None:
            data["tradeAmountUsd"] = self.trade_amount_usd
        if self.real_profit_usd is not None:
            data["realProfitUsd"] = self.real_profit_usd
        if self.validation is not None:
            data["validation"] = self.validation.to_dict()
        return data

    def __repr__(self) -> str:
        return (
            f"ArbitrageOpportunity({self.symbol}, "
            f"buy={self.buy.exchange}@{self.buy.price}, "
            f"sell={self.sell.exchange}@{self.sell.price}, "
            f"net={self.net_diff:.2f}%)"
        )
