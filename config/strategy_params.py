"""Strategy parameters for cross-exchange spot arbitrage."""

from pydantic import BaseModel, Field

from config.settings import Settings


class StrategyParams(BaseModel):
    """Thresholds applied while detecting and validating opportunities."""

    # Spread Detection
    min_diff_percent: float = Field(
        default=0.5,
        description="Minimum fee-adjusted spread (%) for a candidate"
    )

    # Liquidity
    min_volume_24h: float = Field(
        default=50_000,
        ge=0,
        description="Minimum 24h quote volume required on both legs"
    )

    # Execution
    max_slippage_percent: float = Field(
        default=0.8,
        ge=0,
        description="Reject if best -> executable slippage (%) exceeds this on either leg"
    )
    trade_amount_usd: float = Field(
        default=100,
        gt=0,
        description="Notional (settlement currency) used for fill simulation"
    )
    min_real_profit_usd: float = Field(
        default=5,
        description="Minimum profit for the simulated trade after fees"
    )

    # Markets
    settlement_currency: str = Field(
        default="USDT",
        description="The single quote currency every pair settles in"
    )

    @classmethod
    def from_settings(cls, settings: Settings) -> "StrategyParams":
        """Build strategy parameters from environment settings."""
        return cls(
            min_diff_percent=settings.min_diff_percent,
            min_volume_24h=settings.min_24h_volume,
            max_slippage_percent=settings.max_slippage_percent,
            trade_amount_usd=settings.default_trade_amount,
            min_real_profit_usd=settings.min_real_profit_usd,
            settlement_currency=settings.settlement_currency,
        )


# Default strategy parameters
DEFAULT_STRATEGY = StrategyParams()
