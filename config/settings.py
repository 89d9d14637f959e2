"""Application settings and configuration."""

import json
import logging
import math
from functools import lru_cache
from typing import Any, Dict, List, Optional

from pydantic import AliasChoices, BaseModel, Field, ValidationError, ValidationInfo, field_validator
from pydantic_settings import BaseSettings

logger = logging.getLogger("arbscan.settings")

# Lower bounds for numeric settings: (bound, whether the bound itself is allowed)
NUMERIC_BOUNDS = {
    "min_24h_volume": (0.0, True),
    "max_slippage_percent": (0.0, True),
    "default_trade_amount": (0.0, False),
    "http_timeout_seconds": (0.0, False),
}


class FeeOverride(BaseModel):
    """Fee percentages configured for one exchange through EXCHANGE_FEES_JSON."""

    taker_fee_percent: float = Field(default=0.0, ge=0)
    transfer_fee_percent: float = Field(default=0.0, ge=0)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Opportunity thresholds
    min_diff_percent: float = Field(default=0.5, alias="MIN_DIFF_PERCENT")
    min_24h_volume: float = Field(default=50_000, alias="MIN_24H_VOLUME")
    max_slippage_percent: float = Field(default=0.8, alias="MAX_SLIPPAGE_PERCENT")
    min_real_profit_usd: float = Field(default=5, alias="MIN_REAL_PROFIT_USD")
    default_trade_amount: float = Field(default=100, alias="DEFAULT_TRADE_AMOUNT")

    # Markets
    settlement_currency: str = Field(default="USDT", alias="SETTLEMENT_CURRENCY")
    enabled_exchanges: str = Field(default="", alias="ENABLED_EXCHANGES")

    # Fee overrides, JSON object: {"binance": {"takerFeePercent": 0.075}}
    exchange_fees_json: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("EXCHANGE_FEES_JSON", "EXCHANGE_FEES"),
    )

    # Network
    http_timeout_seconds: float = Field(default=8.0, alias="HTTP_TIMEOUT_SECONDS")

    # Logging
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }

    @field_validator(
        "min_diff_percent",
        "min_24h_volume",
        "max_slippage_percent",
        "min_real_profit_usd",
        "default_trade_amount",
        "http_timeout_seconds",
        mode="before",
    )
    @classmethod
    def _fallback_on_invalid_number(cls, value: Any, info: ValidationInfo) -> Any:
        """Replace unparseable, non-finite or out-of-range numbers with the field default."""
        default = cls.model_fields[info.field_name].default
        if value is None or value == "":
            return default
        try:
            parsed = float(value)
        except (TypeError, ValueError):
            parsed = math.nan
        if not math.isfinite(parsed) or not _within_bounds(info.field_name, parsed):
            logger.warning(
                f"Invalid value {value!r} for {info.field_name}; using default {default}"
            )
            return default
        return parsed

    @field_validator("settlement_currency")
    @classmethod
    def _upper_currency(cls, value: str) -> str:
        return value.strip().upper()

    @property
    def exchange_names(self) -> List[str]:
        """Enabled exchange names (empty means every known exchange)."""
        return [
            name.strip().lower()
            for name in self.enabled_exchanges.split(",")
            if name.strip()
        ]

    def fee_overrides(self) -> Dict[str, FeeOverride]:
        """
        Parse the fee override table.

        Keys are lower-cased. Missing or non-numeric fee values become 0.
        A malformed document is logged and ignored.

        Returns:
            Mapping of exchange name to overriding fees
        """
        raw = self.exchange_fees_json
        if not raw:
            return {}

        try:
            parsed = json.loads(raw)
            if not isinstance(parsed, dict):
                raise ValueError("fee overrides must be a JSON object")
        except ValueError as e:
            logger.warning(f"Failed to parse EXCHANGE_FEES_JSON; falling back to defaults: {e}")
            return {}

        overrides: Dict[str, FeeOverride] = {}
        for name, value in parsed.items():
            entry = value if isinstance(value, dict) else {}
            overrides[str(name).lower()] = FeeOverride(
                taker_fee_percent=_non_negative(entry.get("takerFeePercent")),
                transfer_fee_percent=_non_negative(entry.get("transferFeePercent")),
            )
        return overrides


def _within_bounds(field_name: str, value: float) -> bool:
    bound = NUMERIC_BOUNDS.get(field_name)
    if bound is None:
        return True
    lower, inclusive = bound
    return value >= lower if inclusive else value > lower


def _non_negative(value: Any) -> float:
    try:
        parsed = float(value)
    except (TypeError, ValueError):
        return 0.0
    if not math.isfinite(parsed) or parsed < 0:
        return 0.0
    return parsed


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance, falling back to defaults on parse failure."""
    try:
        return Settings()
    except ValidationError as e:
        logger.error(f"Failed to load settings, using defaults: {e}")
        return Settings.model_construct()
