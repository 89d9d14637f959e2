"""Currency and transfer-network metadata models."""

import re
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

# Venue spellings of the same chain, mapped to one name
NETWORK_ALIASES = {
    "ETH": "ERC20",
    "ETHEREUM": "ERC20",
    "ETHEREUM(ERC20)": "ERC20",
    "TRX": "TRC20",
    "TRON": "TRC20",
    "TRON(TRC20)": "TRC20",
    "BSC": "BEP20",
    "BEP20(BSC)": "BEP20",
    "BNB SMART CHAIN": "BEP20",
    "BNB SMART CHAIN(BEP20)": "BEP20",
    "SOLANA": "SOL",
    "SPL": "SOL",
    "BITCOIN": "BTC",
    "MATIC": "POLYGON",
    "POLYGON POS": "POLYGON",
    "ARBITRUM ONE": "ARBITRUM",
    "ARBONE": "ARBITRUM",
    "ARBI": "ARBITRUM",
    "OPTIMISM": "OP",
    "AVAX C-CHAIN": "AVAXC",
    "AVAX-C": "AVAXC",
    "AVAXC-CHAIN": "AVAXC",
    "C-CHAIN": "AVAXC",
    "BASEEVM": "BASE",
}


def canonical_network(name: str) -> str:
    """Upper-case a network name and map known venue aliases to one spelling."""
    normalized = re.sub(r"\s+", " ", name.strip().upper())
    return NETWORK_ALIASES.get(normalized, normalized)


class NetworkInfo(BaseModel):
    """One transfer network of a currency on a venue."""

    network: str = Field(..., min_length=1, description="Network/chain name")
    deposit_enabled: Optional[bool] = Field(None, description="Deposits open (None = unknown)")
    withdraw_enabled: Optional[bool] = Field(None, description="Withdrawals open (None = unknown)")

    @field_validator("network")
    @classmethod
    def _normalize_network(cls, value: str) -> str:
        return canonical_network(value)


class CurrencyInfo(BaseModel):
    """Transfer metadata of a currency on a venue."""

    code: str = Field(..., description="Currency code")
    networks: Optional[List[NetworkInfo]] = Field(None, description="Known transfer networks")

    @field_validator("code")
    @classmethod
    def _normalize_code(cls, value: str) -> str:
        return value.strip().upper()
