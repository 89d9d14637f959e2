"""Venue data providers."""

from arbscan.api.mock_provider import MockDataProvider, create_sample_book
from arbscan.api.provider import (
    Capability,
    DataProvider,
    ExchangeAPIError,
    ProviderResult,
    ResultStatus,
    SymbolLookupCache,
)
from arbscan.api.rate_limiter import RateLimiter, TokenBucket
from arbscan.api.rest_client import HttpDataProvider

__all__ = [
    # Provider contract
    "Capability",
    "DataProvider",
    "ExchangeAPIError",
    "ProviderResult",
    "ResultStatus",
    "SymbolLookupCache",
    # HTTP providers
    "HttpDataProvider",
    "RateLimiter",
    "TokenBucket",
    # Mock provider for testing
    "MockDataProvider",
    "create_sample_book",
]
