"""Async HTTP base for venue data providers."""

from typing import Any, Dict, Optional, Tuple

import aiohttp

from arbscan.api.provider import DataProvider, ExchangeAPIError, parse_float
from arbscan.api.rate_limiter import RateLimiter
from arbscan.models import ExchangeFees
from arbscan.utils.logger import get_logger

logger = get_logger("arbscan.rest_client")

DEFAULT_TIMEOUT_SECONDS = 8.0


class HttpDataProvider(DataProvider):
    """
    Data provider backed by a venue's public REST API.

    Subclasses set ``base_url`` and implement the ``_load_*`` hooks using
    ``_request``.
    """

    base_url: str = ""
    requests_per_second: float = 10.0

    def __init__(
        self,
        name: str,
        fees: ExchangeFees,
        quote: str = "USDT",
        session: Optional[aiohttp.ClientSession] = None,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        rate_limiter: Optional[RateLimiter] = None,
    ) -> None:
        """
        Initialize the HTTP provider.

        Args:
            name: Venue name
            fees: Fee snapshot for this venue
            quote: Settlement currency
            session: Shared aiohttp session (creates its own if not provided)
            timeout_seconds: Total timeout per request
            rate_limiter: Request pacing (one per venue if not provided)
        """
        super().__init__(name, fees, quote)
        self._session = session
        self._owns_session = session is None
        self._timeout = aiohttp.ClientTimeout(total=timeout_seconds)
        self._rate_limiter = rate_limiter or RateLimiter(name, self.requests_per_second)

    async def _ensure_session(self) -> aiohttp.ClientSession:
        """Ensure aiohttp session exists."""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(timeout=self._timeout)
            self._owns_session = True
        return self._session

    async def close(self) -> None:
        """Close the session if this provider created it."""
        if self._session and self._owns_session and not self._session.closed:
            await self._session.close()
            logger.debug(f"{self.name} session closed")

    async def __aenter__(self) -> "HttpDataProvider":
        await self._ensure_session()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def _request(
        self,
        endpoint: str,
        params: Optional[Dict[str, Any]] = None,
    ) -> Any:
        """
        GET a JSON document from the venue.

        Args:
            endpoint: Path relative to ``base_url``
            params: Query parameters

        Returns:
            Decoded JSON payload

        Raises:
            ExchangeAPIError: On HTTP error status
        """
        session = await self._ensure_session()
        await self._rate_limiter.acquire()

        url = f"{self.base_url.rstrip('/')}/{endpoint.lstrip('/')}"
        logger.debug(f"Request: GET {url} {params or ''}")

        async with session.get(
            url,
            params=params,
            timeout=self._timeout,
            headers={"Accept": "application/json"},
        ) as response:
            try:
                data = await response.json(content_type=None)
            except ValueError:
                data = None

            if response.status >= 400:
                message = _error_message(data) or response.reason or "Unknown error"
                raise ExchangeAPIError(self.name, response.status, message)

            if data is None:
                raise ExchangeAPIError(self.name, response.status, "empty or non-JSON response")

            return data


def _error_message(data: Any) -> Optional[str]:
    if isinstance(data, dict):
        for key in ("msg", "message", "error"):
            value = data.get(key)
            if value:
                return str(value)
    return None


def dig(data: Any, *path: str) -> Any:
    """Walk nested JSON objects; None if any step is missing."""
    for key in path:
        if not isinstance(data, dict):
            return None
        data = data.get(key)
    return data


def as_list(data: Any) -> list:
    """The value itself if it is a JSON array, otherwise an empty list."""
    return data if isinstance(data, list) else []


def positive(raw: Any) -> Optional[float]:
    """Parse a strictly positive number, else None."""
    value = parse_float(raw)
    return value if value is not None and value > 0 else None


def non_negative(raw: Any) -> Optional[float]:
    """Parse a number >= 0, else None."""
    value = parse_float(raw)
    return value if value is not None and value >= 0 else None


def flag(
    raw: Any,
    enabled: Tuple[str, ...] = ("true",),
    disabled: Tuple[str, ...] = ("false",),
) -> Optional[bool]:
    """
    Parse a venue status flag.

    Venues report deposit/withdraw status as booleans, ``"true"``/``"false"``
    strings or words such as ``"allowed"``. Anything unrecognised is None.
    """
    if isinstance(raw, bool):
        return raw
    if raw is None:
        return None
    text = str(raw).strip().lower()
    if text in enabled:
        return True
    if text in disabled:
        return False
    return None
