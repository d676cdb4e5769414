"""Shared HTTP plumbing for market data providers."""

import asyncio
from typing import Any

import httpx


class ProviderError(Exception):
    """Provider answered, but not with data we can use."""


class RateLimiter:
    """Simple rate limiter for API calls."""

    def __init__(self, calls_per_minute: int = 1200):
        self.calls_per_minute = calls_per_minute
        self.interval = 60.0 / calls_per_minute
        self.last_call = 0.0
        self._lock = asyncio.Lock()

    async def acquire(self) -> None:
        """Wait if necessary to respect rate limit."""
        async with self._lock:
            now = asyncio.get_running_loop().time()
            wait_time = self.last_call + self.interval - now
            if wait_time > 0:
                await asyncio.sleep(wait_time)
            self.last_call = asyncio.get_running_loop().time()


class ProviderClient:
    """Base class for a JSON-over-HTTP market data provider."""

    def __init__(
        self,
        base_url: str,
        user_agent: str = "",
        timeout: float = 10.0,
        rate_limiter: RateLimiter | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url
        self.user_agent = user_agent
        self.timeout = timeout
        self.rate_limiter = rate_limiter
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None or self._client.is_closed:
            headers = {"Accept": "application/json"}
            if self.user_agent:
                headers["User-Agent"] = self.user_agent
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                headers=headers,
                timeout=self.timeout,
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def _request(
        self, method: str, endpoint: str, params: dict[str, Any] | None = None
    ) -> Any:
        """Make an API request, raising on HTTP errors."""
        if self.rate_limiter is not None:
            await self.rate_limiter.acquire()
        client = await self._get_client()
        response = await client.request(method, endpoint, params=params)
        response.raise_for_status()
        try:
            return response.json()
        except ValueError as e:
            raise ProviderError(f"{self.base_url}{endpoint}: invalid JSON") from e


def as_float(value: Any) -> float | None:
    """Coerce a provider number (or numeric string) to float, None if unusable."""
    if value is None or isinstance(value, bool):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None
