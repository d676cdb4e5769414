"""Ordered fallback chain over market data providers.

A chain is a prioritized list of named attempts sharing one per-attempt
timeout, plus a terminal default. Attempts run one at a time in order;
the first one that returns a value wins. Timeouts, transport and HTTP
errors and unusable payloads are logged and recorded, then the next
attempt runs. Anything else is a bug and propagates.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Generic, TypeVar

import httpx

from app.clients import ProviderError

logger = logging.getLogger(__name__)

T = TypeVar("T")

FALLBACK_SOURCE = "fallback"

# Errors that mean "this provider is unavailable right now"
PROVIDER_FAILURES = (asyncio.TimeoutError, httpx.HTTPError, ProviderError)


@dataclass(frozen=True)
class Attempt(Generic[T]):
    """One provider in a chain. ``fetch`` returning None means no data."""

    name: str
    fetch: Callable[[], Awaitable[T | None]]


@dataclass(frozen=True)
class FallbackResult(Generic[T]):
    """Value produced by a chain and where it came from."""

    value: T
    source: str
    errors: dict[str, str] = field(default_factory=dict)

    @property
    def is_fallback(self) -> bool:
        return self.source == FALLBACK_SOURCE


class FallbackChain(Generic[T]):
    """Try providers in order, ending with a fixed default."""

    def __init__(
        self,
        label: str,
        attempts: list[Attempt[T]],
        default: T,
        timeout: float = 5.0,
    ):
        self.label = label
        self.attempts = attempts
        self.default = default
        self.timeout = timeout

    async def resolve(self) -> FallbackResult[T]:
        """Run attempts in order and return the first value obtained."""
        errors: dict[str, str] = {}

        for attempt in self.attempts:
            try:
                value = await asyncio.wait_for(attempt.fetch(), timeout=self.timeout)
            except PROVIDER_FAILURES as e:
                reason = str(e) or type(e).__name__
                errors[attempt.name] = reason
                logger.warning("%s: %s failed: %s", self.label, attempt.name, reason)
                continue

            if value is None:
                errors[attempt.name] = "no data"
                logger.warning("%s: %s returned no data", self.label, attempt.name)
                continue

            return FallbackResult(value=value, source=attempt.name, errors=errors)

        logger.info("%s: all providers failed, using fallback value", self.label)
        return FallbackResult(value=self.default, source=FALLBACK_SOURCE, errors=errors)
