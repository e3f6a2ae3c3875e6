"""Bounded exponential-backoff retry for state-changing calls."""

from __future__ import annotations

import asyncio
import logging
from functools import wraps
from typing import Any, Awaitable, Callable, TypeVar

import httpx

from concerndesk.config import RetryConfig
from concerndesk.errors import ConcernDeskError, Transient

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _as_retryable(error: Exception) -> Transient | None:
    """Return the error as a Transient if it may be retried, else None."""
    if isinstance(error, ConcernDeskError):
        return error if error.retryable else None
    if isinstance(error, (httpx.TransportError, ConnectionError, asyncio.TimeoutError)):
        return Transient(str(error) or type(error).__name__)
    return None


class RetryingWriter:
    """Run a write up to ``max_attempts`` times.

    Waits ``base_delay * 2 ** (attempt - 1)`` seconds after failed attempt
    ``attempt`` (1 s, then 2 s with the defaults). Only transient failures
    are retried; validation, auth and not-found errors propagate at once.
    The backoff sleep suspends only the awaiting caller.
    """

    def __init__(
        self,
        max_attempts: int = 3,
        base_delay: float = 1.0,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ):
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self.max_attempts = max_attempts
        self.base_delay = base_delay
        self._sleep = sleep

    @classmethod
    def from_config(cls, config: RetryConfig, **kwargs) -> "RetryingWriter":
        return cls(max_attempts=config.max_attempts, base_delay=config.base_delay_seconds, **kwargs)

    def delay_for(self, attempt: int) -> float:
        return self.base_delay * 2 ** (attempt - 1)

    async def run(self, fn: Callable[..., Awaitable[T]], *args, **kwargs) -> T:
        name = getattr(fn, "__name__", repr(fn))
        for attempt in range(1, self.max_attempts + 1):
            try:
                return await fn(*args, **kwargs)
            except Exception as e:
                retryable = _as_retryable(e)
                if retryable is None:
                    raise
                if attempt == self.max_attempts:
                    logger.error("%s failed after %d attempts: %s", name, attempt, retryable)
                    if retryable is e:
                        raise
                    raise retryable from e
                delay = self.delay_for(attempt)
                logger.warning(
                    "%s attempt %d/%d failed: %s; retrying in %.1fs",
                    name, attempt, self.max_attempts, retryable, delay,
                )
                await self._sleep(delay)
        raise AssertionError("unreachable")

    def wrap(self, fn: Callable[..., Awaitable[T]]) -> Callable[..., Awaitable[T]]:
        @wraps(fn)
        async def _wrapped(*args, **kwargs):
            return await self.run(fn, *args, **kwargs)
        return _wrapped
