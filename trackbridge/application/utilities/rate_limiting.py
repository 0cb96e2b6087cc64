"""Pacing for outbound catalog requests made by the batch pipeline.

The pipeline calls ``wait()`` once after resolving each track. Two policies are
available: a fixed pause after every track, and a token bucket shared by all
batches in the process.
"""

import asyncio
from collections.abc import Callable
import time
from typing import Protocol

from attrs import define, field, validators

from trackbridge.config import get_config, get_logger

logger = get_logger(__name__)


class RateLimiter(Protocol):
    """Pacing policy applied between catalog requests."""

    async def wait(self) -> None:
        """Block until the next request may be issued."""
        ...


@define(slots=True)
class FixedDelayRateLimiter:
    """Sleep a fixed amount of time on every call."""

    delay_seconds: float = field(default=0.1, validator=validators.ge(0))

    async def wait(self) -> None:
        if self.delay_seconds:
            await asyncio.sleep(self.delay_seconds)


@define(slots=True)
class TokenBucketRateLimiter:
    """Token bucket allowing short bursts up to ``capacity``.

    Tokens refill continuously at ``rate`` per second. Callers sharing one
    instance are serialized on a lock so the bucket state stays consistent.
    """

    rate: float = field(validator=validators.gt(0))
    capacity: int = field(default=1, validator=validators.ge(1))
    clock: Callable[[], float] = field(default=time.monotonic, repr=False)

    _tokens: float = field(init=False)
    _last_refill: float = field(init=False)
    _lock: asyncio.Lock = field(factory=asyncio.Lock, init=False, repr=False)

    def __attrs_post_init__(self) -> None:
        self._tokens = float(self.capacity)
        self._last_refill = self.clock()

    def _refill(self) -> None:
        now = self.clock()
        elapsed = now - self._last_refill
        self._last_refill = now
        self._tokens = min(float(self.capacity), self._tokens + elapsed * self.rate)

    async def wait(self) -> None:
        async with self._lock:
            self._refill()
            if self._tokens < 1:
                shortfall = (1 - self._tokens) / self.rate
                await asyncio.sleep(shortfall)
                self._refill()
            self._tokens = max(self._tokens - 1, 0.0)


def create_rate_limiter(kind: str | None = None) -> RateLimiter:
    """Build the configured rate limiter.

    Args:
        kind: ``fixed`` or ``token_bucket``; defaults to PIPELINE_RATE_LIMITER
    """
    kind = kind or get_config("PIPELINE_RATE_LIMITER", "fixed")

    if kind == "token_bucket":
        rate = float(get_config("PIPELINE_TOKEN_BUCKET_RATE", 10.0))
        capacity = int(get_config("PIPELINE_TOKEN_BUCKET_CAPACITY", 5))
        logger.debug(f"Using token bucket rate limiter: {rate}/s, burst {capacity}")
        return TokenBucketRateLimiter(rate=rate, capacity=capacity)

    if kind != "fixed":
        raise ValueError(f"Unknown rate limiter: {kind}")

    delay_ms = int(get_config("PIPELINE_RATE_LIMIT_DELAY_MS", 100))
    logger.debug(f"Using fixed delay rate limiter: {delay_ms}ms")
    return FixedDelayRateLimiter(delay_seconds=delay_ms / 1000)
