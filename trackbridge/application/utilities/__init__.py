"""Application utilities - shared utilities for application services."""

from .rate_limiting import (
    FixedDelayRateLimiter,
    RateLimiter,
    TokenBucketRateLimiter,
    create_rate_limiter,
)
from .scheduling import BatchHandler, BatchJob, BatchScheduler, InlineBatchScheduler

__all__ = [
    "BatchHandler",
    "BatchJob",
    "BatchScheduler",
    "FixedDelayRateLimiter",
    "InlineBatchScheduler",
    "RateLimiter",
    "TokenBucketRateLimiter",
    "create_rate_limiter",
]
