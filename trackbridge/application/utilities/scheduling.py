"""Scheduling contract for playlist batch runs.

Batch runs never call themselves. Instead they hand the next run to a
scheduler, which decides where and when it executes.
"""

from collections import deque
from collections.abc import Awaitable, Callable
from typing import Any, Protocol

from attrs import define, field

from trackbridge.config import get_logger

logger = get_logger(__name__)


@define(frozen=True, slots=True)
class BatchJob:
    """One pending batch run for a playlist."""

    playlist_id: int
    storefront: str = "us"
    import_generation: int | None = None


BatchHandler = Callable[[BatchJob], Awaitable[Any]]


class BatchScheduler(Protocol):
    """Queues batch runs for later execution.

    ``enqueue`` must return without running the job.
    """

    async def enqueue(
        self,
        playlist_id: int,
        storefront: str = "us",
        import_generation: int | None = None,
    ) -> None:
        """Schedule one batch run for a playlist."""
        ...


@define(slots=True)
class InlineBatchScheduler:
    """Collects jobs in memory and runs them in a flat loop on ``drain``.

    Used by the CLI and tests. Jobs enqueued while draining are picked up by
    the same loop, so a long playlist never deepens the call stack.
    """

    jobs: deque[BatchJob] = field(factory=deque)
    runs: int = 0

    async def enqueue(
        self,
        playlist_id: int,
        storefront: str = "us",
        import_generation: int | None = None,
    ) -> None:
        self.jobs.append(BatchJob(playlist_id, storefront, import_generation))

    @property
    def pending(self) -> int:
        return len(self.jobs)

    async def drain(
        self, handler: BatchHandler, max_runs: int | None = None
    ) -> int:
        """Run queued jobs until the queue is empty.

        Args:
            handler: Coroutine executing one batch job
            max_runs: Optional safety cap on the number of runs

        Returns:
            Number of jobs executed by this call
        """
        executed = 0
        while self.jobs:
            if max_runs is not None and executed >= max_runs:
                logger.warning(
                    f"Stopping inline drain after {executed} runs, "
                    f"{len(self.jobs)} jobs left"
                )
                break
            job = self.jobs.popleft()
            await handler(job)
            executed += 1
            self.runs += 1
        return executed
