"""Asyncio worker pool that executes queued playlist batch runs."""

import asyncio
import contextlib
import weakref

from trackbridge.application.utilities.scheduling import BatchHandler, BatchJob
from trackbridge.config import get_config, get_logger

logger = get_logger(__name__)


class AsyncioBatchScheduler:
    """Queue-backed scheduler served by a fixed pool of worker tasks.

    At most one batch per playlist runs at a time; a second job for the same
    playlist waits for the first. A job that raises is logged and dropped,
    and the worker moves on.

    Usage:
        scheduler = AsyncioBatchScheduler(handler, worker_count=4)
        await scheduler.start()
        await scheduler.enqueue(playlist_id)
        await scheduler.join()
        await scheduler.stop()
    """

    def __init__(self, handler: BatchHandler, worker_count: int | None = None):
        self.handler = handler
        self.worker_count = worker_count or get_config("PIPELINE_WORKER_COUNT", 4)
        if self.worker_count < 1:
            raise ValueError(f"worker_count must be at least 1, got {self.worker_count}")

        self._queue: asyncio.Queue[BatchJob] = asyncio.Queue()
        self._workers: list[asyncio.Task] = []
        # Entries vanish once no worker holds or awaits the lock
        self._playlist_locks: weakref.WeakValueDictionary[int, asyncio.Lock] = (
            weakref.WeakValueDictionary()
        )
        self.completed = 0
        self.failed = 0

    @property
    def running(self) -> bool:
        return bool(self._workers)

    async def enqueue(
        self,
        playlist_id: int,
        storefront: str = "us",
        import_generation: int | None = None,
    ) -> None:
        self._queue.put_nowait(BatchJob(playlist_id, storefront, import_generation))

    async def start(self) -> None:
        if self._workers:
            return
        self._workers = [
            asyncio.create_task(self._worker(index), name=f"batch-worker-{index}")
            for index in range(self.worker_count)
        ]
        logger.debug(f"Started {self.worker_count} batch workers")

    async def join(self) -> None:
        """Wait until the queue is empty and no job is in flight.

        Jobs enqueued by running jobs are waited for as well.
        """
        await self._queue.join()

    async def stop(self) -> None:
        for worker in self._workers:
            worker.cancel()
        for worker in self._workers:
            with contextlib.suppress(asyncio.CancelledError):
                await worker
        self._workers = []
        logger.debug(
            f"Batch workers stopped: {self.completed} completed, {self.failed} failed"
        )

    async def __aenter__(self) -> "AsyncioBatchScheduler":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.stop()

    def _lock_for(self, playlist_id: int) -> asyncio.Lock:
        lock = self._playlist_locks.get(playlist_id)
        if lock is None:
            lock = asyncio.Lock()
            self._playlist_locks[playlist_id] = lock
        return lock

    async def _worker(self, index: int) -> None:
        while True:
            job = await self._queue.get()
            try:
                async with self._lock_for(job.playlist_id):
                    await self.handler(job)
                self.completed += 1
            except Exception as e:
                self.failed += 1
                logger.exception(
                    f"Batch job for playlist {job.playlist_id} failed in worker {index}: {e}"
                )
            finally:
                self._queue.task_done()
