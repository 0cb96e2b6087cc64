"""Wire the pipeline's collaborators together for one process.

``open_runtime`` owns the database engine for its duration. The runtime
hands out use cases bound to a scheduler chosen by the caller, so the same
wiring serves the inline CLI drain and the worker pool.
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from attrs import define, field

from trackbridge.application.services import PlaylistStatusAggregator, TrackResolver
from trackbridge.application.use_cases import (
    ImportPlaylistUseCase,
    ImportSourcePlaylistUseCase,
    PlaylistQueries,
    ProcessPlaylistBatchCommand,
    ProcessPlaylistBatchResult,
    ProcessPlaylistBatchUseCase,
    ResumePendingPlaylistsUseCase,
    SourcePlaylistReader,
)
from trackbridge.application.utilities import (
    BatchJob,
    BatchScheduler,
    InlineBatchScheduler,
    RateLimiter,
    create_rate_limiter,
)
from trackbridge.config import get_config, get_logger
from trackbridge.domain.matching import CatalogLookup
from trackbridge.domain.repositories import UnitOfWorkFactory
from trackbridge.infrastructure.connectors.apple_music import AppleMusicConnector
from trackbridge.infrastructure.persistence.database.db_connection import (
    create_db_engine,
    create_session_factory,
)
from trackbridge.infrastructure.persistence.database.db_models import init_db
from trackbridge.infrastructure.persistence.unit_of_work import (
    create_unit_of_work_factory,
)
from trackbridge.infrastructure.services.batch_scheduler import AsyncioBatchScheduler

logger = get_logger(__name__)


@define(slots=True)
class Runtime:
    """Long-lived collaborators shared by every use case in the process."""

    uow_factory: UnitOfWorkFactory
    catalog: CatalogLookup
    rate_limiter: RateLimiter
    batch_size: int = 10
    resolver: TrackResolver = field(init=False)
    aggregator: PlaylistStatusAggregator = field(init=False)

    def __attrs_post_init__(self) -> None:
        self.resolver = TrackResolver(self.catalog)
        self.aggregator = PlaylistStatusAggregator(self.uow_factory)

    def batch_use_case(self, scheduler: BatchScheduler) -> ProcessPlaylistBatchUseCase:
        return ProcessPlaylistBatchUseCase(
            uow_factory=self.uow_factory,
            resolver=self.resolver,
            scheduler=scheduler,
            rate_limiter=self.rate_limiter,
            aggregator=self.aggregator,
            batch_size=self.batch_size,
        )

    def import_use_case(self, scheduler: BatchScheduler) -> ImportPlaylistUseCase:
        return ImportPlaylistUseCase(self.uow_factory, scheduler)

    def import_source_use_case(
        self, reader: SourcePlaylistReader, scheduler: BatchScheduler
    ) -> ImportSourcePlaylistUseCase:
        return ImportSourcePlaylistUseCase(
            self.uow_factory, reader, self.import_use_case(scheduler)
        )

    def resume_use_case(self, scheduler: BatchScheduler) -> ResumePendingPlaylistsUseCase:
        return ResumePendingPlaylistsUseCase(self.uow_factory, scheduler)

    def queries(self) -> PlaylistQueries:
        return PlaylistQueries(self.uow_factory)

    async def drain_inline(
        self, scheduler: InlineBatchScheduler
    ) -> list[ProcessPlaylistBatchResult]:
        """Run every queued batch, and the batches they queue, to completion."""
        use_case = self.batch_use_case(scheduler)
        results: list[ProcessPlaylistBatchResult] = []

        async def handle(job: BatchJob) -> None:
            results.append(
                await use_case.execute(ProcessPlaylistBatchCommand.from_job(job))
            )

        await scheduler.drain(handle)
        return results

    def worker_pool(self, worker_count: int | None = None) -> AsyncioBatchScheduler:
        """Worker pool whose jobs reschedule themselves onto the same pool."""
        use_case: ProcessPlaylistBatchUseCase | None = None

        async def handle(job: BatchJob) -> None:
            await use_case.execute(ProcessPlaylistBatchCommand.from_job(job))  # type: ignore[union-attr]

        pool = AsyncioBatchScheduler(handle, worker_count=worker_count)
        use_case = self.batch_use_case(pool)
        return pool


@asynccontextmanager
async def open_runtime(
    database_url: str | None = None,
    catalog: CatalogLookup | None = None,
    rate_limiter: RateLimiter | None = None,
) -> AsyncIterator[Runtime]:
    """Create the engine and schema, yield a runtime, then dispose the engine."""
    engine = create_db_engine(database_url)
    await init_db(engine)

    owned_catalog = catalog is None
    catalog = catalog or AppleMusicConnector()
    try:
        yield Runtime(
            uow_factory=create_unit_of_work_factory(create_session_factory(engine)),
            catalog=catalog,
            rate_limiter=rate_limiter or create_rate_limiter(),
            batch_size=int(get_config("PIPELINE_BATCH_SIZE", 10)),
        )
    finally:
        if owned_catalog and isinstance(catalog, AppleMusicConnector):
            catalog.close()
        await engine.dispose()
        logger.debug("Runtime closed")
