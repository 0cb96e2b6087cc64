"""ProcessPlaylistBatch use case: resolve one batch of pending playlist tracks.

Each run takes the next ``BATCH_SIZE`` pending tracks in position order,
resolves them one at a time against the target catalog, and records every
outcome in its own short transaction. Once the batch is done the playlist
counts are recomputed and, if tracks remain pending, the next run is handed
to the scheduler. Runs never call themselves.

Outcome writes are conditional on the track still being pending in the same
import generation, so a run racing a re-import cannot touch the new tracks.
"""

from attrs import define, field

from trackbridge.application.services.status_aggregator import (
    PlaylistStatusAggregator,
)
from trackbridge.application.services.track_resolver import TrackResolver
from trackbridge.application.utilities.rate_limiting import (
    FixedDelayRateLimiter,
    RateLimiter,
)
from trackbridge.application.utilities.scheduling import BatchJob, BatchScheduler
from trackbridge.config import get_logger
from trackbridge.domain.entities import PlaylistCounts, PlaylistTrack
from trackbridge.domain.matching import Matched, TrackDescriptor, Unmatched
from trackbridge.domain.repositories import UnitOfWorkFactory

logger = get_logger(__name__)

BATCH_SIZE = 10
RATE_LIMIT_DELAY_MS = 100


@define(frozen=True, slots=True)
class ProcessPlaylistBatchCommand:
    """Process the next batch of one playlist's pending tracks.

    ``import_generation`` pins the run to the import that scheduled it; None
    means whatever generation the playlist currently has.
    """

    playlist_id: int
    storefront: str = "us"
    import_generation: int | None = None

    @classmethod
    def from_job(cls, job: BatchJob) -> "ProcessPlaylistBatchCommand":
        return cls(
            playlist_id=job.playlist_id,
            storefront=job.storefront,
            import_generation=job.import_generation,
        )


@define(frozen=True, slots=True)
class ProcessPlaylistBatchResult:
    """Outcome of one batch run."""

    playlist_id: int
    processed: int = 0
    matched: int = 0
    unmatched: int = 0
    stale: int = 0
    pending_remaining: int = 0
    rescheduled: bool = False
    stale_job: bool = False
    counts: PlaylistCounts | None = None
    match_methods: dict[str, int] = field(factory=dict)


class ProcessPlaylistBatchUseCase:
    """Run one reconciliation batch for a playlist."""

    def __init__(
        self,
        uow_factory: UnitOfWorkFactory,
        resolver: TrackResolver,
        scheduler: BatchScheduler,
        rate_limiter: RateLimiter | None = None,
        aggregator: PlaylistStatusAggregator | None = None,
        batch_size: int = BATCH_SIZE,
    ) -> None:
        if batch_size <= 0:
            raise ValueError(f"Batch size must be positive, got {batch_size}")
        self.uow_factory = uow_factory
        self.resolver = resolver
        self.scheduler = scheduler
        self.rate_limiter = rate_limiter or FixedDelayRateLimiter(
            RATE_LIMIT_DELAY_MS / 1000
        )
        self.aggregator = aggregator or PlaylistStatusAggregator(uow_factory)
        self.batch_size = batch_size

    async def execute(
        self, command: ProcessPlaylistBatchCommand
    ) -> ProcessPlaylistBatchResult:
        playlist_id = command.playlist_id

        async with self.uow_factory() as uow:
            playlist = await uow.get_playlist_repository().get_playlist(playlist_id)
            if playlist is None:
                logger.info(f"Skipping batch for missing playlist {playlist_id}")
                return ProcessPlaylistBatchResult(playlist_id, stale_job=True)

            generation = (
                playlist.import_generation
                if command.import_generation is None
                else command.import_generation
            )
            if generation != playlist.import_generation:
                logger.info(
                    f"Skipping stale batch for playlist {playlist_id}: "
                    f"generation {generation} superseded by {playlist.import_generation}"
                )
                return ProcessPlaylistBatchResult(playlist_id, stale_job=True)

            tracks = await uow.get_track_repository().get_pending_tracks(
                playlist_id, self.batch_size
            )

        if not tracks:
            counts = await self.aggregator.recompute(playlist_id)
            return ProcessPlaylistBatchResult(
                playlist_id,
                pending_remaining=counts.pending if counts else 0,
                counts=counts,
            )

        logger.info(f"Resolving {len(tracks)} tracks for playlist {playlist_id}")

        matched = unmatched = stale = 0
        methods: dict[str, int] = {}
        for track in tracks:
            outcome = await self._process_track(track, command.storefront, generation)
            if outcome is None:
                stale += 1
            elif outcome == "unmatched":
                unmatched += 1
            else:
                matched += 1
                methods[outcome] = methods.get(outcome, 0) + 1
            await self.rate_limiter.wait()

        counts = await self.aggregator.recompute(playlist_id)
        pending = counts.pending if counts else 0

        rescheduled = False
        if pending > 0:
            await self.scheduler.enqueue(playlist_id, command.storefront, generation)
            rescheduled = True

        logger.info(
            f"Playlist {playlist_id} batch done: {matched} matched, "
            f"{unmatched} unmatched, {stale} stale, {pending} pending"
        )
        return ProcessPlaylistBatchResult(
            playlist_id,
            processed=len(tracks),
            matched=matched,
            unmatched=unmatched,
            stale=stale,
            pending_remaining=pending,
            rescheduled=rescheduled,
            counts=counts,
            match_methods=methods,
        )

    async def _process_track(
        self, track: PlaylistTrack, storefront: str, generation: int
    ) -> str | None:
        """Resolve and record one track.

        Returns:
            The match method, "unmatched", or None when the write was stale
        """
        descriptor = TrackDescriptor(
            title=track.title,
            artist=track.primary_artist,
            storefront=storefront,
            isrc=track.isrc,
        )
        result = await self.resolver.resolve(descriptor)

        async with self.uow_factory() as uow:
            track_repo = uow.get_track_repository()
            match result:
                case Matched(match=catalog_match, match_method=method):
                    written = await track_repo.mark_ready(
                        track.id, generation, catalog_match
                    )
                    outcome = method
                case Unmatched(reason=reason):
                    written = await track_repo.mark_unmatched(
                        track.id, generation, reason
                    )
                    outcome = "unmatched"

        if not written:
            logger.debug(
                f"Discarded stale result for track {track.id} at position {track.position}"
            )
            return None
        return outcome
