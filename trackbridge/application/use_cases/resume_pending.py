"""Re-drive playlists whose pipeline stopped before every track was resolved."""

from attrs import define, field

from trackbridge.application.utilities.scheduling import BatchScheduler
from trackbridge.config import get_config, get_logger
from trackbridge.domain.repositories import UnitOfWorkFactory

logger = get_logger(__name__)


@define(frozen=True, slots=True)
class ResumePendingResult:
    """Playlists that got a fresh batch run queued."""

    playlist_ids: list[int] = field(factory=list)

    @property
    def resumed(self) -> int:
        return len(self.playlist_ids)


class ResumePendingPlaylistsUseCase:
    """Queue one batch run for every playlist that still has pending tracks.

    Batch runs only ever look at pending tracks, so resuming a playlist that
    is already being processed costs at most one extra empty run.
    """

    def __init__(
        self, uow_factory: UnitOfWorkFactory, scheduler: BatchScheduler
    ) -> None:
        self.uow_factory = uow_factory
        self.scheduler = scheduler

    async def execute(self, storefront: str | None = None) -> ResumePendingResult:
        storefront = storefront or get_config("CATALOG_DEFAULT_STOREFRONT", "us")

        async with self.uow_factory() as uow:
            playlist_ids = (
                await uow.get_playlist_repository().find_ids_with_pending_tracks()
            )

        for playlist_id in playlist_ids:
            await self.scheduler.enqueue(playlist_id, storefront)

        if playlist_ids:
            logger.info(f"Resumed {len(playlist_ids)} playlists with pending tracks")
        else:
            logger.debug("No playlists with pending tracks to resume")

        return ResumePendingResult(playlist_ids=list(playlist_ids))
