"""Keep playlist counts and status in line with its tracks."""

import asyncio
import weakref

from trackbridge.config import get_logger
from trackbridge.domain.entities import PlaylistCounts
from trackbridge.domain.repositories import UnitOfWorkFactory

logger = get_logger(__name__)


class PlaylistStatusAggregator:
    """Recount a playlist's tracks and store the derived status.

    Each recount runs in one transaction that locks the playlist row. Runs for
    the same playlist inside this process are also serialized on an
    ``asyncio.Lock``, since SQLite ignores ``FOR UPDATE``.
    """

    def __init__(self, uow_factory: UnitOfWorkFactory) -> None:
        self.uow_factory = uow_factory
        # Entries vanish once no recompute holds or awaits the lock
        self._locks: weakref.WeakValueDictionary[int, asyncio.Lock] = (
            weakref.WeakValueDictionary()
        )

    def _lock_for(self, playlist_id: int) -> asyncio.Lock:
        lock = self._locks.get(playlist_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[playlist_id] = lock
        return lock

    async def recompute(self, playlist_id: int) -> PlaylistCounts | None:
        """Recount tracks by status and update the playlist.

        Returns:
            Fresh counts, or None when the playlist no longer exists
        """
        async with self._lock_for(playlist_id), self.uow_factory() as uow:
            playlist_repo = uow.get_playlist_repository()
            playlist = await playlist_repo.get_playlist(playlist_id, for_update=True)
            if playlist is None:
                logger.debug(f"Playlist {playlist_id} vanished before aggregation")
                return None

            counts = await uow.get_track_repository().count_by_status(playlist_id)
            status = counts.derive_status(playlist.status)
            await playlist_repo.apply_counts(playlist_id, counts, status)

        logger.debug(
            f"Playlist {playlist_id}: {counts.ready} ready, "
            f"{counts.unmatched} unmatched, {counts.pending} pending -> {status}"
        )
        return counts
