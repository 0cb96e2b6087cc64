"""Core playlist repository implementation."""

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from trackbridge.config import get_logger
from trackbridge.domain.entities import (
    Playlist,
    PlaylistCounts,
    PlaylistStatus,
    TrackStatus,
)
from trackbridge.infrastructure.persistence.database.db_models import (
    DBPlaylist,
    DBPlaylistTrack,
)
from trackbridge.infrastructure.persistence.repositories.base_repo import (
    BaseRepository,
)
from trackbridge.infrastructure.persistence.repositories.playlist.mapper import (
    PlaylistMapper,
)
from trackbridge.infrastructure.persistence.repositories.repo_decorator import (
    db_operation,
)

# Create module logger
logger = get_logger(__name__)


class PlaylistRepository(BaseRepository[DBPlaylist, Playlist]):
    """Repository for imported playlists. Tracks live in their own repository."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository with session and mapper."""
        super().__init__(
            session=session,
            model_class=DBPlaylist,
            mapper=PlaylistMapper(),
        )

    async def _get_row(self, playlist_id: int) -> DBPlaylist | None:
        return await self.session.get(DBPlaylist, playlist_id)

    @db_operation("get_playlist")
    async def get_playlist(
        self, playlist_id: int, *, for_update: bool = False
    ) -> Playlist | None:
        """Get playlist by ID, optionally locking its row.

        SQLite has no row locks and renders no ``FOR UPDATE``; callers that
        need mutual exclusion there also hold an in-process lock.
        """
        stmt = self.select_by_id(playlist_id)
        if for_update:
            stmt = stmt.with_for_update().execution_options(populate_existing=True)

        db_playlist = await self.execute_select_one(stmt)
        if db_playlist is None:
            return None
        return await self.mapper.to_domain(db_playlist)

    @db_operation("find_by_source_id")
    async def find_by_source_id(
        self, owner_id: str, source_playlist_id: str
    ) -> Playlist | None:
        stmt = self.select().where(
            DBPlaylist.owner_id == owner_id,
            DBPlaylist.source_playlist_id == source_playlist_id,
        )
        db_playlist = await self.execute_select_one(stmt)
        if db_playlist is None:
            return None
        return await self.mapper.to_domain(db_playlist)

    @db_operation("list_by_owner")
    async def list_by_owner(self, owner_id: str) -> list[Playlist]:
        """Owner's playlists, most recently imported first."""
        stmt = (
            self.select()
            .where(DBPlaylist.owner_id == owner_id)
            .order_by(DBPlaylist.imported_at.desc(), DBPlaylist.id.desc())
        )
        db_playlists = await self.execute_select_many(stmt)
        return await self.mapper.map_collection(db_playlists)

    @db_operation("create_playlist")
    async def create_playlist(self, playlist: Playlist) -> Playlist:
        db_playlist = self.mapper.to_db(playlist)
        self.session.add(db_playlist)
        await self._flush_and_refresh(db_playlist)
        logger.debug(f"Created playlist {db_playlist.id} for owner {playlist.owner_id}")
        return await self.mapper.to_domain(db_playlist)

    @db_operation("replace_playlist")
    async def replace_playlist(self, playlist_id: int, playlist: Playlist) -> Playlist:
        """Overwrite everything but identity and ownership of a playlist."""
        db_playlist = await self._get_row(playlist_id)
        if db_playlist is None:
            raise ValueError(f"Playlist {playlist_id} not found")

        db_playlist.source = str(playlist.source)
        db_playlist.name = playlist.name
        db_playlist.description = playlist.description
        db_playlist.image_url = playlist.image_url
        db_playlist.imported_at = playlist.imported_at
        db_playlist.status = str(playlist.status)
        db_playlist.total_tracks = playlist.total_tracks
        db_playlist.ready_tracks = playlist.ready_tracks
        db_playlist.unmatched_tracks = playlist.unmatched_tracks
        db_playlist.import_generation = playlist.import_generation

        await self._flush_and_refresh(db_playlist)
        return await self.mapper.to_domain(db_playlist)

    @db_operation("apply_counts")
    async def apply_counts(
        self, playlist_id: int, counts: PlaylistCounts, status: PlaylistStatus
    ) -> Playlist | None:
        """Store aggregated counts; total is left as set by the import."""
        db_playlist = await self._get_row(playlist_id)
        if db_playlist is None:
            return None

        db_playlist.ready_tracks = counts.ready
        db_playlist.unmatched_tracks = counts.unmatched
        db_playlist.status = str(status)

        await self.session.flush()
        return await self.mapper.to_domain(db_playlist)

    @db_operation("mark_failed")
    async def mark_failed(self, playlist_id: int) -> None:
        await self.session.execute(
            update(DBPlaylist)
            .where(DBPlaylist.id == playlist_id)
            .values(status=str(PlaylistStatus.FAILED))
        )
        logger.warning(f"Playlist {playlist_id} marked as failed")

    @db_operation("find_ids_with_pending_tracks")
    async def find_ids_with_pending_tracks(self) -> list[int]:
        stmt = (
            select(DBPlaylistTrack.playlist_id)
            .where(DBPlaylistTrack.status == str(TrackStatus.PENDING))
            .distinct()
            .order_by(DBPlaylistTrack.playlist_id)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())
