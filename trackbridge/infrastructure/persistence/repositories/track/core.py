"""Playlist track repository implementation."""

from collections.abc import Sequence

import attrs
from sqlalchemy import delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from trackbridge.config import get_logger
from trackbridge.domain.entities import PlaylistCounts, PlaylistTrack, TrackStatus
from trackbridge.domain.matching import CatalogMatch
from trackbridge.infrastructure.persistence.database.db_models import (
    DBPlaylistTrack,
)
from trackbridge.infrastructure.persistence.repositories.base_repo import (
    BaseRepository,
)
from trackbridge.infrastructure.persistence.repositories.repo_decorator import (
    db_operation,
)
from trackbridge.infrastructure.persistence.repositories.track.mapper import (
    PlaylistTrackMapper,
)

logger = get_logger(__name__)

# Columns describing the matched target-catalog song, set only on ready tracks
_TARGET_COLUMNS = (
    "catalog_track_id",
    "catalog_title",
    "catalog_artist_name",
    "catalog_album_name",
    "catalog_release_year",
    "catalog_release_date",
    "preview_url",
    "artwork_url",
    "catalog_isrc",
)


class PlaylistTrackRepository(BaseRepository[DBPlaylistTrack, PlaylistTrack]):
    """Repository for the tracks of imported playlists.

    Status transitions are conditional updates: a track only leaves
    ``pending`` if it is still pending in the expected import generation.
    """

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository with session and mapper."""
        super().__init__(
            session=session,
            model_class=DBPlaylistTrack,
            mapper=PlaylistTrackMapper(),
        )

    @db_operation("get_pending_tracks")
    async def get_pending_tracks(
        self, playlist_id: int, limit: int
    ) -> list[PlaylistTrack]:
        stmt = (
            self.select()
            .where(
                DBPlaylistTrack.playlist_id == playlist_id,
                DBPlaylistTrack.status == str(TrackStatus.PENDING),
            )
            .order_by(DBPlaylistTrack.position)
            .limit(limit)
        )
        return await self.mapper.map_collection(await self.execute_select_many(stmt))

    @db_operation("list_tracks")
    async def list_tracks(
        self,
        playlist_id: int,
        statuses: Sequence[TrackStatus] | None = None,
    ) -> list[PlaylistTrack]:
        stmt = (
            self.select()
            .where(DBPlaylistTrack.playlist_id == playlist_id)
            .order_by(DBPlaylistTrack.position)
        )
        if statuses is not None:
            stmt = stmt.where(
                DBPlaylistTrack.status.in_([str(status) for status in statuses])
            )
        return await self.mapper.map_collection(await self.execute_select_many(stmt))

    @db_operation("add_tracks")
    async def add_tracks(
        self,
        playlist_id: int,
        tracks: list[PlaylistTrack],
        import_generation: int,
    ) -> list[PlaylistTrack]:
        if not tracks:
            return []

        db_tracks = [
            self.mapper.to_db(
                attrs.evolve(
                    track, playlist_id=playlist_id, import_generation=import_generation
                )
            )
            for track in tracks
        ]
        self.session.add_all(db_tracks)
        await self.session.flush()

        logger.debug(f"Inserted {len(db_tracks)} tracks into playlist {playlist_id}")
        return await self.mapper.map_collection(
            sorted(db_tracks, key=lambda db_track: db_track.position)
        )

    @db_operation("delete_tracks")
    async def delete_tracks(self, playlist_id: int) -> int:
        result = await self.session.execute(
            delete(DBPlaylistTrack)
            .where(DBPlaylistTrack.playlist_id == playlist_id)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount or 0

    async def _transition(
        self, track_id: int, import_generation: int, values: dict
    ) -> bool:
        result = await self.session.execute(
            update(DBPlaylistTrack)
            .where(
                DBPlaylistTrack.id == track_id,
                DBPlaylistTrack.status == str(TrackStatus.PENDING),
                DBPlaylistTrack.import_generation == import_generation,
            )
            .values(**values)
        )
        return (result.rowcount or 0) == 1

    @db_operation("mark_ready")
    async def mark_ready(
        self, track_id: int, import_generation: int, match: CatalogMatch
    ) -> bool:
        return await self._transition(
            track_id,
            import_generation,
            {
                "status": str(TrackStatus.READY),
                "catalog_track_id": match.catalog_id,
                "catalog_title": match.title,
                "catalog_artist_name": match.artist_name,
                "catalog_album_name": match.album_name,
                "catalog_release_year": match.release_year,
                "catalog_release_date": match.release_date,
                "preview_url": match.preview_url,
                "artwork_url": match.artwork_url,
                "catalog_isrc": match.isrc,
                "unmatched_reason": None,
            },
        )

    @db_operation("mark_unmatched")
    async def mark_unmatched(
        self, track_id: int, import_generation: int, reason: str
    ) -> bool:
        return await self._transition(
            track_id,
            import_generation,
            {
                "status": str(TrackStatus.UNMATCHED),
                "unmatched_reason": reason,
                **dict.fromkeys(_TARGET_COLUMNS),
            },
        )

    @db_operation("count_by_status")
    async def count_by_status(self, playlist_id: int) -> PlaylistCounts:
        stmt = (
            select(DBPlaylistTrack.status, func.count(DBPlaylistTrack.id))
            .where(DBPlaylistTrack.playlist_id == playlist_id)
            .group_by(DBPlaylistTrack.status)
        )
        rows = (await self.session.execute(stmt)).all()
        by_status = {status: count for status, count in rows}
        return PlaylistCounts(
            pending=by_status.get(str(TrackStatus.PENDING), 0),
            ready=by_status.get(str(TrackStatus.READY), 0),
            unmatched=by_status.get(str(TrackStatus.UNMATCHED), 0),
        )
