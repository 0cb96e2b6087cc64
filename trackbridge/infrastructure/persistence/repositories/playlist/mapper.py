"""Playlist mapper for domain-persistence conversions."""

from datetime import UTC, datetime

from attrs import define

from trackbridge.domain.entities import Playlist
from trackbridge.infrastructure.persistence.database.db_models import DBPlaylist
from trackbridge.infrastructure.persistence.repositories.base_repo import (
    BaseModelMapper,
)


def ensure_utc(value: datetime) -> datetime:
    """SQLite drops tzinfo on the way back; stored values are always UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


@define(frozen=True, slots=True)
class PlaylistMapper(BaseModelMapper[DBPlaylist, Playlist]):
    """Bidirectional mapper between domain and persistence models.

    Tracks are never loaded through the playlist; the track repository owns
    them.
    """

    @staticmethod
    async def to_domain(db_model: DBPlaylist) -> Playlist:
        return Playlist(
            id=db_model.id,
            owner_id=db_model.owner_id,
            source=db_model.source,
            source_playlist_id=db_model.source_playlist_id,
            name=db_model.name,
            description=db_model.description,
            image_url=db_model.image_url,
            imported_at=ensure_utc(db_model.imported_at),
            status=db_model.status,
            total_tracks=db_model.total_tracks,
            ready_tracks=db_model.ready_tracks,
            unmatched_tracks=db_model.unmatched_tracks,
            import_generation=db_model.import_generation,
        )

    @staticmethod
    def to_db(domain_model: Playlist) -> DBPlaylist:
        return DBPlaylist(
            owner_id=domain_model.owner_id,
            source=str(domain_model.source),
            source_playlist_id=domain_model.source_playlist_id,
            name=domain_model.name,
            description=domain_model.description,
            image_url=domain_model.image_url,
            imported_at=domain_model.imported_at,
            status=str(domain_model.status),
            total_tracks=domain_model.total_tracks,
            ready_tracks=domain_model.ready_tracks,
            unmatched_tracks=domain_model.unmatched_tracks,
            import_generation=domain_model.import_generation,
        )
