"""Playlist track mapper for domain-persistence conversions."""

from attrs import define

from trackbridge.domain.entities import PlaylistTrack
from trackbridge.infrastructure.persistence.database.db_models import (
    DBPlaylistTrack,
)
from trackbridge.infrastructure.persistence.repositories.base_repo import (
    BaseModelMapper,
)

# Columns copied one-to-one between the entity and the row
_SHARED_FIELDS = (
    "position",
    "title",
    "isrc",
    "release_year",
    "image_url",
    "source_track_id",
    "catalog_track_id",
    "catalog_title",
    "catalog_artist_name",
    "catalog_album_name",
    "catalog_release_year",
    "catalog_release_date",
    "preview_url",
    "artwork_url",
    "catalog_isrc",
    "unmatched_reason",
    "import_generation",
)


@define(frozen=True, slots=True)
class PlaylistTrackMapper(BaseModelMapper[DBPlaylistTrack, PlaylistTrack]):
    """Bidirectional mapper between domain and persistence models."""

    @staticmethod
    async def to_domain(db_model: DBPlaylistTrack) -> PlaylistTrack:
        return PlaylistTrack(
            id=db_model.id,
            playlist_id=db_model.playlist_id,
            status=db_model.status,
            artist_names=list(db_model.artist_names or []),
            **{name: getattr(db_model, name) for name in _SHARED_FIELDS},
        )

    @staticmethod
    def to_db(domain_model: PlaylistTrack) -> DBPlaylistTrack:
        return DBPlaylistTrack(
            playlist_id=domain_model.playlist_id,
            status=str(domain_model.status),
            artist_names=list(domain_model.artist_names),
            **{name: getattr(domain_model, name) for name in _SHARED_FIELDS},
        )
