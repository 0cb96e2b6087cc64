"""Playlist-related domain entities.

Pure playlist and playlist track representations with zero external dependencies.
"""

from datetime import UTC, datetime
from enum import StrEnum

import attrs
from attrs import define, field, validators


class PlaylistSource(StrEnum):
    """Catalog a playlist was imported from."""

    SPOTIFY = "spotify"  # source catalog, tracks need resolution
    APPLE_MUSIC = "apple_music"  # target catalog, tracks are playable as-is


TARGET_CATALOG = PlaylistSource.APPLE_MUSIC


class PlaylistStatus(StrEnum):
    """Processing state of an imported playlist."""

    IMPORTING = "importing"
    PROCESSING = "processing"
    READY = "ready"
    FAILED = "failed"


class TrackStatus(StrEnum):
    """Resolution state of a single playlist track."""

    PENDING = "pending"
    READY = "ready"
    UNMATCHED = "unmatched"


@define(frozen=True, slots=True)
class PlaylistCounts:
    """Per-status track counts for one playlist."""

    pending: int = 0
    ready: int = 0
    unmatched: int = 0

    @property
    def total(self) -> int:
        return self.pending + self.ready + self.unmatched

    def derive_status(self, current: PlaylistStatus) -> PlaylistStatus:
        """Status implied by these counts.

        A playlist marked failed by intake stays failed; otherwise it is ready
        once nothing is pending.
        """
        if current == PlaylistStatus.FAILED:
            return current
        return PlaylistStatus.READY if self.pending == 0 else PlaylistStatus.PROCESSING


@define(frozen=True, slots=True)
class PlaylistTrack:
    """A track inside an imported playlist.

    Source fields describe the track as the source catalog knows it. Catalog
    fields are only populated once the track is ``ready``.
    """

    position: int = field(validator=[validators.instance_of(int), validators.ge(0)])
    title: str = field(validator=validators.instance_of(str))
    artist_names: list[str] = field(factory=list)
    status: TrackStatus = field(default=TrackStatus.PENDING, converter=TrackStatus)

    # Source-side metadata
    isrc: str | None = None
    release_year: int | None = None
    image_url: str | None = None
    source_track_id: str | None = None

    # Target catalog metadata
    catalog_track_id: str | None = None
    catalog_title: str | None = None
    catalog_artist_name: str | None = None
    catalog_album_name: str | None = None
    catalog_release_year: int | None = None
    catalog_release_date: str | None = None
    preview_url: str | None = None
    artwork_url: str | None = None
    catalog_isrc: str | None = None

    unmatched_reason: str | None = None

    # Persistence
    id: int | None = None
    playlist_id: int | None = None
    import_generation: int = 1

    @property
    def primary_artist(self) -> str:
        """First credited artist, used for catalog search."""
        return self.artist_names[0] if self.artist_names else "Unknown Artist"

    @property
    def is_pre_resolved(self) -> bool:
        """Whether the track already carries enough catalog data to be played."""
        return bool(
            self.catalog_track_id and self.preview_url and self.catalog_release_year
        )

    def with_id(self, db_id: int) -> "PlaylistTrack":
        """Set the internal database ID for this track."""
        if not isinstance(db_id, int) or db_id <= 0:
            raise ValueError(
                f"Invalid database ID: {db_id}. Must be a positive integer.",
            )
        return attrs.evolve(self, id=db_id)


@define(frozen=True, slots=True)
class Playlist:
    """An imported playlist owned by exactly one user.

    Counts are maintained by the status aggregator; the pending count is the
    implicit remainder of ``total_tracks``.
    """

    owner_id: str = field(validator=validators.instance_of(str))
    source: PlaylistSource = field(converter=PlaylistSource)
    source_playlist_id: str = field(validator=validators.instance_of(str))
    name: str = field(validator=validators.instance_of(str))
    description: str | None = None
    image_url: str | None = None
    imported_at: datetime = field(factory=lambda: datetime.now(UTC))
    status: PlaylistStatus = field(
        default=PlaylistStatus.IMPORTING, converter=PlaylistStatus
    )
    total_tracks: int = 0
    ready_tracks: int = 0
    unmatched_tracks: int = 0
    import_generation: int = 1
    tracks: list[PlaylistTrack] = field(factory=list)
    id: int | None = None

    @property
    def pending_tracks(self) -> int:
        return max(self.total_tracks - self.ready_tracks - self.unmatched_tracks, 0)

    @property
    def counts(self) -> PlaylistCounts:
        return PlaylistCounts(
            pending=self.pending_tracks,
            ready=self.ready_tracks,
            unmatched=self.unmatched_tracks,
        )

    def is_owned_by(self, owner_id: str | None) -> bool:
        return owner_id is not None and self.owner_id == owner_id

    def with_tracks(self, tracks: list[PlaylistTrack]) -> "Playlist":
        """Create a new playlist with the given tracks."""
        return attrs.evolve(self, tracks=tracks)

    def with_id(self, db_id: int) -> "Playlist":
        """Set the internal database ID for this playlist."""
        if not isinstance(db_id, int) or db_id <= 0:
            raise ValueError(
                f"Invalid database ID: {db_id}. Must be a positive integer.",
            )
        return attrs.evolve(self, id=db_id)
