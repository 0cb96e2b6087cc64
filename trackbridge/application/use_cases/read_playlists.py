"""Owner-scoped read queries for imported playlists.

Readers poll these while the pipeline runs. Asking for a playlist that does
not exist or belongs to someone else is not an error; it reads as nothing.
"""

from datetime import datetime

from attrs import define, field

from trackbridge.config import get_logger
from trackbridge.domain.entities import (
    Playlist,
    PlaylistCounts,
    PlaylistSource,
    PlaylistStatus,
    PlaylistTrack,
    TrackStatus,
)
from trackbridge.domain.repositories import UnitOfWorkFactory

logger = get_logger(__name__)


@define(frozen=True, slots=True)
class PlaylistSummary:
    """List view of a playlist with its processing progress."""

    id: int
    source: PlaylistSource
    source_playlist_id: str
    name: str
    description: str | None
    image_url: str | None
    imported_at: datetime
    status: PlaylistStatus
    total_tracks: int
    ready_tracks: int
    unmatched_tracks: int

    @property
    def pending_tracks(self) -> int:
        return max(self.total_tracks - self.ready_tracks - self.unmatched_tracks, 0)

    @classmethod
    def from_playlist(cls, playlist: Playlist) -> "PlaylistSummary":
        return cls(
            id=playlist.id,  # type: ignore[arg-type]
            source=playlist.source,
            source_playlist_id=playlist.source_playlist_id,
            name=playlist.name,
            description=playlist.description,
            image_url=playlist.image_url,
            imported_at=playlist.imported_at,
            status=playlist.status,
            total_tracks=playlist.total_tracks,
            ready_tracks=playlist.ready_tracks,
            unmatched_tracks=playlist.unmatched_tracks,
        )


@define(frozen=True, slots=True)
class PlaylistDetail:
    """A playlist together with its tracks in position order."""

    summary: PlaylistSummary
    tracks: list[PlaylistTrack] = field(factory=list)

    @property
    def counts(self) -> PlaylistCounts:
        return PlaylistCounts(
            pending=self.summary.pending_tracks,
            ready=self.summary.ready_tracks,
            unmatched=self.summary.unmatched_tracks,
        )


class PlaylistQueries:
    """Read side of the playlist store, always scoped to one owner."""

    def __init__(self, uow_factory: UnitOfWorkFactory) -> None:
        self.uow_factory = uow_factory

    async def list_owned(self, owner_id: str | None) -> list[PlaylistSummary]:
        """All playlists of an owner, empty when no owner is given."""
        if not owner_id:
            return []

        async with self.uow_factory() as uow:
            playlists = await uow.get_playlist_repository().list_by_owner(owner_id)

        return [PlaylistSummary.from_playlist(playlist) for playlist in playlists]

    async def get(
        self,
        owner_id: str | None,
        playlist_id: int,
        include_all_tracks: bool = False,
    ) -> PlaylistDetail | None:
        """One playlist with its tracks.

        Args:
            owner_id: Caller identity; None reads as anonymous
            playlist_id: Internal playlist ID
            include_all_tracks: Also return pending and unmatched tracks

        Returns:
            The playlist, or None when missing or owned by someone else
        """
        if not owner_id:
            return None

        async with self.uow_factory() as uow:
            playlist = await uow.get_playlist_repository().get_playlist(playlist_id)
            if playlist is None or not playlist.is_owned_by(owner_id):
                logger.debug(f"Playlist {playlist_id} not visible to owner {owner_id}")
                return None

            statuses = None if include_all_tracks else [TrackStatus.READY]
            tracks = await uow.get_track_repository().list_tracks(
                playlist_id, statuses
            )

        return PlaylistDetail(
            summary=PlaylistSummary.from_playlist(playlist),
            tracks=sorted(tracks, key=lambda track: track.position),
        )
