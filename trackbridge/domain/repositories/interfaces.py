"""Domain repository interfaces following Clean Architecture principles.

These interfaces define the contracts for data access without depending on
infrastructure implementations, following the dependency inversion principle.
"""

from collections.abc import Awaitable, Callable, Sequence
from contextlib import AbstractAsyncContextManager
from typing import TYPE_CHECKING, Protocol, Self

if TYPE_CHECKING:
    from trackbridge.domain.entities import (
        Playlist,
        PlaylistCounts,
        PlaylistStatus,
        PlaylistTrack,
        TrackStatus,
    )
    from trackbridge.domain.matching import CatalogMatch


class PlaylistRepositoryProtocol(Protocol):
    """Repository interface for playlist persistence operations."""

    def get_playlist(
        self, playlist_id: int, *, for_update: bool = False
    ) -> Awaitable["Playlist | None"]:
        """Get playlist by ID without its tracks.

        Args:
            playlist_id: Internal playlist ID
            for_update: Lock the row for the rest of the transaction
        """
        ...

    def find_by_source_id(
        self, owner_id: str, source_playlist_id: str
    ) -> Awaitable["Playlist | None"]:
        """Find the playlist an owner imported from a source playlist."""
        ...

    def list_by_owner(self, owner_id: str) -> Awaitable[list["Playlist"]]:
        """List all playlists owned by a user."""
        ...

    def create_playlist(self, playlist: "Playlist") -> Awaitable["Playlist"]:
        """Insert a new playlist row."""
        ...

    def replace_playlist(
        self, playlist_id: int, playlist: "Playlist"
    ) -> Awaitable["Playlist"]:
        """Overwrite metadata, counts, status and generation of a playlist."""
        ...

    def apply_counts(
        self, playlist_id: int, counts: "PlaylistCounts", status: "PlaylistStatus"
    ) -> Awaitable["Playlist | None"]:
        """Store aggregated counts and derived status."""
        ...

    def mark_failed(self, playlist_id: int) -> Awaitable[None]:
        """Flag a playlist as failed after an upstream import error."""
        ...

    def find_ids_with_pending_tracks(self) -> Awaitable[list[int]]:
        """IDs of playlists that still have unresolved tracks."""
        ...


class PlaylistTrackRepositoryProtocol(Protocol):
    """Repository interface for playlist track persistence operations."""

    def get_pending_tracks(
        self, playlist_id: int, limit: int
    ) -> Awaitable[list["PlaylistTrack"]]:
        """Pending tracks of a playlist in position order."""
        ...

    def list_tracks(
        self,
        playlist_id: int,
        statuses: Sequence["TrackStatus"] | None = None,
    ) -> Awaitable[list["PlaylistTrack"]]:
        """All tracks of a playlist in position order, optionally filtered."""
        ...

    def add_tracks(
        self,
        playlist_id: int,
        tracks: list["PlaylistTrack"],
        import_generation: int,
    ) -> Awaitable[list["PlaylistTrack"]]:
        """Insert tracks for a playlist import generation."""
        ...

    def delete_tracks(self, playlist_id: int) -> Awaitable[int]:
        """Delete every track of a playlist."""
        ...

    def mark_ready(
        self, track_id: int, import_generation: int, match: "CatalogMatch"
    ) -> Awaitable[bool]:
        """Record a catalog match on a pending track.

        Returns:
            False when the track is gone, no longer pending, or belongs to
            another import generation.
        """
        ...

    def mark_unmatched(
        self, track_id: int, import_generation: int, reason: str
    ) -> Awaitable[bool]:
        """Record a terminal resolution failure on a pending track."""
        ...

    def count_by_status(self, playlist_id: int) -> Awaitable["PlaylistCounts"]:
        """Count a playlist's tracks per status."""
        ...


class UnitOfWorkProtocol(Protocol):
    """Transaction boundary that hands out repositories sharing one session."""

    async def __aenter__(self) -> Self:
        """Enter async context manager."""
        ...

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: object,
    ) -> None:
        """Commit on success, roll back on error."""
        ...

    async def commit(self) -> None:
        """Explicitly commit the current transaction."""
        ...

    async def rollback(self) -> None:
        """Explicitly roll back the current transaction."""
        ...

    def get_playlist_repository(self) -> PlaylistRepositoryProtocol:
        """Get playlist repository for this transaction."""
        ...

    def get_track_repository(self) -> PlaylistTrackRepositoryProtocol:
        """Get playlist track repository for this transaction."""
        ...


# Opens a fresh unit of work, one transaction per ``async with``
UnitOfWorkFactory = Callable[[], AbstractAsyncContextManager[UnitOfWorkProtocol]]
