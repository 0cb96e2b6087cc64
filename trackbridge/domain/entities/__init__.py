"""Core domain entities representing imported playlists and their tracks."""

from .playlist import (
    TARGET_CATALOG,
    Playlist,
    PlaylistCounts,
    PlaylistSource,
    PlaylistStatus,
    PlaylistTrack,
    TrackStatus,
)

__all__ = [
    "TARGET_CATALOG",
    "Playlist",
    "PlaylistCounts",
    "PlaylistSource",
    "PlaylistStatus",
    "PlaylistTrack",
    "TrackStatus",
]
