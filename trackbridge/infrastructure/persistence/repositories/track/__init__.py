"""Playlist track repositories package."""

from trackbridge.infrastructure.persistence.repositories.track.core import (
    PlaylistTrackRepository,
)

__all__ = ["PlaylistTrackRepository"]
