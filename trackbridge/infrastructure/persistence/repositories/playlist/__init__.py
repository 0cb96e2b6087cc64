"""Playlist repositories package."""

from trackbridge.infrastructure.persistence.repositories.playlist.core import (
    PlaylistRepository,
)

__all__ = ["PlaylistRepository"]
