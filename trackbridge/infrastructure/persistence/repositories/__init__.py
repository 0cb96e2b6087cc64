"""SQLAlchemy repository implementations of the domain repository protocols."""

from trackbridge.infrastructure.persistence.repositories.playlist import (
    PlaylistRepository,
)
from trackbridge.infrastructure.persistence.repositories.track import (
    PlaylistTrackRepository,
)

__all__ = ["PlaylistRepository", "PlaylistTrackRepository"]
