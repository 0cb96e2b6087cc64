"""Domain repository interfaces."""

from .interfaces import (
    PlaylistRepositoryProtocol,
    PlaylistTrackRepositoryProtocol,
    UnitOfWorkFactory,
    UnitOfWorkProtocol,
)

__all__ = [
    "PlaylistRepositoryProtocol",
    "PlaylistTrackRepositoryProtocol",
    "UnitOfWorkFactory",
    "UnitOfWorkProtocol",
]
