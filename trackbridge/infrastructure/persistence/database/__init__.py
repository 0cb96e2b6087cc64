"""Database models and connection management."""

from trackbridge.infrastructure.persistence.database.db_connection import (
    create_db_engine,
    create_session_factory,
    get_engine,
    get_session_factory,
)
from trackbridge.infrastructure.persistence.database.db_models import (
    DBPlaylist,
    DBPlaylistTrack,
    TrackbridgeDBBase,
    init_db,
)

__all__ = [
    "DBPlaylist",
    "DBPlaylistTrack",
    "TrackbridgeDBBase",
    "create_db_engine",
    "create_session_factory",
    "get_engine",
    "get_session_factory",
    "init_db",
]
