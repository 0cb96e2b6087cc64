"""SQLAlchemy database models for imported playlists and their tracks.

Models use SQLAlchemy 2.0 typed mappings. Constraint names come from a shared
naming convention so the schema stays stable across backends.
"""

from datetime import UTC, datetime

from sqlalchemy import (
    JSON,
    DateTime,
    ForeignKey,
    Index,
    MetaData,
    String,
    UniqueConstraint,
)
from sqlalchemy.ext.asyncio import AsyncAttrs, AsyncEngine
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship

from trackbridge.config import get_logger

# Create module logger
logger = get_logger(__name__)

# Define naming convention for constraints
convention = {
    "ix": "ix_%(table_name)s_%(column_0_name)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

metadata = MetaData(naming_convention=convention)


def _utcnow() -> datetime:
    return datetime.now(UTC)


class TrackbridgeDBBase(AsyncAttrs, DeclarativeBase):
    """Base class for all database models with timestamps."""

    metadata = metadata

    id: Mapped[int] = mapped_column(primary_key=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=_utcnow,
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=_utcnow,
        onupdate=_utcnow,
        nullable=False,
    )


class DBPlaylist(TrackbridgeDBBase):
    """Imported playlist with aggregated track counts."""

    __tablename__ = "playlists"

    owner_id: Mapped[str] = mapped_column(String(128), index=True)
    source: Mapped[str] = mapped_column(String(32))
    source_playlist_id: Mapped[str] = mapped_column(String(128))
    name: Mapped[str] = mapped_column(String(255))
    description: Mapped[str | None] = mapped_column(String(2000))
    image_url: Mapped[str | None] = mapped_column(String(1024))
    imported_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow
    )
    status: Mapped[str] = mapped_column(String(16), default="importing")
    total_tracks: Mapped[int] = mapped_column(default=0)
    ready_tracks: Mapped[int] = mapped_column(default=0)
    unmatched_tracks: Mapped[int] = mapped_column(default=0)
    import_generation: Mapped[int] = mapped_column(default=1)

    # Relationships
    tracks: Mapped[list["DBPlaylistTrack"]] = relationship(
        back_populates="playlist",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="DBPlaylistTrack.position",
    )

    __table_args__ = (UniqueConstraint("owner_id", "source_playlist_id"),)


class DBPlaylistTrack(TrackbridgeDBBase):
    """One position of a playlist, resolved against the target catalog or not."""

    __tablename__ = "playlist_tracks"

    playlist_id: Mapped[int] = mapped_column(
        ForeignKey("playlists.id", ondelete="CASCADE"),
    )
    position: Mapped[int]
    status: Mapped[str] = mapped_column(String(16), default="pending")
    import_generation: Mapped[int] = mapped_column(default=1)

    # Source catalog metadata
    title: Mapped[str] = mapped_column(String(512))
    artist_names: Mapped[list[str]] = mapped_column(JSON, default=list)
    isrc: Mapped[str | None] = mapped_column(String(32))
    release_year: Mapped[int | None]
    image_url: Mapped[str | None] = mapped_column(String(1024))
    source_track_id: Mapped[str | None] = mapped_column(String(128))

    # Target catalog metadata, set once ready
    catalog_track_id: Mapped[str | None] = mapped_column(String(128))
    catalog_title: Mapped[str | None] = mapped_column(String(512))
    catalog_artist_name: Mapped[str | None] = mapped_column(String(512))
    catalog_album_name: Mapped[str | None] = mapped_column(String(512))
    catalog_release_year: Mapped[int | None]
    catalog_release_date: Mapped[str | None] = mapped_column(String(32))
    preview_url: Mapped[str | None] = mapped_column(String(1024))
    artwork_url: Mapped[str | None] = mapped_column(String(1024))
    catalog_isrc: Mapped[str | None] = mapped_column(String(32))

    unmatched_reason: Mapped[str | None] = mapped_column(String(255))

    # Relationships
    playlist: Mapped["DBPlaylist"] = relationship(back_populates="tracks")

    __table_args__ = (
        UniqueConstraint("playlist_id", "position"),
        Index("ix_playlist_tracks_playlist_status", "playlist_id", "status", "position"),
    )


async def init_db(engine: AsyncEngine | None = None) -> None:
    """Initialize database schema.

    Creates all tables if they don't exist.
    """
    if engine is None:
        from trackbridge.infrastructure.persistence.database.db_connection import (
            get_engine,
        )

        engine = get_engine()

    try:
        async with engine.begin() as conn:
            await conn.run_sync(TrackbridgeDBBase.metadata.create_all)
    except Exception as e:
        logger.error(f"Database initialization failed: {e}")
        raise
    else:
        logger.info("Database schema initialized")
