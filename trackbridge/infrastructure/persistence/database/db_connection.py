"""SQLAlchemy database configuration and connection management.

This module is responsible for:
- Engine creation and configuration
- Connection pooling
- Session factories
"""

from pathlib import Path

from sqlalchemy import event
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from trackbridge.config import get_config, get_logger

# Create module logger
logger = get_logger(__name__)


def _is_memory_url(db_url: str) -> bool:
    database = make_url(db_url).database
    return database in (None, "", ":memory:")


def create_db_engine(
    connection_string: str | None = None, echo: bool | None = None
) -> AsyncEngine:
    """Create async SQLAlchemy engine configured for SQLite.

    In-memory databases share one connection through ``StaticPool`` so every
    session sees the same schema and data.
    """
    db_url = connection_string or get_config(
        "DATABASE_URL", "sqlite+aiosqlite:///data/trackbridge.db"
    )
    if echo is None:
        echo = bool(get_config("DATABASE_ECHO", False))

    is_sqlite = db_url.startswith("sqlite")
    in_memory = is_sqlite and _is_memory_url(db_url)

    if in_memory:
        engine = create_async_engine(
            db_url,
            poolclass=StaticPool,
            connect_args={"check_same_thread": False},
            echo=echo,
        )
    else:
        if is_sqlite:
            database = make_url(db_url).database
            if database:
                Path(database).parent.mkdir(parents=True, exist_ok=True)

        engine = create_async_engine(
            db_url,
            # Small pool keeps concurrent SQLite writers to a minimum
            pool_size=1,
            max_overflow=2,
            pool_timeout=60,
            pool_recycle=3600,
            pool_pre_ping=True,
            connect_args={"check_same_thread": False, "timeout": 60.0}
            if is_sqlite
            else {},
            echo=echo,
        )

    if is_sqlite:

        @event.listens_for(engine.sync_engine, "connect")  # type: ignore
        def _set_sqlite_pragma(dbapi_connection, _):  # type: ignore # pragma: no cover
            """Set SQLite PRAGMAs on connection creation."""
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA busy_timeout = 30000")
            if not in_memory:
                cursor.execute("PRAGMA journal_mode = WAL")
                cursor.execute("PRAGMA synchronous = NORMAL")
            cursor.execute("PRAGMA foreign_keys = ON")
            cursor.close()

    logger.debug(f"Created database engine for {make_url(db_url).render_as_string()}")
    return engine


# Global engine singleton
_engine: AsyncEngine | None = None


def get_engine() -> AsyncEngine:
    """Get or create the global database engine singleton."""
    global _engine
    if _engine is None:
        _engine = create_db_engine()
    return _engine


def create_session_factory(
    engine: AsyncEngine | None = None,
) -> async_sessionmaker[AsyncSession]:
    """Create an async session factory for the given engine.

    Args:
        engine: Optional engine (uses global engine if None)
    """
    return async_sessionmaker(
        bind=engine or get_engine(),
        expire_on_commit=False,  # Entities are mapped out after commit
        autoflush=True,
    )


# Global session factory singleton
_session_factory: async_sessionmaker[AsyncSession] | None = None


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Get or create the global session factory singleton."""
    global _session_factory
    if _session_factory is None:
        _session_factory = create_session_factory()
    return _session_factory

