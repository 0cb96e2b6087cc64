"""SQLAlchemy-backed unit of work: one session, one transaction."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Self

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from trackbridge.domain.repositories import (
    PlaylistRepositoryProtocol,
    PlaylistTrackRepositoryProtocol,
    UnitOfWorkFactory,
)
from trackbridge.infrastructure.persistence.database.db_connection import (
    get_session_factory,
)
from trackbridge.infrastructure.persistence.repositories.playlist.core import (
    PlaylistRepository,
)
from trackbridge.infrastructure.persistence.repositories.track.core import (
    PlaylistTrackRepository,
)


class DatabaseUnitOfWork:
    """Hands out repositories bound to a single session.

    A clean exit commits unless ``commit`` was already called; an escaping
    exception rolls everything back.
    """

    def __init__(self, session: AsyncSession) -> None:
        self._session = session
        self._committed = False

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: object,
    ) -> None:
        if exc_type is not None:
            await self.rollback()
        elif not self._committed:
            await self.commit()

    async def commit(self) -> None:
        await self._session.commit()
        self._committed = True

    async def rollback(self) -> None:
        await self._session.rollback()

    def get_playlist_repository(self) -> PlaylistRepositoryProtocol:
        return PlaylistRepository(self._session)

    def get_track_repository(self) -> PlaylistTrackRepositoryProtocol:
        return PlaylistTrackRepository(self._session)


def create_unit_of_work_factory(
    session_factory: async_sessionmaker[AsyncSession] | None = None,
) -> UnitOfWorkFactory:
    """Return a callable that opens a fresh session per ``async with``.

    Falls back to the process-wide session factory when none is given.
    """
    factory = session_factory or get_session_factory()

    @asynccontextmanager
    async def unit_of_work() -> AsyncIterator[DatabaseUnitOfWork]:
        async with factory() as session, DatabaseUnitOfWork(session) as uow:
            yield uow

    return unit_of_work
