import os

# Must be set before trackbridge.config builds its settings singleton
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["PIPELINE__RATE_LIMIT_DELAY_MS"] = "0"

import pytest  # noqa: E402

from trackbridge.application.use_cases import ImportPlaylistCommand, ImportTrack  # noqa: E402
from trackbridge.domain.entities import PlaylistSource  # noqa: E402
from trackbridge.domain.matching import CatalogMatch  # noqa: E402
from trackbridge.infrastructure.persistence.database.db_connection import (  # noqa: E402
    create_db_engine,
    create_session_factory,
)
from trackbridge.infrastructure.persistence.database.db_models import init_db  # noqa: E402
from trackbridge.infrastructure.persistence.unit_of_work import (  # noqa: E402
    create_unit_of_work_factory,
)


class FakeCatalog:
    """In-memory catalog recording every call.

    Searches return one candidate whose title is the query unless results
    are configured per query.
    """

    def __init__(
        self,
        isrc_hits: dict[str, CatalogMatch] | None = None,
        search_results: dict[str, list[CatalogMatch]] | None = None,
        isrc_error: Exception | None = None,
        search_error: Exception | None = None,
    ):
        self.isrc_hits = isrc_hits or {}
        self.search_results = search_results
        self.isrc_error = isrc_error
        self.search_error = search_error
        self.isrc_calls: list[tuple[str, str]] = []
        self.search_calls: list[tuple[str, str, int]] = []

    async def lookup_by_isrc(self, isrc: str, storefront: str) -> CatalogMatch | None:
        self.isrc_calls.append((isrc, storefront))
        if self.isrc_error is not None:
            raise self.isrc_error
        return self.isrc_hits.get(isrc)

    async def search(self, query: str, storefront: str, limit: int) -> list[CatalogMatch]:
        self.search_calls.append((query, storefront, limit))
        if self.search_error is not None:
            raise self.search_error
        if self.search_results is not None:
            return self.search_results.get(query, [])
        return [
            CatalogMatch(
                catalog_id=f"am-{len(self.search_calls)}",
                title=query,
                artist_name="Catalog Artist",
                album_name="Catalog Album",
                release_year=2001,
                preview_url=f"https://audio.example/{len(self.search_calls)}.m4a",
            )
        ]

    @property
    def resolutions(self) -> int:
        return len(self.search_calls)


class CountingRateLimiter:
    """Rate limiter that never sleeps and counts calls."""

    def __init__(self):
        self.calls = 0

    async def wait(self) -> None:
        self.calls += 1


def make_command(
    track_count: int,
    owner_id: str = "user-1",
    source_playlist_id: str = "sp-1",
    source: PlaylistSource = PlaylistSource.SPOTIFY,
    name: str = "Road Trip",
) -> ImportPlaylistCommand:
    return ImportPlaylistCommand(
        owner_id=owner_id,
        source=source,
        source_playlist_id=source_playlist_id,
        name=name,
        tracks=[
            ImportTrack(
                position=index,
                title=f"Song {index}",
                artist_names=[f"Artist {index}"],
                source_track_id=f"sp-track-{index}",
            )
            for index in range(track_count)
        ],
    )


@pytest.fixture
def fake_catalog():
    return FakeCatalog()


@pytest.fixture
def catalog_factory():
    """Build fake catalogs with configured hits, results or errors."""
    return FakeCatalog


@pytest.fixture
def counting_rate_limiter():
    return CountingRateLimiter()


@pytest.fixture
def command_factory():
    """Build import commands with generated tracks."""
    return make_command


@pytest.fixture
async def db_engine():
    """Fresh in-memory database with the schema created."""
    engine = create_db_engine("sqlite+aiosqlite:///:memory:")
    await init_db(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return create_session_factory(db_engine)


@pytest.fixture
def uow_factory(session_factory):
    return create_unit_of_work_factory(session_factory)


@pytest.fixture
async def db_session(session_factory):
    """Provide database session with automatic rollback."""
    async with session_factory() as session:
        yield session
        await session.rollback()
