"""Apple Music catalog connector used as the target catalog for resolution.

Talks to the Apple Music catalog API with a developer token:

- ``GET /catalog/{storefront}/songs?filter[isrc]=...`` for ISRC lookups
- ``GET /catalog/{storefront}/search?types=songs&term=...`` for text search

Requests go through a shared ``requests.Session`` in a worker thread. Every
request has an explicit timeout. Connection errors and timeouts are retried
with exponential backoff, and HTTP 429 responses are retried after the
``Retry-After`` the API sends back.
"""

import asyncio
from typing import Any

from attrs import define, field
import backoff
import requests

from trackbridge.config import get_config, get_logger, resilient_operation
from trackbridge.domain.matching import CatalogMatch

# Get contextual logger with service binding
logger = get_logger(__name__).bind(service="apple_music")


class CatalogError(Exception):
    """Target catalog request failed."""

    def __init__(self, message: str, status_code: int | None = None):
        self.status_code = status_code
        super().__init__(message)


class CatalogRateLimitError(CatalogError):
    """Target catalog answered HTTP 429."""

    def __init__(self, retry_after: float | None = None):
        self.retry_after = retry_after
        message = (
            f"Apple Music rate limit exceeded. Retry after {retry_after} seconds."
            if retry_after
            else "Apple Music rate limit exceeded."
        )
        super().__init__(message, status_code=429)


def _retry_after_seconds(error: CatalogRateLimitError) -> float:
    base_delay = float(get_config("CATALOG_RETRY_BASE_DELAY", 0.5))
    max_delay = float(get_config("CATALOG_RETRY_MAX_DELAY", 30.0))
    return min(error.retry_after or base_delay, max_delay)


def _parse_retry_after(value: str | None) -> float | None:
    if not value:
        return None
    try:
        return max(float(value), 0.0)
    except ValueError:
        return None


def _release_year(release_date: str | None) -> int | None:
    if not release_date or len(release_date) < 4 or not release_date[:4].isdigit():
        return None
    return int(release_date[:4])


def parse_song(song: dict[str, Any], artwork_size: int = 600) -> CatalogMatch | None:
    """Convert an Apple Music song resource to a catalog match.

    Returns None for resources without an id or attributes.
    """
    attributes = song.get("attributes")
    song_id = song.get("id")
    if not song_id or not isinstance(attributes, dict):
        return None

    previews = attributes.get("previews") or []
    preview_url = previews[0].get("url") if previews else None

    artwork_url = (attributes.get("artwork") or {}).get("url")
    if artwork_url:
        artwork_url = artwork_url.replace("{w}", str(artwork_size)).replace(
            "{h}", str(artwork_size)
        )

    release_date = attributes.get("releaseDate")
    return CatalogMatch(
        catalog_id=str(song_id),
        title=attributes.get("name", ""),
        artist_name=attributes.get("artistName", ""),
        album_name=attributes.get("albumName", ""),
        release_year=_release_year(release_date),
        release_date=release_date,
        preview_url=preview_url,
        artwork_url=artwork_url,
        isrc=attributes.get("isrc"),
    )


@define(slots=True)
class AppleMusicConnector:
    """Async catalog lookups against the Apple Music API.

    Implements the ``CatalogLookup`` protocol.
    """

    developer_token: str = field(
        factory=lambda: get_config("APPLE_MUSIC_DEVELOPER_TOKEN", ""), repr=False
    )
    base_url: str = field(
        factory=lambda: get_config("CATALOG_BASE_URL", "https://api.music.apple.com/v1")
    )
    timeout: float = field(factory=lambda: get_config("CATALOG_REQUEST_TIMEOUT", 10.0))
    artwork_size: int = field(factory=lambda: get_config("CATALOG_ARTWORK_SIZE", 600))
    session: requests.Session = field(factory=requests.Session, repr=False)

    def __attrs_post_init__(self) -> None:
        if not self.developer_token:
            logger.warning("No Apple Music developer token configured")
        self.session.headers.update(
            {
                "Authorization": f"Bearer {self.developer_token}",
                "Accept": "application/json",
            }
        )
        self.base_url = self.base_url.rstrip("/")

    @backoff.on_exception(
        backoff.expo,
        (requests.ConnectionError, requests.Timeout),
        max_tries=lambda: get_config("CATALOG_RETRY_COUNT", 3),
        factor=lambda: get_config("CATALOG_RETRY_BASE_DELAY", 0.5),
        max_value=lambda: get_config("CATALOG_RETRY_MAX_DELAY", 30.0),
        logger=None,
    )
    @backoff.on_exception(
        backoff.runtime,
        CatalogRateLimitError,
        value=_retry_after_seconds,
        max_tries=lambda: get_config("CATALOG_RETRY_COUNT", 3),
        jitter=None,
        logger=None,
    )
    async def _get(self, path: str, params: dict[str, Any]) -> dict[str, Any] | None:
        """GET a catalog path, returning the JSON body or None on 404."""
        url = f"{self.base_url}{path}"
        response = await asyncio.to_thread(
            self.session.get, url, params=params, timeout=self.timeout
        )

        if response.status_code == 429:
            retry_after = _parse_retry_after(response.headers.get("Retry-After"))
            logger.warning(f"Rate limited by Apple Music, retry after {retry_after}s")
            raise CatalogRateLimitError(retry_after)

        if response.status_code == 404:
            return None

        if response.status_code >= 400:
            raise CatalogError(
                f"Apple Music request to {path} failed with HTTP {response.status_code}",
                status_code=response.status_code,
            )

        return response.json()

    @resilient_operation("apple_music_lookup_by_isrc")
    async def lookup_by_isrc(self, isrc: str, storefront: str) -> CatalogMatch | None:
        """Find the song carrying an ISRC in a storefront."""
        body = await self._get(
            f"/catalog/{storefront}/songs", {"filter[isrc]": isrc}
        )
        if not body:
            return None

        for song in body.get("data") or []:
            match = parse_song(song, self.artwork_size)
            if match is not None:
                logger.debug(f"ISRC {isrc} resolved to Apple Music song {match.catalog_id}")
                return match
        return None

    @resilient_operation("apple_music_search")
    async def search(
        self, query: str, storefront: str, limit: int
    ) -> list[CatalogMatch]:
        """Ranked song search in a storefront."""
        body = await self._get(
            f"/catalog/{storefront}/search",
            {"term": query, "types": "songs", "limit": limit},
        )
        if not body:
            return []

        songs = ((body.get("results") or {}).get("songs") or {}).get("data") or []
        matches = [parse_song(song, self.artwork_size) for song in songs]
        return [match for match in matches if match is not None]

    def close(self) -> None:
        self.session.close()
