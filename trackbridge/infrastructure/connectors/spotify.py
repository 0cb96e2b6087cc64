"""Spotify source playlist reader.

Reads a playlist through spotipy (https://spotipy.readthedocs.io/) with an
access token the caller already obtained, and describes it as an import
command. Token acquisition and refresh happen elsewhere.
"""

import asyncio
from typing import Any

from attrs import define, field
import backoff
import spotipy

from trackbridge.application.use_cases.import_playlist import (
    ImportPlaylistCommand,
    ImportTrack,
)
from trackbridge.config import get_logger, resilient_operation
from trackbridge.domain.entities import PlaylistSource

# Get contextual logger with service binding
logger = get_logger(__name__).bind(service="spotify")


def _release_year(album: dict[str, Any]) -> int | None:
    release_date = album.get("release_date") or ""
    return int(release_date[:4]) if release_date[:4].isdigit() else None


def convert_spotify_track(track: dict[str, Any], position: int) -> ImportTrack:
    """Convert a Spotify track object to an import track."""
    album = track.get("album") or {}
    images = album.get("images") or []
    return ImportTrack(
        position=position,
        title=track.get("name", ""),
        artist_names=[
            artist["name"] for artist in track.get("artists", []) if artist.get("name")
        ],
        release_year=_release_year(album),
        image_url=images[0].get("url") if images else None,
        source_track_id=track.get("id"),
        isrc=(track.get("external_ids") or {}).get("isrc"),
    )


def playable_tracks(items: list[dict[str, Any]]) -> list[dict[str, Any]]:
    """Track objects of playlist items, minus local files and removed tracks."""
    tracks = []
    for item in items:
        track = item.get("track")
        if track is None or item.get("is_local") or track.get("is_local"):
            continue
        if not track.get("id") or track.get("type", "track") != "track":
            continue
        tracks.append(track)
    return tracks


@define(slots=True)
class SpotifyPlaylistReader:
    """Implements ``SourcePlaylistReader`` for Spotify playlists."""

    access_token: str = field(repr=False)
    market: str | None = None
    client: spotipy.Spotify = field(init=False, repr=False)

    def __attrs_post_init__(self) -> None:
        logger.debug("Initializing Spotify playlist reader")
        self.client = spotipy.Spotify(auth=self.access_token, retries=0)

    @resilient_operation("get_spotify_playlist")
    @backoff.on_exception(backoff.expo, spotipy.SpotifyException, max_tries=3)
    async def get_playlist(
        self, source_playlist_id: str, owner_id: str
    ) -> ImportPlaylistCommand:
        """Fetch a Spotify playlist with all its tracks."""
        raw_playlist = await asyncio.to_thread(
            self.client.playlist, source_playlist_id, market=self.market
        )
        if not isinstance(raw_playlist, dict):
            raise ValueError(f"Invalid playlist response for ID {source_playlist_id}")

        page = raw_playlist["tracks"]
        items = list(page["items"])
        while page.get("next"):
            page = await asyncio.to_thread(self.client.next, page)
            if page is None or "items" not in page:
                logger.warning("Received invalid tracks data during pagination")
                break
            items.extend(page["items"])

        tracks = [
            convert_spotify_track(track, position)
            for position, track in enumerate(playable_tracks(items))
        ]
        skipped = len(items) - len(tracks)
        if skipped:
            logger.debug(f"Skipped {skipped} local or unavailable items")

        images = raw_playlist.get("images") or []
        logger.info(
            f"Fetched Spotify playlist '{raw_playlist.get('name')}' "
            f"with {len(tracks)} tracks"
        )
        return ImportPlaylistCommand(
            owner_id=owner_id,
            source=PlaylistSource.SPOTIFY,
            source_playlist_id=source_playlist_id,
            name=raw_playlist.get("name") or source_playlist_id,
            description=raw_playlist.get("description") or None,
            image_url=images[0].get("url") if images else None,
            tracks=tracks,
        )
