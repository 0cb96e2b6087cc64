"""Connectors to external music catalogs."""

from trackbridge.infrastructure.connectors.apple_music import (
    AppleMusicConnector,
    CatalogError,
    CatalogRateLimitError,
    parse_song,
)
from trackbridge.infrastructure.connectors.spotify import (
    SpotifyPlaylistReader,
    convert_spotify_track,
    playable_tracks,
)

__all__ = [
    "AppleMusicConnector",
    "CatalogError",
    "CatalogRateLimitError",
    "SpotifyPlaylistReader",
    "convert_spotify_track",
    "parse_song",
    "playable_tracks",
]
