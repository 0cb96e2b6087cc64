"""JSON playlist snapshots accepted by ``trackbridge import``.

A snapshot is a playlist exported from a source catalog::

    {
      "source": "spotify",
      "source_playlist_id": "37i9dQZF1DXcBWIGoYBM5M",
      "name": "Today's Top Hits",
      "tracks": [
        {"title": "Song", "artist_names": ["Artist"], "isrc": "USUM71703861"}
      ]
    }

Tracks without an explicit ``position`` take their list index.
"""

from pathlib import Path

from pydantic import BaseModel, Field

from trackbridge.application.use_cases import ImportPlaylistCommand, ImportTrack
from trackbridge.domain.entities import PlaylistSource


class TrackSnapshot(BaseModel):
    position: int | None = Field(default=None, ge=0)
    title: str
    artist_names: list[str] = Field(default_factory=list)
    release_year: int | None = None
    image_url: str | None = None
    source_track_id: str | None = None
    isrc: str | None = None
    catalog_track_id: str | None = None
    catalog_album_name: str | None = None
    catalog_release_date: str | None = None
    preview_url: str | None = None
    artwork_url: str | None = None


class PlaylistSnapshot(BaseModel):
    source: PlaylistSource = PlaylistSource.SPOTIFY
    source_playlist_id: str = Field(min_length=1)
    name: str
    description: str | None = None
    image_url: str | None = None
    storefront: str | None = None
    tracks: list[TrackSnapshot] = Field(default_factory=list)

    def to_command(self, owner_id: str) -> ImportPlaylistCommand:
        return ImportPlaylistCommand(
            owner_id=owner_id,
            source=self.source,
            source_playlist_id=self.source_playlist_id,
            name=self.name,
            description=self.description,
            image_url=self.image_url,
            storefront=self.storefront,
            tracks=[
                ImportTrack(
                    **track.model_dump(exclude={"position"}),
                    position=index if track.position is None else track.position,
                )
                for index, track in enumerate(self.tracks)
            ],
        )


def load_snapshot(path: Path, owner_id: str) -> ImportPlaylistCommand:
    """Read and validate a snapshot file."""
    snapshot = PlaylistSnapshot.model_validate_json(path.read_text(encoding="utf-8"))
    return snapshot.to_command(owner_id)
