"""Pure domain types for resolving tracks against the target catalog."""

from typing import Literal

from attrs import define, field, validators

MatchMethod = Literal["isrc", "similarity", "best_guess"]

# Terminal reasons recorded on unmatched tracks
SEARCH_FAILED = "Search failed"
NO_RESULTS_FOUND = "No results found"


@define(frozen=True, slots=True)
class TrackDescriptor:
    """What the resolver knows about a track it has to find."""

    title: str
    artist: str
    storefront: str = "us"
    isrc: str | None = None

    @property
    def search_query(self) -> str:
        return f"{self.title} {self.artist}"


@define(frozen=True, slots=True)
class CatalogMatch:
    """A song as returned by the target catalog."""

    catalog_id: str = field(validator=validators.instance_of(str))
    title: str
    artist_name: str
    album_name: str = ""
    release_year: int | None = None
    release_date: str | None = None
    preview_url: str | None = None
    artwork_url: str | None = None
    isrc: str | None = None


@define(frozen=True, slots=True)
class Matched:
    """Successful resolution, with the method that produced it."""

    match: CatalogMatch
    match_method: MatchMethod


@define(frozen=True, slots=True)
class Unmatched:
    """Terminal resolution failure."""

    reason: str


ResolutionResult = Matched | Unmatched
