"""Resolve source tracks to songs in the target catalog.

Resolution order, stopping at the first success:

1. ISRC lookup, when the track has an ISRC. Lookup errors fall through.
2. Text search for "{title} {artist}". Errors and empty results are terminal.
3. First ranked candidate whose title and artist are both similar.
4. First ranked candidate, accepted as a best guess.

The best-guess step is deliberate policy: a playable but possibly wrong
song is preferred over an unmatched track.
"""

from trackbridge.config import get_config, get_logger
from trackbridge.domain.matching import (
    NO_RESULTS_FOUND,
    SEARCH_FAILED,
    CatalogLookup,
    CatalogMatch,
    Matched,
    ResolutionResult,
    TrackDescriptor,
    Unmatched,
    normalize,
    similar,
)

logger = get_logger(__name__)


class TrackResolver:
    """Stateless resolver over an injected catalog capability."""

    def __init__(self, catalog: CatalogLookup, search_limit: int | None = None):
        self.catalog = catalog
        self.search_limit = search_limit or get_config("CATALOG_SEARCH_LIMIT", 5)

    async def resolve(self, descriptor: TrackDescriptor) -> ResolutionResult:
        """Resolve one track descriptor.

        Never raises for catalog failures; those become an ``Unmatched``
        result or fall through to the next step.
        """
        if descriptor.isrc:
            try:
                match = await self.catalog.lookup_by_isrc(
                    descriptor.isrc, descriptor.storefront
                )
            except Exception as e:
                logger.warning(
                    f"ISRC lookup failed for {descriptor.isrc}, falling back to search: {e}"
                )
            else:
                if match is not None:
                    return Matched(match, "isrc")

        try:
            candidates = await self.catalog.search(
                descriptor.search_query, descriptor.storefront, self.search_limit
            )
        except Exception as e:
            logger.error(f"Catalog search failed for '{descriptor.search_query}': {e}")
            return Unmatched(SEARCH_FAILED)

        if not candidates:
            logger.debug(f"No catalog results for '{descriptor.search_query}'")
            return Unmatched(NO_RESULTS_FOUND)

        similar_match = self._first_similar(descriptor, candidates)
        if similar_match is not None:
            return Matched(similar_match, "similarity")

        best_guess = candidates[0]
        logger.debug(
            f"No similar candidate for '{descriptor.search_query}', "
            f"using best guess '{best_guess.title}' by {best_guess.artist_name}"
        )
        return Matched(best_guess, "best_guess")

    @staticmethod
    def _first_similar(
        descriptor: TrackDescriptor, candidates: list[CatalogMatch]
    ) -> CatalogMatch | None:
        title = normalize(descriptor.title)
        artist = normalize(descriptor.artist)

        for candidate in candidates:
            if similar(normalize(candidate.title), title) and similar(
                normalize(candidate.artist_name), artist
            ):
                return candidate
        return None
