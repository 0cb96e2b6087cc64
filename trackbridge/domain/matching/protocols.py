"""Protocols for catalog lookup capabilities.

These protocols define contracts for the target catalog without depending on
external implementations, following the dependency inversion principle.
"""

from typing import Protocol

from .types import CatalogMatch


class CatalogLookup(Protocol):
    """Lookup capability of the catalog that serves playback.

    Both calls are remote and may raise; callers decide how to degrade.
    """

    async def lookup_by_isrc(self, isrc: str, storefront: str) -> CatalogMatch | None:
        """Find the catalog song carrying this ISRC in the storefront."""
        ...

    async def search(
        self, query: str, storefront: str, limit: int
    ) -> list[CatalogMatch]:
        """Ranked text search, best candidate first."""
        ...
