"""Track matching algorithms and types for cross-catalog identification."""

from .normalization import WORD_OVERLAP_THRESHOLD, normalize, similar, word_overlap
from .protocols import CatalogLookup
from .types import (
    NO_RESULTS_FOUND,
    SEARCH_FAILED,
    CatalogMatch,
    Matched,
    MatchMethod,
    ResolutionResult,
    TrackDescriptor,
    Unmatched,
)

__all__ = [
    "NO_RESULTS_FOUND",
    "SEARCH_FAILED",
    "WORD_OVERLAP_THRESHOLD",
    "CatalogLookup",
    "CatalogMatch",
    "MatchMethod",
    "Matched",
    "ResolutionResult",
    "TrackDescriptor",
    "Unmatched",
    "normalize",
    "similar",
    "word_overlap",
]
