"""Application services - stateless collaborators used by the use cases."""

from .status_aggregator import PlaylistStatusAggregator
from .track_resolver import TrackResolver

__all__ = [
    "PlaylistStatusAggregator",
    "TrackResolver",
]
