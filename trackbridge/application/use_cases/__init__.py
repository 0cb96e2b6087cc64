"""Application use cases - orchestrate business operations."""

from .import_playlist import (
    ImportPlaylistCommand,
    ImportPlaylistResult,
    ImportPlaylistUseCase,
    ImportSourcePlaylistUseCase,
    ImportTrack,
    SourcePlaylistReader,
    seed_track,
)
from .process_playlist_batch import (
    BATCH_SIZE,
    RATE_LIMIT_DELAY_MS,
    ProcessPlaylistBatchCommand,
    ProcessPlaylistBatchResult,
    ProcessPlaylistBatchUseCase,
)
from .read_playlists import PlaylistDetail, PlaylistQueries, PlaylistSummary
from .resume_pending import ResumePendingPlaylistsUseCase, ResumePendingResult

__all__ = [
    "BATCH_SIZE",
    "RATE_LIMIT_DELAY_MS",
    "ImportPlaylistCommand",
    "ImportPlaylistResult",
    "ImportPlaylistUseCase",
    "ImportSourcePlaylistUseCase",
    "ImportTrack",
    "PlaylistDetail",
    "PlaylistQueries",
    "PlaylistSummary",
    "ProcessPlaylistBatchCommand",
    "ProcessPlaylistBatchResult",
    "ProcessPlaylistBatchUseCase",
    "ResumePendingPlaylistsUseCase",
    "ResumePendingResult",
    "SourcePlaylistReader",
    "seed_track",
]
