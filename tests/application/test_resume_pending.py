"""Tests for resuming interrupted playlists."""

from trackbridge.application.use_cases import (
    ImportPlaylistUseCase,
    ResumePendingPlaylistsUseCase,
)
from trackbridge.application.utilities import BatchJob, InlineBatchScheduler
from trackbridge.domain.entities import PlaylistSource


async def test_resume_enqueues_playlists_with_pending_tracks(uow_factory, command_factory):
    # Import schedules are dropped, as if the process died right after import
    importer = ImportPlaylistUseCase(uow_factory, InlineBatchScheduler())
    pending = await importer.execute(command_factory(3, source_playlist_id="a"))
    await importer.execute(
        command_factory(3, source_playlist_id="b", source=PlaylistSource.APPLE_MUSIC)
    )
    other = await importer.execute(command_factory(1, owner_id="user-2"))

    scheduler = InlineBatchScheduler()
    result = await ResumePendingPlaylistsUseCase(uow_factory, scheduler).execute("ca")

    assert result.resumed == 2
    assert result.playlist_ids == sorted([pending.playlist_id, other.playlist_id])
    assert list(scheduler.jobs) == [
        BatchJob(playlist_id, "ca") for playlist_id in result.playlist_ids
    ]


async def test_resume_with_nothing_pending(uow_factory):
    scheduler = InlineBatchScheduler()

    result = await ResumePendingPlaylistsUseCase(uow_factory, scheduler).execute()

    assert result.resumed == 0
    assert scheduler.pending == 0
