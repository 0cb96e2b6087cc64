"""Tests for batch reconciliation of pending playlist tracks.

Runs against an in-memory SQLite database with a fake catalog and an inline
scheduler, so every batch run can be observed.
"""

import pytest

from trackbridge.application.services import PlaylistStatusAggregator, TrackResolver
from trackbridge.application.use_cases import (
    ImportPlaylistCommand,
    ImportPlaylistUseCase,
    ImportTrack,
    ProcessPlaylistBatchCommand,
    ProcessPlaylistBatchUseCase,
)
from trackbridge.application.utilities import InlineBatchScheduler
from trackbridge.domain.entities import PlaylistSource, PlaylistStatus, TrackStatus
from trackbridge.domain.matching import NO_RESULTS_FOUND, SEARCH_FAILED, CatalogMatch


@pytest.fixture
def scheduler():
    return InlineBatchScheduler()


def build_batch(uow_factory, catalog, scheduler, rate_limiter, batch_size=10):
    return ProcessPlaylistBatchUseCase(
        uow_factory=uow_factory,
        resolver=TrackResolver(catalog, search_limit=5),
        scheduler=scheduler,
        rate_limiter=rate_limiter,
        aggregator=PlaylistStatusAggregator(uow_factory),
        batch_size=batch_size,
    )


async def import_playlist(uow_factory, scheduler, command):
    return await ImportPlaylistUseCase(uow_factory, scheduler).execute(command)


async def drain(scheduler, use_case):
    results = []

    async def handler(job):
        results.append(
            await use_case.execute(ProcessPlaylistBatchCommand.from_job(job))
        )

    await scheduler.drain(handler)
    return results


async def load_tracks(uow_factory, playlist_id):
    async with uow_factory() as uow:
        return await uow.get_track_repository().list_tracks(playlist_id)


async def load_playlist(uow_factory, playlist_id):
    async with uow_factory() as uow:
        return await uow.get_playlist_repository().get_playlist(playlist_id)


class TestFullReconciliation:
    """A playlist is processed to completion through chained batch runs."""

    async def test_twenty_five_tracks_take_three_runs(
        self, uow_factory, scheduler, fake_catalog, counting_rate_limiter, command_factory
    ):
        imported = await import_playlist(uow_factory, scheduler, command_factory(25))
        use_case = build_batch(uow_factory, fake_catalog, scheduler, counting_rate_limiter)

        results = await drain(scheduler, use_case)

        assert [result.processed for result in results] == [10, 10, 5]
        assert [result.rescheduled for result in results] == [True, True, False]
        assert fake_catalog.resolutions == 25
        assert counting_rate_limiter.calls == 25

        playlist = await load_playlist(uow_factory, imported.playlist_id)
        assert playlist.status == PlaylistStatus.READY
        assert playlist.total_tracks == 25
        assert playlist.ready_tracks + playlist.unmatched_tracks == 25
        assert playlist.pending_tracks == 0

    async def test_tracks_are_processed_in_position_order(
        self, uow_factory, scheduler, fake_catalog, counting_rate_limiter, command_factory
    ):
        await import_playlist(uow_factory, scheduler, command_factory(12))
        use_case = build_batch(uow_factory, fake_catalog, scheduler, counting_rate_limiter)

        await drain(scheduler, use_case)

        queries = [query for query, _, _ in fake_catalog.search_calls]
        assert queries == [f"Song {i} Artist {i}" for i in range(12)]

    async def test_matched_tracks_carry_catalog_data(
        self, uow_factory, scheduler, fake_catalog, counting_rate_limiter, command_factory
    ):
        imported = await import_playlist(uow_factory, scheduler, command_factory(1))
        use_case = build_batch(uow_factory, fake_catalog, scheduler, counting_rate_limiter)

        results = await drain(scheduler, use_case)

        (track,) = await load_tracks(uow_factory, imported.playlist_id)
        assert track.status == TrackStatus.READY
        assert track.catalog_track_id == "am-1"
        assert track.catalog_title == "Song 0 Artist 0"
        assert track.catalog_release_year == 2001
        assert track.preview_url == "https://audio.example/1.m4a"
        assert track.unmatched_reason is None
        assert results[0].match_methods == {"best_guess": 1}

    async def test_batch_size_is_configurable(
        self, uow_factory, scheduler, fake_catalog, counting_rate_limiter, command_factory
    ):
        await import_playlist(uow_factory, scheduler, command_factory(7))
        use_case = build_batch(
            uow_factory, fake_catalog, scheduler, counting_rate_limiter, batch_size=3
        )

        results = await drain(scheduler, use_case)

        assert [result.processed for result in results] == [3, 3, 1]

    def test_batch_size_must_be_positive(self, scheduler, fake_catalog):
        with pytest.raises(ValueError, match="Batch size must be positive"):
            build_batch(None, fake_catalog, scheduler, None, batch_size=0)


class TestUnmatchedOutcomes:
    """Catalog failures end as unmatched tracks, never as crashed runs."""

    async def test_search_failure_marks_track_unmatched(
        self, uow_factory, scheduler, catalog_factory, counting_rate_limiter, command_factory
    ):
        catalog = catalog_factory(search_error=ConnectionError("catalog down"))
        imported = await import_playlist(uow_factory, scheduler, command_factory(3))
        use_case = build_batch(uow_factory, catalog, scheduler, counting_rate_limiter)

        (result,) = await drain(scheduler, use_case)

        assert result.unmatched == 3
        tracks = await load_tracks(uow_factory, imported.playlist_id)
        assert {track.status for track in tracks} == {TrackStatus.UNMATCHED}
        assert {track.unmatched_reason for track in tracks} == {SEARCH_FAILED}

        playlist = await load_playlist(uow_factory, imported.playlist_id)
        assert playlist.status == PlaylistStatus.READY
        assert playlist.unmatched_tracks == 3

    async def test_empty_results_marks_track_unmatched(
        self, uow_factory, scheduler, catalog_factory, counting_rate_limiter, command_factory
    ):
        catalog = catalog_factory(search_results={})
        imported = await import_playlist(uow_factory, scheduler, command_factory(1))
        use_case = build_batch(uow_factory, catalog, scheduler, counting_rate_limiter)

        await drain(scheduler, use_case)

        (track,) = await load_tracks(uow_factory, imported.playlist_id)
        assert track.unmatched_reason == NO_RESULTS_FOUND
        assert track.catalog_track_id is None

    async def test_unmatched_track_carries_no_catalog_data(
        self, uow_factory, scheduler, catalog_factory, counting_rate_limiter
    ):
        command = ImportPlaylistCommand(
            owner_id="user-1",
            source=PlaylistSource.SPOTIFY,
            source_playlist_id="sp-1",
            name="Mix",
            tracks=[
                ImportTrack(
                    position=0,
                    title="Song",
                    artist_names=["A"],
                    catalog_track_id="am-7",
                    preview_url="https://audio.example/7.m4a",
                    artwork_url="https://img.example/7.jpg",
                )
            ],
        )
        imported = await import_playlist(uow_factory, scheduler, command)

        (pending,) = await load_tracks(uow_factory, imported.playlist_id)
        assert pending.status == TrackStatus.PENDING
        assert pending.catalog_track_id is None
        assert pending.preview_url is None

        use_case = build_batch(
            uow_factory, catalog_factory(search_results={}), scheduler, counting_rate_limiter
        )
        await drain(scheduler, use_case)

        (track,) = await load_tracks(uow_factory, imported.playlist_id)
        assert track.status == TrackStatus.UNMATCHED
        assert track.unmatched_reason == NO_RESULTS_FOUND
        assert track.catalog_track_id is None
        assert track.preview_url is None
        assert track.artwork_url is None


class TestReimportAfterProcessing:
    async def test_shorter_reimport_resets_counts(
        self, uow_factory, scheduler, catalog_factory, counting_rate_limiter, command_factory
    ):
        # Even positions find a candidate, odd positions find nothing
        catalog = catalog_factory(
            search_results={
                f"Song {i} Artist {i}": [
                    CatalogMatch(
                        catalog_id=f"am-{i}",
                        title=f"Song {i}",
                        artist_name=f"Artist {i}",
                        release_year=2001,
                    )
                ]
                for i in (0, 2, 4)
            }
        )
        imported = await import_playlist(uow_factory, scheduler, command_factory(5))
        await drain(
            scheduler, build_batch(uow_factory, catalog, scheduler, counting_rate_limiter)
        )
        processed = await load_playlist(uow_factory, imported.playlist_id)
        assert (processed.ready_tracks, processed.unmatched_tracks) == (3, 2)

        await import_playlist(uow_factory, scheduler, command_factory(2))

        playlist = await load_playlist(uow_factory, imported.playlist_id)
        assert playlist.total_tracks == 2
        assert playlist.ready_tracks == 0
        assert playlist.unmatched_tracks == 0
        assert playlist.status == PlaylistStatus.PROCESSING
        tracks = await load_tracks(uow_factory, imported.playlist_id)
        assert len(tracks) == 2
        assert {track.status for track in tracks} == {TrackStatus.PENDING}


class TestStaleness:
    """Runs racing a re-import leave the new import untouched."""

    async def test_missing_playlist_is_a_stale_job(
        self, uow_factory, scheduler, fake_catalog, counting_rate_limiter
    ):
        use_case = build_batch(uow_factory, fake_catalog, scheduler, counting_rate_limiter)

        result = await use_case.execute(ProcessPlaylistBatchCommand(playlist_id=999))

        assert result.stale_job
        assert fake_catalog.resolutions == 0

    async def test_superseded_generation_is_a_stale_job(
        self, uow_factory, scheduler, fake_catalog, counting_rate_limiter, command_factory
    ):
        imported = await import_playlist(uow_factory, scheduler, command_factory(3))
        await import_playlist(uow_factory, scheduler, command_factory(3))
        use_case = build_batch(uow_factory, fake_catalog, scheduler, counting_rate_limiter)

        result = await use_case.execute(
            ProcessPlaylistBatchCommand(
                playlist_id=imported.playlist_id, import_generation=1
            )
        )

        assert result.stale_job
        assert result.processed == 0
        assert fake_catalog.resolutions == 0
        assert counting_rate_limiter.calls == 0

    async def test_reimport_during_batch_discards_old_results(
        self, uow_factory, scheduler, catalog_factory, counting_rate_limiter, command_factory
    ):
        imported = await import_playlist(uow_factory, scheduler, command_factory(4))
        reimported = []

        class ReimportingCatalog(catalog_factory):
            async def search(self, query, storefront, limit):
                if not reimported:
                    reimported.append(
                        await import_playlist(
                            uow_factory, scheduler, command_factory(2)
                        )
                    )
                return await super().search(query, storefront, limit)

        use_case = build_batch(
            uow_factory, ReimportingCatalog(), scheduler, counting_rate_limiter
        )
        first_job = scheduler.jobs.popleft()

        result = await use_case.execute(ProcessPlaylistBatchCommand.from_job(first_job))

        assert result.processed == 4
        assert result.stale == 4
        assert result.matched == 0

        tracks = await load_tracks(uow_factory, imported.playlist_id)
        assert len(tracks) == 2
        assert {track.status for track in tracks} == {TrackStatus.PENDING}
        assert {track.import_generation for track in tracks} == {2}

        # The old generation's follow-up run is dropped, the new one completes
        follow_up = build_batch(
            uow_factory, catalog_factory(), scheduler, counting_rate_limiter
        )
        results = await drain(scheduler, follow_up)
        assert [result.stale_job for result in results] == [False, True]
        playlist = await load_playlist(uow_factory, imported.playlist_id)
        assert playlist.status == PlaylistStatus.READY
        assert playlist.total_tracks == 2
        assert playlist.ready_tracks == 2


class TestTerminalStates:
    async def test_no_pending_tracks_only_recomputes(
        self, uow_factory, scheduler, fake_catalog, counting_rate_limiter, command_factory
    ):
        imported = await import_playlist(uow_factory, scheduler, command_factory(2))
        use_case = build_batch(uow_factory, fake_catalog, scheduler, counting_rate_limiter)
        await drain(scheduler, use_case)

        result = await use_case.execute(
            ProcessPlaylistBatchCommand(playlist_id=imported.playlist_id)
        )

        assert result.processed == 0
        assert not result.rescheduled
        assert result.counts.ready == 2
        assert fake_catalog.resolutions == 2

    async def test_failed_playlist_stays_failed(
        self, uow_factory, scheduler, fake_catalog, counting_rate_limiter, command_factory
    ):
        imported = await import_playlist(uow_factory, scheduler, command_factory(2))
        async with uow_factory() as uow:
            await uow.get_playlist_repository().mark_failed(imported.playlist_id)
        use_case = build_batch(uow_factory, fake_catalog, scheduler, counting_rate_limiter)

        await drain(scheduler, use_case)

        playlist = await load_playlist(uow_factory, imported.playlist_id)
        assert playlist.status == PlaylistStatus.FAILED
        assert playlist.ready_tracks == 2
