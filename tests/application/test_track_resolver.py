"""Tests for TrackResolver resolution order and degradation."""

import pytest

from trackbridge.application.services import TrackResolver
from trackbridge.domain.matching import (
    NO_RESULTS_FOUND,
    SEARCH_FAILED,
    CatalogMatch,
    Matched,
    TrackDescriptor,
    Unmatched,
)


def catalog_song(catalog_id: str, title: str, artist: str) -> CatalogMatch:
    return CatalogMatch(
        catalog_id=catalog_id,
        title=title,
        artist_name=artist,
        release_year=1968,
        preview_url=f"https://audio.example/{catalog_id}.m4a",
    )


@pytest.fixture
def descriptor():
    return TrackDescriptor(title="Hey Jude", artist="The Beatles", storefront="gb")


class TestIsrcLookup:
    """ISRC lookup comes first and degrades to search."""

    async def test_isrc_hit_skips_search(self, catalog_factory):
        song = catalog_song("1", "Hey Jude", "The Beatles")
        catalog = catalog_factory(isrc_hits={"GBAYE0601498": song})
        resolver = TrackResolver(catalog, search_limit=5)

        result = await resolver.resolve(
            TrackDescriptor("Hey Jude", "The Beatles", "gb", isrc="GBAYE0601498")
        )

        assert result == Matched(song, "isrc")
        assert catalog.isrc_calls == [("GBAYE0601498", "gb")]
        assert catalog.search_calls == []

    async def test_isrc_miss_falls_back_to_search(self, catalog_factory):
        song = catalog_song("2", "Hey Jude", "The Beatles")
        catalog = catalog_factory(search_results={"Hey Jude The Beatles": [song]})
        resolver = TrackResolver(catalog, search_limit=5)

        result = await resolver.resolve(
            TrackDescriptor("Hey Jude", "The Beatles", "gb", isrc="UNKNOWN")
        )

        assert result == Matched(song, "similarity")
        assert len(catalog.isrc_calls) == 1
        assert len(catalog.search_calls) == 1

    async def test_isrc_error_is_swallowed(self, catalog_factory):
        song = catalog_song("3", "Hey Jude", "The Beatles")
        catalog = catalog_factory(
            isrc_error=RuntimeError("boom"),
            search_results={"Hey Jude The Beatles": [song]},
        )
        resolver = TrackResolver(catalog, search_limit=5)

        result = await resolver.resolve(
            TrackDescriptor("Hey Jude", "The Beatles", "gb", isrc="GBAYE0601498")
        )

        assert isinstance(result, Matched)
        assert result.match_method == "similarity"

    async def test_no_isrc_means_no_lookup(self, catalog_factory, descriptor):
        catalog = catalog_factory()
        await TrackResolver(catalog, search_limit=5).resolve(descriptor)
        assert catalog.isrc_calls == []


class TestSearch:
    """Search failures are terminal, candidates are ranked."""

    async def test_search_uses_title_artist_query_and_limit(self, catalog_factory, descriptor):
        catalog = catalog_factory()
        await TrackResolver(catalog, search_limit=5).resolve(descriptor)
        assert catalog.search_calls == [("Hey Jude The Beatles", "gb", 5)]

    async def test_search_error_is_unmatched(self, catalog_factory, descriptor):
        catalog = catalog_factory(search_error=ConnectionError("down"))
        result = await TrackResolver(catalog, search_limit=5).resolve(descriptor)
        assert result == Unmatched(SEARCH_FAILED)

    async def test_no_results_is_unmatched(self, catalog_factory, descriptor):
        catalog = catalog_factory(search_results={})
        result = await TrackResolver(catalog, search_limit=5).resolve(descriptor)
        assert result == Unmatched(NO_RESULTS_FOUND)

    async def test_first_similar_candidate_wins_over_rank(self, catalog_factory, descriptor):
        candidates = [
            catalog_song("10", "Hey Jude (Cover)", "Some Tribute Band"),
            catalog_song("11", "Hey Jude - Remastered 2015", "The Beatles"),
            catalog_song("12", "Hey Jude", "The Beatles"),
        ]
        catalog = catalog_factory(search_results={"Hey Jude The Beatles": candidates})

        result = await TrackResolver(catalog, search_limit=5).resolve(descriptor)

        assert result == Matched(candidates[1], "similarity")

    async def test_best_guess_when_nothing_is_similar(self, catalog_factory, descriptor):
        candidates = [
            catalog_song(str(index), f"Other Song {index}", f"Other Artist {index}")
            for index in range(5)
        ]
        catalog = catalog_factory(search_results={"Hey Jude The Beatles": candidates})

        result = await TrackResolver(catalog, search_limit=5).resolve(descriptor)

        match result:
            case Matched(match=match, match_method=method):
                assert match is candidates[0]
                assert method == "best_guess"
            case _:
                pytest.fail(f"Expected best guess, got {result}")

    async def test_similarity_ignores_case_and_punctuation(self, catalog_factory):
        song = catalog_song("20", "DON'T STOP ME NOW", "queen")
        catalog = catalog_factory(search_results={"Don't Stop Me Now Queen": [song]})

        result = await TrackResolver(catalog, search_limit=5).resolve(
            TrackDescriptor("Don't Stop Me Now", "Queen")
        )

        assert result == Matched(song, "similarity")

    async def test_search_limit_defaults_to_config(self, catalog_factory, descriptor):
        catalog = catalog_factory()
        await TrackResolver(catalog).resolve(descriptor)
        assert catalog.search_calls[0][2] == 5
