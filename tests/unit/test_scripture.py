"""Unit tests for kholagy.scripture."""

from __future__ import annotations

from datetime import timedelta
from typing import TYPE_CHECKING, Any

import httpx
import pytest
import respx

from kholagy.config import ScriptureSettings
from kholagy.errors import ConfigurationError, UpstreamError
from kholagy.scripture import ScriptureAdapter, parse_search

if TYPE_CHECKING:
    from kholagy.fetcher import JsonFetcher
    from kholagy.orchestrator import CacheOrchestrator
    from tests.unit.conftest import FakeClock

SCRIPTURE_BASE = "https://api.scripture.api.bible/v1"
TRANSLATION_EN = "de4e12af7f28f599-02"


@pytest.fixture()
def adapter(fetcher: JsonFetcher, orchestrator: CacheOrchestrator) -> ScriptureAdapter:
    return ScriptureAdapter(fetcher, orchestrator, ScriptureSettings(api_key="test-key"))


def _search_payload(*verse_ids: str) -> dict[str, Any]:
    return {
        "data": {
            "query": "love",
            "verses": [
                {"id": vid, "bookId": vid.split(".")[0], "reference": vid, "text": "  God   is\nlove "}
                for vid in verse_ids
            ],
        }
    }


class TestResolveTranslationId:
    def test_explicit_id_wins(self, adapter: ScriptureAdapter) -> None:
        assert adapter.resolve_translation_id("custom-01", "ar") == "custom-01"

    def test_language_table(self, adapter: ScriptureAdapter) -> None:
        assert adapter.resolve_translation_id(None, "ru") == "c9e485b1eb295f0c-01"

    def test_regional_tag_uses_base_language(self, adapter: ScriptureAdapter) -> None:
        assert adapter.resolve_translation_id(None, "ar-EG") == "65eec8e0b60e656b-01"

    def test_unknown_language_falls_back_to_default(self, adapter: ScriptureAdapter) -> None:
        assert adapter.resolve_translation_id(None, "cop") == TRANSLATION_EN

    def test_missing_default_raises(self, fetcher: JsonFetcher, orchestrator: CacheOrchestrator) -> None:
        adapter = ScriptureAdapter(fetcher, orchestrator, ScriptureSettings(translations={}))
        with pytest.raises(ConfigurationError):
            adapter.resolve_translation_id()


class TestCatalogs:
    @respx.mock
    async def test_get_books_sends_api_key_and_caches(self, adapter: ScriptureAdapter, books_payload: dict) -> None:
        route = respx.get(f"{SCRIPTURE_BASE}/bibles/{TRANSLATION_EN}/books").mock(
            return_value=httpx.Response(200, json=books_payload)
        )

        first = await adapter.get_books()
        second = await adapter.get_books(language="en")

        assert [b.id for b in first] == ["GEN", "1SAM", "TOB", "JHN", "XYZ"]
        assert first[0].name_long == "The First Book of Moses"
        assert second == first
        assert route.call_count == 1
        assert route.calls.last.request.headers["api-key"] == "test-key"

    async def test_missing_api_key_raises_before_network(
        self, fetcher: JsonFetcher, orchestrator: CacheOrchestrator
    ) -> None:
        adapter = ScriptureAdapter(fetcher, orchestrator, ScriptureSettings(api_key="  "))
        with respx.mock(assert_all_called=False) as mock:
            route = mock.get(url__startswith=SCRIPTURE_BASE)
            with pytest.raises(ConfigurationError):
                await adapter.get_books()
            assert route.call_count == 0

    @respx.mock
    async def test_list_bibles(self, adapter: ScriptureAdapter) -> None:
        respx.get(f"{SCRIPTURE_BASE}/bibles").mock(
            return_value=httpx.Response(
                200,
                json={"data": [{"id": "b1", "name": "KJV", "language": {"id": "eng"}}, {"name": "no id"}]},
            )
        )

        bibles = await adapter.list_bibles()

        assert [(b.id, b.language) for b in bibles] == [("b1", "eng")]

    @respx.mock
    async def test_get_chapters_derives_numbers(self, adapter: ScriptureAdapter) -> None:
        respx.get(f"{SCRIPTURE_BASE}/bibles/{TRANSLATION_EN}/books/GEN/chapters").mock(
            return_value=httpx.Response(200, json={"data": [{"id": "GEN.intro"}, {"id": "GEN.1", "number": "1"}]})
        )

        chapters = await adapter.get_chapters("GEN")

        assert [(c.id, c.number, c.reference) for c in chapters] == [
            ("GEN.intro", "intro", "GEN intro"),
            ("GEN.1", "1", "GEN 1"),
        ]

    @respx.mock
    async def test_get_book_groups(self, adapter: ScriptureAdapter, books_payload: dict) -> None:
        respx.get(f"{SCRIPTURE_BASE}/bibles/{TRANSLATION_EN}/books").mock(
            return_value=httpx.Response(200, json=books_payload)
        )

        groups = await adapter.get_book_groups()

        assert [g.key for g in groups] == ["old_testament", "deuterocanon", "new_testament", "other"]


class TestChapterContent:
    @respx.mock
    async def test_normalizes_and_requests_json_content(
        self, adapter: ScriptureAdapter, chapter_payload: dict
    ) -> None:
        route = respx.get(f"{SCRIPTURE_BASE}/bibles/{TRANSLATION_EN}/chapters/JHN.3").mock(
            return_value=httpx.Response(200, json=chapter_payload)
        )

        chapter = await adapter.get_chapter_content("JHN.3")

        assert [v.id for v in chapter.verses] == ["JHN.3.16", "JHN.3.17"]
        params = route.calls.last.request.url.params
        assert params["content-type"] == "json"
        assert params["include-notes"] == "false"

    @respx.mock
    async def test_expired_chapter_served_stale_when_upstream_down(
        self, adapter: ScriptureAdapter, chapter_payload: dict, clock: FakeClock
    ) -> None:
        route = respx.get(f"{SCRIPTURE_BASE}/bibles/{TRANSLATION_EN}/chapters/JHN.3")
        route.mock(return_value=httpx.Response(200, json=chapter_payload))
        fresh = await adapter.get_chapter_content("JHN.3")

        clock.advance(timedelta(hours=7))
        route.mock(return_value=httpx.Response(503))
        stale = await adapter.get_chapter_content("JHN.3")

        assert stale == fresh
        assert route.call_count == 2

    @respx.mock
    async def test_failure_without_cache_raises(self, adapter: ScriptureAdapter) -> None:
        respx.get(f"{SCRIPTURE_BASE}/bibles/{TRANSLATION_EN}/chapters/JHN.3").mock(
            return_value=httpx.Response(500)
        )
        with pytest.raises(UpstreamError):
            await adapter.get_chapter_content("JHN.3")


class TestSearch:
    async def test_blank_query_returns_empty_without_network(self, adapter: ScriptureAdapter) -> None:
        with respx.mock(assert_all_called=False) as mock:
            route = mock.get(url__startswith=SCRIPTURE_BASE)
            assert await adapter.search("   ") == []
            assert route.call_count == 0

    @respx.mock
    async def test_hits_are_identified_by_verse_and_query(self, adapter: ScriptureAdapter) -> None:
        route = respx.get(f"{SCRIPTURE_BASE}/bibles/{TRANSLATION_EN}/search").mock(
            return_value=httpx.Response(200, json=_search_payload("1JN.4.8", "1JN.4.16"))
        )

        hits = await adapter.search("  love ")

        assert [h.id for h in hits] == ["1JN.4.8:love", "1JN.4.16:love"]
        assert hits[0].text == "God is love"
        assert hits[0].chapter_id == "1JN.4"
        params = route.calls.last.request.url.params
        assert params["query"] == "love"
        assert params["limit"] == "25"

    @respx.mock
    async def test_cache_shared_across_case_but_ids_follow_caller(self, adapter: ScriptureAdapter) -> None:
        route = respx.get(f"{SCRIPTURE_BASE}/bibles/{TRANSLATION_EN}/search").mock(
            return_value=httpx.Response(200, json=_search_payload("1JN.4.8"))
        )

        await adapter.search("Love")
        hits = await adapter.search("love")

        assert route.call_count == 1
        assert [h.id for h in hits] == ["1JN.4.8:love"]

    def test_missing_verses_means_no_hits(self) -> None:
        assert parse_search({"data": {"query": "zzz", "total": 0}}, "zzz") == []
