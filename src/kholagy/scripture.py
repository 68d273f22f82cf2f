"""Scripture adapter for an API.Bible-shaped upstream.

Resolves translation ids, then serves catalogs, chapter content and search
through the cache orchestrator. Chapter content goes through the
content-tree normalizer before it is cached, so the cache holds the same
NormalizedChapter the caller receives.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

import structlog
from pydantic import TypeAdapter

from kholagy.aliases import collapse_whitespace, first_present
from kholagy.books import group_books
from kholagy.errors import ConfigurationError, ParseError
from kholagy.fetcher import join_url
from kholagy.languages import normalize_language
from kholagy.models.scripture import (
    BibleBook,
    BibleChapter,
    BibleSummary,
    BookGroup,
    NormalizedChapter,
    SearchHit,
)
from kholagy.normalizer import normalize_chapter

if TYPE_CHECKING:
    from kholagy.config import CacheTtlSettings, ScriptureSettings
    from kholagy.orchestrator import CacheOrchestrator
    from kholagy.protocols import JsonFetcherProtocol

log = structlog.get_logger()

_BIBLES = TypeAdapter(list[BibleSummary])
_BOOKS = TypeAdapter(list[BibleBook])
_CHAPTERS = TypeAdapter(list[BibleChapter])
_CHAPTER = TypeAdapter(NormalizedChapter)
_HITS = TypeAdapter(list[SearchHit])


def _data_list(payload: Any, what: str) -> list[Any]:
    data = payload.get("data") if isinstance(payload, Mapping) else None
    if not isinstance(data, list):
        raise ParseError(f"Expected a 'data' list in the {what} response")
    return data


def _language_code(raw: Any) -> str | None:
    language = raw.get("language") if isinstance(raw, Mapping) else None
    if isinstance(language, Mapping):
        return first_present(language, ("id", "code", "name"))
    return first_present(raw, ("language",))


def parse_bibles(payload: Any) -> list[BibleSummary]:
    bibles: list[BibleSummary] = []
    for raw in _data_list(payload, "bibles"):
        bible_id = first_present(raw, ("id",))
        if bible_id is None:
            continue
        bibles.append(
            BibleSummary(
                id=bible_id,
                name=first_present(raw, ("name", "nameLocal", "abbreviation")) or bible_id,
                abbreviation=first_present(raw, ("abbreviation", "abbreviationLocal")),
                language=_language_code(raw),
                description=first_present(raw, ("description", "descriptionLocal")),
            )
        )
    return bibles


def parse_books(payload: Any) -> list[BibleBook]:
    books: list[BibleBook] = []
    for raw in _data_list(payload, "books"):
        book_id = first_present(raw, ("id", "bookId"))
        if book_id is None:
            continue
        books.append(
            BibleBook(
                id=book_id,
                name=first_present(raw, ("name", "nameLong", "abbreviation")) or book_id,
                abbreviation=first_present(raw, ("abbreviation",)),
                name_long=first_present(raw, ("nameLong",)),
                testament=first_present(raw, ("testament",)),
            )
        )
    return books


def parse_chapters(payload: Any, book_id: str) -> list[BibleChapter]:
    chapters: list[BibleChapter] = []
    for raw in _data_list(payload, "chapters"):
        chapter_id = first_present(raw, ("id",))
        if chapter_id is None:
            continue
        number = first_present(raw, ("number",)) or chapter_id.rsplit(".", 1)[-1]
        chapters.append(
            BibleChapter(
                id=chapter_id,
                book_id=first_present(raw, ("bookId",)) or book_id,
                number=number,
                reference=first_present(raw, ("reference",)) or f"{book_id} {number}",
            )
        )
    return chapters


def parse_search(payload: Any, query: str) -> list[SearchHit]:
    data = payload.get("data") if isinstance(payload, Mapping) else None
    verses = data.get("verses") if isinstance(data, Mapping) else None
    if not isinstance(verses, list):
        # Upstream omits "verses" entirely when nothing matched.
        return []

    hits: list[SearchHit] = []
    for raw in verses:
        verse_id = first_present(raw, ("id", "verseId"))
        if verse_id is None:
            continue
        hits.append(
            SearchHit(
                id=f"{verse_id}:{query}",
                verse_id=verse_id,
                book_id=first_present(raw, ("bookId",)) or verse_id.split(".", 1)[0],
                chapter_id=first_present(raw, ("chapterId",)) or verse_id.rsplit(".", 1)[0],
                reference=first_present(raw, ("reference",)) or verse_id,
                text=collapse_whitespace(first_present(raw, ("text", "content"))),
            )
        )
    return hits


class ScriptureAdapter:
    """Typed, cached access to the scripture upstream."""

    def __init__(
        self,
        fetcher: JsonFetcherProtocol,
        orchestrator: CacheOrchestrator,
        settings: ScriptureSettings,
    ) -> None:
        self._fetcher = fetcher
        self._orchestrator = orchestrator
        self._settings = settings

    @property
    def _ttl(self) -> CacheTtlSettings:
        return self._orchestrator.settings.ttl

    def resolve_translation_id(
        self,
        translation_id: str | None = None,
        language: str | None = None,
    ) -> str:
        """Pick a translation: explicit id → language table → default language.

        Pure lookup; never touches the network.
        """
        if translation_id:
            return translation_id
        table = self._settings.translations
        if language:
            resolved = table.get(normalize_language(language))
            if resolved:
                return resolved
        default = table.get(self._settings.default_language)
        if not default:
            raise ConfigurationError(
                message=f"No translation configured for default language {self._settings.default_language!r}",
                suggestion="Add the default language to scripture.translations.",
            )
        return default

    def _api_key(self) -> str:
        api_key = self._settings.api_key.strip()
        if not api_key:
            raise ConfigurationError(
                message="Missing API.Bible key.",
                suggestion="Set KHOLAGY__SCRIPTURE__API_KEY or scripture.api_key in kholagy.yaml.",
            )
        return api_key

    async def _request(self, path: str, params: dict[str, str | int] | None = None) -> Any:
        return await self._fetcher.get_json(
            join_url(self._settings.base_url, path),
            params=params,
            headers={"api-key": self._api_key()},
        )

    # ------------------------------------------------------------------
    # Catalogs
    # ------------------------------------------------------------------

    async def list_bibles(self) -> list[BibleSummary]:
        async def fetch() -> list[BibleSummary]:
            return parse_bibles(await self._request("/bibles"))

        return await self._orchestrator.fetch_with_cache(
            "scripture:bibles", self._ttl.catalog, fetch, adapter=_BIBLES
        )

    async def get_books(
        self,
        translation_id: str | None = None,
        language: str | None = None,
    ) -> list[BibleBook]:
        tid = self.resolve_translation_id(translation_id, language)

        async def fetch() -> list[BibleBook]:
            return parse_books(await self._request(f"/bibles/{tid}/books"))

        return await self._orchestrator.fetch_with_cache(
            f"scripture:{tid}:books", self._ttl.catalog, fetch, adapter=_BOOKS
        )

    async def get_book_groups(
        self,
        translation_id: str | None = None,
        language: str | None = None,
    ) -> list[BookGroup]:
        return group_books(await self.get_books(translation_id, language))

    async def get_chapters(
        self,
        book_id: str,
        translation_id: str | None = None,
        language: str | None = None,
    ) -> list[BibleChapter]:
        tid = self.resolve_translation_id(translation_id, language)

        async def fetch() -> list[BibleChapter]:
            payload = await self._request(f"/bibles/{tid}/books/{book_id}/chapters")
            return parse_chapters(payload, book_id)

        return await self._orchestrator.fetch_with_cache(
            f"scripture:{tid}:chapters:{book_id}", self._ttl.chapters, fetch, adapter=_CHAPTERS
        )

    # ------------------------------------------------------------------
    # Content
    # ------------------------------------------------------------------

    async def get_chapter_content(
        self,
        chapter_id: str,
        translation_id: str | None = None,
        language: str | None = None,
    ) -> NormalizedChapter:
        tid = self.resolve_translation_id(translation_id, language)

        async def fetch() -> NormalizedChapter:
            payload = await self._request(
                f"/bibles/{tid}/chapters/{chapter_id}",
                {"content-type": "json", "include-notes": "false"},
            )
            chapter = normalize_chapter(payload)
            log.debug("chapter_normalized", chapter_id=chapter.id, verses=len(chapter.verses))
            return chapter

        return await self._orchestrator.fetch_with_cache(
            f"scripture:{tid}:chapter:{chapter_id}", self._ttl.chapter_content, fetch, adapter=_CHAPTER
        )

    async def search(
        self,
        query: str,
        translation_id: str | None = None,
        language: str | None = None,
    ) -> list[SearchHit]:
        """Free-text search capped at ``search_limit`` hits. Blank queries return ``[]``."""
        trimmed = query.strip()
        if not trimmed:
            return []
        tid = self.resolve_translation_id(translation_id, language)

        async def fetch() -> list[SearchHit]:
            payload = await self._request(
                f"/bibles/{tid}/search",
                {"query": trimmed, "limit": self._settings.search_limit},
            )
            return parse_search(payload, trimmed)

        hits = await self._orchestrator.fetch_with_cache(
            f"scripture:{tid}:search:{trimmed.lower()}", self._ttl.search, fetch, adapter=_HITS
        )
        # The cache key is case-insensitive; hit identities follow this caller's query.
        return [hit.model_copy(update={"id": f"{hit.verse_id}:{trimmed}"}) for hit in hits]
