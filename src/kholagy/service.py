"""Content service facade.

Every getter returns a ``ContentResult``: the normalized value plus the
request token for its scope, whether any part of it was served from expired
cache, and which language was actually served. Scopes default to the getter
name; a UI with two independent panes can pass its own scope per pane.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, TypeVar

from pydantic_core import to_jsonable_python

from kholagy.coptic import COPTIC_MONTH_NAMES
from kholagy.documents import search_document
from kholagy.languages import normalize_language
from kholagy.orchestrator import track_freshness
from kholagy.tokens import RequestTracker, Tracked

if TYPE_CHECKING:
    from collections.abc import Awaitable
    from datetime import date

    from kholagy.config import ScriptureSettings
    from kholagy.coptic import CopticCalendarAdapter
    from kholagy.documents import DocumentResolver
    from kholagy.models import (
        BibleBook,
        BibleChapter,
        BibleSummary,
        BookGroup,
        CopticDateInfo,
        DailyReadingItem,
        DailyReadings,
        DocumentSearchHit,
        FastInfo,
        FeastDay,
        LiturgyDocument,
        NormalizedChapter,
        SearchHit,
        SynaxariumEntry,
    )
    from kholagy.orthocal import OrthocalAdapter
    from kholagy.scripture import ScriptureAdapter
    from kholagy.synaxarium import SynaxariumResolver
    from kholagy.tokens import RequestToken

T = TypeVar("T")


@dataclass(frozen=True)
class ContentResult(Tracked[T]):
    stale: bool = False
    language: str | None = None
    is_fallback_language: bool = False

    def to_dict(self) -> dict:
        return {
            "value": to_jsonable_python(self.value),
            "token": {"scope": self.token.scope, "sequence": self.token.sequence},
            "stale": self.stale,
            "language": self.language,
            "is_fallback_language": self.is_fallback_language,
        }


class ContentService:
    def __init__(
        self,
        scripture: ScriptureAdapter,
        calendar: CopticCalendarAdapter,
        synaxarium: SynaxariumResolver,
        documents: DocumentResolver,
        orthocal: OrthocalAdapter | None = None,
        *,
        scripture_settings: ScriptureSettings,
        tracker: RequestTracker | None = None,
    ) -> None:
        self._scripture = scripture
        self._calendar = calendar
        self._synaxarium = synaxarium
        self._documents = documents
        self._orthocal = orthocal
        self._scripture_settings = scripture_settings
        self.tracker = tracker or RequestTracker()

    def is_current(self, token: RequestToken) -> bool:
        return self.tracker.is_current(token)

    async def _run(
        self,
        scope: str,
        call: Awaitable[T],
        *,
        language: str | None = None,
        is_fallback_language: bool = False,
    ) -> ContentResult[T]:
        token = self.tracker.begin(scope)
        with track_freshness() as served:
            value = await call
        return ContentResult(
            value=value,
            token=token,
            stale=any(cached.stale for cached in served),
            language=language,
            is_fallback_language=is_fallback_language,
        )

    def _scripture_language(self, translation_id: str | None, language: str | None) -> tuple[str, bool]:
        default = self._scripture_settings.default_language
        requested = normalize_language(language, default)
        if translation_id or requested in self._scripture_settings.translations:
            return requested, False
        return default, requested != default

    # ------------------------------------------------------------------
    # Scripture
    # ------------------------------------------------------------------

    async def list_bibles(self, *, scope: str = "bibles") -> ContentResult[list[BibleSummary]]:
        return await self._run(scope, self._scripture.list_bibles())

    async def get_books(
        self,
        translation_id: str | None = None,
        language: str | None = None,
        *,
        scope: str = "books",
    ) -> ContentResult[list[BibleBook]]:
        served, fallback = self._scripture_language(translation_id, language)
        return await self._run(
            scope,
            self._scripture.get_books(translation_id, language),
            language=served,
            is_fallback_language=fallback,
        )

    async def get_book_groups(
        self,
        translation_id: str | None = None,
        language: str | None = None,
        *,
        scope: str = "book_groups",
    ) -> ContentResult[list[BookGroup]]:
        served, fallback = self._scripture_language(translation_id, language)
        return await self._run(
            scope,
            self._scripture.get_book_groups(translation_id, language),
            language=served,
            is_fallback_language=fallback,
        )

    async def get_chapters(
        self,
        book_id: str,
        translation_id: str | None = None,
        language: str | None = None,
        *,
        scope: str = "chapters",
    ) -> ContentResult[list[BibleChapter]]:
        served, fallback = self._scripture_language(translation_id, language)
        return await self._run(
            scope,
            self._scripture.get_chapters(book_id, translation_id, language),
            language=served,
            is_fallback_language=fallback,
        )

    async def get_chapter_content(
        self,
        chapter_id: str,
        translation_id: str | None = None,
        language: str | None = None,
        *,
        scope: str = "chapter_content",
    ) -> ContentResult[NormalizedChapter]:
        served, fallback = self._scripture_language(translation_id, language)
        return await self._run(
            scope,
            self._scripture.get_chapter_content(chapter_id, translation_id, language),
            language=served,
            is_fallback_language=fallback,
        )

    async def search(
        self,
        query: str,
        translation_id: str | None = None,
        language: str | None = None,
        *,
        scope: str = "search",
    ) -> ContentResult[list[SearchHit]]:
        served, fallback = self._scripture_language(translation_id, language)
        return await self._run(
            scope,
            self._scripture.search(query, translation_id, language),
            language=served,
            is_fallback_language=fallback,
        )

    # ------------------------------------------------------------------
    # Calendar
    # ------------------------------------------------------------------

    async def get_coptic_date(
        self,
        gregorian: date,
        language: str | None = None,
        *,
        scope: str = "coptic_date",
    ) -> ContentResult[CopticDateInfo]:
        served = normalize_language(language) if language else None
        return await self._run(
            scope,
            self._calendar.get_coptic_date(gregorian, language),
            language=served,
            is_fallback_language=served is not None and served not in COPTIC_MONTH_NAMES,
        )

    async def get_daily_readings(
        self,
        year: int,
        month: int,
        day: int,
        *,
        scope: str = "daily_readings",
    ) -> ContentResult[DailyReadings]:
        return await self._run(scope, self._calendar.get_daily_readings(year, month, day))

    async def get_orthocal_readings(
        self, on: date, *, scope: str = "orthocal_readings"
    ) -> ContentResult[list[DailyReadingItem]]:
        return await self._run(scope, self._require_orthocal().get_daily_readings(on))

    async def get_feasts(self, on: date, *, scope: str = "feasts") -> ContentResult[list[FeastDay]]:
        return await self._run(scope, self._require_orthocal().get_feasts(on))

    async def get_fasts(self, on: date, *, scope: str = "fasts") -> ContentResult[list[FastInfo]]:
        return await self._run(scope, self._require_orthocal().get_fasts(on))

    def _require_orthocal(self) -> OrthocalAdapter:
        if self._orthocal is None:
            raise RuntimeError("Orthocal adapter is not configured")
        return self._orthocal

    # ------------------------------------------------------------------
    # Local content
    # ------------------------------------------------------------------

    async def get_synaxarium(
        self,
        month: int,
        day: int,
        language: str | None = None,
        *,
        scope: str = "synaxarium",
    ) -> ContentResult[list[SynaxariumEntry]]:
        token = self.tracker.begin(scope)
        requested = normalize_language(language)
        served, entries = await self._synaxarium.resolve_day(month, day, language)
        return ContentResult(
            value=entries,
            token=token,
            language=served,
            is_fallback_language=served is not None and served != requested,
        )

    async def load_document(
        self,
        document_id: str,
        language: str | None = None,
        *,
        scope: str = "document",
    ) -> ContentResult[LiturgyDocument | None]:
        token = self.tracker.begin(scope)
        document = self._documents.load_document(document_id, language)
        return ContentResult(
            value=document,
            token=token,
            language=document.language if document else None,
            is_fallback_language=document.is_fallback if document else False,
        )

    async def search_document(
        self,
        document_id: str,
        query: str,
        language: str | None = None,
        *,
        scope: str = "document_search",
    ) -> ContentResult[list[DocumentSearchHit]]:
        token = self.tracker.begin(scope)
        document = self._documents.load_document(document_id, language)
        hits = search_document(document.markdown, query) if document else []
        return ContentResult(
            value=hits,
            token=token,
            language=document.language if document else None,
            is_fallback_language=document.is_fallback if document else False,
        )
