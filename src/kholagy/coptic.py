"""Coptic calendar adapter.

Converts Gregorian dates to Coptic dates and looks up the daily readings
for a Coptic date. The upstream route is not stable, so every call walks an
ordered list of candidate paths (see ``fetch_first_success``) and the
payloads are read through alias tables rather than fixed keys.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

import structlog
from pydantic import TypeAdapter

from kholagy.aliases import (
    as_integer,
    as_text,
    ensure_sequence,
    first_defined,
    first_present,
    resolve_segment,
)
from kholagy.errors import ParseError
from kholagy.fetcher import fetch_first_success
from kholagy.languages import BASE_LANGUAGE, normalize_language
from kholagy.models.calendar import CopticDateInfo, DailyReadingItem, DailyReadings

if TYPE_CHECKING:
    from collections.abc import Sequence
    from datetime import date

    from kholagy.config import CalendarSettings
    from kholagy.orchestrator import CacheOrchestrator
    from kholagy.protocols import JsonFetcherProtocol

log = structlog.get_logger()

# Index 0 is Thout; index 12 is the short intercalary month.
COPTIC_MONTH_NAMES: dict[str, tuple[str, ...]] = {
    "en": (
        "Thout",
        "Paopi",
        "Hathor",
        "Koiak",
        "Tobe",
        "Meshir",
        "Paremhat",
        "Paremoude",
        "Pashons",
        "Paoni",
        "Epip",
        "Mesori",
        "Nasi",
    ),
    "ar": (
        "توت",
        "بابه",
        "هاتور",
        "كيهك",
        "طوبة",
        "أمشير",
        "برمهات",
        "برمودة",
        "بشنس",
        "بؤونة",
        "أبيب",
        "مسرى",
        "نسيء",
    ),
    "ru": (
        "Тоут",
        "Баба",
        "Хатор",
        "Кияхк",
        "Тоба",
        "Амшир",
        "Бармахат",
        "Бармуде",
        "Башанс",
        "Пауни",
        "Эпеп",
        "Месра",
        "Наси",
    ),
}

DATE_SEGMENT_PATHS = (("coptic",), ("copticDate",), ("data", "coptic"), ("data", "calendar", "coptic"))
READINGS_SEGMENT_PATHS = (("readings",), ("data", "readings"), ("data", "calendar", "readings"))

YEAR_FIELDS = ("year", "copticYear")
MONTH_FIELDS = ("month", "copticMonth")
DAY_FIELDS = ("day", "copticDay", "dayOfMonth")
MONTH_NAME_FIELDS = ("monthName", "copticMonthName")

SERVICE_FIELDS: dict[str, tuple[str, ...]] = {
    "matins": ("matins", "Matins", "morning", "morningReadings", "matinsReadings"),
    "vespers": (
        "vespers",
        "Vespers",
        "evening",
        "eveningReadings",
        "vespersReadings",
        "eveningPrayer",
    ),
    "liturgy": (
        "liturgy",
        "Liturgy",
        "divineLiturgy",
        "mass",
        "liturgyReadings",
        "massReadings",
    ),
}
SERVICE_LABELS = {"matins": "Matins", "vespers": "Vespers", "liturgy": "Liturgy"}

TITLE_FIELDS = ("title", "name", "section", "reading", "description")
REFERENCE_FIELDS = ("citation", "reference", "ref", "passage")
TEXT_FIELDS = ("text", "content", "body")
SOURCE_FIELDS = ("service", "type", "liturgicalUse")
ID_FIELDS = ("id", "slug")

_DATE = TypeAdapter(CopticDateInfo)
_READINGS = TypeAdapter(DailyReadings)


def localized_month_name(month: int, language: str | None, fallback: str | None = None) -> str:
    """Name of Coptic month ``month`` (1–13) for ``language``.

    The localized table wins when the language is supported; otherwise the
    upstream-supplied ``fallback`` is used, then the English name.
    """
    if not 1 <= month <= 13:
        return fallback or ""
    table = COPTIC_MONTH_NAMES.get(normalize_language(language))
    if table is not None:
        return table[month - 1]
    return fallback or COPTIC_MONTH_NAMES[BASE_LANGUAGE][month - 1]


def parse_coptic_date(payload: Any, iso: str) -> CopticDateInfo:
    """Extract a CopticDateInfo from a date payload.

    There is no partial date: if year, month or day cannot be read as a
    finite integer the whole parse fails.
    """
    segment = resolve_segment(payload, DATE_SEGMENT_PATHS)
    year = as_integer(first_defined(segment, YEAR_FIELDS))
    month = as_integer(first_defined(segment, MONTH_FIELDS))
    day = as_integer(first_defined(segment, DAY_FIELDS))
    if year is None or month is None or day is None:
        raise ParseError(f"Unable to parse Coptic date payload for {iso}")
    if not 1 <= month <= 13:
        raise ParseError(f"Coptic month {month} out of range for {iso}")

    upstream_name = first_present(segment, MONTH_NAME_FIELDS)
    return CopticDateInfo(
        year=year,
        month=month,
        day=day,
        month_name=upstream_name or COPTIC_MONTH_NAMES[BASE_LANGUAGE][month - 1],
    )


def _reading_text(raw: Any) -> str | None:
    text = first_present(raw, TEXT_FIELDS)
    if text:
        return text
    verses = raw.get("verses") if isinstance(raw, Mapping) else None
    if isinstance(verses, list):
        lines = [line for line in (as_text(verse) for verse in verses) if line]
        return "\n".join(lines) or None
    return None


def normalize_reading_item(raw: Any, index: int, service: str) -> DailyReadingItem | None:
    """Normalize one raw reading; ``None`` when it has no title, reference or text."""
    title = first_present(raw, TITLE_FIELDS)
    reference = first_present(raw, REFERENCE_FIELDS)
    text = _reading_text(raw)
    if not (title or reference or text):
        return None
    return DailyReadingItem(
        id=first_present(raw, ID_FIELDS) or f"{service}-{index}",
        title=title or reference or f"Reading {index + 1}",
        reference=reference,
        text=text,
        source=first_present(raw, SOURCE_FIELDS) or SERVICE_LABELS[service],
    )


def parse_daily_readings(payload: Any) -> DailyReadings:
    segment = resolve_segment(payload, READINGS_SEGMENT_PATHS) or {}
    services: dict[str, list[DailyReadingItem]] = {}
    for service, aliases in SERVICE_FIELDS.items():
        raw_list = next((segment[a] for a in aliases if segment.get(a)), None)
        items = (
            normalize_reading_item(raw, index, service)
            for index, raw in enumerate(ensure_sequence(raw_list))
        )
        services[service] = [item for item in items if item is not None]
    return DailyReadings(**services)


def _expand(templates: Sequence[str], **values: Any) -> list[str]:
    return [template.format(**values) for template in templates]


class CopticCalendarAdapter:
    """Gregorian → Coptic conversion and daily readings, cached for 12 hours."""

    def __init__(
        self,
        fetcher: JsonFetcherProtocol,
        orchestrator: CacheOrchestrator,
        settings: CalendarSettings,
    ) -> None:
        self._fetcher = fetcher
        self._orchestrator = orchestrator
        self._settings = settings

    async def get_coptic_date(self, gregorian: date, language: str | None = None) -> CopticDateInfo:
        """Coptic date for ``gregorian``; ``month_name`` localized when ``language`` is given."""
        iso = gregorian.isoformat()

        async def fetch() -> CopticDateInfo:
            payload = await fetch_first_success(
                self._fetcher,
                self._settings.base_url,
                _expand(self._settings.date_paths, iso=iso),
            )
            return parse_coptic_date(payload, iso)

        info = await self._orchestrator.fetch_with_cache(
            f"calendar:date:{iso}", self._orchestrator.settings.ttl.calendar, fetch, adapter=_DATE
        )
        if language is None:
            return info
        return info.model_copy(
            update={"month_name": localized_month_name(info.month, language, info.month_name)}
        )

    async def get_daily_readings(self, year: int, month: int, day: int) -> DailyReadings:
        async def fetch() -> DailyReadings:
            payload = await fetch_first_success(
                self._fetcher,
                self._settings.base_url,
                _expand(self._settings.readings_paths, year=year, month=month, day=day),
            )
            readings = parse_daily_readings(payload or {})
            log.debug(
                "daily_readings_parsed",
                matins=len(readings.matins),
                vespers=len(readings.vespers),
                liturgy=len(readings.liturgy),
            )
            return readings

        return await self._orchestrator.fetch_with_cache(
            f"calendar:readings:{year}-{month}-{day}",
            self._orchestrator.settings.ttl.calendar,
            fetch,
            adapter=_READINGS,
        )
