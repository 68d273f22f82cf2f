"""Orthodox calendar adapter backed by orthocal.info.

Daily scripture readings, commemorated feasts and fasting information for a
Gregorian date. Each kind is cached for 12 hours under
``orthocal:<kind>:<iso-date>``.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from pydantic import TypeAdapter

from kholagy.aliases import first_present
from kholagy.fetcher import join_url
from kholagy.models.calendar import DailyReadingItem, FastInfo, FeastDay

if TYPE_CHECKING:
    from datetime import date

    from kholagy.config import OrthocalSettings
    from kholagy.orchestrator import CacheOrchestrator
    from kholagy.protocols import JsonFetcherProtocol

_READINGS = TypeAdapter(list[DailyReadingItem])
_FEASTS = TypeAdapter(list[FeastDay])
_FASTS = TypeAdapter(list[FastInfo])


def _entries(payload: Any, field: str) -> list[Any]:
    entries = payload.get(field) if isinstance(payload, Mapping) else None
    return entries if isinstance(entries, list) else []


def parse_readings(payload: Any, day: str) -> list[DailyReadingItem]:
    return [
        DailyReadingItem(
            id=f"{day}:reading:{index}",
            title=first_present(raw, ("title", "display")) or "Reading",
            reference=first_present(raw, ("cite", "book")),
            text=first_present(raw, ("text",)),
            source=first_present(raw, ("service",)) or "Orthocal",
        )
        for index, raw in enumerate(_entries(payload, "readings"))
    ]


def parse_feasts(payload: Any, day: str) -> list[FeastDay]:
    return [
        FeastDay(
            id=f"{day}:feast:{index}",
            title=first_present(raw, ("title",)) or "Feast",
            rank=first_present(raw, ("rank",)),
            color=first_present(raw, ("color",)),
            description=first_present(raw, ("description",)),
        )
        for index, raw in enumerate(_entries(payload, "feasts"))
    ]


def parse_fasts(payload: Any, day: str) -> list[FastInfo]:
    return [
        FastInfo(
            id=f"{day}:fast:{index}",
            name=first_present(raw, ("name",)) or "Fast",
            fasting_level=first_present(raw, ("fasting_level", "fastingLevel")),
            color=first_present(raw, ("color",)),
            description=first_present(raw, ("description",)),
        )
        for index, raw in enumerate(_entries(payload, "fasts"))
    ]


class OrthocalAdapter:
    def __init__(
        self,
        fetcher: JsonFetcherProtocol,
        orchestrator: CacheOrchestrator,
        settings: OrthocalSettings,
    ) -> None:
        self._fetcher = fetcher
        self._orchestrator = orchestrator
        self._settings = settings

    async def _request(self, path: str, day: str) -> Any:
        return await self._fetcher.get_json(join_url(self._settings.base_url, path), params={"date": day})

    async def get_daily_readings(self, on: date) -> list[DailyReadingItem]:
        day = on.isoformat()

        async def fetch() -> list[DailyReadingItem]:
            return parse_readings(await self._request("/daily/", day), day)

        return await self._orchestrator.fetch_with_cache(
            f"orthocal:readings:{day}", self._orchestrator.settings.ttl.calendar, fetch, adapter=_READINGS
        )

    async def get_feasts(self, on: date) -> list[FeastDay]:
        day = on.isoformat()

        async def fetch() -> list[FeastDay]:
            return parse_feasts(await self._request("/feastdays/", day), day)

        return await self._orchestrator.fetch_with_cache(
            f"orthocal:feasts:{day}", self._orchestrator.settings.ttl.calendar, fetch, adapter=_FEASTS
        )

    async def get_fasts(self, on: date) -> list[FastInfo]:
        day = on.isoformat()

        async def fetch() -> list[FastInfo]:
            return parse_fasts(await self._request("/fasts/", day), day)

        return await self._orchestrator.fetch_with_cache(
            f"orthocal:fasts:{day}", self._orchestrator.settings.ttl.calendar, fetch, adapter=_FASTS
        )
