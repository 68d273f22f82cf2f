"""Tool handlers for the Coptic and Orthodox calendars."""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

import structlog

from kholagy.models.tools import GregorianDateInput
from kholagy.tools import invalid_input

if TYPE_CHECKING:
    from datetime import date

    from kholagy.state import AppState

_DATE_SUGGESTION = "Provide a Gregorian date as YYYY-MM-DD."


def _parse_date(value: str) -> date:
    try:
        return GregorianDateInput(on=value).on
    except ValueError as exc:
        raise invalid_input(exc, _DATE_SUGGESTION) from exc


async def coptic_day(state: AppState, gregorian: str, language: str | None = None) -> dict:
    """Coptic date for a Gregorian date, plus that day's readings and synaxarium."""
    log = structlog.get_logger().bind(tool="coptic_day", gregorian=gregorian, language=language)
    log.info("handler_called")
    on = _parse_date(gregorian)

    coptic = await state.service.get_coptic_date(on, language)
    info = coptic.value
    readings, synaxarium = await asyncio.gather(
        state.service.get_daily_readings(info.year, info.month, info.day),
        state.service.get_synaxarium(info.month, info.day, language),
    )
    return {
        "date": coptic.to_dict(),
        "readings": readings.to_dict(),
        "synaxarium": synaxarium.to_dict(),
    }


async def orthodox_day(state: AppState, gregorian: str) -> dict:
    """Orthocal readings, feasts and fasts for a Gregorian date."""
    structlog.get_logger().info("handler_called", tool="orthodox_day", gregorian=gregorian)
    on = _parse_date(gregorian)
    readings, feasts, fasts = await asyncio.gather(
        state.service.get_orthocal_readings(on),
        state.service.get_feasts(on),
        state.service.get_fasts(on),
    )
    return {
        "readings": readings.to_dict(),
        "feasts": feasts.to_dict(),
        "fasts": fasts.to_dict(),
    }
