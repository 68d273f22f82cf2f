"""Tool handlers for scripture catalogs, chapters and search."""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from kholagy.models.tools import ScriptureIdsInput, ScriptureSearchInput
from kholagy.tools import invalid_input

if TYPE_CHECKING:
    from kholagy.state import AppState


def _ids(**ids: str | None) -> ScriptureIdsInput:
    try:
        return ScriptureIdsInput(**ids)
    except ValueError as exc:
        raise invalid_input(
            exc, "Identifiers may only contain letters, digits, '.', '_' and '-', e.g. 'JHN' or 'JHN.3'."
        ) from exc


async def list_translations(state: AppState) -> dict:
    structlog.get_logger().info("handler_called", tool="list_translations")
    result = await state.service.list_bibles()
    return result.to_dict()


async def list_books(
    state: AppState,
    language: str | None = None,
    translation_id: str | None = None,
    grouped: bool = False,
) -> dict:
    log = structlog.get_logger().bind(tool="list_books", language=language, translation_id=translation_id)
    log.info("handler_called", grouped=grouped)
    ids = _ids(translation_id=translation_id)
    if grouped:
        result = await state.service.get_book_groups(ids.translation_id, language)
    else:
        result = await state.service.get_books(ids.translation_id, language)
    return result.to_dict()


async def list_chapters(
    state: AppState,
    book_id: str,
    language: str | None = None,
    translation_id: str | None = None,
) -> dict:
    structlog.get_logger().info("handler_called", tool="list_chapters", book_id=book_id)
    ids = _ids(book_id=book_id, translation_id=translation_id)
    result = await state.service.get_chapters(ids.book_id, ids.translation_id, language)
    return result.to_dict()


async def read_chapter(
    state: AppState,
    chapter_id: str,
    language: str | None = None,
    translation_id: str | None = None,
) -> dict:
    structlog.get_logger().info("handler_called", tool="read_chapter", chapter_id=chapter_id)
    ids = _ids(chapter_id=chapter_id, translation_id=translation_id)
    result = await state.service.get_chapter_content(ids.chapter_id, ids.translation_id, language)
    return result.to_dict()


async def search(
    state: AppState,
    query: str,
    language: str | None = None,
    translation_id: str | None = None,
) -> dict:
    log = structlog.get_logger().bind(tool="search_scripture", query=query)
    log.info("handler_called")
    try:
        validated = ScriptureSearchInput(query=query)
    except ValueError as exc:
        raise invalid_input(exc, "Provide a non-empty search phrase (max 500 chars).") from exc
    ids = _ids(translation_id=translation_id)

    result = await state.service.search(validated.query, ids.translation_id, language)
    log.info("search_complete", hits=len(result.value), stale=result.stale)
    return result.to_dict()
