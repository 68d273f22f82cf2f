"""Tool handlers for bundled content: synaxarium days and liturgical documents."""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from kholagy.errors import ErrorCode, KholagyError
from kholagy.models.tools import CopticDayInput, DocumentInput
from kholagy.tools import invalid_input

if TYPE_CHECKING:
    from kholagy.state import AppState


async def synaxarium(state: AppState, month: int, day: int, language: str | None = None) -> dict:
    structlog.get_logger().info("handler_called", tool="synaxarium", month=month, day=day)
    try:
        validated = CopticDayInput(month=month, day=day)
    except ValueError as exc:
        raise invalid_input(exc, "Coptic months run 1-13 and days 1-31.") from exc

    result = await state.service.get_synaxarium(validated.month, validated.day, language)
    return result.to_dict()


def _document_id(document_id: str) -> str:
    try:
        return DocumentInput(document_id=document_id).document_id
    except ValueError as exc:
        raise invalid_input(exc, "Document ids use letters, digits, '-', '_', '.' and '/'.") from exc


async def read_document(state: AppState, document_id: str, language: str | None = None) -> dict:
    log = structlog.get_logger().bind(tool="read_document", document_id=document_id, language=language)
    log.info("handler_called")
    result = await state.service.load_document(_document_id(document_id), language)
    if result.value is None:
        raise KholagyError(
            code=ErrorCode.DOCUMENT_NOT_FOUND,
            message=f"No bundled document '{document_id}' in any language.",
            suggestion="Check content.documents_dir and the document id.",
            recoverable=False,
        )
    if result.is_fallback_language:
        log.info("document_fallback_served", served=result.language)
    return result.to_dict()


async def search_document(
    state: AppState,
    document_id: str,
    query: str,
    language: str | None = None,
) -> dict:
    structlog.get_logger().info("handler_called", tool="search_document", document_id=document_id)
    result = await state.service.search_document(_document_id(document_id), query, language)
    return result.to_dict()
