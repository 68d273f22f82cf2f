from __future__ import annotations

from typing import Any

from pydantic import BaseModel


class SynaxariumEntry(BaseModel):
    """A single commemoration for a calendar day."""

    title: str
    story: str


class ResolvedDocument(BaseModel):
    """Outcome of resolving a bundled document for a preferred language.

    ``is_fallback`` is True when ``language`` differs from the language the
    caller asked for, so the UI can say it is showing another language.
    """

    document_id: str
    language: str
    requested_language: str
    handle: Any  # opaque storage handle (a Path for directory registries)
    is_fallback: bool


class LiturgyDocument(BaseModel):
    document_id: str
    markdown: str
    language: str
    is_fallback: bool


class DocumentSearchHit(BaseModel):
    id: str  # "line-<n>"
    line: int  # 0-based
    snippet: str
