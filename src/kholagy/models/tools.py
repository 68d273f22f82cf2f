from __future__ import annotations

from datetime import date

from pydantic import BaseModel, Field, field_validator


class ScriptureSearchInput(BaseModel):
    query: str = Field(max_length=500)

    @field_validator("query")
    @classmethod
    def query_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("query must not be empty")
        return value


class GregorianDateInput(BaseModel):
    on: date


class CopticDayInput(BaseModel):
    month: int = Field(ge=1, le=13)
    day: int = Field(ge=1, le=31)


class DocumentInput(BaseModel):
    document_id: str = Field(min_length=1, max_length=200, pattern=r"^[A-Za-z0-9_.\-/]+$")


_SCRIPTURE_ID = r"^[A-Za-z0-9_.\-]+$"


class ScriptureIdsInput(BaseModel):
    """Identifiers that end up in upstream URL paths and cache keys."""

    translation_id: str | None = Field(default=None, max_length=100, pattern=_SCRIPTURE_ID)
    book_id: str | None = Field(default=None, max_length=50, pattern=_SCRIPTURE_ID)
    chapter_id: str | None = Field(default=None, max_length=50, pattern=_SCRIPTURE_ID)
