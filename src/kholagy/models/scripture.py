from __future__ import annotations

from pydantic import BaseModel


class BibleSummary(BaseModel):
    """One translation in the upstream catalog."""

    id: str
    name: str
    abbreviation: str | None = None
    language: str | None = None
    description: str | None = None


class BibleBook(BaseModel):
    id: str
    name: str
    abbreviation: str | None = None
    name_long: str | None = None
    testament: str | None = None


class BibleChapter(BaseModel):
    id: str
    book_id: str
    number: str
    reference: str


class NormalizedVerse(BaseModel):
    id: str
    book_id: str
    chapter_id: str
    number: str
    reference: str
    text: str  # whitespace-collapsed, never empty


class NormalizedChapter(BaseModel):
    id: str
    book_id: str
    number: str
    reference: str
    verses: list[NormalizedVerse] = []  # document order


class SearchHit(BaseModel):
    """A verse located by a free-text query.

    ``id`` is ``"<verse_id>:<query>"`` so the same verse matched by two
    queries yields two distinct identities.
    """

    id: str
    verse_id: str
    book_id: str
    chapter_id: str
    reference: str
    text: str
    snippet: str | None = None


class BookGroup(BaseModel):
    key: str  # "old_testament" | "deuterocanon" | "new_testament" | "other"
    books: list[BibleBook] = []
