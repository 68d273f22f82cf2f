"""Content-tree normalizer for chapter payloads.

Pure business logic: receives the upstream JSON tree, returns a
NormalizedChapter. No knowledge of HTTP, caching, or AppState.

Upstream chapter content is a tree mixing containers (sections, paragraphs)
and verse nodes. Children hang off any of three array fields and text off
either of two scalar fields, at arbitrary depth. The walk is depth-first:

  - verse node      → gather every scalar text at the node and below,
                      in document order, and emit one NormalizedVerse
  - any other node  → recurse into its children, collecting nothing

Containers never contribute text because their scalars are markup, not
verse content.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from kholagy.aliases import as_text, collapse_whitespace, first_present
from kholagy.errors import ParseError
from kholagy.models.scripture import NormalizedChapter, NormalizedVerse

if TYPE_CHECKING:
    from collections.abc import Iterator

TEXT_FIELDS = ("text", "value")
CHILD_FIELDS = ("content", "items", "children")
ID_FIELDS = ("id", "verseId")
VERSE_TAG = "verse"


def _children(node: Mapping[str, Any]) -> Iterator[Any]:
    for field in CHILD_FIELDS:
        value = node.get(field)
        if isinstance(value, list):
            yield from value


def gather_text(node: Any, parts: list[str] | None = None) -> list[str]:
    """Collect scalar text fragments from ``node`` and all its descendants."""
    if parts is None:
        parts = []
    if not isinstance(node, Mapping):
        return parts
    for field in TEXT_FIELDS:
        value = node.get(field)
        if isinstance(value, str):
            parts.append(value)
    for child in _children(node):
        gather_text(child, parts)
    return parts


def _verse_number(node: Mapping[str, Any], verse_id: str, reference: str) -> str:
    explicit = first_present(node, ("number",))
    if explicit is not None:
        return explicit
    if ":" in reference:
        return reference.rsplit(":", 1)[1].strip()
    return verse_id.rsplit(".", 1)[-1]


def extract_verse(node: Any, *, chapter_id: str, book_id: str) -> NormalizedVerse | None:
    """Build a verse from a verse-tagged node, or ``None`` for placeholders.

    Nodes without an id or without any text are structural placeholders and
    are dropped silently.
    """
    if not isinstance(node, Mapping):
        return None
    verse_id = first_present(node, ID_FIELDS) or ""
    text = collapse_whitespace(" ".join(gather_text(node)))
    if not verse_id or not text:
        return None

    reference = first_present(node, ("reference",)) or ""
    number = _verse_number(node, verse_id, reference)
    return NormalizedVerse(
        id=verse_id,
        book_id=book_id,
        chapter_id=chapter_id,
        number=number,
        reference=reference or f"{book_id} {number}",
        text=text,
    )


def extract_verses(nodes: Any, *, chapter_id: str, book_id: str) -> list[NormalizedVerse]:
    """Walk a list of content nodes and return verses in document order."""
    verses: list[NormalizedVerse] = []

    def walk(node: Any) -> None:
        if not isinstance(node, Mapping):
            return
        if node.get("type") == VERSE_TAG:
            verse = extract_verse(node, chapter_id=chapter_id, book_id=book_id)
            if verse is not None:
                verses.append(verse)
            return
        for child in _children(node):
            walk(child)

    if isinstance(nodes, list):
        for node in nodes:
            walk(node)
    return verses


def normalize_chapter(payload: Any) -> NormalizedChapter:
    """Normalize a chapter-content response into a NormalizedChapter.

    Accepts either the ``{"data": {...}}`` envelope or the bare chapter object.
    Raises ParseError when the chapter identity fields are missing.
    """
    chapter = payload.get("data", payload) if isinstance(payload, Mapping) else None
    if not isinstance(chapter, Mapping):
        raise ParseError("Chapter payload is not an object")

    chapter_id = first_present(chapter, ("id", "chapterId"))
    book_id = first_present(chapter, ("bookId",))
    if chapter_id is None or book_id is None:
        raise ParseError("Chapter payload is missing 'id' or 'bookId'")

    number = first_present(chapter, ("number",), as_text) or chapter_id.rsplit(".", 1)[-1]
    reference = first_present(chapter, ("reference",)) or f"{book_id} {number}"
    return NormalizedChapter(
        id=chapter_id,
        book_id=book_id,
        number=number,
        reference=reference,
        verses=extract_verses(chapter.get("content"), chapter_id=chapter_id, book_id=book_id),
    )
