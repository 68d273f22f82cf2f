"""Bundled liturgical documents: language-fallback resolution and search.

Documents are registered under ``"<id>:<lang>"`` keys. Resolution tries the
requested language, then the default language, then whatever language the
registry holds first for the id. That last step depends on the registry's
iteration order, so two registries with the same keys in a different order
can resolve differently.
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import TYPE_CHECKING, Any

import structlog

from kholagy.languages import BASE_LANGUAGE, normalize_language
from kholagy.models.content import DocumentSearchHit, LiturgyDocument, ResolvedDocument

if TYPE_CHECKING:
    from collections.abc import Mapping

log = structlog.get_logger()

SEARCH_LIMIT = 12
SNIPPET_CHARS = 220

_LINE_SPLIT_RE = re.compile(r"\r?\n")


def document_key(document_id: str, language: str) -> str:
    return f"{document_id}:{language}"


class DocumentResolver:
    def __init__(self, registry: Mapping[str, Any], default_language: str = BASE_LANGUAGE) -> None:
        self._registry = registry
        self._default_language = default_language

    def resolve(self, document_id: str, language: str | None) -> ResolvedDocument | None:
        """Resolve ``document_id`` to a storage handle, or ``None`` if no language has it."""
        requested = normalize_language(language, self._default_language)

        for candidate in (requested, self._default_language):
            handle = self._registry.get(document_key(document_id, candidate))
            if handle is not None:
                return self._resolved(document_id, candidate, requested, handle)

        prefix = f"{document_id}:"
        for key, handle in self._registry.items():
            if key.startswith(prefix):
                return self._resolved(document_id, key[len(prefix) :] or requested, requested, handle)
        return None

    def _resolved(self, document_id: str, language: str, requested: str, handle: Any) -> ResolvedDocument:
        if language != requested:
            log.debug("document_language_fallback", document_id=document_id, requested=requested, served=language)
        return ResolvedDocument(
            document_id=document_id,
            language=language,
            requested_language=requested,
            handle=handle,
            is_fallback=language != requested,
        )

    def load_document(self, document_id: str, language: str | None) -> LiturgyDocument | None:
        resolved = self.resolve(document_id, language)
        if resolved is None:
            return None
        markdown = Path(resolved.handle).read_text(encoding="utf-8")
        return LiturgyDocument(
            document_id=document_id,
            markdown=markdown,
            language=resolved.language,
            is_fallback=resolved.is_fallback,
        )


def registry_from_directory(directory: str | Path) -> dict[str, Path]:
    """Map ``<id>.<lang>.md`` files under ``directory`` to ``"<id>:<lang>"`` keys."""
    root = Path(directory).expanduser()
    registry: dict[str, Path] = {}
    if not root.is_dir():
        log.warning("documents_directory_missing", path=str(root))
        return registry
    for path in sorted(root.rglob("*.md")):
        document_id, _, language = path.stem.rpartition(".")
        if not document_id or not language:
            continue
        registry[document_key(document_id, language.lower())] = path
    log.info("documents_registry_loaded", path=str(root), documents=len(registry))
    return registry


def search_document(markdown: str, query: str, limit: int = SEARCH_LIMIT) -> list[DocumentSearchHit]:
    """Case-insensitive line search over a document.

    Blank lines never match. ``line`` is the 0-based line index and snippets
    longer than 220 characters are cut with an ellipsis.
    """
    needle = query.strip().lower()
    if not needle:
        return []
    hits: list[DocumentSearchHit] = []
    for index, line in enumerate(_LINE_SPLIT_RE.split(markdown)):
        text = line.strip()
        if not text or needle not in text.lower():
            continue
        snippet = text if len(text) <= SNIPPET_CHARS else f"{text[: SNIPPET_CHARS - 3]}…"
        hits.append(DocumentSearchHit(id=f"line-{index}", line=index, snippet=snippet))
        if len(hits) >= limit:
            break
    return hits
