"""Synaxarium resolver over a local registry of per-day loaders.

The registry maps ``"<lang>-<month>-<day>"`` to a zero-argument loader that
returns the raw entries for that day. Nothing here is cached or fetched from
the network: the data is bundled with the application.
"""

from __future__ import annotations

import inspect
import json
import re
from collections.abc import Mapping
from pathlib import Path
from typing import TYPE_CHECKING, Any

import structlog

from kholagy.aliases import first_present
from kholagy.languages import BASE_LANGUAGE, fallback_chain
from kholagy.models.content import SynaxariumEntry

if TYPE_CHECKING:
    from collections.abc import Callable

log = structlog.get_logger()

TITLE_FIELDS = ("title", "name", "heading")
STORY_FIELDS = ("story", "text", "description")
TITLE_FROM_STORY_CHARS = 48

_KEY_RE = re.compile(r"^(?P<lang>[a-z]+)-(?P<month>\d{1,2})-(?P<day>\d{1,2})$")


def normalize_entry(raw: Any) -> SynaxariumEntry | None:
    title = first_present(raw, TITLE_FIELDS) or ""
    story = first_present(raw, STORY_FIELDS) or ""
    if not title and not story:
        return None
    return SynaxariumEntry(title=title or story[:TITLE_FROM_STORY_CHARS], story=story)


def _unwrap(loaded: Any) -> list[Any]:
    # Bundled modules may wrap their list in a "default" export.
    if isinstance(loaded, Mapping) and "default" in loaded:
        loaded = loaded["default"]
    return loaded if isinstance(loaded, list) else []


class SynaxariumResolver:
    """Look up the commemorations for a Coptic day with language fallback."""

    def __init__(
        self,
        registry: Mapping[str, Callable[[], Any]],
        base_language: str = BASE_LANGUAGE,
    ) -> None:
        self._registry = registry
        self._base_language = base_language

    def candidate_keys(self, language: str | None, month: int, day: int) -> list[str]:
        """Registry keys to try, preferred language first.

        Month is clamped to 1–13 and day to 1–31 so callers never build a key
        that cannot exist.
        """
        safe_month = max(1, min(13, int(month)))
        safe_day = max(1, min(31, int(day)))
        return [
            f"{code}-{safe_month}-{safe_day}" for code in fallback_chain(language, self._base_language)
        ]

    async def get_synaxarium(self, month: int, day: int, language: str | None) -> list[SynaxariumEntry]:
        """Entries for the day in ``language``, else the base language, else ``[]``.

        A loader that raises is logged and treated like a missing key.
        """
        _, entries = await self.resolve_day(month, day, language)
        return entries

    async def resolve_day(
        self, month: int, day: int, language: str | None
    ) -> tuple[str | None, list[SynaxariumEntry]]:
        """Like ``get_synaxarium`` but also returns the language that was served."""
        for key in self.candidate_keys(language, month, day):
            loader = self._registry.get(key)
            if loader is None:
                continue
            try:
                loaded = loader()
                if inspect.isawaitable(loaded):
                    loaded = await loaded
            except Exception:
                log.warning("synaxarium_load_failed", key=key, exc_info=True)
                continue

            entries = [entry for entry in map(normalize_entry, _unwrap(loaded)) if entry is not None]
            if entries:
                log.debug("synaxarium_resolved", key=key, entries=len(entries))
                return key.split("-", 1)[0], entries
        return None, []


def _json_loader(path: Path) -> Callable[[], Any]:
    def load() -> Any:
        return json.loads(path.read_text(encoding="utf-8"))

    return load


def registry_from_directory(directory: str | Path) -> dict[str, Callable[[], Any]]:
    """Build a loader registry from ``<lang>-<month>-<day>.json`` files.

    Files whose names do not follow the pattern are ignored. Loading is
    deferred until a day is requested.
    """
    root = Path(directory).expanduser()
    registry: dict[str, Callable[[], Any]] = {}
    if not root.is_dir():
        log.warning("synaxarium_directory_missing", path=str(root))
        return registry
    for path in sorted(root.glob("*.json")):
        match = _KEY_RE.match(path.stem.lower())
        if match is None:
            continue
        key = f"{match['lang']}-{int(match['month'])}-{int(match['day'])}"
        registry[key] = _json_loader(path)
    log.info("synaxarium_registry_loaded", path=str(root), days=len(registry))
    return registry
