from __future__ import annotations

from kholagy.models.cache import CachedValue, CacheEnvelope
from kholagy.models.calendar import (
    CopticDateInfo,
    DailyReadingItem,
    DailyReadings,
    FastInfo,
    FeastDay,
)
from kholagy.models.content import (
    DocumentSearchHit,
    LiturgyDocument,
    ResolvedDocument,
    SynaxariumEntry,
)
from kholagy.models.scripture import (
    BibleBook,
    BibleChapter,
    BibleSummary,
    BookGroup,
    NormalizedChapter,
    NormalizedVerse,
    SearchHit,
)

__all__ = [
    # cache
    "CacheEnvelope",
    "CachedValue",
    # scripture
    "BibleSummary",
    "BibleBook",
    "BibleChapter",
    "BookGroup",
    "NormalizedVerse",
    "NormalizedChapter",
    "SearchHit",
    # calendar
    "CopticDateInfo",
    "DailyReadingItem",
    "DailyReadings",
    "FeastDay",
    "FastInfo",
    # bundled content
    "SynaxariumEntry",
    "ResolvedDocument",
    "LiturgyDocument",
    "DocumentSearchHit",
]
