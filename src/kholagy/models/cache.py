from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Generic, Literal, TypeVar

from pydantic import BaseModel

T = TypeVar("T")

CacheSource = Literal["cache", "network", "stale"]


class CacheEnvelope(BaseModel):
    """Stored form of a cached value: the payload plus when it was written."""

    written_at: datetime
    payload: Any = None  # None means "no payload" and is treated as a miss


@dataclass(frozen=True)
class CachedValue(Generic[T]):
    """A value returned by the orchestrator together with its provenance."""

    value: T
    source: CacheSource
    written_at: datetime

    @property
    def stale(self) -> bool:
        return self.source == "stale"
