"""Request tokens for discarding superseded results.

A caller that issues a new request in some scope (say, "reader chapter")
begins a token; when an older request's result arrives later, comparing its
token against the tracker shows that it was overtaken and should be dropped.
Upstream fetches are never cancelled, only their late results ignored.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class RequestToken:
    scope: str
    sequence: int


@dataclass(frozen=True)
class Tracked(Generic[T]):
    value: T
    token: RequestToken


class RequestTracker:
    def __init__(self) -> None:
        self._latest: dict[str, int] = {}

    def begin(self, scope: str) -> RequestToken:
        sequence = self._latest.get(scope, 0) + 1
        self._latest[scope] = sequence
        return RequestToken(scope=scope, sequence=sequence)

    def is_current(self, token: RequestToken) -> bool:
        return self._latest.get(token.scope) == token.sequence
