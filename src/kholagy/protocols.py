"""Protocol interfaces for swappable components.

Adapters and AppState reference these protocols, not the concrete
implementations, so tests can use lightweight in-memory stand-ins and a
different durable store can be plugged in without touching adapter code.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from collections.abc import Mapping


class CacheStoreProtocol(Protocol):
    """Namespaced key → bytes persistent store."""

    async def get(self, key: str) -> bytes | None: ...

    async def set(self, key: str, value: bytes) -> None: ...

    async def delete(self, key: str) -> None: ...


class JsonFetcherProtocol(Protocol):
    """Interface for the HTTP JSON fetcher."""

    async def get_json(
        self,
        url: str,
        *,
        params: Mapping[str, str | int] | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> Any: ...
