"""Cache-aside orchestration with bounded staleness.

``CacheOrchestrator.fetch_with_cache`` wraps any zero-argument coroutine
factory with a TTL-bounded cache-aside policy:

  1. Read the envelope for the key. A corrupt envelope is a miss.
  2. Fresh envelope (age < ttl, payload present) → return it, no network.
  3. Otherwise call the fetcher exactly once.
     - success → persist best-effort, return the fresh value
     - failure → return the previous payload if one exists (even expired),
       otherwise re-raise

Availability wins over freshness: an expired value is better than no value.
Retries are the caller's business; nothing here loops or backs off.
"""

from __future__ import annotations

import asyncio
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any, TypeVar

import structlog
from pydantic import ValidationError

from kholagy.errors import ConfigurationError, ParseError
from kholagy.models.cache import CachedValue, CacheEnvelope

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Iterator
    from datetime import timedelta

    from pydantic import TypeAdapter

    from kholagy.config import CacheSettings
    from kholagy.protocols import CacheStoreProtocol

T = TypeVar("T")

log = structlog.get_logger()

_served: ContextVar[list[CachedValue[Any]] | None] = ContextVar("kholagy_served", default=None)


@contextmanager
def track_freshness() -> Iterator[list[CachedValue[Any]]]:
    """Collect the provenance of every orchestrated fetch made in this context.

    The yielded list receives one ``CachedValue`` per ``fetch_cached`` call,
    which lets a facade report whether anything it returned came from stale
    cache without threading provenance through every adapter signature.
    """
    served: list[CachedValue[Any]] = []
    token = _served.set(served)
    try:
        yield served
    finally:
        _served.reset(token)


def _utcnow() -> datetime:
    return datetime.now(UTC)


class CacheOrchestrator:
    """TTL cache-aside with stale-on-error over a CacheStoreProtocol."""

    def __init__(
        self,
        store: CacheStoreProtocol,
        settings: CacheSettings,
        *,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._store = store
        self._settings = settings
        self._clock = clock
        self._inflight: dict[str, asyncio.Future[CachedValue[Any]]] = {}

    @property
    def settings(self) -> CacheSettings:
        return self._settings

    def storage_key(self, key: str) -> str:
        return f"{self._settings.namespace}{key}"

    async def fetch_with_cache(
        self,
        key: str,
        ttl: timedelta,
        fetcher: Callable[[], Awaitable[T]],
        *,
        adapter: TypeAdapter[T] | None = None,
    ) -> T:
        """Return the value for ``key``, from cache when fresh enough.

        ``adapter`` encodes and decodes non-JSON-native values (pydantic
        models); without it the fetcher must produce JSON-compatible data.
        Never returns ``None``: either a value or the fetcher's exception.
        """
        cached = await self.fetch_cached(key, ttl, fetcher, adapter=adapter)
        return cached.value

    async def fetch_cached(
        self,
        key: str,
        ttl: timedelta,
        fetcher: Callable[[], Awaitable[T]],
        *,
        adapter: TypeAdapter[T] | None = None,
    ) -> CachedValue[T]:
        """Like ``fetch_with_cache`` but also reports where the value came from."""
        if self._settings.deduplicate_inflight:
            result = await self._fetch_shared(key, ttl, fetcher, adapter)
        else:
            result = await self._fetch(key, ttl, fetcher, adapter)

        served = _served.get()
        if served is not None:
            served.append(result)
        return result

    async def invalidate(self, key: str) -> None:
        await self._store.delete(self.storage_key(key))

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    async def _fetch_shared(
        self,
        key: str,
        ttl: timedelta,
        fetcher: Callable[[], Awaitable[Any]],
        adapter: TypeAdapter[Any] | None,
    ) -> CachedValue[Any]:
        # Concurrent callers for the same key join the first caller's task.
        task = self._inflight.get(key)
        if task is None:
            task = asyncio.ensure_future(self._fetch(key, ttl, fetcher, adapter))
            self._inflight[key] = task
            task.add_done_callback(lambda done: self._forget(key, done))
        else:
            log.debug("cache_inflight_joined", key=key)
        # Shielded: one caller giving up must not cancel the others.
        return await asyncio.shield(task)

    def _forget(self, key: str, done: asyncio.Future[CachedValue[Any]]) -> None:
        if self._inflight.get(key) is done:
            del self._inflight[key]
        if not done.cancelled():
            done.exception()  # mark retrieved; awaiting callers still receive it

    async def _fetch(
        self,
        key: str,
        ttl: timedelta,
        fetcher: Callable[[], Awaitable[Any]],
        adapter: TypeAdapter[Any] | None,
    ) -> CachedValue[Any]:
        storage_key = self.storage_key(key)
        previous = await self._read(storage_key, adapter)

        if previous is not None and self._clock() - previous.written_at < ttl:
            log.debug("cache_hit", key=key)
            return previous

        try:
            fresh = await fetcher()
            if fresh is None:
                raise ParseError(f"Fetch for {key!r} produced no payload")
        except ConfigurationError:
            # A missing credential is a setup problem; stale data must not hide it.
            raise
        except Exception:
            if previous is not None:
                log.warning(
                    "cache_stale_served",
                    key=key,
                    written_at=previous.written_at.isoformat(),
                    exc_info=True,
                )
                return CachedValue(value=previous.value, source="stale", written_at=previous.written_at)
            raise

        written_at = self._clock()
        await self._write(storage_key, fresh, written_at, adapter)
        log.debug("cache_refreshed", key=key)
        return CachedValue(value=fresh, source="network", written_at=written_at)

    async def _read(
        self,
        storage_key: str,
        adapter: TypeAdapter[Any] | None,
    ) -> CachedValue[Any] | None:
        raw = await self._store.get(storage_key)
        if raw is None:
            return None
        try:
            envelope = CacheEnvelope.model_validate_json(raw)
            if envelope.payload is None:
                return None
            value = adapter.validate_python(envelope.payload) if adapter else envelope.payload
        except ValidationError:
            log.warning("cache_entry_corrupt", key=storage_key, exc_info=True)
            return None
        return CachedValue(value=value, source="cache", written_at=envelope.written_at)

    async def _write(
        self,
        storage_key: str,
        value: Any,
        written_at: datetime,
        adapter: TypeAdapter[Any] | None,
    ) -> None:
        try:
            payload = adapter.dump_python(value, mode="json") if adapter else value
            raw = CacheEnvelope(written_at=written_at, payload=payload).model_dump_json()
        except (TypeError, ValueError):
            log.warning("cache_encode_error", key=storage_key, exc_info=True)
            return
        await self._store.set(storage_key, raw.encode("utf-8"))
