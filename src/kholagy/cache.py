"""SQLite-backed durable cache store.

A flat key → bytes table. The store knows nothing about TTLs or payload
shapes; that policy lives in the orchestrator. All operations catch
``aiosqlite.Error`` internally and degrade gracefully: read failures return
``None`` (treated as cache miss by callers), write failures are logged and
ignored (fetched content is still returned). Infrastructure errors never
cross the CacheStore boundary.
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import aiosqlite
import structlog

log = structlog.get_logger()

_CREATE_ENTRIES_TABLE = """
CREATE TABLE IF NOT EXISTS cache_entries (
    key        TEXT PRIMARY KEY,
    value      BLOB NOT NULL,
    written_at TEXT NOT NULL
)
"""

_CREATE_ENTRIES_INDEX = (
    "CREATE INDEX IF NOT EXISTS idx_entries_written ON cache_entries(written_at)"
)

_CREATE_METADATA_TABLE = """
CREATE TABLE IF NOT EXISTS store_metadata (
    key   TEXT PRIMARY KEY,
    value TEXT NOT NULL
)
"""


class CacheStore:
    """Durable key → bytes store implementing CacheStoreProtocol."""

    def __init__(self, db: aiosqlite.Connection) -> None:
        self._db = db

    async def init_db(self) -> None:
        """Create tables and set WAL mode. Called once at startup."""
        await self._db.execute("PRAGMA journal_mode = WAL")
        await self._db.execute(_CREATE_ENTRIES_TABLE)
        await self._db.execute(_CREATE_ENTRIES_INDEX)
        await self._db.execute(_CREATE_METADATA_TABLE)
        await self._db.commit()

    async def get(self, key: str) -> bytes | None:
        """Read raw bytes for a key. Returns ``None`` on miss or read failure."""
        try:
            cursor = await self._db.execute(
                "SELECT value FROM cache_entries WHERE key = ?",
                (key,),
            )
            row = await cursor.fetchone()
            if row is None:
                return None
            return bytes(row[0])
        except aiosqlite.Error:
            log.warning("cache_read_error", key=key, exc_info=True)
            return None

    async def set(self, key: str, value: bytes) -> None:
        """Write raw bytes for a key, replacing any previous value. Non-fatal on failure."""
        try:
            await self._db.execute(
                "INSERT OR REPLACE INTO cache_entries (key, value, written_at) VALUES (?, ?, ?)",
                (key, value, datetime.now(UTC).isoformat()),
            )
            await self._db.commit()
        except aiosqlite.Error:
            log.warning("cache_write_error", key=key, exc_info=True)

    async def delete(self, key: str) -> None:
        """Remove a key. Non-fatal on failure."""
        try:
            await self._db.execute("DELETE FROM cache_entries WHERE key = ?", (key,))
            await self._db.commit()
        except aiosqlite.Error:
            log.warning("cache_delete_error", key=key, exc_info=True)

    # ------------------------------------------------------------------
    # Maintenance
    # ------------------------------------------------------------------

    async def cleanup_if_due(self, interval_hours: int, retention_days: int) -> None:
        """Run cleanup only if interval_hours have elapsed since the last run.

        Reads and writes ``last_cleanup_at`` from the ``store_metadata`` table.
        Falls through to run cleanup if the metadata row is missing or unreadable.
        Non-fatal on failure.
        """
        try:
            cursor = await self._db.execute(
                "SELECT value FROM store_metadata WHERE key = 'last_cleanup_at'"
            )
            row = await cursor.fetchone()
            if row is not None:
                last_run = datetime.fromisoformat(row[0])
                if datetime.now(UTC) - last_run < timedelta(hours=interval_hours):
                    log.debug("cache_cleanup_skipped", reason="not_due")
                    return
        except aiosqlite.Error:
            log.warning("cache_metadata_read_error", exc_info=True)

        await self.cleanup_expired(retention_days)

        try:
            await self._db.execute(
                "INSERT OR REPLACE INTO store_metadata (key, value) VALUES ('last_cleanup_at', ?)",
                (datetime.now(UTC).isoformat(),),
            )
            await self._db.commit()
        except aiosqlite.Error:
            log.warning("cache_metadata_write_error", exc_info=True)

    async def cleanup_expired(self, retention_days: int) -> None:
        """Delete entries not rewritten within ``retention_days``. Non-fatal on failure.

        Expired-but-retained entries are what stale-on-error serves when the
        network is down, so the retention window is much longer than any TTL.
        """
        try:
            cutoff = (datetime.now(UTC) - timedelta(days=retention_days)).isoformat()
            cursor = await self._db.execute(
                "DELETE FROM cache_entries WHERE written_at < ?", (cutoff,)
            )
            deleted = cursor.rowcount
            await self._db.commit()
            log.info("cache_cleanup_complete", deleted=deleted)
        except aiosqlite.Error:
            log.warning("cache_cleanup_error", exc_info=True)
