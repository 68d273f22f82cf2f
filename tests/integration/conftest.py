"""Integration test fixtures.

Provides a fully wired AppState with in-memory SQLite, a real httpx client
(mocked per test with respx) and on-disk synaxarium and document bundles.
"""

from __future__ import annotations

import json
import os
from typing import TYPE_CHECKING

import aiosqlite
import httpx
import pytest

from kholagy.cache import CacheStore
from kholagy.config import Settings
from kholagy.state import AppState, build_state

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator
    from pathlib import Path


@pytest.fixture()
def content_dirs(tmp_path: Path) -> tuple[Path, Path]:
    synaxarium_dir = tmp_path / "synaxarium"
    synaxarium_dir.mkdir()
    (synaxarium_dir / "en-4-29.json").write_text(
        json.dumps([{"title": "The Nativity of Our Lord", "story": "On this day..."}]),
        encoding="utf-8",
    )

    documents_dir = tmp_path / "documents"
    documents_dir.mkdir()
    (documents_dir / "liturgy-basil.en.md").write_text(
        "# The Liturgy of St. Basil\n\nPriest: Blessed be God the Father.\nPeople: Amen.\n",
        encoding="utf-8",
    )
    (documents_dir / "liturgy-basil.ar.md").write_text("# القداس الباسيلي\n\nآمين.\n", encoding="utf-8")
    return synaxarium_dir, documents_dir


@pytest.fixture()
async def app_state(content_dirs: tuple[Path, Path]) -> AsyncGenerator[AppState, None]:
    """Full AppState wired the same way the server lifespan wires it."""
    synaxarium_dir, documents_dir = content_dirs
    settings = Settings(
        scripture={"api_key": "test-key"},
        content={"synaxarium_dir": str(synaxarium_dir), "documents_dir": str(documents_dir)},
    )
    async with aiosqlite.connect(":memory:") as db:
        store = CacheStore(db)
        await store.init_db()
        async with httpx.AsyncClient() as client:
            yield build_state(settings, client, store)


@pytest.fixture()
def subprocess_env(tmp_path: Path) -> dict[str, str]:
    """Baseline env for subprocess-based MCP tests, isolated from any local kholagy.yaml values."""
    env = os.environ.copy()
    env["KHOLAGY__CACHE__DB_PATH"] = str(tmp_path / "cache.db")
    env["KHOLAGY__LOGGING__FORMAT"] = "json"
    env["KHOLAGY__SCRIPTURE__API_KEY"] = ""
    return env
