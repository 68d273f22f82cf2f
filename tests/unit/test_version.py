"""Unit tests for package version resolution."""

from __future__ import annotations

import importlib.metadata
import importlib.util
from importlib.metadata import PackageNotFoundError
from pathlib import Path

import pytest

import kholagy
from kholagy.fetcher import build_http_client


class TestVersion:
    def test_version_is_a_non_empty_string(self) -> None:
        assert isinstance(kholagy.__version__, str)
        assert kholagy.__version__

    async def test_user_agent_carries_version(self) -> None:
        client = build_http_client()
        try:
            assert client.headers["User-Agent"] == f"kholagy/{kholagy.__version__}"
        finally:
            await client.aclose()

    def test_source_tree_without_metadata_warns(self, monkeypatch: pytest.MonkeyPatch) -> None:
        def missing(_name: str) -> str:
            raise PackageNotFoundError

        monkeypatch.setattr(importlib.metadata, "version", missing)
        init_path = Path(kholagy.__file__).resolve()
        spec = importlib.util.spec_from_file_location("kholagy_without_metadata", init_path)
        assert spec is not None
        assert spec.loader is not None
        module = importlib.util.module_from_spec(spec)

        with pytest.warns(RuntimeWarning, match="'kholagy' not found"):
            spec.loader.exec_module(module)

        assert module.__version__ == "0.0.0+unknown"
