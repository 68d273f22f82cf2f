"""Application state container.

AppState is created once at server startup (inside the FastMCP lifespan context
manager) and injected into every tool handler via the MCP Context object.
``build_state`` does the wiring so tests can assemble the same graph over an
in-memory store and a mocked HTTP client.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from kholagy.coptic import CopticCalendarAdapter
from kholagy.documents import DocumentResolver
from kholagy.documents import registry_from_directory as document_registry
from kholagy.fetcher import JsonFetcher
from kholagy.orchestrator import CacheOrchestrator
from kholagy.orthocal import OrthocalAdapter
from kholagy.scripture import ScriptureAdapter
from kholagy.service import ContentService
from kholagy.synaxarium import SynaxariumResolver
from kholagy.synaxarium import registry_from_directory as synaxarium_registry

if TYPE_CHECKING:
    import httpx

    from kholagy.cache import CacheStore
    from kholagy.config import Settings


@dataclass
class AppState:
    """Holds all shared runtime state. Passed to every tool handler."""

    settings: Settings
    http_client: httpx.AsyncClient
    store: CacheStore
    orchestrator: CacheOrchestrator
    service: ContentService


def build_state(settings: Settings, http_client: httpx.AsyncClient, store: CacheStore) -> AppState:
    fetcher = JsonFetcher(http_client)
    orchestrator = CacheOrchestrator(store, settings.cache)
    content = settings.content

    synaxarium = SynaxariumResolver(
        synaxarium_registry(content.synaxarium_dir) if content.synaxarium_dir else {},
    )
    documents = DocumentResolver(
        document_registry(content.documents_dir) if content.documents_dir else {},
        default_language=content.default_language,
    )

    service = ContentService(
        ScriptureAdapter(fetcher, orchestrator, settings.scripture),
        CopticCalendarAdapter(fetcher, orchestrator, settings.calendar),
        synaxarium,
        documents,
        OrthocalAdapter(fetcher, orchestrator, settings.orthocal),
        scripture_settings=settings.scripture,
    )
    return AppState(
        settings=settings,
        http_client=http_client,
        store=store,
        orchestrator=orchestrator,
        service=service,
    )
