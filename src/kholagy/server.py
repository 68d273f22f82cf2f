"""MCP server entrypoint.

Responsibilities (and nothing more):
- Configure structlog
- Create AppState via the FastMCP lifespan context manager
- Register tools
- Run over stdio
"""

from __future__ import annotations

import json
import logging
import sys
from contextlib import asynccontextmanager
from pathlib import Path
from typing import TYPE_CHECKING

import aiosqlite
import structlog
from mcp.server.fastmcp import Context, FastMCP
from mcp.types import CallToolResult, TextContent

import kholagy.tools.calendar as t_calendar
import kholagy.tools.library as t_library
import kholagy.tools.scripture as t_scripture
from kholagy import __version__
from kholagy.cache import CacheStore
from kholagy.config import Settings
from kholagy.errors import KholagyError
from kholagy.fetcher import build_http_client
from kholagy.state import AppState, build_state

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator, Awaitable

log = structlog.get_logger()


# ---------------------------------------------------------------------------
# Logging setup
# ---------------------------------------------------------------------------


def _setup_logging(settings: Settings) -> None:
    """Configure structlog. Called once at startup before any log statements."""
    log_level = logging.getLevelNamesMapping()[settings.logging.level]

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.TimeStamper(fmt="iso"),
    ]

    if settings.logging.format == "json":
        processors = [*shared_processors, structlog.processors.JSONRenderer()]
    else:
        processors = [*shared_processors, structlog.dev.ConsoleRenderer()]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        # stdout carries the MCP JSON-RPC stream
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )


# ---------------------------------------------------------------------------
# Lifespan
# ---------------------------------------------------------------------------


@asynccontextmanager
async def lifespan(server: FastMCP) -> AsyncGenerator[AppState, None]:
    """Create and tear down all shared resources for the server's lifetime."""
    settings = Settings()
    _setup_logging(settings)
    log.info("server_starting", version=__version__)

    http_client = build_http_client()

    db_path = Path(settings.cache.db_path).expanduser()
    db_path.parent.mkdir(parents=True, exist_ok=True)
    db = await aiosqlite.connect(str(db_path))
    store = CacheStore(db)
    await store.init_db()
    await store.cleanup_if_due(settings.cache.cleanup_interval_hours, settings.cache.retention_days)

    state = build_state(settings, http_client, store)
    if not settings.scripture.api_key:
        log.warning("scripture_api_key_missing", message="Scripture tools will fail until an API key is set.")

    log.info("server_started", version=__version__, db_path=str(db_path))
    try:
        yield state
    finally:
        await http_client.aclose()
        await db.close()
        log.info("server_stopping")


# ---------------------------------------------------------------------------
# FastMCP instance and tool registration
# ---------------------------------------------------------------------------

mcp = FastMCP("kholagy", lifespan=lifespan)
# FastMCP doesn't expose a version kwarg; set it on the underlying Server
# so the MCP initialize handshake reports our version, not the SDK's.
mcp._mcp_server.version = __version__  # pyright: ignore[reportPrivateUsage]


def _serialise_tool_error(error: KholagyError) -> CallToolResult:
    """Convert a KholagyError to the MCP tool error result envelope."""
    return CallToolResult(
        content=[TextContent(type="text", text=json.dumps(error.to_dict()))],
        isError=True,
    )


async def _run_tool(tool: str, call: Awaitable[dict]) -> object:
    try:
        return await call
    except KholagyError as exc:
        log.warning(
            "tool_error",
            tool=tool,
            code=exc.code,
            message=exc.message,
            recoverable=exc.recoverable,
        )
        return _serialise_tool_error(exc)
    except Exception:
        log.error("tool_unexpected_error", tool=tool, exc_info=True)
        raise


def _state(ctx: Context) -> AppState:
    return ctx.request_context.lifespan_context


@mcp.tool()
async def list_translations(ctx: Context) -> object:
    """List the Bible translations available from the scripture service."""
    return await _run_tool("list_translations", t_scripture.list_translations(_state(ctx)))


@mcp.tool()
async def list_books(
    ctx: Context,
    language: str | None = None,
    translation_id: str | None = None,
    grouped: bool = False,
) -> object:
    """List the books of a Bible translation.

    The translation is picked from ``translation_id`` or else the configured
    translation for ``language`` (ar, en, ru). With ``grouped`` the books are
    split into Old Testament, deuterocanon, New Testament and other.
    """
    return await _run_tool(
        "list_books", t_scripture.list_books(_state(ctx), language, translation_id, grouped)
    )


@mcp.tool()
async def list_chapters(
    book_id: str,
    ctx: Context,
    language: str | None = None,
    translation_id: str | None = None,
) -> object:
    """List the chapters of one book."""
    return await _run_tool(
        "list_chapters", t_scripture.list_chapters(_state(ctx), book_id, language, translation_id)
    )


@mcp.tool()
async def read_chapter(
    chapter_id: str,
    ctx: Context,
    language: str | None = None,
    translation_id: str | None = None,
) -> object:
    """Return one chapter as an ordered list of verses (id, number, reference, text)."""
    return await _run_tool(
        "read_chapter", t_scripture.read_chapter(_state(ctx), chapter_id, language, translation_id)
    )


@mcp.tool()
async def search_scripture(
    query: str,
    ctx: Context,
    language: str | None = None,
    translation_id: str | None = None,
) -> object:
    """Free-text scripture search. Returns at most 25 verse hits."""
    return await _run_tool(
        "search_scripture", t_scripture.search(_state(ctx), query, language, translation_id)
    )


@mcp.tool()
async def coptic_day(gregorian: str, ctx: Context, language: str | None = None) -> object:
    """Coptic date, daily readings (matins, vespers, liturgy) and synaxarium for a YYYY-MM-DD date."""
    return await _run_tool("coptic_day", t_calendar.coptic_day(_state(ctx), gregorian, language))


@mcp.tool()
async def orthodox_day(gregorian: str, ctx: Context) -> object:
    """Orthodox (OCA) readings, feasts and fasts for a YYYY-MM-DD date."""
    return await _run_tool("orthodox_day", t_calendar.orthodox_day(_state(ctx), gregorian))


@mcp.tool()
async def synaxarium(month: int, day: int, ctx: Context, language: str | None = None) -> object:
    """Commemorations for a Coptic month (1-13) and day, falling back to English."""
    return await _run_tool("synaxarium", t_library.synaxarium(_state(ctx), month, day, language))


@mcp.tool()
async def read_document(document_id: str, ctx: Context, language: str | None = None) -> object:
    """Read a bundled liturgical text, falling back to another language when needed."""
    return await _run_tool("read_document", t_library.read_document(_state(ctx), document_id, language))


@mcp.tool()
async def search_document(
    document_id: str,
    query: str,
    ctx: Context,
    language: str | None = None,
) -> object:
    """Find lines in a bundled liturgical text that contain ``query``."""
    return await _run_tool(
        "search_document", t_library.search_document(_state(ctx), document_id, query, language)
    )


# ---------------------------------------------------------------------------
# Entrypoint
# ---------------------------------------------------------------------------


def main() -> None:
    mcp.run()


if __name__ == "__main__":
    main()
