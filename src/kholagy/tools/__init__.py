"""MCP tool handlers.

Each handler receives AppState, validates its arguments, calls the content
service and returns a plain dict. No MCP or FastMCP imports here; server.py
handles the MCP wiring.
"""

from __future__ import annotations

from kholagy.errors import ErrorCode, KholagyError


def invalid_input(exc: ValueError, suggestion: str) -> KholagyError:
    return KholagyError(
        code=ErrorCode.INVALID_INPUT,
        message=str(exc),
        suggestion=suggestion,
        recoverable=False,
    )
