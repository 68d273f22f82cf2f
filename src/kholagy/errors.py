from __future__ import annotations

from enum import StrEnum


class ErrorCode(StrEnum):
    CONFIGURATION_MISSING = "CONFIGURATION_MISSING"
    UPSTREAM_FAILED = "UPSTREAM_FAILED"
    UPSTREAM_UNREACHABLE = "UPSTREAM_UNREACHABLE"
    PAYLOAD_INVALID = "PAYLOAD_INVALID"
    INVALID_INPUT = "INVALID_INPUT"
    DOCUMENT_NOT_FOUND = "DOCUMENT_NOT_FOUND"


class KholagyError(Exception):
    """Base class for every expected failure raised by the access layer.

    Adapters raise subclasses; the cache orchestrator decides whether a stale
    value can stand in for them. Whatever is left reaches the caller, which
    renders a retry affordance.
    """

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        suggestion: str,
        recoverable: bool = False,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.suggestion = suggestion
        self.recoverable = recoverable

    def to_dict(self) -> dict:
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "suggestion": self.suggestion,
                "recoverable": self.recoverable,
            }
        }


class ConfigurationError(KholagyError):
    """A required setting (usually a credential) is absent at call time."""

    def __init__(self, message: str, suggestion: str) -> None:
        super().__init__(
            code=ErrorCode.CONFIGURATION_MISSING,
            message=message,
            suggestion=suggestion,
            recoverable=False,
        )


class UpstreamError(KholagyError):
    """Non-success HTTP response or transport failure from an upstream service.

    ``status_code`` is ``None`` when no response was received at all.
    """

    def __init__(
        self,
        message: str,
        *,
        url: str,
        status_code: int | None = None,
        body: str = "",
    ) -> None:
        super().__init__(
            code=ErrorCode.UPSTREAM_FAILED if status_code is not None else ErrorCode.UPSTREAM_UNREACHABLE,
            message=message,
            suggestion="The upstream service may be temporarily unavailable. Try again later.",
            recoverable=True,
        )
        self.url = url
        self.status_code = status_code
        self.body = body


class ParseError(KholagyError):
    """Response body is not valid JSON or does not have the expected shape."""

    def __init__(self, message: str) -> None:
        super().__init__(
            code=ErrorCode.PAYLOAD_INVALID,
            message=message,
            suggestion="The upstream payload format may have changed.",
            recoverable=True,
        )
