"""HTTP JSON fetcher and endpoint fallback chain.

All network I/O goes through a single JsonFetcher instance shared by the
adapters. The JsonFetcher receives an httpx.AsyncClient via constructor
injection; the lifespan owns the client lifecycle.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Generic, TypeVar

import httpx
import structlog

from kholagy import __version__
from kholagy.errors import ParseError, UpstreamError

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Mapping, Sequence

    from kholagy.protocols import JsonFetcherProtocol

T = TypeVar("T")

log = structlog.get_logger()

_BODY_EXCERPT_CHARS = 500


def build_http_client() -> httpx.AsyncClient:
    """Create the shared httpx client. Called once at startup."""
    return httpx.AsyncClient(
        follow_redirects=True,
        timeout=httpx.Timeout(30.0, connect=10.0),
        headers={"User-Agent": f"kholagy/{__version__}"},
        limits=httpx.Limits(
            max_connections=10,
            max_keepalive_connections=5,
        ),
    )


def join_url(base_url: str, path: str) -> str:
    """Join a base URL and a path without doubling or dropping slashes."""
    return f"{base_url.rstrip('/')}/{path.lstrip('/')}"


class JsonFetcher:
    """GET requests that return parsed JSON or raise UpstreamError / ParseError."""

    def __init__(self, client: httpx.AsyncClient) -> None:
        self._client = client

    async def get_json(
        self,
        url: str,
        *,
        params: Mapping[str, str | int] | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> Any:
        """Fetch ``url`` and decode its JSON body.

        A 204 response yields ``None``. Non-2xx responses raise UpstreamError
        carrying the status and body; transport failures raise UpstreamError
        with ``status_code=None``; undecodable bodies raise ParseError.
        """
        request_headers = {"Accept": "application/json", **(headers or {})}
        try:
            response = await self._client.get(url, params=params, headers=request_headers)
        except httpx.HTTPError as exc:
            raise UpstreamError(f"Network error fetching {url}: {exc}", url=url) from exc

        if not response.is_success:
            body = response.text[:_BODY_EXCERPT_CHARS]
            raise UpstreamError(
                f"HTTP {response.status_code} fetching {url}: {body or response.reason_phrase}",
                url=url,
                status_code=response.status_code,
                body=body,
            )

        if response.status_code == 204:
            return None

        try:
            payload = response.json()
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise ParseError(f"Invalid JSON response from {url}: {exc}") from exc

        log.info("fetch_complete", url=url, status_code=response.status_code)
        return payload


# ---------------------------------------------------------------------------
# Endpoint fallback chain
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Success(Generic[T]):
    candidate: str
    value: T


@dataclass(frozen=True)
class Failure:
    candidate: str
    error: Exception


@dataclass
class FallbackOutcome(Generic[T]):
    """Record of one run through a fallback chain."""

    attempts: list[Success[T] | Failure] = field(default_factory=list)

    @property
    def result(self) -> Success[T] | None:
        last = self.attempts[-1] if self.attempts else None
        return last if isinstance(last, Success) else None

    @property
    def last_error(self) -> Exception | None:
        for attempt in reversed(self.attempts):
            if isinstance(attempt, Failure):
                return attempt.error
        return None


async def try_in_order(
    candidates: Sequence[str],
    call: Callable[[str], Awaitable[T]],
) -> FallbackOutcome[T]:
    """Call ``call`` on each candidate in turn, stopping at the first success.

    Sequential by design: a dead first candidate costs one round trip before
    the next is tried. Blank candidates are skipped.
    """
    outcome: FallbackOutcome[T] = FallbackOutcome()
    for candidate in (c.strip() for c in candidates):
        if not candidate:
            continue
        try:
            value = await call(candidate)
        except (UpstreamError, ParseError) as exc:
            log.debug("endpoint_candidate_failed", candidate=candidate, error=exc.message)
            outcome.attempts.append(Failure(candidate=candidate, error=exc))
            continue
        outcome.attempts.append(Success(candidate=candidate, value=value))
        break
    return outcome


async def fetch_first_success(
    fetcher: JsonFetcherProtocol,
    base_url: str,
    paths: Sequence[str],
) -> Any:
    """GET each path under ``base_url`` until one returns JSON; raise the last error.

    A candidate answering without a body (204) counts as a failed attempt.
    """

    async def attempt(path: str) -> Any:
        url = join_url(base_url, path)
        payload = await fetcher.get_json(url)
        if payload is None:
            raise ParseError(f"Empty response from {url}")
        return payload

    outcome = await try_in_order(paths, attempt)
    if outcome.result is not None:
        return outcome.result.value

    error = outcome.last_error
    log.warning("endpoint_fallback_failed", base_url=base_url, attempts=len(outcome.attempts))
    if error is None:
        raise UpstreamError(f"No endpoint candidates configured for {base_url}", url=base_url)
    raise error
