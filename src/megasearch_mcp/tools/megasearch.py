"""Search invoker for the MegaSearch REST API."""

from __future__ import annotations

import logging
import time
from typing import Any

import httpx
from opentelemetry import trace
from opentelemetry.trace import SpanKind
from pydantic import ValidationError

from megasearch_mcp.auth.token_provider import TokenProvider
from megasearch_mcp.config.settings import DEFAULT_TIMEOUT_MS
from megasearch_mcp.errors import (
    AuthenticationError,
    GenericSearchError,
    InsufficientCreditsError,
    InvalidResponseError,
    QueryValidationError,
    RateLimitError,
    SearchTimeoutError,
    SearchTransportError,
)
from megasearch_mcp.observability.logging import CALLS_LOGGER
from megasearch_mcp.tools.progress import (
    PROGRESS_TOTAL,
    TICK_INTERVAL_SECONDS,
    ProgressEvent,
    ProgressSink,
    discard_progress,
    scoped_operation,
)
from megasearch_mcp.tools.search_models import SearchRequest, SearchResult

SEARCH_PATH = "/api/v1/search"

_LOGGER = logging.getLogger(CALLS_LOGGER)


class SearchInvoker:
    """Issues one proxied search per call with a deadline and liveness progress.

    No retries are attempted; a failed call surfaces a classified error from
    :mod:`megasearch_mcp.errors`.
    """

    def __init__(
        self,
        *,
        base_url: str,
        token_provider: TokenProvider,
        client: httpx.AsyncClient | None = None,
        timeout_ms: int = DEFAULT_TIMEOUT_MS,
        tick_interval_seconds: float = TICK_INTERVAL_SECONDS,
    ) -> None:
        if timeout_ms <= 0:
            raise ValueError("search timeout must be positive")
        self._base_url = base_url.rstrip("/")
        self._tokens = token_provider
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient()
        self._timeout_ms = timeout_ms
        self._tick_interval_seconds = tick_interval_seconds

    @property
    def timeout_ms(self) -> int:
        return self._timeout_ms

    async def execute(self, query: str, progress: ProgressSink | None = None) -> SearchResult:
        sink = progress or discard_progress
        try:
            request = SearchRequest(query=query)
        except ValidationError as exc:
            raise QueryValidationError() from exc

        access_token = await self._tokens.get_access_token()
        await sink(ProgressEvent(0, PROGRESS_TOTAL, "Starting search..."))

        tracer = trace.get_tracer("megasearch_mcp.tools.megasearch")
        with tracer.start_as_current_span(
            "megasearch.search",
            kind=SpanKind.CLIENT,
            attributes={"http.method": "POST", "http.target": SEARCH_PATH},
        ) as span:
            started = time.perf_counter()
            try:
                async with scoped_operation(
                    timeout_seconds=self._timeout_ms / 1000,
                    sink=sink,
                    tick_interval_seconds=self._tick_interval_seconds,
                ):
                    await sink(ProgressEvent(10, PROGRESS_TOTAL, "Sending query to MegaSearch..."))
                    resp = await self._send(request, access_token)
            except TimeoutError as exc:
                span.set_attributes({"megasearch.error": "timeout"})
                _LOGGER.warning(
                    "megasearch.search.timeout",
                    extra={"data": {"timeout_ms": self._timeout_ms}},
                )
                raise SearchTimeoutError(self._timeout_ms) from exc
            except httpx.HTTPError as exc:
                span.set_attributes({"megasearch.error": exc.__class__.__name__})
                raise SearchTransportError(f"Search request error: {exc}") from exc

            latency_ms = round((time.perf_counter() - started) * 1000, 2)
            span.set_attributes({"http.status_code": resp.status_code})

            if not resp.is_success:
                error = self._classify_failure(resp)
                span.set_attributes({"megasearch.error": f"http_{resp.status_code}"})
                _LOGGER.warning(
                    "megasearch.search.failed",
                    extra={
                        "data": {
                            "status_code": resp.status_code,
                            "error": error.__class__.__name__,
                            "latency_ms": latency_ms,
                        }
                    },
                )
                raise error

            await sink(ProgressEvent(95, PROGRESS_TOTAL, "Formatting results..."))
            result = self._decode_result(resp)
            span.set_attributes({"megasearch.source_count": len(result.sources)})

        _LOGGER.info(
            "megasearch.search.complete",
            extra={
                "data": {
                    "status_code": resp.status_code,
                    "latency_ms": latency_ms,
                    "source_count": len(result.sources),
                    "credits_charged": result.usage.credits_charged if result.usage else None,
                }
            },
        )
        await sink(ProgressEvent(100, PROGRESS_TOTAL, "Search complete!"))
        return result

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    # ------------------------------------------------------------------
    # internal

    async def _send(self, request: SearchRequest, access_token: str) -> httpx.Response:
        headers = {
            "Authorization": f"Bearer {access_token}",
            "content-type": "application/json",
        }
        # the scoped deadline governs the call, not the client's default timeout
        return await self._client.post(
            f"{self._base_url}{SEARCH_PATH}",
            headers=headers,
            json=request.model_dump(),
            timeout=None,
        )

    def _classify_failure(self, resp: httpx.Response) -> GenericSearchError:
        detail = _error_detail(resp)
        status = resp.status_code
        if status == httpx.codes.UNAUTHORIZED:
            self._tokens.invalidate()
            return AuthenticationError(detail)
        if status == httpx.codes.PAYMENT_REQUIRED:
            return InsufficientCreditsError(detail)
        if status == httpx.codes.TOO_MANY_REQUESTS:
            return RateLimitError(detail)
        return GenericSearchError(status, detail)

    @staticmethod
    def _decode_result(resp: httpx.Response) -> SearchResult:
        try:
            return SearchResult.model_validate(resp.json())
        except ValueError as exc:
            raise InvalidResponseError("Search failed: response was not a valid search result") from exc


def _error_detail(resp: httpx.Response) -> str:
    try:
        body: Any = resp.json()
    except ValueError:
        body = {}
    if not isinstance(body, dict):
        body = {}
    for key in ("detail", "message"):
        value = body.get(key)
        if value:
            return value if isinstance(value, str) else str(value)
    return resp.reason_phrase


__all__ = ["SearchInvoker", "SEARCH_PATH"]
