from __future__ import annotations

import json
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any
from urllib.parse import parse_qs

import httpx
import pytest

from megasearch_mcp.auth.credentials import Credentials, TokenCache
from megasearch_mcp.auth.token_provider import TokenProvider
from megasearch_mcp.tools.megasearch import SearchInvoker
from megasearch_mcp.tools.progress import ProgressEvent

BASE_URL = "https://megasearch.example"

SEARCH_PAYLOAD: dict[str, Any] = {
    "query": "quantum computing",
    "answer": "Quantum computers use qubits.",
    "sources": [{"index": 1, "title": "A", "url": "http://x", "snippet": "s"}],
}


@pytest.fixture
def anyio_backend() -> str:
    # Force AnyIO-managed tests to use asyncio only
    return "asyncio"


class FakeClock:
    def __init__(self, now: float = 1_700_000_000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@dataclass
class FakeMegaSearchApi:
    """In-memory stand-in for the token and search endpoints."""

    token_responses: list[httpx.Response] = field(default_factory=list)
    search_handler: Callable[[httpx.Request], Any] | None = None
    token_requests: list[dict[str, list[str]]] = field(default_factory=list)
    search_requests: list[httpx.Request] = field(default_factory=list)
    issued: int = 0

    def next_token_response(self) -> httpx.Response:
        if self.token_responses:
            return self.token_responses.pop(0)
        self.issued += 1
        return httpx.Response(200, json={"access_token": f"t{self.issued}", "expires_in": 3600})

    async def handler(self, request: httpx.Request) -> httpx.Response:
        if request.url.path == "/api/v1/oauth/token":
            assert request.method == "POST"
            assert request.headers["content-type"] == "application/x-www-form-urlencoded"
            self.token_requests.append(parse_qs(request.content.decode()))
            return self.next_token_response()
        if request.url.path == "/api/v1/search":
            assert request.method == "POST"
            self.search_requests.append(request)
            if self.search_handler is None:
                return httpx.Response(200, json=SEARCH_PAYLOAD)
            response = self.search_handler(request)
            if not isinstance(response, httpx.Response):
                response = await response
            return response
        raise AssertionError(f"unexpected request: {request.method} {request.url!s}")

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self.handler))

    def search_bodies(self) -> list[dict[str, Any]]:
        return [json.loads(request.content) for request in self.search_requests]


class ProgressRecorder:
    def __init__(self) -> None:
        self.events: list[ProgressEvent] = []

    async def __call__(self, event: ProgressEvent) -> None:
        self.events.append(event)

    @property
    def values(self) -> list[int]:
        return [event.progress for event in self.events]


@pytest.fixture
def fake_api() -> FakeMegaSearchApi:
    return FakeMegaSearchApi()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def credentials() -> Credentials:
    return Credentials(client_id="mcp_client_123456", client_secret="s3cret")


@pytest.fixture
def make_invoker(
    fake_api: FakeMegaSearchApi,
    clock: FakeClock,
    credentials: Credentials,
) -> Callable[..., SearchInvoker]:
    def _make(
        *,
        timeout_ms: int = 5_000,
        tick_interval_seconds: float = 10.0,
        cache: TokenCache | None = None,
    ) -> SearchInvoker:
        client = fake_api.client()
        provider = TokenProvider(
            base_url=BASE_URL,
            credentials=credentials,
            client=client,
            cache=cache,
            clock=clock,
        )
        return SearchInvoker(
            base_url=BASE_URL,
            token_provider=provider,
            client=client,
            timeout_ms=timeout_ms,
            tick_interval_seconds=tick_interval_seconds,
        )

    return _make


@pytest.fixture
def progress() -> ProgressRecorder:
    return ProgressRecorder()
