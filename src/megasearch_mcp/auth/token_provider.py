"""OAuth 2.0 client-credentials token acquisition with lazy refresh."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable

import httpx
from opentelemetry import trace
from opentelemetry.trace import SpanKind
from pydantic import BaseModel, ConfigDict, ValidationError

from megasearch_mcp.auth.credentials import CachedToken, Credentials, TokenCache
from megasearch_mcp.errors import ConfigError, TokenExchangeError

TOKEN_PATH = "/api/v1/oauth/token"

_LOGGER = logging.getLogger("megasearch_mcp.auth.token_provider")


class TokenResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    access_token: str
    expires_in: float


class TokenProvider:
    """Returns a usable bearer token, exchanging credentials only when the cache is stale."""

    def __init__(
        self,
        *,
        base_url: str,
        credentials: Credentials,
        client: httpx.AsyncClient | None = None,
        cache: TokenCache | None = None,
        clock: Callable[[], float] = time.time,
        timeout: float = 30.0,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._credentials = credentials
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=timeout)
        self._cache = cache or TokenCache()
        self._clock = clock

    @property
    def cache(self) -> TokenCache:
        return self._cache

    async def get_access_token(self) -> str:
        cached = self._cache.usable_token(self._clock())
        if cached is not None:
            return cached

        if not self._credentials.client_id or not self._credentials.client_secret:
            raise ConfigError()

        token = await self._exchange()
        self._cache.replace(token)
        return token.access_token

    def invalidate(self) -> None:
        """Drop the cached token so the next call re-authenticates."""
        if self._cache.current is not None:
            _LOGGER.info("megasearch.token.invalidated")
        self._cache.invalidate()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    # ------------------------------------------------------------------
    # internal

    async def _exchange(self) -> CachedToken:
        url = f"{self._base_url}{TOKEN_PATH}"
        form = {
            "grant_type": "client_credentials",
            "client_id": self._credentials.client_id,
            "client_secret": self._credentials.client_secret,
        }
        tracer = trace.get_tracer("megasearch_mcp.auth")
        with tracer.start_as_current_span(
            "megasearch.token_exchange",
            kind=SpanKind.CLIENT,
            attributes={"http.method": "POST", "http.target": TOKEN_PATH},
        ) as span:
            started = time.perf_counter()
            try:
                resp = await self._client.post(url, data=form)
            except httpx.HTTPError as exc:
                span.set_attributes({"megasearch.error": exc.__class__.__name__})
                raise TokenExchangeError(None, str(exc) or exc.__class__.__name__) from exc

            span.set_attributes({"http.status_code": resp.status_code})
            if not resp.is_success:
                _LOGGER.warning(
                    "megasearch.token.exchange_failed",
                    extra={"data": {"status_code": resp.status_code}},
                )
                raise TokenExchangeError(resp.status_code, resp.text)

            try:
                payload = TokenResponse.model_validate(resp.json())
            except (ValueError, ValidationError) as exc:
                span.set_attributes({"megasearch.error": "invalid_token_response"})
                raise TokenExchangeError(resp.status_code, "token response was not valid JSON") from exc

        now = self._clock()
        token = CachedToken(access_token=payload.access_token, expires_at=now + payload.expires_in)
        _LOGGER.info(
            "megasearch.token.refreshed",
            extra={
                "data": {
                    "expires_in": payload.expires_in,
                    "latency_ms": round((time.perf_counter() - started) * 1000, 2),
                }
            },
        )
        return token


__all__ = ["TokenProvider", "TokenResponse", "TOKEN_PATH"]
