"""Client identity and the cached bearer token."""

from __future__ import annotations

from dataclasses import dataclass

TOKEN_EXPIRY_BUFFER_SECONDS = 60.0


@dataclass(frozen=True)
class Credentials:
    client_id: str
    client_secret: str

    def __repr__(self) -> str:
        return f"Credentials(client_id={self.client_id!r}, client_secret='**********')"


@dataclass(frozen=True)
class CachedToken:
    """Bearer token plus the absolute expiry instant (epoch seconds)."""

    access_token: str
    expires_at: float

    def is_usable(self, now: float, *, buffer_seconds: float = TOKEN_EXPIRY_BUFFER_SECONDS) -> bool:
        return now < self.expires_at - buffer_seconds


class TokenCache:
    """Holds at most one token; replaced as a whole value, never mutated in place."""

    def __init__(self) -> None:
        self._token: CachedToken | None = None

    @property
    def current(self) -> CachedToken | None:
        return self._token

    def usable_token(self, now: float) -> str | None:
        token = self._token
        if token is not None and token.is_usable(now):
            return token.access_token
        return None

    def replace(self, token: CachedToken) -> None:
        self._token = token

    def invalidate(self) -> None:
        self._token = None


__all__ = ["Credentials", "CachedToken", "TokenCache", "TOKEN_EXPIRY_BUFFER_SECONDS"]
