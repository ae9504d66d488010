"""Error taxonomy for the MegaSearch bridge.

Every failure carries the message shown to the caller; the protocol adapter
renders ``str(exc)`` into an error result.
"""

from __future__ import annotations

CONFIG_ERROR_MESSAGE = "Missing MEGASEARCH_CLIENT_ID or MEGASEARCH_CLIENT_SECRET environment variables"
QUERY_VALIDATION_MESSAGE = "Error: Query is required and must be a non-empty string"


class MegaSearchError(Exception):
    """Base class for bridge failures."""


class ConfigError(MegaSearchError):
    """Raised when client credentials are not configured."""

    def __init__(self, message: str = CONFIG_ERROR_MESSAGE) -> None:
        super().__init__(message)


class TokenExchangeError(MegaSearchError):
    """Raised when the token endpoint rejects the client-credentials grant."""

    def __init__(self, status_code: int | None, detail: str) -> None:
        self.status_code = status_code
        self.detail = detail
        if status_code is None:
            super().__init__(f"Failed to obtain access token: {detail}")
        else:
            super().__init__(f"Failed to obtain access token: {status_code} {detail}")


class SearchError(MegaSearchError):
    """Base class for failures of the proxied search call."""


class GenericSearchError(SearchError):
    """Raised when the search endpoint answers with a non-success status."""

    def __init__(self, status_code: int, detail: str, message: str | None = None) -> None:
        self.status_code = status_code
        self.detail = detail
        super().__init__(message or f"Search failed: {status_code} - {detail}")


class AuthenticationError(GenericSearchError):
    def __init__(self, detail: str = "") -> None:
        super().__init__(401, detail, "Authentication failed. Please check your credentials.")


class InsufficientCreditsError(GenericSearchError):
    def __init__(self, detail: str = "") -> None:
        super().__init__(
            402,
            detail,
            "Insufficient credits. Please purchase more credits or upgrade your plan.",
        )


class RateLimitError(GenericSearchError):
    def __init__(self, detail: str = "") -> None:
        super().__init__(429, detail, "Rate limit exceeded. Please wait a moment and try again.")


def _seconds_text(milliseconds: int) -> str:
    if milliseconds % 1000 == 0:
        return str(milliseconds // 1000)
    return str(milliseconds / 1000)


class SearchTimeoutError(SearchError, TimeoutError):
    """Raised when no response arrived within the configured timeout."""

    def __init__(self, timeout_ms: int) -> None:
        self.timeout_ms = timeout_ms
        super().__init__(f"Search timed out after {_seconds_text(timeout_ms)} seconds")


class SearchTransportError(SearchError):
    """Raised when the search request could not be delivered."""


class InvalidResponseError(SearchError):
    """Raised when a success response does not decode into a search result."""


class QueryValidationError(MegaSearchError, ValueError):
    """Raised when the ``query`` argument is missing, empty or not a string."""

    def __init__(self, message: str = QUERY_VALIDATION_MESSAGE) -> None:
        super().__init__(message)


__all__ = [
    "CONFIG_ERROR_MESSAGE",
    "QUERY_VALIDATION_MESSAGE",
    "MegaSearchError",
    "ConfigError",
    "TokenExchangeError",
    "SearchError",
    "GenericSearchError",
    "AuthenticationError",
    "InsufficientCreditsError",
    "RateLimitError",
    "SearchTimeoutError",
    "SearchTransportError",
    "InvalidResponseError",
    "QueryValidationError",
]
