"""Request/response models for the MegaSearch search endpoint."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator


class SearchRequest(BaseModel):
    """Body of ``POST /api/v1/search``."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    query: str

    @field_validator("query")
    @classmethod
    def _non_blank(cls, value: str) -> str:
        stripped = value.strip()
        if not stripped:
            raise ValueError("query must be non-empty")
        return stripped


class SearchSource(BaseModel):
    """Single cited source; ``index`` is 1-based."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    index: int
    title: str
    url: str
    snippet: str = ""
    provider: str | None = None
    content: str | None = None


class SearchMetadata(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)

    iterations: int
    providers_used: tuple[str, ...] = ()
    total_raw_results: int | None = None
    deduplicated_results: int | None = None
    used_paid_apis: bool = False
    gaps_identified: tuple[str, ...] | None = None
    refined_queries: tuple[str, ...] | None = None
    total_time_ms: int | float


class SearchUsage(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)

    credits_charged: int | float
    credits_remaining: int | float
    plan: str


class SearchResult(BaseModel):
    """Synthesized answer with sources as returned by the search endpoint."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    query: str
    answer: str
    sources: tuple[SearchSource, ...] = Field(default_factory=tuple)
    metadata: SearchMetadata | None = None
    usage: SearchUsage | None = None

    @field_validator("sources", mode="before")
    @classmethod
    def _null_sources(cls, value: object) -> object:
        return value if value is not None else ()


__all__ = [
    "SearchRequest",
    "SearchSource",
    "SearchMetadata",
    "SearchUsage",
    "SearchResult",
]
