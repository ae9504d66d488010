"""Render a search result as a single markdown text block."""

from __future__ import annotations

from megasearch_mcp.tools.search_models import SearchMetadata, SearchResult, SearchSource, SearchUsage


def format_search_result(result: SearchResult) -> str:
    lines: list[str] = [f"# Answer to: {result.query}", "", result.answer, ""]

    if result.sources:
        lines.extend(["---", "", "## Sources", ""])
        for source in result.sources:
            lines.extend(_source_lines(source))

    if result.metadata is not None:
        lines.extend(["---", "", "## Search Metadata"])
        lines.extend(_metadata_lines(result.metadata))

    if result.usage is not None:
        lines.extend(["", "## Usage"])
        lines.extend(_usage_lines(result.usage))

    return "\n".join(lines)


def _source_lines(source: SearchSource) -> list[str]:
    lines = [f"[{source.index}] **{source.title}**", f"    URL: {source.url}"]
    if source.provider:
        lines.append(f"    Provider: {source.provider}")
    lines.append("")
    return lines


def _metadata_lines(metadata: SearchMetadata) -> list[str]:
    lines = [
        f"- Iterations: {metadata.iterations}",
        f"- Providers: {', '.join(metadata.providers_used)}",
        f"- Total time: {_number(metadata.total_time_ms)}ms",
        f"- Used paid APIs: {_bool_text(metadata.used_paid_apis)}",
    ]
    if metadata.gaps_identified:
        lines.append(f"- Gaps identified: {', '.join(metadata.gaps_identified)}")
    if metadata.refined_queries:
        lines.append(f"- Query refinements: {len(metadata.refined_queries)}")
    return lines


def _usage_lines(usage: SearchUsage) -> list[str]:
    return [
        f"- Credits charged: {_number(usage.credits_charged)}",
        f"- Credits remaining: {_number(usage.credits_remaining)}",
        f"- Plan: {usage.plan}",
    ]


def _number(value: int | float) -> int | float:
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value


def _bool_text(value: bool) -> str:
    return "true" if value else "false"


__all__ = ["format_search_result"]
