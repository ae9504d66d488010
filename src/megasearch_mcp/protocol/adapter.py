"""Expose the search capability as an MCP tool."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, Protocol

from mcp import types

from megasearch_mcp.errors import QUERY_VALIDATION_MESSAGE, MegaSearchError
from megasearch_mcp.tools.formatting import format_search_result
from megasearch_mcp.tools.megasearch import SearchInvoker
from megasearch_mcp.tools.progress import ProgressEvent, ProgressSink, discard_progress

SEARCH_TOOL_NAME = "search"

SEARCH_TOOL = types.Tool(
    name=SEARCH_TOOL_NAME,
    description=(
        "Search the web for any information using MegaSearch. "
        "Fires multiple search engines in parallel, extracts content, "
        "analyzes results, and synthesizes a comprehensive answer with citations. "
        "Just provide your question - the system handles everything else. "
        "Note: Comprehensive searches may take 30-60 seconds."
    ),
    inputSchema={
        "type": "object",
        "properties": {
            "query": {
                "type": "string",
                "description": "Your search query - ask anything",
            },
        },
        "required": ["query"],
    },
)

logger = logging.getLogger("megasearch_mcp.protocol")


class ProgressNotifier(Protocol):
    async def __call__(
        self,
        progress_token: str | int,
        progress: float,
        total: float | None = None,
        message: str | None = None,
    ) -> None:
        ...


def _text_result(text: str, *, is_error: bool = False) -> types.CallToolResult:
    return types.CallToolResult(
        content=[types.TextContent(type="text", text=text)],
        isError=is_error,
    )


class SearchToolAdapter:
    """Validates tool calls, routes them to the invoker and converts every failure."""

    def __init__(self, invoker: SearchInvoker) -> None:
        self._invoker = invoker

    def list_tools(self) -> list[types.Tool]:
        return [SEARCH_TOOL]

    async def call_tool(
        self,
        name: str,
        arguments: Mapping[str, Any] | None,
        *,
        progress_token: str | int | None = None,
        notify: ProgressNotifier | None = None,
    ) -> types.CallToolResult:
        if name != SEARCH_TOOL_NAME:
            return _text_result(f"Unknown tool: {name}", is_error=True)

        query = (arguments or {}).get("query")
        if not isinstance(query, str) or not query.strip():
            return _text_result(QUERY_VALIDATION_MESSAGE, is_error=True)

        sink = self.progress_sink(progress_token, notify)
        try:
            result = await self._invoker.execute(query.strip(), sink)
        except MegaSearchError as exc:
            logger.info(
                "megasearch.tool.error",
                extra={"data": {"error": exc.__class__.__name__, "message": str(exc)}},
            )
            return _text_result(f"Search error: {exc}", is_error=True)
        except Exception as exc:
            logger.exception("megasearch.tool.unexpected_error")
            return _text_result(f"Search error: {str(exc) or 'Unknown error occurred'}", is_error=True)

        return _text_result(format_search_result(result))

    @staticmethod
    def progress_sink(progress_token: str | int | None, notify: ProgressNotifier | None) -> ProgressSink:
        """Bind progress events to the caller's token; a no-op when none was supplied."""
        if progress_token is None or notify is None:
            return discard_progress

        async def send(event: ProgressEvent) -> None:
            try:
                await notify(progress_token, event.progress, total=event.total, message=event.message)
            except Exception:
                logger.warning(
                    "megasearch.progress.failed",
                    exc_info=True,
                    extra={"data": {"progress": event.progress, "message": event.message}},
                )

        return send


__all__ = ["SEARCH_TOOL", "SEARCH_TOOL_NAME", "ProgressNotifier", "SearchToolAdapter"]
