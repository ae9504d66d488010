"""Entrypoint for running the MegaSearch bridge as an MCP stdio server."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from collections.abc import Sequence
from typing import Any

import httpx
from mcp import types
from mcp.server.lowlevel import Server
from mcp.server.stdio import stdio_server

from megasearch_mcp import __version__
from megasearch_mcp.auth.credentials import Credentials
from megasearch_mcp.auth.token_provider import TokenProvider
from megasearch_mcp.config.settings import MegaSearchSettings
from megasearch_mcp.errors import ConfigError
from megasearch_mcp.observability.logging import configure_logging
from megasearch_mcp.protocol.adapter import SearchToolAdapter
from megasearch_mcp.tools.megasearch import SearchInvoker

SERVER_NAME = "megasearch"
TOKEN_REQUEST_TIMEOUT_SECONDS = 30.0

logger = logging.getLogger("megasearch_mcp.server")

_USAGE = """\
Error: MEGASEARCH_CLIENT_ID and MEGASEARCH_CLIENT_SECRET environment variables are required

Usage:
  MEGASEARCH_CLIENT_ID=mcp_xxx MEGASEARCH_CLIENT_SECRET=yyy megasearch-mcp

Or set them in your MCP client configuration.
"""


def build_server(adapter: SearchToolAdapter) -> Server[Any, Any]:
    server: Server[Any, Any] = Server(SERVER_NAME, version=__version__)

    @server.list_tools()
    async def list_tools() -> list[types.Tool]:
        return adapter.list_tools()

    @server.call_tool(validate_input=False)
    async def call_tool(name: str, arguments: dict[str, Any]) -> types.CallToolResult:
        ctx = server.request_context
        progress_token = ctx.meta.progressToken if ctx.meta is not None else None
        return await adapter.call_tool(
            name,
            arguments,
            progress_token=progress_token,
            notify=ctx.session.send_progress_notification,
        )

    return server


async def serve(settings: MegaSearchSettings, credentials: Credentials) -> None:
    async with httpx.AsyncClient(timeout=TOKEN_REQUEST_TIMEOUT_SECONDS) as client:
        token_provider = TokenProvider(
            base_url=settings.base_url,
            credentials=credentials,
            client=client,
        )
        invoker = SearchInvoker(
            base_url=settings.base_url,
            token_provider=token_provider,
            client=client,
            timeout_ms=settings.timeout_ms,
        )
        server = build_server(SearchToolAdapter(invoker))

        async with stdio_server() as (read_stream, write_stream):
            logger.info(
                "MegaSearch MCP proxy started",
                extra={
                    "data": {
                        "base_url": settings.base_url,
                        "client_id": f"{credentials.client_id[:10]}...",
                        "timeout_s": settings.timeout_seconds,
                    }
                },
            )
            await server.run(read_stream, write_stream, server.create_initialization_options())
    logger.info("MegaSearch MCP proxy stopped")


def main(argv: Sequence[str] | None = None) -> None:
    parser = argparse.ArgumentParser(
        prog="megasearch-mcp",
        description="MCP stdio bridge to the MegaSearch API (OAuth client credentials).",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.parse_args(argv)

    configure_logging()
    settings = MegaSearchSettings.load()
    try:
        credentials = settings.credentials()
    except ConfigError:
        sys.stderr.write(_USAGE)
        raise SystemExit(1) from None

    try:
        asyncio.run(serve(settings, credentials))
    except KeyboardInterrupt:
        logger.info("interrupted")


if __name__ == "__main__":  # pragma: no cover
    main()
