"""MCP-facing adapter for the search tool."""
