"""Local MCP bridge to the MegaSearch API."""

__version__ = "1.0.0"
