"""Logging setup for the bridge (formatter + dictConfig builder).

stdout carries the MCP protocol, so every handler writes to stderr.
"""

from __future__ import annotations

import json
import logging
import os
from logging.config import dictConfig
from typing import Any

from opentelemetry import trace

CALLS_LOGGER = "megasearch_mcp.tools.megasearch.calls"


def _level(env_var: str, default: str) -> str:
    return os.getenv(env_var, default).upper()


class ExtrasFormatter(logging.Formatter):
    """Append structured `data` payloads and the active trace id when present."""

    def format(self, record: logging.LogRecord) -> str:
        formatted = super().format(record)
        record_data = record.__dict__.get("data")
        if record_data:
            try:
                encoded = json.dumps(record_data, sort_keys=True, separators=(",", ":"))
            except TypeError:
                encoded = str(record_data)
            formatted = f"{formatted} | data={encoded}"
        trace_id = record.__dict__.get("otel_trace_id")
        if trace_id:
            formatted = f"{formatted} | trace={trace_id}/{record.__dict__.get('otel_span_id')}"
        return formatted


class OtelContextLogFilter(logging.Filter):
    """Stamp the active OpenTelemetry trace/span ids onto the record."""

    def filter(self, record: logging.LogRecord) -> bool:
        span_context = trace.get_current_span().get_span_context()
        if span_context.is_valid:
            record.otel_trace_id = f"{span_context.trace_id:032x}"
            record.otel_span_id = f"{span_context.span_id:016x}"
        return True


def build_log_config(*, root_level_env: str = "LOG_LEVEL", root_default: str = "INFO") -> dict[str, Any]:
    """Return a dictConfig-compatible logging configuration."""

    def _logger(env_var: str, default: str) -> dict[str, Any]:
        return {"level": _level(env_var, default), "handlers": ["console"], "propagate": False}

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "console": {
                "()": ExtrasFormatter,
                "format": "%(asctime)s %(levelname)s %(name)s: %(message)s",
                "datefmt": "%Y-%m-%dT%H:%M:%S",
            }
        },
        "filters": {
            "otel_context": {"()": OtelContextLogFilter},
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "console",
                "stream": "ext://sys.stderr",
                "filters": ["otel_context"],
            }
        },
        "root": {
            "level": _level(root_level_env, root_default),
            "handlers": ["console"],
        },
        "loggers": {
            "httpx": _logger("HTTPX_LOG_LEVEL", "WARNING"),
            "httpcore": _logger("HTTPX_LOG_LEVEL", "WARNING"),
            "mcp": _logger("MCP_LOG_LEVEL", "WARNING"),
            CALLS_LOGGER: _logger("MEGASEARCH_CALL_LOG_LEVEL", "INFO"),
        },
    }


def configure_logging(*, root_level_env: str = "LOG_LEVEL", root_default: str = "INFO") -> None:
    """Apply the bridge logging config."""
    dictConfig(build_log_config(root_level_env=root_level_env, root_default=root_default))


__all__ = ["CALLS_LOGGER", "ExtrasFormatter", "OtelContextLogFilter", "build_log_config", "configure_logging"]
