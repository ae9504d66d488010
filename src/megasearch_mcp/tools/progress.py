"""Progress telemetry and the scoped liveness ticker used around the search call."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import AsyncIterator
from dataclasses import dataclass
from typing import Protocol

PROGRESS_TOTAL = 100
TICK_INTERVAL_SECONDS = 10.0
TICK_START = 5
TICK_STEP = 5
TICK_CAP = 90
TICKER_TASK_NAME = "megasearch.liveness_ticker"

PHASE_MESSAGES: tuple[str, ...] = (
    "Querying search engines...",
    "Analyzing results...",
    "Extracting content...",
    "Synthesizing answer...",
    "Processing sources...",
    "Finalizing response...",
)

_LOGGER = logging.getLogger("megasearch_mcp.tools.progress")


@dataclass(frozen=True)
class ProgressEvent:
    progress: int
    total: int
    message: str


class ProgressSink(Protocol):
    async def __call__(self, event: ProgressEvent) -> None:
        ...


async def discard_progress(event: ProgressEvent) -> None:
    del event


def phase_message(counter: int) -> str:
    index = int(counter / PROGRESS_TOTAL * len(PHASE_MESSAGES))
    return PHASE_MESSAGES[min(max(index, 0), len(PHASE_MESSAGES) - 1)]


async def _run_ticker(sink: ProgressSink, interval_seconds: float) -> None:
    counter = TICK_START
    while True:
        await asyncio.sleep(interval_seconds)
        counter = min(counter + TICK_STEP, TICK_CAP)
        try:
            await sink(ProgressEvent(counter, PROGRESS_TOTAL, phase_message(counter)))
        except Exception:
            _LOGGER.warning("megasearch.ticker.emit_failed", exc_info=True)


@contextlib.asynccontextmanager
async def scoped_operation(
    *,
    timeout_seconds: float,
    sink: ProgressSink,
    tick_interval_seconds: float = TICK_INTERVAL_SECONDS,
) -> AsyncIterator[None]:
    """Run the body under a deadline while a liveness ticker reports progress.

    Both the deadline and the ticker are torn down on every exit path. An
    expired deadline surfaces as the builtin ``TimeoutError``.
    """
    ticker = asyncio.create_task(_run_ticker(sink, tick_interval_seconds), name=TICKER_TASK_NAME)
    try:
        async with asyncio.timeout(timeout_seconds):
            yield
    finally:
        ticker.cancel()
        try:
            await ticker
        except asyncio.CancelledError:
            current = asyncio.current_task()
            if current is not None and current.cancelling():
                raise
        _LOGGER.debug("megasearch.ticker.stopped")


__all__ = [
    "PHASE_MESSAGES",
    "PROGRESS_TOTAL",
    "TICK_INTERVAL_SECONDS",
    "TICKER_TASK_NAME",
    "ProgressEvent",
    "ProgressSink",
    "discard_progress",
    "phase_message",
    "scoped_operation",
]
