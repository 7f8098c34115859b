"""
Operation Metrics for swarmtopo
===============================

Process-wide, append-only store of operation durations keyed by name,
with a named timer for wrapping async operations.

The store has no eviction and no deletion: it grows for the lifetime of
the process, which is fine at diagnostic scale.

Usage:
    from swarmtopo.observability import metrics

    async with metrics.measure("circular"):
        result = await run_topology()

    print(metrics.get_metrics()["circular"]["avg"])
"""

from __future__ import annotations

import asyncio
import logging
import statistics
import time
from typing import Dict, List, Optional, Tuple

logger = logging.getLogger("swarmtopo.observability.metrics")


class MetricsRecorder:
    """
    Records durations (milliseconds) per operation name.

    Only two mutations exist: ``record`` and the success path of
    ``measure``. Readers get snapshots computed on demand.

    Usage:
        recorder = MetricsRecorder()
        recorder.record("star", 12.5)
        recorder.get_metrics()
        # {"star": {"avg": 12.5, "min": 12.5, "max": 12.5, "count": 1}}
    """

    def __init__(self):
        self._durations: Dict[str, List[float]] = {}

    def record(self, name: str, duration_ms: float) -> None:
        """Append one observed duration under ``name``."""
        if name not in self._durations:
            self._durations[name] = []
        self._durations[name].append(duration_ms)

    def measure(self, name: str) -> MetricsTimer:
        """Return an async context manager timing the wrapped block."""
        return MetricsTimer(self, name)

    def get_durations(self, name: str) -> Tuple[float, ...]:
        """All durations recorded under ``name``, oldest first."""
        return tuple(self._durations.get(name, ()))

    def get_metrics(self) -> Dict[str, Dict[str, float]]:
        """
        Aggregate view over everything recorded since the recorder was created.

        Returns:
            Dict mapping operation name to ``avg``, ``min``, ``max`` and ``count``.
        """
        summary: Dict[str, Dict[str, float]] = {}
        for name, values in self._durations.items():
            summary[name] = {
                "avg": statistics.mean(values),
                "min": min(values),
                "max": max(values),
                "count": len(values),
            }
        return summary


class MetricsTimer:
    """
    Async context manager that times one operation.

    On success the elapsed time is recorded. On failure the error is
    logged together with the operation name, a note naming the operation
    is attached, and the exception propagates; no duration is recorded.
    """

    def __init__(self, recorder: MetricsRecorder, name: str):
        self.recorder = recorder
        self.name = name
        self._start: Optional[float] = None

    async def __aenter__(self) -> MetricsTimer:
        self._start = time.perf_counter()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> bool:
        elapsed_ms = (time.perf_counter() - self._start) * 1000.0

        if exc_val is None:
            self.recorder.record(self.name, elapsed_ms)
            logger.debug(f"{self.name} completed in {elapsed_ms:.1f}ms")
            return False

        if isinstance(exc_val, asyncio.CancelledError):
            logger.debug(f"{self.name} cancelled after {elapsed_ms:.1f}ms")
            return False

        logger.error(
            f"Operation {self.name} failed after {elapsed_ms:.1f}ms: "
            f"{exc_type.__name__}: {exc_val}"
        )
        if isinstance(exc_val, Exception):
            exc_val.add_note(f"swarmtopo operation: {self.name}")
        return False


# Process-wide recorder used unless a caller injects its own
metrics = MetricsRecorder()


def get_metrics() -> Dict[str, Dict[str, float]]:
    """Snapshot of the process-wide recorder."""
    return metrics.get_metrics()
