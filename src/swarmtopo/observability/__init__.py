"""
swarmtopo Observability
=======================

Duration metrics for topology operations.

Usage:
    from swarmtopo.observability import metrics

    async with metrics.measure("mesh"):
        await run_mesh()
"""

from swarmtopo.observability.metrics import (
    MetricsRecorder,
    MetricsTimer,
    get_metrics,
    metrics,
)

__all__ = [
    "MetricsRecorder",
    "MetricsTimer",
    "get_metrics",
    "metrics",
]
