"""
Layered topologies: tasks are dealt out one per worker, layer by layer.

- linear: one worker per layer, a sequential relay down the list
- grid: square rows of workers, each row runs concurrently
- pyramid: levels of 1, 2, 3, ... workers, each level runs concurrently

Tasks are assigned in order until either workers or tasks run out;
leftover tasks are not processed and leftover workers stay idle.
"""

from __future__ import annotations

import logging
import math
from typing import List, Optional, Sequence

from swarmtopo.conversation import Conversation, LogSink
from swarmtopo.models import TopologyName
from swarmtopo.observability.metrics import MetricsRecorder
from swarmtopo.topologies.base import (
    TopologyResult,
    build_result,
    gather_or_cancel,
    invoke,
    new_conversation,
    resolve_recorder,
)
from swarmtopo.workers import Worker, WorkerGroups, require_workers

logger = logging.getLogger("swarmtopo.topologies.layered")


async def linear(
    workers: WorkerGroups,
    tasks: Sequence[str],
    return_full_history: bool = True,
    *,
    recorder: Optional[MetricsRecorder] = None,
    sink: Optional[LogSink] = None,
) -> TopologyResult:
    """Worker ``i`` handles task ``i``, one after another."""
    async with resolve_recorder(recorder).measure(TopologyName.LINEAR.value):
        flat = require_workers(workers, tasks)
        layers = [[worker] for worker in flat]
        return await _run_layers("linear", layers, tasks, return_full_history, sink)


async def grid(
    workers: WorkerGroups,
    tasks: Sequence[str],
    return_full_history: bool = True,
    *,
    recorder: Optional[MetricsRecorder] = None,
    sink: Optional[LogSink] = None,
) -> TopologyResult:
    """Lay workers out in a ``side x side`` grid and fill it row-major.

    ``side`` is the integer square root of the worker count; workers that
    do not fit in the square are unused.
    """
    async with resolve_recorder(recorder).measure(TopologyName.GRID.value):
        flat = require_workers(workers, tasks)
        side = math.isqrt(len(flat))
        layers = [flat[row * side : (row + 1) * side] for row in range(side)]
        return await _run_layers("grid", layers, tasks, return_full_history, sink)


async def pyramid(
    workers: WorkerGroups,
    tasks: Sequence[str],
    return_full_history: bool = True,
    *,
    recorder: Optional[MetricsRecorder] = None,
    sink: Optional[LogSink] = None,
) -> TopologyResult:
    """Arrange workers in levels of size 1, 2, 3, ... from the top down.

    The number of complete levels is the largest ``k`` with
    ``k * (k + 1) / 2 <= len(workers)``.
    """
    async with resolve_recorder(recorder).measure(TopologyName.PYRAMID.value):
        flat = require_workers(workers, tasks)
        levels = (math.isqrt(1 + 8 * len(flat)) - 1) // 2
        layers = [
            flat[level * (level + 1) // 2 : (level + 1) * (level + 2) // 2]
            for level in range(levels)
        ]
        return await _run_layers("pyramid", layers, tasks, return_full_history, sink)


async def _run_layers(
    label: str,
    layers: List[List[Worker]],
    tasks: Sequence[str],
    return_full_history: bool,
    sink: Optional[LogSink],
) -> TopologyResult:
    slots = sum(len(layer) for layer in layers)
    conversation = new_conversation(min(slots, len(tasks)), sink)
    logger.info(
        f"Starting {label} swarm: {len(layers)} layers, {slots} slots, {len(tasks)} tasks"
    )

    cursor = 0
    for index, layer in enumerate(layers):
        assigned = tasks[cursor : cursor + len(layer)]
        if not assigned:
            break
        cursor += len(assigned)
        await _run_layer(layer, assigned, conversation)
        logger.debug(f"{label} layer {index} completed ({cursor}/{len(tasks)} tasks)")

    if cursor < len(tasks):
        logger.info(f"{label} swarm left {len(tasks) - cursor} tasks unassigned")
    return build_result(conversation, return_full_history)


async def _run_layer(
    layer: Sequence[Worker],
    assigned: Sequence[str],
    conversation: Conversation,
) -> None:
    await gather_or_cancel(
        *(invoke(worker, task, conversation) for worker, task in zip(layer, assigned))
    )
