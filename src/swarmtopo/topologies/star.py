"""
Star topology: a center worker feeds its answers to the leaves.
"""

from __future__ import annotations

import logging
from typing import Optional, Sequence

from swarmtopo.conversation import LogSink
from swarmtopo.models import TopologyName
from swarmtopo.observability.metrics import MetricsRecorder
from swarmtopo.topologies.base import (
    DEFAULT_BATCH_SIZE,
    TopologyResult,
    build_result,
    invoke,
    new_conversation,
    require_positive,
    resolve_recorder,
    run_in_batches,
)
from swarmtopo.workers import WorkerGroups, require_workers

logger = logging.getLogger("swarmtopo.topologies.star")


async def star(
    workers: WorkerGroups,
    tasks: Sequence[str],
    return_full_history: bool = True,
    *,
    batch_size: int = DEFAULT_BATCH_SIZE,
    recorder: Optional[MetricsRecorder] = None,
    sink: Optional[LogSink] = None,
) -> TopologyResult:
    """Route each task through the center worker, then out to the leaves.

    The first worker (after flattening) is the center. It handles tasks
    one at a time in order. Each center response becomes the task for
    every leaf; leaves run in concurrent batches of ``batch_size`` and
    never see the original task, though their entries record it. A leaf
    call for a task only starts once that task's center call has returned.

    Raises:
        InvalidArgument: If workers or tasks are empty or
            ``batch_size < 1``.
    """
    async with resolve_recorder(recorder).measure(TopologyName.STAR.value):
        flat = require_workers(workers, tasks)
        require_positive("batch_size", batch_size)
        center, leaves = flat[0], flat[1:]
        conversation = new_conversation(len(tasks) * len(flat), sink)

        logger.info(
            f"Starting star swarm: center={center.name}, {len(leaves)} leaves, "
            f"{len(tasks)} tasks"
        )

        for task in tasks:
            center_response = await invoke(center, task, conversation)
            await run_in_batches(
                leaves, center_response, conversation, batch_size, logged_task=task
            )

        return build_result(conversation, return_full_history)
