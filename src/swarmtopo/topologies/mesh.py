"""
Mesh topology: load-balanced distribution with work stealing.

All workers pull from one shared queue owned by a scheduler coroutine.
There is no coordinator deciding who gets what; which worker handles
which task depends on how the calls interleave.
"""

from __future__ import annotations

import logging
from typing import Optional, Sequence

from swarmtopo.conversation import Conversation, LogSink
from swarmtopo.models import TopologyName
from swarmtopo.observability.metrics import MetricsRecorder
from swarmtopo.scheduling import WorkStealingTaskQueue
from swarmtopo.topologies.base import (
    DEFAULT_STEAL_FRACTION,
    TopologyResult,
    build_result,
    gather_or_cancel,
    invoke,
    new_conversation,
    resolve_recorder,
)
from swarmtopo.workers import Worker, WorkerGroups, require_workers

logger = logging.getLogger("swarmtopo.topologies.mesh")


async def mesh(
    workers: WorkerGroups,
    tasks: Sequence[str],
    return_full_history: bool = True,
    *,
    steal_fraction: float = DEFAULT_STEAL_FRACTION,
    recorder: Optional[MetricsRecorder] = None,
    sink: Optional[LogSink] = None,
) -> TopologyResult:
    """Spread tasks across workers; each distinct task runs at most once.

    Task identity is the task string: duplicates in ``tasks`` collapse
    into one unit of work.

    Raises:
        InvalidArgument: If workers or tasks are empty.
    """
    async with resolve_recorder(recorder).measure(TopologyName.MESH.value):
        flat = require_workers(workers, tasks)
        conversation = new_conversation(len(tasks) * len(flat), sink)

        logger.info(f"Starting mesh swarm: {len(flat)} workers, {len(tasks)} tasks")

        async with WorkStealingTaskQueue(tasks, steal_fraction) as queue:
            await gather_or_cancel(
                *(_work_loop(worker, queue, conversation) for worker in flat)
            )

        logger.info(
            f"Mesh swarm completed: {len(conversation)} of {len(tasks)} tasks processed"
        )
        return build_result(conversation, return_full_history)


async def _work_loop(
    worker: Worker,
    queue: WorkStealingTaskQueue,
    conversation: Conversation,
) -> None:
    while True:
        task = await queue.claim()
        if task is None:
            break
        await invoke(worker, task, conversation)
        logger.debug(
            f"Task completed by {worker.name} ({queue.remaining} tasks remaining)"
        )
