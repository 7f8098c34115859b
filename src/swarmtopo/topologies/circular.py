"""
Circular topology: every task visits every worker.

A small pool of lanes pulls tasks FIFO from a shared queue. For each
task a lane fans out to all workers concurrently and waits for all of
them before claiming the next task.
"""

from __future__ import annotations

import logging
from typing import Optional, Sequence

from swarmtopo.conversation import Conversation, LogSink
from swarmtopo.models import TopologyName
from swarmtopo.observability.metrics import MetricsRecorder
from swarmtopo.scheduling import FifoTaskQueue
from swarmtopo.topologies.base import (
    DEFAULT_MAX_LANES,
    TopologyResult,
    build_result,
    gather_or_cancel,
    invoke,
    new_conversation,
    require_positive,
    resolve_recorder,
)
from swarmtopo.workers import Worker, WorkerGroups, require_workers

logger = logging.getLogger("swarmtopo.topologies.circular")


async def circular(
    workers: WorkerGroups,
    tasks: Sequence[str],
    return_full_history: bool = True,
    *,
    max_lanes: int = DEFAULT_MAX_LANES,
    recorder: Optional[MetricsRecorder] = None,
    sink: Optional[LogSink] = None,
) -> TopologyResult:
    """Run every task against every worker.

    Args:
        workers: Flat list of workers or list of worker groups.
        tasks: Tasks to process; the caller's sequence is not modified.
        return_full_history: Return the ConversationHistory if True,
            otherwise the list of responses in completion order.
        max_lanes: Upper bound on concurrently processed tasks.
        recorder: Metrics recorder (defaults to the process-wide one).
        sink: Optional callable receiving each LogEntry as it is logged.

    Returns:
        ConversationHistory with ``len(tasks) * len(workers)`` entries,
        or the equivalent list of responses.

    Raises:
        InvalidArgument: If workers or tasks are empty or
            ``max_lanes < 1``.
    """
    async with resolve_recorder(recorder).measure(TopologyName.CIRCULAR.value):
        flat = require_workers(workers, tasks)
        require_positive("max_lanes", max_lanes)
        conversation = new_conversation(len(tasks) * len(flat), sink)
        lane_count = min(len(flat), max_lanes)

        logger.info(
            f"Starting circular swarm: {len(flat)} workers, "
            f"{len(tasks)} tasks, {lane_count} lanes"
        )

        async with FifoTaskQueue(tasks) as queue:
            await gather_or_cancel(
                *(_lane(lane, flat, queue, conversation) for lane in range(lane_count))
            )

        logger.info(f"Circular swarm completed: {len(conversation)} responses")
        return build_result(conversation, return_full_history)


async def _lane(
    lane: int,
    workers: Sequence[Worker],
    queue: FifoTaskQueue,
    conversation: Conversation,
) -> None:
    while True:
        task = await queue.claim()
        if task is None:
            break
        await gather_or_cancel(*(invoke(w, task, conversation) for w in workers))
        logger.debug(f"Lane {lane} finished task ({queue.remaining} queued)")
