"""
Relay topologies: one sender talking to one or more receivers.

- one_to_one: sender and receiver alternate for a number of rounds
- broadcast: one sender message delivered unchanged to every receiver
- one_to_three: broadcast to exactly three receivers
"""

from __future__ import annotations

import logging
from typing import Optional

from swarmtopo.conversation import LogSink
from swarmtopo.errors import InvalidArgument
from swarmtopo.models import TopologyName
from swarmtopo.observability.metrics import MetricsRecorder
from swarmtopo.topologies.base import (
    DEFAULT_BATCH_SIZE,
    TopologyResult,
    build_result,
    describe,
    invoke,
    new_conversation,
    require_positive,
    resolve_recorder,
    run_in_batches,
)
from swarmtopo.workers import Worker, WorkerGroups, flatten_workers, require_task

logger = logging.getLogger("swarmtopo.topologies.relay")


async def one_to_one(
    sender: Worker,
    receiver: Worker,
    task: str,
    max_loops: int = 1,
    return_full_history: bool = True,
    *,
    recorder: Optional[MetricsRecorder] = None,
    sink: Optional[LogSink] = None,
) -> TopologyResult:
    """Alternate sender and receiver for ``max_loops`` rounds.

    Each round the sender answers the original task and the receiver
    answers the sender's response; both entries record the original
    task. Strictly sequential; a failure at either step ends the
    remaining rounds.

    Raises:
        InvalidArgument: On a missing worker, empty task or ``max_loops < 1``.
    """
    async with resolve_recorder(recorder).measure(TopologyName.ONE_TO_ONE.value):
        if sender is None or receiver is None:
            raise InvalidArgument("Sender and receiver are required.")
        require_task(task)
        if max_loops < 1:
            raise InvalidArgument(f"max_loops must be at least 1, got {max_loops}")

        conversation = new_conversation(max_loops * 2, sink)
        logger.info(
            f"Starting one-to-one: sender={sender.name}, "
            f"receiver={receiver.name}, max_loops={max_loops}"
        )

        for loop in range(max_loops):
            sender_response = await invoke(sender, task, conversation)
            await invoke(receiver, sender_response, conversation, logged_task=task)
            logger.debug(f"Communication loop {loop + 1}/{max_loops} completed")

        return build_result(conversation, return_full_history)


async def broadcast(
    sender: Worker,
    workers: WorkerGroups,
    task: str,
    return_full_history: bool = True,
    *,
    batch_size: int = DEFAULT_BATCH_SIZE,
    recorder: Optional[MetricsRecorder] = None,
    sink: Optional[LogSink] = None,
) -> TopologyResult:
    """Send one sender message to every receiver.

    The sender runs once on ``task``. Its response is delivered unchanged
    to all receivers in concurrent batches of ``batch_size``, batches in
    sequence, and is logged as each receiver's task.

    Raises:
        InvalidArgument: On a missing sender, no receivers, an empty task
            or ``batch_size < 1``.
    """
    async with resolve_recorder(recorder).measure(TopologyName.BROADCAST.value):
        require_positive("batch_size", batch_size)
        return await _fan_out(
            sender, workers, task, return_full_history, batch_size, sink
        )


async def one_to_three(
    sender: Worker,
    workers: WorkerGroups,
    task: str,
    return_full_history: bool = True,
    *,
    recorder: Optional[MetricsRecorder] = None,
    sink: Optional[LogSink] = None,
) -> TopologyResult:
    """Broadcast restricted to exactly three receivers, delivered together."""
    async with resolve_recorder(recorder).measure(TopologyName.ONE_TO_THREE.value):
        if len(flatten_workers(workers)) != 3:
            raise InvalidArgument("The number of receivers must be exactly 3.")
        return await _fan_out(sender, workers, task, return_full_history, 3, sink)


async def _fan_out(
    sender: Worker,
    workers: WorkerGroups,
    task: str,
    return_full_history: bool,
    batch_size: int,
    sink: Optional[LogSink],
) -> TopologyResult:
    receivers = flatten_workers(workers)
    if sender is None or not receivers or not task:
        raise InvalidArgument("Sender, agents, and task cannot be empty.")

    conversation = new_conversation(len(receivers) + 1, sink)
    logger.info(
        f"Starting broadcast: sender={sender.name}, receivers=[{describe(receivers)}]"
    )

    message = await invoke(sender, task, conversation)
    await run_in_batches(receivers, message, conversation, batch_size)

    return build_result(conversation, return_full_history)
