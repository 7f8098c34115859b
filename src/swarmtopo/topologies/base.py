"""
Shared building blocks for topology algorithms.

Every topology follows the same shape: validate and flatten inputs,
open a conversation sized to the worst case, drive workers through
``invoke``, and return either the full history or the response list.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Any, Awaitable, List, Optional, Sequence, TypeVar, Union

from swarmtopo.conversation import Conversation, LogSink
from swarmtopo.errors import InvalidArgument
from swarmtopo.models import ConversationHistory
from swarmtopo.observability.metrics import MetricsRecorder, metrics
from swarmtopo.workers import Worker

logger = logging.getLogger("swarmtopo.topologies")

DEFAULT_MAX_LANES = 4
DEFAULT_BATCH_SIZE = 4
DEFAULT_STEAL_FRACTION = 0.1

T = TypeVar("T")

TopologyResult = Union[ConversationHistory, List[str]]


def require_positive(name: str, value: int) -> int:
    """Reject lane and batch sizes below 1 before any worker is called."""
    if value < 1:
        raise InvalidArgument(f"{name} must be at least 1, got {value}")
    return value


async def invoke(
    worker: Worker,
    task: str,
    conversation: Conversation,
    logged_task: Optional[str] = None,
) -> str:
    """Run one worker call, time it, and log it if it succeeds.

    The entry records ``logged_task`` when given, otherwise the input.

    Failed calls produce no entry; the error gets a note naming the
    worker and propagates unchanged.
    """
    start = time.perf_counter()
    try:
        response = await worker.run(task)
    except Exception as e:
        e.add_note(f"swarmtopo worker: {worker.name}")
        raise
    duration_ms = (time.perf_counter() - start) * 1000.0
    conversation.add_log(
        worker.name, task if logged_task is None else logged_task, response, duration_ms
    )
    return response


async def gather_or_cancel(*aws: Awaitable[T]) -> List[T]:
    """Run awaitables concurrently; on the first failure cancel the rest.

    The original exception is re-raised once every sibling has settled,
    so nothing keeps running after the enclosing operation has failed.
    """
    tasks = [asyncio.ensure_future(aw) for aw in aws]
    try:
        return list(await asyncio.gather(*tasks))
    except BaseException:
        for task in tasks:
            if not task.done():
                task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise


async def run_in_batches(
    workers: Sequence[Worker],
    task: str,
    conversation: Conversation,
    batch_size: int = DEFAULT_BATCH_SIZE,
    logged_task: Optional[str] = None,
) -> None:
    """Deliver ``task`` to ``workers`` in concurrent batches, batches in sequence."""
    for i in range(0, len(workers), batch_size):
        batch = workers[i : i + batch_size]
        await gather_or_cancel(
            *(invoke(w, task, conversation, logged_task) for w in batch)
        )
        logger.debug(
            f"Batch completed ({min(i + batch_size, len(workers))}/{len(workers)} workers)"
        )


def new_conversation(
    capacity: int,
    sink: Optional[LogSink] = None,
) -> Conversation:
    return Conversation(initial_capacity=max(1, capacity), sink=sink)


def resolve_recorder(recorder: Optional[MetricsRecorder]) -> MetricsRecorder:
    return recorder if recorder is not None else metrics


def build_result(conversation: Conversation, return_full_history: bool) -> TopologyResult:
    """Full snapshot, or just the responses in the same (completion) order."""
    history = conversation.return_history()
    if return_full_history:
        return history
    return history.responses()


def describe(workers: Sequence[Any]) -> str:
    return ", ".join(getattr(w, "name", repr(w)) for w in workers)
