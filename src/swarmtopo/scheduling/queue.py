"""
Task Queue Scheduling
=====================

Shared task queues for topologies whose lanes pull work concurrently
(circular, mesh). Each queue is owned by a single scheduler coroutine;
lanes never touch the underlying deque. A lane asks for work by putting
a future on the request channel and awaiting it, so pop, steal and
mark-completed are serialised without locks.

Usage:
    async with FifoTaskQueue(["t1", "t2"]) as queue:
        while True:
            task = await queue.claim()
            if task is None:
                break
            ...
"""

from __future__ import annotations

import asyncio
import logging
import math
from collections import deque
from typing import Iterable, List, Optional, Set

from swarmtopo.errors import InvalidArgument

logger = logging.getLogger("swarmtopo.scheduling.queue")


class TaskQueue:
    """Base class: a deque of tasks served by one owning coroutine.

    Subclasses decide which task comes next by overriding ``_next``,
    which always runs inside the scheduler coroutine.
    """

    def __init__(self, tasks: Iterable[str]):
        self._pending: deque[str] = deque(tasks)
        self._requests: asyncio.Queue[Optional[asyncio.Future]] = asyncio.Queue()
        self._server: Optional[asyncio.Task] = None

    @property
    def remaining(self) -> int:
        return len(self._pending)

    def _next(self) -> Optional[str]:
        raise NotImplementedError

    async def serve(self) -> None:
        """Answer claim requests until a ``None`` sentinel arrives."""
        while True:
            reply = await self._requests.get()
            if reply is None:
                break
            if reply.cancelled():
                continue
            reply.set_result(self._next())

    async def claim(self) -> Optional[str]:
        """Ask the scheduler for the next task; ``None`` means no more work."""
        reply = asyncio.get_running_loop().create_future()
        await self._requests.put(reply)
        return await reply

    async def __aenter__(self) -> TaskQueue:
        self._server = asyncio.create_task(self.serve())
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> bool:
        if exc_val is None:
            self._requests.put_nowait(None)
            await self._server
        else:
            self._server.cancel()
            try:
                await self._server
            except asyncio.CancelledError:
                pass
        return False


class FifoTaskQueue(TaskQueue):
    """Hands out tasks front to back, each exactly once."""

    def _next(self) -> Optional[str]:
        if not self._pending:
            return None
        return self._pending.popleft()


class WorkStealingTaskQueue(TaskQueue):
    """
    Load-balancing queue for the mesh topology.

    Claims pop from the tail. A claim that finds the queue empty steals
    the first ``ceil(steal_fraction * len(queue))`` tasks from the front;
    with a single shared queue that length is zero at that point, so the
    steal is a no-op and the empty result ends that claimant's loop. A
    task whose value was already handed out is skipped, so each distinct
    task string is processed at most once.
    """

    def __init__(self, tasks: Iterable[str], steal_fraction: float = 0.1):
        super().__init__(tasks)
        if not 0.0 < steal_fraction <= 1.0:
            raise InvalidArgument(f"steal_fraction must be in (0, 1], got {steal_fraction}")
        self.steal_fraction = steal_fraction
        self._completed: Set[str] = set()

    @property
    def completed(self) -> frozenset[str]:
        return frozenset(self._completed)

    def _steal(self) -> List[str]:
        count = math.ceil(len(self._pending) * self.steal_fraction)
        return [self._pending.popleft() for _ in range(count)]

    def _next(self) -> Optional[str]:
        while True:
            if not self._pending:
                stolen = self._steal()
                if not stolen:
                    return None
                logger.debug(f"Stole {len(stolen)} tasks from the front of the queue")
                self._pending.extend(stolen)
                continue

            task = self._pending.pop()
            if task in self._completed:
                logger.debug(f"Skipping already completed task: {task[:80]}")
                continue
            self._completed.add(task)
            return task
