"""
Worker capability and input normalisation.

A worker is anything with a ``name`` and an ``async run(task) -> str``.
The engine never mutates workers; it only calls ``run``.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from typing import Awaitable, Callable, Protocol, Sequence, Union, runtime_checkable

from swarmtopo.errors import InvalidArgument, WorkerFailure

logger = logging.getLogger("swarmtopo.workers")


@runtime_checkable
class Worker(Protocol):
    """Named capability mapping a task string to a response string."""

    name: str

    async def run(self, task: str) -> str:
        ...


WorkerGroups = Union[Sequence[Worker], Sequence[Sequence[Worker]]]


class FunctionWorker:
    """Adapts a plain callable to the Worker protocol.

    Coroutine functions are awaited directly. Synchronous callables are
    offloaded with ``asyncio.to_thread`` so they never block the loop.

    Usage:
        async def summarise(text: str) -> str:
            ...

        worker = FunctionWorker("summariser", summarise)
        reply = await worker.run("long text")
    """

    def __init__(self, name: str, fn: Callable[[str], Union[str, Awaitable[str]]]):
        if not name:
            raise InvalidArgument("Worker name cannot be empty")
        self.name = name
        self._fn = fn

    async def run(self, task: str) -> str:
        if inspect.iscoroutinefunction(self._fn):
            result = await self._fn(task)
        else:
            result = await asyncio.to_thread(self._fn, task)
        if not isinstance(result, str):
            raise WorkerFailure(
                f"Worker {self.name} returned {type(result).__name__}, expected str"
            )
        return result

    def __repr__(self) -> str:
        return f"FunctionWorker(name={self.name!r})"


def flatten_workers(workers: WorkerGroups) -> list[Worker]:
    """Normalise a flat list or a list of groups into one ordered list.

    Groups are concatenated in order and keep their internal order.
    """
    flat: list[Worker] = []
    for item in workers:
        if isinstance(item, (list, tuple)):
            flat.extend(item)
        else:
            flat.append(item)
    return flat


def require_workers(workers: WorkerGroups, tasks: Sequence[str]) -> list[Worker]:
    """Flatten ``workers`` and reject empty worker or task inputs."""
    if isinstance(tasks, str):
        raise InvalidArgument("tasks must be a sequence of strings, not a single string")
    flat = flatten_workers(workers)
    if not flat or not tasks:
        raise InvalidArgument("Workers and tasks lists cannot be empty.")
    return flat


def require_task(task: str) -> str:
    if not task:
        raise InvalidArgument("Task cannot be empty.")
    return task
