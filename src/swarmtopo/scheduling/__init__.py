"""swarmtopo Scheduling: shared task queues owned by a single scheduler coroutine."""

from swarmtopo.scheduling.queue import (
    FifoTaskQueue,
    TaskQueue,
    WorkStealingTaskQueue,
)

__all__ = [
    "FifoTaskQueue",
    "TaskQueue",
    "WorkStealingTaskQueue",
]
