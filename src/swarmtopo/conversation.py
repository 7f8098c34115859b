"""
Conversation: growable log buffer for topology runs.

Entries live in a preallocated list. When an append would overflow it,
capacity doubles and existing entries are copied across, so appends are
amortised O(1). Entries are never removed or reordered; insertion order
is completion order.
"""

from __future__ import annotations

import logging
import time
from typing import Callable, List, Optional

from swarmtopo.errors import InvalidArgument
from swarmtopo.models import ConversationHistory, ConversationMetrics, LogEntry

logger = logging.getLogger("swarmtopo.conversation")

DEFAULT_INITIAL_CAPACITY = 1000

LogSink = Callable[[LogEntry], None]


class Conversation:
    """Append-only record of worker invocations with running totals.

    Usage:
        conversation = Conversation(initial_capacity=8)
        conversation.add_log("writer", "draft intro", "Once upon...", 42.0)
        snapshot = conversation.return_history()
        snapshot.metrics.count  # 1
    """

    def __init__(
        self,
        initial_capacity: int = DEFAULT_INITIAL_CAPACITY,
        sink: Optional[LogSink] = None,
    ):
        if initial_capacity < 1:
            raise InvalidArgument(
                f"Conversation capacity must be at least 1, got {initial_capacity}"
            )
        self._logs: List[Optional[LogEntry]] = [None] * initial_capacity
        self._capacity = initial_capacity
        self._size = 0
        self._total_duration_ms = 0.0
        self._sink = sink

    def add_log(
        self,
        worker_name: str,
        task: str,
        response: str,
        duration_ms: float,
    ) -> LogEntry:
        """Append one completed invocation and forward it to the sink."""
        if self._size >= self._capacity:
            self._grow()

        entry = LogEntry(
            worker_name=worker_name,
            task=task,
            response=response,
            timestamp_ms=int(time.time() * 1000),
            duration_ms=duration_ms,
        )
        self._logs[self._size] = entry
        self._size += 1
        self._total_duration_ms += duration_ms

        logger.info(
            f"Agent response recorded: worker={worker_name} "
            f"duration={duration_ms:.1f}ms response_length={len(response)}"
        )

        if self._sink is not None:
            self._sink(entry)
        return entry

    def return_history(self) -> ConversationHistory:
        """Snapshot of every entry so far plus aggregate timing."""
        count = self._size
        return ConversationHistory(
            history=tuple(self._logs[:count]),
            metrics=ConversationMetrics(
                total_duration_ms=self._total_duration_ms,
                average_duration_ms=(
                    self._total_duration_ms / count if count else float("nan")
                ),
                count=count,
            ),
        )

    def _grow(self) -> None:
        new_capacity = self._capacity * 2
        logger.debug(
            f"Resizing conversation buffer from {self._capacity} to {new_capacity}"
        )
        logs: List[Optional[LogEntry]] = [None] * new_capacity
        logs[: self._size] = self._logs[: self._size]
        self._logs = logs
        self._capacity = new_capacity

    def __len__(self) -> int:
        return self._size
