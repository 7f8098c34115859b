"""
swarmtopo Data Models
=====================

Pydantic v2 structures for the records produced by topology runs.
All models are frozen: a history handed back to a caller is a snapshot.
"""

from __future__ import annotations

import math
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class TopologyName(str, Enum):
    """Topology identifiers; the value doubles as the metric name."""

    CIRCULAR = "circular"
    STAR = "star"
    MESH = "mesh"
    ONE_TO_ONE = "one_to_one"
    BROADCAST = "broadcast"
    LINEAR = "linear"
    GRID = "grid"
    PYRAMID = "pyramid"
    ONE_TO_THREE = "one_to_three"


class LogEntry(BaseModel):
    """One successful worker invocation."""

    model_config = ConfigDict(frozen=True)

    worker_name: str
    task: str  # the input the worker actually received
    response: str
    timestamp_ms: int
    duration_ms: float = Field(ge=0.0)


class ConversationMetrics(BaseModel):
    """Aggregate timing over a conversation's entries."""

    model_config = ConfigDict(frozen=True)

    total_duration_ms: float = 0.0
    average_duration_ms: float = math.nan  # undefined until something is logged
    count: int = 0


class ConversationHistory(BaseModel):
    """Immutable snapshot of a conversation: entries plus aggregates."""

    model_config = ConfigDict(frozen=True)

    history: tuple[LogEntry, ...] = ()
    metrics: ConversationMetrics = Field(default_factory=ConversationMetrics)

    def responses(self) -> list[str]:
        """Responses in completion order."""
        return [entry.response for entry in self.history]
