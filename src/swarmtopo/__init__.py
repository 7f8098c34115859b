"""
swarmtopo: Topology-Driven Task Distribution for Worker Swarms
==============================================================

Runs tasks across a set of opaque async workers under fixed
communication patterns, recording every successful call in a
conversation log and per-topology durations in a metrics recorder.

Core modules:
- workers: Worker protocol, FunctionWorker adapter, input flattening
- models: Pydantic v2 records (LogEntry, ConversationHistory, ...)
- conversation: Growable log buffer with running totals
- config: YAML configuration loader with defaults
- engine: SwarmEngine facade, one method per topology
- errors: SwarmError, InvalidArgument, WorkerFailure

Sub-packages:
- topologies: circular, star, mesh, one_to_one, broadcast, linear,
  grid, pyramid, one_to_three
- scheduling: Shared task queues owned by a scheduler coroutine
- observability: Append-only duration metrics and the named timer
"""

from swarmtopo.errors import InvalidArgument, SwarmError, WorkerFailure
from swarmtopo.models import (
    ConversationHistory,
    ConversationMetrics,
    LogEntry,
    TopologyName,
)
from swarmtopo.workers import FunctionWorker, Worker, flatten_workers
from swarmtopo.conversation import Conversation
from swarmtopo.config import load_config
from swarmtopo.observability import MetricsRecorder, get_metrics, metrics
from swarmtopo.topologies import (
    broadcast,
    circular,
    grid,
    linear,
    mesh,
    one_to_one,
    one_to_three,
    pyramid,
    star,
)
from swarmtopo.engine import SwarmEngine

__all__ = [
    # Errors
    "InvalidArgument",
    "SwarmError",
    "WorkerFailure",
    # Models
    "ConversationHistory",
    "ConversationMetrics",
    "LogEntry",
    "TopologyName",
    # Workers
    "FunctionWorker",
    "Worker",
    "flatten_workers",
    # Log buffer
    "Conversation",
    # Config
    "load_config",
    # Metrics
    "MetricsRecorder",
    "get_metrics",
    "metrics",
    # Topologies
    "broadcast",
    "circular",
    "grid",
    "linear",
    "mesh",
    "one_to_one",
    "one_to_three",
    "pyramid",
    "star",
    # Engine
    "SwarmEngine",
]
