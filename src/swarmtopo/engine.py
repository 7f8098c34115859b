"""
swarmtopo Engine
================

Thin facade with one entry point per topology. It carries the settings
that would otherwise be repeated on every call: lane/batch/steal values
from configuration, the metrics recorder, and an optional log sink.

Usage:
    engine = SwarmEngine(config=load_config())
    history = await engine.star([planner, coder, reviewer], ["add login page"])
    engine.get_metrics()["star"]["avg"]
"""

from __future__ import annotations

import logging
from typing import Dict, Optional, Sequence

from swarmtopo import topologies
from swarmtopo.config import load_config, log_level, topology_settings
from swarmtopo.conversation import LogSink
from swarmtopo.observability.metrics import MetricsRecorder, metrics
from swarmtopo.topologies import TopologyResult
from swarmtopo.workers import Worker, WorkerGroups

logger = logging.getLogger("swarmtopo.engine")


class SwarmEngine:
    """Dispatches to topology algorithms with shared settings.

    Args:
        config: Config dict as returned by ``load_config``; defaults are
            loaded when omitted.
        recorder: Metrics recorder; the process-wide one by default.
        sink: Callable receiving every LogEntry produced through this engine.

    Raises:
        InvalidArgument: On out-of-range topology settings or an unknown
            logging level.
    """

    def __init__(
        self,
        config: Optional[dict] = None,
        recorder: Optional[MetricsRecorder] = None,
        sink: Optional[LogSink] = None,
    ):
        self.config = config if config is not None else load_config()
        self.recorder = recorder if recorder is not None else metrics
        self.sink = sink

        settings = topology_settings(self.config)
        self.max_lanes = settings["max_lanes"]
        self.batch_size = settings["batch_size"]
        self.steal_fraction = settings["steal_fraction"]

        logging.getLogger("swarmtopo").setLevel(log_level(self.config))
        logger.debug(
            f"SwarmEngine ready (max_lanes={self.max_lanes}, "
            f"batch_size={self.batch_size}, steal_fraction={self.steal_fraction})"
        )

    async def circular(
        self,
        workers: WorkerGroups,
        tasks: Sequence[str],
        return_full_history: bool = True,
    ) -> TopologyResult:
        return await topologies.circular(
            workers, tasks, return_full_history,
            max_lanes=self.max_lanes, recorder=self.recorder, sink=self.sink,
        )

    async def star(
        self,
        workers: WorkerGroups,
        tasks: Sequence[str],
        return_full_history: bool = True,
    ) -> TopologyResult:
        return await topologies.star(
            workers, tasks, return_full_history,
            batch_size=self.batch_size, recorder=self.recorder, sink=self.sink,
        )

    async def mesh(
        self,
        workers: WorkerGroups,
        tasks: Sequence[str],
        return_full_history: bool = True,
    ) -> TopologyResult:
        return await topologies.mesh(
            workers, tasks, return_full_history,
            steal_fraction=self.steal_fraction, recorder=self.recorder, sink=self.sink,
        )

    async def one_to_one(
        self,
        sender: Worker,
        receiver: Worker,
        task: str,
        max_loops: int = 1,
        return_full_history: bool = True,
    ) -> TopologyResult:
        return await topologies.one_to_one(
            sender, receiver, task, max_loops, return_full_history,
            recorder=self.recorder, sink=self.sink,
        )

    async def broadcast(
        self,
        sender: Worker,
        workers: WorkerGroups,
        task: str,
        return_full_history: bool = True,
    ) -> TopologyResult:
        return await topologies.broadcast(
            sender, workers, task, return_full_history,
            batch_size=self.batch_size, recorder=self.recorder, sink=self.sink,
        )

    async def one_to_three(
        self,
        sender: Worker,
        workers: WorkerGroups,
        task: str,
        return_full_history: bool = True,
    ) -> TopologyResult:
        return await topologies.one_to_three(
            sender, workers, task, return_full_history,
            recorder=self.recorder, sink=self.sink,
        )

    async def linear(
        self,
        workers: WorkerGroups,
        tasks: Sequence[str],
        return_full_history: bool = True,
    ) -> TopologyResult:
        return await topologies.linear(
            workers, tasks, return_full_history, recorder=self.recorder, sink=self.sink,
        )

    async def grid(
        self,
        workers: WorkerGroups,
        tasks: Sequence[str],
        return_full_history: bool = True,
    ) -> TopologyResult:
        return await topologies.grid(
            workers, tasks, return_full_history, recorder=self.recorder, sink=self.sink,
        )

    async def pyramid(
        self,
        workers: WorkerGroups,
        tasks: Sequence[str],
        return_full_history: bool = True,
    ) -> TopologyResult:
        return await topologies.pyramid(
            workers, tasks, return_full_history, recorder=self.recorder, sink=self.sink,
        )

    def get_metrics(self) -> Dict[str, Dict[str, float]]:
        """Per-topology ``avg``/``min``/``max``/``count`` in milliseconds."""
        return self.recorder.get_metrics()
