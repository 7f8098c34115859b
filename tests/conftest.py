"""Ensure src/ is on sys.path so that ``import swarmtopo`` resolves to
``src/swarmtopo/`` when the package has not been installed, and provide
scripted worker doubles shared by the topology tests.
"""

import asyncio
import sys
from pathlib import Path

import pytest

_src = str(Path(__file__).resolve().parent.parent / "src")
if _src not in sys.path:
    sys.path.insert(0, _src)

from swarmtopo.observability import MetricsRecorder  # noqa: E402


class ScriptedWorker:
    """Worker double that records its inputs and answers deterministically.

    Responses look like ``"<name> processed: <task>"``. ``fail_on`` makes
    the worker raise for one task value (or every task when set to ``"*"``).
    """

    def __init__(self, name, delay=0.0, fail_on=None):
        self.name = name
        self.delay = delay
        self.fail_on = fail_on
        self.calls = []
        self.active = 0
        self.max_active = 0

    async def run(self, task):
        self.calls.append(task)
        self.active += 1
        self.max_active = max(self.max_active, self.active)
        try:
            if self.delay:
                await asyncio.sleep(self.delay)
            else:
                await asyncio.sleep(0)
            if self.fail_on is not None and self.fail_on in ("*", task):
                raise RuntimeError(f"{self.name} failed on {task}")
            return f"{self.name} processed: {task}"
        finally:
            self.active -= 1


@pytest.fixture
def make_worker():
    """Factory fixture: ``make_worker("A", delay=0.01, fail_on="t2")``."""
    return ScriptedWorker


@pytest.fixture
def recorder():
    """A fresh MetricsRecorder so tests never depend on process-wide state."""
    return MetricsRecorder()
