"""
Tests for the operation metrics recorder.
"""

import asyncio

import pytest

from swarmtopo.observability import metrics as process_metrics
from swarmtopo.observability.metrics import MetricsRecorder, get_metrics


def test_record_and_aggregate():
    """Test basic duration recording and aggregation."""
    recorder = MetricsRecorder()

    recorder.record("star", 1.5)
    recorder.record("star", 2.5)
    recorder.record("star", 3.5)

    stats = recorder.get_metrics()["star"]

    assert stats["count"] == 3
    assert stats["avg"] == 2.5
    assert stats["min"] == 1.5
    assert stats["max"] == 3.5


def test_names_are_independent():
    recorder = MetricsRecorder()
    recorder.record("mesh", 1.0)
    recorder.record("circular", 9.0)

    snapshot = recorder.get_metrics()
    assert set(snapshot) == {"mesh", "circular"}
    assert snapshot["mesh"]["max"] == 1.0


def test_durations_in_append_order():
    recorder = MetricsRecorder()
    for value in (3.0, 1.0, 2.0):
        recorder.record("broadcast", value)

    assert recorder.get_durations("broadcast") == (3.0, 1.0, 2.0)
    assert recorder.get_durations("unknown") == ()


def test_empty_recorder():
    assert MetricsRecorder().get_metrics() == {}


@pytest.mark.asyncio
async def test_measure_records_success():
    """Test that the timer records elapsed milliseconds on success."""
    recorder = MetricsRecorder()

    async with recorder.measure("one_to_one"):
        await asyncio.sleep(0.01)

    durations = recorder.get_durations("one_to_one")
    assert len(durations) == 1
    assert durations[0] >= 5.0


@pytest.mark.asyncio
async def test_measure_failure_reraises_without_recording(caplog):
    """Test that failures propagate unchanged and are not timed."""
    recorder = MetricsRecorder()
    error = RuntimeError("worker exploded")

    with caplog.at_level("ERROR", logger="swarmtopo.observability.metrics"):
        with pytest.raises(RuntimeError) as excinfo:
            async with recorder.measure("circular"):
                raise error

    assert excinfo.value is error
    assert "swarmtopo operation: circular" in excinfo.value.__notes__
    assert recorder.get_durations("circular") == ()
    assert "circular" in caplog.text


@pytest.mark.asyncio
async def test_measure_cancellation_not_recorded():
    recorder = MetricsRecorder()

    async def timed():
        async with recorder.measure("mesh"):
            await asyncio.sleep(10)

    task = asyncio.create_task(timed())
    await asyncio.sleep(0)
    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task

    assert recorder.get_durations("mesh") == ()


def test_process_wide_snapshot():
    process_metrics.record("test_process_wide_snapshot", 4.0)
    assert get_metrics()["test_process_wide_snapshot"]["count"] >= 1
