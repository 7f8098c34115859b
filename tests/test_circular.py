"""Tests for the circular topology."""

import asyncio
from collections import Counter

import pytest

from swarmtopo.errors import InvalidArgument
from swarmtopo.models import ConversationHistory
from swarmtopo.topologies import circular


class TestCircular:
    @pytest.mark.asyncio
    async def test_every_worker_sees_every_task(self, make_worker, recorder):
        workers = [make_worker("A"), make_worker("B"), make_worker("C")]
        tasks = ["t1", "t2", "t3", "t4", "t5"]

        result = await circular(workers, tasks, recorder=recorder)

        assert isinstance(result, ConversationHistory)
        assert len(result.history) == 15
        assert result.metrics.count == 15
        for worker in workers:
            assert sorted(worker.calls) == sorted(tasks)
        assert Counter((e.worker_name, e.task) for e in result.history) == Counter(
            (w.name, t) for w in workers for t in tasks
        )

    @pytest.mark.asyncio
    async def test_two_workers_one_task_responses_only(self, make_worker, recorder):
        a, b = make_worker("A"), make_worker("B")

        result = await circular([a, b], ["t1"], return_full_history=False, recorder=recorder)

        assert isinstance(result, list)
        assert sorted(result) == ["A processed: t1", "B processed: t1"]

    @pytest.mark.asyncio
    async def test_responses_follow_completion_order(self, make_worker, recorder):
        workers = [make_worker("A", delay=0.02), make_worker("B")]
        logged = []

        responses = await circular(
            workers, ["t1", "t2"], False, recorder=recorder, sink=logged.append
        )

        assert responses == [entry.response for entry in logged]
        # B answers immediately, so it completes before A within each task
        assert logged[0].worker_name == "B"

    @pytest.mark.asyncio
    async def test_nested_worker_groups(self, make_worker, recorder):
        workers = [[make_worker("A")], [make_worker("B")]]
        result = await circular(workers, ["t1"], recorder=recorder)
        assert len(result.history) == 2

    @pytest.mark.asyncio
    async def test_fan_out_is_concurrent(self, make_worker, recorder):
        workers = [make_worker(f"W{i}", delay=0.05) for i in range(6)]

        start = asyncio.get_running_loop().time()
        await circular(workers, ["t1"], recorder=recorder)
        elapsed = asyncio.get_running_loop().time() - start

        assert elapsed < 0.25

    @pytest.mark.asyncio
    async def test_lane_waits_for_full_fan_out(self, make_worker, recorder):
        # One worker means one lane: task order is strict and each task's
        # fan-out is done before the next task starts.
        slow = make_worker("slow", delay=0.01)
        result = await circular([slow], ["t1", "t2", "t3"], recorder=recorder)
        assert [e.task for e in result.history] == ["t1", "t2", "t3"]
        assert slow.max_active == 1

    @pytest.mark.asyncio
    async def test_lane_count_capped(self, make_worker, recorder):
        workers = [make_worker(f"W{i}", delay=0.01) for i in range(6)]
        tasks = [f"t{i}" for i in range(12)]

        await circular(workers, tasks, recorder=recorder, max_lanes=2)

        # each worker is called once per in-flight task, so at most 2 at a time
        assert all(w.max_active <= 2 for w in workers)

    @pytest.mark.asyncio
    async def test_caller_tasks_not_mutated(self, make_worker, recorder):
        tasks = ["t1", "t2"]
        await circular([make_worker("A")], tasks, recorder=recorder)
        assert tasks == ["t1", "t2"]

    @pytest.mark.asyncio
    async def test_records_metric(self, make_worker, recorder):
        await circular([make_worker("A")], ["t1"], recorder=recorder)
        assert recorder.get_metrics()["circular"]["count"] == 1


class TestCircularErrors:
    @pytest.mark.asyncio
    async def test_empty_inputs(self, make_worker, recorder):
        worker = make_worker("A")
        with pytest.raises(InvalidArgument):
            await circular([], ["task"], recorder=recorder)
        with pytest.raises(InvalidArgument):
            await circular([worker], [], recorder=recorder)
        assert worker.calls == []
        assert recorder.get_durations("circular") == ()

    @pytest.mark.asyncio
    async def test_zero_lanes_rejected(self, make_worker, recorder):
        worker = make_worker("A")
        with pytest.raises(InvalidArgument, match="max_lanes"):
            await circular([worker], ["task"], max_lanes=0, recorder=recorder)
        assert worker.calls == []

    @pytest.mark.asyncio
    async def test_worker_failure_propagates(self, make_worker, recorder):
        failing = make_worker("Failing", fail_on="*")

        with pytest.raises(RuntimeError, match="Failing failed on task") as excinfo:
            await circular([failing], ["task"], recorder=recorder)

        assert "swarmtopo worker: Failing" in excinfo.value.__notes__
        assert "swarmtopo operation: circular" in excinfo.value.__notes__
        assert recorder.get_durations("circular") == ()

    @pytest.mark.asyncio
    async def test_failure_stops_other_lanes(self, make_worker, recorder):
        steady = make_worker("steady", delay=0.01)
        flaky = make_worker("flaky", delay=0.01, fail_on="t1")
        tasks = [f"t{i}" for i in range(1, 30)]

        with pytest.raises(RuntimeError):
            await circular([steady, flaky], tasks, recorder=recorder)

        assert len(steady.calls) < len(tasks)
