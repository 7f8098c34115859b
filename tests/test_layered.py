"""Tests for the layered topologies: linear, grid, pyramid."""

import pytest

from swarmtopo.errors import InvalidArgument
from swarmtopo.topologies import grid, linear, pyramid


class TestLinear:
    @pytest.mark.asyncio
    async def test_pairs_workers_with_tasks(self, make_worker, recorder):
        workers = [make_worker("A"), make_worker("B"), make_worker("C")]

        result = await linear(workers, ["t1", "t2", "t3"], recorder=recorder)

        assert [(e.worker_name, e.task) for e in result.history] == [
            ("A", "t1"), ("B", "t2"), ("C", "t3"),
        ]

    @pytest.mark.asyncio
    async def test_extra_tasks_left_unprocessed(self, make_worker, recorder):
        result = await linear([make_worker("A")], ["t1", "t2"], False, recorder=recorder)
        assert result == ["A processed: t1"]

    @pytest.mark.asyncio
    async def test_extra_workers_idle(self, make_worker, recorder):
        idle = make_worker("Idle")
        result = await linear([make_worker("A"), idle], ["t1"], recorder=recorder)
        assert len(result.history) == 1
        assert idle.calls == []

    @pytest.mark.asyncio
    async def test_empty_inputs(self, recorder):
        with pytest.raises(InvalidArgument):
            await linear([], ["t1"], recorder=recorder)


class TestGrid:
    @pytest.mark.asyncio
    async def test_square_fill(self, make_worker, recorder):
        workers = [make_worker(f"W{i}") for i in range(5)]  # 2x2 grid, W4 unused
        tasks = [f"t{i}" for i in range(6)]

        result = await grid(workers, tasks, recorder=recorder)

        assert len(result.history) == 4
        assert workers[4].calls == []
        assert [w.calls for w in workers[:4]] == [["t0"], ["t1"], ["t2"], ["t3"]]

    @pytest.mark.asyncio
    async def test_stops_when_tasks_run_out(self, make_worker, recorder):
        workers = [make_worker(f"W{i}") for i in range(9)]
        result = await grid(workers, ["t0", "t1", "t2", "t3"], recorder=recorder)

        assert len(result.history) == 4
        assert workers[3].calls == ["t3"]
        assert workers[4].calls == []

    @pytest.mark.asyncio
    async def test_rows_run_concurrently(self, make_worker, recorder):
        workers = [make_worker(f"W{i}", delay=0.01) for i in range(4)]
        active = []

        def track(entry):
            active.append(sum(w.active for w in workers))

        await grid(workers, ["a", "b", "c", "d"], recorder=recorder, sink=track)
        assert max(active) <= 2
        assert "grid" in recorder.get_metrics()


class TestPyramid:
    @pytest.mark.asyncio
    async def test_levels(self, make_worker, recorder):
        workers = [make_worker(f"W{i}") for i in range(7)]  # levels 1+2+3, W6 unused
        tasks = [f"t{i}" for i in range(10)]

        result = await pyramid(workers, tasks, recorder=recorder)

        assert len(result.history) == 6
        assert workers[0].calls == ["t0"]
        assert workers[5].calls == ["t5"]
        assert workers[6].calls == []
        assert result.history[0].worker_name == "W0"

    @pytest.mark.asyncio
    async def test_single_worker(self, make_worker, recorder):
        result = await pyramid([make_worker("Top")], ["t0", "t1"], False, recorder=recorder)
        assert result == ["Top processed: t0"]

    @pytest.mark.asyncio
    async def test_failure_propagates(self, make_worker, recorder):
        workers = [make_worker("Top"), make_worker("L", fail_on="t1"), make_worker("R")]
        with pytest.raises(RuntimeError):
            await pyramid(workers, ["t0", "t1", "t2"], recorder=recorder)
