"""Tests for the I/O worker pool."""

from __future__ import annotations

import asyncio
import threading

import pytest

from staticpool.server.io_pool import IOPool, PoolSaturatedError


@pytest.fixture
def pool():
    p = IOPool(max_workers=4)
    yield p
    p.shutdown(wait=False)


def _boom() -> None:
    raise OSError("disk on fire")


# ── Construction ─────────────────────────────────────────────


def test_rejects_zero_workers():
    with pytest.raises(ValueError):
        IOPool(max_workers=0)


def test_rejects_zero_max_pending():
    with pytest.raises(ValueError):
        IOPool(max_pending=0)


def test_submit_requires_running_loop(pool: IOPool):
    with pytest.raises(RuntimeError):
        pool.submit(lambda: 1)


# ── Submission ───────────────────────────────────────────────


@pytest.mark.asyncio
async def test_submit_returns_result(pool: IOPool):
    assert await pool.submit(sum, [1, 2, 3]) == 6


@pytest.mark.asyncio
async def test_submit_runs_off_loop_thread(pool: IOPool):
    name = await pool.submit(lambda: threading.current_thread().name)
    assert name.startswith("sp-io")
    assert name != threading.current_thread().name


@pytest.mark.asyncio
async def test_exception_propagates(pool: IOPool):
    with pytest.raises(OSError, match="disk on fire"):
        await pool.submit(_boom)
    assert pool.pending == 0


@pytest.mark.asyncio
async def test_four_jobs_run_concurrently(pool: IOPool):
    barrier = threading.Barrier(4, timeout=5)
    results = await asyncio.gather(*(pool.submit(barrier.wait) for _ in range(4)))
    assert sorted(results) == [0, 1, 2, 3]


@pytest.mark.asyncio
async def test_jobs_complete_out_of_order(pool: IOPool):
    release_first = threading.Event()
    order: list[str] = []

    def slow() -> str:
        release_first.wait(5)
        order.append("slow")
        return "slow"

    def fast() -> str:
        order.append("fast")
        return "fast"

    slow_job = pool.submit(slow)
    assert await pool.submit(fast) == "fast"
    assert not slow_job.done()
    release_first.set()
    assert await slow_job == "slow"
    assert order == ["fast", "slow"]


@pytest.mark.asyncio
async def test_unbounded_queue_accepts_backlog(pool: IOPool):
    gate = threading.Event()
    jobs = [pool.submit(gate.wait, 5) for _ in range(20)]
    assert pool.pending == 20
    gate.set()
    assert all(await asyncio.gather(*jobs))
    assert pool.pending == 0


# ── Bounded queue ────────────────────────────────────────────


@pytest.mark.asyncio
async def test_bounded_queue_rejects_when_full():
    bounded = IOPool(max_workers=1, max_pending=2)
    gate = threading.Event()
    try:
        first = bounded.submit(gate.wait, 5)
        second = bounded.submit(gate.wait, 5)
        with pytest.raises(PoolSaturatedError):
            bounded.submit(gate.wait, 5)
        assert bounded.pending == 2

        gate.set()
        await asyncio.gather(first, second)
        assert bounded.pending == 0
        assert await bounded.submit(lambda: "again") == "again"
    finally:
        gate.set()
        bounded.shutdown()


# ── Cancellation / shutdown ──────────────────────────────────


@pytest.mark.asyncio
async def test_cancelled_waiter_does_not_cancel_job(pool: IOPool):
    gate = threading.Event()
    finished = threading.Event()

    def job() -> None:
        gate.wait(5)
        finished.set()

    waiter = asyncio.ensure_future(asyncio.shield(pool.submit(job)))
    await asyncio.sleep(0)
    waiter.cancel()
    with pytest.raises(asyncio.CancelledError):
        await waiter

    gate.set()
    assert await asyncio.get_running_loop().run_in_executor(None, finished.wait, 5)


@pytest.mark.asyncio
async def test_submit_after_shutdown_fails():
    p = IOPool(max_workers=1)
    p.shutdown()
    with pytest.raises(RuntimeError):
        p.submit(lambda: None)
    assert p.pending == 0
