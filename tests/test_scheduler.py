"""Tests for the request scheduler."""

import asyncio

import pytest

from botrest.services.scheduler_service import RequestScheduler, SchedulerClosedError


class ConcurrencyTracker:
    """Records how many operations overlap."""

    def __init__(self):
        self.active = 0
        self.peak = 0
        self.started = []

    def operation(self, name, delay=0.01):
        async def run():
            self.started.append(name)
            self.active += 1
            self.peak = max(self.peak, self.active)
            await asyncio.sleep(delay)
            self.active -= 1
            return name

        return run


@pytest.mark.asyncio
async def test_submit_returns_handle_immediately():
    scheduler = RequestScheduler()
    try:
        handle = scheduler.submit(lambda: asyncio.sleep(0, result="done"))

        assert isinstance(handle, asyncio.Future)
        assert not handle.done()
        assert await handle == "done"
    finally:
        await scheduler.close()


@pytest.mark.asyncio
async def test_concurrency_one_never_overlaps():
    """Back-to-back operations run strictly one after another."""
    scheduler = RequestScheduler(concurrency=1)
    tracker = ConcurrencyTracker()
    try:
        handles = [scheduler.submit(tracker.operation(i)) for i in range(2)]
        assert await asyncio.gather(*handles) == [0, 1]
        assert tracker.peak == 1
    finally:
        await scheduler.close()


@pytest.mark.asyncio
async def test_concurrency_bound_respected():
    scheduler = RequestScheduler(concurrency=3)
    tracker = ConcurrencyTracker()
    try:
        handles = [scheduler.submit(tracker.operation(i)) for i in range(10)]
        await asyncio.gather(*handles)
        assert tracker.peak == 3
    finally:
        await scheduler.close()


@pytest.mark.asyncio
async def test_admission_order_is_fifo():
    scheduler = RequestScheduler(concurrency=2)
    tracker = ConcurrencyTracker()
    try:
        handles = [scheduler.submit(tracker.operation(i, delay=0.001)) for i in range(6)]
        await asyncio.gather(*handles)
        assert tracker.started == list(range(6))
    finally:
        await scheduler.close()


@pytest.mark.asyncio
async def test_failure_isolated_to_its_handle():
    """A failing operation does not affect operations queued behind it."""
    scheduler = RequestScheduler()

    async def boom():
        raise ValueError("boom")

    try:
        failing = scheduler.submit(boom)
        succeeding = scheduler.submit(lambda: asyncio.sleep(0, result="ok"))

        with pytest.raises(ValueError, match="boom"):
            await failing
        assert await succeeding == "ok"
    finally:
        await scheduler.close()


@pytest.mark.asyncio
async def test_cancelled_handle_is_skipped():
    scheduler = RequestScheduler()
    gate = asyncio.Event()
    ran = []

    async def blocker():
        await gate.wait()

    async def skipped():
        ran.append("skipped")

    try:
        first = scheduler.submit(blocker)
        second = scheduler.submit(skipped)
        second.cancel()
        gate.set()

        await first
        await scheduler.join()
        assert ran == []
    finally:
        await scheduler.close()


@pytest.mark.asyncio
async def test_close_cancels_pending_handles():
    scheduler = RequestScheduler()
    gate = asyncio.Event()

    running = scheduler.submit(gate.wait)
    queued = scheduler.submit(gate.wait)
    await asyncio.sleep(0)

    assert scheduler.running == 1
    assert scheduler.pending == 1

    await scheduler.close()

    assert running.cancelled()
    assert queued.cancelled()
    with pytest.raises(SchedulerClosedError):
        scheduler.submit(gate.wait)


@pytest.mark.asyncio
async def test_operation_cancelling_itself_keeps_worker_alive():
    """An operation raising CancelledError fails only its own handle."""
    scheduler = RequestScheduler()

    async def cancels_itself():
        raise asyncio.CancelledError()

    try:
        first = scheduler.submit(cancels_itself)
        second = scheduler.submit(lambda: asyncio.sleep(0, result="ok"))

        assert await second == "ok"
        assert first.cancelled()
    finally:
        await scheduler.close()


@pytest.mark.asyncio
async def test_cancelled_worker_stops_without_close():
    scheduler = RequestScheduler()
    gate = asyncio.Event()
    try:
        handle = scheduler.submit(gate.wait)
        await asyncio.sleep(0)
        worker = scheduler._workers[0]

        worker.cancel()
        with pytest.raises(asyncio.CancelledError):
            await worker

        assert worker.cancelled()
        assert handle.cancelled()
        assert scheduler.running == 0
    finally:
        await scheduler.close()


def test_event_loop_shutdown_with_unfinished_operation():
    """asyncio.run returns even when the caller never closes the scheduler."""

    async def main():
        scheduler = RequestScheduler()
        handle = scheduler.submit(lambda: asyncio.sleep(30))
        await asyncio.sleep(0.01)
        return handle

    handle = asyncio.run(main())

    assert handle.cancelled()


@pytest.mark.asyncio
async def test_operation_factory_error_fails_handle():
    scheduler = RequestScheduler()

    def broken():
        raise RuntimeError("no coroutine")

    try:
        with pytest.raises(RuntimeError, match="no coroutine"):
            await scheduler.submit(broken)
        assert await scheduler.submit(lambda: asyncio.sleep(0, result="ok")) == "ok"
    finally:
        await scheduler.close()


def test_concurrency_must_be_positive():
    with pytest.raises(ValueError):
        RequestScheduler(concurrency=0)
