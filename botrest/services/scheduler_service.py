"""Bounded-concurrency FIFO request scheduler."""

import asyncio
import logging
from typing import Any, Awaitable, Callable, List, Optional, Tuple

logger = logging.getLogger(__name__)

Operation = Callable[[], Awaitable[Any]]


class SchedulerClosedError(RuntimeError):
    """Raised when submitting to a scheduler that has been closed."""


class RequestScheduler:
    """Runs submitted operations in admission order, at most N at a time."""

    def __init__(self, concurrency: int = 1, name: str = "request-scheduler"):
        """Initialize request scheduler.

        Args:
            concurrency: Maximum number of operations running at once
            name: Prefix for worker task names
        """
        if concurrency < 1:
            raise ValueError("concurrency must be at least 1")
        self.concurrency = concurrency
        self.name = name
        self.running = 0
        self._queue: Optional[asyncio.Queue] = None
        self._workers: List[asyncio.Task] = []
        self._closed = False

    @property
    def pending(self) -> int:
        return self._queue.qsize() if self._queue else 0

    @property
    def closed(self) -> bool:
        return self._closed

    def start(self):
        """Start the worker tasks on the running loop."""
        if self._workers:
            return
        self._queue = self._queue or asyncio.Queue()
        self._workers = [
            asyncio.create_task(self._worker_loop(), name=f"{self.name}-{index}")
            for index in range(self.concurrency)
        ]
        logger.info(f"Started {self.name} with concurrency={self.concurrency}")

    def submit(self, operation: Operation) -> asyncio.Future:
        """Queue an operation and return its result handle immediately.

        Args:
            operation: Zero-argument callable returning an awaitable

        Returns:
            Future resolved with the operation's result or exception
        """
        if self._closed:
            raise SchedulerClosedError(f"{self.name} is closed")
        self.start()

        future = asyncio.get_running_loop().create_future()
        self._queue.put_nowait((operation, future))
        return future

    async def run(self, operation: Operation) -> Any:
        """Submit an operation and wait for its result."""
        return await self.submit(operation)

    async def _worker_loop(self):
        while True:
            operation, future = await self._queue.get()
            try:
                await self._execute(operation, future)
            finally:
                self._queue.task_done()

    async def _execute(self, operation: Operation, future: asyncio.Future):
        # Caller gave up before admission
        if future.done():
            return

        try:
            task = asyncio.ensure_future(operation())
        except Exception as e:
            logger.debug(f"Scheduled operation failed to start: {e!r}")
            future.set_exception(e)
            return

        self.running += 1
        try:
            # CancelledError here always means the worker itself is cancelled
            await asyncio.wait({task})
        except asyncio.CancelledError:
            task.cancel()
            if not future.done():
                future.cancel()
            raise
        finally:
            self.running -= 1

        if task.cancelled():
            if not future.done():
                future.cancel()
            return

        error = task.exception()
        if error is not None:
            logger.debug(f"Scheduled operation failed: {error!r}")
        if future.done():
            return
        if error is not None:
            future.set_exception(error)
        else:
            future.set_result(task.result())

    async def join(self):
        """Wait until every queued operation has finished."""
        if self._queue is not None:
            await self._queue.join()

    async def close(self):
        """Stop the workers and cancel handles that were never admitted."""
        if self._closed:
            return
        self._closed = True

        for worker in self._workers:
            worker.cancel()
        for worker in self._workers:
            try:
                await worker
            except asyncio.CancelledError:
                pass
        self._workers = []

        for _, future in self._drain():
            if not future.done():
                future.cancel()
        logger.info(f"Stopped {self.name}")

    def _drain(self) -> List[Tuple[Operation, asyncio.Future]]:
        items = []
        while self._queue is not None and not self._queue.empty():
            items.append(self._queue.get_nowait())
            self._queue.task_done()
        return items
