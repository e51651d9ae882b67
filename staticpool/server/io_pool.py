"""I/O thread pool for the StaticPool server.

File reads and gzip compression are blocking.  Running them in a fixed
``ThreadPoolExecutor`` keeps the event loop free to accept new
connections while loads are in flight.

The pool is built once by the application factory and handed to the
request handler; there is no module-level instance.
"""

import asyncio
import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any, Callable, Optional, TypeVar

from staticpool.common.constants import DEFAULT_POOL_SIZE

logger = logging.getLogger("staticpool.server.pool")

T = TypeVar("T")


class PoolSaturatedError(Exception):
    """Raised by :meth:`IOPool.submit` when a bounded queue is full."""


class IOPool:
    """Fixed-size worker pool returning awaitable futures.

    Jobs start in submission order and may finish in any order.  With
    ``max_pending=None`` the queue is unbounded; otherwise ``submit``
    refuses new work once that many jobs are queued or running.
    """

    def __init__(
        self,
        max_workers: int = DEFAULT_POOL_SIZE,
        max_pending: Optional[int] = None,
        thread_name_prefix: str = "sp-io",
    ):
        if max_workers < 1:
            raise ValueError("max_workers must be at least 1")
        if max_pending is not None and max_pending < 1:
            raise ValueError("max_pending must be at least 1")
        self.max_workers = max_workers
        self.max_pending = max_pending
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix=thread_name_prefix)
        self._pending = 0
        self._lock = threading.Lock()

    @property
    def pending(self) -> int:
        """Jobs submitted and not yet finished."""
        with self._lock:
            return self._pending

    def _release(self, _: Future) -> None:
        with self._lock:
            self._pending -= 1

    def submit(self, fn: Callable[..., T], *args: Any) -> "asyncio.Future[T]":
        """Schedule ``fn(*args)`` on a worker thread.

        Must be called from a running event loop.  The returned future
        resolves exactly once with the job's result or exception.

        Raises:
            PoolSaturatedError: The bounded queue is full.
        """
        loop = asyncio.get_running_loop()
        with self._lock:
            if self.max_pending is not None and self._pending >= self.max_pending:
                raise PoolSaturatedError(f"{self._pending} jobs pending (limit {self.max_pending})")
            self._pending += 1
        try:
            job = self._executor.submit(fn, *args)
        except BaseException:
            with self._lock:
                self._pending -= 1
            raise
        job.add_done_callback(self._release)
        return asyncio.wrap_future(job, loop=loop)

    def shutdown(self, wait: bool = True) -> None:
        """Stop accepting jobs and, if *wait*, let queued ones finish."""
        logger.debug("Shutting down I/O pool (%d pending)", self.pending)
        self._executor.shutdown(wait=wait)
