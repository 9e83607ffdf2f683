"""Bounded worker pool for asynchronous deliveries.

``concurrent.futures.ThreadPoolExecutor`` queues without limit, so
``BoundedExecutor`` puts a non-blocking semaphore in front of it: once
``max_pending`` tasks are queued or running, ``submit`` raises
``DeliveryRejected`` immediately instead of blocking the logging thread.

``shared_executor()`` hands out one process-wide pool that every handler
uses unless it is given its own.  It is shut down at interpreter exit.
"""

from __future__ import annotations

import atexit
import logging
import threading
from collections.abc import Callable
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any

from errorship.errors import DeliveryRejected

logger = logging.getLogger(__name__)

DEFAULT_MAX_WORKERS = 4
DEFAULT_MAX_PENDING = 256


class BoundedExecutor:
    """Thread pool that rejects work instead of queueing without bound.

    Parameters
    ----------
    max_workers:
        Number of delivery threads.
    max_pending:
        Maximum number of tasks queued or running at once.
    """

    def __init__(
        self,
        max_workers: int = DEFAULT_MAX_WORKERS,
        max_pending: int = DEFAULT_MAX_PENDING,
        thread_name_prefix: str = "errorship",
    ) -> None:
        if max_workers < 1:
            raise ValueError(f"max_workers must be >= 1, got {max_workers}")
        if max_pending < 1:
            raise ValueError(f"max_pending must be >= 1, got {max_pending}")
        self._max_pending = max_pending
        self._slots = threading.BoundedSemaphore(max_pending)
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix=thread_name_prefix
        )

    @property
    def max_pending(self) -> int:
        return self._max_pending

    def submit(self, fn: Callable[..., Any], /, *args: Any, **kwargs: Any) -> Future:
        """Schedule ``fn(*args, **kwargs)`` without blocking.

        Raises
        ------
        DeliveryRejected
            If ``max_pending`` tasks are already outstanding.
        RuntimeError
            If the pool has been shut down.
        """
        if not self._slots.acquire(blocking=False):
            raise DeliveryRejected(
                f"Worker pool is full ({self._max_pending} deliveries pending)"
            )
        try:
            future = self._executor.submit(fn, *args, **kwargs)
        except BaseException:
            self._slots.release()
            raise
        future.add_done_callback(lambda _: self._slots.release())
        return future

    def shutdown(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)


_shared: BoundedExecutor | None = None
_shared_lock = threading.Lock()


def shared_executor(
    max_workers: int = DEFAULT_MAX_WORKERS,
    max_pending: int = DEFAULT_MAX_PENDING,
) -> BoundedExecutor:
    """Return the process-wide pool, creating it on first use.

    Sizing arguments only apply to the call that creates the pool.
    """
    global _shared
    with _shared_lock:
        if _shared is None:
            _shared = BoundedExecutor(max_workers=max_workers, max_pending=max_pending)
            logger.debug(
                "Created shared worker pool (workers=%d, pending=%d)",
                max_workers,
                max_pending,
            )
        return _shared


@atexit.register
def _shutdown_shared() -> None:
    global _shared
    with _shared_lock:
        if _shared is not None:
            _shared.shutdown(wait=True)
            _shared = None
