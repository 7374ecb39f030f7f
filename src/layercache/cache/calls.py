import logging
import threading
from concurrent.futures import ThreadPoolExecutor, wait as wait_futures
from typing import Callable, Optional

from .. import constants
from ..datacls import CallContext

logger = logging.getLogger(__name__)


class DurableCallRunner:
    """
    Runs durable-store calls so that the caller's CallContext bounds the wait.

    A call made with a context runs on a worker thread while the caller waits
    for the result, the deadline or a cancellation, whichever comes first. On
    deadline or cancellation the caller gets DeadlineExceededError or
    CallCancelledError straight away; the abandoned backend call finishes on
    its worker in the background and its result is discarded.

    Calls made without a context run inline.
    """

    def __init__(
        self,
        workers: int = constants.DEFAULT_DURABLE_WORKERS,
        poll_interval: float = constants.DURABLE_POLL_INTERVAL,
    ):
        """
        Args:
            workers: Number of threads available to in-flight durable calls
            poll_interval: How often a waiting caller re-checks for cancellation
        """
        if workers < 1:
            raise ValueError("workers must be >= 1")
        self.workers = workers
        self.poll_interval = poll_interval
        self._lock = threading.Lock()
        self._closed = False
        self._executor = ThreadPoolExecutor(
            max_workers=workers,
            thread_name_prefix=constants.DURABLE_THREAD_PREFIX,
        )

    def call(self, ctx: Optional[CallContext], fn: Callable, *args):
        """
        Run ``fn(*args)`` within the limits of ``ctx``.

        Raises:
            CallCancelledError: ctx was cancelled before the call finished
            DeadlineExceededError: ctx's deadline passed before the call finished
        """
        if ctx is None:
            return fn(*args)

        ctx.check()
        with self._lock:
            if self._closed:
                return fn(*args)
            future = self._executor.submit(fn, *args)

        while True:
            remaining = ctx.remaining()
            step = self.poll_interval if remaining is None else min(remaining, self.poll_interval)
            done, _ = wait_futures([future], timeout=step)
            if done:
                return future.result()
            if ctx.cancelled or ctx.expired:
                future.cancel()
                logger.debug(f"Abandoning durable call {getattr(fn, '__name__', fn)}: {ctx!r}")
                ctx.check()

    def shutdown(self):
        """Stop the workers without waiting for abandoned calls."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
        self._executor.shutdown(wait=False, cancel_futures=True)

    def __repr__(self) -> str:
        return f"DurableCallRunner(workers={self.workers})"
