import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor, wait as wait_futures
from typing import Callable, Optional, Set

from .. import constants

logger = logging.getLogger(__name__)

CompletionHook = Callable[[str, Optional[BaseException]], None]


class WriteBackPool:
    """
    Bounded pool running best-effort local cache population.

    Submissions never block the caller. Results are not returned to the
    submitter; failures only surface through the log and the completion hook.
    Outstanding work can be awaited with ``drain()``, which tests and
    shutdown rely on.
    """

    def __init__(
        self,
        workers: int = constants.DEFAULT_WRITEBACK_WORKERS,
        max_pending: int = constants.DEFAULT_WRITEBACK_MAX_PENDING,
        synchronous: bool = False,
        on_complete: Optional[CompletionHook] = None,
    ):
        """
        Args:
            workers: Number of worker threads
            max_pending: Queued write-backs beyond which new ones are dropped
            synchronous: Run every task inline on the submitting thread
            on_complete: Called as ``on_complete(description, error)`` after each task
        """
        if workers < 1:
            raise ValueError("workers must be >= 1")
        if max_pending < 1:
            raise ValueError("max_pending must be >= 1")
        self.workers = workers
        self.max_pending = max_pending
        self.synchronous = synchronous
        self.on_complete = on_complete

        self._lock = threading.Lock()
        self._pending: Set[Future] = set()
        self._closed = False
        self._executor: Optional[ThreadPoolExecutor] = None
        if not synchronous:
            self._executor = ThreadPoolExecutor(
                max_workers=workers,
                thread_name_prefix=constants.WRITEBACK_THREAD_PREFIX,
            )

    @property
    def pending(self) -> int:
        with self._lock:
            return len(self._pending)

    @property
    def closed(self) -> bool:
        return self._closed

    def submit(self, description: str, fn: Callable, *args) -> bool:
        """
        Schedule ``fn(*args)`` without waiting for it.

        Returns:
            bool: False when the write-back was dropped because the queue is full
        """
        with self._lock:
            run_inline = self.synchronous or self._closed
            if not run_inline:
                if len(self._pending) >= self.max_pending:
                    logger.warning(
                        f"[WriteBack] Dropping '{description}': {len(self._pending)} write-backs already pending"
                    )
                    return False
                future = self._executor.submit(self._run, description, fn, *args)
                self._pending.add(future)

        if run_inline:
            self._run(description, fn, *args)
            return True

        future.add_done_callback(self._discard)
        return True

    def _discard(self, future: Future):
        with self._lock:
            self._pending.discard(future)

    def _run(self, description: str, fn: Callable, *args):
        error = None
        try:
            fn(*args)
        except Exception as e:
            error = e
            logger.error(f"[WriteBack] '{description}' failed: {e}")
        else:
            logger.debug(f"[WriteBack] '{description}' completed")

        if self.on_complete is not None:
            try:
                self.on_complete(description, error)
            except Exception as e:
                logger.error(f"[WriteBack] Completion hook failed for '{description}': {e}")

    def drain(self, timeout: Optional[float] = None) -> bool:
        """
        Wait until every queued write-back has finished.

        Returns:
            bool: True if nothing is left pending
        """
        with self._lock:
            futures = set(self._pending)
        if futures:
            logger.debug(f"[WriteBack] Draining {len(futures)} pending write-backs")
            _, not_done = wait_futures(futures, timeout=timeout)
            if not_done:
                logger.warning(f"[WriteBack] {len(not_done)} write-backs still pending after drain timeout")
                return False
        return True

    def shutdown(self, wait: bool = True):
        """Stop accepting pooled work; later submissions run inline."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
        if wait:
            self.drain()
        if self._executor is not None:
            self._executor.shutdown(wait=wait)
        logger.debug("[WriteBack] Pool shut down")

    def __repr__(self) -> str:
        return f"WriteBackPool(workers={self.workers}, pending={self.pending}, synchronous={self.synchronous})"
