import threading
import time

from layercache.cache import DurableStore
from layercache.exceptions import DurableStoreError


class RecordingDurableStore(DurableStore):
    """In-process DurableStore that records every call it receives."""

    def __init__(self, fail_exists=False, fail_read=False, fail_write=False):
        self.objects = {}
        self.calls = []
        self.contexts = []
        self.fail_exists = fail_exists
        self.fail_read = fail_read
        self.fail_write = fail_write
        self._lock = threading.Lock()

    def _record(self, op, namespace, key, ctx):
        with self._lock:
            self.calls.append((op, namespace, key))
            self.contexts.append(ctx)
        if ctx is not None:
            ctx.check()

    def exists(self, namespace, key, ctx=None):
        self._record("exists", namespace, key, ctx)
        if self.fail_exists:
            raise DurableStoreError("probe failed")
        return (namespace, key) in self.objects

    def read(self, namespace, key, ctx=None):
        self._record("read", namespace, key, ctx)
        if self.fail_read:
            raise DurableStoreError("read failed")
        try:
            return self.objects[(namespace, key)]
        except KeyError as e:
            raise DurableStoreError(f"no such object {namespace}/{key}") from e

    def write(self, namespace, key, data, ctx=None):
        self._record("write", namespace, key, ctx)
        if self.fail_write:
            raise DurableStoreError("write failed")
        with self._lock:
            self.objects[(namespace, key)] = bytes(data)


def wait_for(predicate, timeout=5.0, interval=0.01):
    """Poll until predicate() is truthy or the timeout elapses."""
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(interval)
    return bool(predicate())


class SlowDurableStore(RecordingDurableStore):
    """RecordingDurableStore whose calls block until released (or a timeout)."""

    def __init__(self, delay=5.0, **failures):
        super().__init__(**failures)
        self.delay = delay
        self.release = threading.Event()

    def _record(self, op, namespace, key, ctx):
        with self._lock:
            self.calls.append((op, namespace, key))
            self.contexts.append(ctx)
        self.release.wait(self.delay)
