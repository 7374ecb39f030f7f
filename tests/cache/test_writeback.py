import logging
import threading

import pytest

from layercache.cache import WriteBackPool


@pytest.fixture
def pool():
    p = WriteBackPool(workers=2, max_pending=8)
    yield p
    p.shutdown()


class TestWriteBackPool:
    """Deferred, best-effort execution of local cache writes."""

    def test_submit_does_not_wait(self, pool):
        release = threading.Event()
        done = []

        def slow():
            release.wait(5)
            done.append(True)

        assert pool.submit("slow", slow) is True
        assert done == []
        assert pool.pending == 1

        release.set()
        assert pool.drain(timeout=5)
        assert done == [True]
        assert pool.pending == 0

    def test_completion_hook(self):
        seen = []
        p = WriteBackPool(workers=1, on_complete=lambda desc, err: seen.append((desc, err)))
        p.submit("ok", lambda: None)
        p.shutdown()
        assert seen == [("ok", None)]

    def test_failure_is_logged_and_reported(self, caplog):
        seen = []

        def boom():
            raise OSError("disk full")

        p = WriteBackPool(workers=1, on_complete=lambda desc, err: seen.append((desc, err)))
        with caplog.at_level(logging.ERROR, logger="layercache"):
            p.submit("boom", boom)
            p.shutdown()

        assert len(seen) == 1
        assert isinstance(seen[0][1], OSError)
        assert any("boom" in r.getMessage() for r in caplog.records)

    def test_full_queue_drops_write_back(self, caplog):
        release = threading.Event()
        p = WriteBackPool(workers=1, max_pending=1)
        try:
            assert p.submit("first", release.wait, 5) is True
            with caplog.at_level(logging.WARNING, logger="layercache"):
                assert p.submit("second", lambda: None) is False
            assert any("second" in r.getMessage() for r in caplog.records)
        finally:
            release.set()
            p.shutdown()

    def test_synchronous_mode_runs_inline(self):
        calls = []
        p = WriteBackPool(synchronous=True)
        p.submit("inline", calls.append, threading.current_thread().name)
        assert calls == [threading.current_thread().name]
        assert p.pending == 0
        p.shutdown()

    def test_submit_after_shutdown_runs_inline(self):
        calls = []
        p = WriteBackPool(workers=1)
        p.shutdown()
        assert p.closed
        p.submit("late", calls.append, 1)
        assert calls == [1]

    def test_drain_timeout(self, pool):
        release = threading.Event()
        pool.submit("stuck", release.wait, 5)
        assert pool.drain(timeout=0.05) is False
        release.set()
        assert pool.drain(timeout=5) is True

    @pytest.mark.parametrize("kwargs", [{"workers": 0}, {"max_pending": 0}])
    def test_invalid_bounds(self, kwargs):
        with pytest.raises(ValueError):
            WriteBackPool(**kwargs)
