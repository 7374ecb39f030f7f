import pytest

from layercache.cache import CacheManager, FsspecDurableStore, LocalStore, WriteBackPool


@pytest.fixture
def local_store(tmp_path):
    return LocalStore(str(tmp_path / "local"))


@pytest.fixture
def durable_store(tmp_path):
    return FsspecDurableStore(str(tmp_path / "bucket"))


@pytest.fixture
def cache(local_store, durable_store):
    manager = CacheManager(local_store, durable_store, WriteBackPool(workers=2))
    yield manager
    manager.close()
