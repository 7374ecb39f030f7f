"""
layercache

A two-tier memoization cache in front of an image build process. It keeps
image manifests (opaque JSON payloads) and layer build entries, checking a
fast process-local tier before a durable key/value store.

Main modules:
- cache: Local tier, durable-store adapter, write-back pool and CacheManager
- io: File system abstraction over fsspec and morefs
- datacls: CacheResult, LayerEntry and CallContext
- config: Configuration loading and validation
- utils: Logging and locking helpers

Quick start example:
```python
from layercache import CacheManager, Config

with CacheManager.from_config(Config("layercache.yml")) as cache:
    manifest, found = cache.fetch_manifest(key)
    if not found:
        manifest = build_manifest(...)
        cache.store_manifest(key, manifest)
```
"""

from .cache import CacheManager, LocalStore, DurableStore, FsspecDurableStore, WriteBackPool
from .config import Config, CacheConfigModel
from .datacls import CacheResult, LayerEntry, CallContext
from .io import FileSystem, create_fs
from .exceptions import (
    LayerCacheError,
    ConfigurationError,
    ConfigValidationError,
    CacheError,
    CacheInitError,
    DurableStoreError,
)

__version__ = "0.3.0"

__all__ = [
    # Version
    '__version__',
    # Cache
    'CacheManager',
    'LocalStore',
    'DurableStore',
    'FsspecDurableStore',
    'WriteBackPool',
    # Config
    'Config',
    'CacheConfigModel',
    # Data
    'CacheResult',
    'LayerEntry',
    'CallContext',
    # IO
    'FileSystem',
    'create_fs',
    # Exceptions
    'LayerCacheError',
    'ConfigurationError',
    'ConfigValidationError',
    'CacheError',
    'CacheInitError',
    'DurableStoreError',
]
