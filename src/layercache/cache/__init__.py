"""
layercache Cache Module

The cache hierarchy consists of:
- LocalStore: process-local tier (manifests on disk, layer entries in memory)
- DurableStore: interface to the shared key/value blob store, with an fsspec adapter
- DurableCallRunner: runs durable calls within the caller's deadline
- WriteBackPool: bounded pool running deferred local writes
- CacheManager: composes the tiers into read-through and write-through operations
"""

from .local import LocalStore
from .durable import DurableStore, FsspecDurableStore
from .calls import DurableCallRunner
from .writeback import WriteBackPool
from .manager import CacheManager

__all__ = [
    'LocalStore',
    'DurableStore',
    'FsspecDurableStore',
    'DurableCallRunner',
    'WriteBackPool',
    'CacheManager',
]
