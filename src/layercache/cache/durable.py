import functools
import logging
import posixpath
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional, override

import fsspec

from ..datacls import CallContext
from ..exceptions import DurableStoreError, InvalidKeyError

logger = logging.getLogger(__name__)


def wrap_store_error(func):
    """Decorator to wrap backend failures into DurableStoreError."""

    @functools.wraps(func)
    def wrapper(self, namespace, key, *args, **kwargs):
        try:
            return func(self, namespace, key, *args, **kwargs)
        except DurableStoreError:
            raise
        except Exception as e:
            raise DurableStoreError(
                f"{func.__name__} of '{namespace}/{key}' failed on {self}: {e}"
            ) from e

    return wrapper


class DurableStore(ABC):
    """
    Namespaced key -> bytes blob store shared by every cache instance.

    Implementations raise DurableStoreError on failure and must honour the
    caller's CallContext on every call.
    """

    @abstractmethod
    def exists(self, namespace: str, key: str, ctx: Optional[CallContext] = None) -> bool:
        """Probe whether an object is present"""
        pass

    @abstractmethod
    def read(self, namespace: str, key: str, ctx: Optional[CallContext] = None) -> bytes:
        """Read the full object"""
        pass

    @abstractmethod
    def write(self, namespace: str, key: str, data: bytes, ctx: Optional[CallContext] = None):
        """Write (or blindly overwrite) an object"""
        pass


class FsspecDurableStore(DurableStore):
    """
    DurableStore over any fsspec filesystem.

    Objects are stored at ``<root>/<namespace>/<key>``, e.g.
    ``gs://bucket/prefix/manifests/<key>``.
    """

    def __init__(self, url: str, storage_options: Optional[Dict[str, Any]] = None):
        """
        Args:
            url: fsspec URL of the store root (gs://, s3://, memory://, local path)
            storage_options: passed to the fsspec filesystem constructor
        """
        self.url = url
        self.fs, self.root = fsspec.core.url_to_fs(url, **(storage_options or {}))
        self.root = self.root.rstrip("/")
        logger.debug(f"Durable store at '{url}' using {type(self.fs).__name__}")

    def _object_path(self, namespace: str, key: str) -> str:
        if not key or key in (".", "..") or "/" in key:
            raise InvalidKeyError(f"Cache key {key!r} cannot be used as an object name")
        return posixpath.join(self.root, namespace, key)

    @staticmethod
    def _check(ctx: Optional[CallContext]):
        if ctx is not None:
            ctx.check()

    @override
    @wrap_store_error
    def exists(self, namespace: str, key: str, ctx: Optional[CallContext] = None) -> bool:
        self._check(ctx)
        return self.fs.exists(self._object_path(namespace, key))

    @override
    @wrap_store_error
    def read(self, namespace: str, key: str, ctx: Optional[CallContext] = None) -> bytes:
        self._check(ctx)
        return self.fs.cat_file(self._object_path(namespace, key))

    @override
    @wrap_store_error
    def write(self, namespace: str, key: str, data: bytes, ctx: Optional[CallContext] = None):
        self._check(ctx)
        path = self._object_path(namespace, key)
        self.fs.makedirs(posixpath.dirname(path), exist_ok=True)
        self.fs.pipe_file(path, bytes(data))

    def __repr__(self) -> str:
        return f"FsspecDurableStore({self.url!r})"
