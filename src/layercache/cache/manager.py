import logging
from typing import TYPE_CHECKING, Any, Mapping, Optional, Union

from .. import constants
from ..datacls import CacheResult, CallContext, LayerEntry, MISS
from ..exceptions import EntryDecodeError
from ..io import create_fs
from .calls import DurableCallRunner
from .durable import DurableStore, FsspecDurableStore
from .local import LocalStore
from .writeback import WriteBackPool

if TYPE_CHECKING:  # pragma: no cover - imported for typing only
    from ..config import Config

logger = logging.getLogger(__name__)


class CacheManager:
    """
    Two-tier cache for manifests and layer build entries.

    Reads check the local tier first and fall back to the durable tier,
    repopulating the local tier in the background after a durable hit.
    Writes go to both tiers. No failure of either tier is ever raised to the
    caller: reads degrade to a miss, writes are best effort.
    Durable calls are bounded by the caller's CallContext, if one is given.

    Callers must only store content-identical values under the same key;
    concurrent misses on one key may write the same value twice.
    """

    def __init__(
        self,
        local: LocalStore,
        durable: Optional[DurableStore] = None,
        writeback: Optional[WriteBackPool] = None,
        runner: Optional[DurableCallRunner] = None,
    ):
        """
        Args:
            local: Process-local tier
            durable: Durable tier; None runs the cache local-only
            writeback: Pool for deferred local writes (a default pool is created if omitted)
            runner: Runs durable calls within the caller's deadline (a default runner is created if omitted)
        """
        self.local = local
        self.durable = durable
        self.writeback = writeback or WriteBackPool()
        self.runner = runner or DurableCallRunner()

    @classmethod
    def from_config(cls, config: "Config") -> "CacheManager":
        """Build the whole hierarchy from a loaded configuration."""
        model = config.model
        local = LocalStore(model.local.directory, fs=create_fs(model.local.filesystem))

        durable = None
        if model.durable.url:
            durable = FsspecDurableStore(model.durable.url, model.durable.storage_options)
        else:
            logger.warning("No durable store configured, caching locally only")

        writeback = WriteBackPool(
            workers=model.writeback.workers,
            max_pending=model.writeback.max_pending,
            synchronous=model.writeback.synchronous,
        )
        runner = DurableCallRunner(workers=model.durable.workers)
        logger.info(f"Cache initialised: {local!r}, durable={durable!r}")
        return cls(local, durable, writeback, runner)

    # --------------------
    #
    # Durable tier helpers
    #
    # --------------------

    def _fetch_durable(self, namespace: str, key: str, ctx: Optional[CallContext]) -> Optional[bytes]:
        """Probe then read an object; None on absence or failure."""
        if self.durable is None:
            return None

        # Probe whether the object exists before trying to fetch it.
        try:
            if not self.runner.call(ctx, self.durable.exists, namespace, key, ctx):
                logger.debug(f"'{namespace}/{key}' not in durable store")
                return None
        except Exception as e:
            logger.error(f"Failed to probe durable store for '{namespace}/{key}': {e}")
            return None

        try:
            return self.runner.call(ctx, self.durable.read, namespace, key, ctx)
        except Exception as e:
            logger.error(f"Failed to read '{namespace}/{key}' from durable store: {e}")
            return None

    def _store_durable(self, namespace: str, key: str, data: bytes, ctx: Optional[CallContext]) -> bool:
        if self.durable is None:
            return False
        try:
            self.runner.call(ctx, self.durable.write, namespace, key, data, ctx)
        except Exception as e:
            logger.error(f"Failed to cache '{namespace}/{key}' to durable store: {e}")
            return False
        return True

    # --------------------
    #
    # Manifests
    #
    # --------------------

    def fetch_manifest(self, key: str, ctx: Optional[CallContext] = None) -> CacheResult:
        """Retrieve a manifest, checking the local tier before the durable tier."""
        cached = self.local.get_manifest(key)
        if cached.found:
            return cached

        payload = self._fetch_durable(constants.MANIFEST_NAMESPACE, key, ctx)
        if payload is None:
            return MISS

        self.writeback.submit(f"manifest:{key}", self.local.put_manifest, key, payload)
        logger.info(f"Retrieved manifest '{key}' from durable store")
        return CacheResult(payload, True)

    def store_manifest(self, key: str, payload: Union[bytes, str], ctx: Optional[CallContext] = None):
        """Add a manifest to the local and durable tiers."""
        if isinstance(payload, str):
            payload = payload.encode("utf-8")
        payload = bytes(payload)

        if self.durable is None:
            # Only copy of the manifest: written before returning
            self.local.put_manifest(key, payload)
            return
        self.writeback.submit(f"manifest:{key}", self.local.put_manifest, key, payload)

        if self._store_durable(constants.MANIFEST_NAMESPACE, key, payload, ctx):
            logger.info(f"Cached manifest '{key}' to durable store ({len(payload)} bytes)")

    # --------------------
    #
    # Layers
    #
    # --------------------

    def fetch_layer(self, key: str, ctx: Optional[CallContext] = None) -> CacheResult:
        """Retrieve a layer entry, checking the local tier before the durable tier."""
        cached = self.local.get_layer(key)
        if cached.found:
            return cached

        data = self._fetch_durable(constants.LAYER_NAMESPACE, key, ctx)
        if data is None:
            return MISS

        try:
            entry = LayerEntry.from_bytes(data)
        except EntryDecodeError as e:
            logger.error(f"Failed to decode cached layer '{key}': {e}")
            return MISS

        self.writeback.submit(f"layer:{key}", self.local.put_layer, key, entry)
        logger.debug(f"Retrieved layer '{key}' from durable store")
        return CacheResult(entry, True)

    def store_layer(self, key: str, entry: Union[LayerEntry, Mapping[str, Any]], ctx: Optional[CallContext] = None):
        """Add a layer build result to the local and durable tiers."""
        if not isinstance(entry, LayerEntry):
            entry = LayerEntry.model_validate(entry)

        # In-memory insert, cheap enough to do inline
        self.local.put_layer(key, entry)

        if self._store_durable(constants.LAYER_NAMESPACE, key, entry.to_bytes(), ctx):
            logger.debug(f"Cached layer '{key}' to durable store")

    # --------------------
    #
    # Lifecycle
    #
    # --------------------

    def drain(self, timeout: Optional[float] = None) -> bool:
        """Wait for outstanding local write-backs."""
        return self.writeback.drain(timeout)

    def close(self):
        self.writeback.shutdown(wait=True)
        self.runner.shutdown()

    def __enter__(self) -> "CacheManager":
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def __repr__(self) -> str:
        return f"CacheManager(local={self.local!r}, durable={self.durable!r}, writeback={self.writeback!r})"
