import logging
import posixpath
import uuid
from typing import Dict, Optional

from .. import constants
from ..datacls import CacheResult, LayerEntry, MISS
from ..io import FileSystem, DiskFileSystem
from ..utils import ReadWriteLock
from ..exceptions import (
    CacheInitError,
    CachePathNotFoundError,
    InvalidKeyError,
    LayerCacheError,
)

logger = logging.getLogger(__name__)


class LocalStore:
    """
    Process-local cache tier.

    Manifests are kept on a filesystem, one file per key, because they can be
    large. Layer entries are small and reused per request, so they live in an
    in-memory map. Each region has its own reader/writer lock covering every
    key in that region.
    """

    def __init__(self, directory: str = constants.DEFAULT_CACHE_DIR, fs: Optional[FileSystem] = None):
        """
        Initialize the local store and ensure its manifest directory exists.

        Args:
            directory: Directory holding one file per cached manifest
            fs: File system the directory lives on (defaults to local disk)

        Raises:
            CacheInitError: the directory could not be created
        """
        self.fs = fs or DiskFileSystem()
        self.directory = str(directory).rstrip("/") or "/"

        # Manifest cache
        self._manifest_lock = ReadWriteLock()

        # Layer cache
        self._layer_lock = ReadWriteLock()
        self._layers: Dict[str, LayerEntry] = {}

        self._ensure_cache_dir()

    def _ensure_cache_dir(self):
        try:
            self.fs.mkdir(self.directory, parents=True, exist_ok=True)
        except (OSError, LayerCacheError) as e:
            raise CacheInitError(f"Failed to create local cache directory '{self.directory}': {e}") from e
        logger.debug(f"Local manifest cache directory: {self.directory}")

    def _manifest_path(self, key: str) -> str:
        if not key or key in (".", "..") or "/" in key or "\\" in key or constants.TEMP_FILE_MARKER in key:
            raise InvalidKeyError(f"Cache key {key!r} cannot be used as a file name")
        return posixpath.join(self.directory, key)

    def get_manifest(self, key: str) -> CacheResult:
        """Retrieve a cached manifest payload, if present."""
        with self._manifest_lock.read_locked():
            try:
                payload = self.fs.read_bytes(self._manifest_path(key))
            except CachePathNotFoundError as e:
                # Absence is the normal miss case
                logger.debug(f"Manifest '{key}' not in local cache: {e}")
                return MISS
            except (OSError, LayerCacheError) as e:
                logger.error(f"Failed to read manifest '{key}' from local cache: {e}")
                return MISS

        return CacheResult(payload, True)

    def put_manifest(self, key: str, payload: bytes):
        """
        Write a manifest payload to the local cache.

        The payload is written to a temporary sibling and renamed onto the key,
        so a failed write never leaves partial content under the key.
        Failures are logged and swallowed.
        """
        with self._manifest_lock.write_locked():
            try:
                path = self._manifest_path(key)
            except InvalidKeyError as e:
                logger.error(f"Failed to locally cache manifest '{key}': {e}")
                return

            tmp_path = f"{path}{constants.TEMP_FILE_MARKER}{uuid.uuid4().hex}"
            try:
                self.fs.write_bytes(tmp_path, bytes(payload))
                self.fs.rename(tmp_path, path)
            except (OSError, LayerCacheError) as e:
                logger.error(f"Failed to locally cache manifest '{key}': {e}")
                self._discard_temp(tmp_path)
                return
        logger.debug(f"Locally cached manifest '{key}' ({len(payload)} bytes)")

    def _discard_temp(self, tmp_path: str):
        try:
            if self.fs.exists(tmp_path):
                self.fs.remove(tmp_path)
        except (OSError, LayerCacheError) as e:
            logger.warning(f"Failed to remove partial manifest '{tmp_path}': {e}")

    def get_layer(self, key: str) -> CacheResult:
        """Retrieve a layer entry from the in-memory map."""
        with self._layer_lock.read_locked():
            entry = self._layers.get(key)
        if entry is None:
            return MISS
        return CacheResult(entry.model_copy(deep=True), True)

    def put_layer(self, key: str, entry: LayerEntry):
        """Insert or overwrite a layer entry."""
        stored = entry.model_copy(deep=True)
        with self._layer_lock.write_locked():
            self._layers[key] = stored

    def __repr__(self) -> str:
        return f"LocalStore(directory={self.directory!r}, fs={type(self.fs).__name__})"
