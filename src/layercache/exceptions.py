class LayerCacheError(Exception):
    """Base exception for all application-specific errors."""

    pass


# --- 1. Errors related to loading and parsing the configuration file ---
class ConfigurationError(LayerCacheError):
    """Base class for errors encountered while finding, reading, or parsing config files."""

    pass


class ConfigFileMissingError(ConfigurationError):
    """Raised when the configuration file cannot be found."""

    pass


class ConfigParsingError(ConfigurationError):
    """Raised when a YAML configuration file is syntactically incorrect."""

    pass


class ConfigValidationError(ConfigurationError):
    """Raised when the configuration fails structural validation (e.g., Pydantic)."""

    pass


# --- 2. Errors raised by the cache tiers ---
class CacheError(LayerCacheError):
    """Base class for errors raised inside the cache hierarchy."""

    pass


class CacheInitError(CacheError):
    """Raised when the local backing directory cannot be created."""

    pass


class InvalidKeyError(CacheError):
    """Raised when a cache key cannot be mapped onto a backing file."""

    pass


class DurableStoreError(CacheError):
    """Raised for any failure reported by the durable key/value store."""

    pass


class CallCancelledError(DurableStoreError):
    """Raised when the caller cancelled the call context before a durable-store call."""

    pass


class DeadlineExceededError(DurableStoreError):
    """Raised when the caller's deadline expired before a durable-store call."""

    pass


class EntryDecodeError(DurableStoreError):
    """Raised when a stored layer entry cannot be parsed."""

    pass


# --- 3. Errors related to IO operations ---
class CacheIOError(LayerCacheError):
    """Base class for IO-related errors."""

    pass


class CachePathNotFoundError(CacheIOError):
    """Raised when a path does not exist."""

    pass


class CachePathExistsError(CacheIOError):
    """Raised when a path already exists."""

    pass


class CacheNotAFileError(CacheIOError):
    """Raised when a file operation is attempted on a directory."""

    pass


class CacheNotADirectoryError(CacheIOError):
    """Raised when a directory operation is attempted on a file."""

    pass


class UnsupportedFeatureError(CacheIOError):
    """Raised when a requested filesystem kind is not implemented."""

    pass
