import tempfile
import os

# --- Log and Debug ---
# Short aliases for module names to keep CLI/env concise
LOG_ALIAS_MAP = {
    "cache": "layercache.cache",
    "cc": "layercache.cache",
    "local": "layercache.cache.local",
    "lcl": "layercache.cache.local",
    "durable": "layercache.cache.durable",
    "dur": "layercache.cache.durable",
    "manager": "layercache.cache.manager",
    "mgr": "layercache.cache.manager",
    "writeback": "layercache.cache.writeback",
    "wb": "layercache.cache.writeback",
    "io": "layercache.io",
    "fs": "layercache.io.fs",
    "conf": "layercache.config",
    "cli": "layercache.cli",
}

# Top-level modules within layercache for auto-prefixing
KNOWN_TOP_MODULES = {
    "cache",
    "io",
    "datacls",
    "utils",
    "exceptions",
    "config",
    "cli",
}

LOG_LEVELS_ENV = "LAYERCACHE_LOG_LEVELS"

# --- Durable store namespaces ---
MANIFEST_NAMESPACE = "manifests"
LAYER_NAMESPACE = "builds"

# --- Local store ---
DEFAULT_CACHE_DIR = os.path.join(tempfile.gettempdir(), "layercache")
LOCAL_FS_KINDS = {"disk", "memory", "hyper"}
TEMP_FILE_MARKER = ".tmp-"

# --- Write-back pool ---
DEFAULT_WRITEBACK_WORKERS = 4
DEFAULT_WRITEBACK_MAX_PENDING = 256
WRITEBACK_THREAD_PREFIX = "layercache-writeback"

# --- Durable calls ---
DEFAULT_DURABLE_WORKERS = 8
DURABLE_THREAD_PREFIX = "layercache-durable"
DURABLE_POLL_INTERVAL = 0.05
