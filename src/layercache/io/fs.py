from abc import ABC, abstractmethod
from typing import List, override
import functools
import logging
import os
import posixpath
import fsspec
from morefs.dict import DictFS
from morefs.memory import MemFS
from ..exceptions import (
    UnsupportedFeatureError,
    CachePathExistsError,
    CachePathNotFoundError,
    CacheNotAFileError,
    CacheNotADirectoryError,
)

logger = logging.getLogger(__name__)


def wrap_io_error(func):
    """Decorator to wrap IO errors into layercache exceptions."""

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except FileExistsError as e:
            raise CachePathExistsError(e) from e
        except FileNotFoundError as e:
            raise CachePathNotFoundError(e) from e
        except IsADirectoryError as e:
            raise CacheNotAFileError(e) from e
        except NotADirectoryError as e:
            raise CacheNotADirectoryError(e) from e

    return wrapper

# --------------------------------------------------------
#
# Abstract Base FileSystem Interface
#
# --------------------------------------------------------

class FileSystem(ABC):
    """Cache File System Abstract Base Class"""

    @abstractmethod
    def read_bytes(self, path: str) -> bytes:
        """Read bytes from a file"""
        pass

    @abstractmethod
    def write_bytes(self, path: str, content: bytes):
        """Write bytes to a file"""
        pass

    @abstractmethod
    def exists(self, path: str) -> bool:
        """Check if a path exists"""
        pass

    @abstractmethod
    def is_file(self, path: str) -> bool:
        """Check if a path is a file"""
        pass

    @abstractmethod
    def mkdir(self, path: str, parents: bool = False, exist_ok: bool = False):
        """Create a directory"""
        pass

    @abstractmethod
    def rename(self, src: str, dst: str):
        """Move a file onto dst, replacing any file already there"""
        pass

    # NotImplemented methods
    # !!! Child-FileSystem Override these methods if needed
    def listdir(self, path: str) -> List[str]:
        """List directory contents"""
        return NotImplemented

    def remove(self, path: str):
        """Remove a file"""
        return NotImplemented


# --------------------
#
# Generic FileSystem
#
# --------------------

class GenericFileSystem(FileSystem, ABC):
    """Generic File System base class for fsspec and morefs implementations"""

    def __init__(self, fs_instance, name=None):
        """
        Initialize with a filesystem instance

        Args:
            fs_instance: The underlying filesystem instance (fsspec or morefs)
            name: Optional name for logging purposes
        """
        self.fs = fs_instance
        self.name = name or f"{type(fs_instance).__name__}"

    def path2str(self, path: str) -> str:
        """Normalize a path for the underlying filesystem"""
        return str(path)

    @override
    @wrap_io_error
    def read_bytes(self, path: str) -> bytes:
        logger.debug(f"[{self.name}] Reading bytes from: {path}")
        with self.fs.open(self.path2str(path), "rb") as f:
            return f.read()

    @override
    @wrap_io_error
    def write_bytes(self, path: str, content: bytes):
        logger.debug(f"[{self.name}] Writing {len(content)} bytes to: {path}")
        self.fs.mkdirs(self.path2str(posixpath.dirname(path)), exist_ok=True)
        with self.fs.open(self.path2str(path), "wb") as f:
            f.write(content)

    @override
    def exists(self, path: str) -> bool:
        return self.fs.exists(self.path2str(path))

    @override
    def is_file(self, path: str) -> bool:
        return self.fs.isfile(self.path2str(path))

    @override
    @wrap_io_error
    def mkdir(self, path: str, parents: bool = False, exist_ok: bool = False):
        if parents:
            self.fs.mkdirs(self.path2str(path), exist_ok=exist_ok)
        elif self.fs.exists(self.path2str(path)):
            if not exist_ok:
                raise FileExistsError(path)
        else:
            self.fs.mkdir(self.path2str(path), create_parents=False)
        if not self.fs.isdir(self.path2str(path)):
            # Object-style stores only know directories that hold files
            raise UnsupportedFeatureError(f"{self.name} cannot create empty directory: {path}")

    @override
    @wrap_io_error
    def rename(self, src: str, dst: str):
        if self.fs.isdir(self.path2str(dst)):
            raise IsADirectoryError(dst)
        self.fs.mv(self.path2str(src), self.path2str(dst))

    @override
    @wrap_io_error
    def listdir(self, path: str) -> List[str]:
        return [posixpath.basename(p.rstrip("/")) for p in self.fs.ls(self.path2str(path), detail=False)]

    @override
    @wrap_io_error
    def remove(self, path: str):
        self.fs.rm(self.path2str(path))


class FsspecFileSystem(GenericFileSystem):
    """fsspec-based File System"""

    def __init__(self, protocol="file"):
        fs_instance = fsspec.filesystem(protocol)
        super().__init__(fs_instance, name=f"{protocol}FS")
        self.protocol = protocol


class MorefsFileSystem(GenericFileSystem):
    """morefs-based File System"""

    def __init__(self, fs_type="dict"):
        """
        Initialize morefs filesystem

        Args:
            fs_type: Type of morefs filesystem ("dict" or "mem")
        """
        if fs_type == "dict":
            fs_instance = DictFS(skip_instance_cache=True)
        elif fs_type == "mem":
            fs_instance = MemFS(skip_instance_cache=True)
        else:
            raise UnsupportedFeatureError(f"Unsupported morefs type: {fs_type}")
        super().__init__(fs_instance, name=f"Morefs{fs_type.title()}FS")
        self.fs_type = fs_type

    @override
    def path2str(self, path: str) -> str:
        """morefs trees are rooted at '/'"""
        path = str(path)
        if not path.startswith("/"):
            path = "/" + path
        return path


# --------------------
#
# Concrete FileSystems
#
# --------------------

class DiskFileSystem(FsspecFileSystem):
    """Local disk file system using fsspec"""

    def __init__(self):
        super().__init__(protocol="file")

    @override
    @wrap_io_error
    def read_bytes(self, path: str) -> bytes:
        logger.debug(f"[{self.name}] Reading bytes from: {path}")
        with open(str(path), "rb") as f:
            return f.read()

    @override
    @wrap_io_error
    def rename(self, src: str, dst: str):
        os.replace(str(src), str(dst))


class MemoryFileSystem(FsspecFileSystem):
    """
    in-memory filesystem using fsspec, shared by every instance in the process
    """
    def __init__(self):
        super().__init__(protocol="memory")


class HyperMemoryFileSystem(MorefsFileSystem):
    """
    In-memory filesystem with real directories, private to this instance
    """
    def __init__(self, fs_type="dict"):
        super().__init__(fs_type=fs_type)


def create_fs(kind: str = "disk") -> FileSystem:
    """
    Create the FileSystem backing the local manifest region.

    Args:
        kind: "disk", "memory" or "hyper"
    """
    if kind == "disk":
        return DiskFileSystem()
    if kind == "memory":
        return MemoryFileSystem()
    if kind == "hyper":
        return HyperMemoryFileSystem()
    raise UnsupportedFeatureError(f"Unsupported local filesystem kind: '{kind}'")
