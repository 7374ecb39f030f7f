"""
layercache IO Module

- FileSystem: Abstract file system interface
- DiskFileSystem: Local disk file system
- MemoryFileSystem: fsspec in-memory file system, shared process-wide
- HyperMemoryFileSystem: morefs dict-backed file system, private per instance

Usage:
    from layercache.io import create_fs

    fs = create_fs("disk")
    fs.write_bytes("/tmp/layercache/abc", b"{}")
"""

from .fs import (
    FileSystem,
    GenericFileSystem,
    FsspecFileSystem,
    MorefsFileSystem,
    DiskFileSystem,
    MemoryFileSystem,
    HyperMemoryFileSystem,
    create_fs,
    wrap_io_error,
)

__all__ = [
    'FileSystem',
    'GenericFileSystem',
    'FsspecFileSystem',
    'MorefsFileSystem',
    'DiskFileSystem',
    'MemoryFileSystem',
    'HyperMemoryFileSystem',
    'create_fs',
    'wrap_io_error',
]
