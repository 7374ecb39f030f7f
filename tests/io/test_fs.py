import pytest

from layercache.io import (
    DiskFileSystem,
    HyperMemoryFileSystem,
    MorefsFileSystem,
    create_fs,
)
from layercache.exceptions import (
    CachePathExistsError,
    CachePathNotFoundError,
    CacheNotAFileError,
    UnsupportedFeatureError,
)


@pytest.fixture(params=["disk", "hyper", "dict"])
def fs_and_root(request, tmp_path):
    """Each concrete file system with a writable root."""
    if request.param == "disk":
        return DiskFileSystem(), str(tmp_path)
    if request.param == "hyper":
        return HyperMemoryFileSystem(), "/root"
    return MorefsFileSystem("dict"), "/root"


class TestFileSystems:
    """Behavior shared by every FileSystem implementation."""

    def test_write_then_read(self, fs_and_root):
        fs, root = fs_and_root
        fs.write_bytes(f"{root}/nested/dir/file", b"content")
        assert fs.read_bytes(f"{root}/nested/dir/file") == b"content"
        assert fs.exists(f"{root}/nested/dir/file")
        assert fs.is_file(f"{root}/nested/dir/file")

    def test_missing_file(self, fs_and_root):
        fs, root = fs_and_root
        with pytest.raises(CachePathNotFoundError):
            fs.read_bytes(f"{root}/missing")

    def test_mkdir_exist_ok(self, fs_and_root):
        fs, root = fs_and_root
        fs.mkdir(f"{root}/d", parents=True, exist_ok=True)
        fs.mkdir(f"{root}/d", parents=True, exist_ok=True)
        assert fs.exists(f"{root}/d")
        assert not fs.is_file(f"{root}/d")

    def test_listdir_and_remove(self, fs_and_root):
        fs, root = fs_and_root
        fs.write_bytes(f"{root}/ls/a", b"1")
        fs.write_bytes(f"{root}/ls/b", b"2")
        assert sorted(fs.listdir(f"{root}/ls")) == ["a", "b"]
        fs.remove(f"{root}/ls/a")
        assert not fs.exists(f"{root}/ls/a")


    def test_rename_replaces_destination(self, fs_and_root):
        fs, root = fs_and_root
        fs.write_bytes(f"{root}/mv/new", b"new")
        fs.write_bytes(f"{root}/mv/old", b"old")
        fs.rename(f"{root}/mv/new", f"{root}/mv/old")
        assert fs.read_bytes(f"{root}/mv/old") == b"new"
        assert not fs.exists(f"{root}/mv/new")

    def test_rename_onto_directory(self, fs_and_root):
        fs, root = fs_and_root
        fs.write_bytes(f"{root}/mvd/src", b"x")
        fs.write_bytes(f"{root}/mvd/dst/inner", b"y")
        with pytest.raises(CacheNotAFileError):
            fs.rename(f"{root}/mvd/src", f"{root}/mvd/dst")


class TestMorefsDirectories:
    """Directory support differs between the morefs backends."""

    def test_hyper_creates_empty_directory(self):
        fs = HyperMemoryFileSystem()
        fs.mkdir("/cache", parents=True, exist_ok=True)
        assert fs.exists("/cache")
        assert fs.listdir("/cache") == []

    def test_trie_backend_cannot_hold_empty_directory(self):
        with pytest.raises(UnsupportedFeatureError):
            MorefsFileSystem("mem").mkdir("/cache", parents=True, exist_ok=True)


class TestDiskFileSystem:
    """Error mapping specific to the local disk."""

    def test_mkdir_without_exist_ok(self, tmp_path):
        fs = DiskFileSystem()
        fs.mkdir(str(tmp_path / "once"))
        with pytest.raises(CachePathExistsError):
            fs.mkdir(str(tmp_path / "once"))

    def test_reading_a_directory(self, tmp_path):
        with pytest.raises(CacheNotAFileError):
            DiskFileSystem().read_bytes(str(tmp_path))


class TestCreateFs:

    @pytest.mark.parametrize("kind, cls", [("disk", DiskFileSystem), ("hyper", HyperMemoryFileSystem)])
    def test_known_kinds(self, kind, cls):
        assert isinstance(create_fs(kind), cls)

    def test_unknown_kind(self):
        with pytest.raises(UnsupportedFeatureError):
            create_fs("tape")

    def test_unknown_morefs_type(self):
        with pytest.raises(UnsupportedFeatureError):
            MorefsFileSystem("zip")
