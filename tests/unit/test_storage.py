"""
快照存储单元测试
"""

import os

import pytest

from log_cache.config import get_settings
from log_cache.domain.errors import PersistenceError, SnapshotNotFoundError
from log_cache.storage import FileSnapshotStore, SnapshotStore, default_cache_path


class TestFileSnapshotStore:
    """文件快照存储测试"""

    def test_write_creates_parent_and_file(self, store, snapshot_path):
        """测试写入时自动创建目录"""
        assert not snapshot_path.parent.exists()

        store.write(b"[]")

        assert snapshot_path.read_bytes() == b"[]"

    def test_write_overwrites(self, store, snapshot_path):
        store.write(b"[1]")
        store.write(b"[2]")

        assert snapshot_path.read_bytes() == b"[2]"

    def test_write_leaves_no_temp_files(self, store, snapshot_path):
        store.write(b"[]")

        assert os.listdir(snapshot_path.parent) == [snapshot_path.name]

    def test_read_missing_raises_not_found(self, store):
        with pytest.raises(SnapshotNotFoundError) as exc_info:
            store.read()

        assert exc_info.value.operation == "read"
        assert exc_info.value.code == "SNAPSHOT_NOT_FOUND"

    def test_read_directory_raises_persistence_error(self, tmp_path):
        """测试路径是目录时读取失败"""
        store = FileSnapshotStore(tmp_path)

        with pytest.raises(PersistenceError) as exc_info:
            store.read()

        assert not isinstance(exc_info.value, SnapshotNotFoundError)

    def test_write_into_file_parent_raises_persistence_error(self, tmp_path):
        """测试父路径是文件时写入失败"""
        blocker = tmp_path / "blocker"
        blocker.write_text("x")
        store = FileSnapshotStore(blocker / "log-cache.json")

        with pytest.raises(PersistenceError) as exc_info:
            store.write(b"[]")

        assert exc_info.value.operation == "write"

    def test_delete_is_idempotent(self, store, snapshot_path):
        store.write(b"[]")

        store.delete()
        store.delete()

        assert not snapshot_path.exists()
        assert not store.exists()

    def test_satisfies_protocol(self, store):
        assert isinstance(store, SnapshotStore)


class TestDefaultCachePath:
    """默认路径测试"""

    def test_default_path_uses_settings(self, tmp_path):
        assert default_cache_path() == tmp_path / "cache" / "log-cache.json"

    def test_store_defaults_to_settings_path(self, tmp_path):
        assert FileSnapshotStore().path == get_settings().cache_file
