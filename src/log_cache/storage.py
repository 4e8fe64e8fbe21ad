"""
快照存储

快照文件的路径是固定的（用户缓存目录下的单个文件），调用方不按次传路径。
"""

import contextlib
import os
import tempfile
from pathlib import Path
from typing import Protocol, runtime_checkable

from loguru import logger

from log_cache.config import get_settings
from log_cache.domain.errors import PersistenceError, SnapshotNotFoundError


def default_cache_path() -> Path:
    """默认快照文件路径"""
    return get_settings().cache_file


@runtime_checkable
class SnapshotStore(Protocol):
    """快照存储接口"""

    @property
    def path(self) -> Path:
        ...

    def write(self, data: bytes) -> None:
        """覆盖写入快照"""
        ...

    def read(self) -> bytes:
        """读取快照，不存在时抛出 SnapshotNotFoundError"""
        ...

    def delete(self) -> None:
        """删除快照，不存在不算错误"""
        ...


class FileSnapshotStore:
    """
    基于本地文件的快照存储

    写入先落到同目录临时文件，再用 os.replace 原子替换，
    单进程内不会读到写了一半的快照。
    """

    def __init__(self, path: str | Path | None = None):
        self._path = Path(path) if path is not None else default_cache_path()

    @property
    def path(self) -> Path:
        return self._path

    def exists(self) -> bool:
        return self._path.exists()

    def write(self, data: bytes) -> None:
        tmp_path: str | None = None
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(
                prefix=f".{self._path.name}.",
                suffix=".tmp",
                dir=self._path.parent,
            )
            with os.fdopen(fd, "wb") as f:
                f.write(data)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_path, self._path)
            tmp_path = None
        except OSError as e:
            raise PersistenceError(
                f"写入快照失败: {e}",
                path=str(self._path),
                operation="write",
            ) from e
        finally:
            if tmp_path is not None:
                with contextlib.suppress(OSError):
                    os.unlink(tmp_path)

        logger.debug(f"快照已写入: {self._path} ({len(data)} bytes)")

    def read(self) -> bytes:
        try:
            return self._path.read_bytes()
        except FileNotFoundError as e:
            raise SnapshotNotFoundError(
                f"快照不存在: {self._path}",
                path=str(self._path),
            ) from e
        except OSError as e:
            raise PersistenceError(
                f"读取快照失败: {e}",
                path=str(self._path),
                operation="read",
            ) from e

    def delete(self) -> None:
        try:
            self._path.unlink(missing_ok=True)
        except OSError as e:
            raise PersistenceError(
                f"删除快照失败: {e}",
                path=str(self._path),
                operation="delete",
            ) from e
