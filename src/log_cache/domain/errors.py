"""
日志缓存错误定义

这些错误只在组件内部流转：push / pop / backup_cache / 恢复流程
都会就地消化它们，写入诊断日志，从不抛给调用方。
"""

from typing import Any


class LogCacheError(Exception):
    """日志缓存基础错误"""

    def __init__(
        self,
        message: str,
        code: str = "LOG_CACHE_ERROR",
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        return {
            "code": self.code,
            "message": self.message,
            "details": self.details,
        }


class EncodingError(LogCacheError):
    """编码错误：记录无法表示为 JSON"""

    def __init__(
        self,
        message: str,
        invalid_paths: list[str] | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, code="ENCODING_ERROR", details=details)
        self.invalid_paths = list(invalid_paths or [])
        self.details.setdefault("invalid_paths", self.invalid_paths)


class DecodingError(LogCacheError):
    """解码错误：快照损坏或结构不匹配"""

    def __init__(
        self,
        message: str,
        index: int | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, code="DECODING_ERROR", details=details)
        self.index = index


class PersistenceError(LogCacheError):
    """持久化错误：快照文件读写删除失败"""

    def __init__(
        self,
        message: str,
        path: str | None = None,
        operation: str | None = None,  # read, write, delete
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, code="PERSISTENCE_ERROR", details=details)
        self.path = path
        self.operation = operation


class SnapshotNotFoundError(PersistenceError):
    """快照文件不存在（正常状态，不是故障）"""

    def __init__(
        self,
        message: str,
        path: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, path=path, operation="read", details=details)
        self.code = "SNAPSHOT_NOT_FOUND"
