"""
日志缓存域模型

LogBuffer 对记录类型是泛型的，只要求记录满足 SerializableRecord 协议；
LogEntry 是上层日志前端实际使用的记录类型。
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Protocol, TypeVar, Union, runtime_checkable

from log_cache.codec import normalize_metadata
from log_cache.domain.errors import DecodingError
from log_cache.utils.time import format_iso, now_utc, parse_iso

# 元数据树：字符串 / 嵌套列表 / 嵌套字典，叶子也可以是任何“有文本描述”的值
MetadataValue = Union[str, list["MetadataValue"], dict[str, "MetadataValue"], Any]
Metadata = dict[str, MetadataValue]

R = TypeVar("R", bound="SerializableRecord")


@runtime_checkable
class SerializableRecord(Protocol):
    """可写入快照的记录"""

    def to_dict(self) -> dict[str, Any]:
        ...

    @classmethod
    def from_dict(cls: type[R], data: dict[str, Any]) -> R:
        ...


_REQUIRED_STR_FIELDS = ("label", "file", "source", "function", "level", "message")


@dataclass
class LogEntry:
    """
    日志记录

    快照中的字段名沿用远端接收方的格式（loggedAt 为驼峰）。
    """

    label: str
    file: str
    line: int
    source: str
    function: str
    level: str
    message: str
    logged_at: datetime = field(default_factory=now_utc)
    metadata: Metadata | None = None

    def to_dict(self) -> dict[str, Any]:
        """转换为快照格式，元数据先规范化"""
        return {
            "label": self.label,
            "file": self.file,
            "line": self.line,
            "source": self.source,
            "function": self.function,
            "level": self.level,
            "message": self.message,
            "loggedAt": format_iso(self.logged_at),
            "metadata": normalize_metadata(self.metadata or {}),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "LogEntry":
        """从快照格式创建，字段缺失或类型不符时抛出 DecodingError"""
        if not isinstance(data, dict):
            raise DecodingError(f"日志记录必须是对象，实际为 {type(data).__name__}")

        for key in _REQUIRED_STR_FIELDS:
            if not isinstance(data.get(key), str):
                raise DecodingError(f"字段 {key} 缺失或不是字符串", details={"field": key})

        line = data.get("line")
        if not isinstance(line, int) or isinstance(line, bool):
            raise DecodingError("字段 line 缺失或不是整数", details={"field": "line"})

        raw_logged_at = data.get("loggedAt")
        logged_at = parse_iso(raw_logged_at) if isinstance(raw_logged_at, str) else None
        if logged_at is None:
            raise DecodingError(
                f"字段 loggedAt 不是合法的 ISO-8601 时间: {raw_logged_at!r}",
                details={"field": "loggedAt"},
            )

        metadata = data.get("metadata")
        if metadata is not None and not isinstance(metadata, dict):
            raise DecodingError("字段 metadata 不是对象", details={"field": "metadata"})

        return cls(
            label=data["label"],
            file=data["file"],
            line=line,
            source=data["source"],
            function=data["function"],
            level=data["level"],
            message=data["message"],
            logged_at=logged_at,
            metadata=metadata or None,
        )
