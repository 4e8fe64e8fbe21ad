"""
日志缓存

面向远端日志接收方的本地缓冲：
- 生产者 push 不阻塞在网络 I/O 上
- 上传方按批 pop（默认每批最多 100 条）
- 未发送的日志可备份到用户缓存目录下的快照文件，下次启动时恢复
"""

from log_cache.buffer import BufferState, LogBuffer, LogBufferStats
from log_cache.codec import (
    decode_snapshot,
    encode_snapshot,
    find_invalid_elements,
    normalize_metadata,
)
from log_cache.config import LogCacheSettings, get_settings
from log_cache.domain.errors import (
    DecodingError,
    EncodingError,
    LogCacheError,
    PersistenceError,
    SnapshotNotFoundError,
)
from log_cache.domain.models import LogEntry, SerializableRecord
from log_cache.drainer import LogDrainer
from log_cache.storage import FileSnapshotStore, SnapshotStore, default_cache_path

__version__ = "0.1.0"

__all__ = [
    # Buffer
    "LogBuffer",
    "LogBufferStats",
    "BufferState",
    # Drainer
    "LogDrainer",
    # Codec
    "normalize_metadata",
    "find_invalid_elements",
    "encode_snapshot",
    "decode_snapshot",
    # Storage
    "SnapshotStore",
    "FileSnapshotStore",
    "default_cache_path",
    # Models
    "LogEntry",
    "SerializableRecord",
    # Errors
    "LogCacheError",
    "EncodingError",
    "DecodingError",
    "PersistenceError",
    "SnapshotNotFoundError",
    # Config
    "LogCacheSettings",
    "get_settings",
]
