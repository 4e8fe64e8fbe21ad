"""
日志缓冲区

特性:
- 生产者 push 永不阻塞在网络 I/O 上，也没有容量上限
- 上传方周期性 pop，每次最多取出 max_pop_size 条（FIFO）
- backup_cache 把未发送的日志写入快照文件并清空内存
- 构造时从快照文件恢复上次未发送的日志，读取成功后立即删除快照
"""

import threading
import time
from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum
from typing import Any, Generic, TypeVar

from loguru import logger

from log_cache.codec import decode_snapshot, encode_snapshot
from log_cache.config import DEFAULT_MAX_POP_SIZE, get_settings
from log_cache.domain.errors import (
    DecodingError,
    EncodingError,
    PersistenceError,
    SnapshotNotFoundError,
)
from log_cache.domain.models import LogEntry
from log_cache.locks import ReadWriteLock
from log_cache.storage import FileSnapshotStore, SnapshotStore

T = TypeVar("T")


class BufferState(str, Enum):
    """缓冲区状态"""

    RECOVERING = "recovering"    # 构造中，正在从快照恢复
    ACTIVE = "active"            # 正常工作


@dataclass
class LogBufferStats:
    """日志缓冲统计"""

    total_pushed: int = 0
    total_popped: int = 0
    total_backed_up: int = 0
    total_recovered: int = 0
    backup_count: int = 0
    failed_backup_count: int = 0
    last_backup_time: float | None = None


class LogBuffer(Generic[T]):
    """
    线程安全的日志缓冲区

    锁策略:
    1. push 只追加，持有共享锁，多个生产者可以并发追加
    2. pop / backup_cache 会移除元素，持有独占锁
    3. backup_cache 的文件写入也在独占锁内完成，
       备份期间的 push 会短暂等待，但不会在“已写快照”和“已清空”之间丢失
    """

    def __init__(
        self,
        debug: bool = False,
        store: SnapshotStore | None = None,
        record_type: type[T] = LogEntry,
        max_pop_size: int = DEFAULT_MAX_POP_SIZE,
    ):
        """
        初始化日志缓冲区并从快照恢复

        Args:
            debug: 是否输出恢复失败的诊断信息
            store: 快照存储，默认使用用户缓存目录下的固定文件
            record_type: 记录类型，需实现 to_dict / from_dict
            max_pop_size: 单次 pop 最多取出的条数
        """
        if max_pop_size < 1:
            raise ValueError(f"max_pop_size 必须大于 0: {max_pop_size}")

        self._debug = debug
        self._store = store if store is not None else FileSnapshotStore()
        self._record_type = record_type
        self._max_pop_size = max_pop_size

        self._lock = ReadWriteLock()
        self._stats_lock = threading.Lock()
        self._stats = LogBufferStats()

        self._state = BufferState.RECOVERING
        self._records: list[T] = self._recover()
        self._stats.total_recovered = len(self._records)
        self._state = BufferState.ACTIVE

    @classmethod
    def initialize(
        cls,
        debug: bool | None = None,
        store: SnapshotStore | None = None,
        record_type: type[T] = LogEntry,
        max_pop_size: int | None = None,
    ) -> "LogBuffer[T]":
        """按全局配置创建缓冲区，显式参数优先"""
        settings = get_settings()
        return cls(
            debug=settings.DEBUG if debug is None else debug,
            store=store,
            record_type=record_type,
            max_pop_size=max_pop_size or settings.MAX_POP_SIZE,
        )

    @property
    def state(self) -> BufferState:
        return self._state

    @property
    def store(self) -> SnapshotStore:
        return self._store

    @property
    def record_type(self) -> type[T]:
        return self._record_type

    @property
    def max_pop_size(self) -> int:
        return self._max_pop_size

    def __len__(self) -> int:
        return len(self._records)

    @property
    def size(self) -> int:
        """当前缓冲条数"""
        return len(self._records)

    def is_empty(self) -> bool:
        return not self._records

    def push(self, record: T) -> None:
        """追加一条日志"""
        with self._lock.shared():
            self._records.append(record)
        with self._stats_lock:
            self._stats.total_pushed += 1

    def push_many(self, records: Iterable[T]) -> None:
        """原子地追加一组日志，组内顺序保持不变"""
        batch = list(records)
        if not batch:
            return
        with self._lock.shared():
            self._records.extend(batch)
        with self._stats_lock:
            self._stats.total_pushed += len(batch)

    def pop(self) -> list[T]:
        """
        取出最旧的一批日志

        Returns:
            最多 max_pop_size 条日志，缓冲区为空时返回空列表
        """
        with self._lock.exclusive():
            size = min(self._max_pop_size, len(self._records))
            batch = self._records[:size]
            del self._records[:size]

        if batch:
            with self._stats_lock:
                self._stats.total_popped += len(batch)
        return batch

    def backup_cache(self) -> bool:
        """
        把内存中的全部日志写入快照并清空

        编码或写入失败时保留内存中的日志，等待下一次备份。

        Returns:
            是否成功写入快照
        """
        with self._lock.exclusive():
            count = len(self._records)
            try:
                data = encode_snapshot(self._records, self._record_type)
            except EncodingError as e:
                self._record_backup_failure()
                logger.error(
                    f"备份日志缓存失败: {count} 条日志无法编码为 JSON，已保留在内存中 ({e.message})"
                )
                if e.invalid_paths:
                    logger.error("非法 JSON 元素路径:")
                    for path in e.invalid_paths:
                        logger.error(f"  {path}")
                return False

            try:
                self._store.write(data)
            except (PersistenceError, OSError) as e:
                self._record_backup_failure()
                logger.error(f"备份日志缓存失败: 写入快照出错，{count} 条日志已保留在内存中: {e}")
                return False

            self._records.clear()

        with self._stats_lock:
            self._stats.total_backed_up += count
            self._stats.backup_count += 1
            self._stats.last_backup_time = time.time()

        logger.debug(f"日志缓存已备份: {count} 条 -> {self._store.path}")
        return True

    def _record_backup_failure(self) -> None:
        with self._stats_lock:
            self._stats.failed_backup_count += 1

    def _recover(self) -> list[T]:
        """从快照恢复，任何失败都只会得到一个空缓冲区"""
        try:
            data = self._store.read()
        except SnapshotNotFoundError:
            return []
        except (PersistenceError, OSError) as e:
            if self._debug:
                logger.warning(f"从快照恢复日志失败: {e}")
            return []

        # 读取成功后立即删除，损坏的快照不会在每次启动时被反复处理
        try:
            self._store.delete()
        except (PersistenceError, OSError) as e:
            if self._debug:
                logger.warning(f"删除快照失败: {e}")

        try:
            records = decode_snapshot(data, self._record_type)
        except DecodingError as e:
            if self._debug:
                logger.warning(f"快照解码失败，已丢弃: {e.message}")
                logger.debug(f"错误详情: {e.to_dict()}")
            return []

        if records:
            logger.debug(f"从快照恢复 {len(records)} 条日志")
        return records

    def get_stats(self) -> dict[str, Any]:
        """获取缓冲区统计信息"""
        with self._stats_lock:
            return {
                "state": self._state.value,
                "total_pushed": self._stats.total_pushed,
                "total_popped": self._stats.total_popped,
                "total_backed_up": self._stats.total_backed_up,
                "total_recovered": self._stats.total_recovered,
                "backup_count": self._stats.backup_count,
                "failed_backup_count": self._stats.failed_backup_count,
                "last_backup_time": self._stats.last_backup_time,
                "current_buffer_size": len(self._records),
                "max_pop_size": self._max_pop_size,
                "snapshot_path": str(self._store.path),
            }
