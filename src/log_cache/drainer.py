"""
日志上报线程

周期性地从 LogBuffer 取出一批日志交给发送函数。
发送失败时把这批日志放回缓冲区尾部，下个周期重试。
"""

import threading
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from loguru import logger

from log_cache.buffer import LogBuffer
from log_cache.codec import find_invalid_elements

# 发送函数：接收已转换为字典的一批日志，返回 False 表示发送失败
SendFunc = Callable[[list[dict[str, Any]]], bool | None]


@dataclass
class DrainerStats:
    """上报统计"""

    total_sent: int = 0
    total_requeued: int = 0
    total_dropped: int = 0
    send_count: int = 0
    failed_send_count: int = 0
    last_send_time: float | None = None


class LogDrainer:
    """
    日志上报线程

    只有一个后台线程调用 pop，生产者线程互不干扰。
    """

    def __init__(
        self,
        buffer: LogBuffer,
        send_func: SendFunc,
        interval: float = 5.0,
    ):
        """
        初始化上报线程

        Args:
            buffer: 日志缓冲区
            send_func: 发送函数，抛出异常或返回 False 视为失败
            interval: 上报间隔（秒）
        """
        if interval <= 0:
            raise ValueError(f"interval 必须大于 0: {interval}")

        self._buffer = buffer
        self._send_func = send_func
        self._interval = interval

        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None
        self._stats = DrainerStats()

    @property
    def interval(self) -> float:
        return self._interval

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def drain_once(self) -> int:
        """
        上报一批日志

        类型不符、无法转换为字典或含非法 JSON 元素的记录会被丢弃并记录错误，
        否则它们会一直阻塞上报和备份。

        Returns:
            成功发送的条数
        """
        batch = self._buffer.pop()
        if not batch:
            return 0

        records, payload = self._convert_batch(batch)
        if not records:
            return 0

        try:
            ok = self._send_func(payload) is not False
        except Exception as e:
            logger.error(f"日志上报失败: {e}")
            ok = False

        if not ok:
            self._buffer.push_many(records)
            self._stats.failed_send_count += 1
            self._stats.total_requeued += len(records)
            logger.warning(f"日志上报失败，{len(records)} 条日志已放回缓冲区")
            return 0

        self._stats.send_count += 1
        self._stats.total_sent += len(records)
        self._stats.last_send_time = time.time()
        return len(records)

    def _convert_batch(self, batch: list[Any]) -> tuple[list[Any], list[dict[str, Any]]]:
        """逐条转换为字典，返回可发送的记录及其载荷"""
        record_type = self._buffer.record_type
        records: list[Any] = []
        payload: list[dict[str, Any]] = []

        for record in batch:
            if not isinstance(record, record_type):
                self._drop(record, f"类型不是 {record_type.__name__}")
                continue
            try:
                data = record.to_dict()
                invalid_paths = find_invalid_elements(data)
            except Exception as e:
                self._drop(record, f"to_dict 失败: {e}")
                continue
            if invalid_paths:
                self._drop(record, f"非法 JSON 元素 {', '.join(invalid_paths)}")
                continue
            records.append(record)
            payload.append(data)

        return records, payload

    def _drop(self, record: Any, reason: str) -> None:
        self._stats.total_dropped += 1
        logger.error(f"丢弃无法上报的日志 ({reason}): {type(record).__name__}")

    def start(self) -> None:
        """启动后台上报线程"""
        if self.running:
            return

        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self._drain_loop,
            name="log-cache-drainer",
            daemon=True,
        )
        self._thread.start()
        logger.info(f"日志上报线程已启动 (interval={self._interval}s)")

    def stop(self, backup: bool = True, timeout: float | None = None) -> None:
        """
        停止后台上报线程

        Args:
            backup: 是否把剩余日志备份到快照
            timeout: 等待线程退出的超时时间（秒）
        """
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout)
            if self._thread.is_alive():
                logger.warning("日志上报线程未能在超时时间内退出")
            self._thread = None

        if backup:
            self._buffer.backup_cache()
        logger.info("日志上报线程已停止")

    def _drain_loop(self) -> None:
        """后台定时上报循环"""
        while not self._stop_event.wait(self._interval):
            try:
                self.drain_once()
            except Exception as e:
                logger.error(f"日志上报循环异常: {e}")

    def get_stats(self) -> dict[str, Any]:
        """获取上报统计信息"""
        return {
            "running": self.running,
            "interval": self._interval,
            "total_sent": self._stats.total_sent,
            "total_requeued": self._stats.total_requeued,
            "total_dropped": self._stats.total_dropped,
            "send_count": self._stats.send_count,
            "failed_send_count": self._stats.failed_send_count,
            "last_send_time": self._stats.last_send_time,
            "buffer_size": self._buffer.size,
        }
