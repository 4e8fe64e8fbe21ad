"""
读写锁

push 只追加，可以共享持有；pop / backup_cache 会移除元素，必须独占。
"""

import contextlib
import threading
from collections.abc import Iterator
from dataclasses import dataclass


@dataclass
class LockStats:
    """锁统计信息"""

    shared_acquired: int = 0
    exclusive_acquired: int = 0
    exclusive_contention: int = 0


class ReadWriteLock:
    """
    写优先的读写锁

    一旦有独占等待者，新的共享请求会排队，
    持续不断的 push 不会把 pop 饿死。不可重入。
    """

    def __init__(self):
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writer_active = False
        self._writers_waiting = 0
        self._stats = LockStats()

    @property
    def stats(self) -> LockStats:
        return self._stats

    def acquire_shared(self) -> None:
        with self._cond:
            while self._writer_active or self._writers_waiting:
                self._cond.wait()
            self._readers += 1
            self._stats.shared_acquired += 1

    def release_shared(self) -> None:
        with self._cond:
            if self._readers <= 0:
                raise RuntimeError("release_shared 调用次数多于 acquire_shared")
            self._readers -= 1
            if self._readers == 0:
                self._cond.notify_all()

    def acquire_exclusive(self) -> None:
        with self._cond:
            if self._writer_active or self._readers:
                self._stats.exclusive_contention += 1
            self._writers_waiting += 1
            try:
                while self._writer_active or self._readers:
                    self._cond.wait()
            finally:
                self._writers_waiting -= 1
            self._writer_active = True
            self._stats.exclusive_acquired += 1

    def release_exclusive(self) -> None:
        with self._cond:
            if not self._writer_active:
                raise RuntimeError("release_exclusive 调用时未持有独占锁")
            self._writer_active = False
            self._cond.notify_all()

    @contextlib.contextmanager
    def shared(self) -> Iterator[None]:
        """共享持有"""
        self.acquire_shared()
        try:
            yield
        finally:
            self.release_shared()

    @contextlib.contextmanager
    def exclusive(self) -> Iterator[None]:
        """独占持有"""
        self.acquire_exclusive()
        try:
            yield
        finally:
            self.release_exclusive()
