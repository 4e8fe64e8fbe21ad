"""
日志缓存测试配置和 fixtures
"""

from collections.abc import Callable, Generator
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

import pytest
from loguru import logger

from log_cache.config import get_settings
from log_cache.domain.models import LogEntry
from log_cache.storage import FileSnapshotStore


@pytest.fixture(autouse=True)
def _isolated_settings(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Generator[None, None, None]:
    """每个测试使用独立的缓存目录和配置"""
    for key in ("DEBUG", "LOG_LEVEL", "CACHE_DIR", "CACHE_FILE_NAME", "MAX_POP_SIZE", "DRAIN_INTERVAL"):
        monkeypatch.delenv(f"LOG_CACHE_{key}", raising=False)
    monkeypatch.setenv("LOG_CACHE_CACHE_DIR", str(tmp_path / "cache"))
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def snapshot_path(tmp_path: Path) -> Path:
    return tmp_path / "cache" / "log-cache.json"


@pytest.fixture
def store(snapshot_path: Path) -> FileSnapshotStore:
    return FileSnapshotStore(snapshot_path)


@pytest.fixture
def log_messages() -> Generator[list[str], None, None]:
    """捕获 loguru 输出"""
    messages: list[str] = []
    sink_id = logger.add(lambda m: messages.append(m.record["message"]), level="DEBUG")
    yield messages
    logger.remove(sink_id)


@pytest.fixture
def make_entry() -> Callable[..., LogEntry]:
    """日志记录工厂"""

    def _make(index: int = 0, metadata: dict[str, Any] | None = None, **kwargs: Any) -> LogEntry:
        fields: dict[str, Any] = {
            "label": "app",
            "file": "main.py",
            "line": 10 + index,
            "source": "app.main",
            "function": "run()",
            "level": "info",
            "message": f"message {index}",
            "logged_at": datetime(2025, 1, 15, 10, 30, index % 60, tzinfo=UTC),
            "metadata": metadata,
        }
        fields.update(kwargs)
        return LogEntry(**fields)

    return _make
