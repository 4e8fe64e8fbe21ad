"""
日志记录模型单元测试
"""

from datetime import UTC, datetime

import pytest

from log_cache.domain.errors import DecodingError
from log_cache.domain.models import LogEntry, SerializableRecord


class TestLogEntry:
    """LogEntry 测试"""

    def test_entry_to_dict(self, make_entry):
        """测试转换为快照格式"""
        entry = make_entry(2, metadata={"user": {"id": 7}})

        d = entry.to_dict()

        assert d == {
            "label": "app",
            "file": "main.py",
            "line": 12,
            "source": "app.main",
            "function": "run()",
            "level": "info",
            "message": "message 2",
            "loggedAt": "2025-01-15T10:30:02+00:00",
            "metadata": {"user": {"id": "7"}},
        }

    def test_naive_timestamp_treated_as_utc(self, make_entry):
        entry = make_entry(0, logged_at=datetime(2025, 1, 15, 8, 0, 0))

        assert entry.to_dict()["loggedAt"] == "2025-01-15T08:00:00+00:00"

    def test_entry_from_dict(self):
        """测试从快照格式创建"""
        entry = LogEntry.from_dict(
            {
                "label": "app",
                "file": "main.py",
                "line": 1,
                "source": "app",
                "function": "f()",
                "level": "error",
                "message": "boom",
                "loggedAt": "2025-01-15T10:30:00Z",
                "metadata": {},
            }
        )

        assert entry.level == "error"
        assert entry.logged_at == datetime(2025, 1, 15, 10, 30, tzinfo=UTC)
        assert entry.metadata is None

    @pytest.mark.parametrize(
        "field, value",
        [
            ("label", None),
            ("line", "1"),
            ("line", True),
            ("loggedAt", "yesterday"),
            ("metadata", ["a"]),
        ],
    )
    def test_entry_from_dict_rejects_bad_fields(self, make_entry, field, value):
        data = make_entry(0).to_dict()
        data[field] = value

        with pytest.raises(DecodingError):
            LogEntry.from_dict(data)

    def test_entry_from_dict_rejects_non_object(self):
        with pytest.raises(DecodingError):
            LogEntry.from_dict(["not", "an", "object"])

    def test_entry_satisfies_protocol(self, make_entry):
        assert isinstance(make_entry(0), SerializableRecord)
