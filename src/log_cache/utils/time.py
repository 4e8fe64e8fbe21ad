"""
时间工具
"""

from datetime import UTC, datetime


def now_utc() -> datetime:
    """当前 UTC 时间"""
    return datetime.now(UTC)


def format_iso(dt: datetime) -> str:
    """格式化为 ISO-8601，无时区时按 UTC 处理"""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    return dt.isoformat()


def parse_iso(s: str) -> datetime | None:
    """解析 ISO 格式时间"""
    if not s:
        return None
    try:
        return datetime.fromisoformat(s.replace("Z", "+00:00"))
    except ValueError:
        return None
