"""
工具模块
"""

from log_cache.utils.time import format_iso, now_utc, parse_iso

__all__ = [
    "now_utc",
    "format_iso",
    "parse_iso",
]
