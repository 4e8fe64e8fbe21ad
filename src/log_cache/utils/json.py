"""
JSON 工具

快照文件的读写统一走这里，底层使用 ujson。
"""

from typing import Any

import ujson


def dumps(obj: Any, pretty: bool = False) -> str:
    """严格的 JSON 序列化（不做任何类型兜底）"""
    if pretty:
        return ujson.dumps(obj, ensure_ascii=False, indent=2, escape_forward_slashes=False)
    return ujson.dumps(obj, ensure_ascii=False, escape_forward_slashes=False)


def loads(s: str | bytes) -> Any:
    """JSON 反序列化"""
    return ujson.loads(s)
