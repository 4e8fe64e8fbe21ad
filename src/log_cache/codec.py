"""
快照编解码

负责三件事：
- 元数据树规范化：把任意元数据收敛为 str / list / dict / None
- 非法值定位：深度优先找出无法写入 JSON 的值，给出结构路径（如 [3].metadata.user.id）
- 快照编解码：记录列表 <-> 格式化的 JSON 数组
"""

import math
from collections.abc import Mapping, Sequence
from datetime import date, datetime, time
from enum import Enum
from typing import Any, TypeVar

from log_cache.domain.errors import DecodingError, EncodingError
from log_cache.utils import json

T = TypeVar("T")

# 这些类型虽然有 repr，但没有可用的文本描述，保留原值让它们暴露为非法值
_OPAQUE_TYPES = (bytes, bytearray, memoryview, set, frozenset)

# ujson 能写出的整数范围
_JSON_INT_MIN = -(2**63)
_JSON_INT_MAX = 2**64 - 1


class CircularReference:
    """元数据中的循环引用占位，编码前会被标记为非法值"""

    __slots__ = ()

    def __repr__(self) -> str:
        return "<circular reference>"


def normalize_metadata(
    metadata: Mapping[Any, Any],
    _seen: frozenset[int] = frozenset(),
) -> dict[Any, Any]:
    """规范化元数据字典，非字符串键原样保留（编码前会被标记为非法）"""
    seen = _seen | {id(metadata)}
    return {key: _unpack_value(value, seen) for key, value in metadata.items()}


def _unpack_value(value: Any, seen: frozenset[int]) -> Any:
    """递归规范化单个元数据值"""
    if value is None or isinstance(value, str):
        return value
    if isinstance(value, (Mapping, list, tuple)) and id(value) in seen:
        return CircularReference()
    if isinstance(value, Mapping):
        return normalize_metadata(value, seen)
    if isinstance(value, (list, tuple)):
        inner = seen | {id(value)}
        return [_unpack_value(item, inner) for item in value]
    if isinstance(value, _OPAQUE_TYPES):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, Enum):
        return _unpack_value(value.value, seen)
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()
    if _has_description(value):
        try:
            return str(value)
        except Exception:
            # 描述本身失败，保留原值，由路径检查报告
            return value
    return value


def _has_description(value: Any) -> bool:
    """对象是否自定义了 __str__ 或 __repr__"""
    cls = type(value)
    return cls.__str__ is not object.__str__ or cls.__repr__ is not object.__repr__


def _is_json_leaf(value: Any) -> bool:
    if value is None or isinstance(value, (str, bool)):
        return True
    if isinstance(value, int):
        return _JSON_INT_MIN <= value <= _JSON_INT_MAX
    if isinstance(value, float):
        return math.isfinite(value)
    return False


def _join_path(path: str, key: str) -> str:
    return f"{path}.{key}" if path else key


def find_invalid_elements(obj: Any, path: str = "") -> list[str]:
    """
    查找无法写入 JSON 的元素

    Args:
        obj: 待检查的对象
        path: 当前结构路径

    Returns:
        非法元素的路径列表（深度优先，数组下标为 [i]，字典键为 .key）
    """
    invalid_paths: list[str] = []

    if isinstance(obj, (list, tuple)):
        for index, element in enumerate(obj):
            invalid_paths.extend(find_invalid_elements(element, f"{path}[{index}]"))
    elif isinstance(obj, dict):
        for key, value in obj.items():
            if not isinstance(key, str):
                invalid_paths.append(_join_path(path, repr(key)))
                continue
            invalid_paths.extend(find_invalid_elements(value, _join_path(path, key)))
    elif not _is_json_leaf(obj):
        invalid_paths.append(path)

    return invalid_paths


def encode_snapshot(records: Sequence[T], record_type: type[T]) -> bytes:
    """
    编码快照

    类型不是 record_type 的记录直接判为非法（路径为 [i]），
    不会被编码成空对象混进快照。

    Args:
        records: 记录列表
        record_type: 缓冲区声明的记录类型

    Returns:
        格式化后的 UTF-8 JSON 数组

    Raises:
        EncodingError: 存在无法表示为 JSON 的记录或元数据
    """
    payload: list[Any] = []
    invalid_paths: list[str] = []

    for index, record in enumerate(records):
        record_path = f"[{index}]"
        if not isinstance(record, record_type):
            invalid_paths.append(record_path)
            continue
        try:
            data = record.to_dict()
        except Exception:
            invalid_paths.append(record_path)
            continue
        if not isinstance(data, dict):
            invalid_paths.append(record_path)
            continue
        try:
            record_invalid = find_invalid_elements(data, record_path)
        except RecursionError:
            # to_dict 返回了自引用的结构
            record_invalid = [record_path]
        invalid_paths.extend(record_invalid)
        payload.append(data)

    if invalid_paths:
        raise EncodingError(
            f"{len(invalid_paths)} 个值无法表示为 JSON",
            invalid_paths=invalid_paths,
        )

    try:
        text = json.dumps(payload, pretty=True)
    except (OverflowError, TypeError, ValueError) as e:
        raise EncodingError(f"JSON 序列化失败: {e}") from e

    return text.encode("utf-8")


def decode_snapshot(data: bytes, record_type: type[T]) -> list[T]:
    """
    解码快照

    Raises:
        DecodingError: 快照不是合法 JSON 数组，或某条记录结构不匹配
    """
    try:
        raw = json.loads(data)
    except ValueError as e:
        raise DecodingError(f"快照不是合法的 JSON: {e}") from e

    if not isinstance(raw, list):
        raise DecodingError(f"快照必须是 JSON 数组，实际为 {type(raw).__name__}")

    records: list[T] = []
    for index, item in enumerate(raw):
        try:
            records.append(record_type.from_dict(item))
        except DecodingError as e:
            e.index = index
            raise
        except (KeyError, TypeError, ValueError) as e:
            raise DecodingError(f"第 {index} 条记录解码失败: {e}", index=index) from e

    return records
