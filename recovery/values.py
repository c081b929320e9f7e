"""
JSON 值模型与严格解析原语

所有修复策略的差别只在于喂给 parse_strict 的字符串，解析本身始终相同。
"""

from __future__ import annotations

import json
from typing import Any, Union

from .errors import StrategySyntaxError

JSONScalar = Union[None, bool, int, float, str]
JSONValue = Union[JSONScalar, list["JSONValue"], dict[str, "JSONValue"]]


class _NonStandardConstant(ValueError):
    def __init__(self, token: str):
        self.token = token
        super().__init__(token)


def _reject_constant(token: str) -> Any:
    # NaN / Infinity / -Infinity 不属于标准 JSON
    raise _NonStandardConstant(token)


def _parse_int(token: str) -> int | float:
    # 超过解释器整数位数上限的字面量按 f64 解析
    try:
        return int(token)
    except ValueError:
        return float(token)


def parse_strict(text: str) -> JSONValue:
    """
    按标准 JSON 语法解析文本。

    Args:
        text: 候选文本

    Returns:
        解析得到的 JSON 值

    Raises:
        StrategySyntaxError: 文本不是合法 JSON（或嵌套过深），消息中尽量包含首个错误的位置
    """
    try:
        return json.loads(text, parse_constant=_reject_constant, parse_int=_parse_int)
    except json.JSONDecodeError as exc:
        raise StrategySyntaxError(
            exc.msg, position=exc.pos, lineno=exc.lineno, colno=exc.colno
        ) from exc
    except _NonStandardConstant as exc:
        raise StrategySyntaxError(
            f"Non-standard constant {exc.token!r}", position=text.find(exc.token)
        ) from exc
    except RecursionError as exc:
        raise StrategySyntaxError("Maximum nesting depth exceeded") from exc
    except ValueError as exc:
        raise StrategySyntaxError(f"{type(exc).__name__}: {exc}") from exc


def serialize(value: JSONValue) -> str:
    """把 JSON 值序列化为严格 JSON 文本（保留非 ASCII 字符）"""
    return json.dumps(value, ensure_ascii=False, allow_nan=False)


def json_equal(left: Any, right: Any, *, ordered: bool = True) -> bool:
    """
    比较两个 JSON 值是否深度相等。

    与 == 不同：布尔值不与数字相等；ordered=True 时对象键顺序也必须一致。
    """
    if isinstance(left, bool) or isinstance(right, bool):
        return type(left) is type(right) and left == right
    if left is None or right is None:
        return left is right
    if isinstance(left, (int, float)) and isinstance(right, (int, float)):
        return left == right
    if isinstance(left, str) and isinstance(right, str):
        return left == right
    if isinstance(left, list) and isinstance(right, list):
        return len(left) == len(right) and all(
            json_equal(a, b, ordered=ordered) for a, b in zip(left, right)
        )
    if isinstance(left, dict) and isinstance(right, dict):
        if len(left) != len(right):
            return False
        if ordered and list(left) != list(right):
            return False
        return all(
            key in right and json_equal(value, right[key], ordered=ordered)
            for key, value in left.items()
        )
    return False


__all__ = ["JSONScalar", "JSONValue", "parse_strict", "serialize", "json_equal"]
