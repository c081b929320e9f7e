"""
解析失败诊断

全部策略失败时，调用方不应静默丢弃原始文本，而是展示：原始长度、首尾片段、
主错误信息，以及错误信息中指明位置时该位置附近的窗口片段。
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass
from typing import Any

from config.constants import RecoveryConstants

from .errors import AggregatedError

_POSITION_PATTERN = re.compile(r"position (\d+)")


def extract_error_position(message: str) -> int | None:
    """从错误信息中提取 "position N" 的字符偏移量"""
    match = _POSITION_PATTERN.search(message or "")
    return int(match.group(1)) if match else None


@dataclass(frozen=True)
class ParseDiagnostic:
    """
    面向展示层的诊断信息

    position 取自主错误（最后一个策略的错误），它指向的是经过边界截取和改写后的文本，
    而不是原始文本。excerpt 按该偏移在原始文本上截取，JSON 前有说明文字时会有偏移，
    只能作为大致定位参考。
    """

    raw_length: int
    head: str
    tail: str
    primary_message: str
    position: int | None
    excerpt: str | None
    excerpt_start: int | None
    failures: tuple[dict[str, Any], ...]

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": "error",
            "title": "Failed to parse analysis result",
            "raw_length": self.raw_length,
            "head": self.head,
            "tail": self.tail,
            "primary_message": self.primary_message,
            "position": self.position,
            "excerpt": self.excerpt,
            "excerpt_start": self.excerpt_start,
            "failures": list(self.failures),
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), ensure_ascii=False, indent=2)


def build_diagnostic(
    raw: str,
    error: AggregatedError,
    *,
    window: int = RecoveryConstants.DIAGNOSTIC_WINDOW,
    preview_chars: int = RecoveryConstants.DIAGNOSTIC_PREVIEW_CHARS,
) -> ParseDiagnostic:
    """
    根据原始文本和聚合错误构建诊断信息。

    Args:
        raw: 原始候选文本
        error: recover 返回的聚合错误
        window: 错误位置前后各截取的字符数
        preview_chars: 首尾预览的字符数

    Returns:
        ParseDiagnostic
    """
    primary_message = error.primary_message
    position = extract_error_position(primary_message)

    excerpt: str | None = None
    excerpt_start: int | None = None
    if position is not None:
        # 主错误来自变换后的文本，位置可能超出原文，截断到原文范围内
        anchor = min(position, len(raw))
        excerpt_start = max(0, anchor - window)
        excerpt = raw[excerpt_start : min(len(raw), anchor + window)]

    return ParseDiagnostic(
        raw_length=len(raw),
        head=raw[:preview_chars],
        tail=raw[max(0, len(raw) - preview_chars) :],
        primary_message=primary_message,
        position=position,
        excerpt=excerpt,
        excerpt_start=excerpt_start,
        failures=tuple(failure.to_dict() for failure in error),
    )


__all__ = ["ParseDiagnostic", "extract_error_position", "build_diagnostic"]
