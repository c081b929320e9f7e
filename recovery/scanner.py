"""
单遍字符扫描器

截断检测和括号补全都依赖字符串状态（是否处于引号内、转义是否生效）。
这里只用字符类正则 finditer 跳到有意义的字符，不存在回溯，耗时与输入长度成线性关系，
对嵌入 base64 图片的数 MB 载荷同样适用。
"""

from __future__ import annotations

import re
from collections.abc import Iterator
from dataclasses import dataclass

# 反斜杠、引号和四种括号之外的字符对状态没有影响
_SIGNIFICANT = re.compile(r'[\\"{}\[\]]')

CLOSERS: dict[str, str] = {"{": "}", "[": "]"}


@dataclass(frozen=True)
class QuoteScan:
    """扫描结束时的字符串状态"""

    quote_count: int
    in_string: bool
    # 最后一个未转义引号的位置，没有则为 -1
    last_quote: int
    # 未闭合字符串的起始引号位置，字符串已闭合则为 -1
    string_start: int
    # 末尾是否悬挂着一个尚未作用的转义反斜杠
    dangling_escape: bool

    @property
    def unbalanced(self) -> bool:
        return self.quote_count % 2 != 0


def iter_significant(text: str) -> Iterator[tuple[int, str, bool]]:
    """
    依次产出未被转义的引号和括号: (位置, 字符, 该字符之前是否处于字符串内)。

    转义在字符串内外都生效，被转义的引号不会切换字符串状态。
    """
    in_string = False
    escaped_pos = -1
    for match in _SIGNIFICANT.finditer(text):
        idx = match.start()
        if idx == escaped_pos:
            continue
        ch = match.group()
        if ch == "\\":
            escaped_pos = idx + 1
            continue
        yield idx, ch, in_string
        if ch == '"':
            in_string = not in_string


def scan_quotes(text: str) -> QuoteScan:
    """统计未转义引号并记录末尾的字符串状态"""
    quote_count = 0
    last_quote = -1
    string_start = -1
    in_string = False
    for idx, ch, _ in iter_significant(text):
        if ch != '"':
            continue
        quote_count += 1
        last_quote = idx
        in_string = not in_string
        if in_string:
            string_start = idx
    return QuoteScan(
        quote_count=quote_count,
        in_string=in_string,
        last_quote=last_quote,
        string_start=string_start if in_string else -1,
        dangling_escape=_has_dangling_escape(text),
    )


def _has_dangling_escape(text: str) -> bool:
    stripped = text.rstrip("\\")
    return (len(text) - len(stripped)) % 2 == 1


def count_unbalanced_braces(text: str) -> int:
    """全局统计 { 比 } 多出的数量（不区分是否位于字符串内）"""
    return text.count("{") - text.count("}")


def close_open_structures(text: str) -> str:
    """
    基于括号栈补全截断的 JSON。

    先闭合未结束的字符串（丢弃末尾悬挂的转义符），再按相反顺序补齐所有未闭合的 { 和 [。
    类型不匹配的闭合符只被跳过，不做修正。
    """
    stack: list[str] = []
    in_string = False
    for _, ch, inside in iter_significant(text):
        if ch == '"':
            in_string = not inside
            continue
        if inside:
            continue
        if ch in CLOSERS:
            stack.append(ch)
        elif stack and CLOSERS[stack[-1]] == ch:
            stack.pop()

    repaired = text
    if in_string:
        if _has_dangling_escape(repaired):
            repaired = repaired[:-1]
        repaired += '"'
    return repaired + "".join(CLOSERS[opener] for opener in reversed(stack))


__all__ = [
    "QuoteScan",
    "CLOSERS",
    "iter_significant",
    "scan_quotes",
    "count_unbalanced_braces",
    "close_open_structures",
]
