"""
候选文本的修复变换

每个函数都是 str -> str 的纯函数，只负责"改写文本"，解析交给 parse_strict。
结构性改写沿用正则（模式均为字符类 + 量词，不会灾难性回溯），
涉及引号状态与括号计数的步骤交给 scanner 中的单遍扫描器。
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable

from config.constants import RecoveryConstants

from .scanner import close_open_structures, count_unbalanced_braces, scan_quotes

logger = logging.getLogger(__name__)

# ---------- 转义规范化 ----------

_ESCAPE_SEQUENCE = re.compile(r'\\[nrt"\\]')
_ESCAPE_NORMALIZATION: dict[str, str] = {
    "\\n": "\\n",
    "\\r": "\\r",
    "\\t": "\\t",
    "\\\\": "\\\\",
    '\\"': '\\"',
}


def normalize_escapes(text: str) -> str:
    """
    把已转义的 \\n \\r \\t \\\\ \\" 序列改写为其自身。

    该变换是幂等的：对上游可能已经处理过一次的文本再次执行，结果不会出现二次转义。
    """
    return _ESCAPE_SEQUENCE.sub(lambda m: _ESCAPE_NORMALIZATION[m.group()], text)


# ---------- 字符串值重新转义 ----------

_STRING_END = re.compile(r'[\\"]')
_VALUE_SPECIAL = re.compile(r'[\\"\n\r\t]')
_VALID_ESCAPES = frozenset('"\\/bfnrtu')
_RAW_ESCAPES: dict[str, str] = {"\n": "\\n", "\r": "\\r", "\t": "\\t"}
_WHITESPACE = " \t\r\n"


def _preceded_by_colon(text: str, idx: int) -> bool:
    j = idx - 1
    while j >= 0 and text[j] in _WHITESPACE:
        j -= 1
    return j >= 0 and text[j] == ":"


def _closes_value(text: str, idx: int) -> bool:
    """引号后（跳过空白）紧跟 , } ] 或文本结束时，才视为字符串值的闭合引号"""
    n = len(text)
    while idx < n and text[idx] in _WHITESPACE:
        idx += 1
    return idx == n or text[idx] in ",}]"


def _copy_string(text: str, start: int, parts: list[str]) -> int:
    """原样复制键名或数组元素字符串，返回闭合引号之后的位置"""
    idx = start
    while True:
        match = _STRING_END.search(text, idx)
        if match is None:
            parts.append(text[start:])
            return len(text)
        if match.group() == "\\":
            idx = match.start() + 2
            continue
        parts.append(text[start : match.end()])
        return match.end()


def _copy_value(text: str, start: int, parts: list[str]) -> int:
    """复制字符串值并修正其中本该转义的字符，返回闭合引号之后的位置"""
    idx = start
    while True:
        match = _VALUE_SPECIAL.search(text, idx)
        if match is None:
            parts.append(text[idx:])
            return len(text)
        at = match.start()
        parts.append(text[idx:at])
        ch = match.group()
        if ch == "\\":
            following = text[at + 1 : at + 2]
            if following and following in _VALID_ESCAPES:
                parts.append(text[at : at + 2])
                idx = at + 2
            else:
                parts.append("\\\\")
                idx = at + 1
        elif ch == '"':
            if _closes_value(text, at + 1):
                parts.append('"')
                return at + 1
            parts.append('\\"')
            idx = at + 1
        else:
            parts.append(_RAW_ESCAPES[ch])
            idx = at + 1


def reescape_string_values(text: str) -> str:
    """
    对每个 `: "<content>"` 形式的字符串值，只在 <content> 内部转义
    原始换行、制表、回车、孤立反斜杠以及内部引号。

    键名、数组元素以及引号外的结构字符保持不变。
    """
    parts: list[str] = []
    pos = 0
    n = len(text)
    while pos < n:
        quote = text.find('"', pos)
        if quote == -1:
            parts.append(text[pos:])
            break
        parts.append(text[pos : quote + 1])
        if _preceded_by_colon(text, quote):
            pos = _copy_value(text, quote + 1, parts)
        else:
            pos = _copy_string(text, quote + 1, parts)
    return "".join(parts)


# ---------- 结构性修复 ----------

_TRAILING_COMMA = re.compile(r",(\s*[}\]])")
_SINGLE_QUOTED_KEY = re.compile(r"([{,]\s*)'([^'\"]*)'(\s*:)")
_BARE_KEY = re.compile(r"([{,]\s*)([A-Za-z_][A-Za-z0-9_]*)\s*:")
_CONTROL_CHARS = re.compile(r"[\x00-\x1f\x7f]")
_SINGLE_QUOTED_VALUE = re.compile(r":\s*'([^']*)'")


def _double_quote_value(match: re.Match[str]) -> str:
    content = match.group(1).replace('"', '\\"')
    return f':"{content}"'


def repair_structure(text: str) -> str:
    """
    常见语法问题的文本级修复：
    - 去除 } 或 ] 之前的尾随逗号
    - 为单引号键和裸键加上双引号
    - 去除 0x00-0x1F 与 0x7F 控制字符
    - 单引号字符串值改为双引号
    """
    repaired = _TRAILING_COMMA.sub(r"\1", text)
    repaired = _SINGLE_QUOTED_KEY.sub(r'\1"\2"\3', repaired)
    repaired = _BARE_KEY.sub(r'\1"\2":', repaired)
    repaired = _CONTROL_CHARS.sub("", repaired)
    repaired = _SINGLE_QUOTED_VALUE.sub(_double_quote_value, repaired)
    return repaired


def common_rewrites(text: str) -> str:
    """后续策略共用的改写：转义规范化 + 结构性修复"""
    return repair_structure(normalize_escapes(text))


# ---------- 边界提取 ----------


def extract_boundaries(text: str) -> str:
    """截取第一个 { 到最后一个 } 之间的内容，丢弃模型在 JSON 前后附加的说明文字"""
    first = text.find("{")
    last = text.rfind("}")
    if first != -1 and last > first:
        if first > 0 or last < len(text) - 1:
            logger.debug("extract_boundaries: 截取 [%s:%s]，原始长度=%s", first, last + 1, len(text))
        return text[first : last + 1]
    return text


# ---------- 截断修复 ----------

_CONTINUATION_STARTS = frozenset('",}]')


def close_truncated_string(text: str) -> str:
    """
    检测被截断在字符串中间的文本并补上 `"}`。

    单遍扫描统计未转义引号；数量为奇数且最后一个引号之后的内容不像合法延续
    （另一个引号、逗号或闭合括号）时才追加。末尾悬挂的转义反斜杠会先被丢弃。
    """
    scan = scan_quotes(text)
    if not scan.unbalanced:
        return text
    after = text[scan.last_quote + 1 :].strip()
    if after[:1] in _CONTINUATION_STARTS:
        return text
    repaired = text[:-1] if scan.dangling_escape else text
    logger.debug("close_truncated_string: 检测到未闭合字符串，补全 '\"}'")
    return repaired + '"}'


def balance_braces(text: str, *, strict: bool = False) -> str:
    """
    补齐缺失的闭合大括号。

    默认沿用全局计数的启发式：文本不以 } 结尾时，按 { 与 } 的数量差追加 }，
    不校验嵌套对应关系。strict=True 时改用括号栈逐层闭合（含未闭合字符串和 [）。
    """
    if strict:
        return close_open_structures(text)
    stripped = text.rstrip()
    if stripped.endswith("}"):
        return stripped
    missing = count_unbalanced_braces(stripped)
    if missing > 0:
        logger.debug("balance_braces: 追加 %s 个 '}'", missing)
        return stripped + "}" * missing
    return stripped


def _field_owning(text: str, string_start: int, fields: Iterable[str]) -> str | None:
    """返回以 string_start 处引号开头的字符串值所属的字段名（仅限给定字段集合）"""
    j = string_start - 1
    while j >= 0 and text[j] in _WHITESPACE:
        j -= 1
    if j < 0 or text[j] != ":":
        return None
    j -= 1
    while j >= 0 and text[j] in _WHITESPACE:
        j -= 1
    for field in fields:
        if text.endswith(f'"{field}"', 0, j + 1):
            return field
    return None


def close_truncated_field(
    text: str,
    fields: Iterable[str] = RecoveryConstants.LONG_TEXT_FIELDS,
) -> str:
    """
    针对长文本字段（图表源码等）的截断修复。

    这些字段通常最后输出且最长，最容易被截断。若文本末尾未闭合的字符串恰好是其中
    某个字段的值，则去掉末尾空白和悬挂的转义符后补上闭合引号。
    """
    scan = scan_quotes(text)
    if not scan.in_string:
        return text
    field = _field_owning(text, scan.string_start, fields)
    if field is None:
        return text
    repaired = text.rstrip()
    trailing = len(repaired) - len(repaired.rstrip("\\"))
    if trailing % 2 == 1:
        repaired = repaired[:-1]
    logger.debug("close_truncated_field: 字段 %s 被截断，补全闭合引号", field)
    return repaired + '"'


__all__ = [
    "normalize_escapes",
    "reescape_string_values",
    "repair_structure",
    "common_rewrites",
    "extract_boundaries",
    "close_truncated_string",
    "balance_braces",
    "close_truncated_field",
]
