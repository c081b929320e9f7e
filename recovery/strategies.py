"""
修复策略表

策略集合是封闭且有序的：越靠前越温和，越不容易破坏本就接近合法的输入。
每个策略都从原始文本重新计算变换，互不影响。
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from functools import partial

from config.constants import RecoveryConstants

from .transforms import (
    balance_braces,
    close_truncated_field,
    close_truncated_string,
    common_rewrites,
    extract_boundaries,
    normalize_escapes,
    reescape_string_values,
    repair_structure,
)


@dataclass(frozen=True)
class RepairStrategy:
    """一次"变换后解析"的尝试"""

    index: int
    name: str
    transform: Callable[[str], str]


def _direct(raw: str) -> str:
    return raw


def _boundary_extraction(raw: str) -> str:
    return common_rewrites(extract_boundaries(raw))


def _truncation_repair(raw: str) -> str:
    return common_rewrites(close_truncated_string(extract_boundaries(raw)))


def _brace_balance(raw: str, *, strict: bool = False) -> str:
    return balance_braces(common_rewrites(extract_boundaries(raw)), strict=strict)


def _field_targeted_repair(raw: str, *, strict: bool = False) -> str:
    closed = close_truncated_field(extract_boundaries(raw))
    return balance_braces(common_rewrites(closed), strict=strict)


def build_strategies(*, strict_brackets: bool = False) -> tuple[RepairStrategy, ...]:
    """
    按固定顺序构建策略表。

    Args:
        strict_brackets: 为 True 时，括号补全改用括号栈而非全局计数

    Returns:
        8 个策略组成的元组
    """
    transforms: tuple[Callable[[str], str], ...] = (
        _direct,
        normalize_escapes,
        reescape_string_values,
        repair_structure,
        _boundary_extraction,
        _truncation_repair,
        partial(_brace_balance, strict=strict_brackets),
        partial(_field_targeted_repair, strict=strict_brackets),
    )
    return tuple(
        RepairStrategy(index=index, name=name, transform=transform)
        for index, (name, transform) in enumerate(
            zip(RecoveryConstants.STRATEGY_NAMES, transforms, strict=True)
        )
    )


DEFAULT_STRATEGIES = build_strategies()
STRICT_STRATEGIES = build_strategies(strict_brackets=True)


def get_strategies(*, strict_brackets: bool = False) -> tuple[RepairStrategy, ...]:
    return STRICT_STRATEGIES if strict_brackets else DEFAULT_STRATEGIES


__all__ = [
    "RepairStrategy",
    "build_strategies",
    "get_strategies",
    "DEFAULT_STRATEGIES",
    "STRICT_STRATEGIES",
]
