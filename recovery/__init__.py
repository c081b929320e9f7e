"""
模型输出 JSON 恢复模块

包含严格解析、修复策略、流水线驱动和失败诊断等功能。
"""

from .diagnostics import ParseDiagnostic, build_diagnostic, extract_error_position
from .errors import (
    AggregatedError,
    PipelineExhausted,
    RecoveryError,
    StrategyFailure,
    StrategySyntaxError,
)
from .pipeline import RecoveryResult, StrategyOutcome, recover, recover_or_raise, run_strategy
from .strategies import RepairStrategy, build_strategies, get_strategies
from .values import JSONValue, json_equal, parse_strict, serialize

__all__ = [
    # Driver
    "recover",
    "recover_or_raise",
    "run_strategy",
    "RecoveryResult",
    "StrategyOutcome",
    # Strategies
    "RepairStrategy",
    "build_strategies",
    "get_strategies",
    # Value model
    "JSONValue",
    "parse_strict",
    "serialize",
    "json_equal",
    # Errors
    "RecoveryError",
    "StrategySyntaxError",
    "StrategyFailure",
    "AggregatedError",
    "PipelineExhausted",
    # Diagnostics
    "ParseDiagnostic",
    "build_diagnostic",
    "extract_error_position",
]
