"""
JSON 恢复流水线驱动

按顺序执行 8 个修复策略，返回第一个成功的结果；全部失败时返回聚合错误而不是抛出异常。
整个流程是同步的纯计算，不共享可变状态，可在多个线程中并发调用。
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from .errors import AggregatedError, PipelineExhausted, StrategyFailure, StrategySyntaxError
from .strategies import RepairStrategy, get_strategies
from .values import JSONValue, parse_strict

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StrategyOutcome:
    """单个策略的结果：value 或 error 二者之一"""

    value: JSONValue = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: JSONValue) -> StrategyOutcome:
        return cls(value=value)

    @classmethod
    def failure(cls, message: str) -> StrategyOutcome:
        return cls(error=message or "unknown error")


@dataclass(frozen=True)
class RecoveryResult:
    """recover 的返回值；ok 为 False 时 error 携带全部策略的失败信息"""

    value: JSONValue = None
    strategy_index: int | None = None
    strategy_name: str | None = None
    error: AggregatedError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def run_strategy(strategy: RepairStrategy, raw: str) -> StrategyOutcome:
    """执行单个策略，把解析失败和变换过程中的任何异常都转换为失败结果"""
    try:
        candidate = strategy.transform(raw)
        return StrategyOutcome.success(parse_strict(candidate))
    except StrategySyntaxError as exc:
        return StrategyOutcome.failure(str(exc))
    except Exception as exc:
        logger.debug("策略 %s 变换异常", strategy.name, exc_info=True)
        return StrategyOutcome.failure(f"{type(exc).__name__}: {exc}")


def recover(raw: str, *, strict_brackets: bool = False) -> RecoveryResult:
    """
    尽力从模型返回的文本中恢复出一个 JSON 值。

    Args:
        raw: 候选文本（可能被截断或存在语法错误）
        strict_brackets: 括号补全是否使用括号栈（默认沿用全局计数启发式）

    Returns:
        RecoveryResult，成功时带有值和获胜策略的序号，失败时带有 AggregatedError
    """
    failures: list[StrategyFailure] = []
    for strategy in get_strategies(strict_brackets=strict_brackets):
        outcome = run_strategy(strategy, raw)
        if outcome.ok:
            if strategy.index > 0:
                logger.info(
                    "JSON 解析成功（策略 %s：%s，原始长度=%s）",
                    strategy.index + 1,
                    strategy.name,
                    len(raw),
                )
            return RecoveryResult(
                value=outcome.value,
                strategy_index=strategy.index,
                strategy_name=strategy.name,
            )
        logger.debug("JSON 解析失败（策略 %s：%s）: %s", strategy.index + 1, strategy.name, outcome.error)
        failures.append(StrategyFailure(strategy.index, strategy.name, outcome.error or ""))

    aggregated = AggregatedError(tuple(failures))
    logger.warning(
        "全部 %s 种解析策略均失败（原始长度=%s）: %s",
        len(failures),
        len(raw),
        aggregated.primary_message,
    )
    return RecoveryResult(error=aggregated)


def recover_or_raise(raw: str, *, strict_brackets: bool = False) -> JSONValue:
    """与 recover 相同，但全部失败时抛出 PipelineExhausted"""
    result = recover(raw, strict_brackets=strict_brackets)
    if result.error is not None:
        raise PipelineExhausted(result.error)
    return result.value


__all__ = [
    "StrategyOutcome",
    "RecoveryResult",
    "run_strategy",
    "recover",
    "recover_or_raise",
]
