"""
JSON 恢复流水线的错误类型

StrategySyntaxError 是单个策略的正常失败；AggregatedError 是全部策略失败时
返回给调用方的纯数据；PipelineExhausted 仅供希望以异常方式处理失败的调用方使用。
"""

from __future__ import annotations

import json
from collections.abc import Iterator
from dataclasses import dataclass
from typing import Any


class RecoveryError(Exception):
    """JSON 恢复相关错误的基类"""


class StrategySyntaxError(RecoveryError, ValueError):
    """严格解析器拒绝了（经过变换的）候选文本"""

    def __init__(
        self,
        reason: str,
        *,
        position: int | None = None,
        lineno: int | None = None,
        colno: int | None = None,
    ):
        self.reason = reason
        self.position = position
        self.lineno = lineno
        self.colno = colno
        super().__init__(self._format())

    def _format(self) -> str:
        if self.position is None:
            return self.reason
        if self.lineno is None or self.colno is None:
            return f"{self.reason} at position {self.position}"
        return f"{self.reason} at position {self.position} (line {self.lineno} column {self.colno})"


@dataclass(frozen=True)
class StrategyFailure:
    """单个策略的失败记录"""

    index: int
    name: str
    message: str

    def to_dict(self) -> dict[str, Any]:
        return {"index": self.index, "name": self.name, "message": self.message}


@dataclass(frozen=True)
class AggregatedError:
    """所有策略失败时的聚合错误，按执行顺序保存每个策略的失败信息"""

    failures: tuple[StrategyFailure, ...]

    def __len__(self) -> int:
        return len(self.failures)

    def __iter__(self) -> Iterator[StrategyFailure]:
        return iter(self.failures)

    @property
    def primary(self) -> StrategyFailure | None:
        """最后一个失败的策略，供只关心单条错误信息的调用方使用"""
        return self.failures[-1] if self.failures else None

    @property
    def primary_message(self) -> str:
        primary = self.primary
        return primary.message if primary else "All parsing strategies failed"

    @property
    def indices(self) -> list[int]:
        return [failure.index for failure in self.failures]

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": "error",
            "primary_message": self.primary_message,
            "failures": [failure.to_dict() for failure in self.failures],
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), ensure_ascii=False, indent=2)


class PipelineExhausted(RecoveryError):
    """全部解析策略均失败"""

    def __init__(self, aggregated: AggregatedError):
        self.aggregated = aggregated
        super().__init__(
            f"全部 {len(aggregated)} 种解析策略均失败，最后错误: {aggregated.primary_message}"
        )


__all__ = [
    "RecoveryError",
    "StrategySyntaxError",
    "StrategyFailure",
    "AggregatedError",
    "PipelineExhausted",
]
