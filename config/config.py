from __future__ import annotations

import logging
from collections.abc import Mapping
from collections.abc import Mapping as MappingABC
from dataclasses import asdict, dataclass, is_dataclass
from typing import Any, cast

from .env_loader import EnvironmentSettings, load_environment_settings
from .logging_setup import setup_logging

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RecoverySettings:
    """JSON恢复调用方的配置。"""

    strict_brackets: bool
    max_input_chars: int
    diagnostic_window: int
    diagnostic_preview_chars: int

    @classmethod
    def from_env(cls, env: EnvironmentSettings) -> RecoverySettings:
        return cls(
            strict_brackets=env.strict_brackets,
            max_input_chars=env.max_input_chars,
            diagnostic_window=env.diagnostic_window,
            diagnostic_preview_chars=env.diagnostic_preview_chars,
        )


@dataclass(frozen=True)
class LoggingSettings:
    """日志级别和输出位置。"""

    log_level: str
    console_log_level: str
    log_file_path: str | None

    @classmethod
    def from_env(cls, env: EnvironmentSettings) -> LoggingSettings:
        return cls(
            log_level=env.log_level,
            console_log_level=env.console_log_level,
            log_file_path=env.log_file_path,
        )


class Config:
    """聚合运行时设置的中央配置对象。"""

    recovery: RecoverySettings
    log_settings: LoggingSettings

    # 从 dataclass 分组复制的扁平属性
    strict_brackets: bool
    max_input_chars: int
    diagnostic_window: int
    diagnostic_preview_chars: int
    log_level: str
    console_log_level: str
    log_file_path: str | None

    def __init__(self, env_settings: EnvironmentSettings | None = None):
        if env_settings is None:
            env_settings = load_environment_settings()

        self._env_settings: EnvironmentSettings = env_settings

        self.recovery = self._assign_settings(RecoverySettings.from_env(env_settings), alias="recovery")
        self.log_settings = self._assign_settings(
            LoggingSettings.from_env(env_settings), alias="log_settings"
        )

    @staticmethod
    def _dataclass_as_dict(section: Any) -> dict[str, Any]:
        if is_dataclass(section) and not isinstance(section, type):
            return asdict(section)
        if isinstance(section, MappingABC):
            mapping_section = cast(Mapping[str, Any], section)
            return {str(key): value for key, value in mapping_section.items()}
        raise TypeError(
            f"Unsupported settings section type: {type(section)!r}. "
            "Expected dataclass or mapping."
        )

    def _assign_settings(self, section: Any, *, alias: str | None = None) -> Any:
        """
        Copy fields from a dataclass section onto the config instance.
        """
        for key, value in self._dataclass_as_dict(section).items():
            setattr(self, key, value)
        if alias:
            setattr(self, alias, section)
        return section

    def with_overrides(self, **overrides: Any) -> Config:
        """返回应用了覆盖值（例如命令行参数）的新配置，原配置不变。"""
        updated = self._env_settings.model_copy(
            update={key: value for key, value in overrides.items() if value is not None}
        )
        return Config(updated)

    def setup_logging(self, logging_level: str | int | None = None) -> None:
        """为当前运行配置日志记录器。"""
        setup_logging(self, logging_level or self.log_level)


__all__ = ["Config", "EnvironmentSettings", "RecoverySettings", "LoggingSettings"]
