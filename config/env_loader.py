from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from pydantic import ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .constants import InputLimits, LoggingDefaults, RecoveryConstants

logger = logging.getLogger(__name__)

# 获取env文件的绝对路径（相对于此模块所在的config目录的父目录）
_CONFIG_DIR = Path(__file__).parent
_PROJECT_ROOT = _CONFIG_DIR.parent
_ENV_FILES = [
    str(_PROJECT_ROOT / ".env"),
    str(_PROJECT_ROOT / ".env.local"),
]

_LOG_LEVELS = {"TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL"}


class EnvironmentSettings(BaseSettings):
    """环境配置（使用 pydantic-settings 自动解析和验证）"""

    model_config = SettingsConfigDict(
        env_file=tuple(_ENV_FILES),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # 日志配置
    log_level: str = LoggingDefaults.LOG_LEVEL
    console_log_level: str = LoggingDefaults.CONSOLE_LOG_LEVEL
    log_file_path: str | None = None

    # 恢复配置
    strict_brackets: bool = False
    max_input_chars: int = InputLimits.MAX_INPUT_CHARS
    diagnostic_window: int = RecoveryConstants.DIAGNOSTIC_WINDOW
    diagnostic_preview_chars: int = RecoveryConstants.DIAGNOSTIC_PREVIEW_CHARS

    @field_validator("*", mode="before")
    @classmethod
    def strip_quotes(cls, v: Any) -> Any:
        """移除环境变量中的引号"""
        if isinstance(v, str):
            v = v.strip()
            if (v.startswith('"') and v.endswith('"')) or (v.startswith("'") and v.endswith("'")):
                return v[1:-1]
        return v

    @field_validator("log_level", "console_log_level", mode="after")
    @classmethod
    def normalize_level(cls, v: str) -> str:
        level = v.strip().upper()
        if level not in _LOG_LEVELS:
            raise ValueError(f"未知的日志级别: {v}")
        return level

    @field_validator("log_file_path", mode="after")
    @classmethod
    def empty_path_as_none(cls, v: str | None) -> str | None:
        return v or None

    @field_validator("max_input_chars", "diagnostic_window", "diagnostic_preview_chars", mode="after")
    @classmethod
    def ensure_positive(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("必须为正整数")
        return v


def load_environment_settings() -> EnvironmentSettings:
    """
    加载环境变量，验证它们，并返回 EnvironmentSettings 实例。
    使用 pydantic-settings 自动加载 .env 文件和系统环境变量。
    """
    try:
        settings = EnvironmentSettings()
        logger.debug(".env 文件和环境变量加载成功。")
        return settings
    except ValidationError as exc:
        logger.critical("配置初始化失败，请检查环境变量设置: %s", exc)
        raise


__all__ = ["EnvironmentSettings", "load_environment_settings"]
