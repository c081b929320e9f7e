from __future__ import annotations

import logging as std_logging
import sys
from typing import TYPE_CHECKING

from loguru import logger

from .constants import LoggingDefaults

if TYPE_CHECKING:
    from .config import Config  # pragma: no cover


class InterceptHandler(std_logging.Handler):
    """把标准 logging 的记录转交给 loguru，现有模块无需修改即可使用 loguru 输出"""

    def emit(self, record: std_logging.LogRecord) -> None:
        # 获取对应的 loguru 级别
        try:
            level: str | int = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        # 找到调用者
        frame, depth = sys._getframe(6), 6
        while frame and frame.f_code.co_filename == std_logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


def _resolve_level(logging_level: str | int) -> str:
    """将 int 级别转换为 str（兼容标准 logging.INFO 等常量）"""
    if isinstance(logging_level, int):
        level_name = std_logging.getLevelName(logging_level)
        if isinstance(level_name, str) and not level_name.startswith("Level"):
            return level_name
        return LoggingDefaults.LOG_LEVEL
    return logging_level.upper()


def setup_logging(config: Config, logging_level: str | int = LoggingDefaults.LOG_LEVEL) -> None:
    """为当前运行配置日志输出（使用 loguru，自动拦截标准 logging）"""
    level = _resolve_level(logging_level)

    logger.remove()
    std_logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)

    # 控制台日志输出到 stderr，stdout 留给恢复结果
    logger.add(
        sys.stderr,
        format="<level>{level: <8}</level> | {name}:{line} - <level>{message}</level>",
        level=config.console_log_level,
        colorize=True,
    )

    if config.log_file_path:
        logger.add(
            config.log_file_path,
            format="{time:YYYY-MM-DD HH:mm:ss} - {level} - [{file}:{line}] - {message}",
            level=level,
            encoding="utf-8",
            rotation=LoggingDefaults.FILE_ROTATION,
            retention=LoggingDefaults.FILE_RETENTION,
            enqueue=True,
        )
        logger.debug("📝 日志文件: {}", config.log_file_path)


__all__ = ["setup_logging", "InterceptHandler", "logger"]
