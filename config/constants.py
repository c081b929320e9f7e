"""
配置常量模块

集中管理 JSON 恢复流水线的策略名称、长文本字段和诊断默认值。
"""


# ==================== JSON恢复 ====================

class RecoveryConstants:
    """JSON恢复相关常量"""

    # 策略名称（顺序即执行顺序）
    STRATEGY_NAMES: tuple[str, ...] = (
        "direct",
        "escape_normalization",
        "string_reescape",
        "structural_repair",
        "boundary_extraction",
        "truncation_repair",
        "brace_balance",
        "field_targeted_repair",
    )

    # 容易被截断的长文本字段（图表源码，通常最后输出且最长）
    LONG_TEXT_FIELDS: tuple[str, ...] = (
        "component_diagram",
        "sequence_diagram",
        "activity_diagram",
        "class_diagram",
    )

    # 诊断：错误位置前后各截取的字符数
    DIAGNOSTIC_WINDOW: int = 200

    # 诊断：首尾预览的字符数
    DIAGNOSTIC_PREVIEW_CHARS: int = 500

    @classmethod
    def strategy_count(cls) -> int:
        """策略总数"""
        return len(cls.STRATEGY_NAMES)


# ==================== 输入限制 ====================

class InputLimits:
    """调用方（CLI）对候选文本大小的限制"""

    # 默认允许的最大字符数（约 20MB，可容纳嵌入的 base64 图片）
    MAX_INPUT_CHARS: int = 20_000_000


# ==================== 日志 ====================

class LoggingDefaults:
    """日志相关默认值"""

    LOG_LEVEL: str = "INFO"
    CONSOLE_LOG_LEVEL: str = "WARNING"
    FILE_ROTATION: str = "10 MB"
    FILE_RETENTION: str = "7 days"


# ==================== 导出便捷访问 ====================

STRATEGY_NAMES = RecoveryConstants.STRATEGY_NAMES
LONG_TEXT_FIELDS = RecoveryConstants.LONG_TEXT_FIELDS


__all__ = [
    "RecoveryConstants",
    "InputLimits",
    "LoggingDefaults",
    "STRATEGY_NAMES",
    "LONG_TEXT_FIELDS",
]
