"""配置辅助工具的便捷导出。"""

from .config import Config, EnvironmentSettings
from .env_loader import load_environment_settings

__all__ = ["Config", "EnvironmentSettings", "load_environment_settings"]
