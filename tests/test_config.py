"""测试Config配置模块"""
import os
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from config import Config
from config.config import LoggingSettings, RecoverySettings
from config.env_loader import EnvironmentSettings

_CLEAN_ENV = {
    "LOG_LEVEL": "INFO",
    "CONSOLE_LOG_LEVEL": "WARNING",
    "LOG_FILE_PATH": "",
    "STRICT_BRACKETS": "false",
    "MAX_INPUT_CHARS": "20000000",
    "DIAGNOSTIC_WINDOW": "200",
    "DIAGNOSTIC_PREVIEW_CHARS": "500",
}


class TestConfig:
    """测试Config类"""

    def test_config_initialization(self):
        """测试Config初始化"""
        with patch.dict(os.environ, _CLEAN_ENV):
            config = Config()

            assert isinstance(config.recovery, RecoverySettings)
            assert isinstance(config.log_settings, LoggingSettings)
            assert config.strict_brackets is False
            assert config.log_file_path is None

    def test_flat_attributes_match_sections(self):
        """测试扁平化属性与分组设置一致"""
        with patch.dict(os.environ, _CLEAN_ENV):
            config = Config()

            assert config.max_input_chars == config.recovery.max_input_chars
            assert config.console_log_level == config.log_settings.console_log_level

    def test_env_values(self):
        """测试从环境变量读取"""
        env = dict(_CLEAN_ENV, STRICT_BRACKETS="true", DIAGNOSTIC_WINDOW="50", LOG_LEVEL="debug")
        with patch.dict(os.environ, env):
            config = Config()

            assert config.strict_brackets is True
            assert config.diagnostic_window == 50
            assert config.log_level == "DEBUG"

    def test_quoted_values_are_stripped(self):
        """测试移除环境变量中的引号"""
        with patch.dict(os.environ, dict(_CLEAN_ENV, CONSOLE_LOG_LEVEL='"error"')):
            assert Config().console_log_level == "ERROR"

    def test_invalid_level_rejected(self):
        with patch.dict(os.environ, dict(_CLEAN_ENV, LOG_LEVEL="loud")):
            with pytest.raises(ValidationError):
                Config()

    def test_non_positive_window_rejected(self):
        with patch.dict(os.environ, dict(_CLEAN_ENV, DIAGNOSTIC_WINDOW="0")):
            with pytest.raises(ValidationError):
                Config()

    def test_with_overrides(self):
        """测试覆盖值返回新配置且忽略 None"""
        with patch.dict(os.environ, _CLEAN_ENV):
            config = Config()
            updated = config.with_overrides(strict_brackets=True, console_log_level=None)

            assert updated.strict_brackets is True
            assert updated.console_log_level == "WARNING"
            assert config.strict_brackets is False

    def test_explicit_settings(self):
        """测试直接传入 EnvironmentSettings"""
        with patch.dict(os.environ, _CLEAN_ENV):
            settings = EnvironmentSettings(max_input_chars=10)
            assert Config(settings).max_input_chars == 10
