"""
解析失败诊断的单元测试
"""

import json
import unittest

from recovery import recover
from recovery.diagnostics import build_diagnostic, extract_error_position
from recovery.errors import AggregatedError, StrategyFailure


def _error_with_message(message: str) -> AggregatedError:
    return AggregatedError((StrategyFailure(0, "direct", "first"), StrategyFailure(7, "field_targeted_repair", message)))


class TestExtractErrorPosition(unittest.TestCase):
    """测试错误位置提取"""

    def test_with_position(self):
        self.assertEqual(extract_error_position("Expecting value at position 12 (line 1 column 13)"), 12)

    def test_without_position(self):
        self.assertIsNone(extract_error_position("RuntimeError: boom"))
        self.assertIsNone(extract_error_position(""))


class TestBuildDiagnostic(unittest.TestCase):
    """测试诊断信息构建"""

    def test_garbage_input(self):
        """测试完全无法解析的输入"""
        raw = "not json at all"
        result = recover(raw)
        diagnostic = build_diagnostic(raw, result.error)

        self.assertEqual(diagnostic.raw_length, len(raw))
        self.assertEqual(diagnostic.head, raw)
        self.assertEqual(diagnostic.tail, raw)
        self.assertEqual(diagnostic.position, 0)
        self.assertEqual(diagnostic.excerpt, raw)
        self.assertEqual(len(diagnostic.failures), 8)

    def test_excerpt_window(self):
        """测试错误位置附近的窗口片段"""
        raw = "x" * 1000
        diagnostic = build_diagnostic(raw, _error_with_message("Expecting ',' at position 500"), window=100)
        self.assertEqual(diagnostic.excerpt_start, 400)
        self.assertEqual(len(diagnostic.excerpt), 200)

    def test_position_beyond_raw_is_clamped(self):
        """测试变换后文本中的位置超出原文时截断到原文末尾"""
        raw = "y" * 1000
        diagnostic = build_diagnostic(raw, _error_with_message("Unterminated string at position 5000"))
        self.assertEqual(diagnostic.position, 5000)
        self.assertEqual(diagnostic.excerpt_start, 800)
        self.assertEqual(len(diagnostic.excerpt), 200)

    def test_no_position(self):
        diagnostic = build_diagnostic("abc", _error_with_message("RuntimeError: boom"))
        self.assertIsNone(diagnostic.position)
        self.assertIsNone(diagnostic.excerpt)

    def test_head_and_tail_previews(self):
        raw = "a" * 600 + "b" * 600
        diagnostic = build_diagnostic(raw, _error_with_message("boom"), preview_chars=500)
        self.assertEqual(diagnostic.head, "a" * 500)
        self.assertEqual(diagnostic.tail, "b" * 500)

    def test_to_json(self):
        diagnostic = build_diagnostic("{", _error_with_message("Expecting value at position 1"))
        payload = json.loads(diagnostic.to_json())
        self.assertEqual(payload["type"], "error")
        self.assertEqual(payload["primary_message"], "Expecting value at position 1")
        self.assertEqual([f["index"] for f in payload["failures"]], [0, 7])


if __name__ == "__main__":
    unittest.main()
