"""
修复变换的单元测试

每个变换只改写文本，这里既检查改写结果，也检查改写后能否被严格解析。
"""

import json

import pytest

from recovery.transforms import (
    balance_braces,
    close_truncated_field,
    close_truncated_string,
    common_rewrites,
    extract_boundaries,
    normalize_escapes,
    reescape_string_values,
    repair_structure,
)


class TestNormalizeEscapes:
    """测试转义规范化"""

    def test_identity_on_escaped_sequences(self):
        text = '{"a": "line\\nnext \\"q\\" \\\\ tab\\t cr\\r"}'
        assert normalize_escapes(text) == text

    def test_idempotent(self):
        """测试对自身输出再次执行不会产生二次转义"""
        text = '{"path": "C:\\\\temp\\\\x", "msg": "a\\nb"}'
        once = normalize_escapes(text)
        assert normalize_escapes(once) == once

    def test_plain_text_untouched(self):
        assert normalize_escapes("no escapes here") == "no escapes here"


class TestReescapeStringValues:
    """测试字符串值的重新转义"""

    def test_raw_newline_and_tab(self):
        """测试字符串值中的原始换行和制表符被转义"""
        text = '{"a": "line1\nline2\tend"}'
        repaired = reescape_string_values(text)
        assert repaired == '{"a": "line1\\nline2\\tend"}'
        assert json.loads(repaired) == {"a": "line1\nline2\tend"}

    def test_interior_quotes(self):
        """测试字符串值内部未转义的引号"""
        text = '{"quote": "he said "hi" there", "n": 1}'
        assert json.loads(reescape_string_values(text)) == {"quote": 'he said "hi" there', "n": 1}

    def test_lone_backslash(self):
        """测试孤立反斜杠被转义，合法转义保持不变"""
        text = '{"p": "C:\\dir", "q": "a\\"b"}'
        assert json.loads(reescape_string_values(text)) == {"p": "C:\\dir", "q": 'a"b'}

    def test_keys_and_array_elements_untouched(self):
        """测试键名和数组元素不受影响"""
        text = '{"list": ["a\nb"], "k": "v"}'
        assert reescape_string_values(text) == text

    def test_valid_json_unchanged(self):
        text = '{"a": "x", "b": [1, "y"], "c": {"d": "e\\n"}}'
        assert reescape_string_values(text) == text

    def test_unterminated_value_is_copied(self):
        text = '{"a": "tail\n'
        assert reescape_string_values(text) == '{"a": "tail\\n'


class TestRepairStructure:
    """测试结构性修复"""

    def test_trailing_commas(self):
        assert repair_structure('{"a":[1,2,],}') == '{"a":[1,2]}'

    def test_trailing_comma_with_whitespace(self):
        assert json.loads(repair_structure('{"a": 1,\n}')) == {"a": 1}

    def test_bare_keys(self):
        """测试裸键加引号"""
        assert repair_structure('{a: 1, b_2: "x"}') == '{"a": 1, "b_2": "x"}'

    def test_control_characters_stripped(self):
        assert repair_structure('{"a":"x\x01y\x7f"}') == '{"a":"xy"}'

    def test_single_quoted_keys_and_values(self):
        """测试单引号键和值"""
        assert repair_structure("{'a':'b'}") == '{"a":"b"}'

    def test_single_quoted_value_with_double_quotes(self):
        """测试单引号值内部的双引号被转义"""
        repaired = repair_structure("{'a': 'it \"x\"'}")
        assert json.loads(repaired) == {"a": 'it "x"'}

    def test_apostrophe_inside_double_quoted_value(self):
        text = '{"a": "it\'s fine"}'
        assert repair_structure(text) == text


class TestExtractBoundaries:
    """测试边界提取"""

    def test_strips_surrounding_prose(self):
        text = 'Here is the JSON:\n{"a": 1}\nHope it helps!'
        assert extract_boundaries(text) == '{"a": 1}'

    def test_no_braces_unchanged(self):
        assert extract_boundaries("[1, 2]") == "[1, 2]"

    def test_closing_before_opening_unchanged(self):
        assert extract_boundaries("} text {") == "} text {"

    def test_common_rewrites_after_extraction(self):
        text = "Result: {name: 'demo', items: [1,2,],} done"
        assert json.loads(common_rewrites(extract_boundaries(text))) == {
            "name": "demo",
            "items": [1, 2],
        }


class TestCloseTruncatedString:
    """测试截断字符串修复"""

    def test_appends_quote_and_brace(self):
        assert close_truncated_string('{"a":"hello') == '{"a":"hello"}'

    def test_balanced_unchanged(self):
        text = '{"a":"hello"'
        assert close_truncated_string(text) == text

    def test_valid_continuation_unchanged(self):
        """测试最后一个引号之后已是合法延续时不做修改"""
        text = '[1, "a"", 2]'
        assert close_truncated_string(text) == text

    def test_drops_dangling_escape(self):
        assert close_truncated_string('{"a":"x\\') == '{"a":"x"}'


class TestBalanceBraces:
    """测试大括号补全"""

    def test_appends_missing_braces(self):
        assert balance_braces('{"a":{"b":1') == '{"a":{"b":1}}'

    def test_already_closed(self):
        assert balance_braces('{"a":1}  \n') == '{"a":1}'

    def test_global_count_ignores_square_brackets(self):
        """测试默认启发式只补 }，不处理 ["""
        assert balance_braces('{"a":[1') == '{"a":[1}'

    def test_strict_uses_bracket_stack(self):
        """测试严格模式使用括号栈"""
        assert balance_braces('{"a":[{"b":"x', strict=True) == '{"a":[{"b":"x"}]}'


class TestCloseTruncatedField:
    """测试长文本字段的截断修复"""

    def test_closes_known_field(self):
        text = '{"analysis": {"component_diagram": "graph TD\n  A-->B  '
        assert close_truncated_field(text) == '{"analysis": {"component_diagram": "graph TD\n  A-->B"'

    def test_unknown_field_unchanged(self):
        text = '{"note": "abc'
        assert close_truncated_field(text) == text

    def test_closed_field_unchanged(self):
        text = '{"class_diagram": "classDiagram"'
        assert close_truncated_field(text) == text

    def test_drops_dangling_escape(self):
        assert close_truncated_field('{"class_diagram": "x\\') == '{"class_diagram": "x"'

    @pytest.mark.parametrize(
        "field", ["component_diagram", "sequence_diagram", "activity_diagram", "class_diagram"]
    )
    def test_all_configured_fields(self, field):
        assert close_truncated_field(f'{{"{field}" : "abc').endswith('abc"')

    def test_custom_field_set(self):
        text = '{"image_data": "QUJD'
        assert close_truncated_field(text, fields=("image_data",)) == '{"image_data": "QUJD"'
