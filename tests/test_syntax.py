from __future__ import annotations

import unittest

from jsdebug_source.edits import apply_edits, position_to_offset
from jsdebug_source.errors import JavaScriptSyntaxError
from jsdebug_source.syntax import get_syntax_error_in
from jsdebug_source.types import TextEdit


class TestSyntaxError(unittest.TestCase):
    def test_reports_error(self):
        error = get_syntax_error_in("1+")
        self.assertIsInstance(error, JavaScriptSyntaxError)
        self.assertEqual(error.line, 1)

    def test_valid_code(self):
        self.assertIsNone(get_syntax_error_in("1+1"))

    def test_return_is_allowed_in_function_body(self):
        self.assertIsNone(get_syntax_error_in("return 1"))

    def test_error_location_is_one_based(self):
        error = get_syntax_error_in("var a = 1;\nfoo(;")
        self.assertIsNotNone(error)
        self.assertEqual(error.line, 2)
        self.assertGreaterEqual(error.column, 1)


class TestEdits(unittest.TestCase):
    def test_position_to_offset(self):
        self.assertEqual(position_to_offset("ab\ncd", 2, 1), 3)
        self.assertEqual(position_to_offset("ab\ncd", 1, 1), 0)
        self.assertEqual(position_to_offset("ab\ncd", 2, 2), 4)

    def test_edits_apply_back_to_front(self):
        edits = [TextEdit(0, 1, "Z"), TextEdit.insert(3, "!"), TextEdit.insert(2, "-")]
        self.assertEqual(apply_edits(b"abc", edits), b"Zb-c!")

    def test_edits_at_same_offset_keep_collection_order(self):
        edits = [TextEdit.insert(1, "X"), TextEdit.insert(1, "Y")]
        self.assertEqual(apply_edits(b"abc", edits), b"aXYbc")


if __name__ == "__main__":
    unittest.main()
