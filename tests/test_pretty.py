from __future__ import annotations

import unittest

from jsdebug_source.errors import SourceParseError
from jsdebug_source.pretty import pretty_print, pretty_print_as_source_map
from jsdebug_source.syntax import get_syntax_error_in
from jsdebug_source.types import GeneratedPosition, OriginalPosition, PrettyMapping

MINIFIED = "function f(a,b){return a+b}"
PRETTY = "function f(a, b) {\n  return a + b\n}\n"
NAME = "app.min.js-pretty.js"


class TestPrettyPrint(unittest.TestCase):
    def test_function(self):
        result = pretty_print(MINIFIED)
        self.assertEqual(result.text, PRETTY)
        self.assertIn(PrettyMapping(1, 0, 1, 0), result.mappings)
        self.assertIn(PrettyMapping(2, 2, 1, 16), result.mappings)
        self.assertIn(PrettyMapping(1, 9, 1, 9, "f"), result.mappings)

    def test_statements_objects_and_else(self):
        result = pretty_print("var a=1;var b={x:1,y:2};if(a){b.x++}else{a--}")
        self.assertEqual(
            result.text,
            "var a = 1;\n"
            "var b = {\n"
            "  x: 1,\n"
            "  y: 2\n"
            "};\n"
            "if (a) {\n"
            "  b.x++\n"
            "} else {\n"
            "  a--\n"
            "}\n",
        )

    def test_for_header_stays_on_one_line(self):
        result = pretty_print("for(var i=0;i<n;i++){}")
        self.assertEqual(result.text, "for (var i = 0; i < n; i++) {}\n")

    def test_statements_without_semicolons_keep_their_line_breaks(self):
        cases = {
            "if(a)b()\nelse c()": "if (a) b()\nelse c()\n",
            "do a()\nwhile(x)": "do a()\nwhile (x)\n",
            "a()\nb()": "a()\nb()\n",
        }
        for minified, expected in cases.items():
            text = pretty_print(minified).text
            self.assertEqual(text, expected)
            self.assertIsNone(get_syntax_error_in(text), text)

    def test_unbraced_bodies_are_separated_from_the_header(self):
        self.assertEqual(pretty_print("if(a)b();").text, "if (a) b();\n")
        self.assertEqual(pretty_print("while(x)x--;").text, "while (x) x--;\n")

    def test_columns_are_utf16(self):
        result = pretty_print('var s="é\U0001f600";var t=1')
        self.assertIn(PrettyMapping(2, 0, 1, 12), result.mappings)

    def test_invalid_code_raises(self):
        with self.assertRaises(SourceParseError):
            pretty_print("function (")


class TestPrettyPrintAsSourceMap(unittest.TestCase):
    def setUp(self):
        self.map = pretty_print_as_source_map(NAME, MINIFIED, "/dist/app.min.js", "file:///dist/app.min.js.map")

    def test_map_is_bound_to_the_compiled_file(self):
        self.assertIsNotNone(self.map)
        self.assertEqual(self.map.sources, [NAME])
        self.assertEqual(self.map.compiled_path, "/dist/app.min.js")
        self.assertEqual(self.map.metadata.source_map_url, "file:///dist/app.min.js.map")
        self.assertEqual(self.map.source_content_for(NAME), PRETTY)

    def test_pretty_positions_are_original(self):
        # `return` is on line 2 of the pretty text and column 16 of the minified code.
        self.assertEqual(self.map.generated_position_for(NAME, 2, 2), GeneratedPosition(1, 16))
        self.assertEqual(
            self.map.original_position_for(GeneratedPosition(1, 16)),
            OriginalPosition(NAME, 2, 2),
        )

    def test_identifier_names(self):
        self.assertEqual(
            self.map.original_position_for(GeneratedPosition(1, 9)),
            OriginalPosition(NAME, 1, 9, "f"),
        )

    def test_parse_failure(self):
        self.assertIsNone(pretty_print_as_source_map(NAME, "function (", "/dist/x.js", ""))


if __name__ == "__main__":
    unittest.main()
