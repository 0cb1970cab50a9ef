from __future__ import annotations

import unittest

from jsdebug_source.rewrite import (
    rewrite_top_level_await,
    rewrite_top_level_await_result,
    wrap_object_literal,
)
from jsdebug_source.syntax import get_syntax_error_in
from jsdebug_source.types import RewriteStatus


def _wrapped(body: str) -> str:
    return "(async () => {" + body + "\n})()"


class TestRewriteTopLevelAwait(unittest.TestCase):
    def test_declines_without_await(self):
        self.assertIsNone(rewrite_top_level_await("1 + 1"))
        self.assertIsNone(rewrite_top_level_await("let x = 1; x"))

    def test_declines_top_level_return(self):
        self.assertIsNone(rewrite_top_level_await("await x; return 1"))

        result = rewrite_top_level_await_result("await x; return 1")
        self.assertEqual(result.status, RewriteStatus.DECLINED)
        self.assertEqual(result.reason, "top-level return")

    def test_let_becomes_assignment_and_last_expression_is_returned(self):
        self.assertEqual(
            rewrite_top_level_await("let x = await foo(); x"),
            _wrapped("void (x = await foo()); return (x)"),
        )

    def test_multiple_declarations(self):
        self.assertEqual(
            rewrite_top_level_await("var a = 1, b; await a"),
            _wrapped("void ( (a = 1), (b=undefined)); return (await a)"),
        )

    def test_exposes_function_and_class_declarations(self):
        code = "function foo() {}\nclass Bar {}\nawait foo()"
        self.assertEqual(
            rewrite_top_level_await(code),
            _wrapped("foo=function foo() {};\nBar=class Bar {};\nreturn (await foo())"),
        )

    def test_exposed_declarations_followed_on_the_same_line_still_parse(self):
        for code in ("class A {} await A.x", "function f() {} await f()"):
            rewritten = rewrite_top_level_await(code)
            self.assertIsNotNone(rewritten)
            self.assertIsNone(get_syntax_error_in(rewritten), rewritten)

        self.assertEqual(
            rewrite_top_level_await("class A {} await A.x"),
            _wrapped("A=class A {}; return (await A.x)"),
        )

    def test_trailing_semicolon_stays_outside_return_parens(self):
        self.assertEqual(rewrite_top_level_await("await 1;"), _wrapped("return (await 1);"))

    def test_nested_functions_do_not_count(self):
        self.assertIsNone(rewrite_top_level_await("async function f() { await x; }"))
        self.assertIsNone(rewrite_top_level_await("const f = async () => { await x }"))

        self.assertEqual(
            rewrite_top_level_await("const g = async () => { return await h() }; await g()"),
            _wrapped("void (g = async () => { return await h() }); return (await g())"),
        )

    def test_method_bodies_do_not_count(self):
        self.assertIsNone(rewrite_top_level_await("({ async m() { return await x } }); 1"))

        self.assertEqual(
            rewrite_top_level_await("const o = { async m() { return await x } }; await o.m()"),
            _wrapped("void (o = { async m() { return await x } }); return (await o.m())"),
        )

    def test_for_await_counts_and_header_is_untouched(self):
        code = "for await (const x of gen()) { console.log(x) }"
        self.assertEqual(rewrite_top_level_await(code), _wrapped(code))

    def test_block_scoped_let_is_untouched_but_var_is_exposed(self):
        self.assertEqual(
            rewrite_top_level_await("if (true) { let y = 1; var z = 2 } await y"),
            _wrapped("if (true) { let y = 1; void (z = 2) } return (await y)"),
        )

    def test_parse_error(self):
        self.assertIsNone(rewrite_top_level_await("await ("))
        self.assertEqual(rewrite_top_level_await_result("await (").status, RewriteStatus.PARSE_ERROR)

    def test_snippet_escaping_the_wrapper_is_a_parse_error(self):
        result = rewrite_top_level_await_result("}); foo(); (async () => {await 1")
        self.assertEqual(result.status, RewriteStatus.PARSE_ERROR)
        self.assertIsNone(result.code)


class TestWrapObjectLiteral(unittest.TestCase):
    def test_wraps_object_literal(self):
        self.assertEqual(wrap_object_literal("{a: 1}"), "({a: 1})")
        self.assertEqual(wrap_object_literal("{}"), "({})")

    def test_leaves_other_expressions(self):
        self.assertEqual(wrap_object_literal("1+1"), "1+1")
        self.assertEqual(wrap_object_literal("foo({a: 1})"), "foo({a: 1})")

    def test_leaves_invalid_code(self):
        self.assertEqual(wrap_object_literal("{"), "{")

    def test_leaves_multiple_statements(self):
        self.assertEqual(wrap_object_literal("{a: 1}; foo"), "{a: 1}; foo")

    def test_is_idempotent(self):
        once = wrap_object_literal("{a: 1}")
        self.assertEqual(wrap_object_literal(once), once)
        self.assertEqual(wrap_object_literal("({a: 1})"), "({a: 1})")


if __name__ == "__main__":
    unittest.main()
