from __future__ import annotations

"""Rewrites applied to evaluation snippets before they reach the runtime.

- `rewrite_top_level_await()` wraps a snippet that awaits at top level in an
  async IIFE, turning top-level declarations into assignments so their
  bindings outlive the wrapper.
- `wrap_object_literal()` parenthesizes snippets that would otherwise parse as
  a block instead of an object literal.

Both fail soft: invalid snippets are handed back for normal evaluation.
"""

import logging

from tree_sitter import Node

from .edits import apply_edits
from .errors import SourceParseError
from .syntax import FUNCTION_SCOPES, parse_strict, statements
from .types import RewriteResult, RewriteStatus, TextEdit

logger = logging.getLogger(__name__)

WRAPPER_PREFIX = "(async () => {"
WRAPPER_SUFFIX = "\n})()"

_FUNCTION_DECLARATIONS = ("function_declaration", "generator_function_declaration")


def _wrapper_body(root: Node, length: int) -> Node | None:
    """Locate the arrow body of the wrapper, or None if the snippet escaped it."""

    top = statements(root)
    if len(top) != 1 or top[0].type != "expression_statement":
        return None

    call = top[0].named_children[0]
    if call.type != "call_expression":
        return None

    callee = call.child_by_field_name("function")
    if callee is None or callee.type != "parenthesized_expression":
        return None

    arrow = callee.named_children[0]
    if arrow.type != "arrow_function":
        return None

    body = arrow.child_by_field_name("body")
    if body is None or body.type != "statement_block":
        return None

    # "{" ends the prefix and "}" precedes the trailing ")()".
    if body.start_byte != len(WRAPPER_PREFIX) - 1 or body.end_byte != length - 3:
        return None
    return body


class _TopLevelScan:
    """Single pass over the wrapper body collecting edits and await/return usage."""

    def __init__(self, source: bytes, body: Node) -> None:
        self.source = source
        self.body = body
        self.edits: list[TextEdit] = []
        self.contains_await = False
        self.contains_return = False

    def run(self) -> None:
        stack = [self.body]
        while stack:
            node = stack.pop()
            if self._visit(node):
                stack.extend(reversed(node.children))

    def _visit(self, node: Node) -> bool:
        kind = node.type

        if kind == "class_declaration":
            # class Foo {} -> Foo=class Foo {}
            if node.parent == self.body:
                self._expose_name(node)
            return True

        if kind in _FUNCTION_DECLARATIONS:
            # function foo() {} -> foo=function foo() {}
            if node.parent == self.body:
                self._expose_name(node)
            return False

        if kind in FUNCTION_SCOPES:
            return False

        if kind == "await_expression":
            self.contains_await = True
        elif kind == "for_in_statement":
            if any(child.type == "await" for child in node.children):
                self.contains_await = True
        elif kind == "return_statement":
            self.contains_return = True
        elif kind == "variable_declaration":
            self._expose_declarations(node)
        elif kind == "lexical_declaration":
            # for (let ...) and block-scoped let/const stay as they are.
            if node.parent == self.body:
                self._expose_declarations(node)

        return True

    def _expose_name(self, node: Node) -> None:
        name = node.child_by_field_name("name")
        if name is None:
            return
        text = self.source[name.start_byte : name.end_byte].decode("utf-8")
        self.edits.append(TextEdit.insert(node.start_byte, text + "="))
        # The declaration is now an expression statement and needs terminating.
        self.edits.append(TextEdit.insert(node.end_byte, ";"))

    def _expose_declarations(self, node: Node) -> None:
        """var a = 1, b -> void ((a = 1), (b=undefined))"""

        keyword = node.children[0]
        declarators = [child for child in node.named_children if child.type == "variable_declarator"]
        if not declarators:
            return

        single = len(declarators) == 1
        self.edits.append(TextEdit(keyword.start_byte, keyword.end_byte, "void" if single else "void ("))

        for declarator in declarators:
            self.edits.append(TextEdit.insert(declarator.start_byte, "("))
            if declarator.child_by_field_name("value") is None:
                self.edits.append(TextEdit.insert(declarator.end_byte, "=undefined)"))
            else:
                self.edits.append(TextEdit.insert(declarator.end_byte, ")"))

        if not single:
            self.edits.append(TextEdit.insert(declarators[-1].end_byte, ")"))


def rewrite_top_level_await_result(code: str) -> RewriteResult:
    wrapped = WRAPPER_PREFIX + code + WRAPPER_SUFFIX

    try:
        tree, source = parse_strict(wrapped)
    except SourceParseError as e:
        logger.debug("top-level await rewrite: parse error: %s", e)
        return RewriteResult(RewriteStatus.PARSE_ERROR, reason=str(e))

    body = _wrapper_body(tree.root_node, len(source))
    if body is None:
        logger.debug("top-level await rewrite: snippet escapes the async wrapper")
        return RewriteResult(RewriteStatus.PARSE_ERROR, reason="snippet escapes the async wrapper")

    scan = _TopLevelScan(source, body)
    scan.run()

    if not scan.contains_await:
        return RewriteResult(RewriteStatus.DECLINED, reason="no top-level await")
    if scan.contains_return:
        return RewriteResult(RewriteStatus.DECLINED, reason="top-level return")

    edits = scan.edits

    # Report the value of a trailing expression as the settled result.
    last = statements(body)[-1]
    if last.type == "expression_statement":
        edits.append(TextEdit.insert(last.start_byte, "return ("))
        if source[last.end_byte - 1 : last.end_byte] == b";":
            edits.append(TextEdit.insert(last.end_byte - 1, ")"))
        else:
            edits.append(TextEdit.insert(last.end_byte, ")"))

    rewritten = apply_edits(source, edits).decode("utf-8")
    return RewriteResult(RewriteStatus.REWRITTEN, code=rewritten)


def rewrite_top_level_await(code: str) -> str | None:
    """Return `code` wrapped for top-level await, or None to evaluate it as is."""

    result = rewrite_top_level_await_result(code)
    return result.code if result.ok else None


def wrap_object_literal(code: str) -> str:
    """Wrap `{ foo: true }` as `({ foo: true })`; return anything else unchanged."""

    try:
        tree, _ = parse_strict(f"return {code};")
    except SourceParseError:
        return code

    top = statements(tree.root_node)
    if len(top) != 1 or top[0].type != "return_statement":
        return code

    expression = [child for child in top[0].named_children if child.type != "comment"]
    if not expression:
        return code

    return f"({code})" if expression[0].type == "object" else code
