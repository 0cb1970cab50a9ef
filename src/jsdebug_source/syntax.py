from __future__ import annotations

"""JavaScript parsing on top of tree-sitter.

tree-sitter always produces a tree; a parse is considered failed when the
tree contains an ERROR or MISSING node. All node offsets are UTF-8 byte
offsets into the encoded source.
"""

import tree_sitter_javascript
from tree_sitter import Language, Node, Parser, Tree

from .errors import JavaScriptSyntaxError, SourceParseError

JS_LANGUAGE = Language(tree_sitter_javascript.language())

# Nodes that introduce their own function scope. `function` is the pre-0.21
# grammar name for function expressions.
FUNCTION_SCOPES = frozenset(
    {
        "function",
        "function_expression",
        "arrow_function",
        "method_definition",
        "generator_function",
        "function_declaration",
        "generator_function_declaration",
    }
)


def parse(source: bytes) -> Tree:
    # Parsers are cheap; one per call keeps concurrent callers independent.
    return Parser(JS_LANGUAGE).parse(source)


def find_first_error(root: Node) -> Node | None:
    """Return the first ERROR or MISSING node in document order."""

    if not root.has_error:
        return None

    stack = [root]
    while stack:
        node = stack.pop()
        if node.type == "ERROR" or node.is_missing:
            return node
        stack.extend(child for child in reversed(node.children) if child.has_error)
    return None


def _location(source: bytes, offset: int) -> tuple[int, int]:
    prefix = source[:offset].decode("utf-8", errors="replace")
    line = prefix.count("\n") + 1
    column = len(prefix) - (prefix.rfind("\n") + 1) + 1
    return line, column


def _describe(node: Node) -> str:
    if node.is_missing:
        return f"Missing {node.type}"
    text = (node.text or b"").decode("utf-8", errors="replace").strip()
    if not text:
        return "Unexpected end of input"
    first = text.split()[0]
    return f"Unexpected token '{first}'"


def parse_strict(code: str) -> tuple[Tree, bytes]:
    """Parse `code`, raising SourceParseError if it is not valid JavaScript."""

    source = code.encode("utf-8")
    tree = parse(source)
    error = find_first_error(tree.root_node)
    if error is not None:
        line, column = _location(source, error.start_byte)
        raise SourceParseError(_describe(error), line, column)
    return tree, source


def get_syntax_error_in(code: str) -> JavaScriptSyntaxError | None:
    """Return the syntax error in `code` treated as a function body, if any.

    The code is only parsed, never executed.
    """

    try:
        parse_strict(code)
    except SourceParseError as e:
        return JavaScriptSyntaxError(e.message, e.line, e.column)
    return None


def node_text(source: bytes, node: Node) -> str:
    return source[node.start_byte : node.end_byte].decode("utf-8", errors="replace")


def statements(block: Node) -> list[Node]:
    """Statement children of a program or statement block, comments excluded."""

    return [child for child in block.named_children if child.type != "comment"]
