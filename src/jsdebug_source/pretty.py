from __future__ import annotations

"""Pretty-printing minified JavaScript with a reversed source map.

The printer re-emits the parse tree's tokens with one statement per line and
two-space indentation, recording where each token came from. The resulting
map treats the pretty text as the *original* source (what a person reads)
and the minified text as the *generated* code (what actually runs), so a
debugger can show and step through the pretty version.
"""

import logging
from collections.abc import Iterator

from tree_sitter import Node

from .errors import SourceParseError
from .sourcemap import SourceMap, SourceMapBuilder
from .syntax import parse_strict
from .types import (
    GeneratedPosition,
    OriginalPosition,
    PrettyMapping,
    PrettyPrintResult,
    SourceMapMetadata,
)

logger = logging.getLogger(__name__)

INDENT = "  "

# Emitted verbatim; their inner structure is not reformatted.
ATOMIC_TOKENS = frozenset({"string", "template_string", "regex", "number", "comment", "hash_bang_line"})

NAME_TOKENS = frozenset(
    {
        "identifier",
        "property_identifier",
        "shorthand_property_identifier",
        "shorthand_property_identifier_pattern",
        "private_property_identifier",
        "statement_identifier",
    }
)

STATEMENT_CONTAINERS = frozenset({"program", "statement_block", "class_body", "switch_body"})
SWITCH_CLAUSES = frozenset({"switch_case", "switch_default"})

# Braces that open an indented, multi-line region.
BLOCKS = frozenset({"statement_block", "class_body", "switch_body", "object"})

OPERATOR_PARENTS = frozenset(
    {
        "binary_expression",
        "assignment_expression",
        "augmented_assignment_expression",
        "ternary_expression",
        "variable_declarator",
        "assignment_pattern",
        "arrow_function",
        "field_definition",
    }
)

STATEMENT_DECLARATIONS = frozenset({"variable_declaration", "lexical_declaration"})

# Statements whose body may be a single statement without braces.
BODY_PARENTS = frozenset(
    {"if_statement", "for_statement", "for_in_statement", "while_statement", "do_statement", "with_statement"}
)

NO_SPACE_BEFORE = frozenset({")", "]", ";", ",", ".", "?.", ":"})
NO_SPACE_AFTER = frozenset({"(", "[", ".", "?.", "...", "!", "~"})


def _utf16_len(text: str) -> int:
    return len(text.encode("utf-16-le")) // 2


def _is_word_char(ch: str) -> bool:
    return ch.isalnum() or ch in "_$" or ord(ch) > 127


def _is_keyword(node: Node) -> bool:
    return not node.is_named and node.type.isalpha()


def _is_operator(node: Node) -> bool:
    parent = node.parent
    return (
        parent is not None
        and not node.is_named
        and parent.type in OPERATOR_PARENTS
        and not node.type.isalpha()
        and node.type not in ("(", ")", "[", "]", ",", ";")
    )


def _iter_tokens(root: Node) -> Iterator[Node]:
    stack = [root]
    while stack:
        node = stack.pop()
        if node.type in ATOMIC_TOKENS or node.child_count == 0:
            if node.end_byte > node.start_byte:
                yield node
            continue
        stack.extend(reversed(node.children))


def _starts_statement(node: Node) -> bool:
    """True if `node` is the first token of a statement or class member."""

    current = node
    parent = node.parent
    while parent is not None:
        if parent.type in STATEMENT_CONTAINERS and current.is_named:
            return True
        if parent.type in SWITCH_CLAUSES:
            if current.start_byte == parent.start_byte:
                return True
            colon = next((c for c in parent.children if c.type == ":"), None)
            return colon is not None and current.is_named and current.start_byte > colon.start_byte
        if parent.start_byte != node.start_byte:
            return False
        current = parent
        parent = parent.parent
    return False


def _ends_statement(node: Node) -> bool:
    """True if `node` is the last token of a statement, terminated or not."""

    parent = node.parent
    while parent is not None and parent.end_byte == node.end_byte:
        if parent.type in STATEMENT_DECLARATIONS or (
            parent.type.endswith("_statement") and parent.type != "statement_block"
        ):
            return True
        parent = parent.parent
    return False


def _starts_body(node: Node) -> bool:
    """True if `node` is the first token of an if/loop body."""

    parent = node.parent
    while parent is not None:
        if parent.type in BODY_PARENTS:
            body = parent.child_by_field_name("consequence") or parent.child_by_field_name("body")
            return body is not None and body.start_byte == node.start_byte
        if parent.start_byte != node.start_byte:
            return False
        parent = parent.parent
    return False


def _in_for_header(node: Node) -> bool:
    parent = node.parent
    while parent is not None:
        if parent.type == "for_statement":
            body = parent.child_by_field_name("body")
            return body is None or node.start_byte < body.start_byte
        if parent.type in STATEMENT_CONTAINERS:
            return False
        parent = parent.parent
    return False


class _Printer:
    def __init__(self, source: bytes) -> None:
        self.source = source
        self.source_lines = source.split(b"\n")
        self.out: list[str] = []
        self.mappings: list[PrettyMapping] = []
        self.line = 1
        self.column = 0
        self.indent = 0
        self.pending_newline = False
        self.prev: Node | None = None
        self.prev_text = ""

    def _write(self, text: str) -> None:
        self.out.append(text)
        newlines = text.count("\n")
        if newlines:
            self.line += newlines
            self.column = _utf16_len(text[text.rfind("\n") + 1 :])
        else:
            self.column += _utf16_len(text)

    def _minified_column(self, node: Node) -> int:
        row, byte_column = node.start_point
        prefix = self.source_lines[row][:byte_column]
        return _utf16_len(prefix.decode("utf-8", errors="replace"))

    def _needs_space(self, node: Node, text: str) -> bool:
        prev, prev_text = self.prev, self.prev_text
        if prev is None:
            return False

        if prev.type == "comment" or node.type == "comment":
            return True
        if prev_text == ")" and _starts_body(node):
            return True
        if _is_word_char(prev_text[-1]) and _is_word_char(text[0]):
            return True
        if _is_operator(node) or _is_operator(prev):
            return True
        if prev_text in ("+", "-", "++", "--") and text[0] == prev_text[-1]:
            return True
        if prev.type == "number" and text == "." and prev_text.isdigit():
            return True
        if text in NO_SPACE_BEFORE or prev_text in NO_SPACE_AFTER:
            return False
        if _is_keyword(prev) or _is_keyword(node):
            return True
        if prev_text in (",", ";"):
            return True
        if prev_text == ":" and prev.parent is not None and prev.parent.type == "pair":
            return True
        if text == "{" and node.parent is not None and node.parent.type in ("statement_block", "class_body", "switch_body"):
            return True
        return prev_text == "}" and _is_word_char(text[0])

    def token(self, node: Node) -> None:
        text = self.source[node.start_byte : node.end_byte].decode("utf-8", errors="replace")
        parent_type = node.parent.type if node.parent is not None else ""

        if node.type == "}" and parent_type in BLOCKS:
            self.indent -= 1
            empty = self.prev is not None and self.prev.type == "{" and self.prev.start_byte == node.parent.start_byte
            self.pending_newline = not empty
        elif self.prev is not None and _starts_statement(node):
            self.pending_newline = True

        if self.pending_newline:
            self._write("\n" + INDENT * self.indent)
            self.pending_newline = False
        elif self._needs_space(node, text):
            self._write(" ")

        self.mappings.append(
            PrettyMapping(
                pretty_line=self.line,
                pretty_column=self.column,
                minified_line=node.start_point[0] + 1,
                minified_column=self._minified_column(node),
                name=text if node.type in NAME_TOKENS else None,
            )
        )
        self._write(text)

        if node.type == "{" and parent_type in BLOCKS:
            self.indent += 1
            self.pending_newline = True
        elif node.type == "," and parent_type == "object":
            self.pending_newline = True
        elif node.type == ";" and not _in_for_header(node):
            self.pending_newline = True
        elif node.type == ":" and parent_type in SWITCH_CLAUSES:
            self.pending_newline = True
        elif node.type == "hash_bang_line" or (node.type == "comment" and text.startswith("//")):
            self.pending_newline = True
        elif _ends_statement(node) and not _in_for_header(node):
            # Terminated by automatic semicolon insertion; keep the line break.
            self.pending_newline = True

        self.prev = node
        self.prev_text = text

    def text(self) -> str:
        printed = "".join(self.out)
        return printed + "\n" if printed else printed


def pretty_print(code: str) -> PrettyPrintResult:
    """Reformat `code`, reporting the origin of every emitted token.

    Raises SourceParseError if `code` is not valid JavaScript.
    """

    tree, source = parse_strict(code)
    printer = _Printer(source)
    for node in _iter_tokens(tree.root_node):
        printer.token(node)
    return PrettyPrintResult(text=printer.text(), mappings=printer.mappings)


def pretty_print_as_source_map(
    file_name: str,
    minified_code: str,
    compiled_path: str,
    source_map_url: str,
) -> SourceMap | None:
    try:
        result = pretty_print(minified_code)
    except SourceParseError as e:
        logger.debug("cannot pretty print %s: %s", compiled_path, e)
        return None

    builder = SourceMapBuilder(file=file_name)
    for mapping in result.mappings:
        # Reversed roles: the minified code is what runs.
        builder.add_mapping(
            GeneratedPosition(mapping.minified_line, mapping.minified_column),
            OriginalPosition(file_name, mapping.pretty_line, mapping.pretty_column, mapping.name),
        )
    builder.set_source_content(file_name, result.text)

    return SourceMap.from_json(
        builder.to_json(),
        SourceMapMetadata(source_map_url=source_map_url, compiled_path=compiled_path),
        source_root="",
        sources=[file_name],
    )
