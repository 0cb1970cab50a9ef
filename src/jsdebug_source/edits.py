from __future__ import annotations

"""Offset helpers and TextEdit application."""

from collections.abc import Iterable

from .types import TextEdit


def apply_edits(source: bytes, edits: Iterable[TextEdit]) -> bytes:
    """Apply edits computed against `source`, back to front.

    Edits sharing a start offset keep the order they were collected in.
    """

    ordered = sorted(edits, key=lambda edit: edit.start)
    for edit in reversed(ordered):
        source = source[: edit.start] + edit.text.encode("utf-8") + source[edit.end :]
    return source


def position_to_offset(text: str, line: int, column: int) -> int:
    """Convert a 1-based line and 1-based column into a 0-based offset."""

    offset = 0
    lines = text.split("\n")
    for index in range(line - 1):
        offset += len(lines[index]) + 1
    return offset + column - 1
