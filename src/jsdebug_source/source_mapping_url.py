from __future__ import annotations

"""Extraction of the trailing `//# sourceMappingURL=` directive.

The last qualifying directive wins. A directive qualifies when the name is
preceded by `//`, a `#` or `@` marker and a space or tab, and followed by `=`
or the end of the content.
"""

_NAME = "sourceMappingURL"
_PREFIX_LENGTH = 4
_INVALID_CHARS = frozenset("\"'")


def _has_comment_prefix(content: str, pos: int) -> bool:
    return (
        content[pos] == "/"
        and content[pos + 1] == "/"
        and content[pos + 2] in "#@"
        and content[pos + 3] in " \t"
    )


def parse_source_mapping_url(content: str) -> str | None:
    if not content:
        return None

    length = len(content)
    search_end = length + len(_NAME)
    while True:
        pos = content.rfind(_NAME, 0, search_end)
        if pos == -1 or pos < _PREFIX_LENGTH:
            return None

        # Continue scanning before this occurrence if it does not qualify.
        search_end = pos - _PREFIX_LENGTH + len(_NAME)
        if not _has_comment_prefix(content, pos - _PREFIX_LENGTH):
            continue

        equal_sign_pos = pos + len(_NAME)
        if equal_sign_pos < length and content[equal_sign_pos] != "=":
            continue
        break

    value = content[equal_sign_pos + 1 :].split("\n", 1)[0].strip()
    if any(ch in _INVALID_CHARS or ch.isspace() for ch in value):
        return None
    return value
