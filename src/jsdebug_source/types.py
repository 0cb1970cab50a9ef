from __future__ import annotations

"""Data model shared by the rewriting and position-mapping helpers.

Two coordinate conventions coexist and are kept in distinct types:

- `UiLocation`: what an editor shows, 1-based line and 1-based column.
- `GeneratedPosition` / `OriginalPosition`: source-map coordinates, 1-based
  line and 0-based column.

Convert between them with `UiLocation.to_map_column()` only.
"""

from dataclasses import dataclass
from enum import Enum, IntEnum


class Bias(IntEnum):
    """Rounding policy for source-map lookups without an exact entry."""

    GREATEST_LOWER_BOUND = 1
    LEAST_UPPER_BOUND = 2


@dataclass(frozen=True)
class UiLocation:
    line: int
    column: int

    def to_map_column(self) -> int:
        return self.column - 1


@dataclass(frozen=True)
class GeneratedPosition:
    line: int | None
    column: int | None

    @classmethod
    def null(cls) -> "GeneratedPosition":
        return cls(None, None)

    @property
    def is_null(self) -> bool:
        return self.line is None or self.column is None


@dataclass(frozen=True)
class OriginalPosition:
    source: str | None
    line: int | None
    column: int | None
    name: str | None = None

    @classmethod
    def null(cls) -> "OriginalPosition":
        return cls(None, None, None, None)

    @property
    def is_null(self) -> bool:
        return self.source is None or self.line is None or self.column is None


@dataclass(frozen=True)
class TextEdit:
    """Replace the half-open range [start, end) with `text`.

    Offsets refer to the pristine text the edit was computed against.
    """

    start: int
    end: int
    text: str

    @classmethod
    def insert(cls, offset: int, text: str) -> "TextEdit":
        return cls(offset, offset, text)


@dataclass(frozen=True)
class MappingCandidate:
    position: GeneratedPosition
    variance: float


class RewriteStatus(Enum):
    REWRITTEN = "rewritten"
    PARSE_ERROR = "parse_error"
    DECLINED = "declined"


@dataclass(frozen=True)
class RewriteResult:
    status: RewriteStatus
    code: str | None = None
    reason: str | None = None

    @property
    def ok(self) -> bool:
        return self.status is RewriteStatus.REWRITTEN


@dataclass(frozen=True)
class SourceMapMetadata:
    source_map_url: str
    compiled_path: str


@dataclass(frozen=True)
class PrettyMapping:
    """One emitted token: where it landed in the pretty text and where it came from.

    Lines are 1-based, columns 0-based UTF-16 code units.
    """

    pretty_line: int
    pretty_column: int
    minified_line: int
    minified_column: int
    name: str | None = None


@dataclass(frozen=True)
class PrettyPrintResult:
    text: str
    mappings: list[PrettyMapping]
