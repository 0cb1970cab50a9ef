from __future__ import annotations

"""Source map V3 building and querying.

Decoding is delegated to the `sourcemap` library; this module layers the
lookups a debugger needs on top of its token list (bias-aware lookups in both
directions and "all generated positions" queries) and provides a small
generator for writing maps.

The `sourcemap` library uses 0-based lines. Everything exposed here uses
1-based lines and 0-based columns.
"""

import json
from bisect import bisect_left, bisect_right
from dataclasses import dataclass
from typing import Any

import sourcemap

from .errors import SourceMapBuildError, SourceMapDecodeError
from .types import Bias, GeneratedPosition, OriginalPosition, SourceMapMetadata

_B64 = "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789+/"


def encode_vlq(value: int) -> str:
    """Encode one signed integer as base64 VLQ."""

    # The low bit of the first digit is the sign.
    vlq = ((-value) << 1) | 1 if value < 0 else value << 1
    out = []
    while True:
        digit = vlq & 0b11111
        vlq >>= 5
        if vlq:
            digit |= 0b100000
        out.append(_B64[digit])
        if not vlq:
            return "".join(out)


@dataclass(frozen=True)
class _Mapping:
    generated_line: int
    generated_column: int
    source: str | None = None
    original_line: int | None = None
    original_column: int | None = None
    name: str | None = None

    def sort_key(self) -> tuple:
        return (
            self.generated_line,
            self.generated_column,
            self.source or "",
            self.original_line or 0,
            self.original_column or 0,
            self.name or "",
        )


class SourceMapBuilder:
    """Collects mappings and serializes them as a V3 source map."""

    def __init__(self, file: str | None = None, source_root: str | None = None) -> None:
        self.file = file
        self.source_root = source_root
        self._mappings: set[_Mapping] = set()
        self._sources: list[str] = []
        self._names: list[str] = []
        self._contents: dict[str, str] = {}

    def _add_source(self, source: str) -> None:
        if source not in self._sources:
            self._sources.append(source)

    def add_mapping(
        self,
        generated: GeneratedPosition,
        original: OriginalPosition | None = None,
    ) -> None:
        if generated.is_null or generated.line < 1 or generated.column < 0:
            raise SourceMapBuildError(f"Invalid generated position: {generated!r}")

        if original is None:
            self._mappings.add(_Mapping(generated.line, generated.column))
            return

        if original.is_null or original.line < 1 or original.column < 0:
            raise SourceMapBuildError(f"Invalid original position: {original!r}")

        self._add_source(original.source)
        if original.name is not None and original.name not in self._names:
            self._names.append(original.name)

        self._mappings.add(
            _Mapping(
                generated.line,
                generated.column,
                original.source,
                original.line,
                original.column,
                original.name,
            )
        )

    def set_source_content(self, source: str, content: str | None) -> None:
        if content is None:
            self._contents.pop(source, None)
            return
        self._add_source(source)
        self._contents[source] = content

    def _serialize_mappings(self) -> str:
        source_index = {s: i for i, s in enumerate(self._sources)}
        name_index = {n: i for i, n in enumerate(self._names)}

        by_line: dict[int, list[_Mapping]] = {}
        for mapping in sorted(self._mappings, key=_Mapping.sort_key):
            by_line.setdefault(mapping.generated_line, []).append(mapping)

        # Source, original position and name deltas carry across lines;
        # the generated column resets on every line.
        prev_source = prev_line = prev_column = prev_name = 0
        lines = []
        for line in range(1, max(by_line, default=0) + 1):
            prev_generated_column = 0
            segments = []
            for mapping in by_line.get(line, []):
                segment = encode_vlq(mapping.generated_column - prev_generated_column)
                prev_generated_column = mapping.generated_column

                if mapping.source is not None:
                    index = source_index[mapping.source]
                    original_line = mapping.original_line - 1
                    segment += encode_vlq(index - prev_source)
                    segment += encode_vlq(original_line - prev_line)
                    segment += encode_vlq(mapping.original_column - prev_column)
                    prev_source, prev_line, prev_column = index, original_line, mapping.original_column

                    if mapping.name is not None:
                        index = name_index[mapping.name]
                        segment += encode_vlq(index - prev_name)
                        prev_name = index

                segments.append(segment)
            lines.append(",".join(segments))

        return ";".join(lines)

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"version": 3}
        if self.file is not None:
            result["file"] = self.file
        if self.source_root is not None:
            result["sourceRoot"] = self.source_root
        result["sources"] = list(self._sources)
        result["names"] = list(self._names)
        result["mappings"] = self._serialize_mappings()
        if self._contents:
            result["sourcesContent"] = [self._contents.get(s) for s in self._sources]
        return result

    def to_json(self) -> str:
        return json.dumps(self.to_dict())


@dataclass(frozen=True)
class _Entry:
    generated_line: int
    generated_column: int
    source: str | None
    original_line: int | None
    original_column: int | None
    name: str | None

    @classmethod
    def from_token(cls, token: Any) -> "_Entry":
        if token.src is None:
            return cls(token.dst_line + 1, token.dst_col, None, None, None, None)
        return cls(token.dst_line + 1, token.dst_col, token.src, token.src_line + 1, token.src_col, token.name)

    @property
    def generated(self) -> GeneratedPosition:
        return GeneratedPosition(self.generated_line, self.generated_column)

    @property
    def original(self) -> OriginalPosition:
        if self.source is None:
            return OriginalPosition.null()
        return OriginalPosition(self.source, self.original_line, self.original_column, self.name)


class SourceMap:
    """Immutable, queryable view over a decoded source map.

    `metadata` records which compiled file the map is bound to and where it
    was loaded from. `sources` lists the sources callers may query.
    """

    def __init__(
        self,
        index: Any,
        metadata: SourceMapMetadata,
        source_root: str = "",
        sources: list[str] | None = None,
    ) -> None:
        self.metadata = metadata
        self.source_root = source_root
        self._raw: dict[str, Any] = dict(getattr(index, "raw", None) or {})

        entries = [_Entry.from_token(token) for token in index.tokens]

        self._generated = sorted(entries, key=lambda e: (e.generated_line, e.generated_column))
        self._generated_keys = [(e.generated_line, e.generated_column) for e in self._generated]

        self._by_source: dict[str, list[_Entry]] = {}
        for entry in entries:
            if entry.source is not None:
                self._by_source.setdefault(entry.source, []).append(entry)
        self._original_keys: dict[str, list[tuple[int, int]]] = {}
        for source, group in self._by_source.items():
            group.sort(key=lambda e: (e.original_line, e.original_column, e.generated_line, e.generated_column))
            self._original_keys[source] = [(e.original_line, e.original_column) for e in group]

        if sources is None:
            sources = list(getattr(index, "sources", None) or self._raw.get("sources", []))
        self._sources = list(sources)

    @classmethod
    def from_json(
        cls,
        content: str,
        metadata: SourceMapMetadata,
        source_root: str = "",
        sources: list[str] | None = None,
    ) -> "SourceMap":
        try:
            index = sourcemap.loads(content)
        # The library's own decode errors subclass ValueError.
        except (ValueError, TypeError, KeyError, IndexError) as e:
            raise SourceMapDecodeError(f"Invalid source map {metadata.source_map_url!r}: {e}") from e
        return cls(index, metadata, source_root, sources)

    @property
    def sources(self) -> list[str]:
        return list(self._sources)

    @property
    def compiled_path(self) -> str:
        return self.metadata.compiled_path

    def source_content_for(self, source: str) -> str | None:
        contents = self._raw.get("sourcesContent") or []
        raw_sources = self._raw.get("sources") or []
        for candidates in (raw_sources, self._sources):
            if source in candidates:
                index = candidates.index(source)
                if index < len(contents):
                    return contents[index]
        return None

    def original_position_for(
        self,
        position: GeneratedPosition,
        bias: Bias = Bias.GREATEST_LOWER_BOUND,
    ) -> OriginalPosition:
        """Original position for a generated one, searching its line only."""

        if position.is_null:
            return OriginalPosition.null()

        needle = (position.line, position.column)
        keys = self._generated_keys
        if bias is Bias.GREATEST_LOWER_BOUND:
            i = bisect_right(keys, needle) - 1
            if i < 0:
                return OriginalPosition.null()
            while i > 0 and keys[i - 1] == keys[i]:
                i -= 1
        else:
            i = bisect_left(keys, needle)
            if i >= len(keys):
                return OriginalPosition.null()

        entry = self._generated[i]
        if entry.generated_line != position.line:
            return OriginalPosition.null()
        return entry.original

    def generated_position_for(
        self,
        source: str,
        line: int,
        column: int,
        bias: Bias = Bias.GREATEST_LOWER_BOUND,
    ) -> GeneratedPosition:
        """Generated position for an original one within `source`.

        Among mappings sharing the chosen original position, the earliest
        generated position wins.
        """

        group = self._by_source.get(source)
        if not group:
            return GeneratedPosition.null()

        keys = self._original_keys[source]
        needle = (line, column)
        if bias is Bias.GREATEST_LOWER_BOUND:
            i = bisect_right(keys, needle) - 1
            if i < 0:
                return GeneratedPosition.null()
            i = bisect_left(keys, keys[i])
        else:
            i = bisect_left(keys, needle)
            if i >= len(keys):
                return GeneratedPosition.null()

        return group[i].generated

    def all_generated_positions_for(
        self,
        source: str,
        line: int,
        column: int | None = None,
    ) -> list[GeneratedPosition]:
        """Every generated position for an original line.

        With a column, only mappings at the first mapped column at or after
        it on that line are returned.
        """

        group = self._by_source.get(source)
        if not group:
            return []

        keys = self._original_keys[source]
        i = bisect_left(keys, (line, column if column is not None else -1))
        if i >= len(keys) or keys[i][0] != line:
            return []

        wanted = keys[i]
        results = []
        while i < len(keys) and keys[i][0] == line:
            if column is not None and keys[i] != wanted:
                break
            results.append(group[i].generated)
            i += 1

        results.sort(key=lambda p: (p.line, p.column))
        return results

    def to_dict(self) -> dict[str, Any]:
        return dict(self._raw)

    def to_json(self) -> str:
        return json.dumps(self._raw)
