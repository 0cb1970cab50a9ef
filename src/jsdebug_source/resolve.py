from __future__ import annotations

"""Choosing the best generated position for a UI location.

`generated_position_for` with a greatest-lower-bound bias may land on an
unrelated mapping when the exact location has none. We also collect every
mapping for the location and keep whichever maps back closest to the
requested line.
"""

from .sourcemap import SourceMap
from .types import Bias, GeneratedPosition, MappingCandidate, UiLocation

UNRESOLVED_VARIANCE = 10e10


def _variance(position: GeneratedPosition, ui_location: UiLocation, source_map: SourceMap) -> float:
    if position.is_null:
        return UNRESOLVED_VARIANCE
    original = source_map.original_position_for(position)
    if original.line is None:
        return UNRESOLVED_VARIANCE
    return abs(ui_location.line - original.line)


def _sort_key(candidate: MappingCandidate) -> tuple:
    position = candidate.position
    if position.is_null:
        return (candidate.variance, 1, 0, 0)
    return (candidate.variance, 0, position.line, position.column)


def mapping_candidates(source_url: str, ui_location: UiLocation, source_map: SourceMap) -> list[MappingCandidate]:
    """All candidates for `ui_location`, best first. Never empty."""

    column = ui_location.to_map_column()

    baseline = source_map.generated_position_for(
        source_url,
        ui_location.line,
        column,
        bias=Bias.GREATEST_LOWER_BOUND,
    )

    candidates = [
        MappingCandidate(position, _variance(position, ui_location, source_map))
        for position in source_map.all_generated_positions_for(source_url, ui_location.line, column)
    ]
    candidates.append(MappingCandidate(baseline, _variance(baseline, ui_location, source_map)))

    # Stable: among full ties the exact-match candidates stay ahead of the baseline.
    candidates.sort(key=_sort_key)
    return candidates


def get_optimal_compiled_position(
    source_url: str,
    ui_location: UiLocation,
    source_map: SourceMap,
) -> GeneratedPosition:
    return mapping_candidates(source_url, ui_location, source_map)[0].position
