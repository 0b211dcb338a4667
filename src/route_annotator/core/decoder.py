"""Expand interval-encoded route details into dense per-vertex tracks."""
from __future__ import annotations

import logging
from numbers import Integral, Real
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Union

from route_annotator.config import settings
from route_annotator.contracts.route_contract import AnnotatedPolyline, Track, Vertex
from route_annotator.core.models import Instruction, RoutePath
from route_annotator.geo.distance import cumulative_distances

log = logging.getLogger(__name__)

# Tracks the instruction list always owns when it's present
INSTRUCTION_OWNED = ("time", "distance", "street_name")
# Fallback written for a covered vertex when the instruction lacks the field
_INSTRUCTION_DEFAULTS = {"time": 0, "distance": 0, "street_name": ""}


def _bound(x: Any) -> Optional[int]:
    if isinstance(x, bool) or not isinstance(x, Real):
        return None
    if isinstance(x, Integral):
        return int(x)
    if float(x).is_integer():
        return int(x)
    return None


def _fill(track: Track, start: Any, end: Any, value: Any) -> bool:
    """Write *value* over ``[start, end]`` clipped to the track. False if skipped."""
    lo, hi = _bound(start), _bound(end)
    n = len(track)
    if lo is None or hi is None or lo > hi or hi < 0 or lo >= n:
        return False
    for i in range(max(lo, 0), min(hi, n - 1) + 1):
        track[i] = value
    return True


def _has_values(track: Optional[Track]) -> bool:
    return track is not None and any(v is not None for v in track)


# ---------------------------------------------------------------------------
# Per-source decoding
# ---------------------------------------------------------------------------

def decode_intervals(intervals: Iterable[Any], vertex_count: int) -> Track:
    """Dense track from ``[start, end, value]`` triples; malformed entries are skipped."""
    track: Track = [None] * max(vertex_count, 0)
    skipped = 0
    for entry in intervals or ():
        if not isinstance(entry, Sequence) or isinstance(entry, str) or len(entry) < 3:
            skipped += 1
            continue
        if not _fill(track, entry[0], entry[1], entry[2]):
            skipped += 1
    if skipped:
        log.debug("Skipped %d malformed interval(s) (vertex_count=%d)", skipped, vertex_count)
    return track


def decode_details(details: Mapping[str, Iterable[Any]], vertex_count: int) -> Dict[str, Track]:
    """One track per detail key."""
    return {key: decode_intervals(intervals, vertex_count) for key, intervals in (details or {}).items()}


def decode_instructions(
    instructions: Sequence[Union[Instruction, Mapping[str, Any]]],
    vertex_count: int,
) -> Dict[str, Track]:
    """
    Tracks sourced from the instruction list.

    Returns ``time``/``distance``/``street_name`` whenever there is at least
    one instruction, plus ``mapillary_coverage``/``osm_way_id`` tracks that may
    be all-null (the merge step decides what to do with those).
    """
    n = max(vertex_count, 0)
    if not instructions:
        return {}

    out: Dict[str, Track] = {
        "time": [None] * n,
        "distance": [None] * n,
        "street_name": [None] * n,
        "mapillary_coverage": [None] * n,
        "osm_way_id": [None] * n,
    }
    for raw in instructions:
        inst = raw if isinstance(raw, Instruction) else Instruction.model_validate(raw)
        interval = inst.interval
        if not interval or len(interval) != 2:
            continue
        start, end = interval
        for key in INSTRUCTION_OWNED:
            val = getattr(inst, key)
            _fill(out[key], start, end, val if val else _INSTRUCTION_DEFAULTS[key])
        for key in ("mapillary_coverage", "osm_way_id"):
            if inst.carries(key):
                _fill(out[key], start, end, getattr(inst, key))
    return out


# ---------------------------------------------------------------------------
# Merge
# ---------------------------------------------------------------------------

def _backfill(primary: Track, fallback: Optional[Track]) -> Track:
    if fallback is None:
        return list(primary)
    return [p if p is not None else f for p, f in zip(primary, fallback)]


def decode(
    details: Mapping[str, Iterable[Any]],
    instructions: Sequence[Union[Instruction, Mapping[str, Any]]],
    vertex_count: int,
    *,
    mapillary_replace_wholesale: Optional[bool] = None,
) -> Dict[str, Track]:
    """
    Decode detail and instruction sources and merge them into one track per key.

    Merge rules:
      - time / distance / street_name: instruction track replaces the detail one
      - osm_way_id: instruction value per vertex, null gaps back-filled from details
      - mapillary_coverage: instruction track replaces the detail one wholesale
        when it holds any value; otherwise the detail track is kept.
        With ``mapillary_replace_wholesale=False`` it back-fills like osm_way_id.
    """
    if mapillary_replace_wholesale is None:
        mapillary_replace_wholesale = settings.mapillary_replace_wholesale

    tracks = decode_details(details, vertex_count)
    inst = decode_instructions(instructions, vertex_count)
    if not inst:
        return tracks

    for key in INSTRUCTION_OWNED:
        tracks[key] = inst[key]

    way_ids = _backfill(inst["osm_way_id"], tracks.get("osm_way_id"))
    if _has_values(way_ids):
        tracks["osm_way_id"] = way_ids

    coverage = inst["mapillary_coverage"]
    if _has_values(coverage):
        if mapillary_replace_wholesale:
            tracks["mapillary_coverage"] = coverage
        else:
            tracks["mapillary_coverage"] = _backfill(coverage, tracks.get("mapillary_coverage"))

    return tracks


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------

def validate_tracks(
    tracks: Mapping[str, Sequence[Any]],
    vertex_count: int,
    elevations: Optional[Sequence[Any]] = None,
) -> List[str]:
    """Length-mismatch messages for tracks that don't line up with the vertices (logged as warnings)."""
    errors: List[str] = []
    if elevations and vertex_count and len(elevations) != vertex_count:
        errors.append(f"Elevation count ({len(elevations)}) doesn't match coordinates ({vertex_count})")
    for key, values in tracks.items():
        if vertex_count and len(values) != vertex_count:
            errors.append(f"Track '{key}' length ({len(values)}) doesn't match coordinates ({vertex_count})")
    if errors:
        log.warning("Route track validation errors: %s", errors)
    return errors


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def decode_path(path: RoutePath, *, mapillary_replace_wholesale: Optional[bool] = None) -> AnnotatedPolyline:
    """Build an ``AnnotatedPolyline`` (vertices + dense tracks) from one engine path."""
    coords = path.coordinates
    cum, total = cumulative_distances(coords)

    vertices: List[Vertex] = []
    for i, c in enumerate(coords):
        ele = float(c[2]) if len(c) > 2 and c[2] is not None else None
        vertices.append(Vertex(i=i, lon=float(c[0]), lat=float(c[1]), cum_dist_m=cum[i], ele=ele))

    tracks = decode(
        path.details,
        path.instructions,
        len(vertices),
        mapillary_replace_wholesale=mapillary_replace_wholesale,
    )
    # Keys the engine listed without any interval carry no information
    for key, intervals in path.details.items():
        if not intervals and not _has_values(tracks.get(key)):
            tracks.pop(key, None)
    if any(v.ele is not None for v in vertices):
        tracks["elevation"] = [v.ele for v in vertices]

    validate_tracks(tracks, len(vertices))
    return AnnotatedPolyline(vertices=vertices, tracks=tracks, total_distance_m=total)
