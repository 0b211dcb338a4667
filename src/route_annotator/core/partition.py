"""
Split an attribute track into constant-value runs.

Two views over the same ``(track, vertices)`` pair:

* render partition: vertex runs for polyline coloring. Each closed run also
  takes the first vertex of the next run so adjacent lines touch.
* stats partition: edge ``i -> i+1`` belongs to vertex ``i``; edge lengths
  are summed per value with no overlap.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Sequence, Tuple

from shapely.geometry import LineString, Point

from route_annotator.config import settings
from route_annotator.contracts.route_contract import RenderSegment, StatRow
from route_annotator.core.colors import colorizer, is_true, to_rgba, value_label
from route_annotator.geo.distance import haversine_m, normalize_point

log = logging.getLogger(__name__)

COVERAGE_KEY = "mapillary_coverage"


def _at(track: Optional[Sequence[Any]], i: int) -> Any:
    if track is None or i >= len(track):
        return None
    return track[i]


def _same(a: Any, b: Any) -> bool:
    # bools must not compare equal to 0/1
    if isinstance(a, bool) or isinstance(b, bool):
        return a is b
    return a == b


def stat_key(attribute: str, value: Any) -> str:
    """Bucket key for a non-null track value."""
    if attribute == COVERAGE_KEY:
        return "true" if is_true(value) else "false"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


# ---------------------------------------------------------------------------
# Render partition
# ---------------------------------------------------------------------------

def partition_for_render(
    track: Optional[Sequence[Any]],
    points: Sequence[Any],
    attribute: str = "",
) -> List[RenderSegment]:
    """
    Maximal equal-value vertex runs, each extended by the next run's first vertex.

    A trailing run left with a single vertex is absorbed by the previous
    segment (which already ends on it). Fewer than two points -> no segments.
    """
    n = len(points)
    if n < 2:
        return []

    color = colorizer(attribute, track or ())
    segments: List[RenderSegment] = []
    run_start = 0
    run_value = _at(track, 0)

    for i in range(1, n):
        value = _at(track, i)
        if _same(value, run_value):
            continue
        segments.append(RenderSegment(
            start_idx=run_start,
            end_idx_exclusive=i + 1,
            value=run_value,
            color=color(run_value),
        ))
        run_start = i
        run_value = value

    if n - run_start >= 2:
        segments.append(RenderSegment(
            start_idx=run_start,
            end_idx_exclusive=n,
            value=run_value,
            color=color(run_value),
        ))
    return segments


def segments_to_feature_collection(
    segments: Sequence[RenderSegment],
    points: Sequence[Any],
    default_color: str = "#3b82f6",
) -> Dict[str, Any]:
    """GeoJSON FeatureCollection of colored LineStrings for the map layer."""
    coords = [list(normalize_point(p)) for p in points]
    if not segments:
        # No attribute data: the whole line in one default-colored feature
        features = [{
            "type": "Feature",
            "geometry": {"type": "LineString", "coordinates": coords},
            "properties": {"color": default_color},
        }] if coords else []
        return {"type": "FeatureCollection", "features": features}

    return {
        "type": "FeatureCollection",
        "features": [
            {
                "type": "Feature",
                "geometry": {
                    "type": "LineString",
                    "coordinates": coords[seg.start_idx:seg.end_idx_exclusive],
                },
                "properties": {"color": seg.color, "value": seg.value},
            }
            for seg in segments
        ],
    }


# ---------------------------------------------------------------------------
# Stats partition
# ---------------------------------------------------------------------------

def _edges(track: Optional[Sequence[Any]], vertices: Sequence[Any]):
    """Yield ``(i, value, length_m)`` for every edge with a non-null start value."""
    if track is None:
        return
    pts = [normalize_point(v) for v in vertices]
    for i in range(min(len(track), len(pts)) - 1):
        value = track[i]
        if value is None:
            continue
        yield i, value, haversine_m(pts[i], pts[i + 1])


def partition_for_stats(
    track: Optional[Sequence[Any]],
    vertices: Sequence[Any],
    attribute: str = "",
) -> Dict[str, float]:
    """Total edge length in metres per value key."""
    totals: Dict[str, float] = {}
    for _, value, dist in _edges(track, vertices):
        key = stat_key(attribute, value)
        totals[key] = totals.get(key, 0.0) + dist
    return totals


def stats_rows(
    attribute: str,
    track: Optional[Sequence[Any]],
    vertices: Sequence[Any],
    opacity: Optional[float] = None,
) -> List[StatRow]:
    """Stats-panel rows, longest first."""
    if opacity is None:
        opacity = settings.stats_opacity

    totals: Dict[str, float] = {}
    first_value: Dict[str, Any] = {}
    for _, value, dist in _edges(track, vertices):
        key = stat_key(attribute, value)
        totals[key] = totals.get(key, 0.0) + dist
        first_value.setdefault(key, value)

    color = colorizer(attribute, track or ())
    rows = [
        StatRow(
            label=value_label(attribute, key),
            value_key=key,
            total_distance_m=dist,
            color=to_rgba(color(first_value[key]), opacity),
        )
        for key, dist in totals.items()
    ]
    rows.sort(key=lambda r: r.total_distance_m, reverse=True)
    return rows


def edges_matching(
    attribute: str,
    track: Optional[Sequence[Any]],
    vertices: Sequence[Any],
    value_key: str,
) -> List[Tuple[int, int]]:
    """Edges ``(i, i+1)`` whose start value falls in the *value_key* bucket."""
    if track is None:
        return []
    n = min(len(track), len(vertices))
    return [
        (i, i + 1)
        for i in range(n - 1)
        if track[i] is not None and stat_key(attribute, track[i]) == value_key
    ]


def uncovered_distance_m(track: Optional[Sequence[Any]], vertices: Sequence[Any]) -> float:
    """Length of edges without Mapillary coverage (start value False, 0 or null)."""
    if track is None or len(vertices) < 2:
        return 0.0
    pts = [normalize_point(v) for v in vertices]
    total = 0.0
    for i in range(len(pts) - 1):
        value = _at(track, i)
        if value is None or value is False or (not isinstance(value, bool) and value == 0):
            total += haversine_m(pts[i], pts[i + 1])
    return total


# ---------------------------------------------------------------------------
# Point lookups (hover / click)
# ---------------------------------------------------------------------------

def nearest_edge(points: Sequence[Any], target: Any) -> Optional[int]:
    """Index ``i`` of the edge ``i -> i+1`` closest to *target* (planar lon/lat)."""
    pts = [normalize_point(p) for p in points]
    if len(pts) < 2:
        return None
    query = Point(normalize_point(target))
    best_i: Optional[int] = None
    best_d = float("inf")
    for i in range(len(pts) - 1):
        a, b = pts[i], pts[i + 1]
        geom = Point(a) if a == b else LineString([a, b])
        d = geom.distance(query)
        if d < best_d:
            best_d = d
            best_i = i
    return best_i


def nearest_vertex(points: Sequence[Any], target: Any) -> Optional[int]:
    pts = [normalize_point(p) for p in points]
    if not pts:
        return None
    query = Point(normalize_point(target))
    dists = [Point(p).distance(query) for p in pts]
    return dists.index(min(dists))


def value_at_edge(track: Optional[Sequence[Any]], edge_index: Optional[int]) -> Any:
    """Value of an edge: the value at its start vertex."""
    if edge_index is None or edge_index < 0:
        return None
    return _at(track, edge_index)


def osm_way_id_near(
    track: Optional[Sequence[Any]],
    index: int,
    radius: Optional[int] = None,
) -> Any:
    """Way id at *index*, else the first one found within ``index ± radius``."""
    if track is None or not track:
        return None
    if radius is None:
        radius = settings.osm_way_search_radius
    value = _at(track, index)
    if value is not None:
        return value
    for i in range(max(0, index - radius), min(len(track) - 1, index + radius) + 1):
        if track[i] is not None:
            log.debug("osm_way_id at %d missing, using neighbour %d", index, i)
            return track[i]
    return None
