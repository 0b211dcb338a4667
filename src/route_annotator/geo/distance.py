"""Great-circle distance helpers for lon/lat points."""
from __future__ import annotations

from collections.abc import Mapping, Sequence
from math import atan2, cos, radians, sin, sqrt
from typing import Any, Iterable, List, Tuple

LonLat = Tuple[float, float]

EARTH_RADIUS_M = 6_371_000.0


# ---------------------------------------------------------------------------
# Point normalization
# ---------------------------------------------------------------------------

def normalize_point(point: Any) -> LonLat:
    """
    Coerce a point into a ``(lon, lat)`` tuple.

    Accepts ``[lon, lat]`` / ``(lon, lat, ele)`` sequences, mappings with
    ``lon`` (or ``lng``) and ``lat`` keys, and objects exposing the same
    attributes (``Vertex``, ``Waypoint``).
    """
    if isinstance(point, Mapping):
        lon = point["lon"] if "lon" in point else point["lng"]
        return float(lon), float(point["lat"])
    if isinstance(point, Sequence) and not isinstance(point, str):
        return float(point[0]), float(point[1])
    lon = getattr(point, "lon", None)
    if lon is None:
        lon = getattr(point, "lng")
    return float(lon), float(point.lat)


# ---------------------------------------------------------------------------
# Distances
# ---------------------------------------------------------------------------

def haversine_m(a: LonLat, b: LonLat) -> float:
    """Great-circle distance in metres between two normalized ``(lon, lat)`` points."""
    lon1, lat1 = a[0], a[1]
    lon2, lat2 = b[0], b[1]
    lat1r, lat2r = radians(lat1), radians(lat2)
    dlat = radians(lat2 - lat1)
    dlon = radians(lon2 - lon1)
    h = sin(dlat / 2) ** 2 + cos(lat1r) * cos(lat2r) * sin(dlon / 2) ** 2
    return EARTH_RADIUS_M * 2 * atan2(sqrt(h), sqrt(1 - h))


def cumulative_distances(points: Iterable[Any]) -> Tuple[List[float], float]:
    """Running distance from the first point; returns ``(distances, total)``."""
    pts = [normalize_point(p) for p in points]
    if not pts:
        return [], 0.0

    cum: List[float] = [0.0]
    for i in range(1, len(pts)):
        cum.append(cum[-1] + haversine_m(pts[i - 1], pts[i]))
    return cum, cum[-1]


def polyline_length(points: Iterable[Any]) -> float:
    return cumulative_distances(points)[1]
