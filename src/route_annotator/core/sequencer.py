"""Order free waypoints between fixed start/end anchors.

Both heuristics work on great-circle distance only; the road-network cost
isn't known until the route has been requested. Ties go to the lowest
original index, so results are deterministic.
"""
from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Literal, Optional, Sequence

from route_annotator.config import settings
from route_annotator.core.models import Waypoint, WaypointSet
from route_annotator.errors import InvalidSequencingInput
from route_annotator.geo.distance import haversine_m, normalize_point

log = logging.getLogger(__name__)

Algorithm = Literal["nearest_neighbor", "greedy_insertion"]


def nearest_neighbor(start: Any, end: Any, free: Sequence[Any]) -> List[Any]:
    """Repeatedly visit the closest remaining waypoint, starting from *start*."""
    if len(free) <= 1:
        return list(free)

    remaining = list(free)
    coords = [normalize_point(p) for p in remaining]
    current = normalize_point(start)
    out: List[Any] = []

    while remaining:
        best = 0
        best_d = haversine_m(current, coords[0])
        for i in range(1, len(remaining)):
            d = haversine_m(current, coords[i])
            if d < best_d:
                best_d = d
                best = i
        out.append(remaining.pop(best))
        current = coords.pop(best)
    return out


def greedy_insertion(start: Any, end: Any, free: Sequence[Any]) -> List[Any]:
    """
    Cheapest insertion into the working tour ``[start, end]``.

    Each round inserts the (waypoint, edge) pair with the smallest detour
    ``d(prev, p) + d(p, next) - d(prev, next)``. The returned list is the
    free waypoints in tour order.
    """
    if len(free) <= 1:
        return list(free)

    remaining = list(range(len(free)))
    coords = [normalize_point(p) for p in free]
    # Tour holds coordinates; order holds indices into ``free`` (tour minus anchors)
    tour = [normalize_point(start), normalize_point(end)]
    order: List[int] = []

    while remaining:
        best_wp: Optional[int] = None
        best_edge = -1
        best_cost = float("inf")
        for wp in remaining:
            p = coords[wp]
            for e in range(len(tour) - 1):
                prev, nxt = tour[e], tour[e + 1]
                cost = haversine_m(prev, p) + haversine_m(p, nxt) - haversine_m(prev, nxt)
                if cost < best_cost:
                    best_cost = cost
                    best_wp = wp
                    best_edge = e

        if best_wp is None:
            # Non-finite costs; append in input order so the loop terminates
            best_wp = remaining[0]
            best_edge = len(tour) - 2
            log.debug("No finite insertion cost, appending waypoint %d", best_wp)

        tour.insert(best_edge + 1, coords[best_wp])
        order.insert(best_edge, best_wp)
        remaining.remove(best_wp)

    return [free[i] for i in order]


_ALGORITHMS: Dict[str, Callable[[Any, Any, Sequence[Any]], List[Any]]] = {
    "nearest_neighbor": nearest_neighbor,
    "greedy_insertion": greedy_insertion,
}


def sequence(
    start: Any,
    end: Any,
    free: Sequence[Any],
    algorithm: Optional[Algorithm] = None,
) -> List[Any]:
    """Permutation of *free* ordered by *algorithm*; anchors are never returned."""
    if start is None or end is None:
        raise InvalidSequencingInput("sequencing needs both a start and an end point")
    if algorithm is None:
        algorithm = settings.optimization_algorithm
    fn = _ALGORITHMS.get(algorithm)
    if fn is None:
        raise InvalidSequencingInput(f"unknown sequencing algorithm: {algorithm!r}")
    if len(free) <= 1:
        return list(free)
    return fn(start, end, free)


def resequence(waypoints: WaypointSet, algorithm: Optional[Algorithm] = None) -> List[Waypoint]:
    """
    New free-waypoint order for *waypoints*; the set itself is left untouched.

    Waypoint objects (and their payloads/ids) are returned as-is, so
    coincident waypoints stay distinguishable. A locked set keeps its order.
    """
    if waypoints.locked:
        return list(waypoints.free)
    return sequence(waypoints.start, waypoints.end, waypoints.free, algorithm)
