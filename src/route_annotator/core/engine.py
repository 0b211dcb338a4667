from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from route_annotator.config import settings
from route_annotator.contracts.route_contract import AnnotatedPolyline, RenderSegment, StatRow
from route_annotator.core.decoder import decode_path
from route_annotator.core.models import RoutePath, WaypointSet
from route_annotator.core.partition import (
    COVERAGE_KEY,
    partition_for_render,
    segments_to_feature_collection,
    stats_rows,
    uncovered_distance_m,
)
from route_annotator.core.sequencer import Algorithm, resequence
from route_annotator.errors import InvalidSequencingInput


@dataclass(frozen=True)
class RouteAnnotation:
    polyline: AnnotatedPolyline
    attribute: str
    segments: List[RenderSegment] = field(default_factory=list)
    stats: List[StatRow] = field(default_factory=list)
    uncovered_distance_m: float = 0.0

    def feature_collection(self) -> Dict[str, Any]:
        return segments_to_feature_collection(self.segments, self.polyline.vertices)


def annotate_route(path: RoutePath, attribute: Optional[str] = None) -> RouteAnnotation:
    """
    Decode *path* and build the render segments and stats rows for *attribute*.

    An attribute the path does not carry gives no segments; the map then
    draws the whole line in the default color.
    """
    attribute = attribute or settings.default_attribute
    polyline = decode_path(path)
    track = polyline.track(attribute)

    return RouteAnnotation(
        polyline=polyline,
        attribute=attribute,
        segments=partition_for_render(track, polyline.vertices, attribute) if track is not None else [],
        stats=stats_rows(attribute, track, polyline.vertices),
        uncovered_distance_m=uncovered_distance_m(polyline.track(COVERAGE_KEY), polyline.vertices),
    )


def request_points(
    waypoints: WaypointSet,
    *,
    enabled: Optional[bool] = None,
    algorithm: Optional[Algorithm] = None,
) -> List[Tuple[float, float]]:
    """``[start, *free, end]`` for the routing request, free waypoints sequenced when allowed."""
    if waypoints.start is None or waypoints.end is None:
        raise InvalidSequencingInput("a routing request needs both a start and an end point")
    if enabled is None:
        enabled = settings.optimization_enabled

    free = list(waypoints.free)
    if enabled and len(free) > 1:
        free = resequence(waypoints, algorithm)
    return [tuple(waypoints.start), *(wp.lonlat for wp in free), tuple(waypoints.end)]
