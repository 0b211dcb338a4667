from __future__ import annotations

from typing import Any, Dict, List, Optional, Tuple
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field

from route_annotator.errors import UnknownWaypoint

LonLat = Tuple[float, float]


def _new_waypoint_id() -> str:
    return uuid4().hex[:12]


# ---------------------------------------------------------------------------
# Routing-engine payload
# ---------------------------------------------------------------------------

class Instruction(BaseModel):
    """One turn instruction; ``interval`` is an inclusive vertex range."""

    model_config = ConfigDict(extra="allow")

    interval: Optional[List[Any]] = None
    time: Optional[float] = None
    distance: Optional[float] = None
    street_name: Optional[str] = None

    # Only present when the profile exposes them; absence != explicit null
    mapillary_coverage: Optional[Any] = None
    osm_way_id: Optional[Any] = None

    def carries(self, name: str) -> bool:
        return name in self.model_fields_set


class RoutePath(BaseModel):
    """
    A single path from the routing engine response.

    ``points`` may be a bare coordinate list, ``{"coordinates": [...]}`` or a
    GeoJSON-ish ``{"geometry": {"coordinates": [...]}}``.
    ``time`` is in milliseconds, ``distance`` in metres.
    """

    model_config = ConfigDict(extra="allow")

    points: Any = None
    distance: float = 0.0
    time: float = 0.0
    ascend: Optional[float] = None
    descend: Optional[float] = None

    # key -> [[startIndex, endIndex, value], ...]; entries are not validated
    details: Dict[str, List[Any]] = Field(default_factory=dict)
    instructions: List[Instruction] = Field(default_factory=list)

    @property
    def coordinates(self) -> List[List[float]]:
        pts = self.points
        if pts is None:
            return []
        if isinstance(pts, dict):
            if "coordinates" in pts:
                return list(pts["coordinates"] or [])
            geom = pts.get("geometry") or {}
            return list(geom.get("coordinates") or [])
        return list(pts)


# ---------------------------------------------------------------------------
# Waypoints
# ---------------------------------------------------------------------------

class Waypoint(BaseModel):
    lon: float
    lat: float

    # Opaque, travels with the coordinate (display label, address, ...)
    payload: Any = None

    # Assigned once at creation; identity under reordering
    id: str = Field(default_factory=_new_waypoint_id)

    @property
    def lonlat(self) -> LonLat:
        return (self.lon, self.lat)


class WaypointSet(BaseModel):
    start: Optional[LonLat] = None
    end: Optional[LonLat] = None
    free: List[Waypoint] = Field(default_factory=list)

    # Set by manual reorder/delete, suppresses automatic resequencing
    locked: bool = False

    # ---- Mutations owned by the embedding application ----
    def add(self, point: LonLat, payload: Any = None) -> Waypoint:
        wp = Waypoint(lon=point[0], lat=point[1], payload=payload)
        self.free.append(wp)
        # A new waypoint re-enables optimization
        self.locked = False
        return wp

    def remove(self, index: int) -> Waypoint:
        if not 0 <= index < len(self.free):
            raise UnknownWaypoint(index)
        wp = self.free.pop(index)
        # Deleting counts as a manual edit; an emptied set starts fresh
        self.locked = bool(self.free)
        return wp

    def move(self, src: int, dst: int) -> None:
        n = len(self.free)
        if not 0 <= src < n or not 0 <= dst < n:
            raise UnknownWaypoint((src, dst))
        wp = self.free.pop(src)
        self.free.insert(dst, wp)
        self.locked = True

    def index_of(self, waypoint_id: str) -> int:
        for i, wp in enumerate(self.free):
            if wp.id == waypoint_id:
                return i
        raise UnknownWaypoint(waypoint_id)

    # ---- Read-only views ----
    def with_order(self, ordered: List[Waypoint]) -> WaypointSet:
        return self.model_copy(update={"free": list(ordered)})

    def free_points(self) -> List[LonLat]:
        return [wp.lonlat for wp in self.free]

    def all_points(self) -> List[LonLat]:
        """``[start, *free, end]``, skipping missing anchors."""
        out: List[LonLat] = []
        if self.start is not None:
            out.append(self.start)
        out.extend(self.free_points())
        if self.end is not None:
            out.append(self.end)
        return out
