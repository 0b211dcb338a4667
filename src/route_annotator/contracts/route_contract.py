# path: route-annotator/src/route_annotator/contracts/route_contract.py

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

Scalar = Any  # str | int | float | bool | None
Track = List[Scalar]


@dataclass(frozen=True)
class Vertex:
    i: int
    lon: float
    lat: float
    cum_dist_m: float
    ele: Optional[float] = None

    @property
    def lonlat(self) -> Tuple[float, float]:
        return (self.lon, self.lat)


@dataclass(frozen=True)
class AnnotatedPolyline:
    vertices: List[Vertex]
    tracks: Dict[str, Track] = field(default_factory=dict)
    total_distance_m: float = 0.0

    @property
    def vertex_count(self) -> int:
        return len(self.vertices)

    def track(self, key: str) -> Optional[Track]:
        return self.tracks.get(key)


@dataclass(frozen=True)
class RenderSegment:
    start_idx: int
    end_idx_exclusive: int  # includes the shared boundary vertex
    value: Scalar
    color: str

    @property
    def vertex_count(self) -> int:
        return self.end_idx_exclusive - self.start_idx


@dataclass(frozen=True)
class StatRow:
    label: str
    value_key: str
    total_distance_m: float
    color: str

    @property
    def total_distance_km(self) -> float:
        return self.total_distance_m / 1000.0
