"""Tests for route_annotator.core.engine and route_annotator.config."""

import pytest

from route_annotator.config import Settings
from route_annotator.core.engine import annotate_route, request_points
from route_annotator.core.models import RoutePath, WaypointSet
from route_annotator.errors import InvalidSequencingInput


@pytest.fixture
def path():
    return RoutePath(
        points={"coordinates": [[13.0, 52.0, 34.0], [13.001, 52.0, 35.0], [13.002, 52.0, 35.5],
                                [13.003, 52.0, 36.0], [13.004, 52.0, 36.0]]},
        distance=274.0,
        time=60000,
        details={
            "surface": [[0, 2, "asphalt"], [2, 4, "gravel"]],
            "mapillary_coverage": [[0, 4, True]],
        },
        instructions=[
            {"interval": [0, 2], "time": 30000, "distance": 137.0, "street_name": "A",
             "mapillary_coverage": False},
            {"interval": [2, 4], "time": 30000, "distance": 137.0, "street_name": "B"},
        ],
    )


class TestAnnotateRoute:

    def test_surface(self, path):
        ann = annotate_route(path, "surface")
        assert ann.attribute == "surface"
        assert [(s.start_idx, s.end_idx_exclusive, s.value) for s in ann.segments] == [
            (0, 3, "asphalt"),
            (2, 5, "gravel"),
        ]
        assert {r.value_key for r in ann.stats} == {"asphalt", "gravel"}
        assert sum(r.total_distance_m for r in ann.stats) == pytest.approx(ann.polyline.total_distance_m)

    def test_default_attribute_and_coverage(self, path):
        ann = annotate_route(path)
        assert ann.attribute == "mapillary_coverage"
        # wholesale replace: instruction values only cover vertices 0..2
        assert ann.polyline.track("mapillary_coverage") == [False, False, False, None, None]
        assert ann.uncovered_distance_m == pytest.approx(ann.polyline.total_distance_m)

    def test_feature_collection(self, path):
        fc = annotate_route(path, "surface").feature_collection()
        assert len(fc["features"]) == 2

    def test_missing_attribute(self, path):
        ann = annotate_route(path, "road_class")
        assert ann.segments == []
        assert ann.stats == []
        assert len(ann.feature_collection()["features"]) == 1


class TestRequestPoints:

    def _set(self):
        ws = WaypointSet(start=(13.0, 52.0), end=(13.1, 52.0))
        ws.add((13.07, 52.02), payload="far")
        ws.add((13.02, 52.01), payload="near")
        return ws

    def test_sequenced(self):
        pts = request_points(self._set(), enabled=True, algorithm="nearest_neighbor")
        assert pts == [(13.0, 52.0), (13.02, 52.01), (13.07, 52.02), (13.1, 52.0)]

    def test_disabled(self):
        pts = request_points(self._set(), enabled=False)
        assert pts[1:3] == [(13.07, 52.02), (13.02, 52.01)]

    def test_locked(self):
        ws = self._set()
        ws.move(0, 0)
        pts = request_points(ws, enabled=True)
        assert pts[1:3] == [(13.07, 52.02), (13.02, 52.01)]

    def test_missing_anchor(self):
        with pytest.raises(InvalidSequencingInput):
            request_points(WaypointSet(start=(13.0, 52.0)))


class TestSettings:

    def test_defaults(self):
        s = Settings()
        assert s.optimization_enabled is True
        assert s.mapillary_replace_wholesale is True
        assert s.osm_way_search_radius == 5

    def test_env_override(self, monkeypatch):
        monkeypatch.setenv("ROUTE_ANNOTATOR_OPTIMIZATION_ALGORITHM", "greedy_insertion")
        monkeypatch.setenv("ROUTE_ANNOTATOR_MAPILLARY_REPLACE_WHOLESALE", "false")
        s = Settings()
        assert s.optimization_algorithm == "greedy_insertion"
        assert s.mapillary_replace_wholesale is False
