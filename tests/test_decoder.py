"""Tests for route_annotator.core.decoder."""

import logging

import pytest

from route_annotator.core.decoder import (
    decode,
    decode_details,
    decode_instructions,
    decode_intervals,
    decode_path,
    validate_tracks,
)
from route_annotator.core.models import Instruction, RoutePath


class TestDecodeIntervals:

    @pytest.mark.parametrize("n", [0, 1, 3, 10])
    def test_length_always_vertex_count(self, n):
        intervals = [[0, 2, "a"], [5, 1000, "b"], ["x", 3, "c"], [-4, -1, "d"], [2]]
        assert len(decode_intervals(intervals, n)) == n

    def test_clipping(self):
        track = decode_intervals([[5, 1000, "gravel"]], 10)
        assert track == [None] * 5 + ["gravel"] * 5

    def test_inclusive_bounds(self):
        assert decode_intervals([[1, 2, "x"]], 4) == [None, "x", "x", None]

    def test_malformed_skipped(self, caplog):
        with caplog.at_level(logging.DEBUG, logger="route_annotator.core.decoder"):
            track = decode_intervals([["a", 2, "x"], [0, None, "y"], [1, 1, "z"], "junk"], 3)
        assert track == [None, "z", None]
        assert "Skipped 3 malformed" in caplog.text

    def test_fully_out_of_range_skipped(self):
        assert decode_intervals([[7, 9, "x"]], 5) == [None] * 5

    def test_zero_vertices(self):
        assert decode_intervals([[0, 3, "x"]], 0) == []

    def test_later_interval_overwrites(self):
        assert decode_intervals([[0, 3, "a"], [2, 3, "b"]], 4) == ["a", "a", "b", "b"]

    def test_no_intervals_all_null(self):
        assert decode_details({"surface": []}, 3) == {"surface": [None, None, None]}


class TestDecodeInstructions:

    def test_empty(self):
        assert decode_instructions([], 5) == {}

    def test_defaults_for_missing_fields(self):
        tracks = decode_instructions([{"interval": [0, 1]}], 3)
        assert tracks["time"] == [0, 0, None]
        assert tracks["distance"] == [0, 0, None]
        assert tracks["street_name"] == ["", "", None]
        assert tracks["mapillary_coverage"] == [None, None, None]

    def test_values_written(self):
        tracks = decode_instructions(
            [
                Instruction(interval=[0, 1], time=1200, distance=80.5, street_name="Unter den Linden"),
                Instruction(interval=[1, 3], time=900, distance=50, street_name="Wilhelmstraße",
                            mapillary_coverage=True),
            ],
            4,
        )
        assert tracks["street_name"] == ["Unter den Linden", "Wilhelmstraße", "Wilhelmstraße", "Wilhelmstraße"]
        assert tracks["time"] == [1200, 900, 900, 900]
        assert tracks["mapillary_coverage"] == [None, True, True, True]

    def test_bad_interval_ignored(self):
        tracks = decode_instructions([{"interval": [0]}, {"interval": [1, 1], "time": 5}], 2)
        assert tracks["time"] == [None, 5]


class TestMerge:

    def test_instruction_owned_keys_replace_details(self):
        details = {"time": [[0, 2, 999]], "street_name": [[0, 2, "detail"]]}
        instructions = [{"interval": [0, 2], "time": 10, "street_name": "inst"}]
        tracks = decode(details, instructions, 3)
        assert tracks["time"] == [10, 10, 10]
        assert tracks["street_name"] == ["inst", "inst", "inst"]

    def test_details_kept_without_instructions(self):
        tracks = decode({"time": [[0, 1, 7]]}, [], 2)
        assert tracks == {"time": [7, 7]}

    def test_osm_way_id_backfill(self):
        details = {"osm_way_id": [[0, 3, 111]]}
        instructions = [{"interval": [0, 1], "osm_way_id": 222}, {"interval": [2, 3]}]
        tracks = decode(details, instructions, 4)
        assert tracks["osm_way_id"] == [222, 222, 111, 111]

    def test_osm_way_id_absent_everywhere(self):
        tracks = decode({}, [{"interval": [0, 1]}], 2)
        assert "osm_way_id" not in tracks

    def test_mapillary_wholesale_replace(self):
        details = {"mapillary_coverage": [[0, 3, False]]}
        instructions = [{"interval": [0, 1], "mapillary_coverage": True}]
        tracks = decode(details, instructions, 4, mapillary_replace_wholesale=True)
        # Detail values at 2..3 are discarded
        assert tracks["mapillary_coverage"] == [True, True, None, None]

    def test_mapillary_backfill_when_configured(self):
        details = {"mapillary_coverage": [[0, 3, False]]}
        instructions = [{"interval": [0, 1], "mapillary_coverage": True}]
        tracks = decode(details, instructions, 4, mapillary_replace_wholesale=False)
        assert tracks["mapillary_coverage"] == [True, True, False, False]

    def test_mapillary_detail_kept_if_instructions_empty(self):
        details = {"mapillary_coverage": [[0, 1, True]]}
        tracks = decode(details, [{"interval": [0, 1]}], 2)
        assert tracks["mapillary_coverage"] == [True, True]

    @pytest.mark.parametrize("n", [0, 2, 6])
    def test_every_track_has_vertex_count(self, n):
        details = {"surface": [[0, 99, "asphalt"]], "osm_way_id": [[1, 2, 5]]}
        instructions = [{"interval": [0, 50], "time": 1, "mapillary_coverage": False, "osm_way_id": 9}]
        for track in decode(details, instructions, n).values():
            assert len(track) == n


class TestDecodePath:

    def _path(self, **kw):
        base = {
            "points": {"coordinates": [[13.0, 52.0, 30.0], [13.001, 52.0, 31.0], [13.002, 52.0, 33.0]]},
            "details": {"surface": [[0, 1, "asphalt"], [1, 2, "gravel"]], "road_class": []},
            "instructions": [{"interval": [0, 2], "time": 60000, "distance": 137.0, "street_name": "A"}],
        }
        base.update(kw)
        return RoutePath(**base)

    def test_vertices_and_tracks(self):
        poly = decode_path(self._path())
        assert poly.vertex_count == 3
        assert poly.vertices[0].cum_dist_m == 0.0
        assert poly.vertices[2].cum_dist_m == pytest.approx(poly.total_distance_m)
        assert poly.track("surface") == ["asphalt", "gravel", "gravel"]
        assert poly.track("elevation") == [30.0, 31.0, 33.0]
        assert "road_class" not in poly.tracks

    def test_geometry_wrapper_and_2d(self):
        path = self._path(points={"geometry": {"coordinates": [[1.0, 2.0], [1.0, 2.1]]}})
        poly = decode_path(path)
        assert poly.vertex_count == 2
        assert "elevation" not in poly.tracks

    def test_no_points(self):
        poly = decode_path(RoutePath())
        assert poly.vertex_count == 0
        assert poly.total_distance_m == 0.0


class TestValidateTracks:

    def test_mismatch_logged(self, caplog):
        with caplog.at_level(logging.WARNING, logger="route_annotator.core.decoder"):
            errors = validate_tracks({"surface": [1, 2], "time": [1, 2, 3]}, 3, elevations=[1.0])
        assert len(errors) == 2
        assert "surface" in errors[1]
        assert "validation errors" in caplog.text

    def test_clean(self):
        assert validate_tracks({"surface": [1, 2]}, 2) == []
