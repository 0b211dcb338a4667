"""Tests for the command line entry points."""

import json

import pytest

from route_annotator.cli import main
from route_annotator.core.engine import annotate_route
from route_annotator.core.models import RoutePath
from route_annotator.tools.make_map import build_html

ROUTE = {
    "paths": [{
        "points": {"coordinates": [[13.0, 52.0], [13.01, 52.0], [13.02, 52.0], [13.03, 52.0]]},
        "details": {"surface": [[0, 1, "asphalt"], [1, 3, "gravel"]]},
        "instructions": [{"interval": [0, 3], "time": 1000, "distance": 2000, "street_name": "X",
                          "mapillary_coverage": True}],
    }]
}

PLAN = {
    "start": [13.0, 52.0],
    "end": [13.1, 52.0],
    "free": [
        {"lon": 13.07, "lat": 52.02, "payload": "Zoo"},
        {"lon": 13.02, "lat": 52.01, "payload": "Mitte"},
    ],
}


@pytest.fixture
def route_file(tmp_path):
    p = tmp_path / "route.json"
    p.write_text(json.dumps(ROUTE), encoding="utf-8")
    return p


@pytest.fixture
def plan_file(tmp_path):
    p = tmp_path / "plan.json"
    p.write_text(json.dumps(PLAN), encoding="utf-8")
    return p


class TestStatsCommand:

    def test_prints_table(self, route_file, capsys):
        main(["stats", "--route", str(route_file), "--attribute", "surface"])
        out = capsys.readouterr().out
        assert "gravel" in out
        assert "asphalt" in out
        assert "Segments: 2" in out

    def test_coverage_line(self, route_file, capsys):
        main(["stats", "--route", str(route_file)])
        out = capsys.readouterr().out
        assert "Without Mapillary coverage: 0.00 km" in out


class TestSequenceCommand:

    def test_order(self, plan_file, capsys):
        main(["sequence", "--plan", str(plan_file), "--algorithm", "nearest_neighbor", "--json"])
        out = capsys.readouterr().out
        assert out.index("Mitte") < out.index("Zoo")
        assert '"points"' in out

    def test_bad_algorithm_rejected(self, plan_file):
        with pytest.raises(SystemExit):
            main(["sequence", "--plan", str(plan_file), "--algorithm", "random"])


class TestMakeMap:

    def test_html_contains_features(self):
        ann = annotate_route(RoutePath(**ROUTE["paths"][0]), "surface")
        html = build_html(ann)
        assert "FeatureCollection" in html
        assert "gravel" in html
        assert "leaflet" in html

    def test_values_cannot_close_the_script_tag(self):
        path = RoutePath(
            points=ROUTE["paths"][0]["points"],
            details={"road_environment": [[0, 3, "</script><img src=x>"]]},
        )
        html = build_html(annotate_route(path, "road_environment"))
        # only the two real closing tags of the page
        assert html.count("</script>") == 2
        assert "<\\/script><img src=x>" in html
