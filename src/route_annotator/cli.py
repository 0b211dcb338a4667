from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path
from typing import Any, List, Optional

from rich.console import Console
from rich.table import Table

from route_annotator.config import settings
from route_annotator.core.colors import attribute_label
from route_annotator.core.engine import annotate_route, request_points
from route_annotator.core.models import RoutePath, WaypointSet
from route_annotator.core.sequencer import resequence


def _read_json(path: Path) -> Any:
    return json.loads(path.read_text(encoding="utf-8"))


def _read_path(path: Path) -> RoutePath:
    data = _read_json(path)
    # Accept a full engine response as well as a single path
    if isinstance(data, dict) and "paths" in data:
        data = data["paths"][0]
    return RoutePath(**data)


def _read_plan(path: Path) -> WaypointSet:
    return WaypointSet(**_read_json(path))


def _cmd_stats(args: argparse.Namespace, console: Console) -> None:
    path = _read_path(Path(args.route))
    ann = annotate_route(path, args.attribute)

    table = Table(title=f"{attribute_label(ann.attribute)} - {ann.polyline.total_distance_m / 1000:.2f} km")
    table.add_column("Value")
    table.add_column("km", justify="right")
    table.add_column("Share", justify="right")
    table.add_column("Color")

    total = ann.polyline.total_distance_m or 1.0
    for row in ann.stats:
        table.add_row(
            row.label,
            f"{row.total_distance_km:.2f}",
            f"{100 * row.total_distance_m / total:.1f}%",
            row.color,
        )

    console.print(table)
    console.print(f"Vertices: {ann.polyline.vertex_count}  Segments: {len(ann.segments)}")
    if ann.polyline.track("mapillary_coverage") is not None:
        console.print(f"Without Mapillary coverage: {ann.uncovered_distance_m / 1000:.2f} km")


def _cmd_sequence(args: argparse.Namespace, console: Console) -> None:
    plan = _read_plan(Path(args.plan))
    algorithm = args.algorithm or settings.optimization_algorithm
    ordered = resequence(plan, algorithm)

    table = Table(title=f"Waypoint order ({algorithm}{', locked' if plan.locked else ''})")
    table.add_column("#", justify="right")
    table.add_column("Lon")
    table.add_column("Lat")
    table.add_column("Payload")
    table.add_column("Was")

    for n, wp in enumerate(ordered):
        table.add_row(
            str(n + 1),
            f"{wp.lon:.5f}",
            f"{wp.lat:.5f}",
            "" if wp.payload is None else str(wp.payload),
            str(plan.index_of(wp.id) + 1),
        )
    console.print(table)

    if args.json:
        points = request_points(plan.with_order(ordered), enabled=False)
        console.print_json(json.dumps({"points": [list(p) for p in points]}))


def main(argv: Optional[List[str]] = None) -> None:
    ap = argparse.ArgumentParser(prog="route-annotator")
    ap.add_argument("--debug", action="store_true")
    sub = ap.add_subparsers(dest="command", required=True)

    st = sub.add_parser("stats", help="Per-value distance totals for a route JSON")
    st.add_argument("--route", required=True, help="Path to a routing-engine path/response JSON")
    st.add_argument("--attribute", default=None, help="e.g. surface, road_class, mapillary_coverage")

    sq = sub.add_parser("sequence", help="Order the free waypoints of a plan JSON")
    sq.add_argument("--plan", required=True, help="Path to a waypoint plan JSON")
    sq.add_argument("--algorithm", choices=["nearest_neighbor", "greedy_insertion"], default=None)
    sq.add_argument("--json", action="store_true", help="Also print the request point list")

    args = ap.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.WARNING,
        format="%(asctime)s [route-annotator] %(levelname)s %(message)s",
    )

    console = Console()
    if args.command == "stats":
        _cmd_stats(args, console)
    else:
        _cmd_sequence(args, console)


if __name__ == "__main__":
    main()
