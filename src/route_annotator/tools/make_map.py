from __future__ import annotations

import argparse
import html
import json
from pathlib import Path

from route_annotator.cli import _read_path
from route_annotator.core.colors import attribute_label
from route_annotator.core.engine import RouteAnnotation, annotate_route


def _script_json(obj) -> str:
    # keep "</script>" inside a value from closing the inline script
    return json.dumps(obj).replace("</", "<\\/")


def build_html(ann: RouteAnnotation) -> str:
    """Standalone Leaflet page drawing the colored route segments."""
    fc = ann.feature_collection()
    stats = [
        {"label": r.label, "km": round(r.total_distance_km, 2), "color": r.color}
        for r in ann.stats
    ]
    title = html.escape(attribute_label(ann.attribute))

    return f"""<!doctype html>
<html>
<head>
  <meta charset="utf-8" />
  <title>Route – {title}</title>
  <meta name="viewport" content="width=device-width, initial-scale=1.0">
  <link rel="stylesheet" href="https://unpkg.com/leaflet@1.9.4/dist/leaflet.css" />
  <style>
    body {{ margin: 0; font-family: system-ui, -apple-system, Segoe UI, Roboto, sans-serif; }}
    #map {{ height: 100vh; width: 100vw; }}
    #stats {{ position: absolute; top: 10px; right: 10px; z-index: 1000; background: #fff;
              padding: 6px 8px; border-radius: 4px; font-size: 12px; }}
    #stats div {{ padding: 2px 4px; margin: 1px 0; }}
  </style>
</head>
<body>
<div id="map"></div>
<div id="stats"><b>{title}</b></div>
<script src="https://unpkg.com/leaflet@1.9.4/dist/leaflet.js"></script>
<script>
  const fc = {_script_json(fc)};
  const stats = {_script_json(stats)};

  const map = L.map('map');

  L.tileLayer('https://{{s}}.tile.openstreetmap.org/{{z}}/{{x}}/{{y}}.png', {{
    maxZoom: 18,
    attribution: '&copy; OpenStreetMap contributors'
  }}).addTo(map);

  const layer = L.geoJSON(fc, {{
    style: (f) => ({{ color: f.properties.color, weight: 6, opacity: 0.9 }}),
    onEachFeature: (f, l) => l.bindPopup(String(f.properties.value ?? ''))
  }}).addTo(map);

  const box = document.getElementById('stats');
  stats.forEach((s) => {{
    const row = document.createElement('div');
    row.style.background = s.color;
    row.textContent = `${{s.label}}: ${{s.km}} km`;
    box.appendChild(row);
  }});

  if (fc.features.length) map.fitBounds(layer.getBounds().pad(0.2));
</script>
</body>
</html>
"""


def main() -> None:
    ap = argparse.ArgumentParser()
    ap.add_argument("--route", required=True, help="Path to a routing-engine path/response JSON")
    ap.add_argument("--attribute", default=None)
    ap.add_argument("--out", default="route_map.html")
    args = ap.parse_args()

    ann = annotate_route(_read_path(Path(args.route)), args.attribute)
    if not ann.polyline.vertices:
        raise SystemExit(f"No coordinates found in {args.route}")

    out_path = Path(args.out)
    out_path.write_text(build_html(ann), encoding="utf-8")
    print(f"Wrote: {out_path.resolve()}")


if __name__ == "__main__":
    main()
