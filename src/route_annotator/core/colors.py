"""Color and label lookups for attribute values.

Every attribute maps to one scheme kind: a fixed categorical table, a
boolean pair, a min/max gradient for continuous numbers, or a first-seen
palette for anything unknown. Null values always get ``DEFAULT_COLOR``.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, Optional, Union

DEFAULT_COLOR = "#9ca3af"

SURFACE_COLORS: Dict[str, str] = {
    "asphalt": "#22c55e",
    "concrete": "#f97316",
    "paved": "#3b82f6",
    "unpaved": "#a855f7",
    "gravel": "#ec4899",
    "dirt": "#78350f",
    "sand": "#eab308",
    "grass": "#16a34a",
    "ground": "#78350f",
    "compacted": "#6b7280",
    "fine_gravel": "#fb923c",
    "pebblestone": "#a855f7",
    "cobblestone": "#6366f1",
    "wood": "#b45309",
    "metal": "#475569",
    "sett": "#6366f1",
    "paving_stones": "#0ea5e9",
}

ROAD_CLASS_COLORS: Dict[str, str] = {
    "motorway": "#dc2626",
    "trunk": "#ef4444",
    "primary": "#f97316",
    "secondary": "#eab308",
    "tertiary": "#22c55e",
    "unclassified": "#3b82f6",
    "residential": "#a855f7",
    "service": "#ec4899",
    "track": "#78350f",
    "path": "#6b7280",
    "cycleway": "#0ea5e9",
    "footway": "#16a34a",
    "steps": "#b45309",
    "living_street": "#fb923c",
}

# Grouped by infrastructure family: greens for bicycle roads, blues for
# separated cycleways, yellows/oranges for on-road lanes, purples/pinks/roses
# for shared foot paths.
BICYCLE_INFRA_COLORS: Dict[str, str] = {
    "none": "#9ca3af",
    "bicycleroad": "#22c55e",
    "bicycleroad_vehicledestination": "#16a34a",
    "pedestrianareabicycleyes": "#10b981",
    "cycleway_adjoining": "#3b82f6",
    "cycleway_isolated": "#2563eb",
    "cycleway_adjoiningorisolated": "#60a5fa",
    "cyclewaylink": "#1d4ed8",
    "crossing": "#0ea5e9",
    "cyclewayonhighway_advisory": "#f59e0b",
    "cyclewayonhighway_exclusive": "#eab308",
    "cyclewayonhighway_advisoryorexclusive": "#fbbf24",
    "cyclewayonhighwaybetweenlanes": "#f97316",
    "cyclewayonhighwayprotected": "#fb923c",
    "sharedbuslanebikewithbus": "#facc15",
    "sharedbuslanebuswithbike": "#eab308",
    "sharedmotorvehiclelane": "#fbbf24",
    "footandcyclewaysegregated_adjoining": "#a855f7",
    "footandcyclewaysegregated_isolated": "#9333ea",
    "footandcyclewaysegregated_adjoiningorisolated": "#c084fc",
    "footandcyclewayshared_adjoining": "#ec4899",
    "footandcyclewayshared_isolated": "#db2777",
    "footandcyclewayshared_adjoiningorisolated": "#f472b6",
    "footwaybicycleyes_adjoining": "#f43f5e",
    "footwaybicycleyes_isolated": "#e11d48",
    "footwaybicycleyes_adjoiningorisolated": "#fb7185",
    "needsclarification": "#dc2626",
}

BICYCLE_INFRA_DESCRIPTIONS: Dict[str, str] = {
    "none": "Keine spezielle Fahrradinfrastruktur",
    "bicycleroad": "Fahrradstraße",
    "bicycleroad_vehicledestination": "Fahrradstraße mit Anlieger/Kfz frei",
    "pedestrianareabicycleyes": "Fußgängerzone, Fahrrad frei",
    "cycleway_adjoining": "Radweg, straßenbegleitend",
    "cycleway_isolated": "Radweg, selbstständig geführt",
    "cycleway_adjoiningorisolated": "Radweg (Fallback)",
    "cyclewaylink": "Radweg-Routing-Verbindungsstück",
    "crossing": "Straßenquerung",
    "cyclewayonhighway_advisory": "Schutzstreifen",
    "cyclewayonhighway_exclusive": "Radfahrstreifen",
    "cyclewayonhighway_advisoryorexclusive": "Radfahrstreifen/Schutzstreifen (Fallback)",
    "cyclewayonhighwaybetweenlanes": 'Radfahrstreifen in Mittellage ("Angstweiche")',
    "cyclewayonhighwayprotected": "Protected Bike Lane (PBL)",
    "sharedbuslanebikewithbus": "Radfahrstreifen mit Freigabe Busverkehr",
    "sharedbuslanebuswithbike": "Bussonderfahrstreifen mit Fahrrad frei",
    "sharedmotorvehiclelane": "Gemeinsamer Fahrstreifen",
    "footandcyclewaysegregated_adjoining": "Getrennter Geh- und Radweg, straßenbegleitend",
    "footandcyclewaysegregated_isolated": "Getrennter Geh- und Radweg, selbstständig",
    "footandcyclewaysegregated_adjoiningorisolated": "Getrennter Geh- und Radweg (Fallback)",
    "footandcyclewayshared_adjoining": "Gemeinsamer Geh- und Radweg, straßenbegleitend",
    "footandcyclewayshared_isolated": "Gemeinsamer Geh- und Radweg, selbstständig",
    "footandcyclewayshared_adjoiningorisolated": "Gemeinsamer Geh- und Radweg (Fallback)",
    "footwaybicycleyes_adjoining": "Gehweg, Fahrrad frei, straßenbegleitend",
    "footwaybicycleyes_isolated": "Gehweg, Fahrrad frei, selbstständig",
    "footwaybicycleyes_adjoiningorisolated": "Gehweg, Fahrrad frei (Fallback)",
    "needsclarification": "Führungsform unklar - Tags nicht ausreichend",
}

ATTRIBUTE_LABELS: Dict[str, str] = {
    "mapillary_coverage": "Mapillary Coverage",
    "surface": "Surface",
    "road_class": "Straßenklasse",
    "road_environment": "Umgebung",
    "road_access": "Zugang",
    "bicycle_infra": "Fahrradinfrastruktur",
    "elevation": "Höhe (m)",
    "time": "Zeit (s)",
    "distance": "Distanz (m)",
    "street_name": "Straßenname",
}

GRADIENT_STEPS = ("#3b82f6", "#10b981", "#f59e0b", "#ef4444")
PALETTE = ("#3b82f6", "#10b981", "#f59e0b", "#ef4444", "#8b5cf6", "#ec4899", "#06b6d4", "#14b8a6")


def is_true(value: Any) -> bool:
    return value is True or value == "True" or value == "true"


# ---------------------------------------------------------------------------
# Scheme kinds
# ---------------------------------------------------------------------------
# ``bind(sample)`` does the per-track work once and returns a value -> color
# function; ``color(value, sample)`` is the one-off shortcut.

Colorizer = Callable[[Any], str]


def _identity_key(value: Any) -> Any:
    # bools stay distinct from 0/1; unhashable JSON values compare by repr
    if isinstance(value, (list, dict)):
        return ("json", repr(value))
    return (isinstance(value, bool), value)


@dataclass(frozen=True)
class CategoricalScheme:
    table: Dict[str, str]

    def bind(self, sample: Iterable[Any] = ()) -> Colorizer:
        def color(value: Any) -> str:
            if not value:
                return DEFAULT_COLOR
            return self.table.get(str(value).lower(), DEFAULT_COLOR)
        return color

    def color(self, value: Any, sample: Iterable[Any] = ()) -> str:
        return self.bind(sample)(value)


@dataclass(frozen=True)
class BooleanScheme:
    true_color: str = "#3b82f6"
    false_color: str = "#ec4899"

    def bind(self, sample: Iterable[Any] = ()) -> Colorizer:
        return lambda value: self.true_color if is_true(value) else self.false_color

    def color(self, value: Any, sample: Iterable[Any] = ()) -> str:
        return self.bind(sample)(value)


@dataclass(frozen=True)
class GradientScheme:
    steps: tuple = GRADIENT_STEPS

    def bind(self, sample: Iterable[Any] = ()) -> Colorizer:
        valid = [v for v in sample if v is not None]
        if not valid:
            return lambda value: self.steps[0]
        lo, hi = min(valid), max(valid)
        span = (hi - lo) or 1

        def color(value: Any) -> str:
            norm = (float(value) - lo) / span
            bucket = min(len(self.steps) - 1, max(0, int(norm * len(self.steps))))
            return self.steps[bucket]
        return color

    def color(self, value: Any, sample: Iterable[Any] = ()) -> str:
        return self.bind(sample)(value)


@dataclass(frozen=True)
class PaletteScheme:
    colors: tuple = PALETTE

    def bind(self, sample: Iterable[Any] = ()) -> Colorizer:
        # first-seen position of every distinct non-empty value
        order: Dict[Any, int] = {}
        for v in sample:
            if v is None or v == "":
                continue
            order.setdefault(_identity_key(v), len(order))

        def color(value: Any) -> str:
            idx = order.get(_identity_key(value))
            if idx is None:
                return DEFAULT_COLOR
            return self.colors[idx % len(self.colors)]
        return color

    def color(self, value: Any, sample: Iterable[Any] = ()) -> str:
        return self.bind(sample)(value)


ColorScheme = Union[CategoricalScheme, BooleanScheme, GradientScheme, PaletteScheme]

_SCHEMES: Dict[str, ColorScheme] = {
    "surface": CategoricalScheme(SURFACE_COLORS),
    "road_class": CategoricalScheme(ROAD_CLASS_COLORS),
    "bicycle_infra": CategoricalScheme(BICYCLE_INFRA_COLORS),
    "mapillary_coverage": BooleanScheme(),
    "elevation": GradientScheme(),
    "time": GradientScheme(),
    "distance": GradientScheme(),
}
_FALLBACK = PaletteScheme()


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def scheme_for(attribute: str) -> ColorScheme:
    return _SCHEMES.get(attribute, _FALLBACK)


def colorizer(attribute: str, sample: Iterable[Any] = ()) -> Colorizer:
    """Value -> hex color for one track. Build once per track, call per vertex."""
    bound = scheme_for(attribute).bind(sample)

    def color(value: Any) -> str:
        if value is None:
            return DEFAULT_COLOR
        return bound(value)
    return color


def color_for(attribute: str, value: Any, sample: Iterable[Any] = ()) -> str:
    """Hex color for *value* of *attribute*; *sample* feeds gradient/palette schemes."""
    return colorizer(attribute, sample)(value)


def to_rgba(hex_color: str, opacity: float = 1.0) -> str:
    r = int(hex_color[1:3], 16)
    g = int(hex_color[3:5], 16)
    b = int(hex_color[5:7], 16)
    return f"rgba({r}, {g}, {b}, {opacity})"


def bicycle_infra_description(value: Any) -> Optional[str]:
    if not value:
        return None
    return BICYCLE_INFRA_DESCRIPTIONS.get(str(value).lower())


def attribute_label(attribute: str) -> str:
    return ATTRIBUTE_LABELS.get(attribute, attribute)


def value_label(attribute: str, value_key: str) -> str:
    """Display text for a stats bucket key."""
    if attribute == "bicycle_infra":
        return bicycle_infra_description(value_key) or value_key
    return value_key
