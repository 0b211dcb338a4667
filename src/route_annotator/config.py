"""Centralized settings for the route annotator."""
from __future__ import annotations

from typing import Literal

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    model_config = {"env_prefix": "ROUTE_ANNOTATOR_"}

    # Waypoint sequencing
    optimization_enabled: bool = True
    optimization_algorithm: Literal["nearest_neighbor", "greedy_insertion"] = "nearest_neighbor"

    # Decoder merge policy for mapillary_coverage.
    # True  -> instruction track replaces the detail track if it has any value
    # False -> instruction values win per vertex, gaps back-filled from details
    mapillary_replace_wholesale: bool = True

    # Neighbour window (vertices) when looking up an OSM way id
    osm_way_search_radius: int = 5

    # rgba alpha for stats rows / highlighted segments
    stats_opacity: float = 0.3
    segment_opacity: float = 0.3

    # Attribute colored when the caller doesn't pick one
    default_attribute: str = "mapillary_coverage"


settings = Settings()
