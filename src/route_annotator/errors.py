"""Exception types raised by the route annotator."""
from __future__ import annotations


class RouteAnnotatorError(Exception):
    """Base class for all route-annotator errors."""


class InvalidSequencingInput(RouteAnnotatorError, ValueError):
    """Sequencing was requested without both anchors, or with an unknown algorithm."""


class UnknownWaypoint(RouteAnnotatorError, KeyError):
    """A waypoint-set operation referenced an index or id that isn't there."""
