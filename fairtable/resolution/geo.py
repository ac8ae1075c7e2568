from __future__ import annotations

import math

from .models import Candidate, Coordinate

EARTH_RADIUS_METERS = 6_371_000


def haversine_meters(source: Coordinate, target: Coordinate) -> float:
    """Great-circle distance between two coordinates, in meters."""
    delta_lat = math.radians(target.lat - source.lat)
    delta_lng = math.radians(target.lng - source.lng)
    source_lat = math.radians(source.lat)
    target_lat = math.radians(target.lat)

    a = (
        math.sin(delta_lat / 2) ** 2
        + math.cos(source_lat) * math.cos(target_lat) * math.sin(delta_lng / 2) ** 2
    )
    return 2 * EARTH_RADIUS_METERS * math.atan2(math.sqrt(a), math.sqrt(1 - a))


def distance_to(anchor: Coordinate | None, candidate: Candidate) -> float | None:
    """Distance from the room anchor to *candidate*, or ``None`` without an anchor."""
    if anchor is None:
        return None
    return haversine_meters(anchor, Coordinate(lat=candidate.lat, lng=candidate.lng))
