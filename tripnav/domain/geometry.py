"""
Great-circle geometry used to parameterise camera updates.

* ``haversine_km`` / ``distance_m`` -- Haversine distance on a spherical
  earth (R = 6371 km).  Good to ~0.5 % which is plenty for choosing a zoom
  level or a geofence hit.
* ``calculate_route_bounds`` -- bounding box, centre and zoom for showing
  two points on screen at once.

Complexity: O(1) per call.
"""

from __future__ import annotations

import math

from .entities import Location, RouteBounds

EARTH_RADIUS_KM = 6_371.0

# (upper distance bound in metres, zoom) -- first match wins
ZOOM_STEPS: tuple[tuple[float, int], ...] = (
    (1_000, 16),
    (5_000, 14),
    (20_000, 12),
)
FALLBACK_ZOOM = 10


def haversine_km(
    lat1: float, lng1: float, lat2: float, lng2: float
) -> float:
    """Return the great-circle distance in **km** between two points."""
    lat1_r, lat2_r = math.radians(lat1), math.radians(lat2)
    dlat = math.radians(lat2 - lat1)
    dlng = math.radians(lng2 - lng1)

    a = (
        math.sin(dlat / 2) ** 2
        + math.cos(lat1_r) * math.cos(lat2_r) * math.sin(dlng / 2) ** 2
    )
    # Rounding can push ``a`` a hair past 1 for antipodal points
    return 2 * EARTH_RADIUS_KM * math.asin(math.sqrt(min(1.0, a)))


def distance_m(a: Location, b: Location) -> float:
    """Return the great-circle distance in **metres** between two locations."""
    return haversine_km(a.latitude, a.longitude, b.latitude, b.longitude) * 1000


def zoom_for_distance(meters: float) -> int:
    for bound, zoom in ZOOM_STEPS:
        if meters < bound:
            return zoom
    return FALLBACK_ZOOM


def calculate_route_bounds(
    start: Location, end: Location, padding_ratio: float = 0.1
) -> RouteBounds:
    """
    Frame *start* and *end* together.

    The box is padded by ``padding_ratio`` of its span on every side; the
    centre is the midpoint of the unpadded box; the zoom steps down as the
    straight-line distance grows.
    """
    min_lng = min(start.longitude, end.longitude)
    max_lng = max(start.longitude, end.longitude)
    min_lat = min(start.latitude, end.latitude)
    max_lat = max(start.latitude, end.latitude)

    pad_lng = (max_lng - min_lng) * padding_ratio
    pad_lat = (max_lat - min_lat) * padding_ratio

    return RouteBounds(
        center=Location((min_lat + max_lat) / 2, (min_lng + max_lng) / 2),
        zoom=zoom_for_distance(distance_m(start, end)),
        ne=Location(max_lat + pad_lat, max_lng + pad_lng),
        sw=Location(min_lat - pad_lat, min_lng - pad_lng),
    )
