"""Great-circle distance between coordinates."""

import math

from directions_mcp.models.network import Coordinate

# Earth's radius in meters for haversine calculation
EARTH_RADIUS_METERS = 6_371_000


def haversine_distance(a: Coordinate, b: Coordinate) -> float:
    """Calculate the great-circle distance between two points in meters.

    Args:
        a: First point.
        b: Second point.

    Returns:
        Distance in meters. Symmetric, and 0 for coincident points.
    """
    lat1_rad = math.radians(a.latitude)
    lat2_rad = math.radians(b.latitude)
    delta_lat = math.radians(b.latitude - a.latitude)
    delta_lon = math.radians(b.longitude - a.longitude)

    h = (
        math.sin(delta_lat / 2) ** 2
        + math.cos(lat1_rad) * math.cos(lat2_rad) * math.sin(delta_lon / 2) ** 2
    )
    # rounding can push h just past 1 for antipodal points
    h = min(h, 1.0)
    c = 2 * math.atan2(math.sqrt(h), math.sqrt(1 - h))

    return EARTH_RADIUS_METERS * c
