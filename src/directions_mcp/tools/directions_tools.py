from functools import lru_cache

from directions_mcp.data.config import get_planner_config
from directions_mcp.data.network_loader import CachedNetworkLoader, SQLiteNetworkLoader
from directions_mcp.models.network import Coordinate
from directions_mcp.models.planning import DEFAULT_LIMIT, PlanRequest, PlanResponse
from directions_mcp.app import mcp
from directions_mcp.services.trip_planner import plan_itineraries


@lru_cache
def get_network_loader() -> CachedNetworkLoader:
    """Process-wide loader reading the configured database, cached by TTL."""
    config = get_planner_config()
    return CachedNetworkLoader(
        SQLiteNetworkLoader(config.db_path),
        ttl=config.network_cache_ttl_seconds,
    )


@mcp.tool()
async def plan_directions(
    origin_latitude: float,
    origin_longitude: float,
    destination_latitude: float,
    destination_longitude: float,
    max_walking_distance_meters: float | None = None,
    limit: int = DEFAULT_LIMIT,
) -> PlanResponse:
    """Plan walk and bus itineraries between two coordinates.

    Each itinerary is either a direct walk or walk, one bus ride, walk.
    Durations are estimates from average walking and bus speeds, not live
    schedules. A direct walk is always available as a fallback.

    Args:
        origin_latitude: Origin latitude in degrees (-90 to 90).
        origin_longitude: Origin longitude in degrees (-180 to 180).
        destination_latitude: Destination latitude in degrees.
        destination_longitude: Destination longitude in degrees.
        max_walking_distance_meters: Furthest acceptable walk to or from a
            stop (default: DIRECTIONS_MAX_WALK_METERS, 1000m).
        limit: Maximum itineraries to return (1-5, default: 3)

    Returns:
        PlanResponse with itineraries sorted by total duration.
    """
    if max_walking_distance_meters is None:
        max_walking_distance_meters = get_planner_config().default_max_walking_distance_meters

    request = PlanRequest(
        origin=Coordinate(latitude=origin_latitude, longitude=origin_longitude),
        destination=Coordinate(latitude=destination_latitude, longitude=destination_longitude),
        max_walking_distance_meters=max_walking_distance_meters,
        limit=limit,
    )

    return await plan_itineraries(request, get_network_loader())
