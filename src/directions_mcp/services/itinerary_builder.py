"""Turn candidates into timed itineraries.

Durations are estimates from fixed speeds; no schedule data is consulted.
"""

from directions_mcp.models.network import Coordinate
from directions_mcp.models.planning import LegType, PlanItinerary, PlanLeg
from directions_mcp.services.candidates import Candidate
from directions_mcp.services.geo import haversine_distance

WALKING_SPEED_MPS = 1.4  # ~5 km/h
BUS_SPEED_MPS = 8.33  # ~30 km/h average urban speed
BUS_DWELL_SECONDS = 30  # per stop after boarding


def walking_time_minutes(distance_meters: float) -> float:
    return distance_meters / WALKING_SPEED_MPS / 60


def bus_time_minutes(distance_meters: float, stop_count: int) -> float:
    travel_seconds = distance_meters / BUS_SPEED_MPS
    dwell_seconds = BUS_DWELL_SECONDS * max(stop_count - 1, 0)
    return (travel_seconds + dwell_seconds) / 60


def _walk_leg(start: Coordinate, end: Coordinate, distance_meters: float) -> PlanLeg:
    return PlanLeg(
        type=LegType.WALK,
        distance_meters=distance_meters,
        duration_minutes=walking_time_minutes(distance_meters),
        start=start,
        end=end,
    )


def _totals(legs: list[PlanLeg]) -> tuple[float, float]:
    return (
        sum(leg.distance_meters for leg in legs),
        sum(leg.duration_minutes for leg in legs),
    )


def build_itinerary(
    candidate: Candidate,
    origin: Coordinate,
    destination: Coordinate,
) -> PlanItinerary:
    """Build a walk, bus, walk itinerary from a candidate.

    Args:
        candidate: Feasible ride on one route.
        origin: Trip origin.
        destination: Trip destination.

    Returns:
        PlanItinerary with three legs and the bus leg's route fields.
    """
    route = candidate.route
    start_stop = candidate.start_stop
    end_stop = candidate.end_stop

    bus_leg = PlanLeg(
        type=LegType.BUS,
        distance_meters=candidate.ride_distance_meters,
        duration_minutes=bus_time_minutes(candidate.ride_distance_meters, candidate.stop_count),
        start=start_stop.coordinate,
        end=end_stop.coordinate,
        route_id=route.id,
        route_name=route.name,
        route_number=route.number,
        start_stop_id=start_stop.id,
        start_stop_name=start_stop.name,
        end_stop_id=end_stop.id,
        end_stop_name=end_stop.name,
        stop_count=candidate.stop_count,
    )

    legs = [
        _walk_leg(origin, start_stop.coordinate, candidate.start_distance_meters),
        bus_leg,
        _walk_leg(end_stop.coordinate, destination, candidate.end_distance_meters),
    ]
    total_distance, total_duration = _totals(legs)

    return PlanItinerary(
        legs=legs,
        total_distance_meters=total_distance,
        total_duration_minutes=total_duration,
        route_id=route.id,
        route_name=route.name,
        route_number=route.number,
        start_stop_id=start_stop.id,
        end_stop_id=end_stop.id,
    )


def build_direct_walk(origin: Coordinate, destination: Coordinate) -> PlanItinerary:
    """Build the single-leg walking itinerary used as the fallback."""
    leg = _walk_leg(origin, destination, haversine_distance(origin, destination))
    return PlanItinerary(
        legs=[leg],
        total_distance_meters=leg.distance_meters,
        total_duration_minutes=leg.duration_minutes,
    )
