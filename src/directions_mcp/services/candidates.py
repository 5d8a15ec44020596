"""Candidate (route, boarding stop, alighting stop) generation."""

import logging
import math
from collections.abc import Sequence
from dataclasses import dataclass

from directions_mcp.models.network import Coordinate, Route, Stop
from directions_mcp.services.geo import haversine_distance

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Candidate:
    """A feasible single-route ride between origin and destination."""

    route: Route
    start_stop: Stop
    end_stop: Stop
    start_distance_meters: float  # origin -> start_stop
    end_distance_meters: float  # end_stop -> destination
    ride_distance_meters: float
    stop_count: int


@dataclass(frozen=True)
class _StopInReach:
    """A stop within walking distance, with its position in the route."""

    stop: Stop
    position: int
    distance_meters: float


def _stops_within(stops: Sequence[Stop], point: Coordinate, max_distance: float) -> list[_StopInReach]:
    """Return the stops no further than max_distance from point, in route order."""
    in_reach = []
    for position, stop in enumerate(stops):
        distance = haversine_distance(point, stop.coordinate)
        if distance <= max_distance:
            in_reach.append(_StopInReach(stop=stop, position=position, distance_meters=distance))
    return in_reach


def ride_distance(stops: Sequence[Stop], start_position: int, end_position: int) -> float:
    """Sum of stop-to-stop distances from start_position to end_position."""
    total = 0.0
    for i in range(start_position, end_position):
        total += haversine_distance(stops[i].coordinate, stops[i + 1].coordinate)
    return total


def find_route_candidates(
    route: Route,
    origin: Coordinate,
    destination: Coordinate,
    max_walking_distance_meters: float,
) -> list[Candidate]:
    """Find every feasible ride on a single route.

    Only rides in the route's direction of travel are considered: the
    alighting stop must come after the boarding stop.
    """
    stops = route.stops
    if len(stops) < 2:
        return []

    boarding = _stops_within(stops, origin, max_walking_distance_meters)
    if not boarding:
        return []

    alighting = _stops_within(stops, destination, max_walking_distance_meters)
    if not alighting:
        return []

    candidates = []
    for start in boarding:
        for end in alighting:
            if end.stop.sequence_index <= start.stop.sequence_index:
                continue

            distance = ride_distance(stops, start.position, end.position)
            if not math.isfinite(distance) or distance <= 0:
                continue

            candidates.append(
                Candidate(
                    route=route,
                    start_stop=start.stop,
                    end_stop=end.stop,
                    start_distance_meters=start.distance_meters,
                    end_distance_meters=end.distance_meters,
                    ride_distance_meters=distance,
                    stop_count=end.stop.sequence_index - start.stop.sequence_index + 1,
                )
            )
    return candidates


def find_candidates(
    routes: Sequence[Route],
    origin: Coordinate,
    destination: Coordinate,
    max_walking_distance_meters: float,
) -> list[Candidate]:
    """Find feasible rides across the whole network.

    Args:
        routes: Network snapshot, each route's stops ordered by sequence_index.
        origin: Trip origin.
        destination: Trip destination.
        max_walking_distance_meters: Walking threshold to and from stops.

    Returns:
        Candidates in route order, then boarding stop, then alighting stop.
    """
    candidates: list[Candidate] = []
    for route in routes:
        route_candidates = find_route_candidates(
            route, origin, destination, max_walking_distance_meters
        )
        if route_candidates:
            logger.debug(f"Route {route.id}: {len(route_candidates)} candidates")
        candidates.extend(route_candidates)
    return candidates
