import logging
import math
from collections.abc import Sequence
from datetime import UTC, datetime

from directions_mcp.data.network_loader import NetworkLoader
from directions_mcp.models.network import Route
from directions_mcp.models.planning import (
    DEFAULT_LIMIT,
    MAX_LIMIT,
    MIN_LIMIT,
    PlanItinerary,
    PlanRequest,
    PlanResponse,
)
from directions_mcp.services.candidates import find_candidates
from directions_mcp.services.itinerary_builder import build_direct_walk, build_itinerary

logger = logging.getLogger(__name__)


def normalize_limit(limit: object) -> int:
    """Clamp a requested itinerary count to [MIN_LIMIT, MAX_LIMIT].

    Missing, zero or non-numeric values fall back to DEFAULT_LIMIT.
    """
    if isinstance(limit, bool) or not isinstance(limit, int | float):
        return DEFAULT_LIMIT
    if math.isnan(limit) or not limit:
        return DEFAULT_LIMIT
    if math.isinf(limit):
        return MAX_LIMIT if limit > 0 else MIN_LIMIT
    return min(max(int(limit), MIN_LIMIT), MAX_LIMIT)


def rank_itineraries(
    bus_itineraries: Sequence[PlanItinerary],
    fallback: PlanItinerary,
    limit: int,
) -> list[PlanItinerary]:
    """Merge bus itineraries with the walking fallback and keep the fastest.

    The fallback always competes for a slot. Ties keep insertion order.
    """
    if not bus_itineraries:
        return [fallback]

    ranked = [*bus_itineraries, fallback]
    ranked.sort(key=lambda it: it.total_duration_minutes)
    return ranked[:limit]


def plan_from_network(
    request: PlanRequest,
    routes: Sequence[Route],
    now: datetime | None = None,
) -> PlanResponse:
    """Plan itineraries against an already loaded network snapshot.

    Args:
        request: Validated planning request.
        routes: Network snapshot.
        now: Timestamp for the response (default: current UTC time).

    Returns:
        PlanResponse with itineraries sorted by total duration.
    """
    limit = normalize_limit(request.limit)

    candidates = find_candidates(
        routes,
        request.origin,
        request.destination,
        request.max_walking_distance_meters,
    )
    bus_itineraries = [
        build_itinerary(candidate, request.origin, request.destination)
        for candidate in candidates
    ]
    fallback = build_direct_walk(request.origin, request.destination)
    itineraries = rank_itineraries(bus_itineraries, fallback, limit)

    logger.debug(
        f"Planned over {len(routes)} routes: {len(candidates)} candidates, "
        f"returning {len(itineraries)} of limit {limit}"
    )

    if now is None:
        now = datetime.now(UTC)

    return PlanResponse(
        generated_at=now.isoformat(),
        itineraries=itineraries,
        count=len(itineraries),
    )


async def plan_itineraries(request: PlanRequest, loader: NetworkLoader) -> PlanResponse:
    """Find walk and bus itineraries from origin to destination.

    The network snapshot is fetched once per call. Loader errors propagate
    to the caller.

    Args:
        request: Validated planning request.
        loader: Source of the network snapshot.

    Returns:
        PlanResponse with at most `limit` itineraries, never empty.
    """
    routes = await loader.load_network()
    return plan_from_network(request, routes)
