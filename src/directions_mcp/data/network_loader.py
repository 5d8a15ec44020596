"""Sources of the transit network snapshot used by the planner."""

import logging
from collections.abc import Iterable
from pathlib import Path
from typing import Protocol, runtime_checkable

from directions_mcp.data.cache import SnapshotCache
from directions_mcp.data.database import get_db
from directions_mcp.models.network import Route, Stop

logger = logging.getLogger(__name__)


@runtime_checkable
class NetworkLoader(Protocol):
    """Anything that can supply the full list of routes.

    Each route's stops must be sorted by sequence_index. Implementations
    must be safe to call from concurrent requests.
    """

    async def load_network(self) -> list[Route]: ...


class StaticNetworkLoader:
    """Serves a fixed, in-memory network."""

    def __init__(self, routes: Iterable[Route]):
        self._routes = [
            route.model_copy(
                update={"stops": sorted(route.stops, key=lambda s: s.sequence_index)}
            )
            for route in routes
        ]

    async def load_network(self) -> list[Route]:
        return list(self._routes)


class SQLiteNetworkLoader:
    """Reads route patterns from a database built by `directions-mcp ingest`."""

    def __init__(self, db_path: Path | None = None):
        """Initialize the loader.

        Args:
            db_path: Optional database path override.
        """
        self._db_path = db_path

    async def load_network(self) -> list[Route]:
        """Load every route pattern with its ordered stops.

        Raises:
            FileNotFoundError: If the database doesn't exist.
        """
        sql = """
            SELECT p.pattern_id, p.route_name, p.route_number,
                   s.stop_id, s.stop_name, s.stop_lat, s.stop_lon, s.sequence_index
            FROM route_patterns p
            LEFT JOIN pattern_stops s ON s.pattern_id = p.pattern_id
            ORDER BY p.pattern_id, s.sequence_index
        """

        routes: dict[str, dict] = {}
        async with get_db(self._db_path) as db:
            async with db.execute(sql) as cursor:
                async for row in cursor:
                    pattern = routes.setdefault(
                        row["pattern_id"],
                        {
                            "id": row["pattern_id"],
                            "name": row["route_name"],
                            "number": row["route_number"],
                            "stops": [],
                        },
                    )
                    if row["stop_id"] is None:
                        continue
                    pattern["stops"].append(
                        Stop(
                            id=row["stop_id"],
                            name=row["stop_name"],
                            latitude=float(row["stop_lat"]),
                            longitude=float(row["stop_lon"]),
                            sequence_index=int(row["sequence_index"]),
                        )
                    )

        network = [Route(**pattern) for pattern in routes.values()]
        logger.info(f"Loaded network snapshot: {len(network)} routes")
        return network


class CachedNetworkLoader:
    """Wraps another loader and reuses its snapshot for `ttl` seconds.

    Errors from the wrapped loader propagate and are not cached.
    """

    def __init__(self, inner: NetworkLoader, ttl: float = 300.0):
        self._inner = inner
        self._cache: SnapshotCache[list[Route]] = SnapshotCache(ttl=ttl)

    async def load_network(self) -> list[Route]:
        return await self._cache.get_or_load(self._inner.load_network)

    def invalidate(self) -> None:
        """Force the next call to reload from the wrapped loader."""
        self._cache.clear()
