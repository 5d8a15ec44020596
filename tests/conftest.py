"""Shared fixtures: synthetic networks and a sample GTFS feed.

Synthetic networks sit on the equator, where 0.01 degrees of longitude is
about 1112 m.
"""

import zipfile
from collections.abc import Callable
from pathlib import Path

import pytest

from directions_mcp.data.network_ingest import NetworkIngestor
from directions_mcp.models.network import Coordinate, Route, Stop


def build_route(
    route_id: str,
    points: list[tuple[float, float]],
    name: str | None = None,
    number: str | None = None,
) -> Route:
    """Build a route whose stops sit at the given (lat, lon) points, in order."""
    stops = [
        Stop(
            id=f"{route_id}-S{index}",
            name=f"{route_id} stop {index}",
            latitude=lat,
            longitude=lon,
            sequence_index=index,
        )
        for index, (lat, lon) in enumerate(points)
    ]
    return Route(
        id=route_id,
        name=name or f"Route {route_id}",
        number=number or route_id,
        stops=stops,
    )


@pytest.fixture
def make_route() -> Callable[..., Route]:
    return build_route


@pytest.fixture
def three_stop_route() -> Route:
    """S0(0,0), S1(0,0.01), S2(0,0.02)."""
    return build_route("R1", [(0, 0), (0, 0.01), (0, 0.02)], name="Main Street", number="24")


@pytest.fixture
def origin() -> Coordinate:
    return Coordinate(latitude=0, longitude=0)


@pytest.fixture
def destination() -> Coordinate:
    return Coordinate(latitude=0, longitude=0.01)


ROUTES_TXT = (
    "route_id,agency_id,route_short_name,route_long_name,route_type\n"
    "24,STM,24,Sherbrooke,3\n"
    "55,STM,55,,3\n"
)

STOPS_TXT = (
    "stop_id,stop_code,stop_name,stop_lat,stop_lon,location_type\n"
    "A,1001,Stop A,45.500,-73.600,0\n"
    "B,1002,Stop B,45.500,-73.590,0\n"
    "C,1003,Stop C,45.500,-73.580,0\n"
    "D,1004,Stop D,45.510,-73.580,0\n"
    "X,1005,Ghost stop,,,0\n"
)

TRIPS_TXT = (
    "route_id,service_id,trip_id,trip_headsign,direction_id\n"
    "24,WEEKDAY,T1,East,0\n"
    "24,WEEKDAY,T2,East,0\n"
    "24,WEEKDAY,T3,West,1\n"
    "55,WEEKDAY,T4,,\n"
)

STOP_TIMES_TXT = (
    "trip_id,arrival_time,departure_time,stop_id,stop_sequence\n"
    "T1,08:00:00,08:00:00,A,1\n"
    "T1,08:03:00,08:03:00,B,2\n"
    "T1,08:06:00,08:06:00,C,3\n"
    "T1,08:09:00,08:09:00,,4\n"
    "T2,09:00:00,09:00:00,A,1\n"
    "T2,09:05:00,09:05:00,C,5\n"
    "T3,10:00:00,10:00:00,C,1\n"
    "T3,10:03:00,10:03:00,B,2\n"
    "T3,10:06:00,10:06:00,A,3\n"
    "T4,11:00:00,11:00:00,C,10\n"
    "T4,11:02:00,11:02:00,X,20\n"
    "T4,11:04:00,11:04:00,D,30\n"
)


@pytest.fixture
def sample_gtfs_dir(tmp_path: Path) -> Path:
    """Sample GTFS feed.

    Route 24 runs A -> B -> C eastbound (T1, plus a shorter T2) and
    C -> B -> A westbound (T3). Route 55 runs C -> X -> D, where X has no
    coordinates. Stops A, B, C sit on latitude 45.5, about 779 m apart.
    """
    gtfs_dir = tmp_path / "gtfs"
    gtfs_dir.mkdir()
    (gtfs_dir / "routes.txt").write_text(ROUTES_TXT, encoding="utf-8")
    (gtfs_dir / "stops.txt").write_text(STOPS_TXT, encoding="utf-8")
    (gtfs_dir / "trips.txt").write_text(TRIPS_TXT, encoding="utf-8")
    (gtfs_dir / "stop_times.txt").write_text(STOP_TIMES_TXT, encoding="utf-8")
    return gtfs_dir


@pytest.fixture
def sample_gtfs_zip(sample_gtfs_dir: Path, tmp_path: Path) -> Path:
    """Create a sample GTFS ZIP file from the directory."""
    zip_path = tmp_path / "gtfs.zip"
    with zipfile.ZipFile(zip_path, "w") as zf:
        for file_path in sample_gtfs_dir.iterdir():
            zf.write(file_path, file_path.name)
    return zip_path


@pytest.fixture
async def network_db(sample_gtfs_dir: Path, tmp_path: Path) -> Path:
    """Network database ingested from the sample feed."""
    db_path = tmp_path / "network.db"
    await NetworkIngestor(db_path).ingest(sample_gtfs_dir)
    return db_path
