"""GTFS ingestion into the SQLite network database.

Besides the raw GTFS tables, ingestion derives one route pattern per
(route, direction): the stop order of that direction's longest trip. The
planner reads patterns only.
"""

import csv
import io
import logging
import zipfile
from collections.abc import Iterable, Iterator
from pathlib import Path
from typing import Any

import aiosqlite

logger = logging.getLogger(__name__)

SCHEMA_SQL = """
CREATE TABLE routes (
    route_id TEXT PRIMARY KEY,
    route_short_name TEXT,
    route_long_name TEXT
);

CREATE TABLE stops (
    stop_id TEXT PRIMARY KEY,
    stop_name TEXT NOT NULL,
    stop_lat REAL,
    stop_lon REAL
);

CREATE TABLE trips (
    trip_id TEXT PRIMARY KEY,
    route_id TEXT NOT NULL,
    trip_headsign TEXT,
    direction_id INTEGER
);

CREATE TABLE stop_times (
    trip_id TEXT NOT NULL,
    stop_id TEXT NOT NULL,
    stop_sequence INTEGER NOT NULL,
    PRIMARY KEY (trip_id, stop_sequence)
);

CREATE TABLE route_patterns (
    pattern_id TEXT PRIMARY KEY,
    route_id TEXT NOT NULL,
    direction_id INTEGER NOT NULL,
    trip_id TEXT NOT NULL,
    route_name TEXT NOT NULL,
    route_number TEXT NOT NULL
);

CREATE TABLE pattern_stops (
    pattern_id TEXT NOT NULL,
    sequence_index INTEGER NOT NULL,
    stop_id TEXT NOT NULL,
    stop_name TEXT NOT NULL,
    stop_lat REAL NOT NULL,
    stop_lon REAL NOT NULL,
    PRIMARY KEY (pattern_id, sequence_index)
);
"""

INDEX_SQL = """
CREATE INDEX idx_trips_route ON trips(route_id);
CREATE INDEX idx_stop_times_trip ON stop_times(trip_id);
"""

# Representative trip per (route, direction): most stops, then lowest trip_id.
PATTERNS_SQL = """
WITH trip_sizes AS (
    SELECT t.trip_id, t.route_id, COALESCE(t.direction_id, 0) AS direction_id,
           t.trip_headsign, COUNT(*) AS stop_count
    FROM trips t
    JOIN stop_times st ON st.trip_id = t.trip_id
    GROUP BY t.trip_id
),
ranked AS (
    SELECT *, ROW_NUMBER() OVER (
        PARTITION BY route_id, direction_id ORDER BY stop_count DESC, trip_id
    ) AS rn
    FROM trip_sizes
)
INSERT INTO route_patterns (pattern_id, route_id, direction_id, trip_id, route_name, route_number)
SELECT ranked.route_id || ':' || ranked.direction_id,
       ranked.route_id,
       ranked.direction_id,
       ranked.trip_id,
       COALESCE(r.route_long_name, r.route_short_name, r.route_id)
           || CASE WHEN ranked.trip_headsign IS NOT NULL
                   THEN ' → ' || ranked.trip_headsign ELSE '' END,
       COALESCE(r.route_short_name, r.route_id)
FROM ranked
JOIN routes r ON r.route_id = ranked.route_id
WHERE ranked.rn = 1
"""

PATTERN_STOPS_SQL = """
INSERT INTO pattern_stops (pattern_id, sequence_index, stop_id, stop_name, stop_lat, stop_lon)
SELECT p.pattern_id,
       ROW_NUMBER() OVER (PARTITION BY p.pattern_id ORDER BY st.stop_sequence) - 1,
       s.stop_id, s.stop_name, s.stop_lat, s.stop_lon
FROM route_patterns p
JOIN stop_times st ON st.trip_id = p.trip_id
JOIN stops s ON s.stop_id = st.stop_id
WHERE s.stop_lat IS NOT NULL AND s.stop_lon IS NOT NULL
"""

# Table definitions: table_name -> (csv_filename, columns)
TABLE_DEFINITIONS: dict[str, tuple[str, list[str]]] = {
    "routes": ("routes.txt", ["route_id", "route_short_name", "route_long_name"]),
    "stops": ("stops.txt", ["stop_id", "stop_name", "stop_lat", "stop_lon"]),
    "trips": ("trips.txt", ["trip_id", "route_id", "trip_headsign", "direction_id"]),
    "stop_times": ("stop_times.txt", ["trip_id", "stop_id", "stop_sequence"]),
}

# Columns that must be in the header and non-empty for a row to be inserted.
REQUIRED_COLUMNS: dict[str, list[str]] = {
    "routes": ["route_id"],
    "stops": ["stop_id", "stop_name"],
    "trips": ["trip_id", "route_id"],
    "stop_times": ["trip_id", "stop_id", "stop_sequence"],
}

DERIVED_TABLES = ["route_patterns", "pattern_stops"]

# Chunk size for bulk inserts
CHUNK_SIZE = 10000


class NetworkIngestor:
    """Builds the network database from a GTFS feed."""

    def __init__(self, db_path: Path):
        """Initialize the ingestor.

        Args:
            db_path: Path where the SQLite database will be created.
        """
        self.db_path = Path(db_path)

    async def ingest(self, gtfs_path: Path) -> dict[str, int]:
        """Ingest a GTFS directory or ZIP file and derive route patterns.

        Uses atomic swap: loads into temp DB, then replaces the target DB.

        Args:
            gtfs_path: Path to GTFS directory or ZIP file.

        Returns:
            Dictionary with row counts per table, derived tables included.

        Raises:
            FileNotFoundError: If GTFS path doesn't exist.
            ValueError: If required GTFS files or columns are missing, or
                no route pattern could be derived.
        """
        gtfs_path = Path(gtfs_path)
        if not gtfs_path.exists():
            raise FileNotFoundError(f"GTFS path not found: {gtfs_path}")

        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        temp_db = self.db_path.with_suffix(".tmp.db")

        try:
            temp_db.unlink(missing_ok=True)

            async with aiosqlite.connect(temp_db) as db:
                await db.execute("PRAGMA journal_mode=OFF")
                await db.execute("PRAGMA synchronous=OFF")

                await db.executescript(SCHEMA_SQL)
                row_counts = await self._load_all_tables(db, gtfs_path)
                await self._create_indexes(db)
                row_counts.update(await self._derive_patterns(db))
                self._verify_integrity(row_counts)

            # atomic swap
            temp_db.replace(self.db_path)

            logger.info(f"Network ingestion complete: {self.db_path}")
            return row_counts

        except Exception:
            temp_db.unlink(missing_ok=True)
            raise

    async def _create_indexes(self, db: aiosqlite.Connection) -> None:
        logger.info("Creating indexes...")
        await db.executescript(INDEX_SQL)
        await db.commit()

    async def _load_all_tables(self, db: aiosqlite.Connection, gtfs_path: Path) -> dict[str, int]:
        """Load all GTFS tables from directory or ZIP."""
        row_counts: dict[str, int] = {}

        if gtfs_path.is_file() and gtfs_path.suffix == ".zip":
            with zipfile.ZipFile(gtfs_path, "r") as zf:
                names = set(zf.namelist())
                for table_name, (csv_filename, columns) in TABLE_DEFINITIONS.items():
                    if csv_filename not in names:
                        raise ValueError(f"Required file {csv_filename} not found in ZIP")
                    with zf.open(csv_filename) as f:
                        text_file = io.TextIOWrapper(f, encoding="utf-8-sig")
                        row_counts[table_name] = await self._load_table(
                            db, table_name, columns, text_file, csv_filename
                        )
        else:
            for table_name, (csv_filename, columns) in TABLE_DEFINITIONS.items():
                csv_path = gtfs_path / csv_filename
                if not csv_path.exists():
                    raise ValueError(f"Required file {csv_filename} not found")
                with open(csv_path, encoding="utf-8-sig") as f:
                    row_counts[table_name] = await self._load_table(
                        db, table_name, columns, f, csv_filename
                    )

        return row_counts

    async def _load_table(
        self,
        db: aiosqlite.Connection,
        table_name: str,
        columns: list[str],
        lines: Iterable[str],
        filename: str,
    ) -> int:
        """Load one CSV stream into a table."""
        logger.info(f"Loading {table_name} from {filename}...")

        placeholders = ",".join(["?"] * len(columns))
        insert_sql = f"INSERT INTO {table_name} ({','.join(columns)}) VALUES ({placeholders})"

        total_rows = 0
        skipped_rows = 0
        chunk: list[tuple[Any, ...]] = []
        required = REQUIRED_COLUMNS[table_name]

        reader = csv.reader(lines)
        header_index = self._build_header_index(reader, columns, required, filename)
        for row_dict in self._rows(reader, header_index):
            if not self._has_required_values(row_dict, required):
                skipped_rows += 1
                continue
            chunk.append(tuple(self._convert_value(row_dict.get(col)) for col in columns))

            if len(chunk) >= CHUNK_SIZE:
                await db.executemany(insert_sql, chunk)
                total_rows += len(chunk)
                chunk = []

        if chunk:
            await db.executemany(insert_sql, chunk)
            total_rows += len(chunk)

        await db.commit()
        logger.info(
            f"  Loaded {total_rows:,} rows into {table_name}"
            + (f" (skipped {skipped_rows:,} invalid)" if skipped_rows else "")
        )
        return total_rows

    async def _derive_patterns(self, db: aiosqlite.Connection) -> dict[str, int]:
        """Build route_patterns and pattern_stops from the loaded trips."""
        logger.info("Deriving route patterns...")
        await db.execute(PATTERNS_SQL)
        await db.execute(PATTERN_STOPS_SQL)
        await db.commit()

        counts: dict[str, int] = {}
        for table_name in DERIVED_TABLES:
            async with db.execute(f"SELECT COUNT(*) FROM {table_name}") as cursor:
                row = await cursor.fetchone()
                counts[table_name] = row[0] if row else 0
        logger.info(
            f"  Derived {counts['route_patterns']:,} patterns "
            f"with {counts['pattern_stops']:,} stops"
        )
        return counts

    def _convert_value(self, value: str | None) -> Any:
        """Convert CSV value to appropriate Python type."""
        if value is None or value.strip() == "":
            return None
        return value.strip()

    def _has_required_values(self, row: dict[str, str | None], required: list[str]) -> bool:
        """Return True if all required columns have non-empty values."""
        for col in required:
            value = row.get(col)
            if value is None or value.strip() == "":
                return False
        return True

    def _normalize_header(self, name: str, expected: set[str]) -> str:
        """Normalize CSV header field names."""
        cleaned = name.strip().strip('"')
        for col in expected:
            if cleaned.endswith(col):
                return col
        return cleaned

    def _build_header_index(
        self,
        reader: Iterator[list[str]],
        columns: list[str],
        required: list[str],
        filename: str,
    ) -> dict[str, int]:
        """Map expected column names to their position in the CSV header.

        Optional columns absent from the header are read as NULL.
        """
        header = next(reader, None)
        if header is None:
            raise ValueError(f"{filename} is empty")
        expected = set(columns)
        header_index: dict[str, int] = {}
        for idx, name in enumerate(header):
            normalized = self._normalize_header(name, expected)
            if normalized in expected and normalized not in header_index:
                header_index[normalized] = idx
        missing = [col for col in required if col not in header_index]
        if missing:
            raise ValueError(f"{filename} missing columns: {', '.join(missing)}")
        return header_index

    def _rows(
        self, reader: Iterator[list[str]], header_index: dict[str, int]
    ) -> Iterator[dict[str, str | None]]:
        for row in reader:
            if not row:
                continue
            yield {col: row[idx] if idx < len(row) else None for col, idx in header_index.items()}

    def _verify_integrity(self, row_counts: dict[str, int]) -> None:
        """Check that every table the planner depends on has data."""
        logger.info("Verifying database integrity...")
        for table_name in [*TABLE_DEFINITIONS, "pattern_stops"]:
            if not row_counts.get(table_name):
                raise ValueError(f"No {table_name} loaded - check GTFS data")
        logger.info("Database integrity verified")


async def get_table_counts(db_path: Path) -> dict[str, int]:
    """Get row counts for all tables in the database.

    Args:
        db_path: Path to the SQLite database.

    Returns:
        Dictionary mapping table names to row counts.
    """
    counts: dict[str, int] = {}
    async with aiosqlite.connect(db_path) as db:
        for table_name in [*TABLE_DEFINITIONS, *DERIVED_TABLES]:
            async with db.execute(f"SELECT COUNT(*) FROM {table_name}") as cursor:
                row = await cursor.fetchone()
                counts[table_name] = row[0] if row else 0
    return counts
