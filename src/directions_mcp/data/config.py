from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class PlannerConfig(BaseSettings):
    """Configuration for the network database and planning defaults.

    Automatically loads from environment variables and .env file.
    """

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    db_path: Path = Field(default=Path("data/network.db"), alias="DIRECTIONS_DB_PATH")
    default_max_walking_distance_meters: float = Field(
        default=1000.0, gt=0, alias="DIRECTIONS_MAX_WALK_METERS"
    )

    # network snapshot is re-read from SQLite after this many seconds
    network_cache_ttl_seconds: float = Field(default=300.0, alias="DIRECTIONS_NETWORK_CACHE_TTL")


@lru_cache
def get_planner_config() -> PlannerConfig:
    """Get planner configuration (cached singleton).

    Returns:
        PlannerConfig with values from .env file or environment variables.
    """
    return PlannerConfig()
