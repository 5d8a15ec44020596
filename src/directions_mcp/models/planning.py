from enum import Enum

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    SerializerFunctionWrapHandler,
    model_serializer,
)
from pydantic.alias_generators import to_camel

from directions_mcp.models.network import Coordinate

DEFAULT_MAX_WALKING_DISTANCE_METERS = 1000.0
DEFAULT_LIMIT = 3
MIN_LIMIT = 1
MAX_LIMIT = 5


class _CamelModel(BaseModel):
    """Base for planning models: snake_case in Python, camelCase on the wire."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    # Unset optional fields are left out of the output, including when
    # FastMCP serializes a tool result.
    @model_serializer(mode="wrap")
    def omit_none_fields(self, handler: SerializerFunctionWrapHandler):
        data = handler(self)
        if isinstance(data, dict):
            return {key: value for key, value in data.items() if value is not None}
        return data


class LegType(str, Enum):
    """How a leg is travelled."""

    WALK = "walk"
    BUS = "bus"


class PlanRequest(_CamelModel):
    """Validated planning request."""

    model_config = ConfigDict(frozen=True)

    origin: Coordinate
    destination: Coordinate
    max_walking_distance_meters: float = Field(
        default=DEFAULT_MAX_WALKING_DISTANCE_METERS,
        gt=0,
        description="Furthest a stop may be from origin or destination to be used",
    )
    limit: int | None = Field(
        default=None, description="Maximum itineraries to return (clamped to 1-5, default 3)"
    )


class PlanLeg(_CamelModel):
    """Single homogeneous segment of an itinerary."""

    type: LegType
    distance_meters: float = Field(ge=0)
    duration_minutes: float = Field(ge=0)
    start: Coordinate
    end: Coordinate

    # Bus legs only
    route_id: str | None = None
    route_name: str | None = None
    route_number: str | None = None
    start_stop_id: str | None = None
    start_stop_name: str | None = None
    end_stop_id: str | None = None
    end_stop_name: str | None = None
    stop_count: int | None = Field(
        default=None, description="Stops travelled, including boarding and alighting stops"
    )


class PlanItinerary(_CamelModel):
    """Complete journey from origin to destination.

    Either a single walk leg or walk, bus, walk.
    """

    legs: list[PlanLeg] = Field(description="Ordered list of legs")
    total_distance_meters: float
    total_duration_minutes: float

    # Copied from the bus leg when there is one
    route_id: str | None = None
    route_name: str | None = None
    route_number: str | None = None
    start_stop_id: str | None = None
    end_stop_id: str | None = None


class PlanResponse(_CamelModel):
    """Ranked itineraries for one request."""

    generated_at: str = Field(description="ISO-8601 timestamp")
    itineraries: list[PlanItinerary] = Field(default_factory=list)
    count: int = Field(description="Number of itineraries returned")
