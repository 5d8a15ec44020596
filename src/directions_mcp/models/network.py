"""Pydantic models for the transit network snapshot."""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class Coordinate(BaseModel):
    """A WGS84 point in degrees."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    latitude: float = Field(ge=-90, le=90)
    longitude: float = Field(ge=-180, le=180)


class Stop(BaseModel):
    """A stop as it appears on one route.

    A physical stop served by several routes appears once per route, each
    with its own sequence_index.
    """

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    id: str
    name: str
    latitude: float
    longitude: float
    sequence_index: int = Field(ge=0, description="0-based position along the route")

    @property
    def coordinate(self) -> Coordinate:
        return Coordinate(latitude=self.latitude, longitude=self.longitude)


class Route(BaseModel):
    """A route traversed in one direction.

    Stops are ordered by sequence_index; the opposite direction is a
    separate Route.
    """

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    id: str
    name: str
    number: str
    stops: list[Stop] = Field(default_factory=list)
