"""Routing request/response schemas."""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class RouteRequest(_CamelModel):
    addresses: List[str] = Field(default_factory=list, description="Locations to visit, in input order.")
    starting_point: Optional[str] = Field(
        default=None,
        description="Origin of the route. When blank the first address is used.",
    )
    close_loop: Optional[bool] = Field(
        default=None,
        description="Return to the starting point at the end. Defaults to the server setting.",
    )


class RouteLegModel(_CamelModel):
    origin: str
    destination: str
    distance_km: float
    duration_seconds: int


class RouteResponse(_CamelModel):
    optimized_addresses: List[str] = Field(default_factory=list)
    total_distance: float = Field(default=0.0, description="Kilometres.")
    total_duration: int = Field(default=0, description="Seconds.")
    polyline: Optional[str] = None
    legs: List[RouteLegModel] = Field(default_factory=list)
    error_message: Optional[str] = None
    error_code: Optional[str] = None
