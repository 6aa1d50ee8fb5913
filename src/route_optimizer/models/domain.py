"""Domain models for waypoints, edges and optimization results."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Union


@dataclass(frozen=True, slots=True)
class PlaceIdForm:
    """A location given as a provider place identifier."""

    place_id: str

    def to_waypoint_payload(self) -> dict:
        return {"placeId": self.place_id}


@dataclass(frozen=True, slots=True)
class CoordinateForm:
    """A location given as an explicit latitude/longitude pair."""

    latitude: float
    longitude: float

    def to_waypoint_payload(self) -> dict:
        return {
            "location": {
                "latLng": {"latitude": self.latitude, "longitude": self.longitude},
            }
        }


@dataclass(frozen=True, slots=True)
class AddressForm:
    """Free text that the routing provider geocodes itself."""

    address: str

    def to_waypoint_payload(self) -> dict:
        return {"address": self.address}


ResolvedForm = Union[PlaceIdForm, CoordinateForm, AddressForm]


@dataclass(frozen=True, slots=True)
class Waypoint:
    """A validated input location.

    ``index`` is the position in the validated input (0 is the origin) and is
    the identity used for every matrix lookup, so repeated labels stay
    distinct stops.
    """

    index: int
    label: str
    form: ResolvedForm


@dataclass(frozen=True, slots=True)
class Edge:
    origin: int
    destination: int
    distance_km: float
    duration_seconds: int
    path_fragment: Optional[str] = None


@dataclass(slots=True)
class RouteLeg:
    origin_label: str
    destination_label: str
    distance_km: float
    duration_seconds: int


@dataclass(slots=True)
class RouteResult:
    """Outcome of one optimization call, either a route or an error."""

    ordered_addresses: list[str] = field(default_factory=list)
    total_distance_km: float = 0.0
    total_duration_seconds: int = 0
    geometry: Optional[str] = None
    legs: list[RouteLeg] = field(default_factory=list)
    error_message: Optional[str] = None
    error_code: Optional[str] = None

    @classmethod
    def failure(cls, message: str, code: str) -> "RouteResult":
        return cls(error_message=message, error_code=code)
