"""Resolve raw location strings into the most specific form the provider accepts."""

from __future__ import annotations

import re
from typing import Sequence

from ...models.domain import AddressForm, CoordinateForm, PlaceIdForm, ResolvedForm, Waypoint

DEFAULT_PLACE_ID_PREFIXES = ("place_id:",)

# Plain decimal numbers only: no exponent, nan/inf or digit separators.
_DECIMAL = r"[+-]?(?:\d+(?:\.\d*)?|\.\d+)"
_COORDINATE_PATTERN = re.compile(rf"^\s*({_DECIMAL})\s*,\s*({_DECIMAL})\s*$")


class WaypointResolver:
    def __init__(self, place_id_prefixes: Sequence[str] = DEFAULT_PLACE_ID_PREFIXES) -> None:
        self.place_id_prefixes = tuple(prefix.lower() for prefix in place_id_prefixes if prefix)

    def resolve(self, text: str) -> ResolvedForm:
        """Return a place id, coordinate or address form for ``text``. Never raises."""
        cleaned = text.strip()

        lowered = cleaned.lower()
        for prefix in self.place_id_prefixes:
            if lowered.startswith(prefix):
                place_id = cleaned[len(prefix):].strip()
                if place_id:
                    return PlaceIdForm(place_id=place_id)
                break

        coordinate = _parse_coordinate(cleaned)
        if coordinate is not None:
            return coordinate

        return AddressForm(address=cleaned)

    def resolve_waypoints(self, labels: Sequence[str]) -> list[Waypoint]:
        return [
            Waypoint(index=index, label=label, form=self.resolve(label))
            for index, label in enumerate(labels)
        ]


def _parse_coordinate(text: str) -> CoordinateForm | None:
    match = _COORDINATE_PATTERN.match(text)
    if not match:
        return None
    latitude, longitude = float(match.group(1)), float(match.group(2))
    if not (-90.0 <= latitude <= 90.0 and -180.0 <= longitude <= 180.0):
        return None
    return CoordinateForm(latitude=latitude, longitude=longitude)
