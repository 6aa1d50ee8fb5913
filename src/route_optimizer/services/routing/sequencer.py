"""Greedy nearest-neighbor visit ordering.

Each step moves to the closest unvisited waypoint by distance. The result is
not globally optimal and no improvement pass (2-opt or similar) is run
afterwards.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence

from ...models.domain import Edge
from .matrix import CostMatrix


@dataclass(slots=True)
class SequencedRoute:
    """Visit order by waypoint index.

    ``stops`` starts with the origin and never repeats it; the optional
    return to the origin is kept apart in ``closing_edge``.
    """

    stops: list[int]
    closing_edge: Optional[Edge] = None


def sequence(
    origin: int,
    candidates: Sequence[int],
    matrix: CostMatrix,
    close_loop: bool = True,
) -> SequencedRoute:
    """Order ``candidates`` starting from ``origin``.

    Ties on distance go to the candidate that comes first in ``candidates``.
    The closing edge is recorded only when ``close_loop`` is set and at least
    two waypoints besides the origin were visited.
    """
    stops = [origin]
    unvisited = [candidate for candidate in candidates if candidate != origin]
    current = origin

    while unvisited:
        nearest = unvisited[0]
        min_distance = matrix.edge(current, nearest).distance_km
        for candidate in unvisited[1:]:
            distance = matrix.edge(current, candidate).distance_km
            if distance < min_distance:
                min_distance = distance
                nearest = candidate
        stops.append(nearest)
        unvisited.remove(nearest)
        current = nearest

    closing_edge = None
    if close_loop and len(stops) > 2:
        closing_edge = matrix.get((current, origin))

    return SequencedRoute(stops=stops, closing_edge=closing_edge)
