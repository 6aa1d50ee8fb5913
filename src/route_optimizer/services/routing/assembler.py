"""Turn a sequenced route into totals, legs and a single geometry string."""

from __future__ import annotations

from typing import Sequence

from ...models.domain import Edge, RouteLeg, RouteResult, Waypoint
from .matrix import CostMatrix
from .sequencer import SequencedRoute


def traversed_edges(route: SequencedRoute, matrix: CostMatrix) -> list[Edge]:
    edges = [matrix.edge(origin, destination) for origin, destination in zip(route.stops, route.stops[1:])]
    if route.closing_edge is not None:
        edges.append(route.closing_edge)
    return edges


def assemble(route: SequencedRoute, matrix: CostMatrix, waypoints: Sequence[Waypoint]) -> RouteResult:
    """Sum only the edges the route actually uses.

    Path fragments are joined in traversal order as-is; overlapping points at
    segment boundaries are not merged.
    """
    labels = {waypoint.index: waypoint.label for waypoint in waypoints}
    edges = traversed_edges(route, matrix)

    fragments = [edge.path_fragment for edge in edges if edge.path_fragment]
    legs = [
        RouteLeg(
            origin_label=labels[edge.origin],
            destination_label=labels[edge.destination],
            distance_km=edge.distance_km,
            duration_seconds=edge.duration_seconds,
        )
        for edge in edges
    ]

    return RouteResult(
        ordered_addresses=[labels[index] for index in route.stops],
        total_distance_km=sum(edge.distance_km for edge in edges),
        total_duration_seconds=sum(edge.duration_seconds for edge in edges),
        geometry="".join(fragments) if fragments else None,
        legs=legs,
    )
