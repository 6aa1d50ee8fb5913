"""Waypoint sequencing: resolve, price every pair, order greedily, assemble."""

from .engine import RouteOptimizationEngine
from .errors import (
    AuthenticationFailure,
    InsufficientInput,
    MalformedResponse,
    NoRouteFound,
    RoutingError,
    TransportFailure,
)

__all__ = [
    "RouteOptimizationEngine",
    "RoutingError",
    "InsufficientInput",
    "AuthenticationFailure",
    "NoRouteFound",
    "TransportFailure",
    "MalformedResponse",
]
