"""Failure types raised while building and sequencing a route."""

from __future__ import annotations


class RoutingError(Exception):
    """Base class for failures that end an optimization call."""

    code = "routing_error"


class InsufficientInput(RoutingError):
    code = "insufficient_input"


class AuthenticationFailure(RoutingError):
    """The routing provider rejected (or was never given) credentials."""

    code = "authentication_failure"


class NoRouteFound(RoutingError):
    code = "no_route_found"

    def __init__(self, origin: str, destination: str) -> None:
        super().__init__(f"No route found between '{origin}' and '{destination}'.")


class TransportFailure(RoutingError):
    """Network or HTTP level failure talking to the routing provider.

    ``retryable`` is False for rejections that will not change on a second
    attempt (a 400 for an invalid request, for example).
    """

    code = "transport_failure"

    def __init__(self, message: str, *, retryable: bool = True, status_code: int | None = None) -> None:
        super().__init__(message)
        self.retryable = retryable
        self.status_code = status_code


class MalformedResponse(RoutingError):
    code = "malformed_response"
