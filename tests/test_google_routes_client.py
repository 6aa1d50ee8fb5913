import asyncio
import json

import httpx
import pytest

from src.route_optimizer.models.domain import AddressForm, CoordinateForm, PlaceIdForm, Waypoint
from src.route_optimizer.services.routing.errors import (
    AuthenticationFailure,
    MalformedResponse,
    NoRouteFound,
    TransportFailure,
)
from src.route_optimizer.services.routing.google_routes_client import (
    DEFAULT_FIELD_MASK,
    GoogleRoutesClient,
    parse_duration_seconds,
)

ORIGIN = Waypoint(index=0, label="Copenhagen Central Station", form=AddressForm("Copenhagen Central Station"))
DESTINATION = Waypoint(index=1, label="55.6713366,12.5114235", form=CoordinateForm(55.6713366, 12.5114235))

ROUTE_PAYLOAD = {
    "routes": [
        {
            "distanceMeters": 12345,
            "duration": "317.5s",
            "polyline": {"encodedPolyline": "_p~iF~ps|U_ulLnnqC"},
        }
    ]
}


class RecordingHandler:
    """Replays queued responses (or exceptions) and records every request."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        outcome = self.responses.pop(0) if len(self.responses) > 1 else self.responses[0]
        if isinstance(outcome, Exception):
            raise outcome
        status_code, body = outcome
        if isinstance(body, str):
            return httpx.Response(status_code, text=body)
        return httpx.Response(status_code, json=body)


def _cost(handler, api_key="test-key", origin=ORIGIN, destination=DESTINATION, **options):
    options.setdefault("backoff_seconds", 0.0)

    async def run():
        async with GoogleRoutesClient(api_key, transport=httpx.MockTransport(handler), **options) as client:
            return await client.cost(origin, destination)

    return asyncio.run(run())


def test_cost_parses_route_and_sends_field_mask():
    handler = RecordingHandler((200, ROUTE_PAYLOAD))

    edge = _cost(handler)

    assert edge.origin == 0
    assert edge.destination == 1
    assert edge.distance_km == pytest.approx(12.345)
    assert edge.duration_seconds == 318
    assert edge.path_fragment == "_p~iF~ps|U_ulLnnqC"

    request = handler.requests[0]
    assert request.method == "POST"
    assert request.headers["X-Goog-Api-Key"] == "test-key"
    assert request.headers["X-Goog-FieldMask"] == DEFAULT_FIELD_MASK
    body = json.loads(request.content)
    assert body["origin"] == {"address": "Copenhagen Central Station"}
    assert body["destination"] == {
        "location": {"latLng": {"latitude": 55.6713366, "longitude": 12.5114235}}
    }
    assert body["travelMode"] == "DRIVE"
    assert body["routingPreference"] == "TRAFFIC_AWARE"
    assert body["computeAlternativeRoutes"] is False
    assert body["units"] == "METRIC"


def test_place_id_waypoints_are_sent_as_place_ids():
    handler = RecordingHandler((200, ROUTE_PAYLOAD))
    origin = Waypoint(index=3, label="place_id:abc", form=PlaceIdForm("abc"))

    edge = _cost(handler, origin=origin)

    assert edge.origin == 3
    assert json.loads(handler.requests[0].content)["origin"] == {"placeId": "abc"}


@pytest.mark.parametrize(
    "value, expected",
    [
        ("12s", 12),
        ("0.5s", 1),
        ("1.49s", 1),
        ("2.5", 3),
        ("abc", 0),
        ("", 0),
        (None, 0),
        ("NaNs", 0),
        ("-3s", 0),
    ],
)
def test_parse_duration_seconds(value, expected):
    assert parse_duration_seconds(value) == expected


def test_missing_fields_default_to_zero():
    handler = RecordingHandler((200, {"routes": [{}]}))

    edge = _cost(handler)

    assert edge.distance_km == 0.0
    assert edge.duration_seconds == 0
    assert edge.path_fragment is None


def test_unparseable_duration_does_not_fail_the_call():
    handler = RecordingHandler((200, {"routes": [{"distanceMeters": 1000, "duration": "soon"}]}))

    edge = _cost(handler)

    assert edge.distance_km == pytest.approx(1.0)
    assert edge.duration_seconds == 0


def test_zero_routes_is_no_route_found():
    handler = RecordingHandler((200, {}))

    with pytest.raises(NoRouteFound) as excinfo:
        _cost(handler)

    assert str(excinfo.value) == f"No route found between '{ORIGIN.label}' and '{DESTINATION.label}'."
    assert len(handler.requests) == 1


def test_missing_api_key_fails_without_calling_the_api():
    handler = RecordingHandler((200, ROUTE_PAYLOAD))

    with pytest.raises(AuthenticationFailure):
        _cost(handler, api_key=None)

    assert handler.requests == []


def test_forbidden_is_authentication_failure_and_not_retried():
    handler = RecordingHandler((403, {"error": {"code": 403, "status": "PERMISSION_DENIED"}}))

    with pytest.raises(AuthenticationFailure):
        _cost(handler, max_retries=3)

    assert len(handler.requests) == 1


def test_invalid_key_reason_is_authentication_failure():
    body = {
        "error": {
            "code": 400,
            "message": "API key not valid. Please pass a valid API key.",
            "status": "INVALID_ARGUMENT",
            "details": [{"@type": "type.googleapis.com/google.rpc.ErrorInfo", "reason": "API_KEY_INVALID"}],
        }
    }
    handler = RecordingHandler((400, body))

    with pytest.raises(AuthenticationFailure):
        _cost(handler)

    assert len(handler.requests) == 1


def test_server_errors_are_retried_until_success():
    handler = RecordingHandler(
        (503, {"error": {"code": 503, "status": "UNAVAILABLE"}}),
        (500, "internal"),
        (200, ROUTE_PAYLOAD),
    )

    edge = _cost(handler, max_retries=3)

    assert edge.distance_km == pytest.approx(12.345)
    assert len(handler.requests) == 3


def test_timeouts_exhaust_retries_then_fail():
    handler = RecordingHandler(httpx.ReadTimeout("timed out"))

    with pytest.raises(TransportFailure) as excinfo:
        _cost(handler, max_retries=2)

    assert excinfo.value.retryable is True
    assert len(handler.requests) == 3


def test_network_errors_are_transport_failures():
    handler = RecordingHandler(httpx.ConnectError("connection refused"))

    with pytest.raises(TransportFailure):
        _cost(handler, max_retries=0)

    assert len(handler.requests) == 1


def test_bad_request_is_not_retried(caplog: pytest.LogCaptureFixture):
    handler = RecordingHandler((400, {"error": {"code": 400, "status": "INVALID_ARGUMENT", "message": "bad origin"}}))

    with pytest.raises(TransportFailure) as excinfo:
        _cost(handler, max_retries=3)

    assert excinfo.value.retryable is False
    assert excinfo.value.status_code == 400
    assert "INVALID_ARGUMENT" in str(excinfo.value)
    assert len(handler.requests) == 1
    assert "HTTP status 400" in caplog.text


@pytest.mark.parametrize("body", ["<html>oops</html>", {"routes": "none"}, {"routes": [{"distanceMeters": -5}]}])
def test_unexpected_payloads_are_malformed(body):
    handler = RecordingHandler((200, body))

    with pytest.raises(MalformedResponse):
        _cost(handler)


def test_client_requires_context_manager():
    client = GoogleRoutesClient("test-key")

    with pytest.raises(RuntimeError):
        asyncio.run(client.cost(ORIGIN, DESTINATION))
