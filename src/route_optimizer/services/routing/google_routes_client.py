"""HTTP client for pairwise travel costs from the Google Routes API."""

from __future__ import annotations

import asyncio
import logging
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

import httpx
from pydantic import ValidationError

from ...config import Settings
from ...models.domain import Edge, Waypoint
from ...schemas.google_routes import ComputeRoutesResponse, ErrorEnvelope
from .errors import AuthenticationFailure, MalformedResponse, NoRouteFound, TransportFailure

DEFAULT_ROUTES_API_URL = "https://routes.googleapis.com/directions/v2:computeRoutes"
DEFAULT_FIELD_MASK = "routes.duration,routes.distanceMeters,routes.polyline.encodedPolyline"
DEFAULT_MAX_PARALLEL_REQUESTS = 8

# Google reports a bad key as 400 INVALID_ARGUMENT with one of these reasons.
AUTH_ERROR_MARKERS = ("API_KEY_INVALID", "API_KEY_NOT_FOUND", "API_KEY_EXPIRED")
RETRYABLE_STATUS_CODES = frozenset({408, 429})

logger = logging.getLogger(__name__)


def parse_duration_seconds(value: str | None) -> int:
    """Parse a protobuf duration such as ``"317.5s"`` into whole seconds.

    Rounds half up. Anything unparseable yields 0.
    """
    if value is None:
        return 0
    text = value.strip()
    if text.endswith("s"):
        text = text[:-1]
    try:
        seconds = Decimal(text)
    except InvalidOperation:
        logger.warning(f"Could not parse route duration {value!r}; using 0 seconds")
        return 0
    if not seconds.is_finite():
        logger.warning(f"Non-finite route duration {value!r}; using 0 seconds")
        return 0
    return max(0, int(seconds.quantize(Decimal(1), rounding=ROUND_HALF_UP)))


class GoogleRoutesClient:
    """Pairwise cost provider backed by ``directions/v2:computeRoutes``.

    Use as an async context manager; the underlying ``httpx.AsyncClient`` is
    opened on enter and its pool is sized to ``max_parallel_requests``.
    """

    def __init__(
        self,
        api_key: str | None,
        *,
        base_url: str = DEFAULT_ROUTES_API_URL,
        field_mask: str = DEFAULT_FIELD_MASK,
        travel_mode: str = "DRIVE",
        routing_preference: str = "TRAFFIC_AWARE",
        language_code: str = "en-US",
        units: str = "METRIC",
        avoid_tolls: bool = False,
        avoid_highways: bool = False,
        avoid_ferries: bool = False,
        timeout: float = 15.0,
        connect_timeout: float = 5.0,
        max_retries: int = 3,
        backoff_seconds: float = 0.5,
        max_parallel_requests: int = DEFAULT_MAX_PARALLEL_REQUESTS,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.api_key = api_key
        self.base_url = base_url
        self.field_mask = field_mask
        self.travel_mode = travel_mode
        self.routing_preference = routing_preference
        self.language_code = language_code
        self.units = units
        self.avoid_tolls = avoid_tolls
        self.avoid_highways = avoid_highways
        self.avoid_ferries = avoid_ferries
        self.timeout = timeout
        self.connect_timeout = connect_timeout
        self.max_retries = max_retries
        self.backoff_seconds = backoff_seconds
        self.max_parallel_requests = max_parallel_requests
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    @classmethod
    def from_settings(cls, config: Settings, **overrides) -> "GoogleRoutesClient":
        options = dict(
            base_url=config.routes_api_url,
            field_mask=config.routes_field_mask,
            travel_mode=config.travel_mode,
            routing_preference=config.routing_preference,
            language_code=config.language_code,
            units=config.units,
            avoid_tolls=config.avoid_tolls,
            avoid_highways=config.avoid_highways,
            avoid_ferries=config.avoid_ferries,
            timeout=config.request_timeout_seconds,
            connect_timeout=config.connect_timeout_seconds,
            max_retries=config.max_retries,
            backoff_seconds=config.backoff_seconds,
            max_parallel_requests=config.max_parallel_requests,
        )
        options.update(overrides)
        return cls(config.google_maps_api_key, **options)

    async def __aenter__(self) -> "GoogleRoutesClient":
        self._client = httpx.AsyncClient(
            timeout=httpx.Timeout(self.timeout, connect=self.connect_timeout),
            limits=httpx.Limits(
                max_connections=self.max_parallel_requests,
                max_keepalive_connections=self.max_parallel_requests,
            ),
            transport=self._transport,
        )
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    def build_request_body(self, origin: Waypoint, destination: Waypoint) -> dict:
        return {
            "origin": origin.form.to_waypoint_payload(),
            "destination": destination.form.to_waypoint_payload(),
            "travelMode": self.travel_mode,
            "routingPreference": self.routing_preference,
            "computeAlternativeRoutes": False,
            "routeModifiers": {
                "avoidTolls": self.avoid_tolls,
                "avoidHighways": self.avoid_highways,
                "avoidFerries": self.avoid_ferries,
            },
            "languageCode": self.language_code,
            "units": self.units,
        }

    async def cost(self, origin: Waypoint, destination: Waypoint) -> Edge:
        """Fetch distance, duration and path for one ordered pair.

        Transient transport failures are retried with exponential backoff;
        every other failure is raised on the first occurrence.
        """
        if not self.api_key:
            raise AuthenticationFailure("Google Maps API key is not configured.")

        body = self.build_request_body(origin, destination)
        attempt = 0
        while True:
            try:
                response = await self._send(body)
                self._raise_for_status(response)
                return self._parse_edge(response, origin, destination)
            except TransportFailure as exc:
                attempt += 1
                if not exc.retryable or attempt > self.max_retries:
                    logger.warning(
                        f"Google Routes request {origin.label!r} -> {destination.label!r} "
                        f"failed with HTTP status {exc.status_code} after {attempt} attempt(s): {exc}"
                    )
                    raise
                wait_time = self.backoff_seconds * (2 ** (attempt - 1))
                logger.debug(
                    f"Google Routes transport error, retrying in {wait_time:.1f}s "
                    f"(attempt {attempt}/{self.max_retries}): {exc}"
                )
                await asyncio.sleep(wait_time)

    async def _send(self, body: dict) -> httpx.Response:
        if self._client is None:
            raise RuntimeError("GoogleRoutesClient must be entered with 'async with' before use.")
        headers = {
            "X-Goog-Api-Key": self.api_key or "",
            "X-Goog-FieldMask": self.field_mask,
        }
        try:
            return await self._client.post(self.base_url, json=body, headers=headers)
        except httpx.TimeoutException as exc:
            raise TransportFailure(f"Google Routes request timed out: {exc!r}") from exc
        except httpx.RequestError as exc:
            raise TransportFailure(f"Failed to reach Google Routes API at {self.base_url}: {exc}") from exc

    def _raise_for_status(self, response: httpx.Response) -> None:
        if response.is_success:
            return
        status_code = response.status_code
        detail = _error_summary(response)
        if status_code in (401, 403) or any(marker in detail for marker in AUTH_ERROR_MARKERS):
            raise AuthenticationFailure(
                "Invalid or missing Google Maps API key. Please check your configuration."
            )
        retryable = status_code in RETRYABLE_STATUS_CODES or status_code >= 500
        raise TransportFailure(
            f"Google Routes API returned HTTP {status_code}: {detail}",
            retryable=retryable,
            status_code=status_code,
        )

    def _parse_edge(self, response: httpx.Response, origin: Waypoint, destination: Waypoint) -> Edge:
        try:
            payload = response.json()
        except ValueError as exc:
            raise MalformedResponse("Google Routes API returned a non-JSON body.") from exc
        try:
            parsed = ComputeRoutesResponse.model_validate(payload)
        except ValidationError as exc:
            raise MalformedResponse(f"Unexpected Google Routes response shape: {exc}") from exc

        if not parsed.routes:
            raise NoRouteFound(origin.label, destination.label)

        route = parsed.routes[0]
        return Edge(
            origin=origin.index,
            destination=destination.index,
            distance_km=route.distance_meters / 1000.0,
            duration_seconds=parse_duration_seconds(route.duration),
            path_fragment=route.polyline.encoded_polyline if route.polyline else None,
        )


def _error_summary(response: httpx.Response) -> str:
    """Best-effort one-line description of an error response."""
    try:
        envelope = ErrorEnvelope.model_validate(response.json())
    except (ValueError, ValidationError):
        return response.text[:200]
    error = envelope.error
    reasons = [detail.reason for detail in error.details if detail.reason]
    parts = [part for part in (error.status, error.message, *reasons) if part]
    return " | ".join(parts) or response.text[:200]
