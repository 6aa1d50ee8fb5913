"""Routing orchestration service."""

from __future__ import annotations

import logging

from ...config import Settings, settings
from ...models.domain import RouteResult
from ...schemas.routing import RouteLegModel, RouteRequest, RouteResponse
from .engine import RouteOptimizationEngine
from .google_routes_client import GoogleRoutesClient
from .resolver import WaypointResolver

logger = logging.getLogger(__name__)


def to_response(result: RouteResult) -> RouteResponse:
    return RouteResponse(
        optimized_addresses=result.ordered_addresses,
        total_distance=result.total_distance_km,
        total_duration=result.total_duration_seconds,
        polyline=result.geometry,
        legs=[
            RouteLegModel(
                origin=leg.origin_label,
                destination=leg.destination_label,
                distance_km=leg.distance_km,
                duration_seconds=leg.duration_seconds,
            )
            for leg in result.legs
        ],
        error_message=result.error_message,
        error_code=result.error_code,
    )


async def optimize_route(payload: RouteRequest, config: Settings | None = None) -> RouteResponse:
    config = config or settings
    logger.info(f"Optimizing route for {len(payload.addresses)} addresses")

    async with GoogleRoutesClient.from_settings(config) as client:
        engine = RouteOptimizationEngine(
            client,
            resolver=WaypointResolver(config.place_id_prefixes),
            max_parallel_requests=config.max_parallel_requests,
            close_loop_default=config.close_loop_default,
        )
        result = await engine.optimize(
            payload.addresses,
            starting_point=payload.starting_point,
            close_loop=payload.close_loop,
        )
    return to_response(result)
