"""Route optimization endpoints."""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from typing import Awaitable, TypeVar

from fastapi import APIRouter, Request, status
from fastapi.responses import JSONResponse

from ...schemas.routing import RouteRequest, RouteResponse
from ...services.routing.engine import GENERIC_FAILURE_MESSAGE
from ...services.routing.service import optimize_route

DISCONNECT_POLL_SECONDS = 0.5

T = TypeVar("T")

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/route", tags=["route"])


async def run_until_disconnect(request: Request, awaitable: Awaitable[T]) -> T:
    """Await ``awaitable``, cancelling it if the client goes away first."""
    work = asyncio.ensure_future(awaitable)

    async def watch() -> None:
        while not work.done():
            if await request.is_disconnected():
                logger.info("Client disconnected; cancelling route optimization")
                work.cancel()
                return
            await asyncio.sleep(DISCONNECT_POLL_SECONDS)

    watcher = asyncio.ensure_future(watch())
    try:
        return await work
    finally:
        watcher.cancel()


@router.post("/optimize", response_model=RouteResponse, status_code=status.HTTP_200_OK)
async def optimize(payload: RouteRequest, request: Request):
    logger.info(f"Received route optimization request for {len(payload.addresses)} addresses")
    try:
        result = await run_until_disconnect(request, optimize_route(payload))
    except Exception as exc:
        logger.exception(f"Unexpected error during route optimization: {exc}")
        failure = RouteResponse(
            error_message=GENERIC_FAILURE_MESSAGE,
            error_code="internal_error",
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=failure.model_dump(by_alias=True),
        )

    if result.error_message:
        logger.warning(f"Route optimization failed: {result.error_message}")
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=result.model_dump(by_alias=True),
        )

    logger.info(
        f"Route optimization completed successfully. Total distance: {result.total_distance:.2f}km, "
        f"Duration: {result.total_duration}s"
    )
    return result


@router.get("/health", status_code=status.HTTP_200_OK)
def route_health() -> dict:
    return {"status": "healthy", "timestamp": datetime.now(timezone.utc).isoformat()}
