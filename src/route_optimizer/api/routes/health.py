"""Health endpoints."""

from __future__ import annotations

from fastapi import APIRouter, status

from ...config import settings

router = APIRouter(tags=["health"])


@router.get("/health", status_code=status.HTTP_200_OK)
def health_root() -> dict:
    """Simple health check endpoint that doesn't require any dependencies."""
    return {"status": "ok"}


@router.get("/health/config", status_code=status.HTTP_200_OK)
def health_config() -> dict:
    """Report whether the routing provider is configured, without calling it."""
    return {
        "service": "google_routes",
        "api_key_configured": bool(settings.google_maps_api_key),
        "max_parallel_requests": settings.max_parallel_requests,
    }
