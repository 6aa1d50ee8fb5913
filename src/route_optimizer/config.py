"""Application configuration and settings management."""

from typing import Any, Literal, Optional

import json
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration loaded from environment variables or defaults."""

    model_config = SettingsConfigDict(
        env_prefix="ROUTE_OPT_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
    )

    app_name: str = "Route Optimization API"
    api_prefix: str = "/api"
    google_maps_api_key: Optional[str] = Field(
        default=None,
        description="API key sent to the Google Routes API with every request.",
    )
    routes_api_url: str = Field(
        default="https://routes.googleapis.com/directions/v2:computeRoutes",
        description="Google Routes computeRoutes endpoint.",
    )
    routes_field_mask: str = Field(
        default="routes.duration,routes.distanceMeters,routes.polyline.encodedPolyline",
        description="Response field mask limiting the payload to duration, distance and path.",
    )
    travel_mode: Literal["DRIVE", "BICYCLE", "WALK", "TWO_WHEELER"] = "DRIVE"
    routing_preference: Literal["TRAFFIC_UNAWARE", "TRAFFIC_AWARE", "TRAFFIC_AWARE_OPTIMAL"] = "TRAFFIC_AWARE"
    language_code: str = "en-US"
    units: Literal["METRIC", "IMPERIAL"] = "METRIC"
    avoid_tolls: bool = False
    avoid_highways: bool = False
    avoid_ferries: bool = False
    request_timeout_seconds: float = Field(default=15.0, gt=0.0)
    connect_timeout_seconds: float = Field(default=5.0, gt=0.0)
    max_retries: int = Field(default=3, ge=0)
    backoff_seconds: float = Field(default=0.5, ge=0.0)
    max_parallel_requests: int = Field(
        default=8,
        ge=1,
        description="Upper bound on concurrent pairwise requests during a matrix build.",
    )
    close_loop_default: bool = Field(
        default=True,
        description="Add the return leg to the starting point when the request does not say.",
    )
    place_id_prefixes: tuple[str, ...] = Field(
        default=("place_id:",),
        description="Prefixes marking an input as a Google place identifier.",
    )
    frontend_allowed_origins: tuple[str, ...] = Field(
        default=(
            "http://localhost:3000",
            "http://localhost:5173",
        ),
        description="Permitted web origins for browser clients (CORS).",
    )

    @field_validator("frontend_allowed_origins", "place_id_prefixes", mode="before")
    @classmethod
    def _parse_str_tuple_from_env(cls, value: Any) -> tuple[str, ...]:
        """Parse string tuple from environment variable (comma-separated or JSON array)."""
        if isinstance(value, tuple):
            return value
        if isinstance(value, list):
            return tuple(str(item) for item in value)
        if isinstance(value, str):
            try:
                parsed = json.loads(value)
                if isinstance(parsed, list):
                    return tuple(str(item) for item in parsed)
            except (json.JSONDecodeError, TypeError):
                pass
            if "," in value:
                return tuple(item.strip() for item in value.split(",") if item.strip())
            if value.strip():
                return (value.strip(),)
        return tuple()

    @field_validator("google_maps_api_key", mode="before")
    @classmethod
    def _strip_api_key(cls, value: Any) -> Optional[str]:
        if value is None:
            return None
        cleaned = str(value).strip()
        return cleaned or None


settings = Settings()
