"""Typed view of the Google Routes computeRoutes response.

Only the fields selected by the request field mask are modelled. Proto3 JSON
omits zero values, so every field is optional.
"""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class EncodedPolyline(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    encoded_polyline: Optional[str] = Field(default=None, alias="encodedPolyline")


class ComputedRoute(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    distance_meters: int = Field(default=0, ge=0, alias="distanceMeters")
    duration: Optional[str] = None
    polyline: Optional[EncodedPolyline] = None


class ComputeRoutesResponse(BaseModel):
    routes: List[ComputedRoute] = Field(default_factory=list)


class ErrorDetail(BaseModel):
    reason: Optional[str] = None


class ErrorStatus(BaseModel):
    code: Optional[int] = None
    message: Optional[str] = None
    status: Optional[str] = None
    details: List[ErrorDetail] = Field(default_factory=list)


class ErrorEnvelope(BaseModel):
    error: ErrorStatus
