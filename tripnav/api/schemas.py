"""Pydantic request / response schemas for the REST API."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, Field

from tripnav.domain.entities import CameraConfig, Location, Route, TransitionResult
from tripnav.domain.enums import NavigationPhase, TransitionErrorKind


# ── Requests ──────────────────────────────────────────────────────────


class LocationSchema(BaseModel):
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)

    def to_domain(self) -> Location:
        return Location(self.latitude, self.longitude)

    @classmethod
    def from_domain(cls, location: Optional[Location]) -> Optional[LocationSchema]:
        if location is None:
            return None
        return cls(latitude=location.latitude, longitude=location.longitude)


class SessionCreateRequest(BaseModel):
    ride_id: str = Field(..., min_length=1, max_length=64)
    pickup: LocationSchema
    destination: LocationSchema
    driver_location: Optional[LocationSchema] = None
    initial_phase: NavigationPhase = NavigationPhase.TO_PICKUP


class TransitionRequest(BaseModel):
    target_phase: NavigationPhase


class ForcePhaseRequest(BaseModel):
    phase: NavigationPhase


# ── Responses ─────────────────────────────────────────────────────────


class ActionResponse(BaseModel):
    type: str
    payload: dict[str, Any] = {}


class TransitionResultResponse(BaseModel):
    success: bool
    from_phase: NavigationPhase
    to_phase: NavigationPhase
    executed_actions: list[ActionResponse] = []
    error: Optional[str] = None
    error_kind: Optional[TransitionErrorKind] = None

    @classmethod
    def from_result(cls, result: TransitionResult) -> TransitionResultResponse:
        return cls(
            success=result.success,
            from_phase=result.from_phase,
            to_phase=result.to_phase,
            executed_actions=[
                ActionResponse(type=a.type.value, payload=dict(a.payload))
                for a in result.executed_actions
            ],
            error=result.error,
            error_kind=result.error_kind,
        )


class CameraResponse(BaseModel):
    type: str
    mode: str
    center: Optional[LocationSchema] = None
    zoom: float
    pitch: float
    bearing: float
    duration_ms: int

    @classmethod
    def from_domain(cls, camera: Optional[CameraConfig]) -> Optional[CameraResponse]:
        if camera is None:
            return None
        return cls(
            type=camera.type.value,
            mode=camera.mode.value,
            center=LocationSchema.from_domain(camera.center),
            zoom=camera.zoom,
            pitch=camera.pitch,
            bearing=camera.bearing,
            duration_ms=camera.duration_ms,
        )


class RouteResponse(BaseModel):
    origin: LocationSchema
    destination: LocationSchema
    distance_m: float
    duration_s: float

    @classmethod
    def from_domain(cls, route: Optional[Route]) -> Optional[RouteResponse]:
        if route is None:
            return None
        return cls(
            origin=LocationSchema.from_domain(route.origin),
            destination=LocationSchema.from_domain(route.destination),
            distance_m=route.distance_m,
            duration_s=route.duration_s,
        )


class SurfaceResponse(BaseModel):
    route: Optional[RouteResponse] = None
    camera: Optional[CameraResponse] = None
    show_pickup_geofence: bool
    show_destination_geofence: bool
    navigation_active: bool
    voice_muted: bool
    announcements: list[str] = []


class TransitionPreview(BaseModel):
    phase: NavigationPhase
    description: str
    recalculates_route: bool
    updates_geofences: bool
    expected_duration_ms: int


class SessionResponse(BaseModel):
    id: str
    ride_id: str
    current_phase: NavigationPhase
    previous_phase: Optional[NavigationPhase] = None
    is_transitioning: bool
    valid_next_phases: list[NavigationPhase]
    next_transitions: list[TransitionPreview] = []
    driver_location: Optional[LocationSchema] = None
    error: Optional[str] = None
    last_transition: Optional[TransitionResultResponse] = None
    surface: SurfaceResponse
    created_at: datetime


class SessionSummary(BaseModel):
    id: str
    ride_id: str
    current_phase: NavigationPhase
    is_transitioning: bool
    created_at: datetime


class HealthResponse(BaseModel):
    status: str = "ok"
    active_sessions: int = 0


class ErrorResponse(BaseModel):
    detail: str
