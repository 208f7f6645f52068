"""
Navigation session endpoints
============================

POST   /api/v1/sessions                             -- open a session for a ride
GET    /api/v1/sessions/{session_id}                -- phase + surface state
PUT    /api/v1/sessions/{session_id}/location       -- report the driver location
POST   /api/v1/sessions/{session_id}/transitions    -- request a phase change
POST   /api/v1/sessions/{session_id}/transitions/retry -- retry the last attempt
POST   /api/v1/sessions/{session_id}/force          -- operator phase override
DELETE /api/v1/sessions/{session_id}                -- end the session
"""

from fastapi import APIRouter, Depends, HTTPException, Request, Response

from tripnav.api.dependencies import get_registry, get_session
from tripnav.api.middleware import limiter
from tripnav.api.schemas import (
    CameraResponse,
    ErrorResponse,
    ForcePhaseRequest,
    LocationSchema,
    RouteResponse,
    SessionCreateRequest,
    SessionResponse,
    SurfaceResponse,
    TransitionPreview,
    TransitionRequest,
    TransitionResultResponse,
)
from tripnav.config import settings
from tripnav.domain import phase_graph
from tripnav.domain.errors import NoTransitionToRetry, SessionNotFound
from tripnav.infrastructure.sessions import NavigationSession, SessionRegistry

router = APIRouter(prefix="/sessions", tags=["sessions"])


def transition_previews(session: NavigationSession) -> list[TransitionPreview]:
    current = session.manager.current_phase
    return [
        TransitionPreview(
            phase=target,
            description=phase_graph.get_transition_description(current, target),
            recalculates_route=phase_graph.requires_route_recalculation(current, target),
            updates_geofences=phase_graph.requires_geofence_update(current, target),
            expected_duration_ms=phase_graph.expected_transition_duration_ms(current, target),
        )
        for target in session.manager.get_valid_next_phases()
    ]


def session_response(session: NavigationSession) -> SessionResponse:
    manager, surface = session.manager, session.surface
    last = manager.last_transition_result
    return SessionResponse(
        id=session.id,
        ride_id=session.ride_id,
        current_phase=manager.current_phase,
        previous_phase=manager.previous_phase,
        is_transitioning=manager.is_transitioning,
        valid_next_phases=manager.get_valid_next_phases(),
        next_transitions=transition_previews(session),
        driver_location=LocationSchema.from_domain(manager.snapshot.driver_location),
        error=manager.error,
        last_transition=TransitionResultResponse.from_result(last) if last else None,
        surface=SurfaceResponse(
            route=RouteResponse.from_domain(surface.route),
            camera=CameraResponse.from_domain(surface.camera),
            show_pickup_geofence=surface.show_pickup_geofence,
            show_destination_geofence=surface.show_destination_geofence,
            navigation_active=surface.is_navigation_active,
            voice_muted=surface.voice_muted,
            announcements=list(surface.announcements),
        ),
        created_at=session.created_at,
    )


@router.post(
    "",
    status_code=201,
    response_model=SessionResponse,
    summary="Open a navigation session for a ride",
)
@limiter.limit(settings.rate_limit)
async def create_session(
    request: Request,
    body: SessionCreateRequest,
    registry: SessionRegistry = Depends(get_registry),
):
    session = registry.create(
        ride_id=body.ride_id,
        pickup=body.pickup.to_domain(),
        destination=body.destination.to_domain(),
        driver_location=body.driver_location.to_domain() if body.driver_location else None,
        initial_phase=body.initial_phase,
    )
    return session_response(session)


@router.get(
    "/{session_id}",
    response_model=SessionResponse,
    summary="Get phase and navigation surface state",
    responses={404: {"model": ErrorResponse}},
)
@limiter.limit(settings.rate_limit)
async def get_session_state(
    request: Request,
    session: NavigationSession = Depends(get_session),
):
    return session_response(session)


@router.put(
    "/{session_id}/location",
    response_model=SessionResponse,
    summary="Report the driver's latest location",
    description=(
        "Updates the context used by the next transition and runs a "
        "geofence check immediately, which may advance the trip."
    ),
)
@limiter.limit(settings.rate_limit)
async def update_location(
    request: Request,
    body: LocationSchema,
    session: NavigationSession = Depends(get_session),
):
    session.update_location(body.to_domain())
    await session.monitor.check()
    return session_response(session)


@router.post(
    "/{session_id}/transitions",
    response_model=TransitionResultResponse,
    summary="Request a phase transition",
    description="Failures are reported in the body (`success=false`), not as HTTP errors.",
)
@limiter.limit(settings.rate_limit)
async def request_transition(
    request: Request,
    body: TransitionRequest,
    session: NavigationSession = Depends(get_session),
):
    result = await session.transition(body.target_phase)
    return TransitionResultResponse.from_result(result)


@router.post(
    "/{session_id}/transitions/retry",
    response_model=TransitionResultResponse,
    summary="Retry the last attempted transition",
    responses={
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse, "description": "No transition has been attempted yet."},
    },
)
@limiter.limit(settings.rate_limit)
async def retry_transition(
    request: Request,
    session: NavigationSession = Depends(get_session),
):
    try:
        result = await session.retry()
    except NoTransitionToRetry as exc:
        raise HTTPException(status_code=409, detail=str(exc))
    return TransitionResultResponse.from_result(result)


@router.post(
    "/{session_id}/force",
    response_model=SessionResponse,
    summary="Force a phase without running transition actions",
    description=(
        "Operator recovery only. Route, camera, geofence and voice state are "
        "left untouched and may be stale for the new phase."
    ),
)
@limiter.limit(settings.rate_limit)
async def force_phase(
    request: Request,
    body: ForcePhaseRequest,
    session: NavigationSession = Depends(get_session),
):
    session.manager.force_phase_change(body.phase)
    return session_response(session)


@router.delete(
    "/{session_id}",
    status_code=204,
    summary="End a navigation session",
    responses={404: {"model": ErrorResponse}},
)
@limiter.limit(settings.rate_limit)
async def end_session(
    request: Request,
    session_id: str,
    registry: SessionRegistry = Depends(get_registry),
):
    try:
        await registry.close(session_id)
    except SessionNotFound:
        raise HTTPException(status_code=404, detail="Navigation session not found")
    return Response(status_code=204)
