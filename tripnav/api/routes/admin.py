"""
Admin / observability endpoints
===============================

GET /api/v1/admin/sessions -- list open navigation sessions
GET /api/v1/admin/health   -- simple health check
"""

from fastapi import APIRouter, Depends, Request

from tripnav.api.dependencies import get_registry
from tripnav.api.middleware import limiter
from tripnav.api.schemas import HealthResponse, SessionSummary
from tripnav.config import settings
from tripnav.infrastructure.sessions import SessionRegistry

router = APIRouter(prefix="/admin", tags=["admin"])


@router.get(
    "/sessions",
    response_model=list[SessionSummary],
    summary="List open navigation sessions",
)
@limiter.limit(settings.rate_limit)
async def list_sessions(
    request: Request,
    registry: SessionRegistry = Depends(get_registry),
):
    return [
        SessionSummary(
            id=s.id,
            ride_id=s.ride_id,
            current_phase=s.manager.current_phase,
            is_transitioning=s.manager.is_transitioning,
            created_at=s.created_at,
        )
        for s in registry.all()
    ]


@router.get("/health", response_model=HealthResponse, summary="Health check")
async def health(registry: SessionRegistry = Depends(get_registry)):
    return HealthResponse(active_sessions=len(registry))
