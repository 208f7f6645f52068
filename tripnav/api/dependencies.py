"""FastAPI dependency injection helpers."""

from fastapi import HTTPException, Request

from tripnav.domain.errors import SessionNotFound
from tripnav.infrastructure.sessions import NavigationSession, SessionRegistry


def get_registry(request: Request) -> SessionRegistry:
    return request.app.state.registry


def get_session(session_id: str, request: Request) -> NavigationSession:
    try:
        return get_registry(request).get(session_id)
    except SessionNotFound:
        raise HTTPException(status_code=404, detail="Navigation session not found")
