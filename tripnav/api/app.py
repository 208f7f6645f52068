"""
FastAPI application factory.

* Registers routes for navigation sessions and admin.
* Creates the shared OSRM client and session registry on startup and
  closes every open session on shutdown.
* Applies rate-limiting middleware.
* Swagger / OpenAPI UI available at ``/docs``.
"""

from contextlib import asynccontextmanager
import logging
from typing import Optional

from fastapi import FastAPI
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from tripnav.api.middleware import limiter
from tripnav.api.routes import admin, sessions
from tripnav.infrastructure.osrm_client import OSRMClient
from tripnav.infrastructure.sessions import SessionRegistry

logging.basicConfig(level=logging.INFO)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Own the routing client and registry unless they were injected."""
    osrm: Optional[OSRMClient] = None
    if getattr(app.state, "registry", None) is None:
        osrm = OSRMClient()
        app.state.registry = SessionRegistry(osrm)
    yield
    await app.state.registry.close_all()
    if osrm is not None:
        await osrm.aclose()


def create_app(registry: Optional[SessionRegistry] = None) -> FastAPI:
    app = FastAPI(
        title="Trip Navigation Phase API",
        description=(
            "Drives a driver's trip through pickup and destination phases, "
            "re-routing, re-framing the camera, toggling geofences and "
            "restarting guidance on every phase change."
        ),
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.registry = registry

    # Rate limiter
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    # Routers
    app.include_router(sessions.router, prefix="/api/v1")
    app.include_router(admin.router, prefix="/api/v1")

    return app
