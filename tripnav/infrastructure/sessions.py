"""
Navigation sessions.

A ``NavigationSession`` bundles everything one trip needs: the surface
state, the phase manager wired to it, and the geofence monitor.  The
``SessionRegistry`` owns sessions for the lifetime of the process and is
the only place they are created or ended.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Optional

from tripnav.domain.entities import ContextSnapshot, Location, TransitionResult
from tripnav.domain.enums import NavigationPhase
from tripnav.domain.errors import SessionNotFound
from tripnav.engine.manager import PhaseManager
from tripnav.workers.geofence_monitor import GeofenceMonitor

from .surface import NavigationSurface, RouteService

logger = logging.getLogger(__name__)


@dataclass
class NavigationSession:
    id: str
    ride_id: str
    surface: NavigationSurface
    manager: PhaseManager
    monitor: GeofenceMonitor
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def update_location(self, location: Location) -> None:
        self.manager.update_snapshot(driver_location=location)

    def _sync_flags(self) -> None:
        self.manager.update_snapshot(
            has_active_route=self.surface.has_active_route,
            is_navigation_active=self.surface.is_navigation_active,
        )

    async def transition(self, target: NavigationPhase) -> TransitionResult:
        self._sync_flags()
        return await self.manager.transition_to_phase(target)

    async def retry(self) -> TransitionResult:
        self._sync_flags()
        return await self.manager.retry_last_transition()

    async def end(self) -> None:
        await self.monitor.stop()
        self.manager.close()


class SessionRegistry:
    def __init__(
        self,
        route_service: Optional[RouteService] = None,
        *,
        start_monitors: bool = True,
        manager_options: Optional[dict[str, Any]] = None,
    ):
        self.route_service = route_service
        self.start_monitors = start_monitors
        self.manager_options = manager_options or {}
        self._sessions: dict[str, NavigationSession] = {}

    def __len__(self) -> int:
        return len(self._sessions)

    def all(self) -> list[NavigationSession]:
        return list(self._sessions.values())

    def create(
        self,
        *,
        ride_id: str,
        pickup: Location,
        destination: Location,
        driver_location: Optional[Location] = None,
        initial_phase: NavigationPhase = NavigationPhase.TO_PICKUP,
    ) -> NavigationSession:
        surface = NavigationSurface(self.route_service, NavigationPhase(initial_phase))
        manager = PhaseManager(
            initial_phase,
            callbacks=surface.as_callbacks(),
            snapshot=ContextSnapshot(
                driver_location=driver_location,
                pickup_location=pickup,
                destination_location=destination,
            ),
            **self.manager_options,
        )
        session = NavigationSession(
            id=uuid.uuid4().hex,
            ride_id=ride_id,
            surface=surface,
            manager=manager,
            monitor=GeofenceMonitor(manager, surface),
        )
        if self.start_monitors:
            session.monitor.start()
        self._sessions[session.id] = session
        logger.info("Navigation session %s opened for ride %s", session.id, ride_id)
        return session

    def get(self, session_id: str) -> NavigationSession:
        session = self._sessions.get(session_id)
        if session is None:
            raise SessionNotFound(session_id)
        return session

    async def close(self, session_id: str) -> NavigationSession:
        session = self._sessions.pop(session_id, None)
        if session is None:
            raise SessionNotFound(session_id)
        await session.end()
        logger.info("Navigation session %s closed", session_id)
        return session

    async def close_all(self) -> None:
        for session_id in list(self._sessions):
            await self.close(session_id)
