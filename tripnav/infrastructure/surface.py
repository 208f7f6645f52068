"""
Server-side model of a driver's navigation surface.

Holds what the map and voice layers would currently show -- active route,
camera, geofence visibility, guidance leg, spoken instructions -- and
exposes it as a ``NavigationCallbacks`` bundle for the phase engine.
Every mutation is idempotent so retried actions are harmless.
"""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass
from typing import Deque, Optional, Protocol

from tripnav.domain.entities import CameraConfig, Location, Route
from tripnav.domain.enums import NavigationPhase
from tripnav.engine.callbacks import NavigationCallbacks

logger = logging.getLogger(__name__)

MAX_ANNOUNCEMENTS = 50

# Geofences visible on a freshly opened surface, by phase
PICKUP_ZONE_PHASES = frozenset(
    {NavigationPhase.TO_PICKUP, NavigationPhase.AT_PICKUP, NavigationPhase.PICKING_UP}
)
DESTINATION_ZONE_PHASES = frozenset(
    {NavigationPhase.TO_DESTINATION, NavigationPhase.AT_DESTINATION}
)


class RouteService(Protocol):
    async def route(self, origin: Location, destination: Location) -> Route: ...


@dataclass(frozen=True)
class GuidanceLeg:
    origin: Location
    destination: Location


class NavigationSurface:
    def __init__(
        self,
        route_service: Optional[RouteService] = None,
        initial_phase: NavigationPhase = NavigationPhase.TO_PICKUP,
    ):
        self.route_service = route_service
        self.route: Optional[Route] = None
        self.camera: Optional[CameraConfig] = None
        self.show_pickup_geofence = initial_phase in PICKUP_ZONE_PHASES
        self.show_destination_geofence = initial_phase in DESTINATION_ZONE_PHASES
        self.guidance: Optional[GuidanceLeg] = None
        self.voice_muted = False
        self.announcements: Deque[str] = deque(maxlen=MAX_ANNOUNCEMENTS)

    @property
    def has_active_route(self) -> bool:
        return self.route is not None

    @property
    def is_navigation_active(self) -> bool:
        return self.guidance is not None

    # ── Callback targets ──────────────────────────────────────────

    def clear_route(self) -> None:
        # Guidance follows the route it was started on
        self.route = None
        self.guidance = None

    async def calculate_route(self, origin: Location, destination: Location) -> Route:
        if self.route_service is None:
            raise RuntimeError("No route service configured")
        self.route = await self.route_service.route(origin, destination)
        logger.info(
            "Route ready: %.0fm, %.0fs", self.route.distance_m, self.route.duration_s
        )
        return self.route

    async def restart_navigation(self, origin: Location, destination: Location) -> None:
        self.guidance = GuidanceLeg(origin, destination)
        self.voice_muted = False

    def update_geofences(self, show_pickup: bool, show_destination: bool) -> None:
        self.show_pickup_geofence = show_pickup
        self.show_destination_geofence = show_destination

    def update_camera(self, camera: CameraConfig) -> None:
        self.camera = camera

    def clear_voice_guidance(self) -> None:
        self.voice_muted = True

    def announce(self, message: str) -> None:
        self.announcements.append(message)

    def as_callbacks(self) -> NavigationCallbacks:
        return NavigationCallbacks(
            on_route_cleared=self.clear_route,
            on_route_calculation_requested=self.calculate_route,
            on_navigation_restarted=self.restart_navigation,
            on_geofence_updated=self.update_geofences,
            on_camera_updated=self.update_camera,
            on_voice_guidance_cleared=self.clear_voice_guidance,
            on_voice_instruction_announced=self.announce,
        )
