"""
Geofence Monitor
================

Polls the driver's latest location and advances the trip when the driver
enters a proximity zone:

* ``to-pickup``      + inside pickup zone      -> ``at-pickup``
* ``to-destination`` + inside destination zone -> ``at-destination``

Detection is edge-triggered: a zone fires once on entry.  If the resulting
transition fails the zone is re-armed so the next check tries again.
"""

from __future__ import annotations

import logging
from typing import Optional

from tripnav.config import settings
from tripnav.domain.entities import Location, TransitionResult
from tripnav.domain.enums import NavigationPhase
from tripnav.domain.geometry import distance_m
from tripnav.engine.manager import PhaseManager
from tripnav.infrastructure.surface import NavigationSurface

from .periodic import PeriodicTask

logger = logging.getLogger(__name__)


class GeofenceMonitor:
    def __init__(
        self,
        manager: PhaseManager,
        surface: Optional[NavigationSurface] = None,
        *,
        radius_m: Optional[float] = None,
        interval: Optional[float] = None,
        approach_interval: Optional[float] = None,
    ):
        self.manager = manager
        self.surface = surface
        self.radius_m = settings.geofence_radius_m if radius_m is None else radius_m
        self.approach_radius_m = self.radius_m * settings.geofence_approach_radius_factor
        self.base_interval = (
            settings.geofence_check_interval_seconds if interval is None else interval
        )
        self.approach_interval = min(
            self.base_interval,
            settings.geofence_approach_interval_seconds
            if approach_interval is None
            else approach_interval,
        )
        self.in_pickup_zone = False
        self.in_destination_zone = False
        self.task = PeriodicTask(self.check, self.base_interval, name="geofence-monitor")

    @property
    def interval(self) -> float:
        return self.task.interval

    def start(self) -> None:
        self.task.start()

    async def stop(self) -> None:
        await self.task.stop()
        self.in_pickup_zone = False
        self.in_destination_zone = False

    def set_interval(self, seconds: float) -> None:
        self.task.set_interval(seconds)

    async def check(self) -> Optional[TransitionResult]:
        """Run one geofence check; returns the transition result if one fired.

        Also re-paces polling: the approach interval while the driver is
        near the active zone, the base interval otherwise.
        """
        snapshot = self.manager.snapshot
        phase = self.manager.current_phase
        driver = snapshot.driver_location
        if driver is None or self.manager.is_closed:
            self.set_interval(self.base_interval)
            return None

        pickup_visible = self.surface is None or self.surface.show_pickup_geofence
        if phase is NavigationPhase.TO_PICKUP and pickup_visible and snapshot.pickup_location:
            self.in_destination_zone = False
            if self._entered("pickup", driver, snapshot.pickup_location):
                return await self._advance(NavigationPhase.AT_PICKUP, "pickup")
            return None
        self.in_pickup_zone = False

        destination_visible = self.surface is None or self.surface.show_destination_geofence
        if (
            phase is NavigationPhase.TO_DESTINATION
            and destination_visible
            and snapshot.destination_location
        ):
            if self._entered("destination", driver, snapshot.destination_location):
                return await self._advance(NavigationPhase.AT_DESTINATION, "destination")
            return None
        self.in_destination_zone = False

        # No zone is being watched in this phase
        self.set_interval(self.base_interval)
        return None

    def _entered(self, zone: str, driver: Location, center: Location) -> bool:
        distance = distance_m(driver, center)
        self.set_interval(
            self.approach_interval if distance <= self.approach_radius_m else self.base_interval
        )
        inside = distance <= self.radius_m
        attr = f"in_{zone}_zone"
        was_inside = getattr(self, attr)
        setattr(self, attr, inside)
        if inside and not was_inside:
            logger.info("Entered %s geofence (%.0fm)", zone, distance)
            return True
        return False

    async def _advance(self, target: NavigationPhase, zone: str) -> TransitionResult:
        result = await self.manager.transition_to_phase(target)
        if not result.success:
            logger.warning("Geofence-triggered transition to %s failed: %s", target.value, result.error)
            setattr(self, f"in_{zone}_zone", False)
        return result
