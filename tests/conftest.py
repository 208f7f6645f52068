"""
Shared test fixtures.

Locations are a Manhattan pickup (Times Square) and a Statue of Liberty
destination, ~9 km apart, with the driver starting in lower Manhattan.
"""

from typing import Any

import pytest

from tripnav.domain.entities import ContextSnapshot, Location, Route
from tripnav.engine.callbacks import NavigationCallbacks

DRIVER = Location(40.7128, -74.0060)
PICKUP = Location(40.7589, -73.9851)
DESTINATION = Location(40.6892, -74.0445)


class RecordingCallbacks:
    """Records every collaborator call as ``(name, args)``."""

    def __init__(self):
        self.calls: list[tuple[str, tuple[Any, ...]]] = []

    def names(self) -> list[str]:
        return [name for name, _ in self.calls]

    def args_for(self, name: str) -> list[tuple[Any, ...]]:
        return [args for n, args in self.calls if n == name]

    def _sync(self, name):
        def record(*args):
            self.calls.append((name, args))
        return record

    def _async(self, name):
        async def record(*args):
            self.calls.append((name, args))
        return record

    def build(self, **overrides) -> NavigationCallbacks:
        fields = dict(
            on_route_cleared=self._sync("route_cleared"),
            on_route_calculation_requested=self._async("route_requested"),
            on_navigation_restarted=self._async("navigation_restarted"),
            on_geofence_updated=self._sync("geofence_updated"),
            on_camera_updated=self._sync("camera_updated"),
            on_voice_guidance_cleared=self._sync("voice_cleared"),
            on_voice_instruction_announced=self._sync("announced"),
        )
        fields.update(overrides)
        return NavigationCallbacks(**fields)


class FakeRouteService:
    def __init__(self, fail: bool = False):
        self.fail = fail
        self.requests: list[tuple[Location, Location]] = []

    async def route(self, origin: Location, destination: Location) -> Route:
        self.requests.append((origin, destination))
        if self.fail:
            raise RuntimeError("routing unavailable")
        return Route(origin, destination, distance_m=9_400.0, duration_s=1_260.0)


@pytest.fixture
def full_snapshot() -> ContextSnapshot:
    return ContextSnapshot(
        driver_location=DRIVER,
        pickup_location=PICKUP,
        destination_location=DESTINATION,
    )


@pytest.fixture
def recorder() -> RecordingCallbacks:
    return RecordingCallbacks()
