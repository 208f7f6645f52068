"""
Camera presets per navigation phase and the builder that turns a
``CameraMode`` plus a ``TransitionContext`` into a concrete camera move.

Multi-point modes (``show_full_route``) frame pickup and destination via
``calculate_route_bounds``; single-point modes centre on the driver.
"""

from __future__ import annotations

from dataclasses import replace

from .entities import CameraConfig, Padding, TransitionContext
from .enums import CameraMode, CameraTransitionType, NavigationPhase
from .errors import CameraConfigError
from .geometry import calculate_route_bounds

_CENTER = CameraTransitionType.CENTER_ON_DRIVER

DEFAULT_CAMERA_CONFIGS: dict[NavigationPhase, CameraConfig] = {
    NavigationPhase.TO_PICKUP: CameraConfig(
        type=CameraTransitionType.FOLLOW_NAVIGATION,
        mode=CameraMode.FOLLOW_NAVIGATION,
        zoom=18, pitch=60, duration_ms=1000,
    ),
    NavigationPhase.AT_PICKUP: CameraConfig(
        type=_CENTER, mode=CameraMode.CENTER_ON_DRIVER,
        zoom=19, pitch=45, duration_ms=800,
    ),
    NavigationPhase.PICKING_UP: CameraConfig(
        type=_CENTER, mode=CameraMode.CENTER_ON_DRIVER,
        zoom=18, pitch=30, duration_ms=500,
    ),
    NavigationPhase.TO_DESTINATION: CameraConfig(
        type=CameraTransitionType.ROUTE_OVERVIEW,
        mode=CameraMode.SHOW_FULL_ROUTE,
        zoom=14, pitch=0, duration_ms=2000,
        padding=Padding(top=100, bottom=200, left=50, right=50),
    ),
    NavigationPhase.AT_DESTINATION: CameraConfig(
        type=_CENTER, mode=CameraMode.CENTER_ON_DRIVER,
        zoom=19, pitch=45, duration_ms=800,
    ),
    NavigationPhase.COMPLETED: CameraConfig(
        type=_CENTER, mode=CameraMode.CENTER_ON_DRIVER,
        zoom=16, pitch=0, duration_ms=1500,
    ),
}


def build_camera_config(mode: CameraMode, context: TransitionContext) -> CameraConfig:
    """Resolve *mode* against the live coordinates in *context*.

    Raises ``CameraConfigError`` if the mode needs a coordinate that the
    context does not carry.
    """
    if mode is CameraMode.SHOW_FULL_ROUTE:
        pickup, destination = context.pickup_location, context.destination_location
        if pickup is None or destination is None:
            raise CameraConfigError(
                "route overview needs both pickup and destination locations"
            )
        bounds = calculate_route_bounds(pickup, destination)
        return replace(
            DEFAULT_CAMERA_CONFIGS[NavigationPhase.TO_DESTINATION],
            mode=mode,
            center=bounds.center,
            coordinates=(pickup, destination),
            zoom=bounds.zoom,
        )

    base = DEFAULT_CAMERA_CONFIGS[context.target_phase]
    driver = context.driver_location

    if mode is CameraMode.FOLLOW_NAVIGATION:
        if driver is None:
            raise CameraConfigError("follow mode needs the driver location")
        return replace(
            DEFAULT_CAMERA_CONFIGS[NavigationPhase.TO_PICKUP],
            mode=mode,
            center=driver,
        )

    if mode is CameraMode.CENTER_ON_DRIVER:
        if driver is None:
            raise CameraConfigError("centering needs the driver location")
        if base.type is not _CENTER:
            base = DEFAULT_CAMERA_CONFIGS[NavigationPhase.AT_PICKUP]
        return replace(base, mode=mode, center=driver)

    # manual: hand control back to the user, keep the driver in view if known
    return replace(
        base,
        type=_CENTER,
        mode=CameraMode.MANUAL,
        center=driver,
        coordinates=(),
        padding=Padding(),
    )


def validate_camera_config(config: CameraConfig) -> bool:
    if config.type in (
        CameraTransitionType.SHOW_FULL_ROUTE,
        CameraTransitionType.ROUTE_OVERVIEW,
    ):
        return len(config.coordinates) >= 2
    if config.mode is CameraMode.MANUAL:
        return True
    return config.center is not None
