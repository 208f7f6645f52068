"""
Action executor  (Strategy Pattern)
===================================

One ``ActionHandler`` per ``TransitionActionType`` translates a pure-data
action into a call on the injected ``NavigationCallbacks``.  The
``ActionExecutor`` facade picks the handler; retry and timeout policy live
in the runner, not here.

Handlers raise ``ActionFailure`` for anything the runner should treat as a
failed attempt.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Optional

from tripnav.domain.camera import build_camera_config, validate_camera_config
from tripnav.domain.entities import Location, TransitionAction, TransitionContext
from tripnav.domain.enums import CameraMode, RouteLeg, TransitionActionType
from tripnav.domain.errors import ActionFailure, CameraConfigError

from .callbacks import NavigationCallbacks, invoke

logger = logging.getLogger(__name__)


def _leg_endpoints(
    leg: RouteLeg, context: TransitionContext
) -> tuple[Optional[Location], Optional[Location]]:
    if leg is RouteLeg.PICKUP_TO_DESTINATION:
        return context.pickup_location, context.destination_location
    return context.driver_location, context.pickup_location


# ── Strategy hierarchy ────────────────────────────────────────────────


class ActionHandler(ABC):
    action_type: TransitionActionType

    def __init__(self, callbacks: NavigationCallbacks):
        self.callbacks = callbacks

    @abstractmethod
    async def execute(
        self, action: TransitionAction, context: TransitionContext
    ) -> None: ...

    def fail(self, message: str) -> ActionFailure:
        return ActionFailure(self.action_type, message)


class ClearRouteHandler(ActionHandler):
    action_type = TransitionActionType.CLEAR_ROUTE

    async def execute(self, action, context):
        # Idempotent: clearing an empty route is fine
        await invoke(self.callbacks.on_route_cleared)


class CalculateRouteHandler(ActionHandler):
    action_type = TransitionActionType.CALCULATE_ROUTE

    async def execute(self, action, context):
        leg = RouteLeg(action.payload.get("type", RouteLeg.DRIVER_TO_PICKUP))
        origin, destination = _leg_endpoints(leg, context)
        if origin is None or destination is None:
            raise self.fail(f"cannot calculate {leg.value} route: missing location data")
        logger.info("Requesting %s route", leg.value)
        await invoke(self.callbacks.on_route_calculation_requested, origin, destination)


class UpdateGeofencesHandler(ActionHandler):
    action_type = TransitionActionType.UPDATE_GEOFENCES

    async def execute(self, action, context):
        show_pickup = not action.payload.get("hide_pickup", False)
        show_destination = bool(action.payload.get("show_destination", False))
        await invoke(self.callbacks.on_geofence_updated, show_pickup, show_destination)


class UpdateCameraHandler(ActionHandler):
    action_type = TransitionActionType.UPDATE_CAMERA

    async def execute(self, action, context):
        mode = CameraMode(action.payload.get("mode", CameraMode.FOLLOW_NAVIGATION))
        try:
            camera = build_camera_config(mode, context)
        except CameraConfigError as exc:
            raise self.fail(str(exc)) from exc
        if not validate_camera_config(camera):
            raise self.fail(f"incomplete camera config for {mode.value}")
        await invoke(self.callbacks.on_camera_updated, camera)


class RestartNavigationHandler(ActionHandler):
    action_type = TransitionActionType.RESTART_NAVIGATION

    async def execute(self, action, context):
        leg = RouteLeg(action.payload.get("type", RouteLeg.PICKUP_TO_DESTINATION))
        origin, destination = _leg_endpoints(leg, context)
        if origin is None or destination is None:
            raise self.fail(f"cannot restart {leg.value} guidance: missing location data")
        await invoke(self.callbacks.on_navigation_restarted, origin, destination)


class ClearVoiceGuidanceHandler(ActionHandler):
    action_type = TransitionActionType.CLEAR_VOICE_GUIDANCE

    async def execute(self, action, context):
        await invoke(self.callbacks.on_voice_guidance_cleared)


class AnnounceInstructionHandler(ActionHandler):
    action_type = TransitionActionType.ANNOUNCE_INSTRUCTION

    async def execute(self, action, context):
        message = action.payload.get("message") or ""
        if not message:
            return
        await invoke(self.callbacks.on_voice_instruction_announced, message)


HANDLER_CLASSES: tuple[type[ActionHandler], ...] = (
    ClearRouteHandler,
    CalculateRouteHandler,
    UpdateGeofencesHandler,
    UpdateCameraHandler,
    RestartNavigationHandler,
    ClearVoiceGuidanceHandler,
    AnnounceInstructionHandler,
)


# ── Executor facade ───────────────────────────────────────────────────


class ActionExecutor:
    """Dispatches each action to the handler registered for its type."""

    def __init__(
        self,
        callbacks: Optional[NavigationCallbacks] = None,
        handlers: Optional[dict[TransitionActionType, ActionHandler]] = None,
    ):
        self.callbacks = callbacks or NavigationCallbacks()
        self.handlers = {cls.action_type: cls(self.callbacks) for cls in HANDLER_CLASSES}
        if handlers:
            self.handlers.update(handlers)

    async def execute(self, action: TransitionAction, context: TransitionContext) -> None:
        handler = self.handlers.get(action.type)
        if handler is None:
            raise ActionFailure(action.type, "no handler registered")
        logger.debug("Executing %r", action)
        await handler.execute(action, context)
