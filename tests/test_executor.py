"""Unit tests for the per-action handlers behind ActionExecutor."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from tripnav.domain.context import create_transition_context
from tripnav.domain.entities import ContextSnapshot, TransitionAction
from tripnav.domain.enums import (
    CameraMode,
    CameraTransitionType,
    NavigationPhase,
    RouteLeg,
    TransitionActionType as A,
)
from tripnav.domain.errors import ActionFailure
from tripnav.engine.callbacks import NavigationCallbacks
from tripnav.engine.executor import ActionExecutor
from tests.conftest import DESTINATION, DRIVER, PICKUP

P = NavigationPhase


def _context(snapshot, current=P.PICKING_UP, target=P.TO_DESTINATION):
    return create_transition_context(current, target, snapshot)


class TestRouteActions:
    @pytest.mark.asyncio
    async def test_clear_route_is_idempotent(self, recorder, full_snapshot):
        executor = ActionExecutor(recorder.build())
        action = TransitionAction(A.CLEAR_ROUTE)
        await executor.execute(action, _context(full_snapshot))
        await executor.execute(action, _context(full_snapshot))
        assert recorder.names() == ["route_cleared", "route_cleared"]

    @pytest.mark.asyncio
    async def test_pickup_to_destination_leg(self, full_snapshot):
        requested = AsyncMock()
        executor = ActionExecutor(NavigationCallbacks(on_route_calculation_requested=requested))
        action = TransitionAction(A.CALCULATE_ROUTE, {"type": RouteLeg.PICKUP_TO_DESTINATION})
        await executor.execute(action, _context(full_snapshot))
        requested.assert_awaited_once_with(PICKUP, DESTINATION)

    @pytest.mark.asyncio
    async def test_driver_to_pickup_leg_is_default(self, full_snapshot):
        requested = AsyncMock()
        executor = ActionExecutor(NavigationCallbacks(on_route_calculation_requested=requested))
        await executor.execute(TransitionAction(A.CALCULATE_ROUTE), _context(full_snapshot))
        requested.assert_awaited_once_with(DRIVER, PICKUP)

    @pytest.mark.asyncio
    async def test_missing_endpoint_fails(self):
        requested = AsyncMock()
        executor = ActionExecutor(NavigationCallbacks(on_route_calculation_requested=requested))
        action = TransitionAction(A.CALCULATE_ROUTE, {"type": "pickup_to_destination"})
        with pytest.raises(ActionFailure) as info:
            await executor.execute(action, _context(ContextSnapshot(pickup_location=PICKUP)))
        assert info.value.action_type is A.CALCULATE_ROUTE
        requested.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_restart_navigation_targets_destination_leg(self, full_snapshot):
        restarted = AsyncMock()
        executor = ActionExecutor(NavigationCallbacks(on_navigation_restarted=restarted))
        await executor.execute(TransitionAction(A.RESTART_NAVIGATION), _context(full_snapshot))
        restarted.assert_awaited_once_with(PICKUP, DESTINATION)

    @pytest.mark.asyncio
    async def test_collaborator_error_propagates(self, full_snapshot):
        requested = AsyncMock(side_effect=RuntimeError("503"))
        executor = ActionExecutor(NavigationCallbacks(on_route_calculation_requested=requested))
        with pytest.raises(RuntimeError):
            await executor.execute(TransitionAction(A.CALCULATE_ROUTE), _context(full_snapshot))


class TestSurfaceActions:
    @pytest.mark.asyncio
    async def test_geofence_flags(self, recorder, full_snapshot):
        executor = ActionExecutor(recorder.build())
        action = TransitionAction(A.UPDATE_GEOFENCES, {"hide_pickup": True, "show_destination": True})
        await executor.execute(action, _context(full_snapshot))
        assert recorder.args_for("geofence_updated") == [(False, True)]

    @pytest.mark.asyncio
    async def test_camera_receives_built_config(self, full_snapshot):
        camera_updated = MagicMock()
        executor = ActionExecutor(NavigationCallbacks(on_camera_updated=camera_updated))
        action = TransitionAction(A.UPDATE_CAMERA, {"mode": CameraMode.SHOW_FULL_ROUTE})
        await executor.execute(action, _context(full_snapshot))
        (camera,), _ = camera_updated.call_args
        assert camera.type is CameraTransitionType.ROUTE_OVERVIEW
        assert camera.zoom <= 14

    @pytest.mark.asyncio
    async def test_camera_without_driver_fails(self):
        executor = ActionExecutor()
        action = TransitionAction(A.UPDATE_CAMERA, {"mode": "center_on_driver"})
        with pytest.raises(ActionFailure):
            await executor.execute(action, _context(ContextSnapshot(), P.TO_PICKUP, P.AT_PICKUP))


class TestVoiceActions:
    @pytest.mark.asyncio
    async def test_announce_speaks_message(self, recorder, full_snapshot):
        executor = ActionExecutor(recorder.build())
        action = TransitionAction(A.ANNOUNCE_INSTRUCTION, {"message": "Navigating to destination"})
        await executor.execute(action, _context(full_snapshot))
        assert recorder.args_for("announced") == [("Navigating to destination",)]

    @pytest.mark.asyncio
    async def test_empty_announcement_is_noop(self, recorder, full_snapshot):
        executor = ActionExecutor(recorder.build())
        await executor.execute(
            TransitionAction(A.ANNOUNCE_INSTRUCTION, {"message": ""}), _context(full_snapshot)
        )
        assert recorder.calls == []

    @pytest.mark.asyncio
    async def test_clear_voice(self, recorder, full_snapshot):
        executor = ActionExecutor(recorder.build())
        await executor.execute(TransitionAction(A.CLEAR_VOICE_GUIDANCE), _context(full_snapshot))
        assert recorder.names() == ["voice_cleared"]

    @pytest.mark.asyncio
    async def test_missing_callbacks_are_noops(self, full_snapshot):
        executor = ActionExecutor()
        for kind in (A.CLEAR_ROUTE, A.CLEAR_VOICE_GUIDANCE, A.RESTART_NAVIGATION):
            await executor.execute(TransitionAction(kind), _context(full_snapshot))
