"""
Phase graph
===========

Static table of legal phase moves and, for each legal move, the ordered
actions it performs plus the context fields that must be present.

Every legal edge has exactly one ``PhaseTransitionConfig``; configs are
built once at import time and never change.  ``completed`` is terminal.
"""

from __future__ import annotations

from typing import Optional

from .entities import PhaseTransitionConfig, TransitionAction
from .enums import (
    PHASE_TRANSITIONS,
    CameraMode,
    NavigationPhase,
    RouteLeg,
    TransitionActionType as A,
)

P = NavigationPhase


def _action(kind: A, **payload) -> TransitionAction:
    return TransitionAction(type=kind, payload=payload)


def _announce(message: str) -> TransitionAction:
    return _action(A.ANNOUNCE_INSTRUCTION, message=message)


def _cancel_actions(message: str) -> tuple[TransitionAction, ...]:
    return (
        _action(A.CLEAR_ROUTE),
        _action(A.CLEAR_VOICE_GUIDANCE),
        _action(A.UPDATE_GEOFENCES, hide_pickup=True, show_destination=False),
        _action(A.UPDATE_CAMERA, mode=CameraMode.MANUAL),
        _announce(message),
    )


_CONFIGS: tuple[PhaseTransitionConfig, ...] = (
    PhaseTransitionConfig(
        P.TO_PICKUP,
        P.AT_PICKUP,
        actions=(
            _action(A.UPDATE_CAMERA, mode=CameraMode.CENTER_ON_DRIVER),
            _action(A.CLEAR_VOICE_GUIDANCE),
            _announce("You have arrived at the pickup location"),
        ),
        required_context=("driver_location", "pickup_location"),
    ),
    PhaseTransitionConfig(
        P.AT_PICKUP,
        P.PICKING_UP,
        actions=(
            _action(A.UPDATE_GEOFENCES, hide_pickup=False, show_destination=False),
            _announce("Passenger is getting in the vehicle"),
        ),
    ),
    # The handoff: drop the pickup leg and start guiding to the destination
    PhaseTransitionConfig(
        P.PICKING_UP,
        P.TO_DESTINATION,
        actions=(
            _action(A.CLEAR_ROUTE),
            _action(A.CALCULATE_ROUTE, type=RouteLeg.PICKUP_TO_DESTINATION),
            _action(A.UPDATE_GEOFENCES, hide_pickup=True, show_destination=True),
            _action(A.UPDATE_CAMERA, mode=CameraMode.SHOW_FULL_ROUTE),
            _action(A.RESTART_NAVIGATION, type=RouteLeg.PICKUP_TO_DESTINATION),
            _announce("Navigating to destination"),
        ),
        required_context=("pickup_location", "destination_location"),
    ),
    PhaseTransitionConfig(
        P.TO_DESTINATION,
        P.AT_DESTINATION,
        actions=(
            _action(A.UPDATE_CAMERA, mode=CameraMode.CENTER_ON_DRIVER),
            _action(A.CLEAR_VOICE_GUIDANCE),
            _announce("You have arrived at the destination"),
        ),
        required_context=("driver_location", "destination_location"),
    ),
    PhaseTransitionConfig(
        P.AT_DESTINATION,
        P.COMPLETED,
        actions=_cancel_actions("Trip completed successfully"),
    ),
    # Early completion (trip cancelled) from every phase before arrival
    *(
        PhaseTransitionConfig(phase, P.COMPLETED, actions=_cancel_actions("Trip cancelled"))
        for phase in (P.TO_PICKUP, P.AT_PICKUP, P.PICKING_UP, P.TO_DESTINATION)
    ),
)

TRANSITION_CONFIGS: dict[tuple[NavigationPhase, NavigationPhase], PhaseTransitionConfig] = {
    (c.from_phase, c.to_phase): c for c in _CONFIGS
}

_DESCRIPTIONS: dict[tuple[NavigationPhase, NavigationPhase], str] = {
    (P.TO_PICKUP, P.AT_PICKUP): "Driver has arrived at pickup location",
    (P.AT_PICKUP, P.PICKING_UP): "Passenger is getting into the vehicle",
    (P.PICKING_UP, P.TO_DESTINATION): "Starting navigation to destination",
    (P.TO_DESTINATION, P.AT_DESTINATION): "Driver has arrived at destination",
    (P.AT_DESTINATION, P.COMPLETED): "Trip has been completed",
}

# Rough wall-clock expectations, used for logging slow transitions
_DURATIONS_MS: dict[tuple[NavigationPhase, NavigationPhase], int] = {
    (P.TO_PICKUP, P.AT_PICKUP): 1000,
    (P.AT_PICKUP, P.PICKING_UP): 2000,
    (P.PICKING_UP, P.TO_DESTINATION): 8000,
    (P.TO_DESTINATION, P.AT_DESTINATION): 1000,
    (P.AT_DESTINATION, P.COMPLETED): 3000,
}
DEFAULT_DURATION_MS = 5000


def is_valid_transition(from_phase: NavigationPhase, to_phase: NavigationPhase) -> bool:
    return to_phase in PHASE_TRANSITIONS.get(from_phase, ())


def get_transition_config(
    from_phase: NavigationPhase, to_phase: NavigationPhase
) -> Optional[PhaseTransitionConfig]:
    if not is_valid_transition(from_phase, to_phase):
        return None
    return TRANSITION_CONFIGS.get((from_phase, to_phase))


def get_valid_next_phases(phase: NavigationPhase) -> list[NavigationPhase]:
    return list(PHASE_TRANSITIONS.get(phase, ()))


def is_terminal_phase(phase: NavigationPhase) -> bool:
    return not PHASE_TRANSITIONS.get(phase)


def get_transition_description(
    from_phase: NavigationPhase, to_phase: NavigationPhase
) -> str:
    return _DESCRIPTIONS.get(
        (from_phase, to_phase),
        f"Transitioning from {from_phase.value} to {to_phase.value}",
    )


def requires_route_recalculation(
    from_phase: NavigationPhase, to_phase: NavigationPhase
) -> bool:
    config = get_transition_config(from_phase, to_phase)
    return config is not None and any(
        a.type is A.CALCULATE_ROUTE for a in config.actions
    )


def requires_geofence_update(
    from_phase: NavigationPhase, to_phase: NavigationPhase
) -> bool:
    config = get_transition_config(from_phase, to_phase)
    return config is not None and any(
        a.type is A.UPDATE_GEOFENCES and a.payload.get("hide_pickup")
        for a in config.actions
    )


def expected_transition_duration_ms(
    from_phase: NavigationPhase, to_phase: NavigationPhase
) -> int:
    return _DURATIONS_MS.get((from_phase, to_phase), DEFAULT_DURATION_MS)
