"""Domain enumerations and the phase adjacency table."""

import enum


class NavigationPhase(str, enum.Enum):
    TO_PICKUP = "to-pickup"
    AT_PICKUP = "at-pickup"
    PICKING_UP = "picking-up"
    TO_DESTINATION = "to-destination"
    AT_DESTINATION = "at-destination"
    COMPLETED = "completed"


# State machine: maps current phase -> ordered list of legal next phases
PHASE_TRANSITIONS: dict[NavigationPhase, tuple[NavigationPhase, ...]] = {
    NavigationPhase.TO_PICKUP: (NavigationPhase.AT_PICKUP, NavigationPhase.COMPLETED),
    NavigationPhase.AT_PICKUP: (NavigationPhase.PICKING_UP, NavigationPhase.COMPLETED),
    NavigationPhase.PICKING_UP: (
        NavigationPhase.TO_DESTINATION,
        NavigationPhase.COMPLETED,
    ),
    NavigationPhase.TO_DESTINATION: (
        NavigationPhase.AT_DESTINATION,
        NavigationPhase.COMPLETED,
    ),
    NavigationPhase.AT_DESTINATION: (NavigationPhase.COMPLETED,),
    NavigationPhase.COMPLETED: (),
}


class TransitionActionType(str, enum.Enum):
    CLEAR_ROUTE = "CLEAR_ROUTE"
    CALCULATE_ROUTE = "CALCULATE_ROUTE"
    UPDATE_GEOFENCES = "UPDATE_GEOFENCES"
    UPDATE_CAMERA = "UPDATE_CAMERA"
    RESTART_NAVIGATION = "RESTART_NAVIGATION"
    CLEAR_VOICE_GUIDANCE = "CLEAR_VOICE_GUIDANCE"
    ANNOUNCE_INSTRUCTION = "ANNOUNCE_INSTRUCTION"


class RouteLeg(str, enum.Enum):
    DRIVER_TO_PICKUP = "driver_to_pickup"
    PICKUP_TO_DESTINATION = "pickup_to_destination"


class CameraMode(str, enum.Enum):
    CENTER_ON_DRIVER = "center_on_driver"
    SHOW_FULL_ROUTE = "show_full_route"
    FOLLOW_NAVIGATION = "follow_navigation"
    MANUAL = "manual"


class CameraTransitionType(str, enum.Enum):
    SHOW_FULL_ROUTE = "SHOW_FULL_ROUTE"
    CENTER_ON_DRIVER = "CENTER_ON_DRIVER"
    FOLLOW_NAVIGATION = "FOLLOW_NAVIGATION"
    ROUTE_OVERVIEW = "ROUTE_OVERVIEW"


class TransitionErrorKind(str, enum.Enum):
    INVALID_TRANSITION = "INVALID_TRANSITION"
    NO_CONFIG = "NO_CONFIG"
    MISSING_CONTEXT = "MISSING_CONTEXT"
    ACTION_FAILURE = "ACTION_FAILURE"
    CONCURRENT_TRANSITION = "CONCURRENT_TRANSITION"
    TIMEOUT = "TIMEOUT"
    UNMOUNTED = "UNMOUNTED"
