"""
Domain value objects for the navigation phase engine.

Everything here is immutable.  A ``TransitionAction`` is pure data: the
behaviour behind each action type lives in ``tripnav.engine.executor``.
Contexts and results are built fresh per transition attempt and never
mutated in place.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping, Optional

from .enums import (
    CameraMode,
    CameraTransitionType,
    NavigationPhase,
    TransitionActionType,
    TransitionErrorKind,
)


# ── Value Objects ─────────────────────────────────────────────────────


@dataclass(frozen=True)
class Location:
    latitude: float
    longitude: float

    def as_lng_lat(self) -> tuple[float, float]:
        return (self.longitude, self.latitude)


@dataclass(frozen=True)
class TransitionAction:
    type: TransitionActionType
    payload: Mapping[str, Any] = field(default_factory=dict, hash=False)

    def __post_init__(self):
        # Freeze the payload so a shared config can never be edited in place
        object.__setattr__(self, "payload", MappingProxyType(dict(self.payload)))

    def __repr__(self) -> str:
        if self.payload:
            return f"TransitionAction({self.type.value}, {dict(self.payload)})"
        return f"TransitionAction({self.type.value})"


@dataclass(frozen=True)
class PhaseTransitionConfig:
    from_phase: NavigationPhase
    to_phase: NavigationPhase
    actions: tuple[TransitionAction, ...]
    required_context: tuple[str, ...] = ()


@dataclass(frozen=True)
class ContextSnapshot:
    """The caller's latest known trip state, read at transition time."""

    driver_location: Optional[Location] = None
    pickup_location: Optional[Location] = None
    destination_location: Optional[Location] = None
    has_active_route: bool = False
    is_navigation_active: bool = False


@dataclass(frozen=True)
class TransitionContext:
    current_phase: NavigationPhase
    target_phase: NavigationPhase
    driver_location: Optional[Location] = None
    pickup_location: Optional[Location] = None
    destination_location: Optional[Location] = None
    has_active_route: bool = False
    is_navigation_active: bool = False


@dataclass(frozen=True)
class TransitionResult:
    success: bool
    from_phase: NavigationPhase
    to_phase: NavigationPhase
    executed_actions: tuple[TransitionAction, ...] = ()
    error: Optional[str] = None
    error_kind: Optional[TransitionErrorKind] = None

    @classmethod
    def failure(
        cls,
        from_phase: NavigationPhase,
        to_phase: NavigationPhase,
        error: str,
        kind: TransitionErrorKind,
        executed_actions: tuple[TransitionAction, ...] = (),
    ) -> TransitionResult:
        return cls(
            success=False,
            from_phase=from_phase,
            to_phase=to_phase,
            executed_actions=executed_actions,
            error=error,
            error_kind=kind,
        )


# ── Camera / routing payloads ─────────────────────────────────────────


@dataclass(frozen=True)
class Padding:
    top: int = 0
    bottom: int = 0
    left: int = 0
    right: int = 0


@dataclass(frozen=True)
class RouteBounds:
    center: Location
    zoom: int
    ne: Location
    sw: Location


@dataclass(frozen=True)
class CameraConfig:
    type: CameraTransitionType
    mode: CameraMode
    center: Optional[Location] = None
    coordinates: tuple[Location, ...] = ()
    zoom: float = 16
    pitch: float = 0
    bearing: float = 0
    duration_ms: int = 1000
    padding: Padding = field(default_factory=Padding)


@dataclass(frozen=True)
class Route:
    """A calculated route as returned by the routing collaborator."""

    origin: Location
    destination: Location
    distance_m: float
    duration_s: float
    geometry: Mapping[str, Any] = field(default_factory=dict)
