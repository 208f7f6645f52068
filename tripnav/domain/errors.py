"""Exception taxonomy for the navigation engine.

Expected transition failures are reported through ``TransitionResult``;
these exceptions are raised inside the engine (and caught at its
boundary) or, for programmer errors, raised straight to the caller.
"""

from __future__ import annotations

from .enums import TransitionActionType


class NavigationEngineError(Exception):
    """Base class for all engine errors."""


class ActionFailure(NavigationEngineError):
    """A collaborator rejected one action."""

    def __init__(self, action_type: TransitionActionType, message: str):
        super().__init__(f"{action_type.value}: {message}")
        self.action_type = action_type
        self.reason = message


class CameraConfigError(NavigationEngineError):
    """Coordinates needed for a camera mode are missing."""


class NoTransitionToRetry(NavigationEngineError):
    """``retry_last_transition`` was called before any attempt."""


class RoutingError(NavigationEngineError):
    """Every routing endpoint failed to produce a route."""


class SessionNotFound(NavigationEngineError):
    """No navigation session is registered under the given id."""


class TransitionTimeout(NavigationEngineError):
    """The shared transition budget ran out."""


class ManagerClosed(NavigationEngineError):
    """The session owning a phase manager has ended."""
