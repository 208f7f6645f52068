"""Collaborator callbacks the engine drives on the navigation surface."""

from __future__ import annotations

import inspect
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional, Union

from tripnav.domain.entities import CameraConfig, Location

MaybeAwaitable = Union[None, Awaitable[None]]


@dataclass(frozen=True)
class NavigationCallbacks:
    """Every callback is optional; a missing one is a successful no-op.

    Callbacks may be plain functions or coroutine functions.
    """

    on_route_cleared: Optional[Callable[[], MaybeAwaitable]] = None
    on_route_calculation_requested: Optional[
        Callable[[Location, Location], Awaitable[Any]]
    ] = None
    on_navigation_restarted: Optional[
        Callable[[Location, Location], Awaitable[Any]]
    ] = None
    on_geofence_updated: Optional[Callable[[bool, bool], MaybeAwaitable]] = None
    on_camera_updated: Optional[Callable[[CameraConfig], MaybeAwaitable]] = None
    on_voice_guidance_cleared: Optional[Callable[[], MaybeAwaitable]] = None
    on_voice_instruction_announced: Optional[Callable[[str], MaybeAwaitable]] = None


async def invoke(callback: Optional[Callable[..., Any]], *args: Any) -> Any:
    """Call *callback* with *args*, awaiting the result if needed."""
    if callback is None:
        return None
    result = callback(*args)
    if inspect.isawaitable(result):
        return await result
    return result
