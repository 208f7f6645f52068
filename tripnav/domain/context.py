"""Build and validate the point-in-time context for one transition attempt."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .entities import ContextSnapshot, PhaseTransitionConfig, TransitionContext
from .enums import NavigationPhase


@dataclass(frozen=True)
class ContextValidation:
    valid: bool
    error: Optional[str] = None
    missing_field: Optional[str] = None


def create_transition_context(
    current_phase: NavigationPhase,
    target_phase: NavigationPhase,
    snapshot: Optional[ContextSnapshot] = None,
) -> TransitionContext:
    """Copy *snapshot* verbatim; freshness is the caller's job."""
    snapshot = snapshot or ContextSnapshot()
    return TransitionContext(
        current_phase=current_phase,
        target_phase=target_phase,
        driver_location=snapshot.driver_location,
        pickup_location=snapshot.pickup_location,
        destination_location=snapshot.destination_location,
        has_active_route=snapshot.has_active_route,
        is_navigation_active=snapshot.is_navigation_active,
    )


def validate_transition_context(
    config: PhaseTransitionConfig, context: TransitionContext
) -> ContextValidation:
    """Check *context* against *config* before any action runs.

    Fails fast on the first missing required field.
    """
    edge = f"{config.from_phase.value} -> {config.to_phase.value}"

    if context.current_phase is not config.from_phase:
        return ContextValidation(
            False,
            f"Current phase {context.current_phase.value} does not match "
            f"expected {config.from_phase.value}",
        )
    if context.target_phase is not config.to_phase:
        return ContextValidation(
            False,
            f"Target phase {context.target_phase.value} does not match "
            f"expected {config.to_phase.value}",
        )

    for name in config.required_context:
        if getattr(context, name, None) is None:
            return ContextValidation(
                False,
                f"Missing required context '{name}' for transition {edge}",
                missing_field=name,
            )

    return ContextValidation(True)
