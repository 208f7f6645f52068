"""
Phase manager
=============

Stateful orchestrator for one trip.  Owns ``current_phase`` /
``previous_phase`` / ``is_transitioning`` and is the only writer of them.

Transition pipeline
-------------------
1. Reject if the manager is closed (UNMOUNTED) or another transition is
   in flight (CONCURRENT_TRANSITION).
2. Same phase -> no-op success.
3. Reject edges missing from the phase graph (INVALID_TRANSITION).
4. Look up the edge config (NO_CONFIG).
5. Build a context from the latest snapshot and validate it
   (MISSING_CONTEXT) -- nothing has run yet at this point.
6. Run the action list through ``TransitionRunner``.
7. Commit the new phase only on success.

Liveness
--------
Every run is stamped with a generation number.  ``cleanup``, ``close`` and
``force_phase_change`` bump the generation and cancel the in-flight run, so
a completion that arrives afterwards is discarded instead of committed.

* ``cleanup()`` -- releases outstanding work; the next
  ``transition_to_phase`` transparently reinitialises the manager.
* ``close()`` -- the owning session is gone; every later request is
  rejected with UNMOUNTED.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import replace
from typing import Any, Callable, Optional

from tripnav.domain.context import create_transition_context, validate_transition_context
from tripnav.domain.entities import ContextSnapshot, TransitionAction, TransitionResult
from tripnav.domain.enums import NavigationPhase, TransitionErrorKind
from tripnav.domain.errors import ManagerClosed, NoTransitionToRetry
from tripnav.domain import phase_graph

from .callbacks import NavigationCallbacks
from .executor import ActionExecutor
from .observers import CallbackObserver, PhaseEventBus, PhaseObserver, Subscription
from .runner import TransitionRunner

logger = logging.getLogger(__name__)


class PhaseManager:
    def __init__(
        self,
        initial_phase: NavigationPhase = NavigationPhase.TO_PICKUP,
        *,
        callbacks: Optional[NavigationCallbacks] = None,
        snapshot: Optional[ContextSnapshot] = None,
        action_executor: Optional[ActionExecutor] = None,
        timeout: Optional[float] = None,
        action_timeout: Optional[float] = None,
        retry_attempts: Optional[int] = None,
        retry_delay: Optional[float] = None,
        on_phase_change: Optional[Callable[[NavigationPhase, NavigationPhase], None]] = None,
        on_transition_start: Optional[Callable[[NavigationPhase, NavigationPhase], None]] = None,
        on_transition_complete: Optional[Callable[[TransitionResult], None]] = None,
        on_transition_error: Optional[Callable[[str, TransitionResult], None]] = None,
    ):
        self._callbacks = callbacks or NavigationCallbacks()
        self._custom_executor = action_executor
        self._runner_options = {
            "timeout": timeout,
            "action_timeout": action_timeout,
            "retry_attempts": retry_attempts,
            "retry_delay": retry_delay,
        }

        self._current = NavigationPhase(initial_phase)
        self._previous: Optional[NavigationPhase] = None
        self._snapshot = snapshot or ContextSnapshot()
        self._is_transitioning = False
        self._progress = 0.0
        self._last_result: Optional[TransitionResult] = None
        self._last_target: Optional[NavigationPhase] = None
        self._error: Optional[str] = None

        self._generation = 0
        self._inflight: Optional[asyncio.Future] = None
        self._cleaned_up = False
        self._closed = False

        self.events = PhaseEventBus()
        if any((on_phase_change, on_transition_start, on_transition_complete, on_transition_error)):
            self.events.subscribe(
                CallbackObserver(
                    on_phase_change=on_phase_change,
                    on_transition_start=on_transition_start,
                    on_transition_complete=on_transition_complete,
                    on_transition_error=on_transition_error,
                )
            )

        self._runner = self._build_runner()

    # ── State ─────────────────────────────────────────────────────

    @property
    def current_phase(self) -> NavigationPhase:
        return self._current

    @property
    def previous_phase(self) -> Optional[NavigationPhase]:
        return self._previous

    @property
    def is_transitioning(self) -> bool:
        return self._is_transitioning

    @property
    def transition_progress(self) -> float:
        """Fraction (0..1) of the in-flight action list completed so far."""
        return self._progress

    @property
    def last_transition_result(self) -> Optional[TransitionResult]:
        return self._last_result

    @property
    def error(self) -> Optional[str]:
        return self._error

    @property
    def snapshot(self) -> ContextSnapshot:
        return self._snapshot

    @property
    def is_cleaned_up(self) -> bool:
        return self._cleaned_up

    @property
    def is_closed(self) -> bool:
        return self._closed

    def update_snapshot(self, **fields: Any) -> ContextSnapshot:
        """Record the caller's latest locations / flags for the next attempt."""
        self._snapshot = replace(self._snapshot, **fields)
        return self._snapshot

    def subscribe(self, observer: PhaseObserver) -> Subscription:
        return self.events.subscribe(observer)

    # ── Transitions ───────────────────────────────────────────────

    async def transition_to_phase(self, target: NavigationPhase) -> TransitionResult:
        target = NavigationPhase(target)
        current = self._current

        if self._closed:
            return TransitionResult.failure(
                current, target, "Navigation session has ended",
                TransitionErrorKind.UNMOUNTED,
            )
        if self._is_transitioning:
            logger.warning("Rejecting %s -> %s: transition in progress", current.value, target.value)
            return TransitionResult.failure(
                current, target, "Another transition is already in progress",
                TransitionErrorKind.CONCURRENT_TRANSITION,
            )
        if self._cleaned_up:
            self._reinitialize()

        if target is current:
            logger.debug("Already in phase %s, skipping transition", target.value)
            return TransitionResult(success=True, from_phase=current, to_phase=target)

        if not phase_graph.is_valid_transition(current, target):
            return self._reject(
                current, target,
                f"Invalid transition from {current.value} to {target.value}",
                TransitionErrorKind.INVALID_TRANSITION,
            )

        config = phase_graph.get_transition_config(current, target)
        if config is None:
            return self._reject(
                current, target,
                f"No transition configuration found for {current.value} to {target.value}",
                TransitionErrorKind.NO_CONFIG,
            )

        self._last_target = target
        context = create_transition_context(current, target, self._snapshot)
        validation = validate_transition_context(config, context)
        if not validation.valid:
            return self._reject(
                current, target,
                validation.error or "Context validation failed",
                TransitionErrorKind.MISSING_CONTEXT,
            )

        self._generation += 1
        generation = self._generation
        self._is_transitioning = True
        self._progress = 0.0
        self._error = None

        logger.info(
            "Phase transition %s -> %s: %s",
            current.value, target.value,
            phase_graph.get_transition_description(current, target),
        )
        self.events.transition_started(current, target)

        task = asyncio.ensure_future(self._runner.execute_transition(config, context))
        self._inflight = task
        try:
            result = await task
        except asyncio.CancelledError:
            if generation != self._generation:
                return self._abandoned(current, target)
            self._finish_run()
            raise
        except Exception:
            if generation == self._generation:
                self._finish_run()
            raise

        if generation != self._generation:
            return self._abandoned(current, target, result.executed_actions)

        self._finish_run()
        self._last_result = result

        if result.success:
            self._previous = current
            self._current = target
            logger.info("Phase committed: %s -> %s", current.value, target.value)
            if phase_graph.is_terminal_phase(target):
                logger.info("Trip finished in phase %s", target.value)
            self.events.phase_changed(current, target)
            self.events.transition_completed(result)
        else:
            self._error = result.error
            logger.error(
                "Phase transition failed: %s -> %s (%s)",
                current.value, target.value, result.error,
            )
            self.events.transition_failed(result.error or "Transition failed", result)

        return result

    async def retry_last_transition(self) -> TransitionResult:
        """Re-attempt the last target with a freshly built context.

        Raises ``NoTransitionToRetry`` if nothing has been attempted since
        construction or the last cleanup.
        """
        if self._closed:
            return TransitionResult.failure(
                self._current, self._last_target or self._current,
                "Navigation session has ended", TransitionErrorKind.UNMOUNTED,
            )
        if self._last_target is None:
            raise NoTransitionToRetry("No previous transition to retry")

        logger.info("Retrying transition %s -> %s", self._current.value, self._last_target.value)
        return await self.transition_to_phase(self._last_target)

    def force_phase_change(self, target: NavigationPhase) -> None:
        """Commit *target* directly, running no actions.

        Operator escape hatch: route, geofence, camera and voice state are
        left exactly as they were and may not match the new phase.
        """
        if self._closed:
            logger.warning("Ignoring forced phase change on a closed manager")
            return

        target = NavigationPhase(target)
        previous = self._current
        logger.warning(
            "Force changing phase from %s to %s without transition actions",
            previous.value, target.value,
        )
        self._invalidate_inflight()
        self._previous = previous
        self._current = target
        self._error = None
        self.events.phase_changed(previous, target)

    # ── Queries ───────────────────────────────────────────────────

    def can_transition_to(self, target: NavigationPhase) -> bool:
        return phase_graph.is_valid_transition(self._current, NavigationPhase(target))

    def get_valid_next_phases(self) -> list[NavigationPhase]:
        return phase_graph.get_valid_next_phases(self._current)

    def get_transition_description(self, target: NavigationPhase) -> str:
        return phase_graph.get_transition_description(self._current, NavigationPhase(target))

    def clear_error(self) -> None:
        self._error = None

    # ── Lifecycle ─────────────────────────────────────────────────

    def cleanup(self) -> None:
        """Cancel outstanding work and drop retry state.  Safe to repeat."""
        if self._cleaned_up:
            return
        logger.info("Cleaning up navigation phase manager")
        self._cleaned_up = True
        self._invalidate_inflight()
        self._last_target = None
        self._last_result = None
        self._error = None

    def close(self) -> None:
        """Clean up for good: the owning session has ended."""
        if self._closed:
            return
        self.cleanup()
        self._closed = True
        self.events.clear()
        logger.info("Navigation phase manager closed in phase %s", self._current.value)

    def reinitialize(self) -> None:
        if self._closed:
            raise ManagerClosed("Cannot reinitialize a closed phase manager")
        self._reinitialize()

    # ── Internals ─────────────────────────────────────────────────

    def _build_runner(self) -> TransitionRunner:
        executor = self._custom_executor or ActionExecutor(self._callbacks)
        return TransitionRunner(executor, on_progress=self._on_progress, **self._runner_options)

    def _reinitialize(self) -> None:
        logger.info("Reinitializing navigation phase manager")
        self._runner = self._build_runner()
        self._cleaned_up = False

    def _on_progress(self, completed: int, total: int) -> None:
        self._progress = completed / total if total else 1.0
        self.events.progress(self._progress)

    def _finish_run(self) -> None:
        self._is_transitioning = False
        self._progress = 0.0
        self._inflight = None

    def _invalidate_inflight(self) -> None:
        self._generation += 1
        if self._inflight is not None and not self._inflight.done():
            self._inflight.cancel()
        self._finish_run()

    def _reject(
        self,
        current: NavigationPhase,
        target: NavigationPhase,
        message: str,
        kind: TransitionErrorKind,
    ) -> TransitionResult:
        logger.warning("Rejected transition %s -> %s: %s", current.value, target.value, message)
        result = TransitionResult.failure(current, target, message, kind)
        self._last_result = result
        self._error = message
        self.events.transition_failed(message, result)
        return result

    def _abandoned(
        self,
        current: NavigationPhase,
        target: NavigationPhase,
        executed: tuple[TransitionAction, ...] = (),
    ) -> TransitionResult:
        logger.warning(
            "Discarding stale transition %s -> %s: manager was cleaned up",
            current.value, target.value,
        )
        return TransitionResult.failure(
            current, target, "Transition abandoned: phase manager was cleaned up",
            TransitionErrorKind.UNMOUNTED, executed,
        )
