"""
Typed publish/subscribe for host-facing phase events.

Hosts subclass ``PhaseObserver`` and override the hooks they care about,
then ``subscribe`` and keep the returned ``Subscription`` to detach later.
An observer that raises is logged and skipped; it never breaks a
transition or starves other observers.
"""

from __future__ import annotations

import logging
from typing import Callable, Optional

from tripnav.domain.entities import TransitionResult
from tripnav.domain.enums import NavigationPhase

logger = logging.getLogger(__name__)


class PhaseObserver:
    def on_phase_change(self, from_phase: NavigationPhase, to_phase: NavigationPhase) -> None:
        pass

    def on_transition_start(self, from_phase: NavigationPhase, to_phase: NavigationPhase) -> None:
        pass

    def on_transition_complete(self, result: TransitionResult) -> None:
        pass

    def on_transition_error(self, message: str, result: TransitionResult) -> None:
        pass

    def on_transition_progress(self, fraction: float) -> None:
        pass


class CallbackObserver(PhaseObserver):
    """Adapts plain callables to the observer interface."""

    def __init__(
        self,
        on_phase_change: Optional[Callable[[NavigationPhase, NavigationPhase], None]] = None,
        on_transition_start: Optional[Callable[[NavigationPhase, NavigationPhase], None]] = None,
        on_transition_complete: Optional[Callable[[TransitionResult], None]] = None,
        on_transition_error: Optional[Callable[[str, TransitionResult], None]] = None,
    ):
        self._phase_change = on_phase_change
        self._start = on_transition_start
        self._complete = on_transition_complete
        self._error = on_transition_error

    def on_phase_change(self, from_phase, to_phase):
        if self._phase_change:
            self._phase_change(from_phase, to_phase)

    def on_transition_start(self, from_phase, to_phase):
        if self._start:
            self._start(from_phase, to_phase)

    def on_transition_complete(self, result):
        if self._complete:
            self._complete(result)

    def on_transition_error(self, message, result):
        if self._error:
            self._error(message, result)


class Subscription:
    def __init__(self, bus: PhaseEventBus, observer: PhaseObserver):
        self._bus = bus
        self.observer = observer

    @property
    def active(self) -> bool:
        return self._bus.is_subscribed(self.observer)

    def unsubscribe(self) -> None:
        self._bus.remove(self.observer)


class PhaseEventBus:
    def __init__(self) -> None:
        self._observers: list[PhaseObserver] = []

    def subscribe(self, observer: PhaseObserver) -> Subscription:
        if observer not in self._observers:
            self._observers.append(observer)
        return Subscription(self, observer)

    def remove(self, observer: PhaseObserver) -> None:
        if observer in self._observers:
            self._observers.remove(observer)

    def is_subscribed(self, observer: PhaseObserver) -> bool:
        return observer in self._observers

    def clear(self) -> None:
        self._observers.clear()

    def __len__(self) -> int:
        return len(self._observers)

    # ── Publishing ────────────────────────────────────────────────

    def phase_changed(self, from_phase: NavigationPhase, to_phase: NavigationPhase) -> None:
        self._publish("on_phase_change", from_phase, to_phase)

    def transition_started(self, from_phase: NavigationPhase, to_phase: NavigationPhase) -> None:
        self._publish("on_transition_start", from_phase, to_phase)

    def transition_completed(self, result: TransitionResult) -> None:
        self._publish("on_transition_complete", result)

    def transition_failed(self, message: str, result: TransitionResult) -> None:
        self._publish("on_transition_error", message, result)

    def progress(self, fraction: float) -> None:
        self._publish("on_transition_progress", fraction)

    def _publish(self, hook: str, *args) -> None:
        # Snapshot so observers may unsubscribe from inside a hook
        for observer in list(self._observers):
            try:
                getattr(observer, hook)(*args)
            except Exception:
                logger.exception("Observer %r failed in %s", observer, hook)
