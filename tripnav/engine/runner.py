"""
Transition runner
=================

Executes a transition's action list strictly in order against an
``ActionExecutor``.

Policy
------
* **Retry** -- a failing action is re-attempted up to ``retry_attempts``
  times with a fixed ``retry_delay`` between attempts.  Only the failing
  action is retried, never the whole list.
* **Timeout** -- the whole list shares one budget (``timeout``).  Each
  attempt is additionally capped by ``action_timeout``.  Running out of
  budget aborts the transition with a TIMEOUT result.
* **Fail-fast** -- the first action that exhausts its retries stops the
  run.  Nothing after it is attempted and nothing before it is undone, so
  ``executed_actions`` is always a prefix of ``config.actions``.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Callable, Optional

from tripnav.config import settings
from tripnav.domain import phase_graph
from tripnav.domain.entities import (
    PhaseTransitionConfig,
    TransitionAction,
    TransitionContext,
    TransitionResult,
)
from tripnav.domain.enums import TransitionErrorKind
from tripnav.domain.errors import ActionFailure, TransitionTimeout

from .executor import ActionExecutor

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int], None]


class TransitionRunner:
    def __init__(
        self,
        executor: ActionExecutor,
        *,
        timeout: Optional[float] = None,
        action_timeout: Optional[float] = None,
        retry_attempts: Optional[int] = None,
        retry_delay: Optional[float] = None,
        on_progress: Optional[ProgressCallback] = None,
    ):
        self.executor = executor
        self.timeout = settings.transition_timeout_seconds if timeout is None else timeout
        self.action_timeout = (
            settings.action_timeout_seconds if action_timeout is None else action_timeout
        )
        self.retry_attempts = (
            settings.retry_attempts if retry_attempts is None else retry_attempts
        )
        self.retry_delay = (
            settings.retry_delay_seconds if retry_delay is None else retry_delay
        )
        self.on_progress = on_progress

    async def execute_transition(
        self, config: PhaseTransitionConfig, context: TransitionContext
    ) -> TransitionResult:
        loop = asyncio.get_running_loop()
        started = loop.time()
        deadline = started + self.timeout
        total = len(config.actions)
        executed: list[TransitionAction] = []

        logger.info(
            "Starting transition %s -> %s (%d actions)",
            config.from_phase.value, config.to_phase.value, total,
        )

        for index, action in enumerate(config.actions):
            try:
                await self._execute_with_retry(action, context, deadline)
            except TransitionTimeout as exc:
                logger.error(
                    "Transition %s -> %s timed out at %s after %d/%d actions",
                    config.from_phase.value, config.to_phase.value,
                    action.type.value, len(executed), total,
                )
                return TransitionResult.failure(
                    config.from_phase, config.to_phase, str(exc),
                    TransitionErrorKind.TIMEOUT, tuple(executed),
                )
            except Exception as exc:
                message = f"Action execution failed: {action.type.value} - {_reason(exc)}"
                logger.error(
                    "Transition %s -> %s failed after %.0fms: %s",
                    config.from_phase.value, config.to_phase.value,
                    (loop.time() - started) * 1000, message,
                )
                return TransitionResult.failure(
                    config.from_phase, config.to_phase, message,
                    TransitionErrorKind.ACTION_FAILURE, tuple(executed),
                )

            executed.append(action)
            if self.on_progress:
                self.on_progress(index + 1, total)

        elapsed_ms = (loop.time() - started) * 1000
        logger.info(
            "Transition %s -> %s completed in %.0fms",
            config.from_phase.value, config.to_phase.value, elapsed_ms,
        )
        expected_ms = phase_graph.expected_transition_duration_ms(
            config.from_phase, config.to_phase
        )
        if elapsed_ms > expected_ms:
            logger.warning(
                "Transition %s -> %s took %.0fms (expected ~%dms)",
                config.from_phase.value, config.to_phase.value, elapsed_ms, expected_ms,
            )
        return TransitionResult(
            success=True,
            from_phase=config.from_phase,
            to_phase=config.to_phase,
            executed_actions=tuple(executed),
        )

    async def _execute_with_retry(
        self,
        action: TransitionAction,
        context: TransitionContext,
        deadline: float,
    ) -> None:
        loop = asyncio.get_running_loop()
        attempts = self.retry_attempts + 1
        last_error: Exception = ActionFailure(action.type, "not attempted")

        for attempt in range(1, attempts + 1):
            remaining = deadline - loop.time()
            if remaining <= 0:
                raise self._budget_exceeded(action)

            limit = min(self.action_timeout, remaining)
            try:
                await asyncio.wait_for(self._attempt(action, context), timeout=limit)
                return
            except asyncio.TimeoutError:
                if limit >= remaining:
                    raise self._budget_exceeded(action)
                last_error = ActionFailure(
                    action.type, f"timed out after {self.action_timeout:g}s"
                )
            except Exception as exc:
                last_error = exc

            logger.warning(
                "Action %s failed (attempt %d/%d): %s",
                action.type.value, attempt, attempts, _reason(last_error),
            )
            if attempt == attempts:
                break
            if self.retry_delay > 0:
                if deadline - loop.time() <= self.retry_delay:
                    raise self._budget_exceeded(action)
                await asyncio.sleep(self.retry_delay)

        raise last_error

    async def _attempt(self, action: TransitionAction, context: TransitionContext) -> None:
        # Only the per-attempt limit may surface as a TimeoutError
        try:
            await self.executor.execute(action, context)
        except asyncio.TimeoutError as exc:
            raise ActionFailure(action.type, _reason(exc)) from exc

    def _budget_exceeded(self, action: TransitionAction) -> TransitionTimeout:
        return TransitionTimeout(
            f"Transition timed out after {self.timeout:g}s during {action.type.value}"
        )


def _reason(exc: BaseException) -> str:
    if isinstance(exc, ActionFailure):
        return exc.reason
    return str(exc) or type(exc).__name__
