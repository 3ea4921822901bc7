"""Cycle scheduler: the focus/break state machine.

States::

    NOT_STARTED -> FOCUSING(1) -> RESTING(1) -> FOCUSING(2) -> ... -> RESTING(n) -> COMPLETED
    FOCUSING(k) | RESTING(k) -> CANCELLED

The interface is disabled on entering FOCUSING and enabled on entering
RESTING. Restoration at the end of the run belongs to the guard, on every
exit path, so the scheduler never re-enables on cancellation.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable

from focus_timer.models.config_models import RunConfig
from focus_timer.models.cycle import (
    CycleState,
    Phase,
    ResourceState,
    RunOutcome,
    SchedulerState,
    TickEvent,
)
from focus_timer.models.exceptions import ExternalActionError, RestorationError
from focus_timer.utils.retry import retry_call

from .guard import CancellationGuard
from .notifier import Notifier, NullNotifier
from .progress import ProgressReporter
from .state_controller import ExternalStateController

logger = logging.getLogger(__name__)


class RunListener:
    """Receives run progress. The default implementation ignores everything."""

    def run_started(self, config: RunConfig) -> None:
        pass

    def phase_started(self, cycle: CycleState, duration: int) -> None:
        pass

    def tick(self, cycle: CycleState, event: TickEvent) -> None:
        pass

    def phase_finished(self, cycle: CycleState) -> None:
        pass

    def warning(self, message: str) -> None:
        pass

    def run_finished(self, outcome: RunOutcome) -> None:
        pass


class CycleScheduler:
    """Drives one run of ``cycle_count`` focus/break cycles."""

    def __init__(
        self,
        config: RunConfig,
        controller: ExternalStateController,
        guard: CancellationGuard,
        reporter: ProgressReporter | None = None,
        notifier: Notifier | None = None,
        listener: RunListener | None = None,
        notification_title: str = "Focus Timer",
        enable_attempts: int = 3,
        enable_backoff: float = 0.5,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.config = config
        self.controller = controller
        self.guard = guard
        self.reporter = reporter or ProgressReporter()
        self.notifier = notifier or NullNotifier()
        self.listener = listener or RunListener()
        self.notification_title = notification_title
        self.enable_attempts = enable_attempts
        self.enable_backoff = enable_backoff
        self._sleep = sleep

        self.state = SchedulerState.NOT_STARTED
        self.cycle_state: CycleState | None = None
        self.warnings: list[str] = []
        self.outcome: RunOutcome | None = None

    def run(self) -> RunOutcome:
        """Run every cycle inside the guard.

        Raises:
            AlreadyRunningError: Another instance holds the lock (no side effects).
            RestorationError: The interface could not be re-enabled.
        """
        if self.state is not SchedulerState.NOT_STARTED:
            raise RuntimeError("a scheduler runs only once")

        with self.guard:
            self.listener.run_started(self.config)
            outcome = self._run_cycles()

        self.outcome = outcome
        logger.info("run finished: %s", outcome.summary())
        self.listener.run_finished(outcome)
        return outcome

    def _run_cycles(self) -> RunOutcome:
        for n in range(1, self.config.cycle_count + 1):
            self._enter(SchedulerState.FOCUSING, CycleState(n, Phase.FOCUSING))
            if self.guard.cancelled:
                return self._cancel()

            if self._disable():
                if not self._run_phase(self.config.focus_duration):
                    return self._cancel()
            elif self.guard.cancelled:
                return self._cancel()
            self.listener.phase_finished(self.cycle_state)

            self._enter(SchedulerState.RESTING, CycleState(n, Phase.RESTING))
            if self.guard.cancelled:
                return self._cancel()
            self._enable()

            if not self._run_phase(self.config.rest_duration):
                return self._cancel()
            self.listener.phase_finished(self.cycle_state)

            self._notify_cycle_complete(n)

        self.state = SchedulerState.COMPLETED
        return RunOutcome.completed_all_cycles(self.warnings)

    def _enter(self, state: SchedulerState, cycle_state: CycleState) -> None:
        previous = self.cycle_state
        if previous is not None and cycle_state.current_cycle < previous.current_cycle:
            raise RuntimeError(
                f"cycle counter went backwards ({previous.current_cycle} -> "
                f"{cycle_state.current_cycle})"
            )
        self.state = state
        self.cycle_state = cycle_state
        logger.info(
            "%s (%s)", cycle_state.describe(self.config.cycle_count), state.value
        )

    def _cancel(self) -> RunOutcome:
        assert self.cycle_state is not None
        logger.info(
            "cancelled at cycle %d (%s)",
            self.cycle_state.current_cycle,
            self.cycle_state.phase.value,
        )
        self.state = SchedulerState.CANCELLED
        return RunOutcome.cancelled_at(
            self.cycle_state.current_cycle, self.cycle_state.phase, self.warnings
        )

    def _run_phase(self, duration: int) -> bool:
        """Consume one phase's ticks. False if cancellation was observed."""
        assert self.cycle_state is not None
        self.listener.phase_started(self.cycle_state, duration)
        if self.guard.cancelled:
            return False
        for event in self.reporter.tick(duration):
            self.listener.tick(self.cycle_state, event)
            if self.guard.cancelled:
                return False
        return not self.guard.cancelled

    def _disable(self) -> bool:
        """Disable the interface. A failure degrades the cycle but does not stop the run."""
        try:
            self.controller.set_state(ResourceState.DISABLED)
        except ExternalActionError as e:
            message = (
                f"Cycle {self.cycle_state.current_cycle}: could not disable the "
                f"network interface ({e.reason}); skipping this focus period"
            )
            logger.warning(message)
            self.warnings.append(message)
            self.listener.warning(message)
            return False
        return True

    def _enable(self) -> None:
        """Enable the interface, retrying. Exhaustion is fatal."""
        try:
            retry_call(
                lambda: self.controller.set_state(ResourceState.ENABLED),
                attempts=self.enable_attempts,
                backoff=self.enable_backoff,
                retry_on=(ExternalActionError,),
                sleep=self._sleep,
                description="enabling interface",
            )
        except ExternalActionError as e:
            raise RestorationError(e.reason, self.enable_attempts) from e

    def _notify_cycle_complete(self, n: int) -> None:
        message = f"Cycle {n} finished!"
        try:
            status = self.notifier.send(self.notification_title, message)
        except Exception as e:
            logger.warning("notification failed: %s", e)
            return
        if status != 0:
            logger.warning("notification exited with %d", status)
