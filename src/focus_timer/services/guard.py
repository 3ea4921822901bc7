"""Scoped run guard: lock, interrupt listener, guaranteed restoration.

The guard is the only code path that restores the interface on the way
out. Whatever ends the run (normal completion, SIGINT/SIGTERM, or an
exception escaping the scheduler) goes through ``release()``, which runs
exactly once and always tries to leave the interface enabled before the
lock is dropped.
"""

from __future__ import annotations

import logging
import signal
import threading
import time
from collections.abc import Callable

from focus_timer.models.cycle import ResourceState
from focus_timer.models.exceptions import ExternalActionError, RestorationError
from focus_timer.utils.retry import retry_call

from .lock import SingleInstanceLock
from .state_controller import ExternalStateController

logger = logging.getLogger(__name__)


def _default_signals() -> tuple[signal.Signals, ...]:
    signals = [signal.SIGINT, signal.SIGTERM]
    if hasattr(signal, "SIGHUP"):
        signals.append(signal.SIGHUP)
    return tuple(signals)


class CancellationGuard:
    """Scoped acquisition of the single-instance lock and the interrupt listener.

    Usage::

        with CancellationGuard(lock, controller) as guard:
            while not guard.cancelled:
                ...

    Signal handlers only set a flag; the scheduler observes ``cancelled`` at
    tick boundaries and stops, then ``release()`` does the restoration.
    """

    def __init__(
        self,
        lock: SingleInstanceLock,
        controller: ExternalStateController,
        attempts: int = 3,
        backoff: float = 0.5,
        signals: tuple[signal.Signals, ...] | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.lock = lock
        self.controller = controller
        self.attempts = attempts
        self.backoff = backoff
        self.signals = _default_signals() if signals is None else signals
        self._sleep = sleep
        self._cancel_event = threading.Event()
        self._previous_handlers: dict[signal.Signals, object] = {}
        self._acquired = False
        self._released = False
        self.received_signal: signal.Signals | None = None

    @property
    def cancelled(self) -> bool:
        return self._cancel_event.is_set()

    @property
    def active(self) -> bool:
        return self._acquired and not self._released

    def cancel(self) -> None:
        """Request cancellation (same effect as an interrupt)."""
        self._cancel_event.set()

    def _handle_signal(self, signum, _frame) -> None:
        # Only a flag transition here; cleanup happens in release().
        self.received_signal = signal.Signals(signum)
        self._cancel_event.set()

    def acquire(self) -> CancellationGuard:
        """Take the lock and start listening for interrupts.

        Raises:
            AlreadyRunningError: Another instance is active. Nothing was touched.
        """
        if self._acquired:
            raise RuntimeError("guard already acquired")
        self.lock.acquire()
        self._acquired = True
        self._install_handlers()
        return self

    def _install_handlers(self) -> None:
        if threading.current_thread() is not threading.main_thread():
            logger.warning("not on the main thread, interrupt handlers not installed")
            return
        for sig in self.signals:
            self._previous_handlers[sig] = signal.signal(sig, self._handle_signal)

    def _restore_handlers(self) -> None:
        for sig, handler in self._previous_handlers.items():
            signal.signal(sig, handler)
        self._previous_handlers.clear()

    def restore(self) -> None:
        """Force the interface on with bounded retries.

        Raises:
            RestorationError: Every attempt failed.
        """
        try:
            retry_call(
                lambda: self.controller.set_state(ResourceState.ENABLED),
                attempts=self.attempts,
                backoff=self.backoff,
                retry_on=(ExternalActionError,),
                sleep=self._sleep,
                description="restoring interface",
            )
        except ExternalActionError as e:
            logger.critical(
                "interface restoration failed after %d attempts: %s", self.attempts, e
            )
            raise RestorationError(e.reason, self.attempts) from e
        logger.info("interface restored")

    def release(self) -> None:
        """Restore the interface, stop listening, drop the lock. Runs once."""
        if not self._acquired or self._released:
            return
        self._released = True
        try:
            self.restore()
        finally:
            self._restore_handlers()
            self.lock.release()

    def __enter__(self) -> CancellationGuard:
        return self.acquire()

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc_type is not None:
            logger.error("run ended with %s: %s", exc_type.__name__, exc)
        self.release()
        if isinstance(exc, RestorationError):
            # The earlier failure stands, but the interface is on now
            exc.recovered = True
