"""Focus timer exceptions."""

from focus_timer.utils.exit_codes import (
    ERROR_ALREADY_RUNNING,
    ERROR_GENERAL,
    ERROR_INVALID_ARGS,
    ERROR_RESTORE_FAILED,
)


class FocusTimerError(Exception):
    """Base exception for focus timer errors, carrying the CLI exit code."""

    exit_code = ERROR_GENERAL

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class ConfigError(FocusTimerError):
    """Invalid durations or cycle count. Raised before any side effect."""

    exit_code = ERROR_INVALID_ARGS


class AlreadyRunningError(FocusTimerError):
    """Another focus timer instance holds the single-instance lock."""

    exit_code = ERROR_ALREADY_RUNNING

    def __init__(self, pid: int | None, lock_path):
        self.pid = pid
        self.lock_path = lock_path
        owner = f"pid {pid}" if pid is not None else "another process"
        super().__init__(
            f"Another focus timer is already running ({owner}, lock {lock_path})"
        )


class ExternalActionError(FocusTimerError):
    """Toggling the external resource failed."""

    def __init__(self, target, reason: str):
        self.target = target
        self.reason = reason
        super().__init__(f"Failed to set interface {target}: {reason}")


class RestorationError(FocusTimerError):
    """The resource could not be re-enabled. It may still be disabled.

    ``recovered`` is set when a later restoration on the way out succeeded,
    so the interface is known to be on again.
    """

    exit_code = ERROR_RESTORE_FAILED

    def __init__(self, reason: str, attempts: int):
        self.reason = reason
        self.attempts = attempts
        self.recovered = False
        super().__init__(
            f"Could not re-enable the network interface after {attempts} "
            f"attempt(s): {reason}. The network interface may still be disabled."
        )
