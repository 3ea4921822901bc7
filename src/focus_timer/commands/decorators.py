"""Decorators for command functions."""

import functools
import time
import traceback
from collections.abc import Callable

import typer

from focus_timer.models.exceptions import FocusTimerError, RestorationError
from focus_timer.utils.exit_codes import (
    ERROR_GENERAL,
    get_exit_code_name,
    get_operator_action,
)
from focus_timer.utils.logger import get_log_path, get_logger
from focus_timer.utils.ui.formatters import format_error, format_warning


def report_restoration_failure(error: RestorationError) -> int:
    """Report a restoration failure and return the exit code to use.

    Loud on stderr when the interface may still be off. If a later attempt
    brought it back, the run still failed but only as a general error.
    """
    if error.recovered:
        format_error(
            f"Could not re-enable the network interface during the run: {error.reason}"
        )
        format_warning("The final restoration succeeded, the network interface is on.")
        return ERROR_GENERAL
    format_error(str(error))
    format_error(
        "The network interface may still be disabled. "
        f"{get_operator_action(error.exit_code)}."
    )
    return error.exit_code


def command_wrapper(func: Callable):
    """Wrap a command with logging and uniform error handling."""

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        logger = get_logger()
        cmd = func.__name__
        start = time.monotonic()
        logger.info("command started: %s", cmd)
        try:
            result = func(*args, **kwargs)
            elapsed = time.monotonic() - start
            logger.info("command completed: %s (%.3fs)", cmd, elapsed)
            return result

        except RestorationError as e:
            elapsed = time.monotonic() - start
            code = report_restoration_failure(e)
            logger.critical(
                "command failed: %s (%.3fs) %s - %s",
                cmd,
                elapsed,
                get_exit_code_name(code),
                str(e),
            )
            raise typer.Exit(code=code) from e

        except FocusTimerError as e:
            elapsed = time.monotonic() - start
            logger.error(
                "command failed: %s (%.3fs) %s - %s",
                cmd,
                elapsed,
                get_exit_code_name(e.exit_code),
                str(e),
            )
            format_error(str(e))
            raise typer.Exit(code=e.exit_code) from e

        except typer.Exit as e:
            logger.info(
                "command exited: %s (%.3fs) code=%s",
                cmd,
                time.monotonic() - start,
                e.exit_code,
            )
            raise

        except Exception as e:
            elapsed = time.monotonic() - start
            logger.error(
                "command failed: %s (%.3fs) - %s\n%s",
                cmd,
                elapsed,
                str(e),
                traceback.format_exc(),
            )
            format_error(f"An unexpected error occurred: {str(e)}")
            format_error(f"{get_operator_action(ERROR_GENERAL)}: {get_log_path()}")
            raise typer.Exit(code=ERROR_GENERAL) from e

    return wrapper
