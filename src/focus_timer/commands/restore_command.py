"""Command 'restore': force the network interface back on."""

import typer

from focus_timer.services.config_service import get_config_service
from focus_timer.services.guard import CancellationGuard
from focus_timer.services.lock import SingleInstanceLock
from focus_timer.services.power_switch import create_power_switch
from focus_timer.services.state_controller import ExternalStateController
from focus_timer.utils.exit_codes import ERROR_ALREADY_RUNNING
from focus_timer.utils.ui.formatters import format_error, format_success

from .decorators import command_wrapper


@command_wrapper
def restore(
    force: bool = typer.Option(
        False, "--force", help="Restore even while a run holds the lock"
    ),
) -> None:
    """Turn the network interface back on (after a failed or killed run)."""
    config_service = get_config_service()
    app_config = config_service.load_config()
    lock = SingleInstanceLock(config_service.lock_path())

    owner = lock.read_owner()
    if owner is not None and owner.is_alive() and not force:
        format_error(
            f"A focus timer is running (pid {owner.pid}). "
            "Stop it with Ctrl+C, or pass --force."
        )
        raise typer.Exit(ERROR_ALREADY_RUNNING)

    controller = ExternalStateController(create_power_switch(app_config.switch))
    guard = CancellationGuard(
        lock,
        controller,
        attempts=app_config.restore.attempts,
        backoff=app_config.restore.backoff,
    )
    guard.restore()
    format_success("Network interface is on")
