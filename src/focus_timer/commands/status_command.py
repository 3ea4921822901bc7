"""Command 'status': is a focus timer running on this host?"""

import typer

from focus_timer.services.config_service import get_config_service
from focus_timer.services.lock import SingleInstanceLock
from focus_timer.utils.ui.formatters import format_output

from .decorators import command_wrapper


@command_wrapper
def status(
    output: str = typer.Option("table", "--output", "-o", help="Output format"),
) -> None:
    """Show whether a run holds the single-instance lock."""
    config_service = get_config_service()
    lock_path = config_service.lock_path()
    owner = SingleInstanceLock(lock_path).read_owner()

    if owner is None:
        data = {"running": False, "lock": str(lock_path)}
    else:
        alive = owner.is_alive()
        data = {
            "running": alive,
            "pid": owner.pid,
            "started_at": owner.started_at,
            "stale": not alive,
            "lock": str(lock_path),
        }
    format_output(data, output)
