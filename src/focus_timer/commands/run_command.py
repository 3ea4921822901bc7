"""Command 'run': focus/break cycles with the network off during focus."""

from pathlib import Path

import typer

from focus_timer.models.config_models import AppConfig, RunConfig
from focus_timer.services.config_service import get_config_service
from focus_timer.services.guard import CancellationGuard
from focus_timer.services.lock import SingleInstanceLock
from focus_timer.services.notifier import create_notifier
from focus_timer.services.power_switch import create_power_switch
from focus_timer.services.progress import ProgressReporter
from focus_timer.services.scheduler import CycleScheduler, RunListener
from focus_timer.services.state_controller import ExternalStateController
from focus_timer.utils.exit_codes import CANCELLED
from focus_timer.utils.ui.console import get_console
from focus_timer.utils.ui.display import RunDisplay
from focus_timer.utils.ui.formatters import format_warning

from .decorators import command_wrapper

console = get_console()


def create_scheduler(
    run_config: RunConfig,
    app_config: AppConfig,
    lock_path: Path,
    dry_run: bool = False,
    listener: RunListener | None = None,
) -> CycleScheduler:
    """Wire a scheduler from the persisted configuration."""
    controller = ExternalStateController(
        create_power_switch(app_config.switch, dry_run=dry_run)
    )
    guard = CancellationGuard(
        SingleInstanceLock(lock_path),
        controller,
        attempts=app_config.restore.attempts,
        backoff=app_config.restore.backoff,
    )
    return CycleScheduler(
        run_config,
        controller,
        guard,
        reporter=ProgressReporter(),
        notifier=create_notifier(app_config.notifications),
        listener=listener,
        notification_title=app_config.notifications.title,
        enable_attempts=app_config.restore.attempts,
        enable_backoff=app_config.restore.backoff,
    )


@command_wrapper
def run(
    focus: int | None = typer.Option(
        None, "--focus", "-f", help="Focus time in seconds [default: 1500]"
    ),
    rest: int | None = typer.Option(
        None, "--break", "-b", help="Break time in seconds [default: 300]"
    ),
    cycles: int | None = typer.Option(
        None, "--cycles", "-c", help="Number of focus/break cycles [default: 1]"
    ),
    dry_run: bool = typer.Option(
        False, "--dry-run", help="Run the timer without touching the network interface"
    ),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="No progress display"),
) -> None:
    """Run focus/break cycles, turning the network off while you focus."""
    config_service = get_config_service()
    app_config = config_service.load_config()

    # Validated before anything touches the interface or the lock
    run_config = RunConfig.create(
        focus=focus if focus is not None else app_config.timer.focus,
        rest=rest if rest is not None else app_config.timer.rest,
        cycles=cycles if cycles is not None else app_config.timer.cycles,
    )

    display = None if quiet else RunDisplay(console)
    scheduler = create_scheduler(
        run_config,
        app_config,
        config_service.lock_path(),
        dry_run=dry_run,
        listener=display,
    )
    if dry_run:
        format_warning("Dry run: the network interface will not be touched")

    try:
        outcome = scheduler.run()
    finally:
        if display is not None:
            display.close()

    if outcome.cancelled:
        console.print(
            f"[yellow]{outcome.summary()}. Network interface restored.[/yellow]"
        )
        raise typer.Exit(CANCELLED)
    if display is None:
        console.print("All cycles finished!")
