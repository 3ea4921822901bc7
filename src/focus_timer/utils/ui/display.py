"""Terminal progress display for a run."""

from __future__ import annotations

from rich.console import Console
from rich.panel import Panel
from rich.progress import BarColumn, Progress, TaskID, TextColumn

from focus_timer.models.config_models import RunConfig
from focus_timer.models.cycle import CycleState, Phase, RunOutcome, TickEvent
from focus_timer.services.scheduler import RunListener


def format_mmss(seconds: int) -> str:
    seconds = max(0, int(seconds))
    mins, secs = divmod(seconds, 60)
    return f"{mins:02d}:{secs:02d}"


class RunDisplay(RunListener):
    """Shows one progress bar per phase: ``[####----] 12s / 1500s``."""

    def __init__(self, console: Console):
        self.console = console
        self.config: RunConfig | None = None
        self._progress: Progress | None = None
        self._task: TaskID | None = None

    def run_started(self, config: RunConfig) -> None:
        self.config = config
        self.console.print(
            f"[bold green]🍅 Starting {config.cycle_count} cycle(s)[/bold green] "
            f"[dim](focus {format_mmss(config.focus_duration)}, "
            f"break {format_mmss(config.rest_duration)}, "
            f"total {format_mmss(config.total_seconds)})[/dim]"
        )

    def phase_started(self, cycle: CycleState, duration: int) -> None:
        self.close()
        if cycle.phase is Phase.FOCUSING:
            color = "cyan"
            title = "Focus time, network off"
        else:
            color = "yellow"
            title = "Break time, network on"
        total = self.config.cycle_count if self.config else cycle.current_cycle
        self.console.print(
            f"\n[bold {color}]=== Cycle {cycle.current_cycle}/{total}: {title} ===[/bold {color}]"
        )

        self._progress = Progress(
            TextColumn("[progress.description]{task.description}"),
            BarColumn(bar_width=40, complete_style=color),
            TextColumn("{task.completed}s / {task.total}s"),
            TextColumn("[dim]{task.fields[remaining]} left[/dim]"),
            console=self.console,
            transient=False,
        )
        self._task = self._progress.add_task(
            cycle.phase.label, total=duration, remaining=format_mmss(duration)
        )
        self._progress.start()

    def tick(self, cycle: CycleState, event: TickEvent) -> None:
        if self._progress is None or self._task is None:
            return
        self._progress.update(
            self._task, completed=event.elapsed, remaining=format_mmss(event.remaining)
        )

    def phase_finished(self, cycle: CycleState) -> None:
        self.close()

    def warning(self, message: str) -> None:
        self.close()
        self.console.print(f"[bold yellow]Warning:[/bold yellow] {message}")

    def run_finished(self, outcome: RunOutcome) -> None:
        self.close()
        if outcome.completed:
            body = "[bold green]🎉 All cycles finished![/bold green]\n\nNetwork interface is on."
            style = "green"
        else:
            body = (
                f"[yellow]{outcome.summary()}[/yellow]\n\n"
                "Network interface has been turned back on."
            )
            style = "yellow"
        if outcome.warnings:
            body += f"\n[dim]{len(outcome.warnings)} degraded cycle(s), see the log.[/dim]"
        self.console.print(Panel(body, border_style=style, padding=(1, 2)))

    def close(self) -> None:
        if self._progress is not None:
            self._progress.stop()
            self._progress = None
            self._task = None
