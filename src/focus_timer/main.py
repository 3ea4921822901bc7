"""Main entry point for focus-timer."""

import typer

from focus_timer import __version__
from focus_timer.commands import config
from focus_timer.commands.restore_command import restore
from focus_timer.commands.run_command import run
from focus_timer.commands.status_command import status
from focus_timer.utils.typer_helpers import SuggestingGroup
from focus_timer.utils.ui.console import get_console

app = typer.Typer(
    name="focus-timer",
    cls=SuggestingGroup,
    help="Focus/break cycles that turn the network off while you work",
    no_args_is_help=True,
)

console = get_console(highlight=False)

app.add_typer(config.app, name="config", help="Configuration management")

app.command("run")(run)
app.command("restore")(restore)
app.command("status")(status)


@app.command()
def version() -> None:
    """Show version information."""
    console.print(f"focus-timer {__version__}")


def main():
    """Main entry point."""
    app()


if __name__ == "__main__":
    main()
