"""Typer helper utilities."""

from difflib import get_close_matches

import typer
from typer.core import TyperGroup

from focus_timer.utils.exit_codes import ERROR_INVALID_ARGS
from focus_timer.utils.ui.console import get_error_console


class SuggestingGroup(TyperGroup):
    """Typer group that suggests the closest command on a typo.

    ``focus-timer rn`` exits with ``ERROR_INVALID_ARGS`` after printing
    ``Did you mean: run``; unknown commands with no close match fall back to
    click's usual error.
    """

    def resolve_command(self, ctx, args):
        try:
            return super().resolve_command(ctx, args)
        except Exception as e:
            if not args:
                raise
            attempted = args[0]
            suggestions = get_close_matches(
                attempted, sorted(self.commands), n=3, cutoff=0.6
            )
            if not suggestions:
                raise
            console = get_error_console()
            console.print(
                f'[red]Error:[/red] unknown command "{attempted}" for "{ctx.info_name}"'
            )
            console.print(f"[yellow]Did you mean:[/yellow] {', '.join(suggestions)}")
            raise typer.Exit(ERROR_INVALID_ARGS) from e
