"""Rich formatting helpers for the Mend CLI.

Provides functions that format repair data structures for terminal display.
Rich auto-detects TTY and degrades gracefully when piped (no ANSI codes).
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Sequence

from rich.console import Console
from rich.markup import escape
from rich.table import Table

if TYPE_CHECKING:
    from mend.models.repair import RepairOutcome, ValidationViolation


def get_console(stderr: bool = False) -> Console:
    """Create a Rich Console that auto-detects TTY for graceful pipe degradation."""
    return Console(stderr=stderr)


def format_violations(violations: Sequence[ValidationViolation], console: Console) -> None:
    """Display violations as a table, or a success line if there are none."""
    if not violations:
        console.print("[green]valid[/green]", highlight=False)
        return

    table = Table(show_header=True, header_style="bold", box=None, pad_edge=False)
    table.add_column("#", justify="right", style="dim")
    table.add_column("Path", style="yellow")
    table.add_column("Kind", style="cyan")
    table.add_column("Message")

    for i, violation in enumerate(violations, start=1):
        table.add_row(
            str(i),
            escape(violation.render_path()),
            violation.kind.value,
            escape(violation.message),
        )

    console.print(table)
    console.print(f"[red]{len(violations)} violation(s)[/red]", highlight=False)


def format_outcome(outcome: RepairOutcome, console: Console) -> None:
    """Display a one-paragraph summary of a repair session."""
    from mend.models.repair import RepairResult

    if isinstance(outcome, RepairResult):
        state = "repaired" if outcome.repaired else "already valid"
        console.print(
            f"[green]Success:[/green] {state} after {len(outcome.attempts)} attempt(s)",
            highlight=False,
        )
        return

    console.print(
        f"[red]Failed:[/red] {outcome.kind.value} after "
        f"{len(outcome.attempts)} attempt(s)",
        highlight=False,
    )
    if outcome.violations:
        format_violations(outcome.violations, console)
    parse_error = getattr(outcome, "parse_error", "")
    if parse_error:
        console.print(f"  Parse error: {escape(parse_error)}", highlight=False)


def format_error(message: str, console: Console) -> None:
    """Display an error message."""
    console.print(f"[red]Error:[/red] {escape(message)}", highlight=False)
