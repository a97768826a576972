"""Command line interface for release-cycle."""

from __future__ import annotations

import typer
from rich.console import Console
from typer import Typer

from release_cycle.cli.commands.run import run_cycle

app = Typer(
    name="release-cycle",
    help="Promote a snapshot to a release, or advance to the next snapshot.",
    add_completion=False,
)
console = Console()
err_console = Console(stderr=True)


@app.command()
def main(
    mode: str = typer.Argument(..., help="'release' or 'snapshot'"),
    path: str | None = typer.Option(None, "-p", "--path", help="Project directory, default cwd"),
    release_date: str | None = typer.Option(
        None, "--date", help="Release date for the changelog heading (YYYY-MM-DD)"
    ),
    dry_run: bool = typer.Option(False, "--dry-run", help="Show what would change, write nothing"),
) -> None:
    """Run one release or snapshot transition."""
    run_cycle(mode, path, release_date, dry_run, console, err_console)


__all__ = ["app"]
