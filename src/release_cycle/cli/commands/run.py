"""Implementation of the release/snapshot run.

Progress and errors go to the stderr console; stdout carries only the
``key=value`` summary lines so calling automation can parse them.
"""

from __future__ import annotations

from datetime import date
from pathlib import Path
from typing import TYPE_CHECKING

from rich.markup import escape

from release_cycle.config import load_config
from release_cycle.core.release import Mode, run_release_cycle
from release_cycle.exceptions import ReleaseCycleError, UsageError
from release_cycle.project import create_descriptor

if TYPE_CHECKING:
    from rich.console import Console

EXIT_FAILURE = 1
EXIT_USAGE = 2


def run_cycle(
    mode: str | None,
    path: str | None,
    release_date: str | None,
    dry_run: bool,
    console: Console,
    err_console: Console,
) -> None:
    """Run the release or snapshot transition.

    Args:
        mode: "release" or "snapshot"
        path: Optional path to project directory
        release_date: Date for the release heading (YYYY-MM-DD), default today
        dry_run: Report what would change without writing
        console: Console for the stdout summary
        err_console: Console for progress and errors
    """
    try:
        selected = Mode.parse(mode)
    except UsageError as e:
        err_console.print(f"[red]Error:[/] {escape(e.message)}", highlight=False)
        raise SystemExit(EXIT_USAGE) from e

    project_path = Path(path) if path else Path.cwd()

    try:
        today = date.fromisoformat(release_date) if release_date else None
    except ValueError as e:
        err_console.print(
            f"[red]Error:[/] Invalid date {escape(repr(release_date))}, expected YYYY-MM-DD"
        )
        raise SystemExit(EXIT_USAGE) from e

    try:
        config = load_config(project_path)
        descriptor = create_descriptor(config, project_path)
        if dry_run:
            err_console.print("[yellow]DRY-RUN[/] - no files will be written")
        result = run_release_cycle(
            selected,
            project_path,
            config,
            descriptor,
            err_console,
            today=today,
            dry_run=dry_run,
        )
    except ReleaseCycleError as e:
        err_console.print(f"[red]Error:[/] {escape(e.message)}", highlight=False)
        stderr = getattr(e, "stderr", None)
        if stderr:
            err_console.print(f"[red]{stderr.strip()}[/]", markup=False, highlight=False)
        raise SystemExit(EXIT_FAILURE) from e

    for line in result.summary_lines():
        console.print(line, markup=False, highlight=False, soft_wrap=True)
