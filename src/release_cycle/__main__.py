"""Allow ``python -m release_cycle``."""

from release_cycle.cli import app

app()
