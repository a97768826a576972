"""release-cycle: snapshot/release version transitions with changelog promotion."""

from __future__ import annotations

__version__ = "0.1.0"
