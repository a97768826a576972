"""Literal version substitution across project documents.

Documents such as README.md mention the version in dependency snippets
and prose. Those mentions are updated by plain substring replacement of
the old version literal, not by parsing the document. Every substitution
declares how many occurrences it expects, so a document whose version
mentions have drifted fails loudly instead of being skipped.

A substitution may name a suffix that disqualifies a match: the bare
release literal ``1.2.3`` must not count the ``1.2.3`` inside
``1.2.3-SNAPSHOT``.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import TYPE_CHECKING

from release_cycle.exceptions import DocumentNotFoundError, NoOccurrencesFoundError
from release_cycle.project.files import atomic_write_text, read_text

if TYPE_CHECKING:
    from pathlib import Path


@dataclass(frozen=True)
class LiteralSubstitution:
    """Replace every occurrence of old with new in the document at path."""

    path: Path
    old: str
    new: str
    min_occurrences: int = 1
    unless_followed_by: str = ""


def rewrite_text(text: str, old: str, new: str, unless_followed_by: str = "") -> tuple[str, int]:
    """Replace every occurrence of old in text.

    Occurrences immediately followed by unless_followed_by are left
    alone and not counted.

    Returns:
        The new text and the number of replacements
    """
    if not old:
        raise ValueError("Cannot substitute an empty literal")
    if not unless_followed_by:
        return text.replace(old, new), text.count(old)
    pattern = re.compile(f"{re.escape(old)}(?!{re.escape(unless_followed_by)})")
    return pattern.subn(lambda _: new, text)


def rewrite_document(
    path: Path,
    old: str,
    new: str,
    min_occurrences: int = 1,
    *,
    unless_followed_by: str = "",
    dry_run: bool = False,
) -> int:
    """Replace every occurrence of old with new in a document, in place.

    The file is replaced atomically and only when something changed.
    Line endings are kept as they are.

    Args:
        path: Document to rewrite
        old: Literal to look for
        new: Replacement literal
        min_occurrences: Fewer matches than this is an error
        unless_followed_by: Skip occurrences directly followed by this text
        dry_run: Count occurrences without writing

    Returns:
        Number of occurrences replaced

    Raises:
        DocumentNotFoundError: If the document does not exist
        DocumentIOError: If the document cannot be read or written
        NoOccurrencesFoundError: If fewer than min_occurrences were found
    """
    if not path.is_file():
        raise DocumentNotFoundError(f"Document not found: {path}")

    content = read_text(path)
    new_content, count = rewrite_text(content, old, new, unless_followed_by)

    if count < min_occurrences:
        raise NoOccurrencesFoundError(path, old, found=count, expected=min_occurrences)

    if count and new_content != content and not dry_run:
        atomic_write_text(path, new_content)
    return count


def apply_substitutions(
    substitutions: list[LiteralSubstitution],
    *,
    dry_run: bool = False,
) -> dict[tuple[Path, str], int]:
    """Apply substitutions in order, stopping at the first failure.

    Returns:
        Replacement counts keyed by (path, old literal)
    """
    counts: dict[tuple[Path, str], int] = {}
    for sub in substitutions:
        counts[(sub.path, sub.old)] = rewrite_document(
            sub.path,
            sub.old,
            sub.new,
            sub.min_occurrences,
            unless_followed_by=sub.unless_followed_by,
            dry_run=dry_run,
        )
    return counts
