"""Project file reads and atomic writes.

Documents are read with their line endings untouched and replaced in
one step, so an interrupted run never leaves a truncated file behind.
OS and decoding failures surface as DocumentIOError naming the file.
"""

from __future__ import annotations

import os
import tempfile
from pathlib import Path

from release_cycle.exceptions import DocumentIOError


def read_text(path: Path) -> str:
    """Read a UTF-8 document without translating its newlines.

    Raises:
        DocumentIOError: If the file cannot be read or is not valid UTF-8
    """
    try:
        with path.open(encoding="utf-8", newline="") as f:
            return f.read()
    except UnicodeDecodeError as e:
        raise DocumentIOError(
            path, f"{path} is not valid UTF-8 ({e.reason} at byte {e.start})"
        ) from e
    except OSError as e:
        raise DocumentIOError(path, f"Cannot read {path}: {e.strerror or e}") from e


def atomic_write_text(path: Path, content: str) -> None:
    """Write content to path via a temp file in the same directory.

    An existing file keeps its permission bits. A new file gets the
    usual ``0o666`` masked by the process umask.

    Raises:
        DocumentIOError: If the file cannot be written
    """
    try:
        _replace(path, content)
    except OSError as e:
        raise DocumentIOError(path, f"Cannot write {path}: {e.strerror or e}") from e


def _replace(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
    tmp_path = Path(tmp_name)
    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="") as f:
            f.write(content)
            f.flush()
            os.fsync(f.fileno())
        if path.exists():
            mode = path.stat().st_mode & 0o7777
        else:
            mode = 0o666 & ~_current_umask()
        os.chmod(tmp_path, mode)
        os.replace(tmp_path, path)
    except BaseException:
        tmp_path.unlink(missing_ok=True)
        raise


def _current_umask() -> int:
    # os.umask can only be read by setting it
    mask = os.umask(0)
    os.umask(mask)
    return mask
