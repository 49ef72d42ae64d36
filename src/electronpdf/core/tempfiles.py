"""Temporary file naming and staging helpers."""

from __future__ import annotations

from collections.abc import Iterator
import contextlib
from pathlib import Path
import tempfile
import time
import uuid


def unique_token() -> str:
    """Return a collision-resistant token mixing a timestamp and random bits."""
    return f"epp{time.time_ns():x}-{uuid.uuid4().hex}"


def make_temporary_path(suffix: str = "", *, directory: Path | str | None = None) -> Path:
    """Return an unused path inside the system temporary directory.

    The file itself is not created.
    """
    base = Path(directory) if directory is not None else Path(tempfile.gettempdir())
    return base / f"{unique_token()}{suffix}"


def remove_quietly(path: Path | None) -> None:
    """Delete ``path`` when it exists, ignoring filesystem errors."""
    if path is None:
        return
    with contextlib.suppress(OSError):
        path.unlink(missing_ok=True)


@contextlib.contextmanager
def materialized_html(html: str, *, directory: Path | str | None = None) -> Iterator[Path]:
    """Write ``html`` to a unique ``.html`` file and remove it on exit."""
    path = make_temporary_path(".html", directory=directory)
    try:
        path.write_text(html, encoding="utf-8")
        yield path
    finally:
        remove_quietly(path)


def ensure_parent_directory(destination: Path | str) -> Path:
    """Create the parent directories of ``destination`` and return it as a path."""
    target = Path(destination)
    target.parent.mkdir(parents=True, exist_ok=True)
    return target


__all__ = [
    "ensure_parent_directory",
    "make_temporary_path",
    "materialized_html",
    "remove_quietly",
    "unique_token",
]
