"""Custom exception hierarchy for the PDF generation pipeline."""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path
import shlex


class ElectronPdfError(RuntimeError):
    """Base exception for PDF generation failures."""


class MissingSource(ElectronPdfError):
    """Raised when neither a URL/path nor inline HTML has been provided."""

    def __init__(self) -> None:
        super().__init__("No input source specified.")


class MissingDestination(ElectronPdfError):
    """Raised when no output destination has been provided."""

    def __init__(self) -> None:
        super().__init__("No output destination specified.")


class DisplayUnavailable(ElectronPdfError):
    """Raised when a virtual display cannot be made ready."""


class SettingsError(ElectronPdfError):
    """Raised when generator settings cannot be loaded or validated."""


class GenerationFailed(ElectronPdfError):
    """Raised when the renderer process fails to produce the PDF.

    The renderer is an opaque binary, so the exception keeps everything needed
    to reproduce the failure: the effective source, the destination, the exact
    argument vector and whatever the process wrote before exiting.
    """

    def __init__(
        self,
        source: str,
        destination: str | Path,
        command: Sequence[str],
        *,
        stderr: str = "",
        stdout: str = "",
        returncode: int | None = None,
        reason: str | None = None,
    ) -> None:
        self.source = source
        self.destination = str(destination)
        self.command = list(command)
        self.stderr = stderr or ""
        self.stdout = stdout or ""
        self.returncode = returncode
        self.reason = reason

        detail = self.stderr.strip() or (reason or "")
        message = (
            f"The PDF generation from {source} to {self.destination} failed. "
            f"[{self.command_line}: {detail}]"
        )
        super().__init__(message)

    @property
    def command_line(self) -> str:
        """Return the shell-quoted command line that was executed."""
        return shlex.join(self.command)


def exception_messages(exc: BaseException) -> list[str]:
    """Return the collected message chain for an exception and its causes."""
    messages: list[str] = []
    visited: set[int] = set()
    current: BaseException | None = exc
    while current is not None and id(current) not in visited:
        visited.add(id(current))
        text = str(current).strip()
        if text:
            first_line = text.splitlines()[0].strip()
            if first_line:
                messages.append(first_line)
        current = current.__cause__ or current.__context__
    return messages


def exception_hint(exc: BaseException) -> str | None:
    """Return the most specific message available for an exception chain."""
    messages = exception_messages(exc)
    return messages[-1] if messages else None


__all__ = [
    "DisplayUnavailable",
    "ElectronPdfError",
    "GenerationFailed",
    "MissingDestination",
    "MissingSource",
    "SettingsError",
    "exception_hint",
    "exception_messages",
]
