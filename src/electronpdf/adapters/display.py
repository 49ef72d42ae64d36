"""Virtual display providers for renderers running on headless hosts."""

from __future__ import annotations

from pathlib import Path
import shutil
import subprocess
import time
from typing import Protocol, runtime_checkable

from electronpdf.core.exceptions import DisplayUnavailable


# Handles of detached servers, kept for the life of the process so Popen
# does not report them as leaked when a provider is discarded.
_SERVERS: dict[str, subprocess.Popen[bytes]] = {}


def display_number(display: str) -> str:
    """Return the server number of an X display name such as ``:99.0``."""
    _, _, tail = display.rpartition(":")
    number = tail.split(".", 1)[0]
    if not number.isdigit():
        raise DisplayUnavailable(f"Invalid X display name '{display}'.")
    return number


@runtime_checkable
class DisplayProvider(Protocol):
    """Capability that makes an X display available to the renderer.

    ``prepare`` returns the environment entries the child process needs. It
    never mutates the parent process environment.
    """

    def prepare(self, display: str) -> dict[str, str]: ...


class NullDisplay:
    """Provider that only exports the display name."""

    def prepare(self, display: str) -> dict[str, str]:
        return {"DISPLAY": display}


class XvfbDisplay:
    """Launch an ``Xvfb`` server in the background without waiting for it."""

    def __init__(
        self,
        executable: str = "Xvfb",
        *,
        screen: str = "1280x1024x24",
        lock_dir: Path | str = "/tmp",
    ) -> None:
        self._executable = executable
        self._screen = screen
        self._lock_dir = Path(lock_dir)

    def lock_path(self, number: str) -> Path:
        return self._lock_dir / f".X{number}-lock"

    def is_running(self, number: str) -> bool:
        """Return True when a server already owns the display number."""
        return self.lock_path(number).exists()

    def prepare(self, display: str) -> dict[str, str]:
        number = display_number(display)
        if not self.is_running(number):
            self._spawn(number)
        return {"DISPLAY": display}

    def _spawn(self, number: str) -> None:
        binary = shutil.which(self._executable)
        if binary is None:
            raise DisplayUnavailable(f"'{self._executable}' was not found on PATH.")
        command = [binary, f":{number}", "-screen", "0", self._screen]
        try:
            _SERVERS[number] = subprocess.Popen(
                command,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
                start_new_session=True,
            )
        except OSError as exc:
            raise DisplayUnavailable(f"Failed to launch {self._executable}: {exc}") from exc


class WaitingXvfbDisplay(XvfbDisplay):
    """Launch ``Xvfb`` and block until its socket appears."""

    def __init__(
        self,
        executable: str = "Xvfb",
        *,
        screen: str = "1280x1024x24",
        lock_dir: Path | str = "/tmp",
        socket_dir: Path | str = "/tmp/.X11-unix",
        ready_timeout: float = 5.0,
        poll_interval: float = 0.1,
    ) -> None:
        super().__init__(executable, screen=screen, lock_dir=lock_dir)
        self._socket_dir = Path(socket_dir)
        self._ready_timeout = ready_timeout
        self._poll_interval = poll_interval

    def socket_path(self, number: str) -> Path:
        return self._socket_dir / f"X{number}"

    def prepare(self, display: str) -> dict[str, str]:
        env = super().prepare(display)
        number = display_number(display)
        deadline = time.monotonic() + self._ready_timeout
        while not self.socket_path(number).exists():
            if time.monotonic() >= deadline:
                raise DisplayUnavailable(
                    f"Display {display} was not ready after {self._ready_timeout:g}s."
                )
            time.sleep(self._poll_interval)
        return env


__all__ = [
    "DisplayProvider",
    "NullDisplay",
    "WaitingXvfbDisplay",
    "XvfbDisplay",
    "display_number",
]
