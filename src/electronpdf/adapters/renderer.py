"""Command construction and process execution for the electron-pdf renderer."""

from __future__ import annotations

from collections.abc import Mapping
import contextlib
from dataclasses import dataclass, field
import logging
import os
from pathlib import Path
import signal
import subprocess

from electronpdf.core.config import GeneratorSettings
from electronpdf.core.exceptions import GenerationFailed


logger = logging.getLogger(__name__)

AUTO_SERVERNUM_FLAG = "--auto-servernum"


@dataclass(slots=True)
class RenderCommand:
    """Argument vector plus the environment handed to the child process."""

    argv: list[str]
    source: str
    destination: str
    env: dict[str, str] = field(default_factory=dict)
    timeout: float | None = None


@dataclass(slots=True)
class RenderResult:
    """Outcome of a successful renderer run."""

    returncode: int
    stdout: str
    stderr: str
    command: list[str]
    source: str
    destination: Path


def build_command(
    settings: GeneratorSettings,
    source: str,
    destination: Path | str,
) -> list[str]:
    """Return the renderer argument vector.

    Order matters to the wrappers: the display wrapper comes first, then the
    runtime launcher, then the renderer and its arguments.
    """
    command: list[str] = [settings.executable, str(source), str(destination)]

    flag = settings.margins.flag
    if flag:
        command.append(flag)

    command.extend(settings.extra_args)

    if settings.proxy_with_node:
        command.insert(0, settings.runtime)

    if not settings.graphical_environment:
        command[:0] = [settings.display_wrapper, AUTO_SERVERNUM_FLAG]

    return command


def build_environment(
    extra: Mapping[str, str] | None = None,
    *,
    base: Mapping[str, str] | None = None,
) -> dict[str, str]:
    """Return a copy of the parent environment overlaid with ``extra``."""
    env = dict(os.environ if base is None else base)
    if extra:
        env.update(extra)
    return env


class RendererRunner:
    """Execute renderer commands and translate failures.

    The renderer runs in its own session so a timeout can kill the whole
    process group, including children started by the display wrapper.
    """

    def run(self, command: RenderCommand) -> RenderResult:
        logger.debug("running renderer: %s", command.argv)
        try:
            process = subprocess.Popen(
                command.argv,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
                env=command.env or None,
                start_new_session=True,
            )
        except OSError as exc:
            raise GenerationFailed(
                command.source,
                command.destination,
                command.argv,
                stderr=str(exc),
                reason=f"failed to launch renderer: {exc}",
            ) from exc

        with process:
            try:
                stdout, stderr = process.communicate(timeout=command.timeout)
            except subprocess.TimeoutExpired as exc:
                _kill_process_group(process)
                stdout, stderr = process.communicate()
                raise GenerationFailed(
                    command.source,
                    command.destination,
                    command.argv,
                    stderr=_decode(stderr) or _decode(exc.stderr),
                    stdout=_decode(stdout) or _decode(exc.output),
                    reason=f"renderer timed out after {exc.timeout:g}s",
                ) from exc

        stdout = stdout or ""
        stderr = stderr or ""
        if process.returncode != 0:
            raise GenerationFailed(
                command.source,
                command.destination,
                command.argv,
                stderr=stderr,
                stdout=stdout,
                returncode=process.returncode,
                reason=f"renderer exited with status {process.returncode}",
            )

        return RenderResult(
            returncode=process.returncode,
            stdout=stdout,
            stderr=stderr,
            command=list(command.argv),
            source=command.source,
            destination=Path(command.destination),
        )


def _kill_process_group(process: subprocess.Popen[str]) -> None:
    logger.debug("killing renderer process group %s", process.pid)
    with contextlib.suppress(ProcessLookupError):
        os.killpg(process.pid, signal.SIGKILL)


def _decode(payload: bytes | str | None) -> str:
    if payload is None:
        return ""
    if isinstance(payload, bytes):
        return payload.decode("utf-8", errors="replace")
    return payload


__all__ = [
    "AUTO_SERVERNUM_FLAG",
    "RenderCommand",
    "RenderResult",
    "RendererRunner",
    "build_command",
    "build_environment",
]
