"""PDF generation orchestration for library and CLI callers."""

from __future__ import annotations

from collections.abc import Mapping
import contextlib
from pathlib import Path
from typing import Any, cast

from electronpdf.adapters.display import DisplayProvider, XvfbDisplay
from electronpdf.adapters.renderer import (
    RenderCommand,
    RendererRunner,
    RenderResult,
    build_command,
    build_environment,
)
from electronpdf.core.config import GeneratorSettings, build_settings
from electronpdf.core.diagnostics import DiagnosticEmitter, LoggingEmitter
from electronpdf.core.exceptions import DisplayUnavailable, GenerationFailed
from electronpdf.core.request import GenerationRequest, RequestBuilder
from electronpdf.core.tempfiles import (
    ensure_parent_directory,
    make_temporary_path,
    materialized_html,
    remove_quietly,
)


def generate(
    request: GenerationRequest,
    settings: GeneratorSettings | None = None,
    *,
    display: DisplayProvider | None = None,
    runner: RendererRunner | None = None,
    emitter: DiagnosticEmitter | None = None,
) -> RenderResult:
    """Render ``request`` to its destination.

    Raises ``MissingSource`` or ``MissingDestination`` before touching the
    filesystem and ``GenerationFailed`` when the renderer cannot produce the
    PDF. Inline HTML is staged in a temporary file that is removed on every
    exit path.
    """
    request.validate()
    settings = settings or GeneratorSettings()
    emitter = emitter or LoggingEmitter()
    runner = runner or RendererRunner()

    with contextlib.ExitStack() as stack:
        if request.html:
            source = str(stack.enter_context(materialized_html(request.html)))
        else:
            source = str(request.source)

        destination = ensure_parent_directory(cast("Path | str", request.destination))

        extra_env: dict[str, str] = {}
        if not settings.graphical_environment:
            extra_env = _prepare_display(display or XvfbDisplay(), settings.display, emitter)

        command = RenderCommand(
            argv=build_command(settings, source, destination),
            source=source,
            destination=str(destination),
            env=build_environment(extra_env),
            timeout=settings.timeout,
        )
        emitter.event(
            "render_start",
            {
                "source": source,
                "destination": str(destination),
                "inline": request.is_inline,
                "temporary": request.temporary_destination,
                "command": list(command.argv),
            },
        )
        result = runner.run(command)
        emitter.event("render_done", {"destination": str(destination)})
        return result


def generate_content(
    request: GenerationRequest,
    settings: GeneratorSettings | None = None,
    *,
    display: DisplayProvider | None = None,
    runner: RendererRunner | None = None,
    emitter: DiagnosticEmitter | None = None,
) -> bytes:
    """Render ``request`` into a temporary file and return the PDF bytes."""
    target = make_temporary_path()
    try:
        result = generate(
            request.with_destination(target, temporary=True),
            settings,
            display=display,
            runner=runner,
            emitter=emitter,
        )
        try:
            return target.read_bytes()
        except FileNotFoundError as exc:
            raise GenerationFailed(
                result.source,
                target,
                result.command,
                stderr=result.stderr,
                stdout=result.stdout,
                returncode=result.returncode,
                reason="renderer exited successfully but wrote no output",
            ) from exc
    finally:
        remove_quietly(target)


def _prepare_display(
    provider: DisplayProvider, display: str, emitter: DiagnosticEmitter
) -> dict[str, str]:
    # Display setup is best effort: the display wrapper can still allocate a
    # server of its own when this fails.
    try:
        env = dict(provider.prepare(display))
    except (DisplayUnavailable, OSError) as exc:
        emitter.warning(f"Virtual display {display} could not be prepared: {exc}", exc)
        return {"DISPLAY": display}
    emitter.event(
        "display_prepared",
        {"display": display, "provider": type(provider).__name__},
    )
    return env


class Generator:
    """Chainable facade over :func:`generate`.

    >>> generator = Generator({"margins": "minimum"})
    >>> generator.from_url("https://example.com").to("out/page.pdf").request.source
    'https://example.com'

    One instance describes one in-flight request; use separate instances for
    concurrent conversions.
    """

    def __init__(
        self,
        settings: GeneratorSettings | Mapping[str, Any] | None = None,
        *,
        display: DisplayProvider | None = None,
        runner: RendererRunner | None = None,
        emitter: DiagnosticEmitter | None = None,
    ) -> None:
        if isinstance(settings, GeneratorSettings):
            self.settings = settings
        else:
            self.settings = build_settings(settings)
        self._display = display
        self._runner = runner
        self._emitter = emitter
        self._builder = RequestBuilder()

    def from_url(self, source: str | Path) -> Generator:
        """Render the page located at ``source`` (URL or file path)."""
        self._builder.from_url(source)
        return self

    def from_html(self, html: str) -> Generator:
        """Render inline ``html``."""
        self._builder.from_html(html)
        return self

    def to(self, destination: Path | str) -> Generator:
        """Write the PDF to ``destination``."""
        self._builder.to(destination)
        return self

    @property
    def request(self) -> GenerationRequest:
        return self._builder.build()

    def generate(self) -> None:
        """Generate the PDF at the configured destination."""
        generate(
            self.request,
            self.settings,
            display=self._display,
            runner=self._runner,
            emitter=self._emitter,
        )

    def content(self) -> bytes:
        """Generate the PDF and return its bytes instead of keeping a file."""
        return generate_content(
            self.request,
            self.settings,
            display=self._display,
            runner=self._runner,
            emitter=self._emitter,
        )


__all__ = ["Generator", "generate", "generate_content"]
