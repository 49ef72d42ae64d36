"""Implementation of the primary ``electronpdf`` CLI command."""

from __future__ import annotations

from pathlib import Path
import sys

import click
import typer

from electronpdf.adapters.display import DisplayProvider, WaitingXvfbDisplay, XvfbDisplay
from electronpdf.api.generator import Generator
from electronpdf.core.config import (
    GeneratorSettings,
    build_settings,
    load_settings,
    settings_from_env,
)
from electronpdf.core.exceptions import ElectronPdfError, SettingsError, exception_hint

from .._options import (
    ConfigOption,
    DebugOption,
    ExecutableOption,
    GraphicalOption,
    HtmlOption,
    MarginsOption,
    OutputPathOption,
    ProxyWithNodeOption,
    SourceArgument,
    TimeoutOption,
    VerboseOption,
    VersionOption,
    WaitDisplayOption,
)
from ..diagnostics import CliEmitter
from ..state import configure_logging, emit_error, set_cli_state


STDIN_SOURCE = "-"


def _read_stdin_html() -> str | None:
    """Return HTML piped on stdin, or ``None`` for an interactive terminal."""
    stream = sys.stdin
    if stream is None or stream.closed:
        return None
    try:
        if stream.isatty():
            return None
    except (AttributeError, ValueError):
        return None
    payload = stream.read()
    return payload or None


def _describe_failure(message: str, exc: BaseException) -> str:
    """Append the innermost cause to ``message`` when it adds information."""
    hint = exception_hint(exc)
    if hint and hint not in message:
        summary = message.rstrip(".")
        return f"{summary}: {hint}"
    return message


def resolve_settings(
    config: Path | None,
    *,
    executable: str | None = None,
    proxy_with_node: bool | None = None,
    graphical: bool | None = None,
    margins: str | None = None,
    timeout: float | None = None,
) -> GeneratorSettings:
    """Layer defaults, the config file, environment variables and CLI flags."""
    base = load_settings(config) if config is not None else GeneratorSettings()
    base = settings_from_env(base=base)

    settings = base.merged(
        executable=executable,
        proxy_with_node=proxy_with_node,
        graphical_environment=graphical,
        margins=margins,
    )
    if timeout is not None:
        settings = build_settings({**settings.model_dump(), "timeout": timeout or None})
    return settings


def render(
    source: SourceArgument = None,
    html: HtmlOption = False,
    output: OutputPathOption = None,
    margins: MarginsOption = None,
    executable: ExecutableOption = None,
    proxy_with_node: ProxyWithNodeOption = None,
    graphical: GraphicalOption = None,
    wait_display: WaitDisplayOption = False,
    timeout: TimeoutOption = None,
    config: ConfigOption = None,
    verbose: VerboseOption = 0,
    debug: DebugOption = False,
    version: VersionOption = False,
) -> None:
    """Convert a URL, file, or HTML snippet into a PDF with electron-pdf."""
    ctx = click.get_current_context(silent=True)
    typer_ctx = ctx if isinstance(ctx, typer.Context) else None
    state = set_cli_state(ctx=typer_ctx, verbosity=verbose, debug=debug)
    configure_logging(state)

    if source is None:
        raise typer.BadParameter(
            "Provide a URL or path, or '-' to read HTML from stdin.", param_hint="SOURCE"
        )

    try:
        settings = resolve_settings(
            config,
            executable=executable,
            proxy_with_node=proxy_with_node,
            graphical=graphical,
            margins=margins,
            timeout=timeout,
        )
    except SettingsError as exc:
        emit_error(_describe_failure(str(exc), exc), exception=exc)
        raise typer.Exit(code=1) from exc

    display: DisplayProvider = WaitingXvfbDisplay() if wait_display else XvfbDisplay()
    generator = Generator(settings, display=display, emitter=CliEmitter(state=state))

    if source == STDIN_SOURCE:
        payload = _read_stdin_html()
        if payload is None:
            emit_error("No HTML received on stdin.")
            raise typer.Exit(code=1)
        generator.from_html(payload)
    elif html:
        try:
            generator.from_html(Path(source).read_text(encoding="utf-8"))
        except OSError as exc:
            emit_error(
                _describe_failure(f"Unable to read HTML file '{source}'.", exc), exception=exc
            )
            raise typer.Exit(code=1) from exc
    else:
        generator.from_url(source)

    try:
        if output is None:
            stream = click.get_binary_stream("stdout")
            stream.write(generator.content())
            stream.flush()
        else:
            generator.to(output).generate()
    except ElectronPdfError as exc:
        emit_error(_describe_failure(str(exc), exc), exception=exc)
        raise typer.Exit(code=1) from exc


__all__ = ["render", "resolve_settings"]
