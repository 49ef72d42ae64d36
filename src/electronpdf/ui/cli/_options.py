"""Shared Typer option definitions for CLI commands."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer


INPUTS_PANEL = "Input Handling"
RENDERING_PANEL = "Rendering"
OUTPUT_PANEL = "Output"
DIAGNOSTICS_PANEL = "Diagnostics"

SourceArgument = Annotated[
    str | None,
    typer.Argument(
        metavar="SOURCE",
        help="URL or file path to convert. Use '-' to read HTML from stdin.",
        show_default=False,
        rich_help_panel=INPUTS_PANEL,
    ),
]

HtmlOption = Annotated[
    bool,
    typer.Option(
        "--html",
        help="Treat SOURCE as an HTML file whose content is rendered inline.",
        rich_help_panel=INPUTS_PANEL,
    ),
]

OutputPathOption = Annotated[
    Path | None,
    typer.Option(
        "--output",
        "-o",
        help="Destination PDF file. Defaults to stdout.",
        show_default=False,
        dir_okay=False,
        rich_help_panel=OUTPUT_PANEL,
    ),
]

MarginsOption = Annotated[
    str | None,
    typer.Option(
        "--margins",
        help="Page margins: default, none, or minimum.",
        show_default=False,
        rich_help_panel=RENDERING_PANEL,
    ),
]

ExecutableOption = Annotated[
    str | None,
    typer.Option(
        "--executable",
        help="Path to the electron-pdf executable.",
        show_default=False,
        rich_help_panel=RENDERING_PANEL,
    ),
]

ProxyWithNodeOption = Annotated[
    bool | None,
    typer.Option(
        "--proxy-with-node/--no-proxy-with-node",
        help="Run the renderer through node (fixes 'env: node: command not found').",
        show_default=False,
        rich_help_panel=RENDERING_PANEL,
    ),
]

GraphicalOption = Annotated[
    bool | None,
    typer.Option(
        "--graphical/--headless",
        help="Declare whether a display server is available.",
        show_default=False,
        rich_help_panel=RENDERING_PANEL,
    ),
]

WaitDisplayOption = Annotated[
    bool,
    typer.Option(
        "--wait-display",
        help="Block until the virtual display is ready before rendering.",
        rich_help_panel=RENDERING_PANEL,
    ),
]

TimeoutOption = Annotated[
    float | None,
    typer.Option(
        "--timeout",
        min=0,
        help="Seconds to wait for the renderer (0 disables the limit).",
        show_default=False,
        rich_help_panel=RENDERING_PANEL,
    ),
]

ConfigOption = Annotated[
    Path | None,
    typer.Option(
        "--config",
        "-c",
        help="YAML file providing generator settings.",
        exists=True,
        dir_okay=False,
        readable=True,
        show_default=False,
        rich_help_panel=RENDERING_PANEL,
    ),
]

VerboseOption = Annotated[
    int,
    typer.Option(
        "--verbose",
        "-v",
        count=True,
        help="Increase CLI verbosity. Combine multiple times for additional diagnostics.",
        rich_help_panel=DIAGNOSTICS_PANEL,
    ),
]

DebugOption = Annotated[
    bool,
    typer.Option(
        "--debug",
        help="Show full tracebacks when an unexpected error occurs.",
        rich_help_panel=DIAGNOSTICS_PANEL,
    ),
]


def _print_version(value: bool) -> None:
    if not value:
        return
    from electronpdf.version import get_version

    typer.echo(f"electronpdf {get_version()}")
    raise typer.Exit()


VersionOption = Annotated[
    bool,
    typer.Option(
        "--version",
        callback=_print_version,
        is_eager=True,
        help="Print the electronpdf version and exit.",
        rich_help_panel=DIAGNOSTICS_PANEL,
    ),
]
