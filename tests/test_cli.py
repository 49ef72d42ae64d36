from __future__ import annotations

from collections.abc import Iterator
import logging
import os
from pathlib import Path
from typing import Any

import pytest
from typer.testing import CliRunner

from electronpdf.adapters.display import WaitingXvfbDisplay, XvfbDisplay
from electronpdf.core.config import MarginsMode
from electronpdf.ui.cli import app
from electronpdf.ui.cli.commands.render import resolve_settings


@pytest.fixture(autouse=True)
def _reset_logging() -> Iterator[None]:
    yield
    logger = logging.getLogger("electronpdf")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in list(os.environ):
        if name.startswith("ELECTRONPDF_"):
            monkeypatch.delenv(name)


def test_render_url_to_file(runner: CliRunner, fake_renderer, tmp_path: Path) -> None:
    output = tmp_path / "out" / "page.pdf"

    result = runner.invoke(
        app,
        ["https://example.com", "--output", str(output), "--graphical", "--margins", "minimum"],
    )

    assert result.exit_code == 0, result.output
    assert output.read_bytes() == fake_renderer.payload
    assert fake_renderer.calls[0]["argv"] == [
        "electron-pdf",
        "https://example.com",
        str(output),
        "--marginsType=2",
    ]


def test_render_writes_pdf_to_stdout(runner: CliRunner, fake_renderer) -> None:
    result = runner.invoke(app, ["https://example.com", "--graphical"])

    assert result.exit_code == 0
    assert result.stdout_bytes == fake_renderer.payload


def test_render_reads_html_from_stdin(runner: CliRunner, fake_renderer, tmp_path: Path) -> None:
    output = tmp_path / "stdin.pdf"

    result = runner.invoke(
        app,
        ["-", "-o", str(output), "--graphical"],
        input="<h1>From stdin</h1>",
    )

    assert result.exit_code == 0, result.output
    call = fake_renderer.calls[0]
    assert call["source_text"] == "<h1>From stdin</h1>"
    assert not Path(call["source"]).exists()


def test_render_inline_html_file(runner: CliRunner, fake_renderer, tmp_path: Path) -> None:
    page = tmp_path / "page.html"
    page.write_text("<p>inline</p>", encoding="utf-8")

    result = runner.invoke(
        app, [str(page), "--html", "-o", str(tmp_path / "page.pdf"), "--graphical"]
    )

    assert result.exit_code == 0, result.output
    assert fake_renderer.calls[0]["source"] != str(page)
    assert fake_renderer.calls[0]["source_text"] == "<p>inline</p>"


def test_render_reports_missing_html_file(runner: CliRunner, fake_renderer, tmp_path: Path) -> None:
    result = runner.invoke(
        app, [str(tmp_path / "absent.html"), "--html", "-o", str(tmp_path / "x.pdf")]
    )

    assert result.exit_code == 1
    output = " ".join(result.output.split())
    assert "Unable to read HTML file" in output
    assert "No such file or directory" in output
    assert fake_renderer.calls == []


def test_render_reports_renderer_failure(runner: CliRunner, fake_renderer, tmp_path: Path) -> None:
    fake_renderer.returncode = 1
    fake_renderer.stderr = "crash"

    result = runner.invoke(
        app, ["https://example.com", "-o", str(tmp_path / "x.pdf"), "--graphical"]
    )

    assert result.exit_code == 1
    assert "error:" in result.output
    assert "failed" in result.output


def test_render_requires_source(runner: CliRunner) -> None:
    result = runner.invoke(app, [])

    assert result.exit_code == 2


def test_render_rejects_invalid_margins(runner: CliRunner, fake_renderer, tmp_path: Path) -> None:
    result = runner.invoke(
        app, ["https://example.com", "-o", str(tmp_path / "x.pdf"), "--margins", "wide"]
    )

    assert result.exit_code == 1
    assert "Invalid generator settings" in result.output
    assert fake_renderer.calls == []


def test_render_uses_config_file(runner: CliRunner, fake_renderer, tmp_path: Path) -> None:
    config = tmp_path / "electronpdf.yml"
    config.write_text(
        "electronpdf:\n  proxy_with_node: true\n  graphical_environment: true\n",
        encoding="utf-8",
    )

    result = runner.invoke(
        app, ["page.html", "-o", str(tmp_path / "page.pdf"), "--config", str(config)]
    )

    assert result.exit_code == 0, result.output
    assert fake_renderer.calls[0]["argv"][:2] == ["node", "electron-pdf"]


def test_version_flag(runner: CliRunner) -> None:
    result = runner.invoke(app, ["--version"])

    assert result.exit_code == 0
    assert result.output.startswith("electronpdf ")


def test_resolve_settings_layers_sources(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    config = tmp_path / "settings.yml"
    config.write_text("executable: /from/config\nmargins: default\ntimeout: 10\n", encoding="utf-8")
    monkeypatch.setenv("ELECTRONPDF_EXECUTABLE", "/from/env")

    settings = resolve_settings(config, proxy_with_node=True, timeout=0)

    assert settings.executable == "/from/env"
    assert settings.margins is MarginsMode.DEFAULT_MARGINS
    assert settings.proxy_with_node is True
    assert settings.timeout is None

    overridden = resolve_settings(config, executable="/from/cli", margins="none", timeout=30)

    assert overridden.executable == "/from/cli"
    assert overridden.margins is MarginsMode.NO_MARGINS
    assert overridden.timeout == 30


@pytest.fixture
def display_calls(monkeypatch: pytest.MonkeyPatch) -> list[tuple[str, str]]:
    calls: list[tuple[str, str]] = []

    def fake_prepare(self: Any, display: str) -> dict[str, str]:
        calls.append((type(self).__name__, display))
        return {"DISPLAY": display}

    monkeypatch.setattr(XvfbDisplay, "prepare", fake_prepare)
    monkeypatch.setattr(WaitingXvfbDisplay, "prepare", fake_prepare)
    return calls


def test_render_headless_wraps_renderer_with_xvfb(
    runner: CliRunner, fake_renderer, display_calls, tmp_path: Path
) -> None:
    output = tmp_path / "page.pdf"

    result = runner.invoke(app, ["https://example.com", "-o", str(output)])

    assert result.exit_code == 0, result.output
    call = fake_renderer.calls[0]
    assert call["argv"] == [
        "xvfb-run",
        "--auto-servernum",
        "electron-pdf",
        "https://example.com",
        str(output),
    ]
    assert call["kwargs"]["env"]["DISPLAY"] == ":99.0"
    assert display_calls == [("XvfbDisplay", ":99.0")]


def test_render_wait_display_selects_waiting_provider(
    runner: CliRunner, fake_renderer, display_calls, tmp_path: Path
) -> None:
    result = runner.invoke(
        app, ["https://example.com", "-o", str(tmp_path / "page.pdf"), "--wait-display"]
    )

    assert result.exit_code == 0, result.output
    assert display_calls == [("WaitingXvfbDisplay", ":99.0")]
    assert fake_renderer.calls[0]["argv"][:2] == ["xvfb-run", "--auto-servernum"]


def test_render_graphical_skips_display(
    runner: CliRunner, fake_renderer, display_calls, tmp_path: Path
) -> None:
    result = runner.invoke(
        app, ["https://example.com", "-o", str(tmp_path / "page.pdf"), "--graphical"]
    )

    assert result.exit_code == 0, result.output
    assert display_calls == []
    assert fake_renderer.calls[0]["argv"][0] == "electron-pdf"


def test_render_honours_wrapper_environment_settings(
    runner: CliRunner,
    fake_renderer,
    display_calls,
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.setenv("ELECTRONPDF_DISPLAY_WRAPPER", "custom-xvfb")
    monkeypatch.setenv("ELECTRONPDF_RUNTIME", "bun")
    monkeypatch.setenv("ELECTRONPDF_PROXY_WITH_NODE", "1")

    result = runner.invoke(app, ["https://example.com", "-o", str(tmp_path / "page.pdf")])

    assert result.exit_code == 0, result.output
    assert fake_renderer.calls[0]["argv"][:4] == [
        "custom-xvfb",
        "--auto-servernum",
        "bun",
        "electron-pdf",
    ]
