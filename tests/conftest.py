from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import pytest

from electronpdf.adapters import renderer as renderer_mod


FAKE_PDF = b"%PDF-1.4\n% electronpdf test document\n%%EOF\n"


class _StubProcess:
    def __init__(
        self,
        returncode: int = 0,
        stdout: str = "",
        stderr: str = "",
        *,
        call: dict[str, Any] | None = None,
    ) -> None:
        self.pid = 4242
        self.returncode = returncode
        self._stdout = stdout
        self._stderr = stderr
        self._call = call if call is not None else {}

    def communicate(self, timeout: float | None = None) -> tuple[str, str]:
        self._call["timeout"] = timeout
        return self._stdout, self._stderr

    def __enter__(self) -> _StubProcess:
        return self

    def __exit__(self, *exc: object) -> None:
        return None


@dataclass
class FakeRenderer:
    """Stand-in for ``subprocess.Popen`` that mimics electron-pdf."""

    executable: str = "electron-pdf"
    returncode: int = 0
    stderr: str = ""
    payload: bytes = FAKE_PDF
    write_output: bool = True
    calls: list[dict[str, Any]] = field(default_factory=list)
    on_run: Callable[[str, Path], None] | None = None

    def __call__(self, argv: list[str], **kwargs: Any) -> _StubProcess:
        index = argv.index(self.executable)
        source = argv[index + 1]
        destination = Path(argv[index + 2])
        call = {
            "argv": list(argv),
            "kwargs": kwargs,
            "source": source,
            "source_exists": Path(source).exists(),
            "source_text": Path(source).read_text(encoding="utf-8")
            if source.endswith(".html") and Path(source).exists()
            else None,
            "destination_parent_exists": destination.parent.is_dir(),
        }
        self.calls.append(call)
        if self.on_run is not None:
            self.on_run(source, destination)
        if self.returncode == 0 and self.write_output:
            destination.write_bytes(self.payload)
        return _StubProcess(returncode=self.returncode, stderr=self.stderr, call=call)


@pytest.fixture
def fake_renderer(monkeypatch: pytest.MonkeyPatch) -> FakeRenderer:
    fake = FakeRenderer()
    monkeypatch.setattr(renderer_mod.subprocess, "Popen", fake)
    return fake



class RecordingEmitter:
    debug_enabled = False

    def __init__(self) -> None:
        self.warnings: list[tuple[str, BaseException | None]] = []
        self.errors: list[tuple[str, BaseException | None]] = []
        self.events: list[tuple[str, dict[str, Any]]] = []

    def warning(self, message: str, exc: BaseException | None = None) -> None:
        self.warnings.append((message, exc))

    def error(self, message: str, exc: BaseException | None = None) -> None:
        self.errors.append((message, exc))

    def event(self, name: str, payload: Any) -> None:
        self.events.append((name, dict(payload)))


@pytest.fixture
def emitter() -> RecordingEmitter:
    return RecordingEmitter()


class StaticDisplay:
    def __init__(self) -> None:
        self.requested: list[str] = []

    def prepare(self, display: str) -> dict[str, str]:
        self.requested.append(display)
        return {"DISPLAY": display}


@pytest.fixture
def static_display() -> StaticDisplay:
    return StaticDisplay()
