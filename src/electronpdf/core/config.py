"""Configuration models used by the PDF generator.

GeneratorSettings

`executable` (`str`)
: Path or command name of the electron-pdf executable. Defaults to
  `electron-pdf`, resolved through `PATH` by the child process.

`proxy_with_node` (`bool`)
: Invoke the executable through the `runtime` launcher. Useful on hosts where
  the renderer fails with `env: node: command not found`.

`runtime` (`str`)
: Launcher token prepended when `proxy_with_node` is enabled.

`graphical_environment` (`bool`)
: Declare that a display server is available. When `False`, the command is
  wrapped with `display_wrapper` and a virtual framebuffer is requested.

`display_wrapper` (`str`)
: Wrapper executable used on headless hosts, invoked with `--auto-servernum`.

`display` (`str`)
: Value exported as `DISPLAY` to the renderer on headless hosts.

`margins` (`MarginsMode`)
: Page margin behaviour forwarded as `--marginsType`. Accepts the enum, its
  numeric value, or one of `default`, `none`, `minimum`.

`timeout` (`float | None`)
: Seconds to wait for the renderer before killing it. `None` waits forever.

`extra_args` (`tuple[str, ...]`)
: Additional renderer arguments appended after the margin flag.
"""

from __future__ import annotations

from collections.abc import Mapping
from enum import IntEnum
import os
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
import yaml

from .exceptions import SettingsError


class MarginsMode(IntEnum):
    """Margin presets understood by electron-pdf's ``--marginsType`` flag."""

    DEFAULT_MARGINS = 0
    NO_MARGINS = 1
    MINIMUM_MARGINS = 2

    @classmethod
    def parse(cls, value: Any) -> MarginsMode:
        """Coerce enum members, integers, or aliases into a margin mode."""
        if isinstance(value, cls):
            return value
        if isinstance(value, bool):
            raise ValueError(f"Invalid margins mode: {value!r}")
        if isinstance(value, int):
            return cls(value)
        if isinstance(value, str):
            candidate = value.strip().lower().replace("-", "_")
            if candidate.isdigit():
                return cls(int(candidate))
            alias = _MARGIN_ALIASES.get(candidate)
            if alias is not None:
                return alias
        raise ValueError(f"Invalid margins mode: {value!r}")

    @property
    def flag(self) -> str | None:
        """Return the command-line flag for this mode, if any."""
        if self is MarginsMode.NO_MARGINS:
            return None
        return f"--marginsType={int(self)}"


_MARGIN_ALIASES = {
    "default": MarginsMode.DEFAULT_MARGINS,
    "default_margins": MarginsMode.DEFAULT_MARGINS,
    "none": MarginsMode.NO_MARGINS,
    "no": MarginsMode.NO_MARGINS,
    "no_margins": MarginsMode.NO_MARGINS,
    "minimum": MarginsMode.MINIMUM_MARGINS,
    "minimum_margins": MarginsMode.MINIMUM_MARGINS,
}


class GeneratorSettings(BaseModel):
    """Immutable settings applied to every request of a generator."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    executable: str = Field(default="electron-pdf", min_length=1)
    proxy_with_node: bool = False
    runtime: str = Field(default="node", min_length=1)
    graphical_environment: bool = False
    display_wrapper: str = Field(default="xvfb-run", min_length=1)
    display: str = ":99.0"
    margins: MarginsMode = MarginsMode.NO_MARGINS
    timeout: float | None = Field(default=120.0, gt=0)
    extra_args: tuple[str, ...] = ()

    @field_validator("margins", mode="before")
    @classmethod
    def _coerce_margins(cls, value: Any) -> MarginsMode:
        return MarginsMode.parse(value)

    def merged(self, **overrides: Any) -> GeneratorSettings:
        """Return a copy with ``overrides`` applied, skipping ``None`` values."""
        data = self.model_dump()
        data.update({key: value for key, value in overrides.items() if value is not None})
        return build_settings(data)


def build_settings(values: Mapping[str, Any] | None = None) -> GeneratorSettings:
    """Merge ``values`` over the defaults, translating validation failures."""
    try:
        return GeneratorSettings(**dict(values or {}))
    except ValidationError as exc:
        raise SettingsError(f"Invalid generator settings: {exc}") from exc


def load_settings(path: Path | str) -> GeneratorSettings:
    """Load settings from a YAML file.

    The file may hold the settings at the top level or under an
    ``electronpdf`` key so it can share a project configuration file.
    """
    config_path = Path(path)
    try:
        payload = yaml.safe_load(config_path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise SettingsError(f"Unable to read settings file '{config_path}': {exc}") from exc
    except yaml.YAMLError as exc:
        raise SettingsError(f"Invalid YAML in settings file '{config_path}': {exc}") from exc

    if payload is None:
        return build_settings()
    if not isinstance(payload, Mapping):
        raise SettingsError(f"Settings file '{config_path}' must contain a mapping.")
    section = payload.get("electronpdf", payload)
    if not isinstance(section, Mapping):
        raise SettingsError(f"Section 'electronpdf' in '{config_path}' must be a mapping.")
    return build_settings(section)


_ENV_PREFIX = "ELECTRONPDF_"
_ENV_KEYS = {
    "EXECUTABLE": "executable",
    "PROXY_WITH_NODE": "proxy_with_node",
    "RUNTIME": "runtime",
    "GRAPHICAL": "graphical_environment",
    "DISPLAY_WRAPPER": "display_wrapper",
    "MARGINS": "margins",
    "TIMEOUT": "timeout",
}


def settings_from_env(
    environ: Mapping[str, str] | None = None,
    *,
    base: GeneratorSettings | None = None,
) -> GeneratorSettings:
    """Overlay ``ELECTRONPDF_*`` environment variables onto ``base``."""
    env = os.environ if environ is None else environ
    data = (base or GeneratorSettings()).model_dump()
    for suffix, key in _ENV_KEYS.items():
        raw = env.get(f"{_ENV_PREFIX}{suffix}")
        if raw is None or not raw.strip():
            continue
        value = raw.strip()
        if key == "timeout" and value.lower() in {"none", "off", "0"}:
            data[key] = None
        else:
            data[key] = value
    return build_settings(data)


__all__ = [
    "GeneratorSettings",
    "MarginsMode",
    "build_settings",
    "load_settings",
    "settings_from_env",
]
