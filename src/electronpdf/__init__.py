"""Primary public API for electronpdf."""

from __future__ import annotations

from electronpdf.api import (
    DisplayProvider,
    GenerationRequest,
    Generator,
    GeneratorSettings,
    MarginsMode,
    NullDisplay,
    RendererRunner,
    RenderResult,
    RequestBuilder,
    WaitingXvfbDisplay,
    XvfbDisplay,
    build_command,
    generate,
    generate_content,
)
from electronpdf.core.config import load_settings, settings_from_env
from electronpdf.core.exceptions import (
    DisplayUnavailable,
    ElectronPdfError,
    GenerationFailed,
    MissingDestination,
    MissingSource,
    SettingsError,
)
from electronpdf.version import get_version


__version__ = get_version()

__all__ = [
    "DisplayProvider",
    "DisplayUnavailable",
    "ElectronPdfError",
    "GenerationFailed",
    "GenerationRequest",
    "Generator",
    "GeneratorSettings",
    "MarginsMode",
    "MissingDestination",
    "MissingSource",
    "NullDisplay",
    "RenderResult",
    "RendererRunner",
    "RequestBuilder",
    "SettingsError",
    "WaitingXvfbDisplay",
    "XvfbDisplay",
    "__version__",
    "build_command",
    "generate",
    "generate_content",
    "load_settings",
    "settings_from_env",
]
