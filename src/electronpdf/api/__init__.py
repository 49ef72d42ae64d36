"""Facade aggregating the public generation API.

Usage Example
:
    >>> from electronpdf.api import Generator
    >>> generator = Generator({"graphical_environment": True})
    >>> generator.from_html("<h1>Invoice</h1>").to("invoice.pdf").request.is_inline
    True
"""

from __future__ import annotations

from electronpdf.adapters.display import (
    DisplayProvider,
    NullDisplay,
    WaitingXvfbDisplay,
    XvfbDisplay,
)
from electronpdf.adapters.renderer import RendererRunner, RenderResult, build_command
from electronpdf.core.config import GeneratorSettings, MarginsMode
from electronpdf.core.request import GenerationRequest, RequestBuilder

from .generator import Generator, generate, generate_content


__all__ = [
    "DisplayProvider",
    "GenerationRequest",
    "Generator",
    "GeneratorSettings",
    "MarginsMode",
    "NullDisplay",
    "RenderResult",
    "RendererRunner",
    "RequestBuilder",
    "WaitingXvfbDisplay",
    "XvfbDisplay",
    "build_command",
    "generate",
    "generate_content",
]
