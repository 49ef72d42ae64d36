"""CLI command implementations exposed via `electronpdf.ui.cli`."""

from __future__ import annotations

from .render import render


__all__ = ["render"]
