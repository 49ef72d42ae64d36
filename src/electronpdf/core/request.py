"""Request values describing a single PDF generation."""

from __future__ import annotations

from dataclasses import dataclass, replace
from pathlib import Path

from .exceptions import MissingDestination, MissingSource


@dataclass(frozen=True, slots=True)
class GenerationRequest:
    """Immutable description of one conversion.

    ``source`` holds a URL or filesystem path, ``html`` holds inline markup.
    When both are populated the inline HTML is rendered.
    """

    source: str | None = None
    html: str | None = None
    destination: Path | str | None = None
    temporary_destination: bool = False

    @property
    def is_inline(self) -> bool:
        return bool(self.html)

    def validate(self) -> None:
        """Raise when the request cannot be rendered."""
        if not self.source and not self.html:
            raise MissingSource()
        # Path("") collapses to "." so the destination must name a file.
        if not self.destination or not Path(self.destination).name:
            raise MissingDestination()

    def with_destination(
        self, destination: Path | str, *, temporary: bool = False
    ) -> GenerationRequest:
        return replace(self, destination=destination, temporary_destination=temporary)


class RequestBuilder:
    """Fluent builder producing :class:`GenerationRequest` values.

    Source setters are last-set-wins: selecting a URL discards previously
    recorded HTML and vice versa.
    """

    def __init__(self) -> None:
        self._source: str | None = None
        self._html: str | None = None
        self._destination: Path | str | None = None

    def from_url(self, source: str | Path) -> RequestBuilder:
        self._source = str(source)
        self._html = None
        return self

    def from_html(self, html: str) -> RequestBuilder:
        self._html = html
        self._source = None
        return self

    def to(self, destination: Path | str) -> RequestBuilder:
        self._destination = destination
        return self

    def build(self) -> GenerationRequest:
        return GenerationRequest(
            source=self._source,
            html=self._html,
            destination=self._destination,
        )


__all__ = ["GenerationRequest", "RequestBuilder"]
