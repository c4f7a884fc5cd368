"""Collaborator contracts and the error taxonomy of the generator.

The pipeline only talks to the outside world through ``DocumentSink`` and
``Delivery``; tests swap in fakes, ``stage5_render`` and ``delivery``
provide the real implementations.
"""
from pathlib import Path
from typing import Protocol

from models.layout import Position


class StrategyGeneratorError(Exception):
    """Base class for failures that abort a generation attempt."""


class IncompleteRecordError(StrategyGeneratorError):
    """Text derivation was asked to work on a record that failed validation."""

    def __init__(self, missing: list[str]):
        self.missing = missing
        super().__init__(f"Record is missing required fields: {', '.join(missing)}")


class ImageDecodeError(StrategyGeneratorError):
    """The logo payload could not be decoded (or decoding timed out)."""


class PageOverflowError(StrategyGeneratorError):
    """Composed content does not fit on the single page."""


class SinkError(StrategyGeneratorError):
    """Rendering the document or delivering it failed."""


class GenerationInProgressError(StrategyGeneratorError):
    """``generate()`` was called while a previous call was still running."""


class DocumentSink(Protocol):
    """Accepts draw commands for one page and renders them to a binary document."""

    def set_heading(self, text: str, position: Position, style_ref: str = "heading") -> None:
        ...

    def set_body_line(self, text: str, position: Position) -> None:
        ...

    def place_image(
        self, data: str, format: str, position: Position, width: float, height: float,
    ) -> None:
        ...

    def render(self) -> bytes:
        ...


class Delivery(Protocol):
    """Persists or offers a rendered document to the user."""

    def save(self, artifact: bytes, file_name: str) -> Path | None:
        ...
