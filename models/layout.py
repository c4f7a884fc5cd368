"""Draw commands emitted by the layout composer and replayed onto a document sink.

Positions are (x, y) in millimetres from the top-left page corner; ``y`` is
the text baseline for text commands and the top edge for images.
"""
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field


class Position(BaseModel):
    model_config = ConfigDict(frozen=True)

    x_mm: float
    y_mm: float


class SetHeading(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["heading"] = "heading"
    text: str
    position: Position
    style_ref: Literal["title", "heading"] = "heading"  # key into design.yaml typography


class SetBodyLine(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["body"] = "body"
    text: str
    position: Position


class PlaceImage(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["image"] = "image"
    data: str  # data: URI
    format: str
    position: Position
    width_mm: float = Field(gt=0)
    height_mm: float = Field(gt=0)


DrawCommand = Annotated[Union[SetHeading, SetBodyLine, PlaceImage], Field(discriminator="kind")]


class SheetLayout(BaseModel):
    commands: list[DrawCommand] = Field(default_factory=list)

    @property
    def headings(self) -> list[SetHeading]:
        return [c for c in self.commands if isinstance(c, SetHeading)]

    def index_of_first(self, kind: str) -> int | None:
        return next((i for i, c in enumerate(self.commands) if c.kind == kind), None)
