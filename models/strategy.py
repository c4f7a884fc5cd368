from pydantic import BaseModel, ConfigDict, Field


class TextBlock(BaseModel):
    """A labelled group of derived lines: one heading, then its content."""

    model_config = ConfigDict(frozen=True)

    label: str
    lines: tuple[str, ...]


class StrategySheet(BaseModel):
    model_config = ConfigDict(frozen=True)

    title: str
    blocks: tuple[TextBlock, ...] = Field(default_factory=tuple)
