"""Design system model — typed representation of design.yaml.

Loaded once per generator and handed to the layout composer (geometry) and
the PDF sink (page size, colours, fonts). Every field has a default, so the
sheet renders identically when design.yaml is absent.

Units are millimetres measured from the top-left corner of the page.
"""
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field


class PageDimensions(BaseModel):
    width_mm: float = Field(default=210.0, gt=0)
    height_mm: float = Field(default=297.0, gt=0)
    margin_top_mm: float = 10.0
    margin_bottom_mm: float = 10.0
    margin_left_mm: float = 10.0
    margin_right_mm: float = 10.0

    @property
    def content_width_mm(self) -> float:
        return self.width_mm - self.margin_left_mm - self.margin_right_mm

    @property
    def content_bottom_mm(self) -> float:
        """Lowest y position a line may occupy."""
        return self.height_mm - self.margin_bottom_mm


class ColorPalette(BaseModel):
    text: str = "#000000"
    title: str = "#000000"


class TextStyle(BaseModel):
    font: str = "DejaVu Sans"
    size_pt: float = 12.0
    weight: Literal["normal", "bold", "italic"] = "normal"


class Typography(BaseModel):
    title: TextStyle = Field(default_factory=lambda: TextStyle(size_pt=16.0))
    heading: TextStyle = Field(default_factory=lambda: TextStyle(size_pt=12.0))
    body: TextStyle = Field(default_factory=lambda: TextStyle(size_pt=12.0))

    def get(self, style_ref: str) -> TextStyle:
        """Look up a TextStyle by its style_ref key (e.g. 'title', 'heading', 'body').

        Falls back to body style for unknown keys.
        """
        return getattr(self, style_ref, self.body)


class LayoutMetrics(BaseModel):
    """Vertical rhythm of the strategy sheet."""
    line_height_mm: float = Field(default=10.0, gt=0)
    text_gap_mm: float = Field(default=10.0, ge=0)   # title → first block, no logo
    image_gap_mm: float = Field(default=10.0, ge=0)  # logo box → first block
    logo_width_mm: float = Field(default=50.0, gt=0)
    logo_height_mm: float = Field(default=50.0, gt=0)
    # Average glyph advance as a fraction of the font size, used to estimate line width
    avg_char_width_em: float = Field(default=0.55, gt=0)


class DesignSystem(BaseModel):
    """Complete design system loaded from design.yaml.

    Provides defaults for every field so it is usable even when design.yaml
    is absent or partially specified.
    """
    page: PageDimensions = Field(default_factory=PageDimensions)
    colors: ColorPalette = Field(default_factory=ColorPalette)
    typography: Typography = Field(default_factory=Typography)
    layout: LayoutMetrics = Field(default_factory=LayoutMetrics)

    @classmethod
    def load(cls, path: Path) -> "DesignSystem":
        """Load from a YAML file. Missing fields use Pydantic defaults.

        Raises FileNotFoundError if path does not exist.
        """
        import yaml  # lazy — only needed at load time
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
        return cls.model_validate(data)

    @classmethod
    def load_or_default(cls, path: Path) -> "DesignSystem":
        """Load from path if it exists, otherwise return default design system."""
        if path.exists():
            return cls.load(path)
        return cls()
