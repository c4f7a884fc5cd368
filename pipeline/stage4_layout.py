"""Stage 4: Layout — place the title, the optional logo and the text blocks on one page.

A single vertical cursor walks down the page:

  margin_top            title (style "title")
  + line_height         logo box top, if a logo was supplied
  + logo_height + gap   first block heading           (with logo)
  + text_gap            first block heading           (without logo)
  + line_height         every following line

With the default design this reproduces the classic sheet geometry: title at
10 mm, logo at 20 mm, text from 80 mm (30 mm without a logo), 10 mm apart.

The title is emitted before the logo is awaited, and the logo is always
placed before the first block heading. Lines are never wrapped or clipped:
content that runs past the bottom margin, or a line whose estimated width
exceeds the text area, raises PageOverflowError and the sheet is not built.

Consumes: StrategySheet, optional pending LoadedImage
Produces: SheetLayout (ordered draw commands)
"""
import logging
from collections.abc import Awaitable

from models.design import DesignSystem
from models.layout import PlaceImage, Position, SetBodyLine, SetHeading, SheetLayout
from models.strategy import StrategySheet
from pipeline.interfaces import DocumentSink, PageOverflowError
from pipeline.stage3_image import LoadedImage

logger = logging.getLogger(__name__)

_PT_TO_MM = 25.4 / 72


async def compose(
    sheet: StrategySheet,
    image: Awaitable[LoadedImage] | None,
    design: DesignSystem,
) -> SheetLayout:
    """Lay out ``sheet`` and return the draw commands in emission order.

    ``image`` is awaited exactly once, after the title has been emitted.
    Errors from the image (ImageDecodeError) propagate unchanged.
    """
    page = design.page
    metrics = design.layout
    x = page.margin_left_mm
    commands: list = []

    def emit_line(command_type, text: str, y: float, **kwargs) -> None:
        if y > page.content_bottom_mm:
            raise PageOverflowError(
                f"Line '{text[:40]}' at {y:.1f}mm exceeds the page bottom "
                f"({page.content_bottom_mm:.1f}mm)"
            )
        size_pt = design.typography.get(kwargs.get("style_ref", "body")).size_pt
        width = estimate_width_mm(text, size_pt, metrics.avg_char_width_em)
        if width > page.content_width_mm:
            raise PageOverflowError(
                f"Line '{text[:40]}...' is about {width:.0f}mm wide, wider than the "
                f"text area ({page.content_width_mm:.0f}mm)"
            )
        commands.append(command_type(text=text, position=Position(x_mm=x, y_mm=y), **kwargs))

    y = page.margin_top_mm
    emit_line(SetHeading, sheet.title, y, style_ref="title")
    y += metrics.line_height_mm

    if image is not None:
        loaded = await image
        if y + metrics.logo_height_mm > page.content_bottom_mm:
            raise PageOverflowError("Logo box does not fit below the title")
        commands.append(PlaceImage(
            data=loaded.data_uri,
            format=loaded.format,
            position=Position(x_mm=x, y_mm=y),
            width_mm=metrics.logo_width_mm,
            height_mm=metrics.logo_height_mm,
        ))
        y += metrics.logo_height_mm + metrics.image_gap_mm
    else:
        y += metrics.text_gap_mm

    for block in sheet.blocks:
        emit_line(SetHeading, block.label, y, style_ref="heading")
        y += metrics.line_height_mm
        for line in block.lines:
            emit_line(SetBodyLine, line, y)
            y += metrics.line_height_mm

    layout = SheetLayout(commands=commands)
    logger.info(
        "Layout complete — %d commands, logo: %s, last line at %.1fmm",
        len(commands), "yes" if image is not None else "no", y - metrics.line_height_mm,
    )
    return layout


def render_layout(layout: SheetLayout, sink: DocumentSink) -> bytes:
    """Replay ``layout`` onto ``sink`` in order and render it once."""
    for command in layout.commands:
        if isinstance(command, SetHeading):
            sink.set_heading(command.text, command.position, command.style_ref)
        elif isinstance(command, SetBodyLine):
            sink.set_body_line(command.text, command.position)
        elif isinstance(command, PlaceImage):
            sink.place_image(
                command.data, command.format, command.position,
                command.width_mm, command.height_mm,
            )
    return sink.render()


def estimate_width_mm(text: str, size_pt: float, avg_char_width_em: float) -> float:
    """Approximate rendered width of ``text`` from its length and the font size."""
    return len(text) * size_pt * _PT_TO_MM * avg_char_width_em
