"""Stage 5: PDF Rendering — the WeasyPrint document sink.

Draw commands are recorded as they arrive and rendered in one go by
``render()``: a Jinja2 template turns them into a single absolutely
positioned HTML page (mm units), WeasyPrint turns that into PDF bytes.

Text positions are baselines, so each line's box is shifted up by the
font's ascent. Images are positioned by their top-left corner and embedded
from ``data:`` URIs.
"""
import logging
import re
import zlib
from pathlib import Path

from jinja2 import Environment, FileSystemLoader, select_autoescape

try:
    import weasyprint as _weasyprint  # requires native GTK/Pango libs at runtime
except OSError:  # pragma: no cover — native libs absent in test env
    _weasyprint = None  # type: ignore[assignment]

from models.design import DesignSystem
from models.layout import PlaceImage, Position, SetBodyLine, SetHeading
from pipeline.interfaces import SinkError

logger = logging.getLogger(__name__)

# Path (relative to the package root) where Jinja2 looks for templates
_TEMPLATE_DIR = Path(__file__).resolve().parent.parent / "templates"

_PT_TO_MM = 25.4 / 72
# Fraction of the font size above the baseline (DejaVu/Helvetica are both ~0.76-0.8)
_ASCENT_RATIO = 0.8


class WeasyPrintSink:
    """Collects draw commands for one page and renders them to PDF bytes."""

    def __init__(self, design: DesignSystem | None = None):
        self.design = design or DesignSystem()
        self.commands: list[SetHeading | SetBodyLine | PlaceImage] = []

    def set_heading(self, text: str, position: Position, style_ref: str = "heading") -> None:
        self.commands.append(SetHeading(text=text, position=position, style_ref=style_ref))

    def set_body_line(self, text: str, position: Position) -> None:
        self.commands.append(SetBodyLine(text=text, position=position))

    def place_image(
        self, data: str, format: str, position: Position, width: float, height: float,
    ) -> None:
        self.commands.append(PlaceImage(
            data=data, format=format, position=position, width_mm=width, height_mm=height,
        ))

    def render(self) -> bytes:
        """Render the recorded commands. Raises SinkError on any failure."""
        if _weasyprint is None:  # pragma: no cover
            raise SinkError(
                "WeasyPrint native libraries (GTK/Pango) are not available. "
                "Follow https://doc.courtbouillon.org/weasyprint/stable/first_steps.html"
            )
        html = _render_html(self.commands, self.design)
        font_name = self.design.typography.body.font
        try:
            font_config = _weasyprint.text.fonts.FontConfiguration()
            font_css = _weasyprint.CSS(
                string=_build_font_face_css(font_name),
                font_config=font_config,
            )
            pdf = _weasyprint.HTML(string=html).write_pdf(
                stylesheets=[font_css], font_config=font_config,
            )
        except Exception as exc:
            logger.error("PDF rendering failed: %s", exc)
            raise SinkError(f"PDF rendering failed: {exc}") from exc

        _validate_pdf_fonts(pdf, font_name)
        logger.info("Rendered strategy sheet — %d commands, %d bytes", len(self.commands), len(pdf))
        return pdf


# ---------------------------------------------------------------------------
# HTML rendering
# ---------------------------------------------------------------------------

def _render_html(commands: list, design: DesignSystem) -> str:
    """Render the Jinja2 template to an HTML string."""
    env = Environment(
        loader=FileSystemLoader(str(_TEMPLATE_DIR)),
        autoescape=select_autoescape(["html", "j2"]),
    )
    template = env.get_template("sheet.html.j2")
    return template.render(items=[_to_item(c, design) for c in commands], ds=design)


def _to_item(command, design: DesignSystem) -> dict:
    if isinstance(command, PlaceImage):
        return {
            "kind": "image",
            "src": command.data,
            "left": command.position.x_mm,
            "top": command.position.y_mm,
            "width": command.width_mm,
            "height": command.height_mm,
        }
    style_ref = command.style_ref if isinstance(command, SetHeading) else "body"
    style = design.typography.get(style_ref)
    return {
        "kind": "text",
        "text": command.text,
        "style_ref": style_ref,
        "left": command.position.x_mm,
        "top": round(command.position.y_mm - style.size_pt * _PT_TO_MM * _ASCENT_RATIO, 3),
    }


# ---------------------------------------------------------------------------
# Font embedding
# ---------------------------------------------------------------------------

# Standard directories where TTF/OTF fonts live on Linux/macOS
_FONT_SEARCH_DIRS = [
    Path("/usr/share/fonts"),
    Path("/usr/local/share/fonts"),
    Path.home() / ".local/share/fonts",
    Path.home() / ".fonts",
]

# Filename fragment → (CSS font-weight, CSS font-style)
_FONT_STYLE_MAP = {
    "bolditalic": ("bold", "italic"),
    "bold":       ("bold", "normal"),
    "italic":     ("normal", "italic"),
    "oblique":    ("normal", "oblique"),
    "regular":    ("normal", "normal"),
    "book":       ("normal", "normal"),
}


def _find_font_files(font_name: str, search_dirs: list[Path] | None = None) -> list[tuple[Path, str, str]]:
    """Scan font directories for TTF/OTF files matching ``font_name``.

    Returns a list of (path, css_weight, css_style) tuples.
    """
    slug_hyphenated = font_name.lower().replace(" ", "-")  # "dejavu-sans"
    slug_nohyphen = font_name.lower().replace(" ", "")     # "dejavusans"
    results: list[tuple[Path, str, str]] = []
    for base in search_dirs or _FONT_SEARCH_DIRS:
        if not base.exists():
            continue
        for ext in ("*.ttf", "*.TTF", "*.otf", "*.OTF"):
            for path in base.rglob(ext):
                stem = path.stem.lower()
                # Accept "DejaVu-Sans-Bold" and "DejaVuSans-Bold" but not "DejaVuSansMono"
                if stem.startswith(slug_hyphenated + "-") or stem == slug_hyphenated:
                    suffix = stem[len(slug_hyphenated):].lstrip("-")
                elif stem.startswith(slug_nohyphen + "-") or stem == slug_nohyphen:
                    suffix = stem[len(slug_nohyphen):].lstrip("-")
                else:
                    continue
                weight, style = "normal", "normal"
                for fragment, (w, s) in _FONT_STYLE_MAP.items():
                    if fragment in suffix:
                        weight, style = w, s
                        break
                results.append((path, weight, style))
    return results


def _build_font_face_css(font_name: str, search_dirs: list[Path] | None = None) -> str:
    """Return ``@font-face`` CSS for all variants of ``font_name`` found on disk.

    Falls back to an empty string if no font files are found.
    """
    font_files = _find_font_files(font_name, search_dirs)
    if not font_files:
        logger.warning("No font files found for '%s' — text may not embed correctly", font_name)
        return ""
    rules = []
    for path, weight, style in font_files:
        rules.append(
            f'@font-face {{\n'
            f'  font-family: "{font_name}";\n'
            f'  src: url({path.as_uri()}) format("truetype");\n'
            f'  font-weight: {weight};\n'
            f'  font-style: {style};\n'
            f'}}'
        )
    logger.debug("Font-face rules for '%s': %d variants", font_name, len(rules))
    return "\n".join(rules)


# ---------------------------------------------------------------------------
# PDF font validation
# ---------------------------------------------------------------------------

def _validate_pdf_fonts(data: bytes, expected_font: str) -> bool:
    """Check that fonts are embedded in the generated PDF and log the result.

    Looks for ``/FontFile2``/``/FontFile3`` programs and ``ABCDEF+Name``
    subset names, also inside FlateDecode streams. Returns True when any
    embedded font was found; a miss is logged, not raised.
    """
    all_decoded: list[bytes] = [data]
    for m in re.finditer(rb"stream[\r\n]+(.*?)[\r\n]+endstream", data, re.DOTALL):
        try:
            all_decoded.append(zlib.decompress(m.group(1)))
        except zlib.error:
            continue  # not a FlateDecode stream

    combined = b"\n".join(all_decoded)
    font_file_refs = len(re.findall(rb"/FontFile[23]?\b", combined))
    subset_names = [
        n.decode("latin-1")
        for n in re.findall(rb"/FontName\s+/([A-Z]{6}\+[^\s/\]>]+)", combined)
    ]

    if font_file_refs == 0 and not subset_names:
        logger.warning(
            "PDF font validation FAILED — no embedded font programs found. "
            "Text may be unreadable on systems without '%s' installed.",
            expected_font,
        )
        return False
    logger.info(
        "PDF font validation OK — %d font program(s) embedded, subsets: %s",
        font_file_refs,
        subset_names if subset_names else ["(none detected — may be in raw stream)"],
    )
    return True
