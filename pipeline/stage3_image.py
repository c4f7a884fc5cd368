"""Stage 3: Image Loader — decode the optional logo for embedding.

Decoding runs in a worker thread so the layout composer can emit the title
while Pillow works. The result is always re-encoded as PNG and returned as a
``data:`` URI, which WeasyPrint embeds without touching the filesystem.

Unreadable payloads raise ImageDecodeError; the caller aborts the whole
generation rather than rendering a sheet without the requested logo.
"""
import asyncio
import base64
import io
import logging

from PIL import Image, ImageOps
from pydantic import BaseModel, Field

from pipeline.interfaces import ImageDecodeError

logger = logging.getLogger(__name__)

# Modes PNG can store directly; everything else (CMYK, YCbCr, ...) goes through RGB(A)
_PNG_MODES = frozenset({"1", "L", "LA", "P", "RGB", "RGBA", "I", "I;16"})


class LoadedImage(BaseModel):
    data_uri: str
    format: str = "PNG"
    width_px: int = Field(gt=0)
    height_px: int = Field(gt=0)


async def load_image(payload: bytes, timeout: float | None = None) -> LoadedImage:
    """Decode ``payload`` off the event loop.

    Raises ImageDecodeError if the bytes are not a readable image or the
    decode does not finish within ``timeout`` seconds.
    """
    try:
        return await asyncio.wait_for(asyncio.to_thread(decode_image, payload), timeout)
    except asyncio.TimeoutError as exc:
        raise ImageDecodeError(f"Logo decoding timed out after {timeout}s") from exc


def decode_image(payload: bytes) -> LoadedImage:
    if not payload:
        raise ImageDecodeError("Logo payload is empty")
    try:
        with Image.open(io.BytesIO(payload)) as img:
            img = ImageOps.exif_transpose(img)
            if img.mode not in _PNG_MODES:
                img = img.convert("RGBA" if "A" in img.getbands() else "RGB")
            buffer = io.BytesIO()
            img.save(buffer, format="PNG")
            width, height = img.size
    except (OSError, SyntaxError, ValueError, Image.DecompressionBombError) as exc:
        logger.warning("Could not decode logo (%d bytes): %s", len(payload), exc)
        raise ImageDecodeError(f"Logo is not a readable image: {exc}") from exc

    encoded = base64.b64encode(buffer.getvalue()).decode("ascii")
    logger.debug("Decoded logo %dx%d px → %d bytes PNG", width, height, buffer.tell())
    return LoadedImage(
        data_uri=f"data:image/png;base64,{encoded}",
        width_px=width,
        height_px=height,
    )
