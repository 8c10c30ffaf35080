"""Source decoding, tone adjustments, and export encoding.

All functions in this module operate on PIL images and are independent
of the silhouette geometry and of any presentation layer.

Typical usage::

    from tornpaper.core.image_processing import adjust_tone, decode_source
    from tornpaper.schemas import ToneAdjustments

    source = decode_source(uploaded_bytes)
    toned = adjust_tone(source.image, ToneAdjustments(sepia=60))
"""

from __future__ import annotations

import io
import logging

import numpy as np
from PIL import Image, ImageEnhance, ImageOps, UnidentifiedImageError

from tornpaper.config import Settings
from tornpaper.errors import DecodeFailureError, ExportError, ToneAdjustmentError
from tornpaper.schemas import RenderOutput, SourceImage, ToneAdjustments

logger = logging.getLogger(__name__)

# Row-major RGB → RGB sepia transform.
_SEPIA_MATRIX = (
    0.393, 0.769, 0.189, 0.0,
    0.349, 0.686, 0.168, 0.0,
    0.272, 0.534, 0.131, 0.0,
)
_VIGNETTE_DARKENING = 0.45

_EXPORT_FORMATS = ("PNG", "JPEG")


# ---------------------------------------------------------------------------
# Decoding
# ---------------------------------------------------------------------------


def decode_source(data: bytes) -> SourceImage:
    """Decode uploaded bytes into a ``SourceImage``.

    The image is fully loaded so later pipeline stages never touch the
    underlying buffer.

    Args:
        data: Raw file contents.

    Returns:
        The decoded source, remembering the upload's format.

    Raises:
        DecodeFailureError: If the bytes are empty, unreadable, or decode
            to a zero-size image.
    """
    if not data:
        raise DecodeFailureError("Uploaded file is empty.")

    try:
        image = Image.open(io.BytesIO(data))
        image.load()
    except (
        UnidentifiedImageError,
        OSError,
        SyntaxError,
        ValueError,
        Image.DecompressionBombError,
    ) as exc:
        raise DecodeFailureError(f"Could not decode image: {exc}") from exc

    if image.width == 0 or image.height == 0:
        raise DecodeFailureError(f"Decoded image has zero size: {image.size}")

    fmt = (image.format or "PNG").upper()
    logger.info("Decoded %s source %dx%d (%s)", fmt, image.width, image.height, image.mode)
    return SourceImage(image=image, format=fmt)


# ---------------------------------------------------------------------------
# Tone adjustments
# ---------------------------------------------------------------------------


def _vignette(rgb: Image.Image) -> Image.Image:
    """Darken *rgb* radially toward its corners."""
    width, height = rgb.size
    ys, xs = np.mgrid[0:height, 0:width].astype(np.float32)
    cx = (width - 1) / 2.0 or 1.0
    cy = (height - 1) / 2.0 or 1.0
    radius = np.sqrt(((xs - cx) / cx) ** 2 + ((ys - cy) / cy) ** 2) / np.sqrt(2.0)
    factor = 1.0 - _VIGNETTE_DARKENING * np.clip(radius, 0.0, 1.0) ** 2

    arr = np.asarray(rgb, dtype=np.float32) * factor[:, :, np.newaxis]
    return Image.fromarray(np.clip(np.rint(arr), 0, 255).astype(np.uint8))


def adjust_tone(image: Image.Image, tone: ToneAdjustments) -> Image.Image:
    """Apply photo filters to the source before it is framed.

    Processing order: brightness → contrast → grayscale → sepia → vignette.
    If no filter differs from the neutral defaults the original image is
    returned unchanged (no copy). Transparency is preserved.

    Args:
        image: Source PIL image of any mode.
        tone: Filter settings.

    Returns:
        A new RGB or RGBA image with the filters applied, or *image*
        itself if ``tone.has_adjustments()`` is ``False``.

    Raises:
        ToneAdjustmentError: If any PIL operation fails unexpectedly.
    """
    if not tone.has_adjustments():
        return image

    try:
        # Palette and tRNS transparency only survive as a real alpha band.
        if image.mode == "P" or "transparency" in image.info:
            image = image.convert("RGBA")
        alpha = image.getchannel("A") if "A" in image.getbands() else None
        result = image.convert("RGB")

        if tone.brightness != 100.0:
            result = ImageEnhance.Brightness(result).enhance(tone.brightness / 100.0)

        if tone.contrast != 100.0:
            result = ImageEnhance.Contrast(result).enhance(tone.contrast / 100.0)

        if tone.grayscale:
            result = ImageOps.grayscale(result).convert("RGB")

        if tone.sepia > 0.0:
            sepia = result.convert("RGB", _SEPIA_MATRIX)
            result = Image.blend(result, sepia, tone.sepia / 100.0)

        if tone.vignette:
            result = _vignette(result)

        if alpha is not None:
            result.putalpha(alpha)

    except Exception as exc:
        raise ToneAdjustmentError(f"Tone adjustment failed: {exc}") from exc

    return result


# ---------------------------------------------------------------------------
# Export helpers
# ---------------------------------------------------------------------------


def export_format(preferred: str | None) -> str:
    """Resolve the download format: PNG or JPEG, PNG when unsupported."""
    fmt = (preferred or "PNG").upper()
    if fmt == "JPG":
        fmt = "JPEG"
    return fmt if fmt in _EXPORT_FORMATS else "PNG"


def image_to_bytes(
    image: Image.Image,
    fmt: str = "PNG",
    settings: Settings | None = None,
) -> bytes:
    """Serialize a PIL image to PNG or JPEG bytes.

    JPEG has no transparency, so RGBA frames are flattened onto white.

    Args:
        image: Any PIL image (RGBA, RGB, L, …).
        fmt: ``"PNG"`` or ``"JPEG"``; anything else falls back to PNG.
        settings: Renderer settings (provides ``jpeg_quality``).

    Returns:
        Raw file contents as ``bytes``.

    Raises:
        ExportError: If Pillow cannot encode the image.
    """
    settings = settings or Settings()
    fmt = export_format(fmt)
    buffer = io.BytesIO()
    try:
        if fmt == "JPEG":
            rgba = image.convert("RGBA")
            flat = Image.new("RGB", rgba.size, (255, 255, 255))
            flat.paste(rgba, mask=rgba.getchannel("A"))
            flat.save(buffer, format="JPEG", quality=settings.jpeg_quality)
        else:
            image.save(buffer, format="PNG")
    except (OSError, ValueError) as exc:
        raise ExportError(f"Could not encode frame as {fmt}: {exc}") from exc
    return buffer.getvalue()


def encode_output(
    output: RenderOutput,
    fmt: str | None = None,
    settings: Settings | None = None,
) -> bytes:
    """Encode the current frame for a download action.

    Args:
        output: The render result to export.
        fmt: Explicit format; defaults to the upload's format.
        settings: Renderer settings.

    Returns:
        Encoded image bytes.
    """
    return image_to_bytes(output.image, export_format(fmt or output.format), settings)
