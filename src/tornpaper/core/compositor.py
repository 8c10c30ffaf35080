"""Frame composition in paint order.

Paint order, each step finishing before the next starts:

1. allocate a transparent RGBA canvas at the final size;
2. shadow layers (if ``shadow_strength`` > 0);
3. paper fill inside the silhouette;
4. inset stroke and dashed highlight along a torn outline;
5. the scaled source at the border offset, clipped to the silhouette;
6. paper grain inside the same clip (if ``texture_strength`` > 0).

A step driven by a neutral parameter is skipped without changing the
geometry used by the others.
"""

from __future__ import annotations

import logging
import math

import numpy as np
from PIL import Image, ImageChops, ImageDraw, ImageFont

from tornpaper.config import Settings
from tornpaper.core.shadow import paint_shadow, shadow_params
from tornpaper.core.silhouette import silhouette_mask
from tornpaper.core.texture import apply_texture
from tornpaper.schemas import ContentGeometry, Point, Silhouette, StyleParameters

logger = logging.getLogger(__name__)

_STROKE_COLOR = (0, 0, 0, 20)
_STROKE_WIDTH = 2
_HIGHLIGHT_COLOR = (255, 255, 255, 60)
_HIGHLIGHT_INSET = 1.0
_HIGHLIGHT_DASH = 3

_PLACEHOLDER_TEXT = (113, 113, 122, 255)
_PLACEHOLDER_ERROR_TEXT = (220, 38, 38, 255)


def _clip_to(layer: Image.Image, mask: Image.Image) -> Image.Image:
    """Multiply *layer*'s alpha by *mask* in place and return it."""
    layer.putalpha(ImageChops.multiply(layer.getchannel("A"), mask))
    return layer


def _inset_polygon(polygon: list[Point], distance: float) -> list[Point]:
    """Pull every vertex *distance* pixels toward the polygon centroid."""
    cx = sum(x for x, _ in polygon) / len(polygon)
    cy = sum(y for _, y in polygon) / len(polygon)
    inset: list[Point] = []
    for x, y in polygon:
        dx, dy = cx - x, cy - y
        length = math.hypot(dx, dy)
        if length <= distance:
            inset.append((x, y))
        else:
            inset.append((x + dx / length * distance, y + dy / length * distance))
    return inset


def paint_paper(
    canvas: Image.Image,
    mask: Image.Image,
    color: tuple[int, int, int],
) -> Image.Image:
    """Fill the silhouette with the opaque paper colour."""
    paper = Image.new("RGBA", canvas.size, (*color, 255))
    return Image.alpha_composite(canvas, _clip_to(paper, mask))


def paint_edge(
    canvas: Image.Image,
    mask: Image.Image,
    silhouette: Silhouette,
    steps: int,
) -> Image.Image:
    """Stroke a faint dark inset line and a dashed light ridge.

    Both strokes are clipped to the silhouette, so only their inner half
    is visible.
    """
    polygon = silhouette.flatten(steps)
    overlay = Image.new("RGBA", canvas.size, (0, 0, 0, 0))
    draw = ImageDraw.Draw(overlay)

    draw.line(polygon + polygon[:1], fill=_STROKE_COLOR, width=_STROKE_WIDTH, joint="curve")

    ridge = _inset_polygon(polygon, _HIGHLIGHT_INSET)
    dash = _HIGHLIGHT_DASH
    for start in range(0, len(ridge), 2 * dash):
        run = ridge[start:start + dash + 1]
        if len(run) >= 2:
            draw.line(run, fill=_HIGHLIGHT_COLOR, width=1)

    return Image.alpha_composite(canvas, _clip_to(overlay, mask))


def paint_content(
    canvas: Image.Image,
    mask: Image.Image,
    image: Image.Image,
    geometry: ContentGeometry,
) -> Image.Image:
    """Draw *image* scaled to the content size at the border offset."""
    scaled = image.convert("RGBA").resize(geometry.content_size, Image.LANCZOS)
    layer = Image.new("RGBA", canvas.size, (0, 0, 0, 0))
    layer.paste(scaled, geometry.content_offset)
    return Image.alpha_composite(canvas, _clip_to(layer, mask))


def compose_frame(
    image: Image.Image,
    geometry: ContentGeometry,
    silhouette: Silhouette,
    params: StyleParameters,
    rng: np.random.Generator,
    settings: Settings | None = None,
) -> Image.Image:
    """Render the framed, torn, shadowed and textured bitmap.

    Args:
        image: Source bitmap (already tone-adjusted).
        geometry: Content and canvas dimensions.
        silhouette: Outline of the paper.
        params: Style parameters.
        rng: Random source for the texture pass.
        settings: Renderer settings.

    Returns:
        The finished frame in mode ``RGBA`` with size
        ``geometry.canvas_size``.
    """
    settings = settings or Settings()
    size = geometry.canvas_size

    canvas = Image.new("RGBA", size, (0, 0, 0, 0))
    mask = silhouette_mask(silhouette, size, settings.curve_steps)

    canvas = paint_shadow(canvas, mask, shadow_params(params, settings))
    canvas = paint_paper(canvas, mask, settings.paper_color)
    if silhouette.torn:
        canvas = paint_edge(canvas, mask, silhouette, settings.curve_steps)
    canvas = paint_content(canvas, mask, image, geometry)
    canvas = apply_texture(canvas, mask, params.texture_strength, rng, settings)

    logger.debug("Composed %dx%d frame (torn=%s)", size[0], size[1], silhouette.torn)
    return canvas


def render_placeholder(
    message: str,
    is_error: bool = False,
    settings: Settings | None = None,
) -> Image.Image:
    """Fixed-size frame with *message* centred on it.

    Args:
        message: Informational or error text.
        is_error: Draw the text in the error colour.
        settings: Renderer settings.

    Returns:
        An RGBA placeholder of ``settings.placeholder_size``.
    """
    settings = settings or Settings()
    frame = Image.new("RGBA", settings.placeholder_size, settings.placeholder_background)
    draw = ImageDraw.Draw(frame)
    font = ImageFont.load_default()

    left, top, right, bottom = draw.textbbox((0, 0), message, font=font)
    width, height = frame.size
    x = (width - (right - left)) / 2.0 - left
    y = (height - (bottom - top)) / 2.0 - top
    draw.text(
        (x, y),
        message,
        fill=_PLACEHOLDER_ERROR_TEXT if is_error else _PLACEHOLDER_TEXT,
        font=font,
    )
    return frame
