"""Paper grain synthesis.

Grain is two passes, both confined to the silhouette mask: a per-pixel
luminance perturbation, then a scatter of short, faint fiber strokes.
"""

from __future__ import annotations

import logging
import math

import numpy as np
from PIL import Image, ImageChops, ImageDraw

from tornpaper.config import Settings
from tornpaper.core.range_mapper import map_range

logger = logging.getLogger(__name__)

# Fibers per canvas pixel at strength 20, as in the web preview.
_FIBER_DENSITY = 0.001
_FIBER_LENGTH_RANGE = (2.0, 8.0)


def fiber_count(canvas_size: tuple[int, int], strength: float) -> int:
    """Number of fiber strokes for a canvas of *canvas_size*."""
    width, height = canvas_size
    return max(0, int(width * height * _FIBER_DENSITY * (strength / 20.0)))


def _apply_grain(
    canvas: Image.Image,
    mask: Image.Image,
    amplitude: float,
    rng: np.random.Generator,
) -> Image.Image:
    """Add uniform luminance noise in ``±amplitude`` levels inside *mask*."""
    arr = np.asarray(canvas, dtype=np.float32).copy()
    weight = np.asarray(mask, dtype=np.float32) / 255.0
    noise = rng.uniform(-amplitude, amplitude, size=weight.shape).astype(np.float32)

    arr[:, :, :3] += (noise * weight)[:, :, np.newaxis]
    arr = np.clip(np.rint(arr), 0, 255).astype(np.uint8)
    return Image.fromarray(arr)


def _draw_fibers(
    canvas: Image.Image,
    mask: Image.Image,
    count: int,
    color: tuple[int, int, int],
    opacity: float,
    rng: np.random.Generator,
) -> Image.Image:
    """Scatter *count* short, randomly oriented strokes clipped to *mask*."""
    width, height = canvas.size
    overlay = Image.new("RGBA", canvas.size, (0, 0, 0, 0))
    draw = ImageDraw.Draw(overlay)
    fill = (*color, int(round(255 * opacity)))

    xs = rng.uniform(0, width, size=count)
    ys = rng.uniform(0, height, size=count)
    lengths = rng.uniform(*_FIBER_LENGTH_RANGE, size=count)
    angles = rng.uniform(0, math.pi, size=count)

    for x, y, length, angle in zip(xs, ys, lengths, angles):
        dx = math.cos(angle) * length / 2.0
        dy = math.sin(angle) * length / 2.0
        draw.line([(x - dx, y - dy), (x + dx, y + dy)], fill=fill, width=1)

    overlay.putalpha(ImageChops.multiply(overlay.getchannel("A"), mask))
    return Image.alpha_composite(canvas, overlay)


def apply_texture(
    canvas: Image.Image,
    mask: Image.Image,
    strength: float,
    rng: np.random.Generator,
    settings: Settings | None = None,
) -> Image.Image:
    """Apply paper grain and fibers inside the silhouette.

    Args:
        canvas: RGBA frame with the image already drawn.
        mask: Silhouette mask in mode ``L`` with the canvas size.
        strength: ``texture_strength`` slider value in ``[0, 100]``.
        rng: Random source for grain and fiber placement.
        settings: Renderer settings.

    Returns:
        The textured canvas. At strength ``0`` the input object is
        returned untouched.
    """
    if strength <= 0.0:
        return canvas

    settings = settings or Settings()
    amplitude = map_range(strength, 0, 100, 0, settings.grain_amplitude_max)
    opacity = map_range(strength, 0, 100, 0, settings.texture_opacity_max)
    count = fiber_count(canvas.size, strength)

    result = _apply_grain(canvas, mask, amplitude, rng)
    if count > 0:
        result = _draw_fibers(result, mask, count, settings.fiber_color, opacity, rng)

    logger.debug(
        "Texture: grain ±%.1f levels, %d fibers at opacity %.2f", amplitude, count, opacity
    )
    return result
