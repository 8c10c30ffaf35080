"""Drop shadow beneath the paper silhouette.

Two black, blurred copies of the silhouette mask are composited onto the
canvas: a wide, faint penumbra first, then the offset primary shadow.
Both must be painted before the opaque paper fill so that only the part
falling outside the silhouette stays visible.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from PIL import Image, ImageChops, ImageFilter

from tornpaper.config import Settings
from tornpaper.core.range_mapper import map_range
from tornpaper.schemas import StyleParameters

logger = logging.getLogger(__name__)

_PENUMBRA_BLUR_SCALE = 2.0
_PENUMBRA_BLUR_PAD = 4.0
_PENUMBRA_OPACITY = 0.35


@dataclass(frozen=True)
class ShadowParams:
    """Shadow settings in pixel space.

    Attributes:
        offset_x: Horizontal offset, positive is right.
        offset_y: Vertical offset, positive is down.
        blur: Blur extent in pixels (the Gaussian radius is half of it).
        opacity: Peak opacity in ``[0, 1]``.
    """

    offset_x: float
    offset_y: float
    blur: float
    opacity: float

    @property
    def enabled(self) -> bool:
        return self.opacity > 0.0


def shadow_params(params: StyleParameters, settings: Settings | None = None) -> ShadowParams:
    """Map the four shadow sliders to pixel-space values.

    Offsets are centred on ``50``; blur and opacity are never negative.
    """
    settings = settings or Settings()
    offset = settings.shadow_offset_max
    return ShadowParams(
        offset_x=map_range(params.shadow_offset_x, 0, 100, -offset, offset),
        offset_y=map_range(params.shadow_offset_y, 0, 100, -offset, offset),
        blur=max(0.0, map_range(params.shadow_blur, 0, 100, 0, settings.shadow_blur_max)),
        opacity=max(
            0.0,
            map_range(params.shadow_strength, 0, 100, 0, settings.shadow_opacity_max),
        ),
    )


def _shadow_layer(
    mask: Image.Image,
    offset: tuple[int, int],
    blur_radius: float,
    opacity: float,
) -> Image.Image:
    """Black RGBA layer whose alpha is the shifted, blurred, faded *mask*."""
    alpha = ImageChops.offset(mask, *offset)
    # ImageChops.offset wraps around; blank the wrapped bands.
    dx, dy = offset
    width, height = mask.size
    if dx > 0:
        alpha.paste(0, (0, 0, min(dx, width), height))
    elif dx < 0:
        alpha.paste(0, (max(width + dx, 0), 0, width, height))
    if dy > 0:
        alpha.paste(0, (0, 0, width, min(dy, height)))
    elif dy < 0:
        alpha.paste(0, (0, max(height + dy, 0), width, height))

    if blur_radius > 0.0:
        alpha = alpha.filter(ImageFilter.GaussianBlur(radius=blur_radius))
    alpha = alpha.point(lambda v: int(round(v * opacity)))

    layer = Image.new("RGBA", mask.size, (0, 0, 0, 0))
    layer.putalpha(alpha)
    return layer


def paint_shadow(
    canvas: Image.Image,
    mask: Image.Image,
    shadow: ShadowParams,
) -> Image.Image:
    """Composite the penumbra and primary shadow onto *canvas*.

    Args:
        canvas: RGBA canvas, usually still empty.
        mask: Silhouette mask in mode ``L`` with the canvas size.
        shadow: Pixel-space shadow settings.

    Returns:
        The canvas with shadows painted, or *canvas* itself when the
        shadow is disabled.
    """
    if not shadow.enabled:
        return canvas

    offset = (int(round(shadow.offset_x)), int(round(shadow.offset_y)))
    penumbra = _shadow_layer(
        mask,
        offset,
        blur_radius=(shadow.blur * _PENUMBRA_BLUR_SCALE + _PENUMBRA_BLUR_PAD) / 2.0,
        opacity=shadow.opacity * _PENUMBRA_OPACITY,
    )
    primary = _shadow_layer(mask, offset, blur_radius=shadow.blur / 2.0, opacity=shadow.opacity)

    logger.debug(
        "Shadow: offset %s, blur %.1f, opacity %.2f", offset, shadow.blur, shadow.opacity
    )
    result = Image.alpha_composite(canvas, penumbra)
    return Image.alpha_composite(result, primary)
