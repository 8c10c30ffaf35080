"""Content sizing and border thickness.

Fits the scaled source into the host container (shrink only, aspect
ratio preserved) and derives the border that surrounds it.
"""

from __future__ import annotations

import logging

from tornpaper.config import Settings
from tornpaper.core.range_mapper import map_range
from tornpaper.schemas import ContainerBounds, ContentGeometry

logger = logging.getLogger(__name__)


def max_content_width(bounds: ContainerBounds, settings: Settings) -> float:
    """Usable width inside *bounds* after padding.

    A non-positive container width falls back to the configured default
    container width.
    """
    width = bounds.width
    if width <= 0:
        logger.warning(
            "Degenerate container width %s, using %dpx default.",
            width,
            settings.default_container_width,
        )
        width = settings.default_container_width
    return max(width - settings.container_padding, settings.min_container_width)


def compute_geometry(
    image_size: tuple[int, int],
    bounds: ContainerBounds,
    size: float,
    edge_thickness: float,
    settings: Settings | None = None,
) -> ContentGeometry:
    """Compute the displayed content size and the border around it.

    Args:
        image_size: Natural ``(width, height)`` of the source image.
        bounds: Host container size.
        size: ``size`` slider value in ``[0, 100]``.
        edge_thickness: ``edge_thickness`` slider value in ``[0, 100]``.
        settings: Renderer settings.

    Returns:
        The ``ContentGeometry`` for this render. Degenerate images resolve
        to ``min_content_size`` and a degenerate container width to the
        default width, instead of failing.
    """
    settings = settings or Settings()
    min_size = settings.min_content_size

    natural_w, natural_h = image_size
    if natural_w <= 0 or natural_h <= 0:
        logger.warning(
            "Degenerate image size %s, using %dpx minimum.", image_size, min_size
        )
        natural_w = max(natural_w, min_size)
        natural_h = max(natural_h, min_size)

    max_width = max_content_width(bounds, settings)
    max_height = settings.max_content_height

    content_scale = map_range(size, 10, 100, 0.2, 1.0)
    width = natural_w * content_scale
    height = natural_h * content_scale
    aspect = natural_w / natural_h

    if width > max_width:
        width = max_width
        height = width / aspect
    if height > max_height:
        height = max_height
        width = height * aspect

    content_width = max(int(round(width)), min_size)
    content_height = max(int(round(height)), min_size)

    border = map_range(
        edge_thickness,
        0,
        100,
        0,
        min(content_width, content_height) * settings.border_fraction,
    )
    border = max(border, 0.0)

    geometry = ContentGeometry(
        content_width=content_width,
        content_height=content_height,
        border_thickness=border,
        content_scale=content_scale,
    )
    logger.debug(
        "Geometry: content %dx%d, border %.2f, canvas %s",
        content_width,
        content_height,
        border,
        geometry.canvas_size,
    )
    return geometry
