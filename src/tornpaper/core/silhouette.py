"""Torn-paper outline construction and rasterization.

The outline is built as plain data first (anchors, deviations and
quadratic curve triples in a ``Silhouette``) and only then handed to
Pillow, so the geometry can be tested without drawing anything.

Edges are walked clockwise starting at the top-left corner. Each anchor
sits on a nominal edge line inset from the canvas edge by the deepest
possible tear, and is pushed perpendicular to that line by the
interpolated noise profile plus a small fibrous jitter.
"""

from __future__ import annotations

import logging
import math

import numpy as np
from PIL import Image, ImageDraw

from tornpaper.config import Settings
from tornpaper.core.noise import sample_profile
from tornpaper.core.range_mapper import map_range
from tornpaper.schemas import (
    ContentGeometry,
    Edge,
    EdgeNoiseProfiles,
    Point,
    Silhouette,
    StyleParameters,
)

logger = logging.getLogger(__name__)

# Border thickness below which the tear is skipped.
_MIN_TEAR_BORDER = 0.01

# Gap kept between the deepest tear and the content offset, in pixels.
_CONTENT_MARGIN = 0.5

# Supersampling factor for anti-aliased masks.
_MASK_SUPERSAMPLE = 4


def segment_count(edge_details: float, settings: Settings | None = None) -> int:
    """Anchors per edge for a given ``edge_details``."""
    settings = settings or Settings()
    lo, hi = settings.segment_range
    return max(settings.min_segments, math.floor(map_range(edge_details, 0, 100, lo, hi)))


def uses_tear(geometry: ContentGeometry, params: StyleParameters) -> bool:
    """Return ``True`` if the frame gets a torn outline at all.

    A border that rounds to less than one whole pixel leaves no room on
    the canvas for a tear, so the outline stays rectangular.
    """
    offset, _ = geometry.content_offset
    return (
        geometry.border_thickness > _MIN_TEAR_BORDER
        and offset >= 1
        and params.edge_intensity > 0.0
    )


def tear_band(geometry: ContentGeometry) -> float:
    """Border width available to the tear, in pixels.

    The canvas border is the rounded border thickness, so the band is
    bounded by that integer offset minus a half-pixel margin. The deepest
    anchor then never reaches the content area after anti-aliasing.
    """
    offset, _ = geometry.content_offset
    return max(0.0, min(geometry.border_thickness, offset - _CONTENT_MARGIN))


def tear_depths(
    geometry: ContentGeometry,
    params: StyleParameters,
    settings: Settings | None = None,
) -> tuple[float, float]:
    """Return ``(base_max_deviation, fibrous_jitter)`` in pixels."""
    settings = settings or Settings()
    depth = map_range(
        params.edge_intensity,
        0,
        100,
        0,
        tear_band(geometry) * settings.tear_depth_fraction,
    )
    jitter = map_range(params.cutout_style, 0, 100, 0, depth * settings.jitter_fraction)
    return depth, jitter


def rectangle_silhouette(width: float, height: float) -> Silhouette:
    """Plain outline covering the whole canvas."""
    corners: tuple[Point, ...] = ((0.0, 0.0), (width, 0.0), (width, height), (0.0, height))
    segments = tuple(
        (corners[i], corners[i], corners[(i + 1) % 4]) for i in range(4)
    )
    return Silhouette(
        anchors=corners,
        deviations=(0.0,) * 4,
        segments=segments,
        torn=False,
    )


def _smooth_segments(anchors: list[Point]) -> tuple[tuple[Point, Point, Point], ...]:
    """Chain quadratic curves through anchor midpoints.

    Each anchor becomes the control point of the curve running from the
    midpoint before it to the midpoint after it, which keeps the closed
    outline tangent-continuous.
    """
    count = len(anchors)
    midpoints = [
        (
            (anchors[i][0] + anchors[(i + 1) % count][0]) / 2.0,
            (anchors[i][1] + anchors[(i + 1) % count][1]) / 2.0,
        )
        for i in range(count)
    ]
    return tuple(
        (midpoints[i - 1], anchors[i], midpoints[i]) for i in range(count)
    )


def build_silhouette(
    geometry: ContentGeometry,
    params: StyleParameters,
    profiles: EdgeNoiseProfiles,
    rng: np.random.Generator,
    settings: Settings | None = None,
) -> Silhouette:
    """Build the closed torn outline for one render.

    Args:
        geometry: Canvas and border dimensions.
        params: Style parameters (tear depth, detail and jitter).
        profiles: Noise profiles for the four edges.
        rng: Random source for the fibrous jitter.
        settings: Renderer settings.

    Returns:
        A torn ``Silhouette``, or the plain canvas rectangle when the
        border is negligible or ``edge_intensity`` is zero.
    """
    settings = settings or Settings()
    width, height = geometry.canvas_size

    if not uses_tear(geometry, params):
        return rectangle_silhouette(float(width), float(height))

    depth, jitter = tear_depths(geometry, params, settings)
    inset = depth + jitter
    segments = segment_count(params.edge_details, settings)

    left, top = inset, inset
    right, bottom = width - inset, height - inset
    span_x = right - left
    span_y = bottom - top

    anchors: list[Point] = []
    deviations: list[float] = []

    for edge in Edge:
        profile = profiles.for_edge(edge)
        for i in range(segments):
            progress = i / segments
            deviation = sample_profile(profile, progress) * depth
            slide = 0.0
            if jitter > 0.0:
                deviation += rng.uniform(-jitter, jitter)
                if i > 0:
                    slide = rng.uniform(-0.5, 0.5) * jitter

            # Positive deviation pushes the anchor toward the canvas edge.
            if edge is Edge.TOP:
                point = (left + span_x * progress + slide, top - deviation)
            elif edge is Edge.RIGHT:
                point = (right + deviation, top + span_y * progress + slide)
            elif edge is Edge.BOTTOM:
                point = (right - span_x * progress + slide, bottom + deviation)
            else:
                point = (left - deviation, bottom - span_y * progress + slide)

            anchors.append(point)
            deviations.append(deviation)

    logger.debug(
        "Silhouette: %d anchors, depth %.2f, jitter %.2f", len(anchors), depth, jitter
    )
    return Silhouette(
        anchors=tuple(anchors),
        deviations=tuple(deviations),
        segments=_smooth_segments(anchors),
        torn=True,
    )


def silhouette_mask(
    silhouette: Silhouette,
    size: tuple[int, int],
    steps: int = 6,
) -> Image.Image:
    """Rasterize *silhouette* into an anti-aliased mode ``L`` mask.

    Args:
        silhouette: Outline to fill.
        size: Canvas ``(width, height)``.
        steps: Curve samples per segment.

    Returns:
        A mask with 255 inside the outline and 0 outside.
    """
    if not silhouette.torn:
        return Image.new("L", size, 255)

    scale = _MASK_SUPERSAMPLE
    big = Image.new("L", (size[0] * scale, size[1] * scale), 0)
    polygon = [(x * scale, y * scale) for x, y in silhouette.flatten(steps)]
    ImageDraw.Draw(big).polygon(polygon, fill=255)
    # BOX keeps pixels fully inside the outline at exactly 255.
    return big.resize(size, Image.BOX)
