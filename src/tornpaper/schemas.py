"""Pydantic data contracts shared across modules.

Every cross-module boundary is typed through one of these schemas.
The pipeline flow is::

    bytes (upload)
        → decode_source()                         → SourceImage | DecodeFailure
    StyleParameters + ContainerBounds
        → compute_geometry()                      → ContentGeometry
        → generate_profiles()                     → EdgeNoiseProfiles
        → build_silhouette()                      → Silhouette
        → compose_frame()                         → PIL.Image (RGBA)
        → map_motion()                            → MotionHints
    RenderSession.render()                        → RenderOutput
"""

from __future__ import annotations

import logging
import math
from enum import Enum

from PIL import Image
from pydantic import BaseModel, Field, field_validator

logger = logging.getLogger(__name__)

Point = tuple[float, float]


def _clamp_field(value, lo: float, hi: float, name: str) -> float:
    """Clamp a raw slider value into ``[lo, hi]``, logging corrections."""
    try:
        number = float(value)
    except (TypeError, ValueError):
        # Let pydantic report values that are not numbers at all.
        return value
    if math.isnan(number):
        logger.warning("Parameter '%s' is NaN, using %s.", name, lo)
        return lo
    clamped = min(max(number, lo), hi)
    if clamped != number:
        logger.warning(
            "Parameter '%s'=%s outside [%s, %s], clamped to %s.",
            name, number, lo, hi, clamped,
        )
    return clamped


# ---------------------------------------------------------------------------
# Style parameters
# ---------------------------------------------------------------------------


class StyleParameters(BaseModel):
    """User-facing torn-paper controls, each normalized to ``[0, 100]``.

    Values outside the range are clamped on construction instead of being
    rejected, so a misbehaving producer can never crash a render.

    Attributes:
        size: Content scale factor.
        edge_thickness: Border width around the content.
        edge_intensity: Tear depth. ``0`` disables the tear entirely.
        edge_details: Tear sampling density and noise key-point count.
        cutout_style: Fine fibrous jitter, independent of tear depth.
        texture_strength: Paper grain opacity and fiber density.
        shadow_offset_x: Horizontal shadow offset, ``50`` is centred.
        shadow_offset_y: Vertical shadow offset, ``50`` is centred.
        shadow_blur: Shadow softness.
        shadow_strength: Shadow opacity. ``0`` disables the shadow.
        movement: Floating animation amplitude and speed.
    """

    model_config = {"frozen": True}

    size: float = Field(default=80.0, ge=0.0, le=100.0)
    edge_thickness: float = Field(default=20.0, ge=0.0, le=100.0)
    edge_intensity: float = Field(default=50.0, ge=0.0, le=100.0)
    edge_details: float = Field(default=50.0, ge=0.0, le=100.0)
    cutout_style: float = Field(default=30.0, ge=0.0, le=100.0)
    texture_strength: float = Field(default=20.0, ge=0.0, le=100.0)
    shadow_offset_x: float = Field(default=55.0, ge=0.0, le=100.0)
    shadow_offset_y: float = Field(default=60.0, ge=0.0, le=100.0)
    shadow_blur: float = Field(default=40.0, ge=0.0, le=100.0)
    shadow_strength: float = Field(default=50.0, ge=0.0, le=100.0)
    movement: float = Field(default=30.0, ge=0.0, le=100.0)

    @field_validator("*", mode="before")
    @classmethod
    def _clamp(cls, value, info):
        return _clamp_field(value, 0.0, 100.0, info.field_name)

    @classmethod
    def neutral(cls) -> StyleParameters:
        """Every control at ``0``: no tear, shadow, texture, or motion."""
        return cls(**{name: 0.0 for name in cls.model_fields})

    @property
    def noise_key(self) -> tuple[float, float]:
        """Parameters that invalidate cached noise profiles when changed."""
        return (self.edge_details, self.edge_intensity)

    def has_effects(self) -> bool:
        """Return ``True`` if any tear, shadow, texture, or motion is active."""
        return (
            (self.edge_thickness > 0.0 and self.edge_intensity > 0.0)
            or self.shadow_strength > 0.0
            or self.texture_strength > 0.0
            or self.movement > 0.0
        )


class ToneAdjustments(BaseModel):
    """Photo filters applied to the source before it is framed.

    Attributes:
        brightness: Percentage, ``100`` means no change.
        contrast: Percentage, ``100`` means no change.
        sepia: Sepia mix in percent.
        grayscale: Desaturate the image completely.
        vignette: Darken the image toward its corners.
    """

    model_config = {"frozen": True}

    brightness: float = Field(default=100.0, ge=0.0, le=200.0)
    contrast: float = Field(default=100.0, ge=0.0, le=200.0)
    sepia: float = Field(default=0.0, ge=0.0, le=100.0)
    grayscale: bool = False
    vignette: bool = False

    @field_validator("brightness", "contrast", mode="before")
    @classmethod
    def _clamp_percent(cls, value, info):
        return _clamp_field(value, 0.0, 200.0, info.field_name)

    @field_validator("sepia", mode="before")
    @classmethod
    def _clamp_sepia(cls, value, info):
        return _clamp_field(value, 0.0, 100.0, info.field_name)

    def has_adjustments(self) -> bool:
        """Return ``True`` if any filter differs from the neutral default."""
        return (
            self.brightness != 100.0
            or self.contrast != 100.0
            or self.sepia > 0.0
            or self.grayscale
            or self.vignette
        )


class ContainerBounds(BaseModel):
    """Size of the host area the rendering is fitted into."""

    width: float = 600.0
    height: float = 500.0


# ---------------------------------------------------------------------------
# Source image
# ---------------------------------------------------------------------------


class SourceImage(BaseModel):
    """A decoded upload, read-only to the pipeline.

    Attributes:
        image: Decoded PIL image of arbitrary mode and size.
        format: Pillow format name of the upload (``"PNG"``, ``"JPEG"``…),
            used to pick the export encoding.
    """

    model_config = {"arbitrary_types_allowed": True, "frozen": True}

    image: Image.Image
    format: str = "PNG"

    @property
    def size(self) -> tuple[int, int]:
        return self.image.size


class DecodeFailure(BaseModel):
    """An upload that could not be decoded.

    Attributes:
        message: User-facing text for the placeholder frame.
    """

    model_config = {"frozen": True}

    message: str


# ---------------------------------------------------------------------------
# Geometry
# ---------------------------------------------------------------------------


class ContentGeometry(BaseModel):
    """Content and border dimensions for one render.

    Attributes:
        content_width: Width of the scaled image in pixels.
        content_height: Height of the scaled image in pixels.
        border_thickness: Exact border width around the content.
        content_scale: Scale factor derived from ``size`` before the
            container clamp.
    """

    model_config = {"frozen": True}

    content_width: int = Field(..., ge=1)
    content_height: int = Field(..., ge=1)
    border_thickness: float = Field(..., ge=0.0)
    content_scale: float

    @property
    def content_size(self) -> tuple[int, int]:
        return (self.content_width, self.content_height)

    @property
    def content_offset(self) -> tuple[int, int]:
        """Top-left pixel of the content area inside the canvas."""
        offset = int(round(self.border_thickness))
        return (offset, offset)

    @property
    def canvas_size(self) -> tuple[int, int]:
        """Output bitmap size: content plus the border on both sides."""
        offset, _ = self.content_offset
        return (self.content_width + 2 * offset, self.content_height + 2 * offset)


# ---------------------------------------------------------------------------
# Noise profiles
# ---------------------------------------------------------------------------


class Edge(str, Enum):
    """The four silhouette edges, in clockwise walking order."""

    TOP = "top"
    RIGHT = "right"
    BOTTOM = "bottom"
    LEFT = "left"


class EdgeNoiseProfiles(BaseModel):
    """One signed deviation profile per silhouette edge.

    Samples lie in ``[-1, 1]`` and are scaled by the tear depth at
    render time.

    Attributes:
        top: Profile for the top edge, walked left to right.
        right: Profile for the right edge, walked top to bottom.
        bottom: Profile for the bottom edge.
        left: Profile for the left edge.
        edge_details: ``edge_details`` value the profiles were built for.
        edge_intensity: ``edge_intensity`` value the profiles were built for.
    """

    model_config = {"frozen": True}

    top: tuple[float, ...]
    right: tuple[float, ...]
    bottom: tuple[float, ...]
    left: tuple[float, ...]
    edge_details: float
    edge_intensity: float

    @property
    def key(self) -> tuple[float, float]:
        return (self.edge_details, self.edge_intensity)

    def for_edge(self, edge: Edge) -> tuple[float, ...]:
        return getattr(self, edge.value)


# ---------------------------------------------------------------------------
# Silhouette
# ---------------------------------------------------------------------------


class Silhouette(BaseModel):
    """Closed outline of the paper in canvas coordinates.

    The outline is pure data: ``segments`` holds quadratic Bézier
    ``(start, control, end)`` triples that chain end-to-start and close
    back on the first start point. Rasterization happens elsewhere.

    Attributes:
        anchors: Sampled edge points in walking order (top, right,
            bottom, left).
        deviations: Perpendicular deviation of each anchor from its
            nominal edge line.
        segments: Quadratic curve triples forming the closed path.
        torn: ``False`` when the outline is the plain canvas rectangle.
    """

    model_config = {"frozen": True}

    anchors: tuple[Point, ...]
    deviations: tuple[float, ...]
    segments: tuple[tuple[Point, Point, Point], ...]
    torn: bool

    def flatten(self, steps: int = 6) -> list[Point]:
        """Sample every curve into a closed polygon.

        Args:
            steps: Samples per curve segment (at least 1).

        Returns:
            Polygon vertices, without repeating the first point.
        """
        if not self.torn:
            return [start for start, _, _ in self.segments]

        steps = max(1, steps)
        polygon: list[Point] = []
        for (x0, y0), (cx, cy), (x1, y1) in self.segments:
            for k in range(steps):
                t = k / steps
                u = 1.0 - t
                polygon.append((
                    u * u * x0 + 2 * u * t * cx + t * t * x1,
                    u * u * y0 + 2 * u * t * cy + t * t * y1,
                ))
        return polygon

    def max_deviation(self) -> float:
        """Largest absolute perpendicular deviation of any anchor."""
        return max((abs(d) for d in self.deviations), default=0.0)


# ---------------------------------------------------------------------------
# Motion & output
# ---------------------------------------------------------------------------


class MotionHints(BaseModel):
    """Floating-animation parameters for the presentation layer.

    Attributes:
        amplitude_px: Peak upward float in pixels.
        period_s: Length of one float cycle in seconds.
        enabled: ``False`` means the presentation layer must not run the
            loop at all.
    """

    model_config = {"frozen": True}

    amplitude_px: float = Field(..., ge=0.0)
    period_s: float = Field(..., gt=0.0)
    enabled: bool

    def offset_at(self, t: float) -> float:
        """Vertical offset at time *t* seconds (negative is up)."""
        if not self.enabled:
            return 0.0
        phase = 2.0 * math.pi * (t / self.period_s)
        return -self.amplitude_px * (1.0 - math.cos(phase)) / 2.0

    def css_variables(self) -> dict[str, str]:
        """Custom properties driving a CSS ``float`` keyframe animation."""
        return {
            "--float-translateY": f"-{self.amplitude_px:g}px",
            "--float-duration": f"{self.period_s:g}s",
        }


class RenderOutput(BaseModel):
    """Result of one render request.

    Attributes:
        image: Composited RGBA bitmap.
        motion: Animation hints derived from ``movement``.
        geometry: Geometry used for the frame, ``None`` for placeholders.
        silhouette: Outline used for the frame, ``None`` for placeholders.
        is_placeholder: ``True`` when no source was rendered.
        message: Placeholder text, if any.
        format: Preferred export format, following the upload.
    """

    model_config = {"arbitrary_types_allowed": True}

    image: Image.Image
    motion: MotionHints
    geometry: ContentGeometry | None = None
    silhouette: Silhouette | None = None
    is_placeholder: bool = False
    message: str | None = None
    format: str = "PNG"
