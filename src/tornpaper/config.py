"""Renderer settings loaded from environment and .env files."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Global configuration for the torn-paper renderer.

    Values are loaded in order: field defaults → .env file → environment
    variables. Environment variables are prefixed with ``TORN_``.

    Attributes:
        container_padding: Horizontal padding subtracted from the host
            container width before the content is fitted into it.
        min_container_width: Lower bound for the usable container width.
        default_container_width: Width assumed when the host reports none.
        max_content_height: Fixed maximum height of the content area.
        min_content_size: Smallest content edge in pixels. Degenerate images
            or containers fall back to this size.
        border_fraction: Largest border thickness as a share of the
            content's short side.
        tear_depth_fraction: Largest tear depth as a share of the border.
        jitter_fraction: Largest fibrous jitter as a share of the tear depth.
        key_point_range: Key-point count mapped from ``edge_details``.
        segment_range: Segments per edge mapped from ``edge_details``.
        min_segments: Floor for segments per edge.
        curve_steps: Samples per quadratic curve when rasterizing.
        shadow_offset_max: Largest shadow offset in pixels (either sign).
        shadow_blur_max: Largest primary shadow blur in pixels.
        shadow_opacity_max: Largest primary shadow opacity.
        paper_color: RGB fill of the paper.
        texture_opacity_max: Opacity of fiber strokes at full strength.
        grain_amplitude_max: Per-pixel luminance noise at full strength,
            in 8-bit levels.
        fiber_color: RGB colour of the fiber strokes.
        motion_amplitude_max: Float amplitude in pixels at full movement.
        motion_period_range: Float period in seconds, from no movement to
            full movement.
        placeholder_size: Size of the placeholder frame.
        placeholder_background: RGBA fill of the placeholder frame.
        message_no_image: Placeholder text shown before any upload.
        message_decode_failed: Placeholder text shown for unreadable uploads.
        jpeg_quality: Quality used when exporting JPEG.
    """

    model_config = SettingsConfigDict(
        env_prefix="TORN_",
        env_file=".env",
        env_file_encoding="utf-8",
    )

    # --- Container / geometry ---
    container_padding: int = 32
    min_container_width: int = 300
    default_container_width: int = 600
    max_content_height: int = 500
    min_content_size: int = 16
    border_fraction: float = 0.20

    # --- Tear ---
    tear_depth_fraction: float = 0.40
    jitter_fraction: float = 0.20
    key_point_range: tuple[int, int] = (6, 40)
    segment_range: tuple[int, int] = (12, 60)
    min_segments: int = 5
    curve_steps: int = 6

    # --- Shadow ---
    shadow_offset_max: float = 25.0
    shadow_blur_max: float = 50.0
    shadow_opacity_max: float = 0.75

    # --- Paper & texture ---
    paper_color: tuple[int, int, int] = (253, 251, 245)
    texture_opacity_max: float = 0.25
    grain_amplitude_max: float = 16.0
    fiber_color: tuple[int, int, int] = (180, 170, 150)

    # --- Motion ---
    motion_amplitude_max: float = 12.0
    motion_period_range: tuple[float, float] = (15.0, 5.0)

    # --- Placeholder ---
    placeholder_size: tuple[int, int] = (600, 450)
    placeholder_background: tuple[int, int, int, int] = (244, 244, 245, 255)
    message_no_image: str = "Upload an image to see the preview"
    message_decode_failed: str = "Could not load image. Please try a different file."

    # --- Export ---
    jpeg_quality: int = 92
