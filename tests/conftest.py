"""Shared fixtures for the torn-paper test suite."""

import io

import numpy as np
import pytest
from PIL import Image

from tornpaper.config import Settings
from tornpaper.schemas import SourceImage, StyleParameters


@pytest.fixture
def settings() -> Settings:
    """Default renderer settings."""
    return Settings()


@pytest.fixture
def rng() -> np.random.Generator:
    """A seeded random source for reproducible geometry."""
    return np.random.default_rng(1234)


@pytest.fixture
def rgb_image() -> Image.Image:
    """A small 100x80 RGB test image with a gradient."""
    arr = np.zeros((80, 100, 3), dtype=np.uint8)
    arr[:, :, 0] = np.linspace(0, 255, 100, dtype=np.uint8)  # red gradient
    arr[:, :, 1] = 128
    arr[:, :, 2] = 64
    return Image.fromarray(arr)


@pytest.fixture
def rgba_image(rgb_image: Image.Image) -> Image.Image:
    """A small RGBA test image (RGB + full-opaque alpha)."""
    return rgb_image.convert("RGBA")


@pytest.fixture
def photo() -> Image.Image:
    """A 300x200 RGB 'photo' with distinct pixels in each row and column."""
    arr = np.zeros((200, 300, 3), dtype=np.uint8)
    arr[:, :, 0] = np.linspace(20, 235, 300, dtype=np.uint8)[np.newaxis, :]
    arr[:, :, 1] = np.linspace(30, 220, 200, dtype=np.uint8)[:, np.newaxis]
    arr[:, :, 2] = 90
    return Image.fromarray(arr)


@pytest.fixture
def source(photo: Image.Image) -> SourceImage:
    """The 300x200 photo wrapped as a decoded PNG upload."""
    return SourceImage(image=photo, format="PNG")


@pytest.fixture
def png_bytes(rgb_image: Image.Image) -> bytes:
    buffer = io.BytesIO()
    rgb_image.save(buffer, format="PNG")
    return buffer.getvalue()


@pytest.fixture
def jpeg_bytes(rgb_image: Image.Image) -> bytes:
    buffer = io.BytesIO()
    rgb_image.save(buffer, format="JPEG")
    return buffer.getvalue()


@pytest.fixture
def max_params() -> StyleParameters:
    """Every control at its maximum."""
    return StyleParameters(**{name: 100.0 for name in StyleParameters.model_fields})


@pytest.fixture
def torn_params() -> StyleParameters:
    """Full-size content with a deep tear and no random jitter, shadow or grain."""
    return StyleParameters(
        size=100,
        edge_thickness=100,
        edge_intensity=100,
        edge_details=50,
        cutout_style=0,
        texture_strength=0,
        shadow_offset_x=50,
        shadow_offset_y=50,
        shadow_blur=0,
        shadow_strength=0,
        movement=0,
    )
