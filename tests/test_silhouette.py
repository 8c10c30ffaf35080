"""Tests for tornpaper.core.silhouette.

Geometry is checked on the pure ``Silhouette`` data; only the mask tests
touch Pillow.
"""

import numpy as np
import pytest

from tornpaper.config import Settings
from tornpaper.core.geometry import compute_geometry
from tornpaper.core.noise import generate_profiles
from tornpaper.core.silhouette import (
    build_silhouette,
    rectangle_silhouette,
    segment_count,
    silhouette_mask,
    tear_band,
    tear_depths,
    uses_tear,
)
from tornpaper.schemas import ContainerBounds, StyleParameters

BOUNDS = ContainerBounds(width=1032, height=800)


def _build(params: StyleParameters, seed: int = 0, profile_seed: int = 99):
    geometry = compute_geometry((300, 200), BOUNDS, params.size, params.edge_thickness)
    profiles = generate_profiles(
        params.edge_details, params.edge_intensity, np.random.default_rng(profile_seed)
    )
    silhouette = build_silhouette(geometry, params, profiles, np.random.default_rng(seed))
    return geometry, silhouette


# ---------------------------------------------------------------------------
# Short-circuit
# ---------------------------------------------------------------------------


class TestRectangleShortCircuit:
    """A plain rectangle is used when there is nothing to tear."""

    def test_zero_intensity_is_rectangle(self) -> None:
        params = StyleParameters(size=50, edge_thickness=35, edge_intensity=0)
        geometry, silhouette = _build(params)
        width, height = geometry.canvas_size
        assert silhouette.torn is False
        assert silhouette.anchors == ((0.0, 0.0), (width, 0.0), (width, height), (0.0, height))

    def test_zero_border_is_rectangle(self) -> None:
        params = StyleParameters(size=100, edge_thickness=0, edge_intensity=100)
        _, silhouette = _build(params)
        assert silhouette.torn is False

    def test_all_zero_is_rectangle(self) -> None:
        _, silhouette = _build(StyleParameters.neutral())
        assert silhouette.torn is False
        assert silhouette.max_deviation() == 0.0

    def test_uses_tear(self) -> None:
        params = StyleParameters(size=100, edge_thickness=50, edge_intensity=10)
        geometry = compute_geometry((300, 200), BOUNDS, 100, 50)
        assert uses_tear(geometry, params) is True


# ---------------------------------------------------------------------------
# Torn outline
# ---------------------------------------------------------------------------


class TestTornSilhouette:
    """Validate anchors, deviations, and curve chaining."""

    def test_segment_count_floor(self) -> None:
        assert segment_count(0) >= Settings().min_segments
        assert segment_count(100) > segment_count(0)

    def test_anchor_count(self, torn_params: StyleParameters) -> None:
        _, silhouette = _build(torn_params)
        assert silhouette.torn is True
        assert len(silhouette.anchors) == 4 * segment_count(torn_params.edge_details)
        assert len(silhouette.deviations) == len(silhouette.anchors)

    def test_deviation_never_exceeds_border(self, max_params: StyleParameters) -> None:
        for seed in range(5):
            geometry, silhouette = _build(max_params, seed=seed, profile_seed=seed)
            assert silhouette.max_deviation() <= geometry.border_thickness

    def test_deviation_within_tear_depth(self, max_params: StyleParameters) -> None:
        geometry, silhouette = _build(max_params)
        depth, jitter = tear_depths(geometry, max_params)
        assert silhouette.max_deviation() <= depth + jitter + 1e-9

    def test_anchors_inside_canvas(self, max_params: StyleParameters) -> None:
        geometry, silhouette = _build(max_params)
        width, height = geometry.canvas_size
        for x, y in silhouette.anchors:
            assert -1e-9 <= x <= width + 1e-9
            assert -1e-9 <= y <= height + 1e-9

    def test_anchors_stay_out_of_content(self, torn_params: StyleParameters) -> None:
        """The tear lives in the border band and never cuts the photo."""
        geometry, silhouette = _build(torn_params)
        width, height = geometry.canvas_size
        border = geometry.border_thickness
        for x, y in silhouette.anchors:
            in_content = border < x < width - border and border < y < height - border
            assert not in_content

    def test_curves_chain_and_close(self, torn_params: StyleParameters) -> None:
        _, silhouette = _build(torn_params)
        segments = silhouette.segments
        for current, following in zip(segments, segments[1:]):
            assert current[2] == following[0]
        assert segments[-1][2] == segments[0][0]

    def test_anchors_are_control_points(self, torn_params: StyleParameters) -> None:
        _, silhouette = _build(torn_params)
        assert tuple(control for _, control, _ in silhouette.segments) == silhouette.anchors

    def test_flatten_samples_every_segment(self, torn_params: StyleParameters) -> None:
        _, silhouette = _build(torn_params)
        assert len(silhouette.flatten(4)) == 4 * len(silhouette.segments)

    def test_deeper_tear_with_intensity(self, torn_params: StyleParameters) -> None:
        shallow = torn_params.model_copy(update={"edge_intensity": 20.0})
        _, deep_silhouette = _build(torn_params)
        _, shallow_silhouette = _build(shallow)
        assert shallow_silhouette.max_deviation() < deep_silhouette.max_deviation()


class TestDeterminism:
    """Fixed profiles give a fixed outline apart from the fibrous jitter."""

    def test_same_outline_without_jitter(self, torn_params: StyleParameters) -> None:
        _, first = _build(torn_params, seed=1)
        _, second = _build(torn_params, seed=2)
        assert first == second

    def test_jitter_varies_with_random_source(self, torn_params: StyleParameters) -> None:
        params = torn_params.model_copy(update={"cutout_style": 100.0})
        _, first = _build(params, seed=1)
        _, second = _build(params, seed=2)
        assert first.anchors != second.anchors

    def test_jitter_is_reproducible_with_seed(self, torn_params: StyleParameters) -> None:
        params = torn_params.model_copy(update={"cutout_style": 100.0})
        _, first = _build(params, seed=5)
        _, second = _build(params, seed=5)
        assert first == second


# ---------------------------------------------------------------------------
# Rasterization
# ---------------------------------------------------------------------------


class TestSilhouetteMask:
    def test_rectangle_mask_is_solid(self) -> None:
        mask = silhouette_mask(rectangle_silhouette(20.0, 10.0), (20, 10))
        assert mask.mode == "L"
        assert np.all(np.array(mask) == 255)

    def test_torn_mask(self, torn_params: StyleParameters) -> None:
        geometry, silhouette = _build(torn_params)
        mask = silhouette_mask(silhouette, geometry.canvas_size)
        arr = np.array(mask)
        width, height = geometry.canvas_size

        assert mask.size == (width, height)
        assert arr[height // 2, width // 2] == 255
        assert arr[0, 0] == 0
        assert arr[height - 1, width - 1] == 0

    @pytest.mark.parametrize("steps", [1, 6])
    def test_content_area_fully_covered(self, torn_params: StyleParameters, steps: int) -> None:
        geometry, silhouette = _build(torn_params)
        arr = np.array(silhouette_mask(silhouette, geometry.canvas_size, steps))
        x0, y0 = geometry.content_offset
        content = arr[y0:y0 + geometry.content_height, x0:x0 + geometry.content_width]
        assert np.all(content == 255)


class TestThinBorders:
    """The tear never reaches the photo, however thin the border."""

    SMALL = (100, 80)

    def _thin(self, edge_thickness: float, seed: int = 0):
        params = StyleParameters(
            size=100, edge_thickness=edge_thickness, edge_intensity=100, cutout_style=100
        )
        geometry = compute_geometry(self.SMALL, BOUNDS, params.size, params.edge_thickness)
        profiles = generate_profiles(
            params.edge_details, params.edge_intensity, np.random.default_rng(seed)
        )
        silhouette = build_silhouette(geometry, params, profiles, np.random.default_rng(seed))
        return geometry, silhouette

    def test_sub_pixel_border_is_rectangle(self) -> None:
        geometry, silhouette = self._thin(2.98)
        assert geometry.content_offset == (0, 0)
        assert uses_tear(geometry, StyleParameters(edge_intensity=100)) is False
        assert silhouette.torn is False

    def test_band_respects_rounded_border(self) -> None:
        geometry, _ = self._thin(7.94)
        offset, _ = geometry.content_offset
        assert offset == 1
        assert tear_band(geometry) <= offset - 0.5

    @pytest.mark.parametrize("edge_thickness", [1, 3, 5, 7.94, 10, 16, 25, 40, 60])
    def test_anchors_stay_out_of_content(self, edge_thickness: float) -> None:
        geometry, silhouette = self._thin(edge_thickness)
        width, height = geometry.canvas_size
        offset, _ = geometry.content_offset
        for x, y in silhouette.anchors:
            in_content = offset < x < width - offset and offset < y < height - offset
            assert not in_content

    @pytest.mark.parametrize("edge_thickness", [1, 3, 5, 7.94, 10, 16, 25, 40, 60])
    @pytest.mark.parametrize("seed", [0, 1, 2])
    def test_content_stays_opaque(self, edge_thickness: float, seed: int) -> None:
        geometry, silhouette = self._thin(edge_thickness, seed)
        arr = np.array(silhouette_mask(silhouette, geometry.canvas_size))
        x0, y0 = geometry.content_offset
        content = arr[y0:y0 + geometry.content_height, x0:x0 + geometry.content_width]
        assert np.all(content == 255)
