"""Render session: the only state carried between renders.

A session owns the cached edge noise profiles, the current source, and
at most one pending render request. Profiles are regenerated only when
``edge_details`` or ``edge_intensity`` change, and are discarded when a
new source arrives, so the tear does not jitter while unrelated sliders
move. The fibrous jitter and paper grain are seeded from a value drawn
together with the profiles, so a repaint with the same parameters is
pixel-identical.

Typical usage::

    from tornpaper.session import RenderSession
    from tornpaper.schemas import ContainerBounds, StyleParameters

    session = RenderSession()
    source = session.load(uploaded_bytes)
    output = session.render(source, StyleParameters(), ContainerBounds())
    output.image.save("torn.png")
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

import numpy as np

from tornpaper.config import Settings
from tornpaper.core.compositor import compose_frame, render_placeholder
from tornpaper.core.geometry import compute_geometry
from tornpaper.core.image_processing import adjust_tone, decode_source
from tornpaper.core.motion import map_motion
from tornpaper.core.noise import generate_profiles
from tornpaper.core.silhouette import build_silhouette, rectangle_silhouette
from tornpaper.errors import DecodeFailureError, ToneAdjustmentError
from tornpaper.schemas import (
    ContainerBounds,
    DecodeFailure,
    EdgeNoiseProfiles,
    MotionHints,
    RenderOutput,
    SourceImage,
    StyleParameters,
    ToneAdjustments,
)

logger = logging.getLogger(__name__)

Source = SourceImage | DecodeFailure | None


@dataclass(frozen=True)
class RenderRequest:
    """A render waiting to run; newer requests replace older ones."""

    source: Source
    params: StyleParameters
    bounds: ContainerBounds
    tone: ToneAdjustments | None = None


class RenderSession:
    """Stateful front door of the rendering pipeline.

    Args:
        settings: Renderer settings. Loaded from the environment when
            omitted.
        rng: Random source for noise, jitter and texture. Pass a seeded
            ``numpy.random.default_rng`` for reproducible output.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        rng: np.random.Generator | None = None,
    ) -> None:
        self._settings = settings or Settings()
        self._rng = rng if rng is not None else np.random.default_rng()
        self._profiles: EdgeNoiseProfiles | None = None
        self._frame_seed: int | None = None
        self._source: Source = None
        self._pending: RenderRequest | None = None

    @property
    def settings(self) -> Settings:
        return self._settings

    @property
    def profiles(self) -> EdgeNoiseProfiles | None:
        """Currently cached noise profiles, if any."""
        return self._profiles

    @property
    def pending(self) -> RenderRequest | None:
        return self._pending

    # ------------------------------------------------------------------
    # Source handling
    # ------------------------------------------------------------------

    def load(self, data: bytes) -> SourceImage | DecodeFailure:
        """Decode uploaded bytes, absorbing failures.

        Args:
            data: Raw upload contents.

        Returns:
            The decoded ``SourceImage``, or a ``DecodeFailure`` carrying
            the placeholder message.
        """
        try:
            return decode_source(data)
        except DecodeFailureError as exc:
            logger.warning("Decode failed: %s", exc)
            return DecodeFailure(message=self._settings.message_decode_failed)

    def _set_source(self, source: Source) -> None:
        """Track the current source, dropping profiles when it changes."""
        if source is self._source:
            return
        if self._profiles is not None:
            logger.info("New source, discarding cached noise profiles.")
        self._profiles = None
        self._frame_seed = None
        self._source = source

    def reset(self) -> None:
        """End the session: forget the source, profiles and pending work."""
        self._profiles = None
        self._frame_seed = None
        self._source = None
        self._pending = None

    # ------------------------------------------------------------------
    # Noise profiles
    # ------------------------------------------------------------------

    def ensure_profiles(self, params: StyleParameters) -> EdgeNoiseProfiles:
        """Return cached profiles, regenerating them if their key changed.

        Args:
            params: Current style parameters.

        Returns:
            Profiles matching ``params.noise_key``.
        """
        if self._profiles is None or self._profiles.key != params.noise_key:
            logger.info(
                "Regenerating edge noise profiles (details=%s, intensity=%s)",
                params.edge_details,
                params.edge_intensity,
            )
            self._profiles = generate_profiles(
                params.edge_details,
                params.edge_intensity,
                self._rng,
                self._settings,
            )
            self._frame_seed = int(self._rng.integers(0, 2**32))
        return self._profiles

    def _frame_rngs(self) -> tuple[np.random.Generator, np.random.Generator]:
        """Fresh jitter and grain generators from the frozen frame seed.

        Both are rebuilt on every render so repainting the same parameters
        reproduces the same fibres and grain.
        """
        jitter_seq, grain_seq = np.random.SeedSequence(self._frame_seed).spawn(2)
        return np.random.default_rng(jitter_seq), np.random.default_rng(grain_seq)

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def render(
        self,
        source: Source,
        params: StyleParameters,
        bounds: ContainerBounds | None = None,
        tone: ToneAdjustments | None = None,
    ) -> RenderOutput:
        """Render one frame.

        Args:
            source: Decoded source, a decode failure, or ``None`` when
                nothing has been uploaded.
            params: Style parameters.
            bounds: Host container size.
            tone: Optional photo filters for the source.

        Returns:
            The composited frame plus motion hints. Missing or undecodable
            sources yield a placeholder frame instead of an error.
        """
        bounds = bounds or ContainerBounds()
        self._set_source(source)
        motion = map_motion(params.movement, self._settings)

        if source is None:
            return self._placeholder(self._settings.message_no_image, False, motion)
        if isinstance(source, DecodeFailure):
            return self._placeholder(source.message, True, motion)

        geometry = compute_geometry(
            source.size,
            bounds,
            params.size,
            params.edge_thickness,
            self._settings,
        )
        if params.has_effects():
            profiles = self.ensure_profiles(params)
            jitter_rng, grain_rng = self._frame_rngs()
            silhouette = build_silhouette(
                geometry, params, profiles, jitter_rng, self._settings
            )
        else:
            logger.debug("No effects active, skipping noise generation.")
            grain_rng = self._rng
            width, height = geometry.canvas_size
            silhouette = rectangle_silhouette(float(width), float(height))

        image = source.image
        if tone is not None:
            try:
                image = adjust_tone(image, tone)
            except ToneAdjustmentError as exc:
                logger.warning("Rendering without tone adjustments: %s", exc)

        frame = compose_frame(image, geometry, silhouette, params, grain_rng, self._settings)
        return RenderOutput(
            image=frame,
            motion=motion,
            geometry=geometry,
            silhouette=silhouette,
            format=source.format,
        )

    def _placeholder(
        self, message: str, is_error: bool, motion: MotionHints
    ) -> RenderOutput:
        frame = render_placeholder(message, is_error, self._settings)
        return RenderOutput(
            image=frame,
            motion=motion,
            is_placeholder=True,
            message=message,
        )

    # ------------------------------------------------------------------
    # Latest-request scheduling
    # ------------------------------------------------------------------

    def submit(
        self,
        source: Source,
        params: StyleParameters,
        bounds: ContainerBounds | None = None,
        tone: ToneAdjustments | None = None,
    ) -> None:
        """Queue a render, replacing any request that has not run yet."""
        if self._pending is not None:
            logger.debug("Superseding stale render request.")
        self._pending = RenderRequest(
            source=source,
            params=params,
            bounds=bounds or ContainerBounds(),
            tone=tone,
        )

    def flush(self) -> RenderOutput | None:
        """Run the most recent pending request, if there is one."""
        request, self._pending = self._pending, None
        if request is None:
            return None
        return self.render(request.source, request.params, request.bounds, request.tone)
