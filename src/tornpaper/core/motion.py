"""Floating-animation hints derived from the ``movement`` slider."""

from __future__ import annotations

from tornpaper.config import Settings
from tornpaper.core.range_mapper import map_range
from tornpaper.schemas import MotionHints


def map_motion(movement: float, settings: Settings | None = None) -> MotionHints:
    """Convert ``movement`` into an amplitude and period.

    Higher movement means a larger float and a shorter, more noticeable
    cycle. At ``0`` the hints are disabled and the presentation layer
    should not run the loop.

    Args:
        movement: ``movement`` slider value in ``[0, 100]``.
        settings: Renderer settings.

    Returns:
        The ``MotionHints`` for the presentation layer.
    """
    settings = settings or Settings()
    slow, fast = settings.motion_period_range
    return MotionHints(
        amplitude_px=max(0.0, map_range(movement, 0, 100, 0, settings.motion_amplitude_max)),
        period_s=map_range(movement, 0, 100, slow, fast),
        enabled=movement > 0.0,
    )
