"""Scalar mapping helpers shared by every pipeline stage."""

from __future__ import annotations

import math


def map_range(
    value: float,
    in_min: float,
    in_max: float,
    out_min: float,
    out_max: float,
) -> float:
    """Linearly map *value* from ``[in_min, in_max]`` to ``[out_min, out_max]``.

    The result is not clamped, so values outside the input range
    extrapolate. An empty input range maps everything to *out_min*.

    Args:
        value: The value to map.
        in_min: Lower bound of the input range.
        in_max: Upper bound of the input range.
        out_min: Value returned for *in_min*.
        out_max: Value returned for *in_max*.

    Returns:
        The mapped value.
    """
    if in_min == in_max:
        return out_min
    return (value - in_min) * (out_max - out_min) / (in_max - in_min) + out_min


def cosine_interpolate(a: float, b: float, t: float) -> float:
    """Blend *a* toward *b* with a cosine-eased weight.

    Args:
        a: Value at ``t = 0``.
        b: Value at ``t = 1``.
        t: Position between the samples, in ``[0, 1]``.

    Returns:
        ``a`` and ``b`` mixed by ``(1 - cos(tπ)) / 2``.
    """
    weight = (1.0 - math.cos(t * math.pi)) / 2.0
    return a * (1.0 - weight) + b * weight


def clamp(value: float, lo: float, hi: float) -> float:
    """Return *value* limited to ``[lo, hi]``."""
    return min(max(value, lo), hi)
