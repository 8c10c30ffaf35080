"""Edge noise profiles for the torn-paper silhouette.

Each edge gets its own low-frequency profile: a few sine harmonics with
random phases plus a smaller uniform perturbation, tapered to zero at
both ends so neighbouring edges meet cleanly at the corners.
"""

from __future__ import annotations

import logging
import math

import numpy as np

from tornpaper.config import Settings
from tornpaper.core.range_mapper import clamp, cosine_interpolate, map_range
from tornpaper.schemas import Edge, EdgeNoiseProfiles

logger = logging.getLogger(__name__)

# (frequency in cycles per edge, weight); weights sum to 1.
_HARMONICS: tuple[tuple[float, float], ...] = ((1.0, 0.55), (2.0, 0.30), (3.0, 0.15))
_HARMONIC_SHARE = 0.75
_RANDOM_SHARE = 0.25


def key_point_count(edge_details: float, settings: Settings | None = None) -> int:
    """Number of key points per profile for a given ``edge_details``.

    Args:
        edge_details: Detail slider value in ``[0, 100]``.
        settings: Renderer settings (provides ``key_point_range``).

    Returns:
        Key-point count, never below 3.
    """
    settings = settings or Settings()
    lo, hi = settings.key_point_range
    return max(3, math.floor(map_range(edge_details, 0, 100, lo, hi)))


def generate_profile(num_key_points: int, rng: np.random.Generator) -> tuple[float, ...]:
    """Build one signed profile with ``num_key_points`` samples in ``[-1, 1]``.

    Args:
        num_key_points: Profile length (at least 2).
        rng: Random source for phases and perturbation.

    Returns:
        The profile samples.
    """
    t = np.linspace(0.0, 1.0, num_key_points)

    wave = np.zeros_like(t)
    for frequency, weight in _HARMONICS:
        phase = rng.uniform(0.0, 2.0 * math.pi)
        wave += weight * np.sin(2.0 * math.pi * frequency * t + phase)

    perturbation = rng.uniform(-1.0, 1.0, size=num_key_points)
    envelope = np.sqrt(np.sin(math.pi * t).clip(min=0.0))

    samples = envelope * (_HARMONIC_SHARE * wave + _RANDOM_SHARE * perturbation)
    return tuple(float(s) for s in np.clip(samples, -1.0, 1.0))


def generate_profiles(
    edge_details: float,
    edge_intensity: float,
    rng: np.random.Generator,
    settings: Settings | None = None,
) -> EdgeNoiseProfiles:
    """Generate an independent profile for each of the four edges.

    *edge_intensity* does not shape the samples; it is recorded so the
    owner can tell when the profiles must be regenerated.

    Args:
        edge_details: Detail slider value, sets the key-point count.
        edge_intensity: Intensity slider value, stored as part of the key.
        rng: Random source.
        settings: Renderer settings.

    Returns:
        Fresh ``EdgeNoiseProfiles``.
    """
    count = key_point_count(edge_details, settings)
    profiles = {edge.value: generate_profile(count, rng) for edge in Edge}
    logger.debug(
        "Generated edge noise profiles: %d key points (details=%s, intensity=%s)",
        count,
        edge_details,
        edge_intensity,
    )
    return EdgeNoiseProfiles(
        **profiles,
        edge_details=edge_details,
        edge_intensity=edge_intensity,
    )


def sample_profile(profile: tuple[float, ...], progress: float) -> float:
    """Cosine-interpolate a profile at *progress* along its edge.

    Args:
        profile: Key-point samples.
        progress: Position along the edge in ``[0, 1]``.

    Returns:
        The unscaled deviation at that position.
    """
    last = len(profile) - 1
    if last <= 0:
        return profile[0] if profile else 0.0

    position = clamp(progress, 0.0, 1.0) * last
    index = min(int(math.floor(position)), last)
    following = min(index + 1, last)
    return cosine_interpolate(profile[index], profile[following], position - index)
