"""Bin index to frequency mapping."""

import logging

import numpy as np

from ..config.session import ConfigurationError, is_power_of_two, validate_sample_rate

logger = logging.getLogger(__name__)


def build_frequency_axis(sample_rate: float, frame_size: int) -> np.ndarray:
    """Return the read-only Hz value of each of the ``frame_size // 2`` bins.

    Bin ``i`` maps to ``i * sample_rate / frame_size``.
    """
    sample_rate = validate_sample_rate(sample_rate)
    if not is_power_of_two(frame_size) or frame_size < 2:
        raise ConfigurationError(f"frame_size must be a power of two >= 2, got {frame_size!r}")

    resolution = sample_rate / frame_size
    axis = (np.arange(frame_size // 2, dtype=np.float64) * resolution).astype(np.float32)
    axis.setflags(write=False)

    logger.debug(f"Frequency axis: {axis.size} bins, {resolution:.2f} Hz resolution")
    return axis
