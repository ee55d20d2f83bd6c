"""Conversion of complex FFT bins to a decibel magnitude spectrum."""

import math
from typing import Optional

import numpy as np

from ..config.session import ConfigurationError, SPECTRUM_SCALINGS


class SpectrumEstimator:
    """Magnitude, floor and ``20*log10`` for each bin.

    Args:
        frame_size: FFT length the bins came from
        magnitude_floor: Smallest magnitude passed to the logarithm, > 0
        scaling: ``raw`` keeps FFT magnitudes, ``amplitude`` multiplies by 2/N
    """

    def __init__(self, frame_size: int, magnitude_floor: float = 1e-10, scaling: str = "amplitude"):
        if not math.isfinite(magnitude_floor) or magnitude_floor <= 0:
            raise ConfigurationError(f"magnitude_floor must be positive, got {magnitude_floor!r}")
        if scaling not in SPECTRUM_SCALINGS:
            raise ConfigurationError(f"Unknown spectrum scaling {scaling!r}")

        self.frame_size = frame_size
        self.bin_count = frame_size // 2
        self.magnitude_floor = np.float32(magnitude_floor)
        self.scale = np.float32(2.0 / frame_size if scaling == "amplitude" else 1.0)
        self._magnitudes = np.empty(self.bin_count, dtype=np.float32)

    @property
    def floor_db(self) -> float:
        """The decibel value every silent bin reports."""
        return float(20.0 * np.log10(self.magnitude_floor))

    def estimate(self, spectrum: np.ndarray, out: Optional[np.ndarray] = None) -> np.ndarray:
        """Return the dB value of each complex bin as float32."""
        magnitudes = np.abs(spectrum, out=self._magnitudes)
        magnitudes *= self.scale
        np.maximum(magnitudes, self.magnitude_floor, out=magnitudes)

        if out is None:
            out = np.empty(self.bin_count, dtype=np.float32)
        np.log10(magnitudes, out=out)
        out *= np.float32(20.0)
        return out


def normalize_db(db: np.ndarray, db_min: float, db_max: float) -> np.ndarray:
    """Map dB values into ``[0, 1]`` over ``[db_min, db_max]``, clamping outside."""
    if db_min >= db_max:
        raise ConfigurationError(f"db_min must be below db_max, got [{db_min}, {db_max}]")
    values = (np.asarray(db, dtype=np.float32) - np.float32(db_min)) / np.float32(db_max - db_min)
    return np.clip(values, 0.0, 1.0).astype(np.float32)
