"""Hann analysis window."""

import numpy as np

from ..config.session import ConfigurationError


def hann_window(length: int, scale: float = 1.0) -> np.ndarray:
    """Return ``scale * 0.5 * (1 - cos(2*pi*n / (N-1)))`` as a read-only float32 array."""
    if length < 1:
        raise ConfigurationError(f"Window length must be positive, got {length!r}")

    if length == 1:
        coefficients = np.full(1, scale, dtype=np.float64)
    else:
        n = np.arange(length, dtype=np.float64)
        coefficients = scale * 0.5 * (1.0 - np.cos(2.0 * np.pi * n / (length - 1)))

    window = coefficients.astype(np.float32)
    window.setflags(write=False)
    return window


class WindowingStage:
    """Applies the session's window coefficients to analysis frames."""

    def __init__(self, frame_size: int, scale: float = 1.0):
        self.coefficients = hann_window(frame_size, scale)
        self._windowed = np.empty(frame_size, dtype=np.float32)

    def apply(self, frame: np.ndarray) -> np.ndarray:
        # Result lives in a reused buffer
        return np.multiply(frame, self.coefficients, out=self._windowed)
