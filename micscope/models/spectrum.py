"""Spectrum-related data models."""

from dataclasses import dataclass

import numpy as np


@dataclass(frozen=True)
class SpectrumSnapshot:
    """One published spectrum with the frequency axis it is aligned to.

    Both arrays are read-only and the same length, ``frame_size // 2``.
    Consumers treat each snapshot as a full replacement of the previous one.
    """
    magnitudes: np.ndarray  # dB per bin
    frequencies: np.ndarray  # Hz per bin
    sequence_number: int
    timestamp: float
    sample_rate: float
    frame_size: int

    def __post_init__(self):
        if len(self.magnitudes) != len(self.frequencies):
            raise ValueError(
                f"Spectrum and frequency axis differ in length: "
                f"{len(self.magnitudes)} != {len(self.frequencies)}")

    @property
    def bin_count(self) -> int:
        return len(self.magnitudes)


@dataclass
class AnalyzerStats:
    """Counters kept by the spectrum analyzer for the current session."""
    is_running: bool
    frame_size: int
    sample_rate: float
    frames_processed: int
    spectra_published: int
    spectra_dropped: int
