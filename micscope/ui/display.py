"""Presentation helpers shared by spectrum views."""

import math
from typing import List, Optional, Tuple

import numpy as np

from ..dsp.estimator import normalize_db
from ..models.spectrum import SpectrumSnapshot

FREQUENCY_TICKS_HZ = (20, 50, 100, 200, 500, 1000, 2000, 5000, 10000, 20000)


def reduce_to_bands(values: np.ndarray, band_count: int = 64) -> np.ndarray:
    """Average consecutive bins into at most ``band_count`` bars.

    Each bar covers ``max(1, len(values) // band_count)`` bins; leftover bins
    at the top of the spectrum are not shown.
    """
    values = np.asarray(values, dtype=np.float32)
    if values.size == 0:
        return np.zeros(0, dtype=np.float32)

    bands = max(1, min(values.size, band_count))
    per_band = max(1, values.size // bands)
    return values[:bands * per_band].reshape(bands, per_band).mean(axis=1)


def frequency_position(freq: float, max_freq: float, min_freq: float = 20.0) -> float:
    """Horizontal position in ``[0, 1]`` on a log frequency scale."""
    if max_freq <= min_freq:
        return 0.0
    clamped = min(max(freq, min_freq), max_freq)
    return (math.log10(clamped) - math.log10(min_freq)) / (math.log10(max_freq) - math.log10(min_freq))


def db_position(db: float, db_min: float, db_max: float) -> float:
    """Vertical position in ``[0, 1]``, 0 at ``db_max`` and 1 at ``db_min``."""
    clipped = min(max(db, db_min), db_max)
    return (db_max - clipped) / (db_max - db_min)


def db_ticks(db_min: float, db_max: float, step: float = 20.0) -> List[float]:
    ticks = []
    value = db_min
    while value <= db_max:
        ticks.append(value)
        value += step
    return ticks


def frequency_label(freq: float) -> str:
    if freq >= 1000:
        return f"{int(freq / 1000)}k"
    return f"{int(freq)}"


def frequency_ticks(max_freq: float) -> List[Tuple[float, str]]:
    return [(f, frequency_label(f)) for f in FREQUENCY_TICKS_HZ if f <= max_freq]


def peak_frequency(snapshot: Optional[SpectrumSnapshot]) -> Optional[Tuple[float, float]]:
    """Frequency and level of the loudest bin, skipping DC."""
    if snapshot is None or snapshot.bin_count < 2:
        return None
    index = int(np.argmax(snapshot.magnitudes[1:])) + 1
    return float(snapshot.frequencies[index]), float(snapshot.magnitudes[index])


def normalized_bands(snapshot: SpectrumSnapshot, db_min: float, db_max: float,
                     band_count: int = 64) -> np.ndarray:
    """Bar heights in ``[0, 1]`` for a snapshot."""
    return reduce_to_bands(normalize_db(snapshot.magnitudes, db_min, db_max), band_count)
