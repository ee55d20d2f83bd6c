"""Signal processing stages of the spectrum analyzer."""

from .frame_assembler import FrameAssembler
from .window import WindowingStage, hann_window
from .fft import RealFFT
from .estimator import SpectrumEstimator, normalize_db
from .frequency_axis import build_frequency_axis

__all__ = [
    "FrameAssembler",
    "WindowingStage",
    "hann_window",
    "RealFFT",
    "SpectrumEstimator",
    "normalize_db",
    "build_frequency_axis",
]
