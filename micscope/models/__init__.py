"""Data models for the micscope application."""

from .audio import AudioStats, CaptureFrame
from .spectrum import SpectrumSnapshot, AnalyzerStats
from .events import SessionEvent

__all__ = [
    "AudioStats",
    "CaptureFrame",
    "SpectrumSnapshot",
    "AnalyzerStats",
    "SessionEvent",
]
