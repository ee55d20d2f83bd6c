"""Analysis pipeline: session lifecycle, throttling and snapshot handoff."""

from .analyzer import SpectrumAnalyzer
from .throttle import PublishThrottle
from .slot import LatestSnapshotSlot

__all__ = [
    "SpectrumAnalyzer",
    "PublishThrottle",
    "LatestSnapshotSlot",
]
