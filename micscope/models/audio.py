"""Audio-related data models."""

from dataclasses import dataclass
from typing import Optional

import numpy as np


@dataclass
class AudioStats:
    """Audio capture statistics."""
    is_recording: bool
    duration_seconds: float
    sample_rate: float
    channels: int
    frames_per_buffer: int
    total_callbacks: int
    input_overflows: int


@dataclass
class CaptureFrame:
    """Raw samples delivered by the capture device in one callback.

    ``samples`` is channel-major with shape ``(channels, sample_count)``, or
    None when the device handed over no data.
    """
    samples: Optional[np.ndarray]
    channels: int
    sample_count: int
    timestamp: float = 0.0  # Time when this frame was captured

    @classmethod
    def from_interleaved(cls, data, channels: int, timestamp: float = 0.0) -> "CaptureFrame":
        """Build a frame from interleaved float32 data (bytes or array)."""
        if data is None or len(data) == 0:
            return cls.empty(channels, timestamp)

        if isinstance(data, (bytes, bytearray, memoryview)):
            flat = np.frombuffer(data, dtype=np.float32, count=len(data) // 4)
        else:
            flat = np.asarray(data, dtype=np.float32).ravel()

        sample_count = flat.size // channels
        # Transposed view, no copy
        samples = flat[:sample_count * channels].reshape(sample_count, channels).T
        return cls(samples=samples, channels=channels, sample_count=sample_count, timestamp=timestamp)

    @classmethod
    def from_channels(cls, channels_data, timestamp: float = 0.0) -> "CaptureFrame":
        """Build a frame from one sequence of samples per channel."""
        samples = np.atleast_2d(np.asarray(channels_data, dtype=np.float32))
        return cls(samples=samples, channels=samples.shape[0],
                   sample_count=samples.shape[1], timestamp=timestamp)

    @classmethod
    def empty(cls, channels: int = 1, timestamp: float = 0.0) -> "CaptureFrame":
        return cls(samples=None, channels=channels, sample_count=0, timestamp=timestamp)
