"""Reduction of raw capture buffers to fixed-length mono analysis frames."""

import logging

import numpy as np

from ..config.session import ConfigurationError, is_power_of_two
from ..models.audio import CaptureFrame

logger = logging.getLogger(__name__)


class FrameAssembler:
    """Turns CaptureFrames of any shape into one ``frame_size`` mono frame.

    The output buffer is allocated once and reused for every call, so the
    array returned by :meth:`assemble` is only valid until the next call.
    """

    def __init__(self, frame_size: int):
        """Initialize frame assembler.

        Args:
            frame_size: Analysis frame length, a power of two
        """
        if not is_power_of_two(frame_size):
            raise ConfigurationError(f"frame_size must be a power of two, got {frame_size!r}")

        self.frame_size = frame_size
        self._frame = np.zeros(frame_size, dtype=np.float32)

    def assemble(self, capture: CaptureFrame) -> np.ndarray:
        """Reduce a capture frame to the analysis frame.

        Short frames are zero padded, long frames truncated and multi-channel
        frames averaged into mono. Missing data yields an all-zero frame.
        """
        frame = self._frame
        frame.fill(0.0)

        samples = capture.samples
        if samples is None or capture.sample_count <= 0 or capture.channels <= 0:
            return frame

        if samples.ndim == 1:
            # Flat interleaved buffer, one column per channel
            usable = samples.size - samples.size % capture.channels
            samples = samples[:usable].reshape(-1, capture.channels).T

        channel_count = min(capture.channels, samples.shape[0])
        copy_count = min(capture.sample_count, samples.shape[1], self.frame_size)
        if channel_count == 0 or copy_count == 0:
            return frame

        if channel_count == 1:
            frame[:copy_count] = samples[0, :copy_count]
            return frame

        head = frame[:copy_count]
        for channel in range(channel_count):
            head += samples[channel, :copy_count]
        # Padded tail is still zero, only the copied head needs scaling
        head *= np.float32(1.0 / channel_count)
        return frame
