"""Unit tests for FrameAssembler."""

import pytest
import numpy as np

from micscope.config import ConfigurationError
from micscope.dsp.frame_assembler import FrameAssembler
from micscope.models.audio import CaptureFrame


@pytest.mark.unit
class TestFrameAssembler:
    """Test cases for FrameAssembler class."""

    def test_rejects_non_power_of_two(self):
        with pytest.raises(ConfigurationError):
            FrameAssembler(1000)

    def test_mono_copy(self):
        assembler = FrameAssembler(8)
        capture = CaptureFrame.from_channels([np.arange(1, 9, dtype=np.float32) / 10])

        frame = assembler.assemble(capture)

        np.testing.assert_allclose(frame, np.arange(1, 9) / 10, rtol=1e-6)
        assert frame.dtype == np.float32
        assert frame.shape == (8,)

    def test_short_frame_is_zero_padded(self):
        assembler = FrameAssembler(8)
        capture = CaptureFrame.from_channels([[0.5, -0.5, 0.25]])

        frame = assembler.assemble(capture)

        np.testing.assert_array_equal(frame[:3], np.float32([0.5, -0.5, 0.25]))
        np.testing.assert_array_equal(frame[3:], np.zeros(5, dtype=np.float32))

    def test_long_frame_is_truncated(self):
        assembler = FrameAssembler(4)
        capture = CaptureFrame.from_channels([np.ones(10, dtype=np.float32)])

        frame = assembler.assemble(capture)

        assert frame.shape == (4,)
        np.testing.assert_array_equal(frame, np.ones(4, dtype=np.float32))

    def test_two_channel_downmix_averages_constants(self):
        assembler = FrameAssembler(16)
        a, b = 0.8, -0.2
        capture = CaptureFrame.from_channels([np.full(10, a), np.full(10, b)])

        frame = assembler.assemble(capture)

        np.testing.assert_allclose(frame[:10], (a + b) / 2, rtol=1e-6)
        np.testing.assert_array_equal(frame[10:], np.zeros(6, dtype=np.float32))

    def test_four_channel_downmix(self):
        assembler = FrameAssembler(4)
        capture = CaptureFrame.from_channels([
            [1.0, 1.0, 1.0, 1.0],
            [0.0, 0.0, 0.0, 0.0],
            [-1.0, -1.0, -1.0, -1.0],
            [0.4, 0.4, 0.4, 0.4],
        ])

        frame = assembler.assemble(capture)

        np.testing.assert_allclose(frame, np.full(4, 0.1), rtol=1e-5)

    def test_interleaved_stereo_downmix(self):
        assembler = FrameAssembler(4)
        # L, R pairs
        interleaved = np.float32([0.2, 0.4, 0.2, 0.4, 0.2, 0.4])
        capture = CaptureFrame.from_interleaved(interleaved.tobytes(), channels=2)

        frame = assembler.assemble(capture)

        assert capture.sample_count == 3
        np.testing.assert_allclose(frame[:3], 0.3, rtol=1e-6)
        assert frame[3] == 0.0

    def test_flat_interleaved_samples_are_split_by_channel(self):
        assembler = FrameAssembler(4)
        # Hand-built frame: 1-D L, R pairs with a trailing partial pair
        capture = CaptureFrame(
            samples=np.float32([0.2, 0.4, 0.2, 0.4, 0.2, 0.4, 0.9]),
            channels=2,
            sample_count=3,
        )

        frame = assembler.assemble(capture)

        np.testing.assert_allclose(frame[:3], 0.3, rtol=1e-6)
        assert frame[3] == 0.0

    def test_missing_samples_give_silent_frame(self):
        assembler = FrameAssembler(8)

        frame = assembler.assemble(CaptureFrame.empty(channels=2))

        np.testing.assert_array_equal(frame, np.zeros(8, dtype=np.float32))

    def test_empty_interleaved_data_gives_silent_frame(self):
        assembler = FrameAssembler(8)

        frame = assembler.assemble(CaptureFrame.from_interleaved(b"", channels=1))

        assert not frame.any()

    def test_buffer_is_reset_between_frames(self):
        assembler = FrameAssembler(8)
        assembler.assemble(CaptureFrame.from_channels([np.ones(8)]))

        frame = assembler.assemble(CaptureFrame.from_channels([[0.5, 0.5]]))

        np.testing.assert_array_equal(frame[2:], np.zeros(6, dtype=np.float32))

    def test_output_buffer_is_reused(self):
        assembler = FrameAssembler(8)

        first = assembler.assemble(CaptureFrame.from_channels([np.ones(8)]))
        second = assembler.assemble(CaptureFrame.from_channels([np.ones(8)]))

        assert first is second
