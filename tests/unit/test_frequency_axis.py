"""Unit tests for build_frequency_axis."""

import pytest
import numpy as np

from micscope.config import ConfigurationError
from micscope.dsp.frequency_axis import build_frequency_axis


@pytest.mark.unit
class TestFrequencyAxis:
    """Test cases for build_frequency_axis."""

    @pytest.mark.parametrize("frame_size", [256, 512, 1024, 2048, 4096, 8192])
    @pytest.mark.parametrize("sample_rate", [8000.0, 44100.0, 48000.0])
    def test_length_and_strictly_increasing(self, frame_size, sample_rate):
        axis = build_frequency_axis(sample_rate, frame_size)

        assert len(axis) == frame_size // 2
        assert np.all(np.diff(axis) > 0)

    def test_bin_spacing(self):
        axis = build_frequency_axis(44100, 1024)

        assert axis[0] == 0.0
        assert axis[1] == pytest.approx(43.066, abs=1e-3)
        assert axis[-1] == pytest.approx(511 * 44100 / 1024, rel=1e-6)

    def test_read_only(self):
        axis = build_frequency_axis(48000, 256)

        with pytest.raises(ValueError):
            axis[0] = 1.0

    @pytest.mark.parametrize("sample_rate", [0, -44100, float("nan"), None])
    def test_rejects_bad_sample_rate(self, sample_rate):
        with pytest.raises(ConfigurationError):
            build_frequency_axis(sample_rate, 1024)

    def test_rejects_non_power_of_two(self):
        with pytest.raises(ConfigurationError):
            build_frequency_axis(44100, 1000)
