"""Pytest configuration and fixtures for micscope tests."""

import pytest
import logging
from unittest.mock import Mock, patch
import numpy as np
from pubsub import pub

from micscope.config import MicscopeConfig
from micscope.models.audio import CaptureFrame


# Configure logging for tests
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def pytest_configure(config):
    config.addinivalue_line("markers", "unit: fast tests of a single component")
    config.addinivalue_line("markers", "integration: tests wiring several components together")


@pytest.fixture
def sine_wave():
    """Generate a float32 sine of given frequency, amplitude and length."""
    def generate(freq=440.0, sample_rate=44100.0, length=1024, amplitude=0.5):
        t = np.arange(length) / sample_rate
        return (amplitude * np.sin(2 * np.pi * freq * t)).astype(np.float32)
    return generate


@pytest.fixture
def sine_frame(sine_wave):
    """A mono CaptureFrame holding one 440 Hz frame at 44.1 kHz."""
    return CaptureFrame.from_channels([sine_wave()])


@pytest.fixture
def silent_frame():
    return CaptureFrame.from_channels([np.zeros(1024, dtype=np.float32)])


@pytest.fixture
def test_config(tmp_path):
    """Configuration loaded from a YAML file in a temporary directory."""
    config_file = tmp_path / "micscope.yaml"
    config_file.write_text(
        "analyzer:\n"
        "  frame_size: 1024\n"
        "  min_publish_interval_ms: 0\n"
        "publisher:\n"
        "  topic: test_service.frame\n"
        "  session_topic: test_service.session\n"
        "logging:\n"
        "  file_path: logs/test.log\n"
    )
    return MicscopeConfig(str(config_file))


@pytest.fixture
def unique_topic(request):
    """Per-test pub/sub topic names so listeners never leak between tests."""
    base = "test_" + "".join(c if c.isalnum() else "_" for c in request.node.name)
    yield f"{base}.frame", f"{base}.session"
    pub.unsubAll()


@pytest.fixture
def mock_pyaudio():
    """Mock PyAudio for testing without actual audio hardware."""
    with patch('pyaudio.PyAudio') as mock_pyaudio_class:
        mock_pyaudio_instance = Mock()
        mock_stream = Mock()

        # Configure mock stream
        mock_stream.start_stream.return_value = None
        mock_stream.stop_stream.return_value = None
        mock_stream.close.return_value = None

        # Configure mock PyAudio instance
        mock_pyaudio_instance.open.return_value = mock_stream
        mock_pyaudio_instance.terminate.return_value = None
        mock_pyaudio_instance.get_default_input_device_info.return_value = {
            'index': 0,
            'name': 'Mock Microphone',
            'maxInputChannels': 2,
            'defaultSampleRate': 44100.0,
        }
        mock_pyaudio_instance.get_device_info_by_index.side_effect = lambda index: {
            'index': index,
            'name': f'Mock Device {index}',
            'maxInputChannels': 0 if index == 3 else 1,
            'defaultSampleRate': 48000.0,
        }
        mock_pyaudio_instance.get_device_count.return_value = 4

        # Configure mock PyAudio class
        mock_pyaudio_class.return_value = mock_pyaudio_instance

        yield {
            'class': mock_pyaudio_class,
            'instance': mock_pyaudio_instance,
            'stream': mock_stream
        }


@pytest.fixture
def feed_stream(mock_pyaudio):
    """Push interleaved float32 samples through the opened stream's callback."""
    def feed(data, status_flags=0):
        callback = mock_pyaudio['instance'].open.call_args.kwargs['stream_callback']
        samples = np.asarray(data, dtype=np.float32)
        return callback(samples.tobytes(), samples.size, {}, status_flags)
    return feed
