"""Audio capture from a PyAudio input stream in callback mode."""

import pyaudio
import time
import logging
from typing import Optional, Dict, Any, List, Callable, Tuple
from datetime import datetime

from ..exceptions import ConfigurationError
from ..models.audio import AudioStats, CaptureFrame


logger = logging.getLogger(__name__)


class AudioCapture:
    """Live input stream delivering CaptureFrames to a callback.

    PortAudio calls the stream callback on its own high-priority thread; the
    frame callback runs there and must not block.
    """

    def __init__(
        self,
        callback: Callable[[CaptureFrame], Any],
        frames_per_buffer: int = 1024,
        channels: Optional[int] = None,
        sample_rate: Optional[float] = None,
        device_index: Optional[int] = None,
    ):
        """Initialize audio capture with specified parameters.

        Args:
            callback: Receives every CaptureFrame on the audio thread
            frames_per_buffer: Samples per channel requested per callback
            channels: Input channels; None takes what the device offers (max 2)
            sample_rate: Sample rate; None takes the device default
            device_index: PyAudio input device; None takes the default device
        """
        self.frame_callback = callback
        self.frames_per_buffer = frames_per_buffer
        self.requested_channels = channels
        self.requested_sample_rate = sample_rate
        self.device_index = device_index

        # Negotiated with the device in open()
        self.sample_rate: Optional[float] = None
        self.channels: Optional[int] = None

        self.is_recording = False

        # Statistics tracking
        self.start_time: Optional[datetime] = None
        self.total_callbacks = 0
        self.input_overflows = 0

        # PyAudio instance
        self.pyaudio_instance: Optional[pyaudio.PyAudio] = None
        self.stream = None

    def open(self) -> Tuple[float, int]:
        """Negotiate sample rate and channel count with the input device.

        Returns:
            Tuple of (sample_rate, channels)
        """
        if self.pyaudio_instance is None:
            self.pyaudio_instance = pyaudio.PyAudio()

        try:
            if self.device_index is None:
                device_info = self.pyaudio_instance.get_default_input_device_info()
            else:
                device_info = self.pyaudio_instance.get_device_info_by_index(self.device_index)
        except (IOError, OSError) as e:
            self.close()
            raise ConfigurationError(f"No usable audio input device: {e}")

        max_channels = int(device_info.get('maxInputChannels', 0))
        if max_channels < 1:
            self.close()
            raise ConfigurationError(f"Device '{device_info.get('name')}' has no input channels")

        self.channels = self.requested_channels or min(max_channels, 2)
        self.sample_rate = float(self.requested_sample_rate or device_info.get('defaultSampleRate', 0))

        logger.info(f"Input device '{device_info.get('name')}': "
                    f"{self.sample_rate}Hz, {self.channels} channels")
        return self.sample_rate, self.channels

    def start_recording(self) -> None:
        """Arm the input stream; frames start arriving on the audio thread."""
        if self.is_recording:
            logger.warning("Recording already in progress")
            return

        if self.pyaudio_instance is None:
            self.open()

        logger.info("Starting audio capture")
        self.start_time = datetime.now()
        self.total_callbacks = 0
        self.input_overflows = 0

        self.stream = self.pyaudio_instance.open(
            format=pyaudio.paFloat32,
            channels=self.channels,
            rate=int(self.sample_rate),
            input=True,
            input_device_index=self.device_index,
            frames_per_buffer=self.frames_per_buffer,
            stream_callback=self._on_audio,
        )
        self.stream.start_stream()
        self.is_recording = True
        logger.info(f"Audio stream opened: {self.sample_rate}Hz, "
                    f"{self.frames_per_buffer} samples/buffer")

    def _on_audio(self, in_data, frame_count, time_info, status_flags):
        """PortAudio stream callback."""
        self.total_callbacks += 1
        if status_flags & pyaudio.paInputOverflow:
            self.input_overflows += 1

        frame = CaptureFrame.from_interleaved(in_data, self.channels, timestamp=time.time())
        try:
            self.frame_callback(frame)
        except Exception:
            logger.exception("Frame callback failed, aborting audio stream")
            return None, pyaudio.paAbort
        return None, pyaudio.paContinue

    def stop_recording(self) -> None:
        """Stop the stream. Returns only after the last callback has finished."""
        if not self.is_recording:
            logger.warning("No recording in progress")
            return

        logger.info("Stopping audio capture")
        try:
            # Pa_StopStream waits for a running callback to return
            self.stream.stop_stream()
            self.stream.close()
        finally:
            self.stream = None
            self.is_recording = False
            # Format stays until the next open()
            self._terminate()

        if self.input_overflows:
            logger.warning(f"Input overflowed {self.input_overflows} times during capture")
        logger.info(f"Capture stopped. Total callbacks: {self.total_callbacks}")

    def close(self) -> None:
        """Release the PyAudio instance and forget the negotiated format."""
        self._terminate()
        self.sample_rate = None
        self.channels = None

    def _terminate(self) -> None:
        if self.pyaudio_instance:
            self.pyaudio_instance.terminate()
            self.pyaudio_instance = None

    def get_recording_stats(self) -> AudioStats:
        """Get current capture statistics."""
        duration = 0.0
        if self.start_time:
            duration = (datetime.now() - self.start_time).total_seconds()

        return AudioStats(
            is_recording=self.is_recording,
            duration_seconds=duration,
            sample_rate=self.sample_rate or 0.0,
            channels=self.channels or 0,
            frames_per_buffer=self.frames_per_buffer,
            total_callbacks=self.total_callbacks,
            input_overflows=self.input_overflows,
        )

    def __del__(self):
        """Ensure resources are cleaned up on deletion."""
        if getattr(self, "is_recording", False):
            self.stop_recording()


def list_input_devices() -> List[Dict[str, Any]]:
    """Return name, index, channels and default rate of every input device."""
    instance = pyaudio.PyAudio()
    try:
        devices = []
        for index in range(instance.get_device_count()):
            info = instance.get_device_info_by_index(index)
            if int(info.get('maxInputChannels', 0)) > 0:
                devices.append({
                    "index": index,
                    "name": info.get('name'),
                    "channels": int(info['maxInputChannels']),
                    "default_sample_rate": float(info.get('defaultSampleRate', 0)),
                })
        return devices
    finally:
        instance.terminate()
