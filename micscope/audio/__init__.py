"""Audio capture and spectrum publishing module."""

from .capture import AudioCapture, list_input_devices
from .spectrum_pub import SpectrumPublisher

__all__ = [
    'AudioCapture',
    'SpectrumPublisher',
    'list_input_devices',
]
