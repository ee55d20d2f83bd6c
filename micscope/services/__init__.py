"""Services layer for micscope application logic."""

from .spectrum_service import SpectrumService

__all__ = [
    "SpectrumService",
]
