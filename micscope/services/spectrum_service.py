"""Service that owns one capture session from device negotiation to teardown."""

import logging
from typing import Optional, Dict, Any
from datetime import datetime

from ..audio.capture import AudioCapture
from ..audio.spectrum_pub import SpectrumPublisher
from ..config import MicscopeConfig
from ..config.session import SessionConfig
from ..exceptions import SessionError
from ..models.events import SessionEvent
from ..models.spectrum import SpectrumSnapshot
from ..pipeline.analyzer import SpectrumAnalyzer

logger = logging.getLogger(__name__)


class SpectrumService:
    """Wires the capture device, the analyzer and the publisher together."""

    def __init__(self, config: MicscopeConfig):
        """Initialize spectrum service.

        Args:
            config: Application configuration
        """
        self.config = config
        self.session_config = SessionConfig.from_config(config)

        self.publisher = SpectrumPublisher(
            topic=config.get('publisher.topic', 'spectrum.frame'),
            session_topic=config.get('publisher.session_topic', 'spectrum.session'),
        )
        self.analyzer = SpectrumAnalyzer(self.session_config, self.publisher.offer)

        self.audio_capture = AudioCapture(
            callback=self.analyzer.submit_frame,
            frames_per_buffer=config.get('audio.frames_per_buffer', self.session_config.frame_size),
            channels=config.get('audio.channels'),
            sample_rate=config.get('audio.sample_rate'),
            device_index=config.get('audio.device_index'),
        )

        self.is_running = False
        self.started_at: Optional[datetime] = None
        logger.info("SpectrumService ready")

    def start(self) -> Dict[str, Any]:
        """Negotiate the device format, build setup state, then arm capture.

        Raises ConfigurationError if the device format or settings are
        unusable; nothing is left running in that case.

        Returns:
            Session details
        """
        if self.is_running:
            raise SessionError("Spectrum session already running")

        sample_rate, channels = self.audio_capture.open()
        try:
            frequency_axis = self.analyzer.start_session(sample_rate)
        except Exception:
            self.audio_capture.close()
            raise

        self.publisher.start()
        try:
            self.audio_capture.start_recording()
        except Exception:
            self.publisher.stop()
            self.analyzer.stop_session()
            self.audio_capture.close()
            raise

        self.is_running = True
        self.started_at = datetime.now()

        details = {
            "sample_rate": sample_rate,
            "channels": channels,
            "frame_size": self.session_config.frame_size,
            "bins": len(frequency_axis),
            "started_at": self.started_at.isoformat(),
        }
        self.publisher.publish_session_event(SessionEvent(event_type="started", metadata=details))
        logger.info(f"Spectrum session started: {details}")
        return details

    def stop(self) -> Dict[str, Any]:
        """Stop capture first, then tear down analysis and publishing.

        Returns:
            Session statistics
        """
        if not self.is_running:
            raise SessionError("No spectrum session running")

        # Capture must be quiet before setup state goes away
        self.audio_capture.stop_recording()
        analyzer_stats = self.analyzer.get_stats()
        self.analyzer.stop_session()
        self.publisher.stop()
        self.is_running = False

        capture_stats = self.audio_capture.get_recording_stats()
        summary = {
            "stopped_at": datetime.now().isoformat(),
            "duration_seconds": capture_stats.duration_seconds,
            "callbacks": capture_stats.total_callbacks,
            "input_overflows": capture_stats.input_overflows,
            "frames_processed": analyzer_stats.frames_processed,
            "spectra_published": analyzer_stats.spectra_published,
            "spectra_dropped": analyzer_stats.spectra_dropped,
        }
        self.publisher.publish_session_event(SessionEvent(event_type="stopped", metadata=summary))
        logger.info(f"Spectrum session stopped: {summary}")
        return summary

    def latest_snapshot(self) -> Optional[SpectrumSnapshot]:
        """Most recent snapshot handed to the publisher, for polling consumers."""
        return self.publisher.slot.peek()

    def cleanup(self) -> None:
        """Clean up service resources."""
        if self.is_running:
            self.stop()
        logger.info("SpectrumService cleaned up")
