"""Real-time spectrum analyzer: frame intake through throttled publication."""

import time
import logging
import threading
from typing import Callable, Optional

import numpy as np

from ..config.session import SessionConfig
from ..exceptions import SessionError
from ..dsp.frame_assembler import FrameAssembler
from ..dsp.window import WindowingStage
from ..dsp.fft import RealFFT
from ..dsp.estimator import SpectrumEstimator
from ..dsp.frequency_axis import build_frequency_axis
from ..models.audio import CaptureFrame
from ..models.spectrum import SpectrumSnapshot, AnalyzerStats
from .throttle import PublishThrottle

logger = logging.getLogger(__name__)


class _AnalysisSession:
    """Setup state and buffers for one capture session."""

    def __init__(self, config: SessionConfig, clock: Callable[[], float],
                 fft: Optional[RealFFT] = None):
        self.config = config
        self.assembler = FrameAssembler(config.frame_size)
        self.windowing = WindowingStage(config.frame_size, config.window_scale)
        self.fft = fft if fft is not None else RealFFT(config.frame_size)
        self.estimator = SpectrumEstimator(
            config.frame_size, config.magnitude_floor, config.spectrum_scaling)
        self.frequency_axis = build_frequency_axis(config.sample_rate, config.frame_size)
        self.throttle = PublishThrottle(config.min_publish_interval_ms, clock)

        self.spectrum = np.empty(config.bin_count, dtype=np.complex64)
        self.magnitudes = np.empty(config.bin_count, dtype=np.float32)
        self.frames_processed = 0
        self.sequence_number = 0

    def analyze(self, capture: CaptureFrame) -> np.ndarray:
        frame = self.assembler.assemble(capture)
        windowed = self.windowing.apply(frame)
        self.fft.forward(windowed, out=self.spectrum)
        self.frames_processed += 1
        return self.estimator.estimate(self.spectrum, out=self.magnitudes)


class SpectrumAnalyzer:
    """Turns captured audio into rate-limited spectrum snapshots.

    ``submit_frame`` is the intake port called by the capture device on its
    own thread. Everything up to the throttle decision runs synchronously in
    that call; a published snapshot is handed to ``publish`` which must not
    block.
    """

    def __init__(self, config: SessionConfig, publish: Callable[[SpectrumSnapshot], None],
                 clock: Callable[[], float] = time.monotonic):
        """Initialize spectrum analyzer.

        Args:
            config: Analyzer settings; the sample rate is supplied at session start
            publish: Receives every snapshot that passes the throttle
            clock: Monotonic time source in seconds
        """
        self.config = config.validate()
        self.publish = publish
        self.clock = clock

        self._lock = threading.Lock()
        self._session: Optional[_AnalysisSession] = None
        self._last_fft: Optional[RealFFT] = None

        logger.info(f"SpectrumAnalyzer initialized: frame_size={config.frame_size}, "
                    f"publish interval={config.min_publish_interval_ms}ms")

    @property
    def is_running(self) -> bool:
        return self._session is not None

    @property
    def frequency_axis(self) -> Optional[np.ndarray]:
        session = self._session
        return session.frequency_axis if session else None

    def start_session(self, sample_rate: float) -> np.ndarray:
        """Build all setup state for a session at ``sample_rate``.

        Calling this on a running analyzer restarts it with fresh setup.
        Raises ConfigurationError before touching the running session.

        Returns:
            The session's frequency axis
        """
        session_config = self.config.for_session(sample_rate)

        fft = self._last_fft
        if fft is None or fft.frame_size != session_config.frame_size:
            fft = None
        session = _AnalysisSession(session_config, self.clock, fft)

        with self._lock:
            if self._session is not None:
                logger.info("Restarting analyzer session")
            self._session = session
            self._last_fft = session.fft

        logger.info(f"Analyzer session started: {sample_rate}Hz, "
                    f"{session_config.bin_count} bins, "
                    f"{sample_rate / session_config.frame_size:.2f}Hz/bin")
        return session.frequency_axis

    def stop_session(self) -> None:
        """Tear down session state. No frame is analyzed or published afterwards."""
        with self._lock:
            session = self._session
            self._session = None

        if session is None:
            logger.debug("stop_session called without a running session")
            return

        logger.info(f"Analyzer session stopped after {session.frames_processed} frames "
                    f"({session.throttle.published} published, {session.throttle.dropped} dropped)")

    def submit_frame(self, capture: CaptureFrame) -> bool:
        """Analyze one capture frame and publish it if the throttle allows.

        Returns:
            True if a snapshot was handed to the publisher
        """
        with self._lock:
            session = self._session
            if session is None:
                return False

            magnitudes = session.analyze(capture)
            if not session.throttle.should_publish():
                return False

            session.sequence_number += 1
            snapshot = SpectrumSnapshot(
                magnitudes=_frozen_copy(magnitudes),
                frequencies=session.frequency_axis,
                sequence_number=session.sequence_number,
                timestamp=time.time(),
                sample_rate=session.config.sample_rate,
                frame_size=session.config.frame_size,
            )
            self.publish(snapshot)
            return True

    def process_frame(self, capture: CaptureFrame) -> np.ndarray:
        """Run the analysis chain without throttling and return a copy of the dB spectrum."""
        with self._lock:
            session = self._session
            if session is None:
                raise SessionError("No analyzer session running")
            return session.analyze(capture).copy()

    def get_stats(self) -> AnalyzerStats:
        session = self._session
        if session is None:
            return AnalyzerStats(
                is_running=False,
                frame_size=self.config.frame_size,
                sample_rate=0.0,
                frames_processed=0,
                spectra_published=0,
                spectra_dropped=0,
            )
        return AnalyzerStats(
            is_running=True,
            frame_size=session.config.frame_size,
            sample_rate=session.config.sample_rate,
            frames_processed=session.frames_processed,
            spectra_published=session.throttle.published,
            spectra_dropped=session.throttle.dropped,
        )


def _frozen_copy(values: np.ndarray) -> np.ndarray:
    copy = values.copy()
    copy.setflags(write=False)
    return copy
