"""Spectrum publisher: hands snapshots from the audio thread to pub/sub listeners."""

import logging
import threading
from typing import Optional
from pubsub import pub

from ..models.spectrum import SpectrumSnapshot
from ..models.events import SessionEvent
from ..pipeline.slot import LatestSnapshotSlot

logger = logging.getLogger(__name__)


class SpectrumPublisher:
    """Publishes spectrum snapshots using pubsub.pub from a dispatcher thread.

    ``offer`` is called on the audio thread. It only swaps the snapshot into
    a single slot and wakes the dispatcher, so a slow listener never stalls
    capture. If several snapshots arrive while listeners are busy, only the
    newest one is delivered.
    """

    def __init__(self, topic: str = "spectrum.frame", session_topic: str = "spectrum.session"):
        """Initialize spectrum publisher.

        Args:
            topic: Pub/sub topic name for spectrum snapshots
            session_topic: Pub/sub topic name for session lifecycle events
        """
        self.topic = topic
        self.session_topic = session_topic
        self.slot = LatestSnapshotSlot()

        self._wakeup = threading.Event()
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self.delivered = 0

        logger.info(f"SpectrumPublisher initialized with topic: {topic}")

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        """Start the dispatcher thread."""
        if self.is_running:
            logger.warning("SpectrumPublisher already running")
            return

        self._stop_event.clear()
        self._wakeup.clear()
        self.slot.clear()
        self._thread = threading.Thread(target=self._dispatch_loop, daemon=True)
        self._thread.name = "SpectrumDispatchThread"
        self._thread.start()

    def stop(self, timeout: float = 2.0) -> None:
        """Stop the dispatcher thread and drop any undelivered snapshot."""
        if not self.is_running:
            return

        self._stop_event.set()
        self._wakeup.set()
        self._thread.join(timeout=timeout)
        if self._thread.is_alive():
            logger.warning("Spectrum dispatcher did not stop cleanly")
        self._thread = None
        self.slot.clear()
        logger.info(f"SpectrumPublisher stopped after {self.delivered} deliveries "
                    f"({self.slot.superseded} superseded)")

    def offer(self, snapshot: SpectrumSnapshot) -> None:
        """Hand over a snapshot without waiting. Safe to call from the audio thread."""
        self.slot.put(snapshot)
        self._wakeup.set()

    def publish_spectrum(self, snapshot: SpectrumSnapshot) -> None:
        """Publish a snapshot to the pub/sub topic on the calling thread.

        Args:
            snapshot: SpectrumSnapshot to publish
        """
        pub.sendMessage(self.topic, snapshot=snapshot)
        self.delivered += 1

    def publish_session_event(self, event: SessionEvent) -> None:
        pub.sendMessage(self.session_topic, event=event)
        logger.debug(f"Published session event: {event.event_type}")

    def _dispatch_loop(self) -> None:
        """Deliver the newest snapshot each time the audio thread signals."""
        while not self._stop_event.is_set():
            self._wakeup.wait()
            self._wakeup.clear()
            if self._stop_event.is_set():
                break

            snapshot = self.slot.take()
            if snapshot is None:
                continue
            try:
                self.publish_spectrum(snapshot)
            except Exception:
                logger.exception(f"Listener for {self.topic} failed on snapshot "
                                 f"{snapshot.sequence_number}")
