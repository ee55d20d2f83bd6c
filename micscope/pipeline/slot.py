"""Single-slot exchange between the capture thread and the consumer."""

import threading
from typing import Optional

from ..models.spectrum import SpectrumSnapshot


class LatestSnapshotSlot:
    """Holds only the most recent snapshot.

    ``put`` replaces whatever is in the slot and never waits for a reader.
    ``take`` returns a snapshot at most once; ``peek`` leaves it in place.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._snapshot: Optional[SpectrumSnapshot] = None
        self._fresh = False
        self.superseded = 0

    def put(self, snapshot: SpectrumSnapshot) -> None:
        with self._lock:
            if self._fresh:
                self.superseded += 1
            self._snapshot = snapshot
            self._fresh = True

    def take(self) -> Optional[SpectrumSnapshot]:
        """Return the snapshot if it has not been taken yet, else None."""
        with self._lock:
            if not self._fresh:
                return None
            self._fresh = False
            return self._snapshot

    def peek(self) -> Optional[SpectrumSnapshot]:
        with self._lock:
            return self._snapshot

    def clear(self) -> None:
        with self._lock:
            self._snapshot = None
            self._fresh = False
