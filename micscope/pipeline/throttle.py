"""Rate limiting of spectrum publication."""

import time
from typing import Callable, Optional

from ..config.session import ConfigurationError


class PublishThrottle:
    """Lets at most one spectrum through per ``min_interval_ms``.

    Candidates arriving too early are dropped, never queued. The first
    candidate always passes.
    """

    def __init__(self, min_interval_ms: float = 50.0, clock: Callable[[], float] = time.monotonic):
        if min_interval_ms < 0:
            raise ConfigurationError(f"min_interval_ms must be >= 0, got {min_interval_ms}")
        self.min_interval = min_interval_ms / 1000.0
        self.clock = clock
        self.last_publish: Optional[float] = None
        self.published = 0
        self.dropped = 0

    def should_publish(self, now: Optional[float] = None) -> bool:
        """Decide whether the current candidate is forwarded, updating state if so."""
        if now is None:
            now = self.clock()

        if self.last_publish is not None and now - self.last_publish < self.min_interval:
            self.dropped += 1
            return False

        self.last_publish = now
        self.published += 1
        return True
