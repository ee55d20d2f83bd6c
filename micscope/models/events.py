"""Event models published alongside spectrum snapshots."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict


@dataclass
class SessionEvent:
    """Analyzer session lifecycle event."""
    event_type: str  # "started", "stopped"
    timestamp: datetime = field(default_factory=datetime.now)
    metadata: Dict[str, Any] = field(default_factory=dict)
