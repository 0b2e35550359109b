from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Any, Optional

from announcements.dispatcher import AnnouncementDispatcher
from tracking.engine import TrackingEngine


@dataclass
class RuntimeContext:
    """Holds runtime state and service references; avoids global singletons."""

    config: dict
    engine: TrackingEngine
    dispatcher: Optional[AnnouncementDispatcher] = None
    db: Any = None
    start_time: float = field(default_factory=time.time)

    @property
    def uptime_seconds(self) -> float:
        return time.time() - self.start_time

    def settings(self) -> dict:
        """The user-facing settings document (as exported and stored)."""
        return dict(self.config.get("tracking", {}) or {})
