"""
RoomEvent model for entry/exit transitions.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict


class EventKind(str, Enum):
    """Kinds of lifecycle transitions."""
    ENTRY = "ENTRY"
    EXIT = "EXIT"


@dataclass(frozen=True)
class RoomEvent:
    """
    An entry or exit emitted when a track is created or evicted.

    Attributes:
        kind: ENTRY or EXIT.
        track_id: ID of the track at the time of the transition.
        timestamp: Monotonic ms of the transition.
    """
    kind: EventKind
    track_id: int
    timestamp: float

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "RoomEvent":
        """Adapter: Create from a stored/exported dictionary."""
        return cls(
            kind=EventKind(d["kind"]),
            track_id=int(d["track_id"]),
            timestamp=float(d["timestamp"]),
        )

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "kind": self.kind.value,
            "track_id": self.track_id,
            "timestamp": self.timestamp,
        }
