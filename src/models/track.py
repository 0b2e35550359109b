"""
Track models for person tracking state.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Tuple

from .detection import BoundingBox


@dataclass
class Track:
    """
    A person currently believed to be present in the room.

    Attributes:
        track_id: Unique identifier, never reused within a process.
        bbox: Last matched bounding box.
        first_seen_at: Monotonic ms when the track was created.
        last_seen_at: Monotonic ms of the last matching detection.
        confidence: Score of the last matching detection.
    """
    track_id: int
    bbox: BoundingBox
    first_seen_at: float
    last_seen_at: float
    confidence: float = 1.0

    def unseen_ms(self, now: float) -> float:
        """Time since last seen; a clock that went backwards counts as 0."""
        return max(0.0, now - self.last_seen_at)


@dataclass(frozen=True)
class TrackState:
    """
    Immutable snapshot of a track (for serialization/API).
    """
    track_id: int
    bbox: Tuple[float, float, float, float]
    first_seen_at: float
    last_seen_at: float
    confidence: float

    @classmethod
    def from_track(cls, track: Track) -> "TrackState":
        """Create immutable snapshot from a Track."""
        return cls(
            track_id=track.track_id,
            bbox=track.bbox.as_tuple(),
            first_seen_at=track.first_seen_at,
            last_seen_at=track.last_seen_at,
            confidence=track.confidence,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "track_id": self.track_id,
            "bbox": list(self.bbox),
            "first_seen_at": self.first_seen_at,
            "last_seen_at": self.last_seen_at,
            "confidence": self.confidence,
        }
