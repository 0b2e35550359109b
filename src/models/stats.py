"""
Occupancy statistics model.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict


@dataclass(frozen=True)
class OccupancyStats:
    """
    Running occupancy counters.

    Attributes:
        total_entered: Number of ENTRY events seen.
        total_left: Number of EXIT events seen.
        current_in_room: max(0, total_entered - total_left).
        peak_occupancy: Highest current_in_room observed.
    """
    total_entered: int = 0
    total_left: int = 0
    current_in_room: int = 0
    peak_occupancy: int = 0

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "OccupancyStats":
        """Adapter: Create from stored/exported dictionary."""
        return cls(
            total_entered=int(d.get("total_entered", 0)),
            total_left=int(d.get("total_left", 0)),
            current_in_room=int(d.get("current_in_room", 0)),
            peak_occupancy=int(d.get("peak_occupancy", 0)),
        )

    def to_dict(self) -> Dict[str, int]:
        return asdict(self)
