"""
Occupancy statistics reducer.

Stats are a pure fold over ENTRY/EXIT events, so the live record can always
be rebuilt by replaying the event log from a zeroed record.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Iterable, Optional

from models.room_event import EventKind, RoomEvent
from models.stats import OccupancyStats


def apply_event(stats: OccupancyStats, event: RoomEvent) -> OccupancyStats:
    """Return the stats record that results from applying one event."""
    if event.kind == EventKind.ENTRY:
        current = stats.current_in_room + 1
        return replace(
            stats,
            total_entered=stats.total_entered + 1,
            current_in_room=current,
            peak_occupancy=max(stats.peak_occupancy, current),
        )

    # Floored at zero: a double exit must never produce negative occupancy.
    return replace(
        stats,
        total_left=stats.total_left + 1,
        current_in_room=max(0, stats.current_in_room - 1),
    )


def replay(events: Iterable[RoomEvent], initial: Optional[OccupancyStats] = None) -> OccupancyStats:
    """Fold an oldest-first event sequence into a stats record."""
    stats = initial or OccupancyStats()
    for event in events:
        stats = apply_event(stats, event)
    return stats


class StatsAggregator:
    """Holds the live stats record; mutated only through ``apply``."""

    def __init__(self, initial: Optional[OccupancyStats] = None):
        self._stats = initial or OccupancyStats()

    @property
    def stats(self) -> OccupancyStats:
        return self._stats

    def apply(self, event: RoomEvent) -> OccupancyStats:
        self._stats = apply_event(self._stats, event)
        return self._stats

    def reset(self, stats: Optional[OccupancyStats] = None) -> None:
        self._stats = stats or OccupancyStats()
