from __future__ import annotations

from collections import deque
from typing import Deque, Iterable, Iterator, List

from models.room_event import RoomEvent


class EventLog:
    """Append-only, newest-first record of lifecycle events."""

    def __init__(self, events: Iterable[RoomEvent] = ()):
        # Seed events are expected newest-first, as stored and exported.
        self._events: Deque[RoomEvent] = deque(events)

    def append(self, event: RoomEvent) -> None:
        self._events.appendleft(event)

    def recent(self, n: int) -> List[RoomEvent]:
        if n <= 0:
            return []
        return [e for _, e in zip(range(n), self._events)]

    def newest_first(self) -> List[RoomEvent]:
        return list(self._events)

    def oldest_first(self) -> List[RoomEvent]:
        return list(reversed(self._events))

    def clear(self) -> None:
        self._events.clear()

    def __len__(self) -> int:
        return len(self._events)

    def __iter__(self) -> Iterator[RoomEvent]:
        return iter(list(self._events))
