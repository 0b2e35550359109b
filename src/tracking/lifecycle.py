"""
Entry/exit lifecycle for tracks.

A track is ACTIVE while it is in the store and EXITED once removed; there
is no way back to ACTIVE for the same id. Eviction is decided
declaratively every frame from elapsed unseen time, so no per-track timers
exist and replays with a synthetic clock are deterministic.
"""

from __future__ import annotations

import logging
from typing import Callable, List, Optional

from analytics.event_log import EventLog
from analytics.stats import StatsAggregator
from announcements.dispatcher import AnnouncementDispatcher
from models.room_event import EventKind, RoomEvent
from models.stats import OccupancyStats
from .associator import AssociationResult
from .store import TrackStore

EventListener = Callable[[RoomEvent, OccupancyStats], None]


class LifecycleController:
    """
    Drives ENTRY/EXIT transitions and their side effects.

    Per frame, callers run ``sweep`` before association and ``apply`` with
    the association result afterwards. Each transition appends to the event
    log, updates stats, queues an announcement and notifies listeners
    (e.g. the storage collaborator) with the event and the new stats.
    """

    def __init__(
        self,
        store: TrackStore,
        timeout_ms: float,
        stats: StatsAggregator,
        event_log: EventLog,
        dispatcher: Optional[AnnouncementDispatcher] = None,
    ):
        self.store = store
        self.timeout_ms = timeout_ms
        self.stats = stats
        self.event_log = event_log
        self.dispatcher = dispatcher
        self._listeners: List[EventListener] = []

    def add_listener(self, listener: EventListener) -> None:
        self._listeners.append(listener)

    def is_expired(self, track_id: int, now: float) -> bool:
        """Strictly greater than the timeout: exactly timeout_ms unseen is kept."""
        return self.store.get(track_id).unseen_ms(now) > self.timeout_ms

    def sweep(self, now: float) -> List[RoomEvent]:
        """Evict every track unseen for longer than the timeout."""
        events = []
        for track in self.store.all():
            if track.unseen_ms(now) > self.timeout_ms:
                event = self._exit(track.track_id, now)
                if event is not None:
                    events.append(event)
        return events

    def apply(self, result: AssociationResult, now: float) -> List[RoomEvent]:
        """Apply matches, announce new tracks, and evict stale unmatched ones."""
        events: List[RoomEvent] = []

        for update in result.matched_updates:
            self.store.update(update.track_id, update.bbox, update.score, now)

        for track in result.new_tracks:
            events.append(self._emit(EventKind.ENTRY, track.track_id, now))

        for track_id in result.unmatched_track_ids:
            # Already gone if the sweep evicted it this frame.
            if track_id not in self.store:
                continue
            if self.is_expired(track_id, now):
                event = self._exit(track_id, now)
                if event is not None:
                    events.append(event)

        return events

    def force_exit(self, track_id: int, now: float) -> Optional[RoomEvent]:
        """Explicitly end a track. Returns None if it already exited."""
        return self._exit(track_id, now)

    def _exit(self, track_id: int, now: float) -> Optional[RoomEvent]:
        if not self.store.remove(track_id):
            return None
        return self._emit(EventKind.EXIT, track_id, now)

    def _emit(self, kind: EventKind, track_id: int, now: float) -> RoomEvent:
        event = RoomEvent(kind=kind, track_id=track_id, timestamp=now)
        self.event_log.append(event)
        stats = self.stats.apply(event)

        if kind == EventKind.ENTRY:
            logging.info(f"Person {track_id} entered the room (in room: {stats.current_in_room})")
        else:
            logging.info(f"Person {track_id} left the room (in room: {stats.current_in_room})")

        if self.dispatcher is not None:
            self.dispatcher.enqueue(kind)

        for listener in self._listeners:
            try:
                listener(event, stats)
            except Exception as e:
                logging.warning(f"Event listener error for {kind.value} {track_id}: {e}")

        return event
