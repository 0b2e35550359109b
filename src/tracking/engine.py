"""
Tracking engine: the single owner of all tracking state.

One frame is processed completely (aging sweep -> association -> matched
updates -> entries -> stale exits) before the next one begins. The web
layer and other readers only ever see immutable snapshots.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Sequence

from analytics.event_log import EventLog
from analytics.stats import StatsAggregator
from announcements.dispatcher import AnnouncementDispatcher
from models.config import TrackingConfig
from models.detection import Detection
from models.room_event import RoomEvent
from models.stats import OccupancyStats
from models.track import TrackState
from runtime.clock import Clock, MonotonicClock
from .associator import AssociationResult, Associator
from .lifecycle import EventListener, LifecycleController
from .store import TrackStore


@dataclass
class FrameResult:
    """What happened during one processed frame."""
    now: float
    events: List[RoomEvent] = field(default_factory=list)
    association: Optional[AssociationResult] = None


@dataclass(frozen=True)
class EngineSnapshot:
    """Read-only view for the presentation layer."""
    tracks: List[TrackState]
    stats: OccupancyStats
    recent_events: List[RoomEvent]
    frame_count: int
    next_id: int

    def to_dict(self) -> dict:
        return {
            "tracks": [t.to_dict() for t in self.tracks],
            "stats": self.stats.to_dict(),
            "recent_events": [e.to_dict() for e in self.recent_events],
            "frame_count": self.frame_count,
            "next_id": self.next_id,
        }


class TrackingEngine:
    """
    Owns the track store, associator, lifecycle controller, stats, event log
    and (optionally) the announcement dispatcher.

    Example:
        engine = TrackingEngine(TrackingConfig(), clock=MonotonicClock())
        for detections in detector_output:
            engine.process_frame(detections)
        print(engine.stats())

    Args:
        config: Tracking settings (timeout, IoU threshold).
        clock: Monotonic millisecond clock used when ``now`` is omitted.
        dispatcher: Receives one enqueue per ENTRY/EXIT.
        initial_stats: Stats snapshot to resume from (storage collaborator).
        next_id: First id to allocate; resume with the stored maximum + 1.
        initial_events: Previously stored events, newest first.
    """

    def __init__(
        self,
        config: Optional[TrackingConfig] = None,
        clock: Optional[Clock] = None,
        dispatcher: Optional[AnnouncementDispatcher] = None,
        initial_stats: Optional[OccupancyStats] = None,
        next_id: Optional[int] = None,
        initial_events: Iterable[RoomEvent] = (),
    ):
        self.config = config or TrackingConfig()
        self.clock = clock or MonotonicClock()
        self.dispatcher = dispatcher

        self.store = TrackStore(next_id=next_id or 1)
        self.associator = Associator(self.store, iou_threshold=self.config.match_iou_threshold)
        self.stats_aggregator = StatsAggregator(initial_stats)
        self.event_log = EventLog(initial_events)
        self.lifecycle = LifecycleController(
            self.store,
            timeout_ms=self.config.timeout_ms,
            stats=self.stats_aggregator,
            event_log=self.event_log,
            dispatcher=dispatcher,
        )

        self._lock = threading.RLock()
        self._frame_count = 0

        logging.info(
            f"Tracking engine initialized (timeout={self.config.tracker_timeout_seconds}s, "
            f"iou>{self.config.match_iou_threshold}, next_id={self.store.next_id})"
        )

    def add_listener(self, listener: EventListener) -> None:
        """Register a callback receiving (event, stats) on every transition."""
        self.lifecycle.add_listener(listener)

    def process_frame(self, detections: Sequence[Detection], now: Optional[float] = None) -> FrameResult:
        """
        Run one frame through the tracker.

        Args:
            detections: Person detections, already filtered by class and score.
            now: Monotonic ms for this frame; read from the clock if omitted.
        """
        if now is None:
            now = self.clock.now_ms()

        with self._lock:
            self._frame_count += 1
            result = FrameResult(now=now)

            result.events.extend(self.lifecycle.sweep(now))
            result.association = self.associator.associate(detections, now)
            result.events.extend(self.lifecycle.apply(result.association, now))

            logging.debug(
                f"[TRACK] frame={self._frame_count} detections={len(detections)} "
                f"matched={len(result.association.matched_updates)} "
                f"new={len(result.association.new_tracks)} "
                f"unmatched={len(result.association.unmatched_track_ids)} "
                f"active={len(self.store)}"
            )
            return result

    def force_exit(self, track_id: int, now: Optional[float] = None) -> Optional[RoomEvent]:
        """End a track explicitly; a no-op if it already exited."""
        if now is None:
            now = self.clock.now_ms()
        with self._lock:
            return self.lifecycle.force_exit(track_id, now)

    def clear_events(self) -> None:
        """Drop the in-memory event history; stats and tracks are kept."""
        with self._lock:
            self.event_log.clear()

    def reset_history(self, stats: Optional[OccupancyStats] = None) -> None:
        """Clear event history and stats. Active tracks and id numbering are kept."""
        with self._lock:
            self.event_log.clear()
            self.stats_aggregator.reset(stats)

    # --- read-only snapshot API ----------------------------------------

    @property
    def frame_count(self) -> int:
        return self._frame_count

    def tracks(self) -> List[TrackState]:
        with self._lock:
            return [TrackState.from_track(t) for t in self.store.all()]

    def stats(self) -> OccupancyStats:
        with self._lock:
            return self.stats_aggregator.stats

    def recent_events(self, n: int = 20) -> List[RoomEvent]:
        with self._lock:
            return self.event_log.recent(n)

    def snapshot(self, recent: int = 20) -> EngineSnapshot:
        with self._lock:
            return EngineSnapshot(
                tracks=[TrackState.from_track(t) for t in self.store.all()],
                stats=self.stats_aggregator.stats,
                recent_events=self.event_log.recent(recent),
                frame_count=self._frame_count,
                next_id=self.store.next_id,
            )
