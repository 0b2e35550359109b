"""
Tests for the TrackingEngine facade.
"""

from announcements.dispatcher import AnnouncementDispatcher
from announcements.sinks import MemorySink
from models.config import TrackingConfig
from models.room_event import EventKind, RoomEvent
from models.stats import OccupancyStats
from tracking.engine import TrackingEngine


PERSON_A = (100, 100, 50, 100)
PERSON_B = (400, 120, 60, 110)


class TestIdentity:
    def test_ids_monotonic_across_evictions(self, clock, make_detection):
        """Ids keep increasing no matter how many tracks are evicted."""
        engine = TrackingEngine(TrackingConfig(tracker_timeout_seconds=1.0), clock=clock)
        seen = []
        now = 0
        for _ in range(4):
            result = engine.process_frame([make_detection(*PERSON_A)], now=now)
            seen.extend(e.track_id for e in result.events if e.kind == EventKind.ENTRY)
            now += 2000  # longer than the timeout: next frame evicts and re-enters

        assert seen == [1, 2, 3, 4]

    def test_two_people_keep_separate_ids(self, clock, make_detection):
        engine = TrackingEngine(TrackingConfig(), clock=clock)
        engine.process_frame([make_detection(*PERSON_A), make_detection(*PERSON_B)], now=0)
        engine.process_frame([make_detection(*PERSON_B), make_detection(*PERSON_A)], now=200)

        tracks = {t.track_id: t.bbox for t in engine.tracks()}
        assert tracks == {1: PERSON_A, 2: PERSON_B}
        assert engine.stats().current_in_room == 2
        assert engine.stats().peak_occupancy == 2

    def test_resume_from_persisted_state(self, clock, make_detection):
        """next_id and stats carry over from storage."""
        initial = OccupancyStats(total_entered=10, total_left=10, current_in_room=0, peak_occupancy=3)
        engine = TrackingEngine(TrackingConfig(), clock=clock, initial_stats=initial, next_id=11)

        result = engine.process_frame([make_detection(*PERSON_A)], now=0)

        assert result.events[0].track_id == 11
        assert engine.stats().total_entered == 11
        assert engine.stats().peak_occupancy == 3


class TestClock:
    def test_uses_injected_clock(self, clock, make_detection):
        """Without an explicit now, the clock supplies the timestamp."""
        engine = TrackingEngine(TrackingConfig(), clock=clock)
        clock.set(1234)

        result = engine.process_frame([make_detection(*PERSON_A)])

        assert result.now == 1234
        assert result.events[0].timestamp == 1234

    def test_eviction_driven_by_clock(self, clock, make_detection):
        engine = TrackingEngine(TrackingConfig(tracker_timeout_seconds=5.0), clock=clock)
        engine.process_frame([make_detection(*PERSON_A)])

        clock.advance(5000)
        assert engine.process_frame([]).events == []
        clock.advance(1)
        assert [e.kind for e in engine.process_frame([]).events] == [EventKind.EXIT]


class TestSnapshot:
    def test_snapshot_contents(self, clock, make_detection):
        engine = TrackingEngine(TrackingConfig(), clock=clock)
        engine.process_frame([make_detection(*PERSON_A)], now=0)
        engine.process_frame([make_detection(*PERSON_A), make_detection(*PERSON_B)], now=200)

        snap = engine.snapshot(recent=1)

        assert [t.track_id for t in snap.tracks] == [1, 2]
        assert snap.stats.current_in_room == 2
        assert [e.track_id for e in snap.recent_events] == [2]
        assert snap.frame_count == 2
        assert snap.next_id == 3

    def test_snapshot_is_detached(self, clock, make_detection):
        """Later frames do not change an earlier snapshot."""
        engine = TrackingEngine(TrackingConfig(), clock=clock)
        engine.process_frame([make_detection(*PERSON_A)], now=0)
        snap = engine.snapshot()

        engine.process_frame([make_detection(110, 100, 50, 100)], now=200)

        assert snap.tracks[0].bbox == PERSON_A
        assert snap.tracks[0].last_seen_at == 0

    def test_to_dict(self, clock, make_detection):
        engine = TrackingEngine(TrackingConfig(), clock=clock)
        engine.process_frame([make_detection(*PERSON_A)], now=0)

        d = engine.snapshot().to_dict()

        assert d["tracks"][0]["bbox"] == list(PERSON_A)
        assert d["stats"]["total_entered"] == 1
        assert d["recent_events"] == [{"kind": "ENTRY", "track_id": 1, "timestamp": 0}]

    def test_initial_events_newest_first(self, clock):
        stored = [RoomEvent(EventKind.EXIT, 4, 900.0), RoomEvent(EventKind.ENTRY, 4, 100.0)]
        engine = TrackingEngine(TrackingConfig(), clock=clock, initial_events=stored)

        assert engine.recent_events(5) == stored


class TestHistory:
    def test_force_exit(self, clock, make_detection):
        engine = TrackingEngine(TrackingConfig(), clock=clock)
        engine.process_frame([make_detection(*PERSON_A)], now=0)

        event = engine.force_exit(1, now=50)

        assert event.kind == EventKind.EXIT
        assert engine.force_exit(1, now=60) is None
        assert engine.tracks() == []

    def test_clear_events_keeps_stats(self, clock, make_detection):
        engine = TrackingEngine(TrackingConfig(), clock=clock)
        engine.process_frame([make_detection(*PERSON_A)], now=0)

        engine.clear_events()

        assert engine.recent_events() == []
        assert engine.stats().total_entered == 1

    def test_reset_history_keeps_tracks_and_ids(self, clock, make_detection):
        engine = TrackingEngine(TrackingConfig(), clock=clock)
        engine.process_frame([make_detection(*PERSON_A)], now=0)

        engine.reset_history()

        assert engine.stats() == OccupancyStats()
        assert [t.track_id for t in engine.tracks()] == [1]
        result = engine.process_frame([make_detection(*PERSON_A), make_detection(*PERSON_B)], now=100)
        assert [e.track_id for e in result.events] == [2]


class TestAnnouncements:
    def test_end_to_end_announcements(self, clock, make_detection):
        """Entries and exits flow through the dispatcher to the sink."""
        sink = MemorySink()
        dispatcher = AnnouncementDispatcher(sink, clock=clock, delay_ms=2000)
        engine = TrackingEngine(TrackingConfig(), clock=clock, dispatcher=dispatcher)

        engine.process_frame([make_detection(*PERSON_A), make_detection(*PERSON_B)])
        while len(sink.lines) < 2:
            dispatcher.pump()
            clock.advance(100)

        assert sink.lines == ["A person entered the room", "A second person entered the room"]
