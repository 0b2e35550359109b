"""
Tests for greedy IoU association.
"""

from models.detection import BoundingBox, Detection
from tracking.associator import Associator
from tracking.store import TrackStore


def _det(x, y, w, h, score=0.9):
    return Detection(bbox=BoundingBox(x, y, w, h), score=score)


class TestMatching:
    """Tests for detection-to-track matching."""

    def test_unmatched_detections_become_tracks(self):
        """With an empty store every detection allocates a track, in order."""
        store = TrackStore()
        result = Associator(store).associate([_det(0, 0, 10, 10), _det(50, 50, 10, 10)], now=0)

        assert [t.track_id for t in result.new_tracks] == [1, 2]
        assert result.matched_updates == []
        assert result.unmatched_track_ids == []
        assert len(store) == 2

    def test_overlapping_detection_matches(self):
        """A detection above the threshold matches the existing track."""
        store = TrackStore()
        store.allocate(BoundingBox(100, 100, 50, 100), 0.9, now=0)

        result = Associator(store).associate([_det(102, 101, 50, 100, score=0.7)], now=200)

        assert len(result.matched_updates) == 1
        update = result.matched_updates[0]
        assert update.track_id == 1
        assert update.bbox == BoundingBox(102, 101, 50, 100)
        assert update.score == 0.7
        assert result.new_tracks == []

    def test_updates_are_not_applied(self):
        """The associator reports matches but leaves the track untouched."""
        store = TrackStore()
        store.allocate(BoundingBox(0, 0, 10, 10), 0.9, now=0)

        Associator(store).associate([_det(1, 0, 10, 10)], now=500)

        track = store.get(1)
        assert track.bbox == BoundingBox(0, 0, 10, 10)
        assert track.last_seen_at == 0

    def test_threshold_is_strict(self):
        """IoU exactly equal to the threshold does not match."""
        store = TrackStore()
        store.allocate(BoundingBox(0, 0, 20, 10), 1.0, now=0)
        # Contained detection: IoU = 100 / 200 = 0.5
        result = Associator(store, iou_threshold=0.5).associate([_det(0, 0, 10, 10)], now=0)

        assert result.matched_updates == []
        assert [t.track_id for t in result.new_tracks] == [2]
        assert result.unmatched_track_ids == [1]

    def test_low_overlap_starts_new_track(self):
        """Overlap below the threshold is treated as a new person."""
        store = TrackStore()
        store.allocate(BoundingBox(0, 0, 10, 10), 1.0, now=0)
        # IoU = 20 / 180
        result = Associator(store).associate([_det(8, 0, 10, 10)], now=0)

        assert [t.track_id for t in result.new_tracks] == [2]
        assert result.unmatched_track_ids == [1]

    def test_track_matched_at_most_once(self):
        """Two detections over one track: the second becomes a new track."""
        store = TrackStore()
        store.allocate(BoundingBox(0, 0, 10, 10), 1.0, now=0)

        result = Associator(store).associate([_det(0, 0, 10, 10), _det(1, 0, 10, 10)], now=0)

        assert [u.track_id for u in result.matched_updates] == [1]
        assert [t.track_id for t in result.new_tracks] == [2]

    def test_new_tracks_not_candidates_in_same_frame(self):
        """Tracks allocated this frame cannot absorb later detections."""
        store = TrackStore()
        result = Associator(store).associate([_det(0, 0, 10, 10), _det(0, 0, 10, 10)], now=0)

        assert [t.track_id for t in result.new_tracks] == [1, 2]
        assert result.matched_updates == []

    def test_invalid_detection_dropped(self):
        """Negative-size detections are skipped and counted."""
        store = TrackStore()
        result = Associator(store).associate([_det(0, 0, -5, 10), _det(20, 20, 5, 5)], now=0)

        assert result.dropped == 1
        assert [t.track_id for t in result.new_tracks] == [1]

    def test_empty_frame_reports_all_unmatched(self):
        """No detections leaves every existing track unmatched."""
        store = TrackStore()
        store.allocate(BoundingBox(0, 0, 10, 10), 1.0, now=0)
        store.allocate(BoundingBox(50, 0, 10, 10), 1.0, now=0)

        result = Associator(store).associate([], now=100)

        assert result.unmatched_track_ids == [1, 2]
        assert result.new_tracks == []


class TestTieBreak:
    """Greedy tie-break scenarios."""

    def test_exact_tie_goes_to_earliest_track(self):
        """Equal IoU 0.5 against A and B: A (inserted first) wins."""
        store = TrackStore()
        a = store.allocate(BoundingBox(0, 0, 20, 10), 1.0, now=0)
        b = store.allocate(BoundingBox(-10, 0, 20, 10), 1.0, now=0)

        result = Associator(store).associate([_det(0, 0, 10, 10)], now=100)

        assert [u.track_id for u in result.matched_updates] == [a.track_id]
        assert result.unmatched_track_ids == [b.track_id]

    def test_strictly_higher_overlap_wins_regardless_of_order(self):
        """A later track with higher IoU beats an earlier one."""
        store = TrackStore()
        a = store.allocate(BoundingBox(0, 0, 20, 10), 1.0, now=0)   # IoU 0.5
        b = store.allocate(BoundingBox(0, 0, 12, 10), 1.0, now=0)   # IoU ~0.83

        result = Associator(store).associate([_det(0, 0, 10, 10)], now=100)

        assert [u.track_id for u in result.matched_updates] == [b.track_id]
        assert result.unmatched_track_ids == [a.track_id]

    def test_detection_order_matters(self):
        """The first detection claims its best track even if a later one fits better."""
        store = TrackStore()
        store.allocate(BoundingBox(0, 0, 10, 10), 1.0, now=0)

        loose = _det(2, 0, 10, 10)   # IoU 80 / 120
        tight = _det(0, 0, 10, 10)   # IoU 1.0

        result = Associator(store).associate([loose, tight], now=0)

        assert result.matched_updates[0].bbox == loose.bbox
        assert result.new_tracks[0].bbox == tight.bbox


class TestDeterminism:
    def test_same_input_same_output(self):
        """Identical store state and detections give identical results."""
        detections = [_det(0, 0, 10, 10), _det(3, 0, 10, 10), _det(40, 40, 10, 10)]

        def run():
            store = TrackStore()
            store.allocate(BoundingBox(1, 0, 10, 10), 1.0, now=0)
            store.allocate(BoundingBox(38, 41, 10, 10), 1.0, now=0)
            result = Associator(store).associate(detections, now=10)
            return (
                [(u.track_id, u.bbox) for u in result.matched_updates],
                [(t.track_id, t.bbox) for t in result.new_tracks],
                result.unmatched_track_ids,
            )

        assert run() == run()
