"""
Tests for detector adapters: class/score filtering and the demo simulator.
"""

from models.config import TrackingConfig
from models.detection import Detection
from runtime.clock import ManualClock
from inference.backend import filter_detections
from inference.demo_backend import DemoConfig, DemoPersonDetector
from tracking.engine import TrackingEngine


class TestFilterDetections:
    def test_keeps_people_above_threshold(self):
        dets = [
            Detection.from_xywh(0, 0, 10, 10, score=0.9, class_label="person"),
            Detection.from_xywh(0, 0, 10, 10, score=0.9, class_label="chair"),
            Detection.from_xywh(0, 0, 10, 10, score=0.2, class_label="person"),
        ]

        kept = filter_detections(dets, class_label="person", min_score=0.3)

        assert kept == [dets[0]]

    def test_score_threshold_is_strict(self):
        """A score equal to min_score is rejected."""
        det = Detection.from_xywh(0, 0, 10, 10, score=0.3)
        assert filter_detections([det], min_score=0.3) == []


def _run_demo(seed, duration_ms=60_000, step_ms=200):
    clock = ManualClock(0)
    detector = DemoPersonDetector(DemoConfig(frame_size=(640, 480), seed=seed), clock=clock)
    frames = []
    while clock.now_ms() <= duration_ms:
        frames.append(detector.detect())
        clock.advance(step_ms)
    return detector, frames


class TestDemoDetector:
    def test_empty_before_first_event(self):
        clock = ManualClock(0)
        detector = DemoPersonDetector(DemoConfig(first_event_ms=1000, seed=1), clock=clock)
        assert detector.detect() == []
        assert detector.people_present == 0

    def test_seeded_runs_are_reproducible(self):
        _, first = _run_demo(seed=42)
        _, second = _run_demo(seed=42)
        assert first == second

    def test_population_bounded(self):
        detector, frames = _run_demo(seed=5, duration_ms=300_000)
        assert all(len(f) <= detector.cfg.max_people for f in frames)
        assert any(frames)

    def test_boxes_valid_and_inside_frame(self):
        _, frames = _run_demo(seed=9)
        for frame in frames:
            for det in frame:
                assert det.class_label == "person"
                assert 0.8 <= det.score <= 1.0
                assert det.bbox.width > 0 and det.bbox.height > 0
                assert det.bbox.x >= 0 and det.bbox.y >= 0
                assert det.bbox.x2 <= 640 and det.bbox.y2 <= 480

    def test_drives_tracker_consistently(self):
        """Simulated people keep their track ids between frames."""
        clock = ManualClock(0)
        detector = DemoPersonDetector(DemoConfig(frame_size=(1280, 720), seed=3), clock=clock)
        engine = TrackingEngine(TrackingConfig(), clock=clock)

        while clock.now_ms() <= 120_000:
            engine.process_frame(detector.detect())
            assert len(engine.tracks()) >= detector.people_present
            clock.advance(200)

        stats = engine.stats()
        assert stats.total_entered >= 1
        assert stats.current_in_room == max(0, stats.total_entered - stats.total_left)
