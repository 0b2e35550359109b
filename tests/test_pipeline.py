"""
Tests for the pipeline engine.
"""

from typing import Optional
from unittest.mock import MagicMock

import numpy as np
import pytest

from models.config import TrackingConfig
from models.detection import Detection
from models.frame import FrameData
from models.room_event import EventKind
from observation.base import ObservationConfig, ObservationSource
from pipeline.engine import PipelineConfig, PipelineEngine
from tracking.engine import TrackingEngine


class MockObservationSource(ObservationSource):
    """Mock source for testing."""

    def __init__(self, config: ObservationConfig, max_frames: int = 10, clock=None, step_ms: float = 0):
        super().__init__(config)
        self._max_frames = max_frames
        self._clock = clock
        self._step_ms = step_ms
        self._pos = 0

    def open(self) -> None:
        self._is_open = True
        self._pos = 0
        self._frame_index = 0

    def read(self) -> Optional[FrameData]:
        if not self._is_open or self._pos >= self._max_frames:
            return None

        if self._clock is not None and self._pos > 0:
            self._clock.advance(self._step_ms)

        self._pos += 1
        self._frame_index += 1
        return FrameData.from_numpy(
            np.zeros((480, 640, 3), dtype=np.uint8),
            timestamp=float(self._frame_index),
            frame_index=self._frame_index,
            source=self.source_id,
        )

    def close(self) -> None:
        self._is_open = False


def _frame(index=1):
    return FrameData.from_numpy(np.zeros((10, 10, 3), dtype=np.uint8), timestamp=0.0, frame_index=index)


@pytest.fixture
def tracker(clock):
    return TrackingEngine(TrackingConfig(), clock=clock)


@pytest.fixture
def detector():
    mock = MagicMock()
    mock.detect.return_value = [Detection.from_xywh(100, 100, 50, 100, score=0.9)]
    return mock


class TestThrottle:
    def test_frames_inside_throttle_window_are_skipped(self, clock, tracker, detector):
        """Frames arriving less than detection_throttle_ms apart are dropped."""
        engine = PipelineEngine(MagicMock(), detector, tracker, PipelineConfig(detection_throttle_ms=200))

        assert engine.process_frame(_frame(1)) is not None
        clock.advance(100)
        assert engine.process_frame(_frame(2)) is None
        clock.advance(100)
        assert engine.process_frame(_frame(3)) is not None

        assert detector.detect.call_count == 2
        assert engine.stats.frames_throttled == 1
        assert tracker.frame_count == 2

    def test_zero_throttle_processes_everything(self, clock, tracker, detector):
        engine = PipelineEngine(MagicMock(), detector, tracker, PipelineConfig(detection_throttle_ms=0))

        for i in range(5):
            assert engine.process_frame(_frame(i)) is not None

        assert engine.stats.frames_processed == 5


class TestDetectorFailures:
    def test_detector_error_skips_frame(self, clock, tracker):
        """A raising detector leaves the tracker untouched."""
        detector = MagicMock()
        detector.detect.side_effect = RuntimeError("model crashed")
        engine = PipelineEngine(MagicMock(), detector, tracker, PipelineConfig(detection_throttle_ms=0))

        assert engine.process_frame(_frame()) is None
        assert engine.stats.detector_errors == 1
        assert tracker.frame_count == 0

    def test_failed_frame_does_not_start_throttle_window(self, clock, tracker):
        """After a detector error the next frame is processed right away."""
        detector = MagicMock()
        detector.detect.side_effect = [RuntimeError("boom"), []]
        engine = PipelineEngine(MagicMock(), detector, tracker, PipelineConfig(detection_throttle_ms=200))

        engine.process_frame(_frame(1))
        clock.advance(10)
        assert engine.process_frame(_frame(2)) is not None


class TestRun:
    def test_run_until_source_exhausted(self, clock, tracker, detector):
        """run() processes frames and stops after repeated read failures."""
        source = MockObservationSource(ObservationConfig(source_id="mock"), max_frames=5, clock=clock, step_ms=250)
        engine = PipelineEngine(
            source, detector, tracker,
            PipelineConfig(detection_throttle_ms=200, max_consecutive_failures=2, retry_delay=0),
        )

        engine.run()

        assert engine.stats.frames_read == 5
        assert engine.stats.frames_processed == 5
        assert not source.is_open
        assert tracker.stats().total_entered == 1

    def test_callbacks_receive_results(self, clock, tracker, detector):
        source = MockObservationSource(ObservationConfig(), max_frames=2, clock=clock, step_ms=500)
        engine = PipelineEngine(
            source, detector, tracker,
            PipelineConfig(max_consecutive_failures=1, retry_delay=0),
        )
        seen = []
        engine.add_callback(lambda frame_data, result: seen.append([e.kind for e in result.events]))

        engine.run()

        assert seen == [[EventKind.ENTRY], []]

    def test_callback_error_is_contained(self, clock, tracker, detector):
        engine = PipelineEngine(MagicMock(), detector, tracker, PipelineConfig(detection_throttle_ms=0))
        engine.add_callback(MagicMock(side_effect=ValueError("bad callback")))

        assert engine.process_frame(_frame()) is not None

    def test_stop(self, clock, tracker, detector):
        """stop() from a callback ends the loop after the current frame."""
        source = MockObservationSource(ObservationConfig(), max_frames=100, clock=clock, step_ms=500)
        engine = PipelineEngine(source, detector, tracker, PipelineConfig(retry_delay=0))
        engine.add_callback(lambda frame_data, result: engine.stop())

        engine.run()

        assert engine.stats.frames_processed == 1
