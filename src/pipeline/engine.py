"""
Pipeline engine for the occupancy monitor.

This is the caller side of the tracker: it pulls frames from an
ObservationSource, drops frames that arrive faster than the detection
throttle, runs the detector adapter and feeds the resulting detections to
the TrackingEngine one frame at a time.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Callable, List, Optional

from inference.backend import PersonDetector
from models.frame import FrameData
from observation.base import ObservationSource
from runtime.clock import Clock
from tracking.engine import FrameResult, TrackingEngine


@dataclass
class PipelineConfig:
    """
    Configuration for the pipeline engine.

    Attributes:
        detection_throttle_ms: Minimum spacing between processed frames.
        max_consecutive_failures: Max frame read failures before stopping.
        stats_log_interval: Seconds between status log messages.
        retry_delay: Seconds to wait after a failed frame read.
    """
    detection_throttle_ms: float = 200.0
    max_consecutive_failures: int = 10
    stats_log_interval: float = 60.0
    retry_delay: float = 0.5


@dataclass
class PipelineStats:
    """Runtime statistics for the pipeline."""
    frames_read: int = 0
    frames_processed: int = 0
    frames_throttled: int = 0
    detector_errors: int = 0
    consecutive_failures: int = 0
    start_time: float = field(default_factory=time.time)
    last_stats_log_time: float = field(default_factory=time.time)


class PipelineEngine:
    """
    Main processing loop.

    Example:
        engine = PipelineEngine(source, detector, tracking_engine, PipelineConfig())
        engine.run()
    """

    def __init__(
        self,
        source: ObservationSource,
        detector: PersonDetector,
        tracker: TrackingEngine,
        config: Optional[PipelineConfig] = None,
        clock: Optional[Clock] = None,
    ):
        self.source = source
        self.detector = detector
        self.tracker = tracker
        self.config = config or PipelineConfig()
        self.clock = clock or tracker.clock
        self.stats = PipelineStats()
        self._running = False
        self._last_processed_at: Optional[float] = None
        self._callbacks: List[Callable[[FrameData, FrameResult], None]] = []

    def add_callback(self, callback: Callable[[FrameData, FrameResult], None]) -> None:
        """
        Add a callback to be called after each processed frame.

        Args:
            callback: Function taking (frame_data, frame_result) as arguments.
        """
        self._callbacks.append(callback)

    def run(self) -> None:
        """
        Run the main processing loop until stopped or the source is exhausted.
        """
        self._running = True
        self.stats = PipelineStats()

        try:
            self.source.open()
            logging.info(f"Pipeline started: source={self.source.source_id}")

            while self._running:
                frame_data = self.source.read()

                if frame_data is None:
                    self.stats.consecutive_failures += 1
                    if self.stats.consecutive_failures >= self.config.max_consecutive_failures:
                        logging.error(
                            f"Too many consecutive failures ({self.stats.consecutive_failures}), stopping"
                        )
                        break
                    logging.warning(
                        f"Frame read failed ({self.stats.consecutive_failures}/"
                        f"{self.config.max_consecutive_failures})"
                    )
                    time.sleep(self.config.retry_delay)
                    continue

                self.stats.consecutive_failures = 0
                self.process_frame(frame_data)
                self._handle_periodic_tasks()

        except KeyboardInterrupt:
            logging.info("Pipeline interrupted by user")
        finally:
            self._cleanup()

    def stop(self) -> None:
        """Signal the pipeline to stop after the current frame."""
        self._running = False

    def process_frame(self, frame_data: FrameData) -> Optional[FrameResult]:
        """
        Detect and track one frame.

        Returns:
            The tracker's FrameResult, or None if the frame was throttled or
            the detector failed (the tracker state is left untouched).
        """
        self.stats.frames_read += 1
        now = self.clock.now_ms()

        if (
            self._last_processed_at is not None
            and now - self._last_processed_at < self.config.detection_throttle_ms
        ):
            self.stats.frames_throttled += 1
            return None

        try:
            detections = self.detector.detect(frame_data.frame)
        except Exception as e:
            self.stats.detector_errors += 1
            logging.warning(f"Detector error, skipping frame {frame_data.frame_index}: {e}")
            return None

        self._last_processed_at = now
        result = self.tracker.process_frame(detections, now=now)
        self.stats.frames_processed += 1

        for callback in self._callbacks:
            try:
                callback(frame_data, result)
            except Exception as e:
                logging.warning(f"Callback error: {e}")

        return result

    def _handle_periodic_tasks(self) -> None:
        now = time.time()
        if now - self.stats.last_stats_log_time >= self.config.stats_log_interval:
            stats = self.tracker.stats()
            logging.info(
                f"Pipeline stats: frames={self.stats.frames_processed}/{self.stats.frames_read}, "
                f"in_room={stats.current_in_room}, entered={stats.total_entered}, "
                f"left={stats.total_left}, peak={stats.peak_occupancy}"
            )
            self.stats.last_stats_log_time = now

    def _cleanup(self) -> None:
        self._running = False
        try:
            self.source.close()
        except Exception as e:
            logging.warning(f"Error closing source: {e}")
        logging.info("Pipeline stopped")
