"""
Per-frame detection-to-track association.

Greedy IoU matching: detections are visited in input order and each one
claims the best still-unmatched track. This is not a minimum-cost
assignment; the outcome depends on detection order.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

from models.detection import BoundingBox, Detection
from models.track import Track
from .errors import InvalidGeometryError
from .geometry import overlap_ratio, validate_bbox
from .store import TrackStore


@dataclass
class MatchedUpdate:
    """A detection matched to an existing track."""
    track_id: int
    bbox: BoundingBox
    score: float


@dataclass
class AssociationResult:
    """
    Output of one association pass.

    Attributes:
        matched_updates: Updates to apply to existing tracks (not yet applied).
        new_tracks: Tracks allocated for unmatched detections.
        unmatched_track_ids: Pre-existing tracks no detection claimed.
        dropped: Number of detections rejected for invalid geometry.
    """
    matched_updates: List[MatchedUpdate] = field(default_factory=list)
    new_tracks: List[Track] = field(default_factory=list)
    unmatched_track_ids: List[int] = field(default_factory=list)
    dropped: int = 0


class Associator:
    """
    Matches a frame's detections against the tracks in a TrackStore.

    A detection matches the unmatched track with the strictly highest IoU,
    provided that IoU exceeds ``iou_threshold``. Exact ties go to the track
    inserted first. Unmatched detections become new tracks via
    ``TrackStore.allocate``; unmatched tracks are only reported.
    """

    def __init__(self, store: TrackStore, iou_threshold: float = 0.3):
        self.store = store
        self.iou_threshold = iou_threshold

    def associate(self, detections: Sequence[Detection], now: float) -> AssociationResult:
        result = AssociationResult()

        # Snapshot of candidates in insertion order; new tracks allocated
        # below are not candidates for later detections in this frame.
        candidates: List[Tuple[int, BoundingBox]] = [
            (t.track_id, t.bbox) for t in self.store.all()
        ]
        matched_ids = set()
        unmatched: List[Detection] = []

        for detection in detections:
            try:
                validate_bbox(detection.bbox)
            except InvalidGeometryError as e:
                logging.warning(f"Dropping detection: {e}")
                result.dropped += 1
                continue

            best_id = self._best_match(detection.bbox, candidates, matched_ids)
            if best_id is None:
                unmatched.append(detection)
                continue

            matched_ids.add(best_id)
            result.matched_updates.append(
                MatchedUpdate(track_id=best_id, bbox=detection.bbox, score=detection.score)
            )

        for detection in unmatched:
            result.new_tracks.append(
                self.store.allocate(detection.bbox, detection.score, now)
            )

        result.unmatched_track_ids = [
            track_id for track_id, _ in candidates if track_id not in matched_ids
        ]
        return result

    def _best_match(
        self,
        bbox: BoundingBox,
        candidates: List[Tuple[int, BoundingBox]],
        matched_ids: set,
    ) -> Optional[int]:
        best_id: Optional[int] = None
        best_iou = 0.0

        for track_id, track_bbox in candidates:
            if track_id in matched_ids:
                continue

            iou = overlap_ratio(bbox, track_bbox)
            # Strict comparison keeps the earliest track on exact ties.
            if iou > self.iou_threshold and iou > best_iou:
                best_id = track_id
                best_iou = iou

        return best_id
