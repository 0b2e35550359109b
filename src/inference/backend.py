"""
Detector adapter interface.

Adapters return person detections in the original frame coordinate system
with the class and minimum-score filters already applied; the tracker does
no filtering of its own.
"""

from __future__ import annotations

from typing import Iterable, List, Optional, Protocol

import numpy as np

from models.detection import Detection


class PersonDetector(Protocol):
    def detect(self, frame: Optional[np.ndarray]) -> List[Detection]:
        ...


def filter_detections(
    detections: Iterable[Detection],
    class_label: str = "person",
    min_score: float = 0.3,
) -> List[Detection]:
    """Keep detections of the tracked class scoring strictly above min_score."""
    return [
        d for d in detections
        if d.class_label == class_label and d.score > min_score
    ]
