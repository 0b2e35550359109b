"""
Detection models for object detection results.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Tuple

import numpy as np


@dataclass(frozen=True)
class BoundingBox:
    """
    An axis-aligned bounding box in frame (pixel) coordinates.

    Attributes:
        x: Left edge x coordinate.
        y: Top edge y coordinate.
        width: Box width (must be >= 0 to be matched).
        height: Box height (must be >= 0 to be matched).
    """
    x: float
    y: float
    width: float
    height: float

    @property
    def x2(self) -> float:
        return self.x + self.width

    @property
    def y2(self) -> float:
        return self.y + self.height

    @property
    def area(self) -> float:
        return self.width * self.height

    def as_tuple(self) -> Tuple[float, float, float, float]:
        """Return as (x, y, width, height) tuple."""
        return (self.x, self.y, self.width, self.height)

    @classmethod
    def from_xyxy(cls, x1: float, y1: float, x2: float, y2: float) -> "BoundingBox":
        """Create from corner coordinates, as produced by most detectors."""
        return cls(x=x1, y=y1, width=x2 - x1, height=y2 - y1)


@dataclass(frozen=True)
class Detection:
    """
    A single person detection from the external detector.

    Detector adapters are responsible for restricting detections to the
    tracked class and a minimum score before they reach the tracker.

    Attributes:
        bbox: Bounding box in frame coordinates.
        score: Detection confidence score (0-1).
        class_label: Label reported by the detector (e.g. "person").
    """
    bbox: BoundingBox
    score: float = 1.0
    class_label: Optional[str] = None

    @classmethod
    def from_xywh(
        cls,
        x: float,
        y: float,
        width: float,
        height: float,
        score: float = 1.0,
        class_label: Optional[str] = "person",
    ) -> "Detection":
        return cls(
            bbox=BoundingBox(x=x, y=y, width=width, height=height),
            score=score,
            class_label=class_label,
        )

    @classmethod
    def from_numpy_row(cls, row: np.ndarray) -> "Detection":
        """
        Adapter: Convert from numpy array row [x, y, w, h, score] to Detection.
        """
        return cls(
            bbox=BoundingBox(
                x=float(row[0]),
                y=float(row[1]),
                width=float(row[2]),
                height=float(row[3]),
            ),
            score=float(row[4]) if len(row) > 4 else 1.0,
            class_label="person",
        )


def detections_from_numpy(arr: np.ndarray) -> List[Detection]:
    """
    Adapter: Convert numpy array of detections to list of Detection objects.

    Args:
        arr: Array of shape (N, 4+) where each row is [x, y, w, h, score?].
    """
    if arr is None or len(arr) == 0:
        return []
    return [Detection.from_numpy_row(row) for row in arr]
