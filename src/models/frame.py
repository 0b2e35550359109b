"""
FrameData model for frames pulled from an observation source.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np


@dataclass
class FrameData:
    """
    A frame plus the metadata the pipeline needs.

    Attributes:
        frame: Pixel data (BGR, HxWx3). The demo detector ignores it.
        width: Frame width in pixels.
        height: Frame height in pixels.
        timestamp: Wall-clock capture time (seconds). The tracker uses its
            own monotonic clock instead.
        frame_index: 1-based frame number since the source was opened.
        source: Identifier of the source that produced the frame.
    """
    frame: np.ndarray
    width: int
    height: int
    timestamp: float
    frame_index: int = 0
    source: Optional[str] = None

    @classmethod
    def from_numpy(
        cls,
        frame: np.ndarray,
        timestamp: float,
        frame_index: int = 0,
        source: Optional[str] = None,
    ) -> "FrameData":
        h, w = frame.shape[:2]
        return cls(
            frame=frame,
            width=w,
            height=h,
            timestamp=timestamp,
            frame_index=frame_index,
            source=source,
        )

    @classmethod
    def blank(
        cls,
        width: int,
        height: int,
        timestamp: float,
        frame_index: int = 0,
        source: Optional[str] = None,
    ) -> "FrameData":
        """All-black frame of the given size."""
        return cls.from_numpy(
            np.zeros((height, width, 3), dtype=np.uint8),
            timestamp=timestamp,
            frame_index=frame_index,
            source=source,
        )

    @property
    def shape(self) -> Tuple[int, ...]:
        return self.frame.shape

    @property
    def size(self) -> Tuple[int, int]:
        """(width, height)"""
        return (self.width, self.height)
