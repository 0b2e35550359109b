"""
ObservationSource interface for pluggable frame sources.

The tracker never touches capture devices; the pipeline pulls frames from
an ObservationSource and hands them to the detector adapter.
"""

from __future__ import annotations

import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Iterator, Optional

from models.frame import FrameData


@dataclass
class ObservationConfig:
    """
    Base configuration for observation sources.

    Attributes:
        source_id: Unique identifier for this source (e.g., "room-cam").
        resolution: Target resolution as (width, height). None = use source default.
        fps: Target frames per second. None = use source default.
    """
    source_id: str = "default"
    resolution: Optional[tuple[int, int]] = None
    fps: Optional[int] = None


class ObservationSource(ABC):
    """
    Abstract base class for observation sources.

    Lifecycle:
        1. Create instance with config
        2. Call open() to initialize the source
        3. Call read() repeatedly to get frames
        4. Call close() to release resources

    Can also be used as a context manager:
        with OpenCVSource(config) as source:
            for frame_data in source:
                process(frame_data)
    """

    def __init__(self, config: ObservationConfig):
        self._config = config
        self._is_open = False
        self._frame_index = 0

    @property
    def source_id(self) -> str:
        return self._config.source_id

    @property
    def is_open(self) -> bool:
        return self._is_open

    @property
    def frame_index(self) -> int:
        return self._frame_index

    @abstractmethod
    def open(self) -> None:
        """
        Open/initialize the observation source.

        Raises:
            RuntimeError: If the source cannot be opened.
        """

    @abstractmethod
    def read(self) -> Optional[FrameData]:
        """
        Read the next frame from the source.

        Returns None if no frame is available (end of file, camera error).
        """

    @abstractmethod
    def close(self) -> None:
        """Release resources. Safe to call multiple times."""

    def __enter__(self) -> "ObservationSource":
        self.open()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def __iter__(self) -> Iterator[FrameData]:
        if not self._is_open:
            raise RuntimeError("Source must be open before iterating")

        while True:
            frame_data = self.read()
            if frame_data is None:
                break
            yield frame_data


class BlankSource(ObservationSource):
    """
    Produces black frames at the configured rate.

    Used with the demo detector, which ignores pixel content.
    """

    def __init__(self, config: ObservationConfig, max_frames: Optional[int] = None):
        super().__init__(config)
        self._max_frames = max_frames
        self._last_read: Optional[float] = None

    def open(self) -> None:
        self._is_open = True
        self._frame_index = 0
        self._last_read = None

    def read(self) -> Optional[FrameData]:
        if not self._is_open:
            return None
        if self._max_frames is not None and self._frame_index >= self._max_frames:
            return None

        fps = self._config.fps
        if fps and self._last_read is not None:
            wait = (1.0 / fps) - (time.monotonic() - self._last_read)
            if wait > 0:
                time.sleep(wait)
        self._last_read = time.monotonic()

        width, height = self._config.resolution or (640, 480)
        self._frame_index += 1
        return FrameData.blank(
            width,
            height,
            timestamp=time.time(),
            frame_index=self._frame_index,
            source=self.source_id,
        )

    def close(self) -> None:
        self._is_open = False
