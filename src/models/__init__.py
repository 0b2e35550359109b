"""
Typed models for the SmartRoom occupancy monitor.

Plain dataclasses shared by the tracker, storage and web layers. Use the
``from_dict``/``to_dict`` adapters when crossing a persistence boundary.
"""

from .frame import FrameData
from .detection import Detection, BoundingBox
from .track import Track, TrackState
from .room_event import RoomEvent, EventKind
from .stats import OccupancyStats
from .config import (
    Config,
    CameraConfig,
    DetectionConfig,
    TrackingConfig,
    AnnouncementConfig,
    StorageConfig,
    WebConfig,
)

__all__ = [
    # Frame
    "FrameData",
    # Detection
    "Detection",
    "BoundingBox",
    # Tracking
    "Track",
    "TrackState",
    # Events
    "RoomEvent",
    "EventKind",
    "OccupancyStats",
    # Config
    "Config",
    "CameraConfig",
    "DetectionConfig",
    "TrackingConfig",
    "AnnouncementConfig",
    "StorageConfig",
    "WebConfig",
]
