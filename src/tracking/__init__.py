"""
Tracking module.

The canonical entry point is tracking.engine.TrackingEngine.
"""

from .errors import InvalidGeometryError, NotFoundError, SmartRoomError
from .geometry import overlap_ratio, validate_bbox
from .store import TrackStore
from .associator import Associator, AssociationResult, MatchedUpdate
from .lifecycle import LifecycleController
from .engine import TrackingEngine, EngineSnapshot, FrameResult

__all__ = [
    "InvalidGeometryError",
    "NotFoundError",
    "SmartRoomError",
    "overlap_ratio",
    "validate_bbox",
    "TrackStore",
    "Associator",
    "AssociationResult",
    "MatchedUpdate",
    "LifecycleController",
    "TrackingEngine",
    "EngineSnapshot",
    "FrameResult",
]
