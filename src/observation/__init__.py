"""
Observation layer for pluggable frame sources.

This layer abstracts where frames come from (camera, video file, blank demo
frames) from the processing pipeline. Each source implements the
ObservationSource interface and returns FrameData objects.
"""

from .base import BlankSource, ObservationSource, ObservationConfig

__all__ = [
    "BlankSource",
    "ObservationSource",
    "ObservationConfig",
]
