"""
Pipeline module for the occupancy monitor.

The pipeline orchestrates the full processing flow:
- Frame acquisition from observation sources
- Detection throttling and person detection
- Tracking, entry/exit lifecycle and announcements (via TrackingEngine)
"""

from .engine import PipelineEngine, PipelineConfig, PipelineStats

__all__ = [
    "PipelineEngine",
    "PipelineConfig",
    "PipelineStats",
]
