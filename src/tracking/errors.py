"""
Tracker error types.
"""

from __future__ import annotations


class SmartRoomError(Exception):
    """Base class for tracker errors."""


class NotFoundError(SmartRoomError, KeyError):
    """A track store operation referenced an id that is not present."""

    def __init__(self, track_id: int):
        super().__init__(track_id)
        self.track_id = track_id

    def __str__(self) -> str:
        return f"track {self.track_id} not found"


class InvalidGeometryError(SmartRoomError, ValueError):
    """A bounding box has a negative width or height."""
