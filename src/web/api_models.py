from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class TrackResponse(BaseModel):
    track_id: int
    bbox: List[float] = Field(..., description="[x, y, width, height]")
    first_seen_at: float
    last_seen_at: float
    confidence: float


class StatsResponse(BaseModel):
    total_entered: int
    total_left: int
    current_in_room: int
    peak_occupancy: int


class EventResponse(BaseModel):
    kind: str = Field(..., description="ENTRY|EXIT")
    track_id: int
    timestamp: float = Field(..., description="Monotonic ms of the transition")


class StatusResponse(BaseModel):
    """
    Compact status response optimized for frontend polling.
    """
    running: bool
    last_frame_age_s: Optional[float] = None
    uptime_seconds: Optional[int] = None
    frame_count: int = 0
    active_tracks: int = 0
    pending_announcements: int = 0
    stats: StatsResponse
    warnings: list[str] = Field(default_factory=list)


class ExportResponse(BaseModel):
    settings: Dict[str, Any]
    stats: StatsResponse
    event_log: List[EventResponse]
    exported_at: Optional[str] = None
