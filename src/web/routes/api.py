from __future__ import annotations

import time
from typing import List, Optional

from fastapi import APIRouter, HTTPException, Query

from storage.export import build_export
from ..api_models import EventResponse, ExportResponse, StatsResponse, StatusResponse, TrackResponse
from ..state import state

router = APIRouter()


def _require_context():
    ctx = state.get_context()
    if ctx is None:
        raise HTTPException(status_code=503, detail="Tracker not running")
    return ctx


def _compute_warnings(last_frame_age_s: Optional[float]) -> list[str]:
    """
    Compute warning flags for the status endpoint.

    Thresholds:
    - camera_stale: last_frame_age_s > 2
    - camera_offline: last_frame_age_s > 10 (or no frame yet)
    """
    warnings = []
    if last_frame_age_s is None or last_frame_age_s > 10:
        warnings.append("camera_offline")
    elif last_frame_age_s > 2:
        warnings.append("camera_stale")
    return warnings


@router.get("/tracks", response_model=List[TrackResponse])
def tracks():
    ctx = _require_context()
    return [t.to_dict() for t in ctx.engine.tracks()]


@router.get("/stats", response_model=StatsResponse)
def stats():
    ctx = _require_context()
    return ctx.engine.stats().to_dict()


@router.get("/events", response_model=List[EventResponse])
def events(limit: int = Query(20, ge=1, le=1000)):
    """Most recent events, newest first."""
    ctx = _require_context()
    return [e.to_dict() for e in ctx.engine.recent_events(limit)]


@router.get("/status", response_model=StatusResponse)
def status():
    ctx = _require_context()
    now = time.time()

    sys_stats = state.get_system_stats_copy()
    last_frame_ts = sys_stats.get("last_frame_ts")
    last_frame_age_s = (now - last_frame_ts) if last_frame_ts else None

    snapshot = ctx.engine.snapshot(recent=0)
    warnings = _compute_warnings(last_frame_age_s)

    return {
        "running": "camera_offline" not in warnings,
        "last_frame_age_s": last_frame_age_s,
        "uptime_seconds": int(ctx.uptime_seconds),
        "frame_count": snapshot.frame_count,
        "active_tracks": len(snapshot.tracks),
        "pending_announcements": len(ctx.dispatcher) if ctx.dispatcher is not None else 0,
        "stats": snapshot.stats.to_dict(),
        "warnings": warnings,
    }


@router.get("/export", response_model=ExportResponse)
def export():
    """Settings, stats and the full in-memory event log as one document."""
    ctx = _require_context()
    snapshot = ctx.engine.snapshot(recent=len(ctx.engine.event_log))
    return build_export(ctx.settings(), snapshot.stats, snapshot.recent_events).to_dict()
