"""
JSON export/import of settings, stats and event history.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from models.room_event import RoomEvent
from models.stats import OccupancyStats

REQUIRED_KEYS = ("settings", "stats", "event_log")


@dataclass
class ExportBundle:
    settings: Dict[str, Any]
    stats: OccupancyStats
    event_log: List[RoomEvent]  # newest first
    exported_at: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "settings": self.settings,
            "stats": self.stats.to_dict(),
            "event_log": [e.to_dict() for e in self.event_log],
            "exported_at": self.exported_at,
        }


def build_export(
    settings: Dict[str, Any],
    stats: OccupancyStats,
    events: List[RoomEvent],
) -> ExportBundle:
    return ExportBundle(
        settings=dict(settings),
        stats=stats,
        event_log=list(events),
        exported_at=datetime.now(timezone.utc).isoformat(),
    )


def dumps(bundle: ExportBundle) -> str:
    return json.dumps(bundle.to_dict(), indent=2)


def loads(text: str) -> ExportBundle:
    """
    Parse an export document.

    Raises:
        ValueError: if the document is not JSON, lacks a required section or
            a section has the wrong type.
    """
    data = json.loads(text)
    if not isinstance(data, dict) or any(k not in data for k in REQUIRED_KEYS):
        raise ValueError("Invalid export file format")
    if not isinstance(data["settings"], dict) or not isinstance(data["stats"], dict):
        raise ValueError("Invalid export file format: settings and stats must be objects")
    if not isinstance(data["event_log"], list):
        raise ValueError("Invalid export file format: event_log must be a list")

    try:
        events = [RoomEvent.from_dict(e) for e in data["event_log"]]
        stats = OccupancyStats.from_dict(data["stats"])
    except (KeyError, TypeError) as e:
        raise ValueError(f"Invalid export file format: {e}") from e

    return ExportBundle(
        settings=dict(data["settings"]),
        stats=stats,
        event_log=events,
        exported_at=data.get("exported_at"),
    )
