"""
Occupancy analytics: stats reducer and the in-memory event log.
"""

from .stats import StatsAggregator, apply_event, replay
from .event_log import EventLog

__all__ = ["StatsAggregator", "apply_event", "replay", "EventLog"]
