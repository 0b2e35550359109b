"""
Announcement queue and sinks.
"""

from .dispatcher import AnnouncementDispatcher, AnnouncementItem, DEFAULT_DELAY_MS
from .sinks import LoggingSink, MemorySink
from .text import ordinal, render_announcement

__all__ = [
    "AnnouncementDispatcher",
    "AnnouncementItem",
    "DEFAULT_DELAY_MS",
    "LoggingSink",
    "MemorySink",
    "ordinal",
    "render_announcement",
]
