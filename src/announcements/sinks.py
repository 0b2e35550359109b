from __future__ import annotations

import logging
from typing import List


class LoggingSink:
    """Announcement sink that writes each line to the application log."""

    def __init__(self, logger_name: str = "announcements", level: int = logging.INFO):
        self._logger = logging.getLogger(logger_name)
        self._level = level

    def __call__(self, text: str) -> None:
        self._logger.log(self._level, text)


class MemorySink:
    """Keeps every line it receives; used by the demo runner and tests."""

    def __init__(self):
        self.lines: List[str] = []

    def __call__(self, text: str) -> None:
        self.lines.append(text)
