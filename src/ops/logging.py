"""
Logging setup.

Everything logs through the root logger; announcements go to their own
"announcements" logger so they can be routed separately.
"""

from __future__ import annotations

import logging
import os


def setup_logging(log_path: str, log_level: str = "INFO") -> None:
    log_dir = os.path.dirname(log_path)
    if log_dir and not os.path.exists(log_dir):
        os.makedirs(log_dir)

    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[
            logging.FileHandler(log_path),
            logging.StreamHandler(),
        ],
    )

    # The snapshot API is polled; keep per-request lines out of the log
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
