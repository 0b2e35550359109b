"""
Pytest configuration and shared fixtures.
"""

import os
import sys

import pytest

# Add src to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from models.detection import Detection  # noqa: E402
from runtime.clock import ManualClock  # noqa: E402


@pytest.fixture
def clock():
    """Manual clock starting at t=0 ms."""
    return ManualClock(0.0)


@pytest.fixture
def make_detection():
    """Factory for person detections from (x, y, w, h)."""
    def _make(x, y, w, h, score=0.9):
        return Detection.from_xywh(x, y, w, h, score=score)
    return _make


@pytest.fixture
def temp_config_dir(tmp_path):
    """Create a temporary config directory with default.yaml."""
    config_dir = tmp_path / "config"
    config_dir.mkdir()

    default_yaml = config_dir / "default.yaml"
    default_yaml.write_text("""
camera:
  device_id: 0
  resolution: [640, 480]
  fps: 30

detection:
  backend: "demo"
  min_score: 0.3

tracking:
  tracker_timeout_seconds: 5
  match_iou_threshold: 0.3
  detection_throttle_ms: 200

announcements:
  enabled: true
  delay_ms: 2000

storage:
  local_database_path: "data/test.sqlite"
  max_events: 200

log_path: "logs/test.log"
log_level: "INFO"
""")

    return config_dir


@pytest.fixture
def valid_config():
    """Return a valid configuration dictionary."""
    return {
        "camera": {
            "device_id": 0,
            "resolution": [1280, 720],
            "fps": 30,
        },
        "detection": {
            "backend": "demo",
            "model": "yolov8n.pt",
            "min_score": 0.3,
        },
        "tracking": {
            "tracker_timeout_seconds": 5,
            "match_iou_threshold": 0.3,
            "detection_throttle_ms": 200,
        },
        "announcements": {
            "enabled": True,
            "delay_ms": 2000,
        },
        "storage": {
            "local_database_path": "data/test.sqlite",
            "max_events": 200,
        },
        "web": {
            "enabled": False,
            "port": 5000,
        },
        "log_path": "logs/test.log",
        "log_level": "INFO",
    }
