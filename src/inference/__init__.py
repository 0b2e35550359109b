"""
Detector adapters: Ultralytics YOLO on CPU and a camera-free demo simulator.
"""

from .backend import PersonDetector, filter_detections
from .demo_backend import DemoConfig, DemoPersonDetector

__all__ = ["PersonDetector", "filter_detections", "DemoConfig", "DemoPersonDetector"]
