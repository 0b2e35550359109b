"""
Typed configuration models matching the YAML config structure.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Union


@dataclass
class CameraConfig:
    """Camera configuration."""
    device_id: Union[int, str] = 0
    resolution: List[int] = field(default_factory=lambda: [1280, 720])
    fps: int = 30

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "CameraConfig":
        """Adapter: Create from config dictionary."""
        return cls(
            device_id=d.get("device_id", 0),
            resolution=d.get("resolution", [1280, 720]),
            fps=d.get("fps", 30),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "device_id": self.device_id,
            "resolution": self.resolution,
            "fps": self.fps,
        }


@dataclass
class DetectionConfig:
    """Detector adapter configuration."""
    backend: str = "demo"
    model: str = "yolov8n.pt"
    class_label: str = "person"
    min_score: float = 0.3
    demo_seed: int = 0

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "DetectionConfig":
        return cls(
            backend=d.get("backend", "demo"),
            model=d.get("model", "yolov8n.pt"),
            class_label=d.get("class_label", "person"),
            min_score=d.get("min_score", 0.3),
            demo_seed=d.get("demo_seed", 0),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "backend": self.backend,
            "model": self.model,
            "class_label": self.class_label,
            "min_score": self.min_score,
            "demo_seed": self.demo_seed,
        }


@dataclass
class TrackingConfig:
    """Tracking configuration."""
    tracker_timeout_seconds: float = 5.0
    match_iou_threshold: float = 0.3
    detection_throttle_ms: float = 200.0

    @property
    def timeout_ms(self) -> float:
        return self.tracker_timeout_seconds * 1000.0

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "TrackingConfig":
        return cls(
            tracker_timeout_seconds=d.get("tracker_timeout_seconds", 5.0),
            match_iou_threshold=d.get("match_iou_threshold", 0.3),
            detection_throttle_ms=d.get("detection_throttle_ms", 200.0),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "tracker_timeout_seconds": self.tracker_timeout_seconds,
            "match_iou_threshold": self.match_iou_threshold,
            "detection_throttle_ms": self.detection_throttle_ms,
        }


@dataclass
class AnnouncementConfig:
    """Announcement dispatcher configuration."""
    enabled: bool = True
    delay_ms: float = 2000.0

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "AnnouncementConfig":
        return cls(
            enabled=d.get("enabled", True),
            delay_ms=d.get("delay_ms", 2000.0),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "enabled": self.enabled,
            "delay_ms": self.delay_ms,
        }


@dataclass
class StorageConfig:
    """Storage configuration."""
    local_database_path: str = "data/smartroom.sqlite"
    max_events: int = 200

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "StorageConfig":
        return cls(
            local_database_path=d.get("local_database_path", "data/smartroom.sqlite"),
            max_events=d.get("max_events", 200),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "local_database_path": self.local_database_path,
            "max_events": self.max_events,
        }


@dataclass
class WebConfig:
    """Snapshot API server configuration."""
    enabled: bool = True
    host: str = "0.0.0.0"
    port: int = 5000

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "WebConfig":
        return cls(
            enabled=d.get("enabled", True),
            host=d.get("host", "0.0.0.0"),
            port=d.get("port", 5000),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "enabled": self.enabled,
            "host": self.host,
            "port": self.port,
        }


@dataclass
class Config:
    """
    Complete application configuration.

    This is a typed representation of the YAML config structure.
    """
    camera: CameraConfig = field(default_factory=CameraConfig)
    detection: DetectionConfig = field(default_factory=DetectionConfig)
    tracking: TrackingConfig = field(default_factory=TrackingConfig)
    announcements: AnnouncementConfig = field(default_factory=AnnouncementConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)
    web: WebConfig = field(default_factory=WebConfig)
    log_path: str = "logs/smartroom.log"
    log_level: str = "INFO"

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "Config":
        """Adapter: Create Config from raw dictionary (e.g., from load_config)."""
        return cls(
            camera=CameraConfig.from_dict(d.get("camera", {}) or {}),
            detection=DetectionConfig.from_dict(d.get("detection", {}) or {}),
            tracking=TrackingConfig.from_dict(d.get("tracking", {}) or {}),
            announcements=AnnouncementConfig.from_dict(d.get("announcements", {}) or {}),
            storage=StorageConfig.from_dict(d.get("storage", {}) or {}),
            web=WebConfig.from_dict(d.get("web", {}) or {}),
            log_path=d.get("log_path", "logs/smartroom.log"),
            log_level=d.get("log_level", "INFO"),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert back to dictionary (for saving or exporting)."""
        return {
            "camera": self.camera.to_dict(),
            "detection": self.detection.to_dict(),
            "tracking": self.tracking.to_dict(),
            "announcements": self.announcements.to_dict(),
            "storage": self.storage.to_dict(),
            "web": self.web.to_dict(),
            "log_path": self.log_path,
            "log_level": self.log_level,
        }
