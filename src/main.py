"""
Room occupancy monitor.

Detects people in camera frames (or a simulated room in demo mode), keeps a
persistent identity per person, counts entries and exits, announces them and
stores the event history.

Usage:
    python src/main.py --config config/config.yaml
    python src/main.py --demo
    python src/main.py --export backup.json

Arguments:
    --config: Path to configuration file
    --demo: Use the simulated detector instead of a camera
    --export / --import: Write or restore settings, stats and event history
    --clear-logs / --clear-storage: Maintenance commands
"""

import os
import sys
import argparse
import logging
import threading
import time
from typing import Dict, Any, Tuple, Optional

import yaml
import uvicorn

from announcements.dispatcher import AnnouncementDispatcher
from announcements.sinks import LoggingSink
from inference.backend import PersonDetector
from inference.demo_backend import DemoConfig, DemoPersonDetector
from models.config import Config
from models.stats import OccupancyStats
from observation.base import BlankSource, ObservationConfig, ObservationSource
from ops.logging import setup_logging
from pipeline.engine import PipelineConfig, PipelineEngine
from runtime.clock import Clock, MonotonicClock
from runtime.context import RuntimeContext
from storage.database import Database, StorageListener
from storage.export import build_export, dumps, loads
from tracking.engine import TrackingEngine
from web.app import create_app
from web.state import state as web_state

VALID_LOG_LEVELS = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Recursively merge override into base and return base."""
    for k, v in (override or {}).items():
        if isinstance(v, dict) and isinstance(base.get(k), dict):
            _deep_merge(base[k], v)
        else:
            base[k] = v
    return base


def load_config(config_path: str) -> Dict[str, Any]:
    """
    Load configuration with layering:
    - `config/default.yaml` (checked in)
    - `config/config.yaml` (local overrides)
    - plus any explicitly provided `--config` path (treated as overrides)
    """
    try:
        base_path = os.path.join(os.path.dirname(config_path), "default.yaml")
        base_cfg: Dict[str, Any] = {}
        if os.path.exists(base_path):
            with open(base_path, "r") as f:
                base_cfg = yaml.safe_load(f) or {}

        local_overrides_path = os.path.join(os.path.dirname(config_path), "config.yaml")
        local_cfg: Dict[str, Any] = {}
        if os.path.exists(local_overrides_path):
            with open(local_overrides_path, "r") as f:
                local_cfg = yaml.safe_load(f) or {}

        merged = _deep_merge(base_cfg, local_cfg)

        if os.path.exists(config_path) and os.path.abspath(config_path) != os.path.abspath(local_overrides_path):
            with open(config_path, "r") as f:
                explicit_cfg = yaml.safe_load(f) or {}
            merged = _deep_merge(merged, explicit_cfg)

        return merged
    except Exception as e:
        logging.error(f"Failed to load configuration: {e}")
        sys.exit(1)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def validate_config(config: Dict[str, Any]) -> Tuple[bool, Optional[str]]:
    """
    Validate configuration file structure and values.

    Args:
        config: Configuration dictionary

    Returns:
        Tuple of (is_valid, error_message)
    """
    required_sections = ['camera', 'detection', 'tracking', 'storage', 'log_path', 'log_level']
    for section in required_sections:
        if section not in config:
            return False, f"Missing required configuration section: {section}"

    # Camera
    camera = config.get('camera') or {}
    device_id = camera.get('device_id', 0)
    if not isinstance(device_id, (int, str)) or isinstance(device_id, bool):
        return False, "camera.device_id must be an integer (index) or string (URL)"
    if isinstance(device_id, int) and device_id < 0:
        return False, "camera.device_id integer must be non-negative"
    if 'resolution' in camera:
        res = camera['resolution']
        if not isinstance(res, list) or len(res) != 2 or not all(isinstance(x, int) and x > 0 for x in res):
            return False, "camera.resolution must be a list of two positive integers"
    if 'fps' in camera and (not isinstance(camera['fps'], int) or camera['fps'] <= 0):
        return False, "camera.fps must be a positive integer"

    # Detection
    detection = config.get('detection') or {}
    backend = detection.get('backend', 'demo')
    if backend not in ('demo', 'yolo'):
        return False, "detection.backend must be one of: demo, yolo"
    if backend == 'yolo' and not detection.get('model'):
        return False, "detection.model is required when detection.backend is 'yolo'"
    if 'min_score' in detection:
        score = detection['min_score']
        if not _is_number(score) or not (0 <= score < 1):
            return False, "detection.min_score must be a number in [0, 1)"

    # Tracking
    tracking = config.get('tracking') or {}
    if 'tracker_timeout_seconds' in tracking:
        timeout = tracking['tracker_timeout_seconds']
        if not _is_number(timeout) or timeout <= 0:
            return False, "tracking.tracker_timeout_seconds must be a positive number"
    if 'match_iou_threshold' in tracking:
        iou = tracking['match_iou_threshold']
        if not _is_number(iou) or not (0 < iou <= 1):
            return False, "tracking.match_iou_threshold must be between 0 and 1"
    if 'detection_throttle_ms' in tracking:
        throttle = tracking['detection_throttle_ms']
        if not _is_number(throttle) or throttle < 0:
            return False, "tracking.detection_throttle_ms must be a non-negative number"

    # Announcements
    announcements = config.get('announcements') or {}
    if 'delay_ms' in announcements:
        delay = announcements['delay_ms']
        if not _is_number(delay) or delay < 0:
            return False, "announcements.delay_ms must be a non-negative number"

    # Storage
    storage = config.get('storage') or {}
    if 'local_database_path' not in storage:
        return False, "Missing storage.local_database_path"
    if not isinstance(storage['local_database_path'], str):
        return False, "storage.local_database_path must be a string"
    if 'max_events' in storage:
        if not isinstance(storage['max_events'], int) or storage['max_events'] <= 0:
            return False, "storage.max_events must be a positive integer"

    # Web
    web = config.get('web') or {}
    if 'port' in web and (not isinstance(web['port'], int) or not (0 < web['port'] < 65536)):
        return False, "web.port must be an integer between 1 and 65535"

    # Logging
    if config['log_level'] not in VALID_LOG_LEVELS:
        return False, f"log_level must be one of: {', '.join(VALID_LOG_LEVELS)}"

    return True, None


def build_detector(cfg: Config, clock: Clock) -> PersonDetector:
    """Create the detector adapter selected by detection.backend."""
    if cfg.detection.backend == 'yolo':
        from inference.cpu_backend import CpuYoloConfig, UltralyticsPersonDetector

        return UltralyticsPersonDetector(
            CpuYoloConfig(
                model=cfg.detection.model,
                class_label=cfg.detection.class_label,
                min_score=float(cfg.detection.min_score),
            )
        )

    width, height = cfg.camera.resolution
    return DemoPersonDetector(
        DemoConfig(frame_size=(width, height), seed=cfg.detection.demo_seed),
        clock=clock,
    )


def build_source(cfg: Config) -> ObservationSource:
    """Camera for the YOLO backend; blank frames for the demo backend."""
    if cfg.detection.backend == 'yolo':
        from observation.opencv_source import OpenCVSource, OpenCVSourceConfig

        return OpenCVSource(OpenCVSourceConfig.from_camera_config(cfg.camera.to_dict()))

    return BlankSource(
        ObservationConfig(
            source_id="demo",
            resolution=tuple(cfg.camera.resolution),
            fps=cfg.camera.fps,
        )
    )


def export_history(db: Database, path: str, settings: Dict[str, Any]) -> None:
    """Write settings, stats and the stored event log to a JSON file."""
    stats = db.load_stats()
    if stats is None:
        stats = OccupancyStats()
    bundle = build_export(db.load_settings() or settings, stats, db.load_events())
    with open(path, "w") as f:
        f.write(dumps(bundle))
    logging.info(f"Exported {len(bundle.event_log)} events to {path}")


def import_history(db: Database, path: str) -> bool:
    """Replace stored settings, stats and events with the contents of an export file."""
    try:
        with open(path, "r") as f:
            bundle = loads(f.read())
    except (OSError, ValueError) as e:
        logging.error(f"Import failed: {e}")
        return False

    ok = db.replace_events(bundle.event_log)
    ok = db.save_stats(bundle.stats) and ok
    ok = db.save_settings(bundle.settings) and ok
    if ok:
        logging.info(f"Imported {len(bundle.event_log)} events from {path}")
    return ok


def main():
    """Main application function."""
    parser = argparse.ArgumentParser(description='SmartRoom occupancy monitor')
    parser.add_argument('--config', type=str, default='config/config.yaml',
                        help='Path to configuration file')
    parser.add_argument('--demo', action='store_true',
                        help='Use the simulated detector (no camera or model needed)')
    parser.add_argument('--export', type=str, metavar='PATH',
                        help='Export settings, stats and event history to PATH and exit')
    parser.add_argument('--import', dest='import_path', type=str, metavar='PATH',
                        help='Import settings, stats and event history from PATH and exit')
    parser.add_argument('--clear-logs', action='store_true',
                        help='Delete the stored event history and exit')
    parser.add_argument('--clear-storage', action='store_true',
                        help='Delete stored events and stats and exit')
    args = parser.parse_args()

    config = load_config(args.config)
    if args.demo:
        config.setdefault('detection', {})['backend'] = 'demo'

    is_valid, error_msg = validate_config(config)
    if not is_valid:
        logging.error(f"Configuration validation failed: {error_msg}")
        sys.exit(1)

    setup_logging(config['log_path'], config['log_level'])

    data_dir = os.path.dirname(config['storage']['local_database_path'])
    if data_dir and not os.path.exists(data_dir):
        os.makedirs(data_dir)

    db = Database(config['storage']['local_database_path'])
    db.initialize()

    # Maintenance commands
    if args.export or args.import_path or args.clear_logs or args.clear_storage:
        ok = True
        if args.clear_storage:
            ok = db.clear_all() and ok
        elif args.clear_logs:
            ok = db.clear_events() and ok
        if args.import_path:
            ok = import_history(db, args.import_path) and ok
        if args.export:
            export_history(db, args.export, config.get('tracking', {}))
        db.close()
        sys.exit(0 if ok else 1)

    # Stored settings (restored by --import) take precedence over file values
    stored_settings = db.load_settings()
    if stored_settings:
        _deep_merge(config['tracking'], stored_settings)
        is_valid, error_msg = validate_config(config)
        if not is_valid:
            logging.error(f"Stored settings are invalid: {error_msg}")
            sys.exit(1)

    cfg = Config.from_dict(config)
    logging.info(f"Starting SmartRoom monitor (detector backend: {cfg.detection.backend})")

    clock = MonotonicClock()
    dispatcher = None
    pipeline = None
    try:
        if cfg.announcements.enabled:
            dispatcher = AnnouncementDispatcher(LoggingSink(), clock=clock, delay_ms=cfg.announcements.delay_ms)
            dispatcher.start()

        engine = TrackingEngine(
            cfg.tracking,
            clock=clock,
            dispatcher=dispatcher,
            initial_stats=db.load_stats(),
            next_id=db.next_track_id(),
            initial_events=db.load_events(cfg.storage.max_events),
        )
        engine.add_listener(StorageListener(db, max_events=cfg.storage.max_events))

        ctx = RuntimeContext(config=config, engine=engine, dispatcher=dispatcher, db=db)
        web_state.set_context(ctx)
        web_state.update_system_stats({"start_time": time.time()})

        if cfg.web.enabled:
            def run_web_app():
                uvicorn.run(
                    create_app(),
                    host=cfg.web.host,
                    port=cfg.web.port,
                    log_level="info",
                )

            web_thread = threading.Thread(target=run_web_app, daemon=True)
            web_thread.start()
            logging.info(f"Web API started on port {cfg.web.port}")

        pipeline = PipelineEngine(
            build_source(cfg),
            build_detector(cfg, clock),
            engine,
            PipelineConfig(detection_throttle_ms=cfg.tracking.detection_throttle_ms),
            clock=clock,
        )
        pipeline.add_callback(lambda frame_data, result: web_state.mark_frame())
        pipeline.run()

    except KeyboardInterrupt:
        logging.info("Process interrupted by user")
    except Exception as e:
        logging.error(f"Error in main process: {e}")
    finally:
        if pipeline is not None:
            pipeline.stop()
        if dispatcher is not None:
            dispatcher.stop()
        db.close()
        logging.info("SmartRoom monitor stopped")


if __name__ == "__main__":
    main()
