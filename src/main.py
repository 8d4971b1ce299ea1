"""
Parking lot counter.

Detects cars in a camera or video feed, tracks them across frames and counts
them entering and leaving through one edge of the frame. Totals are shown on
screen and can be published to an MQTT broker.

Usage:
    python src/main.py --config config/config.yaml
    python src/main.py --input parking.mp4 --boundary t --publish

Arguments:
    --config: Path to configuration file
    --input: Video file to read instead of the camera
    --device: Camera device index
    --boundary: Entrance/exit edge (top|bottom|left|right or t|b|l|r)
    --publish: Publish totals to the MQTT broker
    --display / --headless: Force the display window on or off
"""

import os
import sys
import argparse
import logging
import signal
from typing import Any, Dict, Optional, Tuple

import yaml

from display.overlay import DisplayWindow
from inference.backend import create_backend
from messaging.publisher import MqttPublisher
from messaging.utils import apply_env_overrides, check_messaging_config
from models.config import Config
from models.direction import Boundary
from observation.opencv_source import create_source_from_config
from ops.logging import setup_logging
from pipeline.engine import create_coordinator_from_config

VALID_LOG_LEVELS = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
DETECTION_BACKENDS = ('opencv', 'yolo')


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

        # Explicit path last, unless it is the local override file itself
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
    required_sections = ['camera', 'detection', 'tracking', 'log_path', 'log_level']
    for section in required_sections:
        if section not in config:
            return False, f"Missing required configuration section: {section}"

    # Camera / video source
    camera = config.get('camera') or {}
    if 'device_id' not in camera:
        return False, "Missing camera.device_id"
    device_id = camera['device_id']
    if isinstance(device_id, bool) or not isinstance(device_id, (int, str)):
        return False, "camera.device_id must be an integer (index) or string (file path)"
    if isinstance(device_id, int) and device_id < 0:
        return False, "camera.device_id integer must be non-negative"
    if 'resolution' in camera and camera['resolution'] is not None:
        res = camera['resolution']
        if not isinstance(res, list) or len(res) != 2:
            return False, "camera.resolution must be a list of [width, height]"
        if not all(isinstance(x, int) and x > 0 for x in res):
            return False, "camera.resolution values must be positive integers"
    if 'fps' in camera and camera['fps'] is not None:
        if not isinstance(camera['fps'], int) or camera['fps'] <= 0:
            return False, "camera.fps must be a positive integer"

    # Detection
    detection = config.get('detection') or {}
    backend = detection.get('backend', 'opencv')
    if backend not in DETECTION_BACKENDS:
        return False, f"detection.backend must be one of: {', '.join(DETECTION_BACKENDS)}"
    if not isinstance(detection.get('model'), str) or not detection.get('model'):
        return False, "detection.model is required"
    if backend == 'opencv':
        if not isinstance(detection.get('model_config'), str) or not detection.get('model_config'):
            return False, "detection.model_config is required when detection.backend is 'opencv'"
    conf = detection.get('conf_threshold', 0.5)
    if not _is_number(conf) or not (0 <= conf <= 1):
        return False, "detection.conf_threshold must be between 0 and 1"

    # Tracking
    tracking = config.get('tracking') or {}
    try:
        Boundary.parse(tracking.get('boundary', 'bottom'))
    except ValueError:
        return False, "tracking.boundary must be one of: top, bottom, left, right (or t, b, l, r)"
    max_dist = tracking.get('max_dist', 300)
    if not _is_number(max_dist) or max_dist <= 0:
        return False, "tracking.max_dist must be a positive number"
    max_gone = tracking.get('max_gone', 30)
    if not isinstance(max_gone, int) or isinstance(max_gone, bool) or max_gone < 0:
        return False, "tracking.max_gone must be a non-negative integer"
    points = tracking.get('points') or {}
    for key in ('min_width', 'min_height', 'clip_width', 'clip_height'):
        if key in points and (not isinstance(points[key], int) or points[key] <= 0):
            return False, f"tracking.points.{key} must be a positive integer"

    # Publishing
    publish = config.get('publish') or {}
    if publish:
        interval = publish.get('interval', 1.0)
        if not _is_number(interval) or interval <= 0:
            return False, "publish.interval must be a positive number"
        if publish.get('enabled') and not check_messaging_config(publish):
            return False, "Invalid publish configuration"

    # Display
    display = config.get('display') or {}
    if 'delay_ms' in display:
        if not _is_number(display['delay_ms']) or display['delay_ms'] <= 0:
            return False, "display.delay_ms must be a positive number"

    if config['log_level'] not in VALID_LOG_LEVELS:
        return False, f"log_level must be one of: {', '.join(VALID_LOG_LEVELS)}"

    return True, None


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description='Parking Lot Counter')
    parser.add_argument('--config', type=str, default='config/config.yaml',
                        help='Path to configuration file')
    parser.add_argument('--input', type=str, default=None,
                        help='Path to a video file (overrides camera.device_id)')
    parser.add_argument('--device', type=int, default=None,
                        help='Camera device index (overrides camera.device_id)')
    parser.add_argument('--boundary', type=str, default=None,
                        help='Entrance/exit edge: top, bottom, left, right (or t, b, l, r)')
    parser.add_argument('--model', type=str, default=None,
                        help='Path to the detection model weights')
    parser.add_argument('--model-config', type=str, default=None,
                        help='Path to the detection model description')
    parser.add_argument('--conf', type=float, default=None,
                        help='Detection confidence threshold')
    parser.add_argument('--max-dist', type=float, default=None,
                        help='Max distance in pixels between a point and a centroid')
    parser.add_argument('--max-gone', type=int, default=None,
                        help='Frames a centroid may go unmatched before it is dropped')
    parser.add_argument('--publish', action='store_true',
                        help='Publish totals to the MQTT broker')
    parser.add_argument('--rate', type=float, default=None,
                        help='Seconds between published totals')
    parser.add_argument('--display', action='store_true',
                        help='Enable visual display')
    parser.add_argument('--headless', action='store_true',
                        help='Disable visual display')
    return parser.parse_args(argv)


def apply_cli_overrides(config: Dict[str, Any], args: argparse.Namespace) -> Dict[str, Any]:
    """Apply command-line flags on top of the loaded configuration."""
    camera = config.setdefault('camera', {})
    detection = config.setdefault('detection', {})
    tracking = config.setdefault('tracking', {})
    publish = config.setdefault('publish', {})
    display = config.setdefault('display', {})

    if args.input:
        camera['device_id'] = args.input
    elif args.device is not None:
        camera['device_id'] = args.device
    if args.boundary:
        tracking['boundary'] = args.boundary
    if args.model:
        detection['model'] = args.model
    if args.model_config:
        detection['model_config'] = args.model_config
    if args.conf is not None:
        detection['conf_threshold'] = args.conf
    if args.max_dist is not None:
        tracking['max_dist'] = args.max_dist
    if args.max_gone is not None:
        tracking['max_gone'] = args.max_gone
    if args.publish:
        publish['enabled'] = True
    if args.rate is not None:
        publish['interval'] = args.rate
    if args.display:
        display['enabled'] = True
    if args.headless:
        display['enabled'] = False
    return config


def main(argv=None) -> int:
    """Main application function."""
    args = parse_args(argv)

    raw = apply_cli_overrides(load_config(args.config), args)
    try:
        apply_env_overrides(raw.setdefault('publish', {}))
    except ValueError as e:
        logging.error(f"Configuration validation failed: {e}")
        return 1

    is_valid, error_msg = validate_config(raw)
    if not is_valid:
        logging.error(f"Configuration validation failed: {error_msg}")
        return 1

    config = Config.from_dict(raw)
    setup_logging(config.log_path, config.log_level)
    logging.info(
        f"Starting Parking Lot Counter: source={config.camera.device_id}, "
        f"boundary={config.tracking.boundary.value}, publish={config.publish.enabled}"
    )

    publisher = None
    source = None
    try:
        detector = create_backend(config.detection)
        source = create_source_from_config(config.camera)
        source.open()
        if config.publish.enabled:
            publisher = MqttPublisher(config.publish)
            publisher.connect()
    except (RuntimeError, ConnectionError, ValueError) as e:
        logging.error(f"Startup failed: {e}")
        if source is not None:
            source.close()
        return 1

    coordinator = create_coordinator_from_config(config, source, detector, publisher)

    def _handle_signal(signum, _frame):
        logging.info(f"Received signal {signum}, shutting down")
        coordinator.stop()

    signal.signal(signal.SIGINT, _handle_signal)
    signal.signal(signal.SIGTERM, _handle_signal)

    window = None
    if config.display.enabled:
        window = DisplayWindow(
            config.display.window_name,
            delay_ms=source.frame_delay_ms(config.display.delay_ms),
        )

    try:
        coordinator.start()
        for result in coordinator.results():
            if window is not None and not window.show(result):
                break
    finally:
        coordinator.stop()
        coordinator.join()
        if publisher is not None:
            publisher.disconnect()
        if window is not None:
            window.close()
        logging.info(
            f"Parking Lot Counter stopped: in={coordinator.stage.total_in}, "
            f"out={coordinator.stage.total_out}"
        )

    if coordinator.errors:
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
