"""
Pytest configuration and shared fixtures.
"""

import os
import sys

import pytest

# Add src to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))


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
  backend: "opencv"
  model: "models/car.bin"
  model_config: "models/car.xml"
  conf_threshold: 0.5

tracking:
  boundary: "bottom"
  max_dist: 300
  max_gone: 30

publish:
  enabled: false
  interval: 1.0
  topic: "parking/counter"
  host: "localhost"
  port: 1883

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
            "backend": "opencv",
            "model": "models/car.bin",
            "model_config": "models/car.xml",
            "conf_threshold": 0.5,
        },
        "tracking": {
            "boundary": "bottom",
            "max_dist": 300,
            "max_gone": 30,
        },
        "publish": {
            "enabled": False,
            "interval": 1.0,
            "topic": "parking/counter",
            "host": "localhost",
            "port": 1883,
        },
        "log_path": "logs/test.log",
        "log_level": "INFO",
    }
