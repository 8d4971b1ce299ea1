"""
Utility functions for messaging configuration.
"""

import logging
import os
from typing import Any, Dict, Mapping, Optional
from urllib.parse import urlparse


def parse_broker_address(address: str, default_port: int = 1883):
    """
    Parse a broker address into (host, port).

    Accepts "host", "host:port" and URL forms such as "tcp://host:port".
    """
    if "://" not in address:
        address = f"tcp://{address}"
    parsed = urlparse(address)
    if not parsed.hostname:
        raise ValueError(f"Invalid broker address: {address}")
    return parsed.hostname, parsed.port or default_port


def apply_env_overrides(
    publish_cfg: Dict[str, Any],
    environ: Optional[Mapping[str, str]] = None,
) -> Dict[str, Any]:
    """
    Override broker settings from MQTT_SERVER and MQTT_CLIENT_ID.

    Args:
        publish_cfg: The `publish` config section (modified in place).
        environ: Environment mapping; defaults to os.environ.

    Returns:
        The updated section.
    """
    env = os.environ if environ is None else environ

    server = env.get("MQTT_SERVER")
    if server:
        host, port = parse_broker_address(server, int(publish_cfg.get("port", 1883)))
        publish_cfg["host"] = host
        publish_cfg["port"] = port
        logging.info(f"MQTT broker from environment: {host}:{port}")

    client_id = env.get("MQTT_CLIENT_ID")
    if client_id:
        publish_cfg["client_id"] = client_id

    return publish_cfg


def check_messaging_config(config) -> bool:
    """
    Check if the publish configuration is usable.

    Args:
        config: The `publish` config section

    Returns:
        Boolean indicating if the configuration is valid
    """
    if not isinstance(config, dict):
        logging.error("Invalid publish configuration: not a mapping")
        return False

    for setting in ("host", "topic"):
        if not config.get(setting) or not isinstance(config.get(setting), str):
            logging.error(f"Invalid publish configuration: missing 'publish.{setting}'")
            return False

    port = config.get("port", 1883)
    if not isinstance(port, int) or not (0 < port < 65536):
        logging.error("Invalid publish configuration: 'publish.port' must be 1-65535")
        return False

    qos = config.get("qos", 0)
    if qos not in (0, 1, 2):
        logging.error("Invalid publish configuration: 'publish.qos' must be 0, 1 or 2")
        return False

    return True
