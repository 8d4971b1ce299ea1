"""
MQTT publisher for periodic counter summaries.

The publisher is the pipeline's only outward channel. Failures are reported
as ConnectionError (broker not reachable) or PublishError (broker rejected
or could not queue the message); callers decide whether to carry on.
"""

from __future__ import annotations

import logging
from typing import Optional, Protocol

import paho.mqtt.client as mqtt

from models.config import PublishConfig


class PublishError(Exception):
    """Raised when a message could not be handed to the broker."""


class Publisher(Protocol):
    def publish(self, topic: str, payload: str) -> None:
        ...


class MqttPublisher:
    """
    Thin wrapper around a paho MQTT client.

    Example:
        publisher = MqttPublisher(PublishConfig(host="broker.local"))
        publisher.connect()
        publisher.publish("parking/counter", '{"TOTAL_IN": 1, "TOTAL_OUT": 0}')
        publisher.disconnect()
    """

    def __init__(self, cfg: PublishConfig, client: Optional[mqtt.Client] = None):
        self.cfg = cfg
        self._client = client or mqtt.Client(
            mqtt.CallbackAPIVersion.VERSION2,
            client_id=cfg.client_id,
        )
        self._connected = False

    @property
    def is_connected(self) -> bool:
        return self._connected and self._client.is_connected()

    def connect(self) -> None:
        """
        Connect to the broker and start the network loop.

        Raises:
            ConnectionError: If the broker cannot be reached.
        """
        try:
            self._client.connect(self.cfg.host, self.cfg.port, self.cfg.keepalive)
        except OSError as e:
            raise ConnectionError(
                f"Failed to connect to MQTT broker {self.cfg.host}:{self.cfg.port}: {e}"
            ) from e

        self._client.loop_start()
        self._connected = True
        logging.info(f"MQTT publisher connected: {self.cfg.host}:{self.cfg.port}")

    def publish(self, topic: str, payload: str) -> None:
        """
        Publish a payload on a topic.

        Raises:
            ConnectionError: If the client is not connected.
            PublishError: If the client could not queue the message.
        """
        if not self._connected:
            raise ConnectionError("MQTT publisher is not connected")

        info = self._client.publish(topic, payload, qos=self.cfg.qos)
        if info.rc == mqtt.MQTT_ERR_NO_CONN:
            raise ConnectionError(f"MQTT broker connection lost while publishing to {topic}")
        if info.rc != mqtt.MQTT_ERR_SUCCESS:
            raise PublishError(
                f"Failed to publish to {topic}: {mqtt.error_string(info.rc)}"
            )
        logging.debug(f"Published to {topic}: {payload}")

    def disconnect(self) -> None:
        """Disconnect from the broker. Safe to call when not connected."""
        if not self._connected:
            return
        self._connected = False
        try:
            self._client.disconnect()
        finally:
            self._client.loop_stop()
        logging.info("MQTT publisher disconnected")
