"""
Typed configuration models matching the YAML config structure.

Every section is a frozen dataclass built once at startup and passed to the
components that need it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

from .direction import Boundary


@dataclass(frozen=True)
class CameraConfig:
    """Frame source configuration: camera index or video file path."""
    device_id: Union[int, str] = 0
    resolution: Optional[List[int]] = None
    fps: Optional[int] = None
    max_retries: int = 3

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "CameraConfig":
        """Adapter: Create from config dictionary."""
        return cls(
            device_id=d.get("device_id", 0),
            resolution=d.get("resolution"),
            fps=d.get("fps"),
            max_retries=d.get("max_retries", 3),
        )

    def to_dict(self) -> Dict[str, Any]:
        d: Dict[str, Any] = {
            "device_id": self.device_id,
            "max_retries": self.max_retries,
        }
        if self.resolution is not None:
            d["resolution"] = list(self.resolution)
        if self.fps is not None:
            d["fps"] = self.fps
        return d


@dataclass(frozen=True)
class DetectionConfig:
    """
    Detector configuration.

    Attributes:
        backend: "opencv" (cv2.dnn, SSD-style output) or "yolo" (Ultralytics).
        model: Path to model weights (.bin for OpenVINO IR, .pt/.onnx for YOLO).
        model_config: Path to the network description (.xml) for cv2.dnn.
        conf_threshold: Minimum confidence for a detection to be kept.
        dnn_backend: cv2.dnn preferable backend id (0 = default).
        dnn_target: cv2.dnn preferable target id (0 = CPU).
        input_size: Network input size as [width, height].
        classes: Optional class filter (YOLO only).
    """
    backend: str = "opencv"
    model: str = ""
    model_config: str = ""
    conf_threshold: float = 0.5
    dnn_backend: int = 0
    dnn_target: int = 0
    input_size: List[int] = field(default_factory=lambda: [672, 384])
    classes: Optional[List[int]] = None

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "DetectionConfig":
        return cls(
            backend=d.get("backend", "opencv"),
            model=d.get("model", ""),
            model_config=d.get("model_config", ""),
            conf_threshold=float(d.get("conf_threshold", 0.5)),
            dnn_backend=d.get("dnn_backend", 0),
            dnn_target=d.get("dnn_target", 0),
            input_size=list(d.get("input_size", [672, 384])),
            classes=d.get("classes"),
        )

    def to_dict(self) -> Dict[str, Any]:
        d = {
            "backend": self.backend,
            "model": self.model,
            "model_config": self.model_config,
            "conf_threshold": self.conf_threshold,
            "dnn_backend": self.dnn_backend,
            "dnn_target": self.dnn_target,
            "input_size": list(self.input_size),
        }
        if self.classes is not None:
            d["classes"] = self.classes
        return d


@dataclass(frozen=True)
class PointFilterConfig:
    """
    Box filtering and clipping applied before anchor points are extracted.

    Boxes smaller than min_width x min_height are dropped; boxes larger than
    clip_width x clip_height are shrunk from their top-left corner.
    """
    min_width: int = 80
    min_height: int = 50
    clip_width: int = 200
    clip_height: int = 350

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "PointFilterConfig":
        return cls(
            min_width=d.get("min_width", 80),
            min_height=d.get("min_height", 50),
            clip_width=d.get("clip_width", 200),
            clip_height=d.get("clip_height", 350),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "min_width": self.min_width,
            "min_height": self.min_height,
            "clip_width": self.clip_width,
            "clip_height": self.clip_height,
        }


@dataclass(frozen=True)
class TrackingConfig:
    """
    Tracking and counting configuration.

    Attributes:
        boundary: Frame edge used as the entrance/exit mark.
        max_dist: Max distance in pixels between a point and a centroid
                  for them to be considered the same object.
        max_gone: Frames a centroid may go unmatched before it is dropped.
        points: Box filter used by the point extractor.
    """
    boundary: Boundary = Boundary.BOTTOM
    max_dist: float = 300.0
    max_gone: int = 30
    points: PointFilterConfig = field(default_factory=PointFilterConfig)

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "TrackingConfig":
        return cls(
            boundary=Boundary.parse(d.get("boundary", "bottom")),
            max_dist=float(d.get("max_dist", 300)),
            max_gone=int(d.get("max_gone", 30)),
            points=PointFilterConfig.from_dict(d.get("points") or {}),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "boundary": self.boundary.value,
            "max_dist": self.max_dist,
            "max_gone": self.max_gone,
            "points": self.points.to_dict(),
        }


@dataclass(frozen=True)
class PublishConfig:
    """
    Periodic summary publishing to an MQTT broker.

    Attributes:
        enabled: Publish summaries at all.
        interval: Seconds between summaries.
        topic: MQTT topic the summary is sent to.
        host: Broker host name.
        port: Broker port.
        keepalive: MQTT keepalive in seconds.
        client_id: MQTT client id.
        qos: Quality of service for published messages.
    """
    enabled: bool = False
    interval: float = 1.0
    topic: str = "parking/counter"
    host: str = "localhost"
    port: int = 1883
    keepalive: int = 60
    client_id: str = "parking-lot-counter"
    qos: int = 0

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "PublishConfig":
        return cls(
            enabled=bool(d.get("enabled", False)),
            interval=float(d.get("interval", 1.0)),
            topic=d.get("topic", "parking/counter"),
            host=d.get("host", "localhost"),
            port=int(d.get("port", 1883)),
            keepalive=int(d.get("keepalive", 60)),
            client_id=d.get("client_id", "parking-lot-counter"),
            qos=int(d.get("qos", 0)),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "enabled": self.enabled,
            "interval": self.interval,
            "topic": self.topic,
            "host": self.host,
            "port": self.port,
            "keepalive": self.keepalive,
            "client_id": self.client_id,
            "qos": self.qos,
        }


@dataclass(frozen=True)
class DisplayConfig:
    """On-screen display of results."""
    enabled: bool = True
    window_name: str = "parking-lot-counter"
    delay_ms: float = 5.0

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "DisplayConfig":
        return cls(
            enabled=bool(d.get("enabled", True)),
            window_name=d.get("window_name", "parking-lot-counter"),
            delay_ms=float(d.get("delay_ms", 5.0)),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "enabled": self.enabled,
            "window_name": self.window_name,
            "delay_ms": self.delay_ms,
        }


@dataclass(frozen=True)
class Config:
    """
    Complete application configuration.

    This is a typed representation of the YAML config structure.
    """
    camera: CameraConfig = field(default_factory=CameraConfig)
    detection: DetectionConfig = field(default_factory=DetectionConfig)
    tracking: TrackingConfig = field(default_factory=TrackingConfig)
    publish: PublishConfig = field(default_factory=PublishConfig)
    display: DisplayConfig = field(default_factory=DisplayConfig)
    log_path: str = "logs/parking_lot_counter.log"
    log_level: str = "INFO"

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "Config":
        """Adapter: Create Config from raw dictionary (e.g., from load_config)."""
        return cls(
            camera=CameraConfig.from_dict(d.get("camera") or {}),
            detection=DetectionConfig.from_dict(d.get("detection") or {}),
            tracking=TrackingConfig.from_dict(d.get("tracking") or {}),
            publish=PublishConfig.from_dict(d.get("publish") or {}),
            display=DisplayConfig.from_dict(d.get("display") or {}),
            log_path=d.get("log_path", "logs/parking_lot_counter.log"),
            log_level=d.get("log_level", "INFO"),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert back to dictionary (for saving or logging)."""
        return {
            "camera": self.camera.to_dict(),
            "detection": self.detection.to_dict(),
            "tracking": self.tracking.to_dict(),
            "publish": self.publish.to_dict(),
            "display": self.display.to_dict(),
            "log_path": self.log_path,
            "log_level": self.log_level,
        }
