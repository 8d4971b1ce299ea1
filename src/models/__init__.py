"""
Typed models for the parking lot counter.

Plain dataclasses and enums shared by the trackers, the counter and the
pipeline. Configuration sections live in models.config.
"""

from .frame import FrameData
from .detection import Detection, BoundingBox
from .direction import Axis, Boundary, Direction
from .track import Centroid, CentroidState, Point, TrackedObject
from .count_event import CountEvent, EVENT_IN, EVENT_OUT
from .result import FrameResult
from .config import (
    Config,
    CameraConfig,
    DetectionConfig,
    DisplayConfig,
    PointFilterConfig,
    PublishConfig,
    TrackingConfig,
)

__all__ = [
    # Frame
    "FrameData",
    # Detection
    "Detection",
    "BoundingBox",
    # Geometry
    "Axis",
    "Boundary",
    "Direction",
    # Tracking
    "Centroid",
    "CentroidState",
    "Point",
    "TrackedObject",
    # Counting
    "CountEvent",
    "EVENT_IN",
    "EVENT_OUT",
    "FrameResult",
    # Config
    "Config",
    "CameraConfig",
    "DetectionConfig",
    "DisplayConfig",
    "PointFilterConfig",
    "PublishConfig",
    "TrackingConfig",
]
