"""
Observation layer: frame acquisition.

Sources implement ObservationSource and return FrameData objects, keeping the
pipeline independent of where frames come from.
"""

from .base import ObservationSource, ObservationConfig
from .opencv_source import OpenCVSource, OpenCVSourceConfig, create_source_from_config

__all__ = [
    "ObservationSource",
    "ObservationConfig",
    "OpenCVSource",
    "OpenCVSourceConfig",
    "create_source_from_config",
]
