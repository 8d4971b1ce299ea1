"""
Tracking module.

- points: anchor points from detection boxes
- centroid: frame-to-frame identity (CentroidTracker)
- trajectory: position history and direction (TrajectoryTracker)
"""

from .points import extract_points, extract_point_list
from .centroid import CentroidTracker
from .trajectory import TrajectoryTracker

__all__ = [
    "extract_points",
    "extract_point_list",
    "CentroidTracker",
    "TrajectoryTracker",
]
