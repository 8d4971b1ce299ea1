"""
Tracking state: centroids with stable identity and the objects built on them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Tuple

from .direction import Axis, Boundary, Direction

Point = Tuple[int, int]


@dataclass
class Centroid:
    """
    A tracked anchor point with stable identity across frames.

    Attributes:
        centroid_id: Unique identifier, carried over to the TrackedObject.
        position: Current (x, y) position in pixels.
        frames_unmatched: Consecutive updates without a matching point.
    """
    centroid_id: int
    position: Point
    frames_unmatched: int = 0

    def __str__(self) -> str:
        return f"({self.position[0]},{self.position[1]})"


@dataclass(frozen=True)
class CentroidState:
    """Immutable snapshot of a centroid (for results handed to other threads)."""
    centroid_id: int
    position: Point
    frames_unmatched: int = 0

    @classmethod
    def from_centroid(cls, c: Centroid) -> "CentroidState":
        return cls(
            centroid_id=c.centroid_id,
            position=c.position,
            frames_unmatched=c.frames_unmatched,
        )

    def __str__(self) -> str:
        return f"({self.position[0]},{self.position[1]})"


@dataclass
class TrackedObject:
    """
    An object followed through the frame.

    Attributes:
        object_id: Same identifier as the centroid that spawned it.
        trajectory: Positions in chronological order (newest last).
        direction: Direction inferred from the trajectory.
        counted: Set once the object has been counted as entering.
        gone: Set when the object's centroid is missing from a frame.
    """
    object_id: int
    trajectory: List[Point] = field(default_factory=list)
    direction: Direction = Direction.STILL
    counted: bool = False
    gone: bool = False

    @property
    def position(self) -> Point:
        """Latest known position."""
        return self.trajectory[-1]

    @property
    def age(self) -> int:
        """Number of frames this object has been seen (trajectory length)."""
        return len(self.trajectory)

    def mean_movement(self, axis: Axis) -> float:
        """
        Mean position of the trajectory along an axis.

        Returns 0.0 for an empty trajectory.
        """
        if not self.trajectory:
            return 0.0
        idx = 0 if axis == Axis.X else 1
        return sum(p[idx] for p in self.trajectory) / len(self.trajectory)

    def direction_to(self, point: Point, boundary: Boundary) -> Direction:
        """
        Direction of ``point`` relative to the trajectory mean.

        Only the movement axis of the boundary is considered: x for left and
        right boundaries, y for top and bottom.
        """
        axis = boundary.movement_axis
        mean = self.mean_movement(axis)
        coord = point[0] if axis == Axis.X else point[1]
        if coord > mean:
            return boundary.positive_direction
        if coord < mean:
            return boundary.negative_direction
        return Direction.STILL

    def __str__(self) -> str:
        return f"ID: {self.object_id}, Traject: {self.trajectory}, Dir: {self.direction.value}"
