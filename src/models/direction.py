"""
Direction and boundary enums shared by the trackers and the zone counter.
"""

from __future__ import annotations

from enum import Enum


class Direction(str, Enum):
    """Movement direction of a tracked object along the movement axis."""
    UP = "UP"
    DOWN = "DOWN"
    LEFT = "LEFT"
    RIGHT = "RIGHT"
    STILL = "STILL"
    UNKNOWN = "UNKNOWN"


class Axis(str, Enum):
    """Image coordinate axis."""
    X = "x"
    Y = "y"


# One-letter forms accepted on the command line (t/b/l/r)
_BOUNDARY_ALIASES = {
    "t": "top",
    "b": "bottom",
    "l": "left",
    "r": "right",
}


class Boundary(str, Enum):
    """
    Edge of the frame used as the entry/exit reference.

    The boundary decides the movement axis, the association gate applied
    perpendicular to it, and which direction counts as entering or leaving.
    """
    TOP = "top"
    BOTTOM = "bottom"
    LEFT = "left"
    RIGHT = "right"

    @classmethod
    def parse(cls, value) -> "Boundary":
        """Parse a boundary name, accepting t/b/l/r and any letter case."""
        if isinstance(value, Boundary):
            return value
        if not isinstance(value, str):
            raise ValueError(f"Invalid boundary: {value!r}")
        name = value.strip().lower()
        name = _BOUNDARY_ALIASES.get(name, name)
        try:
            return cls(name)
        except ValueError:
            raise ValueError(
                f"Invalid boundary: {value!r} (expected one of top, bottom, left, right)"
            ) from None

    @property
    def is_horizontal(self) -> bool:
        """True for top/bottom boundaries, where objects move vertically."""
        return self in (Boundary.TOP, Boundary.BOTTOM)

    @property
    def movement_axis(self) -> Axis:
        return Axis.Y if self.is_horizontal else Axis.X

    @property
    def gate_tolerance(self) -> int:
        """Max pixel deviation allowed perpendicular to the movement axis."""
        return 50 if self.is_horizontal else 70

    @property
    def positive_direction(self) -> Direction:
        """Direction of increasing coordinate along the movement axis."""
        return Direction.DOWN if self.is_horizontal else Direction.RIGHT

    @property
    def negative_direction(self) -> Direction:
        return Direction.UP if self.is_horizontal else Direction.LEFT

    @property
    def inbound(self) -> Direction:
        """Direction of an object moving away from the boundary into the area."""
        return _ZONE_DIRECTIONS[self][0]

    @property
    def outbound(self) -> Direction:
        """Direction of an object moving towards the boundary out of the area."""
        return _ZONE_DIRECTIONS[self][1]


_ZONE_DIRECTIONS: dict = {
    Boundary.TOP: (Direction.DOWN, Direction.UP),
    Boundary.BOTTOM: (Direction.UP, Direction.DOWN),
    Boundary.LEFT: (Direction.RIGHT, Direction.LEFT),
    Boundary.RIGHT: (Direction.LEFT, Direction.RIGHT),
}
