"""
CountEvent model for entry/exit events.
"""

from __future__ import annotations

from dataclasses import dataclass

from .direction import Direction

EVENT_IN = "IN"
EVENT_OUT = "OUT"


@dataclass(frozen=True)
class CountEvent:
    """
    Emitted when the zone counter attributes an object to entering or leaving.

    Attributes:
        object_id: ID of the tracked object that triggered the event.
        kind: EVENT_IN or EVENT_OUT.
        direction: Direction the object was moving when counted.
        timestamp: Unix timestamp of the event.
        trajectory_length: How many positions the object had when counted.
    """
    object_id: int
    kind: str
    direction: Direction
    timestamp: float
    trajectory_length: int = 0

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "object_id": self.object_id,
            "kind": self.kind,
            "direction": self.direction.value,
            "timestamp": self.timestamp,
            "trajectory_length": self.trajectory_length,
        }
