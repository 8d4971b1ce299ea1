"""
Detection models for object detection results.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple


@dataclass(frozen=True)
class BoundingBox:
    """
    An axis-aligned box in pixel coordinates.

    Attributes:
        left: Left edge x coordinate.
        top: Top edge y coordinate.
        right: Right edge x coordinate (exclusive).
        bottom: Bottom edge y coordinate (exclusive).
    """
    left: float
    top: float
    right: float
    bottom: float

    def inside(self, frame_width: int, frame_height: int) -> bool:
        """Whether the box lies completely within a frame of the given size."""
        return (
            self.left >= 0
            and self.top >= 0
            and self.right <= frame_width
            and self.bottom <= frame_height
        )

    def as_int_tuple(self) -> Tuple[int, int, int, int]:
        """Return as integer (left, top, right, bottom) tuple."""
        return (int(self.left), int(self.top), int(self.right), int(self.bottom))


@dataclass(frozen=True)
class Detection:
    """
    A single detection from an object detector.

    Attributes:
        bbox: Bounding box in pixel coordinates.
        confidence: Detection confidence score (0-1).
        class_id: Optional class ID from the detector.
        class_name: Optional human-readable class name.
    """
    bbox: BoundingBox
    confidence: float = 1.0
    class_id: Optional[int] = None
    class_name: Optional[str] = None

    @classmethod
    def from_ltrb(
        cls,
        left: float,
        top: float,
        right: float,
        bottom: float,
        confidence: float = 1.0,
        class_id: Optional[int] = None,
        class_name: Optional[str] = None,
    ) -> "Detection":
        """Create Detection from left, top, right, bottom coordinates."""
        return cls(
            bbox=BoundingBox(left=left, top=top, right=right, bottom=bottom),
            confidence=confidence,
            class_id=class_id,
            class_name=class_name,
        )
