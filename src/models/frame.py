"""
FrameData: one captured frame as it travels from the capture thread to the
processing thread.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np


@dataclass(frozen=True)
class FrameData:
    """
    Image plus where it sits in the stream.

    Detection boxes are expressed in this frame's pixel space, so width and
    height travel with the image for the point extractor's bounds checks.
    """
    frame: np.ndarray
    width: int
    height: int
    timestamp: float
    frame_index: int = 0
    source: Optional[str] = None

    @classmethod
    def from_numpy(
        cls,
        frame: np.ndarray,
        timestamp: float,
        frame_index: int = 0,
        source: Optional[str] = None,
    ) -> "FrameData":
        """Wrap an image array, taking width and height from its shape."""
        height, width = frame.shape[:2]
        return cls(frame, width, height, timestamp, frame_index, source)

    @property
    def is_empty(self) -> bool:
        """Some camera drivers hand out zero-sized images; those carry nothing to detect."""
        return self.frame is None or self.frame.size == 0

    @property
    def size(self) -> Tuple[int, int]:
        return (self.width, self.height)

    def image_copy(self) -> np.ndarray:
        """Writable copy of the image, for drawing overlays."""
        return self.frame.copy()
