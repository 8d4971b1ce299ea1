"""
FrameResult: the per-frame snapshot handed from the processing thread to
the display and publish consumers.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Optional, Tuple

from .count_event import CountEvent
from .frame import FrameData
from .track import CentroidState


@dataclass(frozen=True)
class FrameResult:
    """
    Immutable result of processing one frame.

    Producers never touch a result after handing it off; consumers may keep
    it for as long as they need.

    Attributes:
        performance_ms: Inference time for the frame in milliseconds.
        centroids: Snapshot of the centroids tracked after this frame.
        total_in: Objects counted as entering so far.
        total_out: Objects counted as leaving so far.
        frame_index: Index of the processed frame.
        timestamp: Capture timestamp of the processed frame.
        events: Count events raised while processing this frame.
        frame: The processed frame, for rendering.
    """
    performance_ms: float
    centroids: Tuple[CentroidState, ...]
    total_in: int
    total_out: int
    frame_index: int = 0
    timestamp: float = 0.0
    events: Tuple[CountEvent, ...] = ()
    frame: Optional[FrameData] = None

    def perf_label(self) -> str:
        return f"Inference time: {self.performance_ms:.2f} ms"

    def counts_label(self) -> str:
        return f"In: {self.total_in}, Out: {self.total_out}"

    def summary(self) -> dict:
        """Totals in the wire format of the published summary."""
        return {"TOTAL_IN": self.total_in, "TOTAL_OUT": self.total_out}

    def to_message(self) -> str:
        """Serialize the totals as the JSON payload sent to the message sink."""
        return json.dumps(self.summary())

    def __str__(self) -> str:
        return self.counts_label()
