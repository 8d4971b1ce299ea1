"""
Count stage: turns one frame into one FrameResult.

detect -> extract anchor points -> centroid tracker -> trajectory tracker
-> zone counter. All tracking state lives in this stage and is only ever
touched from the processing thread; the outside world sees FrameResult
snapshots.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Optional

from algorithms.counting.zone import ZoneCounter
from models.config import TrackingConfig
from models.count_event import CountEvent
from models.frame import FrameData
from models.result import FrameResult
from tracking.centroid import CentroidTracker
from tracking.points import extract_point_list
from tracking.trajectory import TrajectoryTracker


@dataclass
class CountStageConfig:
    """
    Configuration for the count stage.

    Attributes:
        tracking: Boundary, association and box-filter settings.
        conf_threshold: Detection confidence threshold passed to the detector.
    """
    tracking: TrackingConfig = field(default_factory=TrackingConfig)
    conf_threshold: float = 0.5


class CountStage:
    """
    Runs detection, tracking and counting for each frame.

    Example:
        stage = CountStage(CountStageConfig(tracking=cfg.tracking), detector)

        # Each frame:
        result = stage.process(frame_data)
    """

    def __init__(
        self,
        config: CountStageConfig,
        detector: Any,
        on_event: Optional[Callable[[CountEvent], None]] = None,
    ):
        """
        Initialize the count stage.

        Args:
            config: Stage configuration.
            detector: Backend with detect(frame, conf_threshold).
            on_event: Optional callback for each count event.
        """
        self._config = config
        self._detector = detector
        self._on_event = on_event

        tracking = config.tracking
        self.centroids = CentroidTracker(
            boundary=tracking.boundary,
            max_dist=tracking.max_dist,
            max_gone=tracking.max_gone,
        )
        self.objects = TrajectoryTracker(boundary=tracking.boundary)
        self.counter = ZoneCounter(boundary=tracking.boundary)
        self.frame_count = 0

    @property
    def total_in(self) -> int:
        return self.counter.total_in

    @property
    def total_out(self) -> int:
        return self.counter.total_out

    def process(self, frame_data: FrameData) -> FrameResult:
        """
        Process a single frame.

        Exceptions raised by the detector propagate to the caller.
        """
        self.frame_count += 1

        started = time.perf_counter()
        detections = self._detector.detect(frame_data.frame, self._config.conf_threshold)
        elapsed_ms = (time.perf_counter() - started) * 1000.0
        perf_ms = getattr(self._detector, "last_inference_ms", None)
        if perf_ms is None:
            perf_ms = elapsed_ms

        points = extract_point_list(
            detections,
            frame_data.width,
            frame_data.height,
            self._config.tracking.points,
        )

        centroids = self.centroids.update(points)
        objects = self.objects.update(centroids)
        events = self.counter.update(objects, timestamp=frame_data.timestamp)

        for event in events:
            logging.info(
                f"Object {event.object_id} counted {event.kind}: direction={event.direction.value}, "
                f"in={self.counter.total_in}, out={self.counter.total_out}"
            )
            if self._on_event:
                try:
                    self._on_event(event)
                except Exception as e:
                    logging.warning(f"Event callback error: {e}")

        if self.frame_count % 30 == 0:
            logging.debug(
                f"[TRACK] frame={frame_data.frame_index} detections={len(detections)} "
                f"points={len(points)} centroids={len(self.centroids)} objects={len(self.objects)}"
            )

        return FrameResult(
            performance_ms=perf_ms,
            centroids=self.centroids.snapshot(),
            total_in=self.counter.total_in,
            total_out=self.counter.total_out,
            frame_index=frame_data.frame_index,
            timestamp=frame_data.timestamp,
            events=tuple(events),
            frame=frame_data,
        )


def create_count_stage(
    tracking: TrackingConfig,
    detector: Any,
    conf_threshold: float = 0.5,
) -> CountStage:
    """
    Factory function to create a CountStage from config sections.
    """
    config = CountStageConfig(tracking=tracking, conf_threshold=conf_threshold)
    return CountStage(config, detector)
