"""
Ultralytics YOLO backend.

Optional: install the ``yolo`` extra to use it. Only vehicle classes are
kept by default, matching what the OpenCV DNN vehicle detector reports.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import List, Optional, Sequence

import numpy as np

from models.detection import Detection

# COCO ids for car, motorcycle, bus, truck
VEHICLE_CLASSES = (2, 3, 5, 7)


@dataclass(frozen=True)
class CpuYoloConfig:
    model: str
    iou_threshold: float = 0.45
    classes: Optional[Sequence[int]] = VEHICLE_CLASSES


def _as_array(values) -> np.ndarray:
    """Tensor or array-like to a numpy array on the CPU."""
    if hasattr(values, "cpu"):
        return values.cpu().numpy()
    return np.asarray(values)


class UltralyticsCpuBackend:
    """Runs a YOLO model on the CPU and reports pixel-space detections."""

    def __init__(self, cfg: CpuYoloConfig):
        self.cfg = cfg
        try:
            from ultralytics import YOLO  # type: ignore
        except ImportError as e:  # pragma: no cover
            raise RuntimeError(
                "Ultralytics is not installed. Install with `pip install .[yolo]` "
                "or switch detection.backend to 'opencv'."
            ) from e

        try:
            self._model = YOLO(cfg.model)
        except Exception as e:
            raise RuntimeError(f"Failed to load YOLO model {cfg.model}: {e}") from e
        self._last_inference_ms: Optional[float] = None

    @property
    def last_inference_ms(self) -> Optional[float]:
        return self._last_inference_ms

    def detect(self, frame: np.ndarray, conf_threshold: float) -> List[Detection]:
        started = time.perf_counter()
        results = self._model.predict(
            source=frame,
            conf=conf_threshold,
            iou=self.cfg.iou_threshold,
            classes=list(self.cfg.classes) if self.cfg.classes is not None else None,
            verbose=False,
        )
        self._last_inference_ms = (time.perf_counter() - started) * 1000.0

        boxes = getattr(results[0], "boxes", None) if results else None
        if boxes is None:
            return []
        names = getattr(results[0], "names", None) or {}

        return [
            Detection.from_ltrb(
                left=float(x1),
                top=float(y1),
                right=float(x2),
                bottom=float(y2),
                confidence=float(score),
                class_id=int(label),
                class_name=names.get(int(label), str(int(label))),
            )
            for (x1, y1, x2, y2), score, label in zip(
                _as_array(boxes.xyxy), _as_array(boxes.conf), _as_array(boxes.cls)
            )
        ]
