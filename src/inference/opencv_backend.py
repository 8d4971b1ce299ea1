"""
OpenCV DNN inference backend.

Runs an SSD-style detection network (e.g. an OpenVINO IR vehicle detector)
through cv2.dnn. The network output is a [1, 1, N, 7] blob where every row
is [image_id, label, confidence, left, top, right, bottom] with coordinates
normalized to [0, 1].
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import List, Optional, Tuple

import cv2
import numpy as np

from models.detection import Detection


@dataclass(frozen=True)
class DnnConfig:
    model: str
    model_config: str = ""
    backend_id: int = 0
    target_id: int = 0
    input_size: Tuple[int, int] = (672, 384)


class OpenCVDnnBackend:
    def __init__(self, cfg: DnnConfig):
        self.cfg = cfg
        if not cfg.model or not os.path.exists(cfg.model):
            raise RuntimeError(f"Model file not found: {cfg.model!r}")
        if cfg.model_config and not os.path.exists(cfg.model_config):
            raise RuntimeError(f"Model config file not found: {cfg.model_config!r}")

        try:
            self._net = cv2.dnn.readNet(cfg.model, cfg.model_config)
            self._net.setPreferableBackend(cfg.backend_id)
            self._net.setPreferableTarget(cfg.target_id)
        except cv2.error as e:
            raise RuntimeError(f"Failed to load detection model {cfg.model}: {e}") from e

        self._last_inference_ms: Optional[float] = None
        logging.info(
            f"OpenCV DNN model loaded: model={cfg.model}, backend={cfg.backend_id}, "
            f"target={cfg.target_id}"
        )

    @property
    def last_inference_ms(self) -> Optional[float]:
        return self._last_inference_ms

    def detect(self, frame: np.ndarray, conf_threshold: float) -> List[Detection]:
        rows, cols = frame.shape[:2]
        blob = cv2.dnn.blobFromImage(
            frame, 1.0, self.cfg.input_size, (0, 0, 0), swapRB=False, crop=False
        )
        self._net.setInput(blob)
        output = self._net.forward()

        ticks, _ = self._net.getPerfProfile()
        self._last_inference_ms = ticks / (cv2.getTickFrequency() / 1000.0)

        return parse_ssd_output(output, cols, rows, conf_threshold)


def parse_ssd_output(
    output: np.ndarray,
    frame_width: int,
    frame_height: int,
    conf_threshold: float,
) -> List[Detection]:
    """
    Convert a raw SSD output blob to pixel-space detections.

    Rows at or below ``conf_threshold`` are discarded.
    """
    out: List[Detection] = []
    for row in np.asarray(output).reshape(-1, 7):
        confidence = float(row[2])
        if confidence <= conf_threshold:
            continue
        out.append(
            Detection.from_ltrb(
                left=int(row[3] * frame_width),
                top=int(row[4] * frame_height),
                right=int(row[5] * frame_width),
                bottom=int(row[6] * frame_height),
                confidence=confidence,
                class_id=int(row[1]),
            )
        )
    return out
