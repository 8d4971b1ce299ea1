"""
Inference backend interface.

Backends return pixel-space detections in the original frame coordinate
system, keeping only those above the requested confidence threshold.
"""

from __future__ import annotations

from typing import List, Optional, Protocol

import numpy as np

from models.config import DetectionConfig
from models.detection import Detection


class InferenceBackend(Protocol):
    def detect(self, frame: np.ndarray, conf_threshold: float) -> List[Detection]:
        ...

    @property
    def last_inference_ms(self) -> Optional[float]:
        """Time spent in the network on the last detect() call, if known."""
        ...


def create_backend(cfg: DetectionConfig) -> InferenceBackend:
    """
    Build the detector selected by ``cfg.backend``.

    Raises:
        RuntimeError: If the model cannot be loaded.
        ValueError: If the backend name is unknown.
    """
    if cfg.backend == "opencv":
        from .opencv_backend import OpenCVDnnBackend, DnnConfig

        return OpenCVDnnBackend(
            DnnConfig(
                model=cfg.model,
                model_config=cfg.model_config,
                backend_id=cfg.dnn_backend,
                target_id=cfg.dnn_target,
                input_size=(int(cfg.input_size[0]), int(cfg.input_size[1])),
            )
        )
    if cfg.backend == "yolo":
        from .cpu_backend import UltralyticsCpuBackend, CpuYoloConfig

        return UltralyticsCpuBackend(
            CpuYoloConfig(
                model=cfg.model,
                classes=cfg.classes,
            )
        )
    raise ValueError(f"Unknown detection backend: {cfg.backend}")
