"""
OpenCV-based observation source.

Supports:
- Camera devices (device_id as int, e.g. 0)
- Video files (device_id as a file path)
"""

from __future__ import annotations

import logging
import os
import time
from dataclasses import dataclass
from typing import Optional, Tuple, Union

import cv2

from models.config import CameraConfig
from models.frame import FrameData
from .base import ObservationConfig, ObservationSource


@dataclass
class OpenCVSourceConfig(ObservationConfig):
    """
    Configuration for OpenCV capture.

    Attributes:
        device_id: Camera index (int) or video file path (str).
        resolution: Requested (width, height) for cameras.
        fps: Requested frame rate for cameras.
        max_retries: Attempts to open the device before giving up.
        max_read_failures: Consecutive failed camera reads tolerated
                           (each followed by a reopen) before the stream ends.
    """
    device_id: Union[int, str] = 0
    resolution: Optional[Tuple[int, int]] = None
    fps: Optional[int] = None
    max_retries: int = 3
    max_read_failures: int = 3

    @classmethod
    def from_camera_config(cls, camera: CameraConfig, source_id: str = "camera") -> "OpenCVSourceConfig":
        """Adapter: Create from the typed camera config section."""
        device_id = camera.device_id
        # "0" from the command line means camera 0, not a file called 0
        if isinstance(device_id, str) and device_id.isdigit() and not os.path.exists(device_id):
            device_id = int(device_id)
        return cls(
            source_id=source_id,
            device_id=device_id,
            resolution=tuple(camera.resolution) if camera.resolution else None,
            fps=camera.fps,
            max_retries=camera.max_retries,
        )


class OpenCVSource(ObservationSource):
    """
    cv2.VideoCapture behind the ObservationSource contract.

    A video file ends at its last frame. A camera that stops delivering is
    reopened up to ``max_read_failures`` times in a row before the stream is
    declared over.
    """

    def __init__(self, config: OpenCVSourceConfig):
        super().__init__(config)
        self._opencv_config = config
        self._cap: Optional[cv2.VideoCapture] = None
        self._read_failures = 0

    @property
    def device_id(self) -> Union[int, str]:
        return self._opencv_config.device_id

    @property
    def is_file(self) -> bool:
        return isinstance(self.device_id, str)

    @property
    def is_live(self) -> bool:
        return not self.is_file

    @property
    def fps(self) -> Optional[float]:
        if self._cap is None:
            return None
        fps = self._cap.get(cv2.CAP_PROP_FPS)
        return fps if fps and fps > 0 else None

    def frame_delay_ms(self, default: float) -> float:
        """Display delay: one frame period for files, ``default`` for cameras."""
        if self.is_file and self.fps:
            return 1000.0 / self.fps
        return default

    def open(self) -> None:
        if self._is_open:
            return
        if self.is_file and not os.path.exists(self.device_id):
            raise RuntimeError(f"Video file not found: {self.device_id}")

        self._cap = self._open_capture()
        self._is_open = True
        self._frame_index = 0
        self._read_failures = 0

        logging.info(
            f"OpenCVSource opened: source_id={self.source_id}, device={self.device_id}, "
            f"fps={self.fps}"
        )

    def _open_capture(self) -> cv2.VideoCapture:
        """Open the device, backing off between attempts."""
        attempts = max(1, self._opencv_config.max_retries)
        for attempt in range(attempts):
            if attempt:
                wait_time = min(2 ** attempt, 10)
                logging.info(f"Retrying open of {self.device_id} ({attempt + 1}/{attempts}) in {wait_time}s")
                time.sleep(wait_time)

            cap = cv2.VideoCapture(self.device_id)
            if cap.isOpened():
                self._configure(cap)
                return cap
            cap.release()
            logging.warning(f"Failed to open {self.device_id}")

        raise RuntimeError(f"Failed to open {self.device_id} after {attempts} attempts")

    def _configure(self, cap: cv2.VideoCapture) -> None:
        if self.is_file or not self._opencv_config.resolution:
            return
        w, h = self._opencv_config.resolution
        cap.set(cv2.CAP_PROP_FRAME_WIDTH, w)
        cap.set(cv2.CAP_PROP_FRAME_HEIGHT, h)
        if self._opencv_config.fps:
            cap.set(cv2.CAP_PROP_FPS, self._opencv_config.fps)
        cap.set(cv2.CAP_PROP_BUFFERSIZE, 1)

    def _reopen(self) -> bool:
        """Reopen a camera after a failed read. False once it should give up."""
        self._read_failures += 1
        if self._read_failures > self._opencv_config.max_read_failures:
            logging.error(f"Cannot read image source {self.device_id}")
            return False

        logging.warning(f"Failed to read frame (failures: {self._read_failures}), reopening {self.device_id}")
        if self._cap is not None:
            self._cap.release()
        try:
            self._cap = self._open_capture()
        except RuntimeError as e:
            logging.error(f"Reopen failed: {e}")
            self._cap = None
            return False
        return True

    def read(self) -> Optional[FrameData]:
        if not self._is_open or self._cap is None:
            return None

        ok, frame = self._cap.read()
        while not ok or frame is None:
            if self.is_file:
                logging.info(f"End of video file reached: {self.device_id}")
                return None
            if not self._reopen():
                return None
            ok, frame = self._cap.read()

        self._read_failures = 0
        self._frame_index += 1
        return FrameData.from_numpy(
            frame,
            timestamp=time.time(),
            frame_index=self._frame_index,
            source=self.source_id,
        )

    def close(self) -> None:
        if self._cap is not None:
            self._cap.release()
            self._cap = None
        if self._is_open:
            logging.info(f"OpenCVSource closed: source_id={self.source_id}, frames={self._frame_index}")
        self._is_open = False


def create_source_from_config(camera: CameraConfig, source_id: str = "main-camera") -> OpenCVSource:
    """Factory: build an OpenCVSource from the camera config section."""
    return OpenCVSource(OpenCVSourceConfig.from_camera_config(camera, source_id=source_id))
