"""
Draw FrameResult snapshots onto their frame and show them in a window.
"""

from __future__ import annotations

import logging
from typing import Optional

import cv2
import numpy as np

from models.result import FrameResult

ESC_KEY = 27

LABEL_COLOR = (255, 255, 255)
CENTROID_COLOR = (0, 255, 0)
CENTROID_RADIUS = 5


def draw_result(image: np.ndarray, result: FrameResult) -> np.ndarray:
    """
    Draw inference time, totals and centroids onto ``image`` in place.

    Returns:
        The same image, for chaining.
    """
    cv2.putText(image, result.perf_label(), (0, 25),
                cv2.FONT_HERSHEY_SIMPLEX, 0.5, LABEL_COLOR, 2)
    cv2.putText(image, result.counts_label(), (0, 45),
                cv2.FONT_HERSHEY_SIMPLEX, 0.5, LABEL_COLOR, 2)

    for centroid in result.centroids:
        x, y = centroid.position
        cv2.circle(image, (x, y), CENTROID_RADIUS, CENTROID_COLOR, 2)
        cv2.putText(image, str(centroid), (x + 5, y),
                    cv2.FONT_HERSHEY_SIMPLEX, 0.5, CENTROID_COLOR, 2)
    return image


class DisplayWindow:
    """
    A HighGUI window showing one result per call.

    Example:
        window = DisplayWindow("parking-lot-counter", delay_ms=5)
        for result in coordinator.results():
            if not window.show(result):
                break
        window.close()
    """

    def __init__(self, window_name: str, delay_ms: float = 5.0):
        self.window_name = window_name
        self.delay_ms = max(1, int(delay_ms))
        self._opened = False

    def show(self, result: FrameResult) -> bool:
        """
        Render and show a result.

        Returns:
            False when the user pressed ESC, True otherwise.
        """
        if result.frame is None or result.frame.is_empty:
            return True

        image = draw_result(result.frame.image_copy(), result)
        cv2.imshow(self.window_name, image)
        self._opened = True

        key = cv2.waitKey(self.delay_ms) & 0xFF
        if key == ESC_KEY:
            logging.info("ESC pressed, stopping")
            return False
        return True

    def close(self) -> None:
        if not self._opened:
            return
        try:
            cv2.destroyWindow(self.window_name)
        except cv2.error as e:
            logging.debug(f"Error closing window {self.window_name}: {e}")
        self._opened = False
