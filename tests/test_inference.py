"""
Tests for detection backends.
"""

from unittest.mock import MagicMock, patch

import numpy as np
import pytest

from inference.backend import create_backend
from inference.opencv_backend import DnnConfig, OpenCVDnnBackend, parse_ssd_output
from models.config import DetectionConfig


def ssd_output(rows):
    """Wrap [label, conf, l, t, r, b] rows into a [1, 1, N, 7] blob."""
    data = [[0.0] + list(r) for r in rows]
    return np.array(data, dtype=np.float32).reshape(1, 1, len(rows), 7)


class TestParseSsdOutput:
    def test_scales_to_pixels(self):
        out = ssd_output([[1, 0.9, 0.25, 0.5, 0.5, 1.0]])

        dets = parse_ssd_output(out, 640, 480, conf_threshold=0.5)

        assert len(dets) == 1
        assert dets[0].bbox.as_int_tuple() == (160, 240, 320, 480)
        assert dets[0].confidence == pytest.approx(0.9)
        assert dets[0].class_id == 1

    def test_threshold_is_exclusive(self):
        out = ssd_output([
            [1, 0.5, 0.1, 0.1, 0.2, 0.2],
            [1, 0.51, 0.1, 0.1, 0.2, 0.2],
            [1, 0.2, 0.1, 0.1, 0.2, 0.2],
        ])

        dets = parse_ssd_output(out, 100, 100, conf_threshold=0.5)

        assert [round(d.confidence, 2) for d in dets] == [0.51]

    def test_empty_output(self):
        assert parse_ssd_output(np.zeros((1, 1, 0, 7)), 640, 480, 0.5) == []


class TestOpenCVDnnBackend:
    def test_missing_model_raises(self, tmp_path):
        with pytest.raises(RuntimeError, match="not found"):
            OpenCVDnnBackend(DnnConfig(model=str(tmp_path / "car.bin")))

    def test_missing_model_config_raises(self, tmp_path):
        model = tmp_path / "car.bin"
        model.write_bytes(b"")
        with pytest.raises(RuntimeError, match="config"):
            OpenCVDnnBackend(DnnConfig(model=str(model), model_config=str(tmp_path / "car.xml")))

    def test_detect(self, tmp_path):
        model = tmp_path / "car.bin"
        model.write_bytes(b"")
        net = MagicMock()
        net.forward.return_value = ssd_output([[1, 0.8, 0.0, 0.0, 0.5, 0.5]])
        net.getPerfProfile.return_value = (2000, None)

        with patch("inference.opencv_backend.cv2.dnn.readNet", return_value=net), \
                patch("inference.opencv_backend.cv2.getTickFrequency", return_value=1_000_000.0):
            backend = OpenCVDnnBackend(DnnConfig(model=str(model), backend_id=2, target_id=1))
            dets = backend.detect(np.zeros((384, 672, 3), dtype=np.uint8), 0.5)

        net.setPreferableBackend.assert_called_once_with(2)
        net.setPreferableTarget.assert_called_once_with(1)
        assert dets[0].bbox.as_int_tuple() == (0, 0, 336, 192)
        assert backend.last_inference_ms == pytest.approx(2.0)


class TestCreateBackend:
    def test_unknown_backend(self):
        with pytest.raises(ValueError):
            create_backend(DetectionConfig(backend="hailo", model="m"))

    def test_opencv_backend_missing_model(self, tmp_path):
        cfg = DetectionConfig(backend="opencv", model=str(tmp_path / "none.bin"))
        with pytest.raises(RuntimeError):
            create_backend(cfg)
