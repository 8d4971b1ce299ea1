"""
Tests for the count stage and the pipeline coordinator.
"""

import json
import time

import numpy as np
import pytest

from models.config import TrackingConfig
from models.count_event import EVENT_IN
from models.detection import Detection
from models.direction import Boundary
from models.frame import FrameData
from models.result import FrameResult
from observation.base import ObservationSource, ObservationConfig
from pipeline.engine import PipelineCoordinator, PipelineConfig
from pipeline.stages.count import CountStage, CountStageConfig


class MockObservationSource(ObservationSource):
    """Mock source producing blank frames."""

    def __init__(self, config: ObservationConfig, max_frames: int = 10, fail_at: int = None):
        super().__init__(config)
        self._max_frames = max_frames
        self._fail_at = fail_at
        self._pos = 0
        self.closed = False

    def open(self) -> None:
        self._is_open = True
        self._pos = 0
        self._frame_index = 0

    def read(self):
        if not self._is_open:
            return None
        if self._pos >= self._max_frames:
            return None
        if self._fail_at is not None and self._pos == self._fail_at:
            raise IOError("camera unplugged")

        frame = np.zeros((480, 640, 3), dtype=np.uint8)
        self._pos += 1
        self._frame_index += 1

        return FrameData(
            frame=frame,
            width=640,
            height=480,
            timestamp=time.time(),
            frame_index=self._frame_index,
            source=self.source_id,
        )

    def close(self) -> None:
        self._is_open = False
        self.closed = True


class ScriptedDetector:
    """Returns pre-defined detections call by call, then nothing."""

    def __init__(self, script=None, fail_at=None, inference_ms=None):
        self._script = list(script or [])
        self._fail_at = fail_at
        self.calls = 0
        self.thresholds = []
        if inference_ms is not None:
            self.last_inference_ms = inference_ms

    def detect(self, frame, conf_threshold):
        self.thresholds.append(conf_threshold)
        call = self.calls
        self.calls += 1
        if self._fail_at is not None and call == self._fail_at:
            raise RuntimeError("inference failed")
        if call < len(self._script):
            return self._script[call]
        return []


class FakePublisher:
    def __init__(self):
        self.messages = []

    def publish(self, topic, payload):
        self.messages.append((topic, payload))


def car(cx, cy):
    return Detection.from_ltrb(cx - 50, cy - 30, cx + 50, cy + 30, confidence=0.9)


def entering_car_script(steps=6):
    """A car driving up from the bottom edge."""
    return [[car(320, 400 - 30 * i)] for i in range(steps)]


def make_frame(index):
    return FrameData(
        frame=np.zeros((480, 640, 3), dtype=np.uint8),
        width=640,
        height=480,
        timestamp=100.0 + index,
        frame_index=index,
    )


def make_coordinator(source, detector, publisher=None, **pipeline_kwargs):
    stage = CountStage(CountStageConfig(tracking=TrackingConfig(boundary=Boundary.BOTTOM)), detector)
    config = PipelineConfig(**pipeline_kwargs)
    source.open()
    return PipelineCoordinator(source, stage, config, publisher=publisher)


class TestCountStage:
    """Tests for CountStage.process."""

    def test_empty_frame_result(self):
        stage = CountStage(CountStageConfig(), ScriptedDetector())
        result = stage.process(make_frame(1))

        assert isinstance(result, FrameResult)
        assert result.total_in == 0
        assert result.total_out == 0
        assert result.centroids == ()
        assert result.frame_index == 1
        assert result.frame.frame_index == 1

    def test_entering_car_counted(self):
        stage = CountStage(CountStageConfig(), ScriptedDetector(entering_car_script()))

        results = [stage.process(make_frame(i)) for i in range(1, 7)]

        assert results[0].total_in == 0
        assert results[1].total_in == 1
        assert results[-1].total_in == 1
        assert [e.kind for e in results[1].events] == [EVENT_IN]
        assert results[1].events[0].timestamp == 102.0
        assert results[-1].centroids[0].position == (320, 250)

    def test_conf_threshold_passed_to_detector(self):
        detector = ScriptedDetector()
        stage = CountStage(CountStageConfig(conf_threshold=0.7), detector)
        stage.process(make_frame(1))

        assert detector.thresholds == [0.7]

    def test_performance_from_backend(self):
        stage = CountStage(CountStageConfig(), ScriptedDetector(inference_ms=12.5))
        result = stage.process(make_frame(1))

        assert result.performance_ms == 12.5
        assert result.perf_label() == "Inference time: 12.50 ms"

    def test_performance_falls_back_to_wall_clock(self):
        stage = CountStage(CountStageConfig(), ScriptedDetector())
        result = stage.process(make_frame(1))

        assert result.performance_ms >= 0.0

    def test_event_callback(self):
        seen = []
        stage = CountStage(CountStageConfig(), ScriptedDetector(entering_car_script()), on_event=seen.append)
        for i in range(1, 4):
            stage.process(make_frame(i))

        assert len(seen) == 1
        assert seen[0].kind == EVENT_IN

    def test_small_detections_ignored(self):
        tiny = Detection.from_ltrb(100, 100, 110, 110, confidence=0.9)
        stage = CountStage(CountStageConfig(), ScriptedDetector([[tiny]]))
        result = stage.process(make_frame(1))

        assert result.centroids == ()

    def test_detector_error_propagates(self):
        stage = CountStage(CountStageConfig(), ScriptedDetector(fail_at=0))
        with pytest.raises(RuntimeError):
            stage.process(make_frame(1))


class TestPipelineCoordinator:
    """Tests for the three-thread coordinator."""

    def test_processes_every_frame_of_finite_source(self):
        source = MockObservationSource(ObservationConfig(source_id="test"), max_frames=8)
        detector = ScriptedDetector(entering_car_script())
        coordinator = make_coordinator(source, detector)

        stats = coordinator.run()

        assert stats.frames_captured == 8
        assert stats.frames_processed == 8
        assert detector.calls == 8
        assert coordinator.stage.total_in == 1
        assert coordinator.errors == []
        assert source.closed

    def test_results_arrive_in_processing_order(self):
        source = MockObservationSource(ObservationConfig(), max_frames=30)
        coordinator = make_coordinator(source, ScriptedDetector())

        seen = []
        coordinator.run(lambda r: seen.append(r.frame_index))

        assert seen
        assert seen == sorted(seen)
        assert len(set(seen)) == len(seen)

    def test_callback_false_stops_live_source(self):
        source = MockObservationSource(ObservationConfig(), max_frames=10**9)
        coordinator = make_coordinator(source, ScriptedDetector())

        coordinator.run(lambda r: False)

        assert coordinator.stopped
        assert source.closed
        assert coordinator.errors == []

    def test_external_stop(self):
        source = MockObservationSource(ObservationConfig(), max_frames=10**9)
        coordinator = make_coordinator(source, ScriptedDetector())
        coordinator.start()

        results = coordinator.results()
        next(results)
        coordinator.stop()
        remaining = list(results)
        coordinator.join()

        assert remaining == []
        assert source.closed

    def test_detector_error_stops_pipeline(self):
        source = MockObservationSource(ObservationConfig(), max_frames=10**9)
        coordinator = make_coordinator(source, ScriptedDetector(fail_at=3))

        coordinator.run()

        assert len(coordinator.errors) == 1
        assert isinstance(coordinator.errors[0], RuntimeError)
        assert coordinator.stats.frames_processed == 3
        assert source.closed

    def test_source_error_stops_pipeline(self):
        source = MockObservationSource(ObservationConfig(), max_frames=10**9, fail_at=5)
        coordinator = make_coordinator(source, ScriptedDetector())

        coordinator.run()

        assert len(coordinator.errors) == 1
        assert isinstance(coordinator.errors[0], IOError)
        assert coordinator.stats.frames_captured == 5

    def test_start_twice_rejected(self):
        source = MockObservationSource(ObservationConfig(), max_frames=1)
        coordinator = make_coordinator(source, ScriptedDetector())
        coordinator.start()
        try:
            with pytest.raises(RuntimeError):
                coordinator.start()
        finally:
            coordinator.stop()
            coordinator.join()

    def test_publishes_totals(self):
        source = MockObservationSource(ObservationConfig(), max_frames=10**9)
        publisher = FakePublisher()
        coordinator = make_coordinator(
            source,
            ScriptedDetector(entering_car_script()),
            publisher=publisher,
            publish_topic="lot/main",
            publish_interval=0.01,
        )
        deadline = time.time() + 5.0

        def until_published(result):
            return not publisher.messages and time.time() < deadline

        coordinator.run(until_published)

        assert publisher.messages
        topic, payload = publisher.messages[-1]
        assert topic == "lot/main"
        assert set(json.loads(payload)) == {"TOTAL_IN", "TOTAL_OUT"}

    def test_final_totals_published_at_end_of_stream(self):
        source = MockObservationSource(ObservationConfig(), max_frames=8)
        publisher = FakePublisher()
        coordinator = make_coordinator(
            source,
            ScriptedDetector(entering_car_script()),
            publisher=publisher,
            publish_interval=0.5,
        )

        coordinator.run()

        assert coordinator.stage.total_in == 1
        assert publisher.messages
        assert json.loads(publisher.messages[-1][1]) == {"TOTAL_IN": 1, "TOTAL_OUT": 0}

    def test_no_publish_thread_without_publisher(self):
        source = MockObservationSource(ObservationConfig(), max_frames=2)
        coordinator = make_coordinator(source, ScriptedDetector())

        coordinator.run()

        assert coordinator.publish_stage is None
