"""
Pipeline coordinator for the parking lot counter.

Three threads connected by single-item slots:

    capture ──BlockingSlot──> processing ──LatestSlot──> display (caller)
                                          └─LatestSlot──> publish (optional)

- Capture reads frames from the ObservationSource. The frame slot holds one
  frame, so capture runs at the rate processing consumes frames.
- Processing runs the CountStage and hands every FrameResult to the display
  slot and, when publishing, to the publish slot. Both overwrite unconsumed
  results.
- Publish sends the freshest result at a fixed interval.

All tracking state is owned by the processing thread. A single stop event is
observed by every thread at each blocking point. End of stream is not a stop:
capture closes the frame slot, processing drains it, closes its output slots
and returns, and the display consumer ends once the display slot is empty.
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass, field
from typing import Callable, Iterator, List, Optional

from messaging.publisher import Publisher
from models.config import Config
from models.frame import FrameData
from models.result import FrameResult
from observation.base import ObservationSource
from pipeline.slots import BlockingSlot, LatestSlot
from pipeline.stages.count import CountStage, create_count_stage
from pipeline.stages.publish import PublishStage, PublishStageConfig


@dataclass
class PipelineConfig:
    """
    Configuration for the pipeline coordinator.

    Attributes:
        publish_topic: Topic for summaries (used only with a publisher).
        publish_interval: Seconds between published summaries.
        join_timeout: Seconds to wait for each thread on shutdown.
        stats_log_interval: Seconds between status log messages.
    """
    publish_topic: str = "parking/counter"
    publish_interval: float = 1.0
    join_timeout: float = 5.0
    stats_log_interval: float = 60.0


@dataclass
class PipelineStats:
    """Runtime statistics for the pipeline."""
    frames_captured: int = 0
    frames_processed: int = 0
    results_dropped: int = 0
    start_time: float = field(default_factory=time.time)
    last_stats_log_time: float = field(default_factory=time.time)


class PipelineCoordinator:
    """
    Runs capture, processing and (optionally) publish threads.

    Example:
        coordinator = PipelineCoordinator(source, stage, PipelineConfig())
        source.open()
        for result in coordinator.start().results():
            show(result)
        coordinator.stop()
        coordinator.join()

    or simply ``coordinator.run(callback)``.
    """

    def __init__(
        self,
        source: ObservationSource,
        stage: CountStage,
        config: PipelineConfig,
        publisher: Optional[Publisher] = None,
    ):
        self.source = source
        self.stage = stage
        self.config = config
        self.stats = PipelineStats()

        self._stop = threading.Event()
        self._frames: BlockingSlot[FrameData] = BlockingSlot()
        self._display: LatestSlot[FrameResult] = LatestSlot()
        self._publish: Optional[LatestSlot[FrameResult]] = None
        self._publish_stage: Optional[PublishStage] = None
        if publisher is not None:
            self._publish = LatestSlot()
            self._publish_stage = PublishStage(
                PublishStageConfig(
                    topic=config.publish_topic,
                    interval=config.publish_interval,
                ),
                publisher,
                self._publish,
            )

        self._threads: List[threading.Thread] = []
        self._errors: List[BaseException] = []
        self._errors_lock = threading.Lock()
        self._joined = False

    @property
    def errors(self) -> List[BaseException]:
        """Fatal errors raised in pipeline threads."""
        with self._errors_lock:
            return list(self._errors)

    @property
    def stopped(self) -> bool:
        return self._stop.is_set()

    @property
    def publish_stage(self) -> Optional[PublishStage]:
        return self._publish_stage

    def start(self) -> "PipelineCoordinator":
        """Start the pipeline threads. The source must already be open."""
        if self._threads:
            raise RuntimeError("Pipeline already started")

        self.stats = PipelineStats()
        self._threads.append(
            threading.Thread(target=self._capture_loop, name="CaptureThread", daemon=True)
        )
        self._threads.append(
            threading.Thread(target=self._processing_loop, name="ProcessingThread", daemon=True)
        )
        if self._publish_stage is not None:
            self._threads.append(
                threading.Thread(
                    target=self._publish_stage.run,
                    args=(self._stop,),
                    name="PublishThread",
                    daemon=True,
                )
            )

        for thread in self._threads:
            thread.start()

        logging.info(
            f"Pipeline started: source={self.source.source_id}, "
            f"publish={'on' if self._publish_stage else 'off'}"
        )
        return self

    def stop(self) -> None:
        """Broadcast shutdown to all threads."""
        if not self._stop.is_set():
            logging.info("Pipeline stop requested")
        self._stop.set()

    def results(self) -> Iterator[FrameResult]:
        """
        Yield results for display, newest available each time.

        Ends when the pipeline is stopped or processing has finished and the
        last result has been taken.
        """
        while True:
            result = self._display.get(stop=self._stop)
            if result is None:
                return
            yield result
            self._log_stats()

    def run(self, callback: Optional[Callable[[FrameResult], Optional[bool]]] = None) -> PipelineStats:
        """
        Start the pipeline and consume results in the calling thread.

        Args:
            callback: Called with each displayed result; returning False
                      stops the pipeline.
        """
        self.start()
        try:
            for result in self.results():
                if callback is not None and callback(result) is False:
                    break
        except KeyboardInterrupt:
            logging.info("Pipeline interrupted by user")
        finally:
            self.stop()
            self.join()
        return self.stats

    def join(self) -> None:
        """Wait for all threads, discard undelivered results and close the source."""
        if self._joined:
            return
        self._stop.set()
        for thread in self._threads:
            thread.join(timeout=self.config.join_timeout)
            if thread.is_alive():
                logging.warning(f"{thread.name} did not stop within {self.config.join_timeout}s")

        dropped = self._display.drain()
        if dropped:
            logging.debug(f"Discarded {dropped} undelivered display result(s)")
        if self._publish is not None:
            self._publish.drain()
        self.stats.results_dropped = self._display.overwritten

        try:
            self.source.close()
        except Exception as e:
            logging.warning(f"Error closing source: {e}")

        self._joined = True
        logging.info(
            f"Pipeline stopped: captured={self.stats.frames_captured}, "
            f"processed={self.stats.frames_processed}, in={self.stage.total_in}, "
            f"out={self.stage.total_out}"
        )

    def _fail(self, error: BaseException) -> None:
        with self._errors_lock:
            self._errors.append(error)
        self._stop.set()

    def _capture_loop(self) -> None:
        try:
            while not self._stop.is_set():
                frame_data = self.source.read()
                if frame_data is None:
                    logging.info(f"Capture finished: no more frames from {self.source.source_id}")
                    break
                if frame_data.is_empty:
                    continue
                self.stats.frames_captured += 1
                if not self._frames.put(frame_data, stop=self._stop):
                    break
        except Exception as e:
            logging.error(f"Capture error: {e}")
            self._fail(e)
        finally:
            self._frames.close()
            logging.info("Capture stage stopped")

    def _processing_loop(self) -> None:
        try:
            while True:
                frame_data = self._frames.get(stop=self._stop)
                if frame_data is None:
                    break
                result = self.stage.process(frame_data)
                self.stats.frames_processed += 1
                self._display.put(result)
                if self._publish is not None:
                    self._publish.put(result)
        except Exception as e:
            logging.error(f"Processing error: {e}")
            self._fail(e)
        finally:
            self._display.close()
            if self._publish is not None:
                self._publish.close()
            logging.info("Processing stage stopped")

    def _log_stats(self) -> None:
        now = time.time()
        if now - self.stats.last_stats_log_time < self.config.stats_log_interval:
            return
        elapsed = max(now - self.stats.start_time, 1e-6)
        logging.info(
            f"Pipeline stats: frames={self.stats.frames_processed}, "
            f"fps={self.stats.frames_processed / elapsed:.1f}, "
            f"in={self.stage.total_in}, out={self.stage.total_out}"
        )
        self.stats.last_stats_log_time = now


def create_coordinator_from_config(
    config: Config,
    source: ObservationSource,
    detector,
    publisher: Optional[Publisher] = None,
) -> PipelineCoordinator:
    """
    Factory function to create a PipelineCoordinator from the typed config.

    Args:
        config: Full application config.
        source: Frame source (opened by the caller).
        detector: Detection backend.
        publisher: Connected publisher, or None to disable publishing.
    """
    stage = create_count_stage(
        config.tracking,
        detector,
        conf_threshold=config.detection.conf_threshold,
    )
    pipeline_config = PipelineConfig(
        publish_topic=config.publish.topic,
        publish_interval=config.publish.interval,
    )
    return PipelineCoordinator(source, stage, pipeline_config, publisher=publisher)
