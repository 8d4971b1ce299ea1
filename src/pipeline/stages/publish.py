"""
Publish stage: sends the freshest counter summary at a fixed interval.

Results that arrive between ticks replace each other in the publish slot, so
each tick sends the most recent totals rather than a history. A failed
publish is logged and dropped; the next tick tries again with newer totals.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Optional

from messaging.publisher import Publisher, PublishError
from models.result import FrameResult
from pipeline.slots import LatestSlot


@dataclass
class PublishStageConfig:
    """
    Attributes:
        topic: Topic the summary is published on.
        interval: Seconds between ticks.
    """
    topic: str = "parking/counter"
    interval: float = 1.0


@dataclass
class PublishStats:
    published: int = 0
    failed: int = 0
    last_payload: Optional[str] = None


class PublishStage:
    """Periodically forwards FrameResult summaries to a Publisher."""

    def __init__(
        self,
        config: PublishStageConfig,
        publisher: Publisher,
        slot: LatestSlot[FrameResult],
    ):
        self._config = config
        self._publisher = publisher
        self._slot = slot
        self.stats = PublishStats()

    def run(self, stop: threading.Event) -> None:
        """
        Publish until ``stop`` is set or the slot is closed and drained.

        A result still waiting in the slot when ``stop`` is set is published
        once before returning, so the final totals of a finished stream are
        not lost when the consumer shuts the pipeline down between ticks.

        Meant to run in its own thread.
        """
        logging.info(
            f"Publish stage started: topic={self._config.topic}, interval={self._config.interval}s"
        )
        while not stop.wait(self._config.interval):
            result = self._slot.get(stop=stop)
            if result is None:
                break
            self.publish(result)

        if stop.is_set():
            result = self._slot.get(timeout=0)
            if result is not None:
                self.publish(result)

        logging.info(
            f"Publish stage stopped: published={self.stats.published}, failed={self.stats.failed}"
        )

    def publish(self, result: FrameResult) -> bool:
        """Send one summary; return True on success."""
        payload = result.to_message()
        try:
            self._publisher.publish(self._config.topic, payload)
        except (ConnectionError, PublishError) as e:
            self.stats.failed += 1
            logging.warning(f"Error publishing message to {self._config.topic}: {e}")
            return False

        self.stats.published += 1
        self.stats.last_payload = payload
        return True
