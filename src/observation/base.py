"""
Frame source contract used by the capture thread.

A source is opened once, read until it returns None, then closed. Whether
None means "end of file" or "camera gave up after reconnecting" is the
source's business; the pipeline treats both as end of stream.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Iterator, Optional

from models.frame import FrameData


@dataclass
class ObservationConfig:
    """
    Attributes:
        source_id: Name stamped on every FrameData the source produces.
    """
    source_id: str = "default"


class ObservationSource(ABC):
    """
    Base class for anything that yields FrameData.

    Subclasses set ``_is_open`` in open()/close() and bump ``_frame_index``
    for each frame they return.

    Example:
        with OpenCVSource(config) as source:
            for frame_data in source:
                ...
    """

    def __init__(self, config: ObservationConfig):
        self._config = config
        self._is_open = False
        self._frame_index = 0

    @property
    def source_id(self) -> str:
        return self._config.source_id

    @property
    def is_open(self) -> bool:
        return self._is_open

    @property
    def frame_index(self) -> int:
        """Frames returned since the last open()."""
        return self._frame_index

    @property
    def is_live(self) -> bool:
        """Cameras never run out of frames; files do."""
        return True

    @property
    def fps(self) -> Optional[float]:
        return None

    @abstractmethod
    def open(self) -> None:
        """
        Raises:
            RuntimeError: If the source cannot be opened.
        """

    @abstractmethod
    def read(self) -> Optional[FrameData]:
        """Next frame, or None when the stream is over."""

    @abstractmethod
    def close(self) -> None:
        """Release the source; calling it twice is harmless."""

    def __enter__(self) -> "ObservationSource":
        self.open()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def __iter__(self) -> Iterator[FrameData]:
        if not self._is_open:
            raise RuntimeError("Source must be open before iterating")
        frame_data = self.read()
        while frame_data is not None:
            yield frame_data
            frame_data = self.read()
