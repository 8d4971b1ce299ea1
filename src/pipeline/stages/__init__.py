"""
Pipeline stages for the parking lot counter.

- count: detection, tracking and zone counting for one frame
- publish: periodic summary publishing
"""

from .count import CountStage, CountStageConfig
from .publish import PublishStage, PublishStageConfig

__all__ = ["CountStage", "CountStageConfig", "PublishStage", "PublishStageConfig"]
