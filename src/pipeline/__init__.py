"""
Pipeline module for the parking lot counter.

The pipeline orchestrates the full processing flow:
- Frame acquisition from an observation source (capture thread)
- Detection, tracking and counting (processing thread, CountStage)
- Periodic summary publishing (publish thread, PublishStage)
"""

from .engine import (
    PipelineCoordinator,
    PipelineConfig,
    PipelineStats,
    create_coordinator_from_config,
)
from .slots import BlockingSlot, LatestSlot
from .stages.count import CountStage, CountStageConfig, create_count_stage
from .stages.publish import PublishStage, PublishStageConfig

__all__ = [
    "PipelineCoordinator",
    "PipelineConfig",
    "PipelineStats",
    "create_coordinator_from_config",
    "BlockingSlot",
    "LatestSlot",
    "CountStage",
    "CountStageConfig",
    "create_count_stage",
    "PublishStage",
    "PublishStageConfig",
]
