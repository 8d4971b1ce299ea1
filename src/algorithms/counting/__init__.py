"""
Counting algorithms.

The zone counter turns tracked objects into entering/leaving totals for a
configured frame boundary. Tracking stays independent of counting: the
trackers only maintain identity, trajectory and direction.
"""

from .zone import ZoneCounter

__all__ = ["ZoneCounter"]
