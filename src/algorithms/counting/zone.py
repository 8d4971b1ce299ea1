"""
Zone counting: entering/leaving attribution for tracked objects.

Each object goes through a small state machine evaluated once per frame:

    uncounted, present, moving inbound   -> counted as IN (stays tracked)
    uncounted, gone, moving outbound     -> counted as OUT and removed
    counted, gone                        -> removed
    anything else                        -> left for the next frame

Entry is counted at most once per object. Exit is only evaluated once the
object is gone, so an object already counted as entering is never counted
as leaving. Objects that never show directional movement are never counted.
"""

from __future__ import annotations

import logging
import time
from typing import List, MutableMapping, Optional

from models.count_event import CountEvent, EVENT_IN, EVENT_OUT
from models.direction import Boundary
from models.track import TrackedObject


class ZoneCounter:
    """
    Accumulates entering and leaving totals for one boundary.

    Totals never decrease. The counter mutates the objects it is given: it
    sets ``counted`` on entering objects and removes finished objects from
    the mapping.
    """

    def __init__(self, boundary: Boundary = Boundary.BOTTOM):
        self.boundary = boundary
        self.inbound = boundary.inbound
        self.outbound = boundary.outbound
        self.total_in = 0
        self.total_out = 0

        logging.info(
            f"Zone counter initialized: boundary={boundary.value}, "
            f"in={self.inbound.value}, out={self.outbound.value}"
        )

    def update(
        self,
        objects: MutableMapping[int, TrackedObject],
        timestamp: Optional[float] = None,
    ) -> List[CountEvent]:
        """
        Evaluate every tracked object and update the totals.

        Args:
            objects: Tracked objects keyed by ID (modified in place).
            timestamp: Event timestamp; defaults to the current time.

        Returns:
            Count events raised by this update.
        """
        ts = time.time() if timestamp is None else timestamp
        events: List[CountEvent] = []

        for object_id in list(objects):
            obj = objects[object_id]

            if obj.counted:
                if obj.gone:
                    del objects[object_id]
                continue

            if not obj.gone:
                if obj.direction == self.inbound:
                    self.total_in += 1
                    obj.counted = True
                    events.append(self._event(obj, EVENT_IN, ts))
            elif obj.direction == self.outbound:
                self.total_out += 1
                del objects[object_id]
                events.append(self._event(obj, EVENT_OUT, ts))

        return events

    def _event(self, obj: TrackedObject, kind: str, ts: float) -> CountEvent:
        return CountEvent(
            object_id=obj.object_id,
            kind=kind,
            direction=obj.direction,
            timestamp=ts,
            trajectory_length=len(obj.trajectory),
        )
