"""
Tests for zone counting, alone and fed by the trackers.
"""

import pytest

from algorithms.counting.zone import ZoneCounter
from models.count_event import EVENT_IN, EVENT_OUT
from models.direction import Boundary, Direction
from models.track import TrackedObject
from tracking.centroid import CentroidTracker
from tracking.trajectory import TrajectoryTracker


def obj(object_id, direction, gone=False, counted=False):
    return TrackedObject(
        object_id=object_id,
        trajectory=[(0, 0), (0, 1)],
        direction=direction,
        gone=gone,
        counted=counted,
    )


class TestBoundaryTable:
    @pytest.mark.parametrize("boundary,inbound,outbound", [
        (Boundary.TOP, Direction.DOWN, Direction.UP),
        (Boundary.BOTTOM, Direction.UP, Direction.DOWN),
        (Boundary.LEFT, Direction.RIGHT, Direction.LEFT),
        (Boundary.RIGHT, Direction.LEFT, Direction.RIGHT),
    ])
    def test_inbound_outbound(self, boundary, inbound, outbound):
        counter = ZoneCounter(boundary)
        assert counter.inbound == inbound
        assert counter.outbound == outbound


class TestStateMachine:
    def test_present_inbound_object_counted_in(self):
        counter = ZoneCounter(Boundary.BOTTOM)
        objects = {1: obj(1, Direction.UP)}

        events = counter.update(objects, timestamp=10.0)

        assert counter.total_in == 1
        assert counter.total_out == 0
        assert objects[1].counted is True
        assert len(events) == 1
        assert events[0].kind == EVENT_IN
        assert events[0].object_id == 1
        assert events[0].timestamp == 10.0
        assert events[0].trajectory_length == 2

    def test_gone_outbound_object_counted_out_and_removed(self):
        counter = ZoneCounter(Boundary.BOTTOM)
        objects = {1: obj(1, Direction.DOWN, gone=True)}

        events = counter.update(objects)

        assert counter.total_out == 1
        assert 1 not in objects
        assert events[0].kind == EVENT_OUT
        assert events[0].direction == Direction.DOWN

    def test_present_outbound_object_not_counted(self):
        counter = ZoneCounter(Boundary.BOTTOM)
        objects = {1: obj(1, Direction.DOWN)}

        assert counter.update(objects) == []
        assert counter.total_out == 0
        assert 1 in objects

    def test_gone_inbound_object_not_counted(self):
        counter = ZoneCounter(Boundary.BOTTOM)
        objects = {1: obj(1, Direction.UP, gone=True)}

        counter.update(objects)

        assert counter.total_in == 0
        assert 1 in objects

    def test_counted_gone_object_removed_without_exit(self):
        counter = ZoneCounter(Boundary.BOTTOM)
        objects = {1: obj(1, Direction.DOWN, gone=True, counted=True)}

        counter.update(objects)

        assert 1 not in objects
        assert counter.total_out == 0

    def test_still_object_never_counted(self):
        counter = ZoneCounter(Boundary.BOTTOM)
        objects = {1: obj(1, Direction.STILL), 2: obj(2, Direction.STILL, gone=True)}

        counter.update(objects)

        assert counter.total_in == 0
        assert counter.total_out == 0
        assert len(objects) == 2

    def test_entry_counted_once(self):
        counter = ZoneCounter(Boundary.BOTTOM)
        objects = {1: obj(1, Direction.UP)}

        for _ in range(5):
            counter.update(objects)

        assert counter.total_in == 1

    def test_counted_object_never_counted_out_while_present(self):
        counter = ZoneCounter(Boundary.BOTTOM)
        objects = {1: obj(1, Direction.UP)}
        counter.update(objects)

        objects[1].direction = Direction.DOWN
        counter.update(objects)

        assert counter.total_in == 1
        assert counter.total_out == 0

    def test_totals_never_decrease(self):
        counter = ZoneCounter(Boundary.BOTTOM)
        objects = {1: obj(1, Direction.UP), 2: obj(2, Direction.DOWN, gone=True)}
        counter.update(objects)

        for _ in range(3):
            counter.update(objects)
            counter.update({})

        assert counter.total_in == 1
        assert counter.total_out == 1


class TestEndToEnd:
    """Centroid tracker -> trajectory tracker -> zone counter."""

    def _step(self, points, centroid_tracker, trajectory_tracker, counter):
        objects = trajectory_tracker.update(centroid_tracker.update(points))
        return counter.update(objects)

    def test_car_entering_from_bottom_counted_in(self):
        ct = CentroidTracker(Boundary.BOTTOM, max_dist=300, max_gone=0)
        tt = TrajectoryTracker(Boundary.BOTTOM)
        counter = ZoneCounter(Boundary.BOTTOM)

        in_events = []
        for y in (300, 250, 200, 150, 100):
            in_events += self._step([(320, y)], ct, tt, counter)

        assert counter.total_in == 1
        assert [e.kind for e in in_events] == [EVENT_IN]
        assert in_events[0].trajectory_length == 2

    def test_car_leaving_through_bottom_counted_out(self):
        ct = CentroidTracker(Boundary.BOTTOM, max_dist=300, max_gone=0)
        tt = TrajectoryTracker(Boundary.BOTTOM)
        counter = ZoneCounter(Boundary.BOTTOM)

        for y in (100, 150, 200, 250):
            self._step([(320, y)], ct, tt, counter)
        assert counter.total_out == 0

        # Centroid evicted, object marked gone, counted out
        events = self._step([], ct, tt, counter)

        assert counter.total_out == 1
        assert counter.total_in == 0
        assert [e.kind for e in events] == [EVENT_OUT]
        assert len(tt) == 0

    def test_entering_and_leaving_cars_together(self):
        ct = CentroidTracker(Boundary.BOTTOM, max_dist=100, max_gone=0)
        tt = TrajectoryTracker(Boundary.BOTTOM)
        counter = ZoneCounter(Boundary.BOTTOM)

        # Car A drives up on the left, car B drives down on the right
        for step in range(4):
            self._step([(100, 400 - 40 * step), (500, 100 + 40 * step)], ct, tt, counter)
        self._step([], ct, tt, counter)

        assert counter.total_in == 1
        assert counter.total_out == 1

    def test_parked_car_never_counted(self):
        ct = CentroidTracker(Boundary.BOTTOM, max_dist=300, max_gone=1)
        tt = TrajectoryTracker(Boundary.BOTTOM)
        counter = ZoneCounter(Boundary.BOTTOM)

        for _ in range(5):
            self._step([(200, 200)], ct, tt, counter)
        for _ in range(4):
            self._step([], ct, tt, counter)

        assert counter.total_in == 0
        assert counter.total_out == 0
        assert len(tt) == 0
        assert len(ct) == 0
