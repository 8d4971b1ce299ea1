"""
Tests for the trajectory tracker and direction inference.
"""

import pytest

from models.direction import Boundary, Direction
from models.track import Centroid, TrackedObject
from tracking.trajectory import TrajectoryTracker


def centroids(**positions):
    """Build a centroid mapping from keyword ids like c0=(x, y)."""
    out = {}
    for key, pos in positions.items():
        cid = int(key[1:])
        out[cid] = Centroid(centroid_id=cid, position=pos)
    return out


class TestDirectionInference:
    """Direction is the sign of the new position against the trajectory mean."""

    def test_increasing_y_is_down_for_bottom_boundary(self):
        tracker = TrajectoryTracker(Boundary.BOTTOM)
        for y in (100, 120, 140):
            tracker.update(centroids(c0=(0, y)))

        obj = tracker.get(0)
        assert obj.trajectory == [(0, 100), (0, 120), (0, 140)]
        assert obj.direction == Direction.DOWN

    def test_decreasing_y_is_up_for_top_boundary(self):
        tracker = TrajectoryTracker(Boundary.TOP)
        for y in (300, 250):
            tracker.update(centroids(c0=(10, y)))

        assert tracker.get(0).direction == Direction.UP

    def test_increasing_x_is_right_for_left_boundary(self):
        tracker = TrajectoryTracker(Boundary.LEFT)
        for x in (100, 150):
            tracker.update(centroids(c0=(x, 50)))

        assert tracker.get(0).direction == Direction.RIGHT

    def test_decreasing_x_is_left_for_right_boundary(self):
        tracker = TrajectoryTracker(Boundary.RIGHT)
        for x in (300, 200):
            tracker.update(centroids(c0=(x, 50)))

        assert tracker.get(0).direction == Direction.LEFT

    def test_movement_off_axis_is_still(self):
        tracker = TrajectoryTracker(Boundary.BOTTOM)
        tracker.update(centroids(c0=(100, 200)))
        tracker.update(centroids(c0=(140, 200)))

        assert tracker.get(0).direction == Direction.STILL

    def test_mean_smooths_single_step_jitter(self):
        tracker = TrajectoryTracker(Boundary.BOTTOM)
        for y in (100, 200, 300, 290):
            tracker.update(centroids(c0=(0, y)))

        # 290 is a step up from 300 but still below the mean of 200
        assert tracker.get(0).direction == Direction.DOWN

    def test_empty_trajectory_mean_is_zero(self):
        obj = TrackedObject(object_id=1)
        assert obj.direction_to((0, 10), Boundary.BOTTOM) == Direction.DOWN
        assert obj.direction_to((0, 0), Boundary.BOTTOM) == Direction.STILL


class TestObjectLifecycle:
    def test_new_centroid_creates_still_object(self):
        tracker = TrajectoryTracker(Boundary.BOTTOM)
        objects = tracker.update(centroids(c3=(10, 20)))

        obj = objects[3]
        assert obj.trajectory == [(10, 20)]
        assert obj.direction == Direction.STILL
        assert obj.counted is False
        assert obj.gone is False

    def test_missing_object_marked_gone(self):
        tracker = TrajectoryTracker(Boundary.BOTTOM)
        tracker.update(centroids(c0=(0, 100)))
        tracker.update(centroids(c0=(0, 150)))
        tracker.update({})

        obj = tracker.get(0)
        assert obj.gone is True
        assert obj.direction == Direction.DOWN
        assert len(tracker) == 1

    def test_still_object_dropped_on_second_absence(self):
        tracker = TrajectoryTracker(Boundary.BOTTOM)
        tracker.update(centroids(c0=(0, 100)))
        tracker.update({})
        assert 0 in tracker.objects

        tracker.update({})
        assert 0 not in tracker.objects

    def test_moving_gone_object_is_kept(self):
        tracker = TrajectoryTracker(Boundary.BOTTOM)
        tracker.update(centroids(c0=(0, 100)))
        tracker.update(centroids(c0=(0, 50)))
        tracker.update({})
        tracker.update({})

        assert 0 in tracker.objects
        assert tracker.get(0).direction == Direction.UP

    def test_untouched_objects_keep_trajectory(self):
        tracker = TrajectoryTracker(Boundary.BOTTOM)
        tracker.update(centroids(c0=(0, 100), c1=(300, 100)))
        tracker.update(centroids(c1=(300, 140)))

        assert tracker.get(0).trajectory == [(0, 100)]
        assert tracker.get(1).trajectory == [(300, 100), (300, 140)]

    @pytest.mark.parametrize("n", [1, 5])
    def test_age_is_trajectory_length(self, n):
        tracker = TrajectoryTracker(Boundary.BOTTOM)
        for i in range(n):
            tracker.update(centroids(c0=(0, i)))
        assert tracker.get(0).age == n
