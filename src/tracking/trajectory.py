"""
Trajectory tracker: follows each centroid as an object with a position
history and a movement direction.

Direction is the sign of the latest position relative to the mean of all
previous positions along the movement axis, which smooths out the jitter of
single frame-to-frame deltas.
"""

from __future__ import annotations

import logging
from typing import Dict, Iterator, Mapping

from models.direction import Boundary, Direction
from models.track import Centroid, TrackedObject


class TrajectoryTracker:
    """
    Maintains TrackedObjects keyed by centroid ID.

    The tracker does not count. Objects are removed here only when they
    vanish without ever having moved; the zone counter removes the ones it
    has finished with.
    """

    def __init__(self, boundary: Boundary = Boundary.BOTTOM):
        self.boundary = boundary
        self.objects: Dict[int, TrackedObject] = {}

    def __len__(self) -> int:
        return len(self.objects)

    def __iter__(self) -> Iterator[TrackedObject]:
        return iter(list(self.objects.values()))

    def get(self, object_id: int) -> TrackedObject:
        return self.objects[object_id]

    def add(self, centroid: Centroid) -> TrackedObject:
        """Start following a newly seen centroid."""
        obj = TrackedObject(
            object_id=centroid.centroid_id,
            trajectory=[centroid.position],
            direction=Direction.STILL,
        )
        self.objects[obj.object_id] = obj
        return obj

    def remove(self, object_id: int) -> None:
        self.objects.pop(object_id, None)

    def update(self, centroids: Mapping[int, Centroid]) -> Dict[int, TrackedObject]:
        """
        Update tracked objects from the current centroids.

        Objects missing from ``centroids`` are marked gone; an object already
        gone whose direction is still STILL is dropped as noise. Present
        objects get the centroid position appended and their direction
        recomputed; new centroids become new objects.

        Returns:
            The tracked objects after the update, keyed by ID.
        """
        for object_id in list(self.objects):
            if object_id in centroids:
                continue
            obj = self.objects[object_id]
            if obj.gone and obj.direction == Direction.STILL:
                logging.debug(f"[TRAJECTORY] dropped still object id={object_id}")
                del self.objects[object_id]
            else:
                obj.gone = True

        for centroid_id, centroid in centroids.items():
            obj = self.objects.get(centroid_id)
            if obj is None:
                self.add(centroid)
                continue
            obj.direction = obj.direction_to(centroid.position, self.boundary)
            obj.trajectory.append(centroid.position)

        return self.objects
