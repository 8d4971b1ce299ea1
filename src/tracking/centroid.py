"""
Centroid tracker: gives anchor points a stable identity across frames.

Association is greedy nearest-point matching. Each new point is matched to
the closest centroid not yet claimed in the same update, provided the
centroid stays within a narrow band perpendicular to the movement axis and
is no further than ``max_dist`` away. Points that find no centroid start a
new one; centroids that find no point age and are dropped once they have
gone unmatched for more than ``max_gone`` updates.
"""

from __future__ import annotations

import itertools
import logging
import math
from typing import Dict, List, Optional, Sequence, Set, Tuple

from models.direction import Boundary
from models.track import Centroid, CentroidState, Point


class CentroidTracker:
    """
    Tracks anchor points as centroids with stable IDs.

    Centroids are kept in creation order. When two candidates are exactly
    as close to a point, the one created first wins.
    """

    def __init__(
        self,
        boundary: Boundary = Boundary.BOTTOM,
        max_dist: float = 300.0,
        max_gone: int = 30,
    ):
        """
        Initialize the centroid tracker.

        Args:
            boundary: Entrance boundary; decides the gating axis.
            max_dist: Max distance in pixels between a point and a centroid
                      for them to be considered the same.
            max_gone: Max consecutive unmatched updates before a centroid
                      is dropped.
        """
        self.boundary = boundary
        self.max_dist = max_dist
        self.max_gone = max_gone

        self.centroids: Dict[int, Centroid] = {}
        self._ids = itertools.count()

        logging.info(
            f"Centroid tracker initialized: boundary={boundary.value}, "
            f"max_dist={max_dist}, max_gone={max_gone}"
        )

    def __len__(self) -> int:
        return len(self.centroids)

    def __contains__(self, centroid_id: int) -> bool:
        return centroid_id in self.centroids

    def add(self, point: Point) -> Centroid:
        """Start tracking a new centroid at ``point``."""
        centroid = Centroid(centroid_id=next(self._ids), position=point)
        self.centroids[centroid.centroid_id] = centroid
        return centroid

    def remove(self, centroid_id: int) -> None:
        self.centroids.pop(centroid_id, None)

    def update(self, points: Sequence[Point]) -> Dict[int, Centroid]:
        """
        Update tracked centroids with the anchor points of a new frame.

        Args:
            points: Anchor points detected in the frame.

        Returns:
            The tracked centroids after the update, keyed by ID.
        """
        if len(points) == 0:
            self._age(set())
            return self.centroids

        if not self.centroids:
            for point in points:
                self.add(point)
            return self.centroids

        matched: Set[int] = set()
        unmatched_points: List[Point] = []

        for point in points:
            centroid_id, dist = self.closest(point, exclude=matched)
            if centroid_id is None or dist > self.max_dist:
                unmatched_points.append(point)
                continue

            centroid = self.centroids[centroid_id]
            centroid.position = point
            centroid.frames_unmatched = 0
            matched.add(centroid_id)

        self._age(matched)

        for point in unmatched_points:
            self.add(point)

        return self.centroids

    def closest(
        self,
        point: Point,
        exclude: Optional[Set[int]] = None,
    ) -> Tuple[Optional[int], float]:
        """
        Find the closest gated centroid to ``point``.

        Centroids listed in ``exclude`` and centroids deviating from the
        point by more than the boundary's gate tolerance perpendicular to the
        movement axis are not considered.

        Returns:
            Tuple of (centroid ID, euclidean distance); (None, inf) when no
            centroid qualifies.
        """
        min_id: Optional[int] = None
        min_dist = math.inf
        tolerance = self.boundary.gate_tolerance

        for centroid_id, centroid in self.centroids.items():
            if exclude and centroid_id in exclude:
                continue

            cx, cy = centroid.position
            # Objects move along one axis; the other coordinate barely changes
            if self.boundary.is_horizontal:
                if abs(cx - point[0]) > tolerance:
                    continue
            elif abs(cy - point[1]) > tolerance:
                continue

            dist = math.hypot(cx - point[0], cy - point[1])
            if dist < min_dist:
                min_dist = dist
                min_id = centroid_id

        return min_id, min_dist

    def _age(self, matched: Set[int]) -> None:
        """Age centroids not in ``matched`` and drop the stale ones."""
        stale = []
        for centroid_id, centroid in self.centroids.items():
            if centroid_id in matched:
                continue
            centroid.frames_unmatched += 1
            if centroid.frames_unmatched > self.max_gone:
                stale.append(centroid_id)

        for centroid_id in stale:
            logging.debug(f"[CENTROID] dropped id={centroid_id}")
            del self.centroids[centroid_id]

    def snapshot(self) -> Tuple[CentroidState, ...]:
        """Immutable copy of the current centroids."""
        return tuple(CentroidState.from_centroid(c) for c in self.centroids.values())
