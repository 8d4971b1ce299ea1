"""
Anchor point extraction from detection boxes.

Detectors occasionally report tiny spurious boxes or boxes stretching far
past the actual object. Those are filtered or clipped here before the box
center is used as the object's anchor point.
"""

from __future__ import annotations

from typing import Iterable, Iterator, List

from models.config import PointFilterConfig
from models.detection import Detection
from models.track import Point


def _clip_extent(start: int, extent: int, clip: int, frame_extent: int) -> int:
    """
    Clip one box dimension.

    An oversized extent is cut down to ``clip`` when the clipped box still
    ends inside the frame; otherwise it is limited to the space left between
    ``start`` and the frame edge.
    """
    if extent > clip and start + clip < frame_extent:
        return clip
    return min(extent, frame_extent - start)


def extract_points(
    detections: Iterable[Detection],
    frame_width: int,
    frame_height: int,
    cfg: PointFilterConfig = PointFilterConfig(),
) -> Iterator[Point]:
    """
    Yield one anchor point per usable detection.

    Boxes not fully inside the frame or smaller than the configured minimum
    are skipped. Remaining boxes are clipped (see _clip_extent) and their
    center is yielded as an integer (x, y) point.

    Args:
        detections: Detections for the current frame, in pixel coordinates.
        frame_width: Frame width in pixels.
        frame_height: Frame height in pixels.
        cfg: Size limits for filtering and clipping.
    """
    for det in detections:
        if not det.bbox.inside(frame_width, frame_height):
            continue

        left, top, right, bottom = det.bbox.as_int_tuple()
        width = right - left
        height = bottom - top
        if width < cfg.min_width or height < cfg.min_height:
            continue

        width = _clip_extent(left, width, cfg.clip_width, frame_width)
        height = _clip_extent(top, height, cfg.clip_height, frame_height)

        yield (left + width // 2, top + height // 2)


def extract_point_list(
    detections: Iterable[Detection],
    frame_width: int,
    frame_height: int,
    cfg: PointFilterConfig = PointFilterConfig(),
) -> List[Point]:
    """Same as extract_points but materialized as a list."""
    return list(extract_points(detections, frame_width, frame_height, cfg))
