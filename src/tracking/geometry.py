"""
Bounding box math used for detection-to-track matching.
"""

from __future__ import annotations

from models.detection import BoundingBox
from .errors import InvalidGeometryError


def validate_bbox(bbox: BoundingBox) -> BoundingBox:
    """Return bbox unchanged, or raise InvalidGeometryError if it is malformed."""
    if bbox.width < 0 or bbox.height < 0:
        raise InvalidGeometryError(
            f"bbox has negative size: width={bbox.width}, height={bbox.height}"
        )
    return bbox


def overlap_ratio(a: BoundingBox, b: BoundingBox) -> float:
    """
    Calculate Intersection over Union (IoU) between two bounding boxes.

    Args:
        a: First bounding box (x, y, width, height)
        b: Second bounding box (x, y, width, height)

    Returns:
        IoU value between 0 and 1; 0 when the union area is empty.
    """
    validate_bbox(a)
    validate_bbox(b)

    x_overlap = max(0.0, min(a.x2, b.x2) - max(a.x, b.x))
    y_overlap = max(0.0, min(a.y2, b.y2) - max(a.y, b.y))
    intersection = x_overlap * y_overlap

    union = a.area + b.area - intersection
    if union <= 0:
        return 0.0

    return intersection / union
