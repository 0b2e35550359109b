"""
Tests for bounding box overlap math.
"""

import pytest

from models.detection import BoundingBox
from tracking.errors import InvalidGeometryError
from tracking.geometry import overlap_ratio, validate_bbox


class TestOverlapRatio:
    """Tests for IoU computation."""

    def test_identical_boxes(self):
        """A box overlaps itself completely."""
        box = BoundingBox(10, 20, 30, 40)
        assert overlap_ratio(box, box) == pytest.approx(1.0)

    def test_disjoint_boxes(self):
        """Non-overlapping boxes have IoU 0."""
        a = BoundingBox(0, 0, 10, 10)
        b = BoundingBox(100, 100, 10, 10)
        assert overlap_ratio(a, b) == 0.0

    def test_touching_edges_is_zero(self):
        """Boxes sharing only an edge do not overlap."""
        a = BoundingBox(0, 0, 10, 10)
        b = BoundingBox(10, 0, 10, 10)
        assert overlap_ratio(a, b) == 0.0

    def test_partial_overlap(self):
        """Half-shifted equal boxes: intersection 50, union 150."""
        a = BoundingBox(0, 0, 10, 10)
        b = BoundingBox(5, 0, 10, 10)
        assert overlap_ratio(a, b) == pytest.approx(50 / 150)

    def test_contained_box(self):
        """A box inside another: IoU is the area ratio."""
        outer = BoundingBox(0, 0, 20, 20)
        inner = BoundingBox(5, 5, 10, 10)
        assert overlap_ratio(outer, inner) == pytest.approx(100 / 400)

    def test_symmetric(self):
        """IoU does not depend on argument order."""
        a = BoundingBox(3, 7, 25, 11)
        b = BoundingBox(10, 2, 8, 30)
        assert overlap_ratio(a, b) == pytest.approx(overlap_ratio(b, a))

    def test_in_unit_interval(self):
        """IoU stays within [0, 1]."""
        a = BoundingBox(0, 0, 50, 80)
        b = BoundingBox(20, 30, 60, 10)
        assert 0.0 <= overlap_ratio(a, b) <= 1.0

    def test_zero_area_boxes(self):
        """Degenerate boxes give 0 instead of dividing by zero."""
        a = BoundingBox(5, 5, 0, 0)
        assert overlap_ratio(a, a) == 0.0

    def test_negative_width_raises(self):
        """Negative size is rejected."""
        bad = BoundingBox(0, 0, -5, 10)
        with pytest.raises(InvalidGeometryError):
            overlap_ratio(bad, BoundingBox(0, 0, 10, 10))

    def test_negative_height_raises_for_second_box(self):
        """Both arguments are validated."""
        bad = BoundingBox(0, 0, 10, -1)
        with pytest.raises(InvalidGeometryError):
            overlap_ratio(BoundingBox(0, 0, 10, 10), bad)


class TestValidateBbox:
    def test_returns_box(self):
        """Valid boxes pass through unchanged."""
        box = BoundingBox(1, 2, 3, 4)
        assert validate_bbox(box) is box

    def test_error_is_value_error(self):
        """InvalidGeometryError can be caught as ValueError."""
        with pytest.raises(ValueError):
            validate_bbox(BoundingBox(0, 0, -1, -1))
