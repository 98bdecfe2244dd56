"""Tests for models/geometry.py."""

import pytest
from models.geometry import (
    bounding_box,
    point_on_segment,
    points_equal,
    ranges_overlap,
    rotate_offset,
    snap,
    snap_point,
    transform_offset,
    transform_point,
)


class TestSnap:
    def test_snap_rounds_to_grid(self):
        assert snap(14) == 10
        assert snap(15) == 20
        assert snap(-26) == -30

    def test_snap_point_custom_grid(self):
        assert snap_point((33, 47), 20) == (40, 40)


class TestTransforms:
    @pytest.mark.parametrize(
        "rotation, expected",
        [(0, (0, -30)), (90, (30, 0)), (180, (0, 30)), (270, (-30, 0))],
    )
    def test_rotate_pin_offset(self, rotation, expected):
        assert rotate_offset((0, -30), rotation) == expected

    def test_rotation_must_be_right_angle(self):
        with pytest.raises(ValueError):
            rotate_offset((1, 2), 45)

    def test_mirror_negates_x_before_rotation(self):
        # (10, -30) mirrored is (-10, -30); rotated 90 -> (30, -10)
        assert transform_offset((10, -30), 90, mirror=True) == (30, -10)
        assert transform_offset((10, -30), 90, mirror=False) == (30, 10)

    def test_transform_point_translates(self):
        assert transform_point((0, 30), (100, 200), 180) == (100, 170)


class TestPointOnSegment:
    def test_point_inside_horizontal(self):
        assert point_on_segment((50, 0), (0, 0), (100, 0))

    def test_endpoints_count(self):
        assert point_on_segment((100, 0), (0, 0), (100, 0))

    def test_off_axis_point_rejected(self):
        assert not point_on_segment((50, 5), (0, 0), (100, 0))

    def test_within_tolerance(self):
        assert point_on_segment((50, 0.5), (0, 0), (100, 0))
        assert point_on_segment((0, 100.5), (0, 0), (0, 100))

    def test_beyond_end_rejected(self):
        assert not point_on_segment((0, 120), (0, 0), (0, 100))

    def test_diagonal_never_matches(self):
        assert not point_on_segment((50, 50), (0, 0), (100, 100))


class TestHelpers:
    def test_points_equal_strict_tolerance(self):
        assert points_equal((0, 0), (0.5, 0.5))
        assert not points_equal((0, 0), (1, 0))

    def test_ranges_overlap_touching(self):
        assert ranges_overlap(0, 10, 10, 20)
        assert not ranges_overlap(0, 10, 13, 20)
        assert ranges_overlap(0, 10, 12, 20, tolerance=2)

    def test_bounding_box(self):
        assert bounding_box([(0, 5), (10, -5), (3, 3)]) == (0, -5, 10, 5)
        assert bounding_box([]) == (0, 0, 0, 0)
