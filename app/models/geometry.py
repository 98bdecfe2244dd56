"""
Geometry primitives for schematic coordinates.

Points are plain (x, y) tuples in schematic units. Wires are axis-aligned
segments; anything else is rejected by the callers that care.
"""

import math

from settings.constants import CONNECTION_TOLERANCE, GRID_SIZE

VALID_ROTATIONS = (0, 90, 180, 270)


def snap(value, grid_size=GRID_SIZE):
    """Snap a scalar to the nearest grid line."""
    return int(round(value / grid_size)) * grid_size


def snap_point(point, grid_size=GRID_SIZE):
    return (snap(point[0], grid_size), snap(point[1], grid_size))


def round_point(point):
    """Round a point to integer coordinates (the connectivity key)."""
    return (int(round(point[0])), int(round(point[1])))


def add_points(a, b):
    return (a[0] + b[0], a[1] + b[1])


def sub_points(a, b):
    return (a[0] - b[0], a[1] - b[1])


def distance(a, b):
    return math.hypot(a[0] - b[0], a[1] - b[1])


def points_equal(a, b, tolerance=CONNECTION_TOLERANCE):
    """True if both coordinates differ by strictly less than tolerance."""
    return abs(a[0] - b[0]) < tolerance and abs(a[1] - b[1]) < tolerance


def rotate_offset(offset, rotation):
    """Rotate a local offset by a multiple of 90 degrees.

    Screen coordinates grow downward, so positive rotation turns the
    offset clockwise on screen: (0, -30) at 90 degrees becomes (30, 0).
    """
    x, y = offset
    rotation = rotation % 360
    if rotation == 0:
        return (x, y)
    if rotation == 90:
        return (-y, x)
    if rotation == 180:
        return (-x, -y)
    if rotation == 270:
        return (y, -x)
    raise ValueError(f"Rotation must be a multiple of 90, got {rotation}")


def transform_offset(offset, rotation=0, mirror=False):
    """Apply mirror (negate local x) then rotation to a local offset."""
    x, y = offset
    if mirror:
        x = -x
    return rotate_offset((x, y), rotation)


def transform_point(offset, origin, rotation=0, mirror=False):
    """Map a local pin offset to an absolute position."""
    return add_points(origin, transform_offset(offset, rotation, mirror))


def is_horizontal(x1, y1, x2, y2):
    return y1 == y2


def is_vertical(x1, y1, x2, y2):
    return x1 == x2


def is_axis_aligned(x1, y1, x2, y2):
    return x1 == x2 or y1 == y2


def point_on_segment(point, start, end, tolerance=CONNECTION_TOLERANCE):
    """Return True if point lies on the axis-aligned segment start-end.

    The point must sit inside the segment's bounding box grown by the
    tolerance AND be aligned with the segment's axis. Diagonal segments
    never match.
    """
    px, py = point
    x1, y1 = start
    x2, y2 = end
    if min(x1, x2) - tolerance > px or px > max(x1, x2) + tolerance:
        return False
    if min(y1, y2) - tolerance > py or py > max(y1, y2) + tolerance:
        return False
    if x1 == x2:
        return abs(px - x1) < tolerance
    if y1 == y2:
        return abs(py - y1) < tolerance
    return False


def ranges_overlap(a_min, a_max, b_min, b_max, tolerance=0):
    """True if the closed intervals touch or overlap within tolerance."""
    return a_min <= b_max + tolerance and b_min <= a_max + tolerance


def bounding_box(points):
    """Return (min_x, min_y, max_x, max_y) for an iterable of points."""
    xs = [p[0] for p in points]
    ys = [p[1] for p in points]
    if not xs:
        return (0, 0, 0, 0)
    return (min(xs), min(ys), max(xs), max(ys))
