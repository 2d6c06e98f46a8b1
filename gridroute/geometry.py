"""Low-level geometry helpers shared by the grid, pathfinder and generator."""

from __future__ import annotations

import math
from typing import Iterable, NamedTuple

from .config import PLANNER_RULES


class Point(NamedTuple):
    """An immutable lattice coordinate.

    Compares and hashes structurally, so points are used directly as
    dict/set keys.
    """

    x: float
    y: float


def are_points_equal(p1: tuple[float, float], p2: tuple[float, float]) -> bool:
    return p1[0] == p2[0] and p1[1] == p2[1]


def point_distance(p1: tuple[float, float], p2: tuple[float, float]) -> float:
    """Euclidean distance."""
    return math.hypot(p2[0] - p1[0], p2[1] - p1[1])


def manhattan_distance(p1: tuple[float, float], p2: tuple[float, float]) -> float:
    return abs(p1[0] - p2[0]) + abs(p1[1] - p2[1])


def snap_coordinate(value: float) -> float:
    """Round a lattice coordinate so equal positions hash alike."""
    return round(value, PLANNER_RULES.coordinate_decimals)


# ── Segment tests ──────────────────────────────────────────────────


def is_point_on_segment(
    point: tuple[float, float],
    seg_start: tuple[float, float],
    seg_end: tuple[float, float],
    tolerance: float = PLANNER_RULES.collinear_tolerance,
) -> bool:
    """Check if *point* lies on the closed segment seg_start–seg_end.

    Collinearity is tested with the cross product (within *tolerance*),
    then the projection onto the segment must fall inside [0, |seg|²].
    """
    px, py = point
    ax, ay = seg_start
    bx, by = seg_end
    cross = (py - ay) * (bx - ax) - (px - ax) * (by - ay)
    if abs(cross) > tolerance:
        return False
    dot = (px - ax) * (bx - ax) + (py - ay) * (by - ay)
    length_sq = (bx - ax) ** 2 + (by - ay) ** 2
    return 0 <= dot <= length_sq


def _ccw(a: tuple[float, float], b: tuple[float, float], c: tuple[float, float]) -> bool:
    return (c[1] - a[1]) * (b[0] - a[0]) > (b[1] - a[1]) * (c[0] - a[0])


def do_lines_intersect_or_touch(
    line1_start: tuple[float, float],
    line1_end: tuple[float, float],
    line2_start: tuple[float, float],
    line2_end: tuple[float, float],
) -> bool:
    """True if two segments cross, touch, or share an endpoint."""
    if (are_points_equal(line1_start, line2_start)
            or are_points_equal(line1_start, line2_end)
            or are_points_equal(line1_end, line2_start)
            or are_points_equal(line1_end, line2_end)):
        return True

    if (is_point_on_segment(line1_start, line2_start, line2_end)
            or is_point_on_segment(line1_end, line2_start, line2_end)
            or is_point_on_segment(line2_start, line1_start, line1_end)
            or is_point_on_segment(line2_end, line1_start, line1_end)):
        return True

    a, b, c, d = line1_start, line1_end, line2_start, line2_end
    return _ccw(a, c, d) != _ccw(b, c, d) and _ccw(a, b, c) != _ccw(a, b, d)


# ── Grid spacing ───────────────────────────────────────────────────


def size_multiples(canvas_size: float) -> list[int]:
    """All divisors of *canvas_size* except 1 and itself, ascending.

    Non-integral sizes have no divisors.
    """
    if canvas_size <= 0 or not float(canvas_size).is_integer():
        return []
    n = int(canvas_size)
    multiples: set[int] = set()
    for i in range(1, math.isqrt(n) + 1):
        if n % i == 0:
            multiples.add(i)
            multiples.add(n // i)
    multiples.discard(1)
    multiples.discard(n)
    return sorted(multiples)


def verify_grid_size(grid_size: float, canvas_size: float) -> float:
    """Snap *grid_size* to the closest divisor of *canvas_size*.

    The requested size is kept when it already divides the canvas or
    when the canvas has no divisors at all.  Ties go to the smaller
    divisor.
    """
    multiples = size_multiples(canvas_size)
    if not multiples or grid_size in multiples:
        return grid_size
    closest = multiples[0]
    for multiple in multiples:
        if abs(multiple - grid_size) < abs(closest - grid_size):
            closest = multiple
    return closest


# ── Lookup helpers ─────────────────────────────────────────────────


def find_nearest_point(
    target: tuple[float, float],
    candidates: Iterable[Point],
    max_distance: float = math.inf,
) -> Point | None:
    """Closest candidate strictly within *max_distance*, first one on ties."""
    nearest: Point | None = None
    best = max_distance
    for candidate in candidates:
        d = point_distance(target, candidate)
        if d < best:
            nearest = candidate
            best = d
    return nearest


def point_key(point: tuple[float, float]) -> str:
    """Canonical text key ``"x,y"`` for collaborators that need strings."""
    return f"{_fmt(point[0])},{_fmt(point[1])}"


def parse_point_key(key: str) -> Point:
    xs, ys = key.split(",")
    return Point(_num(xs), _num(ys))


def _fmt(v: float) -> str:
    if isinstance(v, float) and v.is_integer():
        return str(int(v))
    return repr(v)


def _num(s: str) -> float:
    v = float(s)
    return int(v) if v.is_integer() else v
