"""Conflict detection between a candidate route and accepted routes.

Three checks, applied against every accepted route in turn:

  1. shared points     no point of the candidate may coincide with a
                       point of an accepted route, except where both are
                       route endpoints
  2. segment contact   no segment may cross or touch another segment
  3. clearance         interior points must stay ``min_distance`` apart

In relaxed mode (interior fill), the candidate's own start point may sit
on an accepted route's interior and its first segment may touch that
route; everything else is checked as usual.
"""

from __future__ import annotations

import logging
from typing import Sequence

from .geometry import (
    are_points_equal,
    do_lines_intersect_or_touch,
    is_point_on_segment,
    point_distance,
)
from .models import RandomPath


log = logging.getLogger(__name__)

_EPS = 1e-6


def does_path_intersect_with_existing(
    new_path: Sequence[tuple[float, float]],
    existing_paths: Sequence[RandomPath],
    min_distance: float,
    allow_start_point_intersection: bool = False,
) -> bool:
    """True if *new_path* conflicts with any route in *existing_paths*."""
    if len(new_path) < 2:
        return False

    new_box = _bbox(new_path, min_distance + _EPS)
    for existing in existing_paths:
        other = existing.path
        if not other or len(other) < 2:
            continue
        # all three checks need the routes within min_distance of each other
        if not _overlaps(new_box, _bbox(other, 0.0)):
            continue
        if (_shares_point(new_path, other, allow_start_point_intersection)
                or _segments_touch(new_path, other, allow_start_point_intersection)
                or _too_close(new_path, existing, min_distance)):
            return True
    return False


def _shares_point(new_path, other, relaxed: bool) -> bool:
    last_new = len(new_path) - 1
    last_other = len(other) - 1
    for i, p in enumerate(new_path):
        new_is_end = i == 0 or i == last_new
        for j, q in enumerate(other):
            if not are_points_equal(p, q):
                continue
            other_is_end = j == 0 or j == last_other
            if relaxed and i == 0 and not other_is_end:
                continue
            if not relaxed and new_is_end and other_is_end:
                continue
            log.debug("Conflict: shared point (%g, %g)", p[0], p[1])
            return True
    return False


def _segments_touch(new_path, other, relaxed: bool) -> bool:
    for i in range(len(new_path) - 1):
        a, b = new_path[i], new_path[i + 1]
        for j in range(len(other) - 1):
            c, d = other[j], other[j + 1]
            if not _overlaps(_bbox((a, b), _EPS), _bbox((c, d), 0.0)):
                continue
            if not do_lines_intersect_or_touch(a, b, c, d):
                continue
            if relaxed and i == 0 and is_point_on_segment(a, c, d):
                continue
            log.debug("Conflict: segment (%g, %g)-(%g, %g) touches (%g, %g)-(%g, %g)",
                      a[0], a[1], b[0], b[1], c[0], c[1], d[0], d[1])
            return True
    return False


def _too_close(new_path, existing: RandomPath, min_distance: float) -> bool:
    # endpoints are exempt on both sides
    other_interior = existing.interior
    for p in new_path[1:-1]:
        for q in other_interior:
            d = point_distance(p, q)
            if 0 < d < min_distance:
                log.debug("Conflict: routes too close (%.1f < %.1f)", d, min_distance)
                return True
    return False


def _bbox(points, margin: float) -> tuple[float, float, float, float]:
    xs = [p[0] for p in points]
    ys = [p[1] for p in points]
    return (min(xs) - margin, min(ys) - margin, max(xs) + margin, max(ys) + margin)


def _overlaps(a: tuple[float, float, float, float], b: tuple[float, float, float, float]) -> bool:
    return a[0] <= b[2] and b[0] <= a[2] and a[1] <= b[3] and b[1] <= a[3]
