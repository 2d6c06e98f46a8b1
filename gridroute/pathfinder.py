"""A* pathfinder over the point lattice.

Supports:
  - Eight-directional moves between lattice points (axis-aligned and diagonal)
  - A flexible fallback radius for irregular dead-zone border points
  - Euclidean edge costs with a Manhattan heuristic
  - First-inserted-wins tie-breaking between equal f-scores
"""

from __future__ import annotations

import heapq
import math
from dataclasses import dataclass

from .config import PLANNER_RULES
from .geometry import Point, manhattan_distance, point_distance, snap_coordinate
from .grid import GridManager
from .models import DeadZone


@dataclass(frozen=True)
class Topology:
    """Frozen snapshot of everything the neighbour policy depends on."""

    valid_points: frozenset[Point]
    spacing_w: float
    spacing_h: float
    dead_zone: DeadZone | None = None
    flexible_radius: float = 0.0

    @classmethod
    def from_grid(cls, grid: GridManager) -> 'Topology':
        return cls(
            valid_points=frozenset(grid.valid_points()),
            spacing_w=grid.spacing_w,
            spacing_h=grid.spacing_h,
            dead_zone=grid.dead_zone,
            flexible_radius=PLANNER_RULES.flexible_radius(grid.spacing_w, grid.spacing_h),
        )

    def is_blocked(self, p: Point) -> bool:
        return self.dead_zone is not None and self.dead_zone.contains(p.x, p.y)


def neighbors(point: Point, topo: Topology) -> list[Point]:
    """Points reachable in one step from *point*.

    The eight lattice offsets that are valid points outside the dead
    zone.  When none exist (a border point off the regular lattice),
    every valid point within ``topo.flexible_radius`` instead.
    """
    sw, sh = topo.spacing_w, topo.spacing_h
    x, y = point
    offsets = (
        (0, -sh), (sw, 0), (0, sh), (-sw, 0),
        (sw, -sh), (sw, sh), (-sw, sh), (-sw, -sh),
    )
    classic = []
    for dx, dy in offsets:
        n = Point(snap_coordinate(x + dx), snap_coordinate(y + dy))
        if n in topo.valid_points and not topo.is_blocked(n):
            classic.append(n)
    if classic:
        return classic

    flexible = []
    for candidate in topo.valid_points:
        if candidate == point or topo.is_blocked(candidate):
            continue
        d = point_distance(candidate, point)
        if 0 < d <= topo.flexible_radius:
            flexible.append(candidate)
    # frozenset iteration order is arbitrary; keep expansion deterministic
    flexible.sort()
    return flexible


class PathfindingEngine:
    """A* routing between two points of a grid.

    The topology is captured lazily and rebuilt when the grid is
    re-initialised.
    """

    def __init__(self, grid: GridManager) -> None:
        self.grid = grid
        self._topo: Topology | None = None
        self._topo_revision = -1

    @property
    def topology(self) -> Topology:
        if self._topo is None or self._topo_revision != self.grid.revision:
            self._topo = Topology.from_grid(self.grid)
            self._topo_revision = self.grid.revision
        return self._topo

    def a_star(self, start: tuple[float, float], goal: tuple[float, float]) -> list[Point] | None:
        """A* from *start* to *goal*.

        Returns the list of points from start to goal (both included),
        or None if the goal cannot be reached.  The start itself is
        never checked against the dead zone, so routes may leave from a
        dead-zone border point.
        """
        start = Point(*start)
        goal = Point(*goal)
        if start == goal:
            return [start]

        topo = self.topology
        counter = 0
        heap: list[tuple[float, int, Point]] = [(manhattan_distance(start, goal), counter, start)]
        g_scores: dict[Point, float] = {start: 0.0}
        parents: dict[Point, Point] = {}
        closed: set[Point] = set()

        while heap:
            _f, _cnt, current = heapq.heappop(heap)
            if current in closed:
                continue
            if current == goal:
                return _reconstruct(parents, current)
            closed.add(current)

            cur_g = g_scores[current]
            for n in neighbors(current, topo):
                if n in closed:
                    continue
                tentative_g = cur_g + point_distance(current, n)
                if tentative_g < g_scores.get(n, math.inf):
                    g_scores[n] = tentative_g
                    parents[n] = current
                    counter += 1
                    heapq.heappush(heap, (tentative_g + manhattan_distance(n, goal), counter, n))

        return None

    def path_exists(self, start: tuple[float, float], end: tuple[float, float]) -> bool:
        """True if a route of at least two points joins *start* and *end*."""
        path = self.a_star(start, end)
        return path is not None and len(path) >= 2

    @staticmethod
    def heuristic_distance(p1: tuple[float, float], p2: tuple[float, float]) -> float:
        return manhattan_distance(p1, p2)


def _reconstruct(parents: dict[Point, Point], current: Point) -> list[Point]:
    path = [current]
    while current in parents:
        current = parents[current]
        path.append(current)
    path.reverse()
    return path
