"""Point lattice over a rectangular canvas with an optional dead zone.

The lattice covers the whole canvas at the snapped grid spacing.  Points
inside the dead zone (closed rectangle) are dropped, then grid-aligned
points on the dead-zone edges are added back so routes can still hug the
excluded region.
"""

from __future__ import annotations

import logging
import math

from shapely.geometry import Point as ShapelyPoint, box as shapely_box

from .config import PLANNER_RULES
from .geometry import Point, find_nearest_point, snap_coordinate, verify_grid_size
from .models import DeadZone, GridConfig, GridError, PathPoint


log = logging.getLogger(__name__)


class GridManager:
    """Builds the lattice and answers border / proximity queries.

    ``init_grid`` must be called before any query; until then the grid
    is empty and has no dead zone.
    """

    def __init__(self, canvas_width: float, canvas_height: float) -> None:
        if canvas_width <= 0:
            raise GridError("canvas_width", f"must be positive, got {canvas_width}")
        if canvas_height <= 0:
            raise GridError("canvas_height", f"must be positive, got {canvas_height}")
        self.canvas_width = canvas_width
        self.canvas_height = canvas_height
        self.spacing_w: float = 0
        self.spacing_h: float = 0
        self.dead_zone: DeadZone | None = None
        self._points: dict[Point, None] = {}
        self.revision = 0          # bumped on every init_grid

    # ── Construction ───────────────────────────────────────────────

    def init_grid(
        self,
        spacing_w: float,
        spacing_h: float,
        dead_zone_w: float | None = None,
        dead_zone_h: float | None = None,
        center: tuple[float, float] | None = None,
    ) -> GridConfig:
        """Snap the spacing, build the lattice and return its config."""
        if spacing_w <= 0:
            raise GridError("spacing_w", f"must be positive, got {spacing_w}")
        if spacing_h <= 0:
            raise GridError("spacing_h", f"must be positive, got {spacing_h}")

        self.spacing_w = verify_grid_size(spacing_w, self.canvas_width)
        self.spacing_h = verify_grid_size(spacing_h, self.canvas_height)
        self.dead_zone = self._build_dead_zone(dead_zone_w, dead_zone_h, center)

        points: dict[Point, None] = {}

        def add_point(x: float, y: float) -> None:
            if 0 <= x <= self.canvas_width and 0 <= y <= self.canvas_height:
                points[Point(x, y)] = None

        cols = math.floor(self.canvas_width / self.spacing_w) + 1
        rows = math.floor(self.canvas_height / self.spacing_h) + 1
        for col in range(cols):
            for row in range(rows):
                x = snap_coordinate(col * self.spacing_w)
                y = snap_coordinate(row * self.spacing_h)
                if not self.is_point_in_dead_zone(x, y):
                    add_point(x, y)

        if self.dead_zone is not None:
            for p in self._dead_zone_edge_points():
                add_point(*p)

        self._points = points
        self.revision += 1
        log.info("Grid: %gx%g canvas, spacing %gx%g (requested %gx%g), %d points, dead zone=%s",
                 self.canvas_width, self.canvas_height, self.spacing_w, self.spacing_h,
                 spacing_w, spacing_h, len(points),
                 self.dead_zone.bounds if self.dead_zone else None)

        return GridConfig(
            spacing_w=self.spacing_w,
            spacing_h=self.spacing_h,
            points=list(points),
            dead_zone=self.dead_zone,
        )

    def _build_dead_zone(
        self,
        width: float | None,
        height: float | None,
        center: tuple[float, float] | None,
    ) -> DeadZone | None:
        if width is None or height is None or center is None:
            return None
        if width <= 0 or height <= 0:
            raise GridError("dead_zone", f"extents must be positive, got {width}x{height}")

        dz = DeadZone(center=Point(*center), width=width, height=height)
        canvas = shapely_box(0, 0, self.canvas_width, self.canvas_height)
        if not canvas.covers(dz.polygon):
            raise GridError("dead_zone", f"bounds {dz.bounds} extend beyond the "
                                         f"{self.canvas_width}x{self.canvas_height} canvas")
        if dz.polygon.covers(canvas):
            raise GridError("dead_zone", "covers the entire canvas")
        return dz

    def _dead_zone_edge_points(self) -> list[Point]:
        """Grid-aligned points on the four dead-zone edges, unclipped."""
        left, right, top, bottom = self.dead_zone.bounds
        pts: list[Point] = []
        k = math.ceil(left / self.spacing_w)
        while k * self.spacing_w <= right:
            x = snap_coordinate(k * self.spacing_w)
            pts.append(Point(x, top))
            pts.append(Point(x, bottom))
            k += 1
        k = math.ceil(top / self.spacing_h)
        while k * self.spacing_h <= bottom:
            y = snap_coordinate(k * self.spacing_h)
            pts.append(Point(left, y))
            pts.append(Point(right, y))
            k += 1
        return pts

    # ── Dead zone queries ──────────────────────────────────────────

    def is_point_in_dead_zone(self, x: float, y: float) -> bool:
        return self.dead_zone is not None and self.dead_zone.contains(x, y)

    def get_distance_to_deadzone(self, point: tuple[float, float]) -> float:
        """Euclidean distance from *point* to the dead-zone rectangle.

        Infinite when there is no dead zone or the point is inside it,
        so inside points sort last in proximity orderings.
        """
        if self.dead_zone is None or self.is_point_in_dead_zone(*point):
            return math.inf
        return self.dead_zone.polygon.distance(ShapelyPoint(point))

    def get_points_by_proximity_to_deadzone(self) -> list[PathPoint]:
        """Lattice points outside the dead zone, closest first."""
        if self.dead_zone is None:
            return []
        outside = [p for p in self._points if not self.is_point_in_dead_zone(*p)]
        polygon = self.dead_zone.polygon
        outside.sort(key=lambda p: polygon.distance(ShapelyPoint(p)))
        return [PathPoint(p.x, p.y) for p in outside]

    # ── Border point sets ──────────────────────────────────────────

    def get_deadzone_border_points(self) -> list[PathPoint]:
        """Grid-aligned points on the dead-zone edges, clipped to the canvas."""
        if self.dead_zone is None:
            return []
        seen: dict[Point, PathPoint] = {}
        for p in self._dead_zone_edge_points():
            if 0 <= p.x <= self.canvas_width and 0 <= p.y <= self.canvas_height:
                seen.setdefault(p, PathPoint(p.x, p.y))
        return list(seen.values())

    def get_canvas_border_points(self) -> list[PathPoint]:
        """Grid-aligned points on the four canvas edges, outside the dead zone.

        Order: left edge, right edge, top edge, bottom edge.
        """
        w, h = self.canvas_width, self.canvas_height
        ys = _steps(h, self.spacing_h)
        xs = _steps(w, self.spacing_w)
        candidates = (
            [(0, y) for y in ys]
            + [(w, y) for y in ys]
            + [(x, 0) for x in xs]
            + [(x, h) for x in xs]
        )
        seen: dict[Point, PathPoint] = {}
        for x, y in candidates:
            if not self.is_point_in_dead_zone(x, y):
                seen.setdefault(Point(x, y), PathPoint(x, y))
        return list(seen.values())

    # ── Lookup ─────────────────────────────────────────────────────

    def valid_points(self) -> list[Point]:
        """Lattice points plus dead-zone border points not already in it."""
        pts = dict(self._points)
        for bp in self.get_deadzone_border_points():
            pts.setdefault(bp.point, None)
        return list(pts)

    def find_nearest_grid_point(
        self,
        x: float,
        y: float,
        max_distance: float = PLANNER_RULES.nearest_point_max_distance,
    ) -> Point | None:
        """Closest valid point to (x, y) within *max_distance*, else None."""
        return find_nearest_point((x, y), self.valid_points(), max_distance)

    # ── Accessors ──────────────────────────────────────────────────

    @property
    def grid_points(self) -> list[Point]:
        return list(self._points)

    def has_point(self, point: tuple[float, float]) -> bool:
        return Point(*point) in self._points

    def config(self) -> GridConfig:
        return GridConfig(self.spacing_w, self.spacing_h, list(self._points), self.dead_zone)


def _steps(limit: float, step: float) -> list[float]:
    """0, step, 2*step, … up to and including *limit*."""
    if step <= 0:
        return []
    out = []
    k = 0
    while k * step <= limit:
        out.append(snap_coordinate(k * step))
        k += 1
    return out
