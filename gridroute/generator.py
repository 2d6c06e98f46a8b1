"""Random path generator — fills the canvas with non-conflicting routes.

Algorithm overview:
  1. Collect working pools: dead-zone border points, canvas border points,
     and lattice points ordered by proximity to the dead zone.
  2. Phase 1: start from a dead-zone border point, end on a canvas
     border point.
  3. Phase 2: once the dead-zone border is used up, start from one of the
     points nearest to the dead zone instead.
  4. Phase 3: when border-to-border routes are exhausted, thread routes
     from the most isolated interior points to any unused point, with the
     relaxed conflict rule.

Every accepted route is checked against all previously accepted routes
(see ``conflicts``).  A route that cannot be placed is a normal outcome:
the generator simply returns fewer routes than requested.
"""

from __future__ import annotations

import logging
import math
import random
import time
from dataclasses import dataclass, field

from .conflicts import does_path_intersect_with_existing
from .geometry import Point, point_distance
from .grid import GridManager
from .models import (
    GeneratorConfig, PathPoint, RandomPath,
    STRATEGY_EXHAUSTIVE,
)
from .pathfinder import PathfindingEngine


log = logging.getLogger(__name__)


# ── Working state ──────────────────────────────────────────────────


@dataclass
class _Pools:
    """Per-call point pools, handed from phase to phase.

    Only the generator call that created a ``_Pools`` mutates it; the
    ``used`` set mirrors the ``PathPoint.used`` flags by coordinate so a
    point shared between pools is consumed everywhere at once.
    """

    deadzone: list[PathPoint]
    canvas: list[PathPoint]
    proximity: list[PathPoint]
    deadzone_keys: frozenset[Point]
    canvas_keys: frozenset[Point]
    used: set[Point] = field(default_factory=set)

    def mark_used(self, *points: PathPoint) -> None:
        for p in points:
            p.used = True
            self.used.add(p.point)
        for pool in (self.deadzone, self.canvas, self.proximity):
            for q in pool:
                if q.point in self.used:
                    q.used = True
        self.deadzone[:] = [q for q in self.deadzone if not q.used]
        self.canvas[:] = [q for q in self.canvas if not q.used]
        self.proximity[:] = [q for q in self.proximity if not q.used]

    @staticmethod
    def discard(pool: list[PathPoint], point: PathPoint) -> None:
        for i, q in enumerate(pool):
            if q.point == point.point:
                del pool[i]
                return


@dataclass
class _Attempt:
    path: RandomPath
    end: PathPoint


# ── Generator ──────────────────────────────────────────────────────


class RandomPathGenerator:
    """Greedy generator of mutually non-conflicting routes on a grid.

    Parameters
    ----------
    grid : GridManager
        An initialised grid.
    engine : PathfindingEngine | None
        Shared A* engine.  A new one is built for *grid* when omitted.
    config : GeneratorConfig | None
        Tuneable parameters.  Uses defaults when *None*.
    rng : random.Random | None
        Random source.  Seeded from ``config.seed`` when omitted; the
        global ``random`` state is never touched.
    """

    def __init__(
        self,
        grid: GridManager,
        engine: PathfindingEngine | None = None,
        config: GeneratorConfig | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self.grid = grid
        self.engine = engine if engine is not None else PathfindingEngine(grid)
        self.config = config if config is not None else GeneratorConfig()
        self.rng = rng if rng is not None else random.Random(self.config.seed)
        self._deadline: float | None = None

    @property
    def min_distance(self) -> float:
        return min(self.grid.spacing_w, self.grid.spacing_h) * self.config.clearance_factor

    # ── Main entry point ───────────────────────────────────────────

    def generate_random_paths(self, target_count: int | None = None) -> list[RandomPath]:
        """Generate up to *target_count* conflict-free routes.

        The target is capped by the number of canvas border points and
        defaults to it.  Fewer routes are returned when no eligible
        start/end combination remains.
        """
        pools = self._make_pools()

        if target_count is not None and target_count < 0:
            raise ValueError(f"target_count must be non-negative, got {target_count}")
        max_paths = len(pools.canvas)
        target = max_paths if target_count is None else min(target_count, max_paths)

        cfg = self.config
        self._deadline = (time.monotonic() + cfg.time_budget_s
                          if cfg.time_budget_s is not None else None)

        log.info("Generator: starting, target=%d, strategy=%s, seed=%s",
                 target, cfg.strategy, cfg.seed)
        log.info("Generator pools: deadzone border=%d, canvas border=%d, proximity=%d",
                 len(pools.deadzone), len(pools.canvas), len(pools.proximity))

        paths: list[RandomPath] = []
        self._run_border_phases(paths, pools, target)
        n_border = len(paths)
        if cfg.phase3:
            self._run_interior_phase(paths, pools, target)

        log.info("Generator: finished with %d/%d routes (%d border, %d interior)",
                 len(paths), target, n_border, len(paths) - n_border)
        return paths

    def _make_pools(self) -> _Pools:
        """Fresh working pools for one generator call."""
        deadzone_border = self.grid.get_deadzone_border_points()
        canvas_border = self.grid.get_canvas_border_points()
        return _Pools(
            deadzone=list(deadzone_border),
            canvas=list(canvas_border),
            proximity=self.grid.get_points_by_proximity_to_deadzone(),
            deadzone_keys=frozenset(p.point for p in deadzone_border),
            canvas_keys=frozenset(p.point for p in canvas_border),
        )

    # ── Phases 1 and 2: border to border ───────────────────────────

    def _run_border_phases(self, paths: list[RandomPath], pools: _Pools, target: int) -> None:
        while len(paths) < target and pools.canvas:
            if self._out_of_time():
                log.info("Generator: time budget exhausted in border phases")
                return

            if pools.deadzone:
                start_pool, tag = pools.deadzone, "P1"
                start = self._pick_start(pools.deadzone, len(pools.deadzone))
            elif pools.proximity:
                start_pool, tag = pools.proximity, "P2"
                start = self._pick_start(pools.proximity, self.config.proximity_pool_size)
            else:
                log.debug("Generator: border starts exhausted, moving to interior fill")
                return

            attempt = self._try_create_path(start, pools.canvas, paths)
            if attempt is None:
                log.debug("  [%s] start (%g, %g) dropped, no conflict-free end",
                          tag, start.x, start.y)
                pools.discard(start_pool, start)
                continue

            paths.append(attempt.path)
            pools.mark_used(start, attempt.end)
            log.debug("  [%s] route %d: (%g, %g) -> (%g, %g), %d points",
                      tag, len(paths), start.x, start.y, attempt.end.x, attempt.end.y,
                      len(attempt.path.path))

    def _pick_start(self, pool: list[PathPoint], window: int) -> PathPoint:
        """Uniform pick among the first *window* entries (first one when exhaustive)."""
        if self.config.strategy == STRATEGY_EXHAUSTIVE:
            return pool[0]
        return pool[self.rng.randrange(min(window, len(pool)))]

    def _try_create_path(
        self,
        start: PathPoint,
        candidates: list[PathPoint],
        paths: list[RandomPath],
    ) -> _Attempt | None:
        """First conflict-free route from *start* to one of *candidates*."""
        for end in self._order_candidates(start.point, candidates):
            if end.point == start.point:
                continue
            route = self.engine.a_star(start.point, end.point)
            if route is None or len(route) < 2:
                continue
            if does_path_intersect_with_existing(route, paths, self.min_distance):
                continue
            return _Attempt(RandomPath(start.point, end.point, route), end)
        return None

    def _order_candidates(self, origin: Point, candidates: list, limit: float = math.inf) -> list:
        """Random sample without replacement, or nearest-first when exhaustive."""
        if self.config.strategy == STRATEGY_EXHAUSTIVE:
            ordered = sorted(candidates, key=lambda c: point_distance(origin, (c.x, c.y)))
            return ordered if limit == math.inf else ordered[:int(limit)]
        k = len(candidates) if limit == math.inf else min(int(limit), len(candidates))
        return self.rng.sample(candidates, k)

    # ── Phase 3: interior fill ─────────────────────────────────────

    def _run_interior_phase(self, paths: list[RandomPath], pools: _Pools, target: int) -> None:
        if len(paths) >= target:
            return

        starts = self._sort_by_isolation(self._interior_starts(paths, pools), paths)
        log.info("Generator: interior fill, %d start candidates", len(starts))

        limit = (math.inf if self.config.strategy == STRATEGY_EXHAUSTIVE
                 else self.config.phase3_end_candidates)

        for start in starts:
            if len(paths) >= target:
                break
            if self._out_of_time():
                log.info("Generator: time budget exhausted in interior fill")
                break
            if start.point in pools.used:
                continue

            attempt = self._try_interior_path(start, pools, paths, limit)
            if attempt is None:
                log.debug("  [P3] start (%g, %g) has no conflict-free end", start.x, start.y)
                continue

            paths.append(attempt.path)
            pools.mark_used(start, attempt.end)
            log.debug("  [P3] route %d: (%g, %g) -> (%g, %g), %d points",
                      len(paths), start.x, start.y, attempt.end.x, attempt.end.y,
                      len(attempt.path.path))

    def _interior_starts(self, paths: list[RandomPath], pools: _Pools) -> list[PathPoint]:
        """Lattice points off both borders, outside the dead zone and unused."""
        endpoints = {p.start for p in paths} | {p.end for p in paths} | pools.used
        return [
            PathPoint(p.x, p.y)
            for p in self.grid.grid_points
            if not self.grid.is_point_in_dead_zone(p.x, p.y)
            and p not in pools.canvas_keys
            and p not in pools.deadzone_keys
            and p not in endpoints
        ]

    @staticmethod
    def _sort_by_isolation(points: list[PathPoint], paths: list[RandomPath]) -> list[PathPoint]:
        """Most isolated first: largest distance to any accepted endpoint."""
        endpoints = [p.start for p in paths] + [p.end for p in paths]
        if not endpoints:
            return list(points)

        def isolation(pp: PathPoint) -> float:
            return min(point_distance(pp.point, e) for e in endpoints)

        return sorted(points, key=isolation, reverse=True)

    def _try_interior_path(
        self,
        start: PathPoint,
        pools: _Pools,
        paths: list[RandomPath],
        limit: float,
    ) -> _Attempt | None:
        ends = [
            PathPoint(p.x, p.y)
            for p in self.grid.grid_points
            if p != start.point
            and p not in pools.used
            and not self.grid.is_point_in_dead_zone(p.x, p.y)
        ]
        for end in self._order_candidates(start.point, ends, limit):
            route = self.engine.a_star(start.point, end.point)
            if route is None or len(route) < 2:
                continue
            if does_path_intersect_with_existing(route, paths, self.min_distance,
                                                 allow_start_point_intersection=True):
                continue
            return _Attempt(RandomPath(start.point, end.point, route), end)
        return None

    # ── Budget ─────────────────────────────────────────────────────

    def _out_of_time(self) -> bool:
        return self._deadline is not None and time.monotonic() >= self._deadline


def generate_random_paths(
    grid: GridManager,
    target_count: int | None = None,
    *,
    config: GeneratorConfig | None = None,
    rng: random.Random | None = None,
) -> list[RandomPath]:
    """Convenience wrapper: one generator call on *grid*."""
    return RandomPathGenerator(grid, config=config, rng=rng).generate_random_paths(target_count)
