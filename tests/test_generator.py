"""Tests for the random path generator.

Uses the standard 600 × 600 layout (see ``grid_fixture``).

Validates:
  - Every accepted route passes the conflict check against the routes
    accepted before it
  - Endpoints are never reused
  - Border-phase routes are pairwise disjoint
  - Seeded runs are reproducible and grow monotonically with the target
  - The exhaustive strategy is deterministic
  - Phase-2 start window, phase-3 isolation order, start exclusions
    and the per-start end budget
  - Time budget and zero-target edge cases
"""

from __future__ import annotations

import math
import random
import unittest

from shapely.geometry import LineString

from gridroute.conflicts import does_path_intersect_with_existing
from gridroute.generator import RandomPathGenerator, generate_random_paths
from gridroute.geometry import Point
from gridroute.models import GeneratorConfig, PathPoint, RandomPath
from gridroute.pathfinder import PathfindingEngine
from tests.grid_fixture import make_open_grid, make_standard_grid


def _endpoints(paths):
    return [(p.start, p.end) for p in paths]


class TestGeneratedRoutes(unittest.TestCase):
    """Invariants of a full seeded run on the standard grid."""

    @classmethod
    def setUpClass(cls):
        cls.grid = make_standard_grid()
        cls.gen = RandomPathGenerator(cls.grid, config=GeneratorConfig(seed=42))
        cls.paths = cls.gen.generate_random_paths(48)

    def test_produces_routes(self):
        self.assertGreater(len(self.paths), 0)
        self.assertLessEqual(len(self.paths), 48)

    def test_min_distance(self):
        self.assertAlmostEqual(self.gen.min_distance, 40.0)

    def test_route_shape(self):
        for p in self.paths:
            self.assertIsNotNone(p.path)
            self.assertGreaterEqual(len(p.path), 2)
            self.assertEqual(p.path[0], p.start)
            self.assertEqual(p.path[-1], p.end)
            self.assertNotEqual(p.start, p.end)

    def test_first_route_starts_on_dead_zone_border(self):
        border = {bp.point for bp in self.grid.get_deadzone_border_points()}
        canvas = {bp.point for bp in self.grid.get_canvas_border_points()}
        self.assertIn(self.paths[0].start, border)
        self.assertIn(self.paths[0].end, canvas)

    def test_routes_stay_out_of_dead_zone(self):
        for p in self.paths:
            for q in p.path[1:]:
                self.assertFalse(self.grid.is_point_in_dead_zone(q.x, q.y), q)

    def test_endpoints_unique(self):
        ends = [p.start for p in self.paths] + [p.end for p in self.paths]
        self.assertEqual(len(ends), len(set(ends)))

    def test_no_conflicts_with_earlier_routes(self):
        min_d = self.gen.min_distance
        for j, p in enumerate(self.paths):
            with self.subTest(route=j):
                self.assertFalse(does_path_intersect_with_existing(
                    p.path, self.paths[:j], min_d, allow_start_point_intersection=True))


class TestBorderPhases(unittest.TestCase):

    def setUp(self):
        self.grid = make_standard_grid()

    def test_border_routes_are_disjoint(self):
        cfg = GeneratorConfig(seed=7, phase3=False)
        paths = RandomPathGenerator(self.grid, config=cfg).generate_random_paths(48)
        self.assertGreater(len(paths), 0)
        lines = [LineString(p.path) for p in paths]
        for i in range(len(lines)):
            for j in range(i + 1, len(lines)):
                self.assertFalse(lines[i].intersects(lines[j]), f"routes {i} and {j}")

    def test_interior_fill_only_adds(self):
        without = RandomPathGenerator(
            self.grid, config=GeneratorConfig(seed=3, phase3=False)).generate_random_paths(48)
        with_fill = RandomPathGenerator(
            self.grid, config=GeneratorConfig(seed=3)).generate_random_paths(48)
        self.assertGreaterEqual(len(with_fill), len(without))
        self.assertEqual(with_fill[:len(without)], without)


class TestDeterminism(unittest.TestCase):

    def setUp(self):
        self.grid = make_standard_grid()

    def test_same_seed_same_routes(self):
        a = generate_random_paths(self.grid, 20, config=GeneratorConfig(seed=11))
        b = generate_random_paths(self.grid, 20, config=GeneratorConfig(seed=11))
        self.assertEqual(a, b)

    def test_injected_rng_matches_seed(self):
        a = generate_random_paths(self.grid, 10, config=GeneratorConfig(seed=5))
        b = generate_random_paths(self.grid, 10, rng=random.Random(5))
        self.assertEqual(_endpoints(a), _endpoints(b))

    def test_global_random_untouched(self):
        random.seed(123)
        state = random.getstate()
        generate_random_paths(self.grid, 5, config=GeneratorConfig(seed=1))
        self.assertEqual(random.getstate(), state)

    def test_monotone_in_target(self):
        counts = []
        previous = []
        for n in (3, 8, 16):
            paths = generate_random_paths(self.grid, n, config=GeneratorConfig(seed=9))
            self.assertLessEqual(len(paths), n)
            self.assertEqual(paths[:len(previous)], previous)
            counts.append(len(paths))
            previous = paths
        self.assertEqual(counts, sorted(counts))


class TestExhaustiveStrategy(unittest.TestCase):

    def setUp(self):
        self.grid = make_standard_grid()
        self.cfg = GeneratorConfig(strategy="exhaustive", phase3=False)

    def test_deterministic_without_seed(self):
        a = generate_random_paths(self.grid, 12, config=self.cfg)
        b = generate_random_paths(self.grid, 12, config=self.cfg)
        self.assertGreater(len(a), 0)
        self.assertEqual(a, b)

    def test_first_route_uses_closest_end(self):
        paths = generate_random_paths(self.grid, 1, config=self.cfg)
        self.assertEqual(len(paths), 1)
        self.assertEqual(paths[0].start, Point(200, 225))
        self.assertEqual(paths[0].end, Point(0, 200))

    def test_unknown_strategy(self):
        with self.assertRaises(ValueError):
            GeneratorConfig(strategy="greedy")


class _CountingEngine(PathfindingEngine):
    """Counts A* searches."""

    def __init__(self, grid):
        super().__init__(grid)
        self.calls = 0

    def a_star(self, start, goal):
        self.calls += 1
        return super().a_star(start, goal)


def _serpentine(grid):
    """One route through every lattice point, row by row."""
    rows: dict[float, list[Point]] = {}
    for p in grid.grid_points:
        rows.setdefault(p.y, []).append(p)
    route = []
    for i, y in enumerate(sorted(rows)):
        row = sorted(rows[y])
        route.extend(row if i % 2 == 0 else reversed(row))
    return RandomPath(route[0], route[-1], route)


class TestStartSelection(unittest.TestCase):
    """How starts and ends are chosen in each phase."""

    def setUp(self):
        self.grid = make_standard_grid()

    def test_proximity_start_window(self):
        pool = [PathPoint(x * 10, 0) for x in range(30)]
        gen = RandomPathGenerator(self.grid, config=GeneratorConfig(seed=0))
        window = gen.config.proximity_pool_size
        picked = {pool.index(gen._pick_start(pool, window)) for _ in range(500)}
        self.assertTrue(all(i < window for i in picked), picked)
        self.assertEqual(len(picked), window)

    def test_window_larger_than_pool(self):
        pool = [PathPoint(0, 0), PathPoint(10, 0)]
        gen = RandomPathGenerator(self.grid, config=GeneratorConfig(seed=0))
        for _ in range(50):
            self.assertIn(gen._pick_start(pool, 10), pool)

    def test_exhaustive_takes_first_start(self):
        pool = [PathPoint(0, 0), PathPoint(10, 0), PathPoint(20, 0)]
        gen = RandomPathGenerator(self.grid, config=GeneratorConfig(strategy="exhaustive"))
        self.assertIs(gen._pick_start(pool, 10), pool[0])

    def test_isolation_order(self):
        paths = [RandomPath(Point(0, 0), Point(100, 0), [Point(0, 0), Point(100, 0)])]
        points = [PathPoint(50, 0), PathPoint(0, 300), PathPoint(300, 0)]
        ordered = RandomPathGenerator._sort_by_isolation(points, paths)
        self.assertEqual([p.point for p in ordered],
                         [Point(0, 300), Point(300, 0), Point(50, 0)])

    def test_isolation_order_without_paths(self):
        points = [PathPoint(50, 0), PathPoint(0, 300)]
        self.assertEqual(RandomPathGenerator._sort_by_isolation(points, []), points)

    def test_interior_starts_before_any_route(self):
        gen = RandomPathGenerator(self.grid, config=GeneratorConfig(seed=1))
        starts = gen._interior_starts([], gen._make_pools())
        # 154 points outside the dead zone, minus 48 on the canvas border
        self.assertEqual(len(starts), 106)

    def test_interior_starts_exclude_borders_and_endpoints(self):
        gen = RandomPathGenerator(self.grid, config=GeneratorConfig(seed=1))
        pools = gen._make_pools()
        paths = generate_random_paths(self.grid, 6, config=GeneratorConfig(seed=1, phase3=False))
        self.assertGreater(len(paths), 0)
        endpoints = {p.start for p in paths} | {p.end for p in paths}

        starts = {s.point for s in gen._interior_starts(paths, pools)}
        self.assertTrue(starts)
        self.assertFalse(starts & pools.deadzone_keys)
        self.assertFalse(starts & pools.canvas_keys)
        self.assertFalse(starts & endpoints)
        for s in starts:
            self.assertFalse(self.grid.is_point_in_dead_zone(s.x, s.y), s)

    def test_interior_end_candidates_bounded(self):
        grid = make_open_grid()
        engine = _CountingEngine(grid)
        gen = RandomPathGenerator(grid, engine=engine, config=GeneratorConfig(seed=0))
        blocker = _serpentine(grid)
        self.assertEqual(len(blocker.path), 49)

        attempt = gen._try_interior_path(PathPoint(150, 150), gen._make_pools(), [blocker],
                                         gen.config.phase3_end_candidates)
        self.assertIsNone(attempt)
        self.assertEqual(engine.calls, 20)

    def test_exhaustive_tries_every_interior_end(self):
        grid = make_open_grid()
        engine = _CountingEngine(grid)
        gen = RandomPathGenerator(grid, engine=engine,
                                  config=GeneratorConfig(strategy="exhaustive"))
        attempt = gen._try_interior_path(PathPoint(150, 150), gen._make_pools(),
                                         [_serpentine(grid)], math.inf)
        self.assertIsNone(attempt)
        self.assertEqual(engine.calls, 48)


class TestEdgeCases(unittest.TestCase):

    def setUp(self):
        self.grid = make_standard_grid()

    def test_zero_target(self):
        self.assertEqual(generate_random_paths(self.grid, 0), [])

    def test_negative_target(self):
        with self.assertRaises(ValueError):
            generate_random_paths(self.grid, -1)

    def test_zero_time_budget(self):
        cfg = GeneratorConfig(seed=1, time_budget_s=0)
        self.assertEqual(generate_random_paths(self.grid, 10, config=cfg), [])

    def test_target_capped_by_canvas_border(self):
        cfg = GeneratorConfig(seed=2, phase3=False)
        paths = generate_random_paths(self.grid, 500, config=cfg)
        self.assertLessEqual(len(paths), 48)

    def test_default_target(self):
        paths = generate_random_paths(self.grid, config=GeneratorConfig(seed=4, phase3=False))
        self.assertLessEqual(len(paths), len(self.grid.get_canvas_border_points()))

    def test_default_target_with_interior_fill(self):
        """Border routes pass the strict check, interior routes the relaxed one."""
        border_only = generate_random_paths(
            self.grid, config=GeneratorConfig(seed=4, phase3=False))
        gen = RandomPathGenerator(self.grid, config=GeneratorConfig(seed=4))
        paths = gen.generate_random_paths()
        self.assertLessEqual(len(paths), len(self.grid.get_canvas_border_points()))
        self.assertEqual(paths[:len(border_only)], border_only)
        for j, p in enumerate(paths):
            relaxed = j >= len(border_only)
            with self.subTest(route=j, relaxed=relaxed):
                self.assertFalse(does_path_intersect_with_existing(
                    p.path, paths[:j], gen.min_distance,
                    allow_start_point_intersection=relaxed))

    def test_open_grid_uses_interior_fill(self):
        """Without a dead zone every route comes from the interior phase."""
        grid = make_open_grid()
        gen = RandomPathGenerator(grid, config=GeneratorConfig(seed=8))
        paths = gen.generate_random_paths(5)
        self.assertGreater(len(paths), 0)
        canvas = {bp.point for bp in grid.get_canvas_border_points()}
        for j, p in enumerate(paths):
            self.assertNotIn(p.start, canvas)
            self.assertFalse(does_path_intersect_with_existing(
                p.path, paths[:j], gen.min_distance, allow_start_point_intersection=True))


if __name__ == "__main__":
    unittest.main()
