"""Route statistics — counts, lengths, spatial spread and efficiency.

All functions are pure: they take the grid and/or a list of accepted
routes and return plain dicts (JSON-safe) or report strings.
"""

from __future__ import annotations

import json
from datetime import datetime, timezone

from .config import PLANNER_RULES
from .geometry import Point, point_distance
from .grid import GridManager
from .models import RandomPath


# Efficiency bands: (name, lower bound exclusive, upper bound inclusive)
EFFICIENCY_BANDS = (
    ("very_efficient", 0.8, float("inf")),
    ("efficient", 0.6, 0.8),
    ("moderate", 0.4, 0.6),
    ("inefficient", float("-inf"), 0.4),
)


def optimal_path_count(grid: GridManager) -> int:
    """Suggested route count for a grid.

    The larger of the two border sizes, never below
    ``PLANNER_RULES.min_optimal_path_count``.
    """
    return max(
        len(grid.get_canvas_border_points()),
        len(grid.get_deadzone_border_points()),
        PLANNER_RULES.min_optimal_path_count,
    )


def basic_stats(grid: GridManager, paths: list[RandomPath]) -> dict:
    """Route count and border-point usage."""
    endpoints = {p.start for p in paths} | {p.end for p in paths}
    deadzone = [bp.point for bp in grid.get_deadzone_border_points()]
    canvas = [bp.point for bp in grid.get_canvas_border_points()]
    dz_used = sum(1 for p in deadzone if p in endpoints)
    canvas_used = sum(1 for p in canvas if p in endpoints)
    return {
        "total_paths": len(paths),
        "deadzone_points_available": len(deadzone) - dz_used,
        "deadzone_points_used": dz_used,
        "canvas_points_available": len(canvas) - canvas_used,
        "canvas_points_used": canvas_used,
    }


def advanced_stats(paths: list[RandomPath]) -> dict:
    """Route lengths in points, with a histogram by length."""
    lengths = [len(p.path) for p in paths if p.path]
    if not lengths:
        return {
            "total_paths": len(paths),
            "average_path_length": 0,
            "shortest_path": 0,
            "longest_path": 0,
            "total_path_points": 0,
            "path_length_distribution": {},
        }
    distribution: dict[int, int] = {}
    for n in lengths:
        distribution[n] = distribution.get(n, 0) + 1
    return {
        "total_paths": len(paths),
        "average_path_length": round(sum(lengths) / len(lengths), 2),
        "shortest_path": min(lengths),
        "longest_path": max(lengths),
        "total_path_points": sum(lengths),
        "path_length_distribution": dict(sorted(distribution.items())),
    }


def _zone(point: Point, width: float, height: float) -> str:
    near_center = (abs(point.x - width / 2) < width / 4
                   and abs(point.y - height / 2) < height / 4)
    if near_center:
        return "center"
    left = point.x < width / 2
    top = point.y < height / 2
    if top:
        return "top_left" if left else "top_right"
    return "bottom_left" if left else "bottom_right"


def geographic_stats(grid: GridManager, paths: list[RandomPath]) -> dict:
    """Where routes start and end on the canvas."""
    zones = ("top_left", "top_right", "bottom_left", "bottom_right", "center")
    starts = {z: 0 for z in zones}
    ends = {z: 0 for z in zones}
    if not paths:
        return {
            "start_points_distribution": starts,
            "end_points_distribution": ends,
            "average_start": (0, 0),
            "average_end": (0, 0),
        }
    w, h = grid.canvas_width, grid.canvas_height
    for p in paths:
        starts[_zone(p.start, w, h)] += 1
        ends[_zone(p.end, w, h)] += 1
    n = len(paths)
    return {
        "start_points_distribution": starts,
        "end_points_distribution": ends,
        "average_start": (round(sum(p.start.x for p in paths) / n),
                          round(sum(p.start.y for p in paths) / n)),
        "average_end": (round(sum(p.end.x for p in paths) / n),
                        round(sum(p.end.y for p in paths) / n)),
    }


def path_efficiency(path: RandomPath) -> float | None:
    """Straight-line distance over travelled distance, in (0, 1].

    None for routes without a body or with coinciding endpoints.
    """
    if not path.path or len(path.path) < 2:
        return None
    direct = point_distance(path.start, path.end)
    if direct <= 0:
        return None
    return direct / route_length(path.path)


def route_length(route: list[Point]) -> float:
    """Sum of segment lengths along *route*."""
    return sum(point_distance(a, b) for a, b in zip(route, route[1:]))


def efficiency_stats(paths: list[RandomPath]) -> dict:
    """Distribution of ``path_efficiency`` over all routes."""
    values = [e for e in (path_efficiency(p) for p in paths) if e is not None]
    if not values:
        return {
            "average_efficiency": 0,
            "most_efficient_path": 0,
            "least_efficient_path": 0,
            "efficiency_distribution": {},
        }
    distribution = {
        name: sum(1 for e in values if lo < e <= hi)
        for name, lo, hi in EFFICIENCY_BANDS
    }
    return {
        "average_efficiency": round(sum(values) / len(values), 3),
        "most_efficient_path": round(max(values), 3),
        "least_efficient_path": round(min(values), 3),
        "efficiency_distribution": distribution,
    }


def space_coverage(grid: GridManager, paths: list[RandomPath]) -> float:
    """Fraction of lattice points within 1.5 spacings of any route point."""
    grid_points = grid.grid_points
    if not grid_points:
        return 0.0
    radius = min(grid.spacing_w, grid.spacing_h) * 1.5
    route_points = {p for path in paths if path.path for p in path.path}
    covered = sum(
        1 for gp in grid_points
        if any(point_distance(gp, rp) <= radius for rp in route_points)
    )
    return covered / len(grid_points)


def full_report(grid: GridManager, paths: list[RandomPath]) -> str:
    """Human-readable summary of all statistics."""
    basic = basic_stats(grid, paths)
    adv = advanced_stats(paths)
    geo = geographic_stats(grid, paths)
    eff = efficiency_stats(paths)
    dist = eff["efficiency_distribution"]
    lines = [
        "PATH STATISTICS",
        "===============",
        "",
        "Basic:",
        f"  routes created:             {basic['total_paths']}",
        f"  dead-zone points available: {basic['deadzone_points_available']}",
        f"  dead-zone points used:      {basic['deadzone_points_used']}",
        f"  canvas points available:    {basic['canvas_points_available']}",
        f"  canvas points used:         {basic['canvas_points_used']}",
        "",
        "Lengths:",
        f"  average: {adv['average_path_length']} points",
        f"  shortest: {adv['shortest_path']} points",
        f"  longest: {adv['longest_path']} points",
        f"  total route points: {adv['total_path_points']}",
        "",
        "Spread:",
        f"  average start: {geo['average_start']}",
        f"  average end:   {geo['average_end']}",
        f"  coverage:      {space_coverage(grid, paths) * 100:.1f}%",
        "",
        "Efficiency:",
        f"  average: {eff['average_efficiency']}",
        f"  best:    {eff['most_efficient_path']}",
        f"  worst:   {eff['least_efficient_path']}",
    ]
    for name, _lo, _hi in EFFICIENCY_BANDS:
        lines.append(f"  {name}: {dist.get(name, 0)}")
    return "\n".join(lines)


def stats_to_json(grid: GridManager, paths: list[RandomPath]) -> str:
    stats = {
        "basic": basic_stats(grid, paths),
        "advanced": advanced_stats(paths),
        "geographic": geographic_stats(grid, paths),
        "efficiency": efficiency_stats(paths),
        "coverage": space_coverage(grid, paths),
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
    return json.dumps(stats, indent=2)


def compare_path_sets(
    paths1: list[RandomPath],
    paths2: list[RandomPath],
    label1: str = "Set 1",
    label2: str = "Set 2",
) -> str:
    """Side-by-side route count and average length of two runs."""
    a1 = advanced_stats(paths1)
    a2 = advanced_stats(paths2)
    n1, n2 = len(paths1), len(paths2)
    pct = (n2 - n1) / max(n1, 1) * 100
    return "\n".join([
        f"{label1}: {n1} routes, average length {a1['average_path_length']}",
        f"{label2}: {n2} routes, average length {a2['average_path_length']}",
        f"difference: {n2 - n1:+d} routes ({pct:+.1f}%), "
        f"{a2['average_path_length'] - a1['average_path_length']:+.2f} points average length",
    ])
