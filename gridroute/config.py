"""Shared planning constants for the grid, the pathfinder and the generator.

The **pathfinder** (flexible neighbour radius), the **generator** (clearance
between routes, candidate pool sizes) and the **grid** (nearest-point radius)
all derive their tolerances from this single source of truth.

Change a value here and every stage stays in sync automatically.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class PlannerRules:
    """Geometric rules for lattice routes.

    Distances are in canvas units; factors are multiplied by the grid
    spacing.
    """

    clearance_factor: float = 0.8
    """Minimum gap between interior points of two routes, as a fraction
    of the smaller grid spacing."""

    flexible_neighbor_factor: float = 1.5
    """Search radius for irregular border points that have no regular
    lattice neighbour, as a multiple of the larger grid spacing."""

    proximity_pool_size: int = 10
    """How many of the points nearest to the dead zone are eligible as
    random starts once the dead-zone border is exhausted."""

    phase3_end_candidates: int = 20
    """Random end points tried per interior start."""

    nearest_point_max_distance: float = 25.0
    """Default snap radius for pointer lookups."""

    min_optimal_path_count: int = 12
    """Floor for the suggested number of routes on a small grid."""

    collinear_tolerance: float = 1e-6
    """Cross-product tolerance for point-on-segment tests."""

    coordinate_decimals: int = 9
    """Lattice coordinates are rounded to this many decimals, so points
    built as ``k * spacing`` and as ``x + spacing`` compare equal."""

    # ── Derived helpers ────────────────────────────────────────────

    def flexible_radius(self, spacing_w: float, spacing_h: float) -> float:
        """Radius of the fallback neighbour search around a border point."""
        return max(spacing_w, spacing_h) * self.flexible_neighbor_factor


# Module-level singleton, importable everywhere.
PLANNER_RULES = PlannerRules()
