"""Planner dataclasses, generator configuration and construction errors."""

from __future__ import annotations

from dataclasses import dataclass
from functools import cached_property

from shapely.geometry import box as shapely_box

from .config import PLANNER_RULES
from .geometry import Point


# ── Grid dataclasses ───────────────────────────────────────────────


@dataclass(frozen=True)
class DeadZone:
    """Axis-aligned excluded rectangle around *center*.

    A point is inside when it lies in the closed rectangle, so the
    border points synthesized by the grid count as inside.
    """

    center: Point
    width: float
    height: float

    @cached_property
    def bounds(self) -> tuple[float, float, float, float]:
        """(left, right, top, bottom) in canvas coordinates."""
        hw = self.width / 2
        hh = self.height / 2
        return (
            self.center.x - hw,
            self.center.x + hw,
            self.center.y - hh,
            self.center.y + hh,
        )

    @cached_property
    def polygon(self):
        """Shapely box of the dead zone."""
        left, right, top, bottom = self.bounds
        return shapely_box(left, top, right, bottom)

    def contains(self, x: float, y: float) -> bool:
        left, right, top, bottom = self.bounds
        return left <= x <= right and top <= y <= bottom


@dataclass
class PathPoint:
    """A pool point that becomes ``used`` once it ends an accepted route."""

    x: float
    y: float
    used: bool = False

    @property
    def point(self) -> Point:
        return Point(self.x, self.y)


@dataclass
class RandomPath:
    """An accepted route from *start* to *end*."""

    start: Point
    end: Point
    path: list[Point] | None = None

    @property
    def interior(self) -> list[Point]:
        """Route points without the two endpoints."""
        if not self.path:
            return []
        return self.path[1:-1]


@dataclass
class GridConfig:
    """Output of ``GridManager.init_grid``."""

    spacing_w: float
    spacing_h: float
    points: list[Point]
    dead_zone: DeadZone | None = None


class GridError(ValueError):
    """Raised when a grid cannot be built from the given dimensions."""

    def __init__(self, field_name: str, reason: str) -> None:
        self.field = field_name
        self.reason = reason
        super().__init__(f"Invalid {field_name}: {reason}")


# ── Generator configuration ───────────────────────────────────────
#
# Geometric rules come from the shared planner config
# (gridroute.config.PLANNER_RULES).  Generator-only knobs live here.

STRATEGY_RANDOM = "random"
STRATEGY_EXHAUSTIVE = "exhaustive"
STRATEGIES = (STRATEGY_RANDOM, STRATEGY_EXHAUSTIVE)


@dataclass
class GeneratorConfig:
    """All tuneable generator parameters in one place.

    ``strategy="random"`` samples starts and ends with a seeded RNG;
    ``strategy="exhaustive"`` enumerates them deterministically, trying
    the closest ends first and every interior end in phase 3.
    """

    # ── Geometric rules (from shared config) ───────────────────
    clearance_factor: float = PLANNER_RULES.clearance_factor
    proximity_pool_size: int = PLANNER_RULES.proximity_pool_size
    phase3_end_candidates: int = PLANNER_RULES.phase3_end_candidates

    # ── Generator-only knobs ───────────────────────────────────
    seed: int | None = None
    strategy: str = STRATEGY_RANDOM
    time_budget_s: float | None = None      # checked between attempts only
    phase3: bool = True                     # fill from interior points

    def __post_init__(self) -> None:
        if self.strategy not in STRATEGIES:
            raise ValueError(
                f"Unknown strategy {self.strategy!r}, expected one of {STRATEGIES}"
            )
