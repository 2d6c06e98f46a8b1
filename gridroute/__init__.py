"""gridroute — lattice route planning around a rectangular dead zone.

Submodules:
  config        Shared planning constants (PLANNER_RULES).
  geometry      Points, distances, segment tests, spacing snapping.
  models        Dataclasses, generator configuration and GridError.
  grid          Point lattice, border sets and proximity ordering.
  pathfinder    A* search with a flexible fallback for border points.
  conflicts     Shared-point / crossing / clearance checks between routes.
  generator     Greedy three-phase generation of non-conflicting routes.
  stats         Route statistics and reports.
  serialization JSON conversion (grid_config_to_dict, paths_to_dict, ...).
"""

from .geometry import Point
from .models import (
    DeadZone, PathPoint, RandomPath, GridConfig, GeneratorConfig, GridError,
)
from .grid import GridManager
from .pathfinder import PathfindingEngine
from .generator import RandomPathGenerator, generate_random_paths
from .serialization import grid_config_to_dict, parse_grid_config, paths_to_dict, parse_paths

__all__ = [
    # Models
    "Point", "DeadZone", "PathPoint", "RandomPath", "GridConfig",
    "GeneratorConfig", "GridError",
    # Engine
    "GridManager", "PathfindingEngine",
    "RandomPathGenerator", "generate_random_paths",
    # Serialization
    "grid_config_to_dict", "parse_grid_config", "paths_to_dict", "parse_paths",
]
