"""
gridroute — entry point.

Usage:
    python -m gridroute plan                 # 600x600 canvas, 50px grid, default dead zone
    python -m gridroute plan --count 12 --seed 7
    python -m gridroute stats --strategy exhaustive
    python -m gridroute path --from 0,0 --to 500,500

Options:
    --width W --height H        canvas size              (600 x 600)
    --spacing SW[,SH]           requested grid spacing   (50)
    --deadzone DW,DH            dead-zone extents        (200,150)
    --center X,Y                dead-zone centre         (canvas centre)
    --no-deadzone               plain lattice
    --count N                   target route count
    --seed S                    random seed
    --strategy random|exhaustive
    --time-budget SECONDS
    -v / --verbose              debug logging
"""

from __future__ import annotations

import json
import logging
import sys

from gridroute.generator import RandomPathGenerator
from gridroute.grid import GridManager
from gridroute.models import GeneratorConfig, GridError
from gridroute.pathfinder import PathfindingEngine
from gridroute.serialization import grid_config_to_dict, paths_to_dict
from gridroute.stats import full_report, optimal_path_count


USAGE = "Usage: python -m gridroute {plan|stats|path} [options]  (see --help)"


def _pair(value: str) -> tuple[float, float]:
    parts = [float(v) for v in value.split(",")]
    if len(parts) == 1:
        return parts[0], parts[0]
    return parts[0], parts[1]


def _num(value: float):
    return int(value) if float(value).is_integer() else value


def _parse_options(args: list[str]) -> dict:
    opts = {
        "width": 600, "height": 600,
        "spacing": (50, 50),
        "deadzone": (200, 150),
        "center": None,
        "count": None, "seed": None,
        "strategy": "random", "time_budget": None,
        "from": None, "to": None,
        "verbose": False,
    }
    i = 0
    while i < len(args):
        a = args[i]
        nxt = args[i + 1] if i + 1 < len(args) else None
        if a in ("-v", "--verbose"):
            opts["verbose"] = True
        elif a == "--no-deadzone":
            opts["deadzone"] = None
        elif nxt is None:
            raise ValueError(f"Missing value for {a}")
        elif a in ("--width", "--height"):
            opts[a[2:]] = _num(float(nxt))
        elif a in ("--spacing", "--deadzone", "--center", "--from", "--to"):
            opts[a[2:]] = tuple(_num(v) for v in _pair(nxt))
        elif a in ("--count", "--seed"):
            opts[a[2:]] = int(nxt)
        elif a == "--strategy":
            opts["strategy"] = nxt
        elif a == "--time-budget":
            opts["time_budget"] = float(nxt)
        else:
            raise ValueError(f"Unknown option: {a}")
        i += 1 if a in ("-v", "--verbose", "--no-deadzone") else 2
    return opts


def _build_grid(opts: dict) -> GridManager:
    grid = GridManager(opts["width"], opts["height"])
    if opts["deadzone"] is None:
        grid.init_grid(*opts["spacing"])
    else:
        center = opts["center"] or (_num(opts["width"] / 2), _num(opts["height"] / 2))
        grid.init_grid(*opts["spacing"], *opts["deadzone"], center)
    return grid


def main(argv: list[str] | None = None) -> int:
    args = sys.argv[1:] if argv is None else argv
    if args and args[0] in ("-h", "--help"):
        print(__doc__)
        return 0
    cmd = args[0] if args else "plan"
    if cmd not in ("plan", "stats", "path"):
        print(f"Unknown command: {cmd}", file=sys.stderr)
        print(USAGE, file=sys.stderr)
        return 1

    try:
        opts = _parse_options(args[1:])
    except ValueError as e:
        print(str(e), file=sys.stderr)
        print(USAGE, file=sys.stderr)
        return 1

    logging.basicConfig(
        level=logging.DEBUG if opts["verbose"] else logging.WARNING,
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )

    try:
        grid = _build_grid(opts)
        config = GeneratorConfig(
            seed=opts["seed"],
            strategy=opts["strategy"],
            time_budget_s=opts["time_budget"],
        )
    except GridError as e:
        print(f"Grid error: {e}", file=sys.stderr)
        return 2
    except ValueError as e:
        print(str(e), file=sys.stderr)
        return 1

    if cmd == "path":
        if opts["from"] is None or opts["to"] is None:
            print("path needs --from X,Y and --to X,Y", file=sys.stderr)
            return 1
        route = PathfindingEngine(grid).a_star(opts["from"], opts["to"])
        print(json.dumps({"path": [list(p) for p in route] if route else None}))
        return 0 if route else 3

    count = opts["count"] if opts["count"] is not None else optimal_path_count(grid)
    paths = RandomPathGenerator(grid, config=config).generate_random_paths(count)

    if cmd == "stats":
        print(full_report(grid, paths))
    else:
        out = {"grid": grid_config_to_dict(grid.config()), "requested": count}
        out.update(paths_to_dict(paths))
        print(json.dumps(out))
    return 0


if __name__ == "__main__":
    sys.exit(main())
