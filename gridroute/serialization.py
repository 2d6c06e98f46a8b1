"""Planner serialization — JSON conversion."""

from __future__ import annotations

from .geometry import Point
from .models import DeadZone, GridConfig, RandomPath


def dead_zone_to_dict(dz: DeadZone | None) -> dict | None:
    if dz is None:
        return None
    left, right, top, bottom = dz.bounds
    return {
        "center": list(dz.center),
        "width": dz.width,
        "height": dz.height,
        "bounds": {"left": left, "right": right, "top": top, "bottom": bottom},
    }


def grid_config_to_dict(config: GridConfig) -> dict:
    """Serialize a GridConfig to a JSON-safe dict."""
    return {
        "spacing_w": config.spacing_w,
        "spacing_h": config.spacing_h,
        "points": [list(p) for p in config.points],
        "dead_zone": dead_zone_to_dict(config.dead_zone),
    }


def parse_grid_config(data: dict) -> GridConfig:
    """Parse a grid dict back into a GridConfig."""
    dz_data = data.get("dead_zone")
    dead_zone = None
    if dz_data is not None:
        dead_zone = DeadZone(
            center=Point(*dz_data["center"]),
            width=dz_data["width"],
            height=dz_data["height"],
        )
    return GridConfig(
        spacing_w=data["spacing_w"],
        spacing_h=data["spacing_h"],
        points=[Point(*p) for p in data.get("points", [])],
        dead_zone=dead_zone,
    )


def paths_to_dict(paths: list[RandomPath]) -> dict:
    """Serialize accepted routes to a JSON-safe dict."""
    return {
        "paths": [
            {
                "start": list(p.start),
                "end": list(p.end),
                "path": [list(q) for q in p.path] if p.path is not None else None,
            }
            for p in paths
        ],
    }


def parse_paths(data: dict) -> list[RandomPath]:
    """Parse a paths dict back into RandomPath objects."""
    return [
        RandomPath(
            start=Point(*p["start"]),
            end=Point(*p["end"]),
            path=[Point(*q) for q in p["path"]] if p.get("path") is not None else None,
        )
        for p in data.get("paths", [])
    ]
