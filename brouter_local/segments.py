"""
Purpose: Naming of BRouter data tiles (segments).
What it does:
- A tile covers 5x5 degrees and is named after its south-west corner:
  hemisphere letter + longitude degrees, "_", hemisphere letter + latitude degrees.
  E10_N50 covers lon 10..15, lat 50..55; W5_S10 covers lon -5..0, lat -10..-5.
- Lists the full world grid swept by BRouterServer.download_all_segments().
"""

from __future__ import annotations

import math
import re
from typing import Iterable, Iterator, List

from brouter.models import Point

TILE_SIZE_DEG = 5

SEGMENT_NAME_RE = re.compile(r"[EW][0-9]+_[NS][0-9]+")


def is_valid_segment_name(name: str) -> bool:
    return bool(SEGMENT_NAME_RE.fullmatch(name))


def segment_name(lon_deg: int, lat_deg: int) -> str:
    """Name of the tile whose south-west corner is (lon_deg, lat_deg)."""
    lon_part = f"W{-lon_deg}" if lon_deg < 0 else f"E{lon_deg}"
    lat_part = f"S{-lat_deg}" if lat_deg < 0 else f"N{lat_deg}"
    return f"{lon_part}_{lat_part}"


def segment_for_point(point: Point) -> str:
    """Name of the tile containing `point`."""
    lon = int(math.floor(point.lon / TILE_SIZE_DEG)) * TILE_SIZE_DEG
    lat = int(math.floor(point.lat / TILE_SIZE_DEG)) * TILE_SIZE_DEG
    return segment_name(lon, lat)


def segments_for_points(points: Iterable[Point]) -> List[str]:
    """Distinct tiles covering `points`, in first-seen order."""
    names: List[str] = []
    for point in points:
        name = segment_for_point(point)
        if name not in names:
            names.append(name)
    return names


def all_segment_names() -> Iterator[str]:
    """
    Every tile of the global sweep, in download order:
    E0..E175 (N0..N90 then S0..S90), then W0..W175 the same way.
    """
    for lon_letter in ("E", "W"):
        for lon in range(0, 180, TILE_SIZE_DEG):
            for lat_letter in ("N", "S"):
                for lat in range(0, 95, TILE_SIZE_DEG):
                    yield f"{lon_letter}{lon}_{lat_letter}{lat}"
