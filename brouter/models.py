"""
Purpose: Domain models for routing requests.
What it does:
- Defines the geo primitives handed to the engine:
  - Point (lat, lon)
  - Nogo areas: PointNogo (point + radius), LineNogo, PolygonNogo
- Defines the turn instruction styles (TurnInstructionMode)
- Groups everything needed for one route call (RouteRequest)

Rule: No HTTP here, no URL encoding. Models only.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Optional, Sequence, Tuple, Union

from shapely.geometry import Point as ShapelyPoint


@dataclass(frozen=True)
class Point:
    """
    A point with latitude and longitude in decimal degrees.

    No range validation: out-of-range values are passed through to the engine.
    """

    lat: float
    lon: float

    @classmethod
    def from_shapely(cls, point: ShapelyPoint) -> Point:
        # shapely is x/y, so x is the longitude
        return cls(lat=point.y, lon=point.x)

    def to_shapely(self) -> ShapelyPoint:
        return ShapelyPoint(self.lon, self.lat)


def _check_weight(weight: Optional[float]) -> None:
    if weight is not None and not math.isfinite(weight):
        raise ValueError(f"nogo weight must be a finite number, got {weight!r}")


@dataclass(frozen=True)
class PointNogo:
    """Avoid a circle of `radius` meters around `point`."""

    point: Point
    radius: float
    weight: Optional[float] = None

    kind = "point"

    def __post_init__(self) -> None:
        if not self.radius > 0:
            raise ValueError(f"nogo radius must be > 0, got {self.radius!r}")
        _check_weight(self.weight)


@dataclass(frozen=True)
class LineNogo:
    """Avoid the polyline through `points`."""

    points: Tuple[Point, ...] = field(default_factory=tuple)
    weight: Optional[float] = None

    kind = "line"

    def __post_init__(self) -> None:
        # accept any sequence but keep the dataclass hashable
        object.__setattr__(self, "points", tuple(self.points))
        _check_weight(self.weight)


@dataclass(frozen=True)
class PolygonNogo:
    """
    Avoid the area enclosed by `points`.

    The ring is implicitly closed; no closing point is added.
    """

    points: Tuple[Point, ...] = field(default_factory=tuple)
    weight: Optional[float] = None

    kind = "polygon"

    def __post_init__(self) -> None:
        object.__setattr__(self, "points", tuple(self.points))
        _check_weight(self.weight)


# A description of some area that should be avoided
Nogo = Union[PointNogo, LineNogo, PolygonNogo]


class TurnInstructionMode(IntEnum):
    """Turn instruction style, sent to the engine as its ordinal (timode)."""

    NONE = 0
    AUTO_CHOOSE = 1
    LOCUS_STYLE = 2
    OSMAND_STYLE = 3
    COMMENT_STYLE = 4
    GPSIES_STYLE = 5
    ORUX_STYLE = 6
    LOCUS_OLD_STYLE = 7

    @classmethod
    def default(cls) -> TurnInstructionMode:
        return cls.NONE


@dataclass
class RouteRequest:
    """
    Everything needed for a single route call.

    points are order-significant: start, via points, end.
    alternativeidx is checked (0..3) when the request is encoded.
    """

    points: Sequence[Point]
    nogos: Sequence[Nogo] = field(default_factory=list)
    profile: str = "trekking"

    alternativeidx: Optional[int] = None
    timode: Optional[TurnInstructionMode] = None

    # used as the title of the output track
    name: Optional[str] = None
    export_waypoints: bool = False

    def __post_init__(self) -> None:
        if not self.profile:
            raise ValueError("profile must be a non-empty string")
