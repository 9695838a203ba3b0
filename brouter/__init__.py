"""
BRouter client package.

Public API:
- Client: BrouterClient
- Models: Point, PointNogo, LineNogo, PolygonNogo, Nogo, TurnInstructionMode, RouteRequest
- Errors: BrouterError and its subclasses

Example:

    from brouter import BrouterClient, Point

    with BrouterClient.local() as client:
        gpx = client.route(
            [Point(52.5200, 13.4050), Point(48.8566, 2.3522)],  # Berlin -> Paris
            profile="trekking",
            name="My Route",
        )
"""
from .client import BrouterClient
from .errors import (
    BrouterError,
    HttpError,
    InvalidGpxError,
    InvalidResponseError,
    MissingDataFileError,
    NoRouteFoundError,
    OtherError,
    PassTimeoutError,
    UploadProfileError,
)
from .models import LineNogo, Nogo, Point, PointNogo, PolygonNogo, RouteRequest, TurnInstructionMode

__version__ = "0.1.6"

__all__ = [
    "BrouterClient",
    "Point",
    "Nogo",
    "PointNogo",
    "LineNogo",
    "PolygonNogo",
    "RouteRequest",
    "TurnInstructionMode",
    "BrouterError",
    "HttpError",
    "InvalidGpxError",
    "InvalidResponseError",
    "MissingDataFileError",
    "NoRouteFoundError",
    "OtherError",
    "PassTimeoutError",
    "UploadProfileError",
]
