#Purpose: The BRouter wire protocol, without any HTTP.
#Encodes a RouteRequest into the engine's query parameters and turns the raw
#response (status + body bytes) back into a GPX document or a named error.
#Upload responses ({"profileid", "error"}) are decoded here too.
#
#The client (brouter/client.py) only moves bytes; everything engine-specific
#lives in this module:
#coordinate formatting (lon,lat, longitude first)
#nogo / polyline / polygon encoding
#sniffing the plain-text error lines the engine returns with "200 OK"

from __future__ import annotations

import logging
import re
import xml.etree.ElementTree as ElementTree
from typing import Any, Callable, Dict, List, Optional, Pattern, Sequence, Tuple
from urllib.parse import urlencode

import gpxpy
import gpxpy.gpx

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
from .models import LineNogo, Nogo, Point, PointNogo, PolygonNogo, RouteRequest

logger = logging.getLogger(__name__)

ROUTE_PATH = "brouter"
PROFILE_UPLOAD_PATH = "brouter/profile"

# format is always the track-file format
TRACK_FORMAT = "gpx"

# separates repeated geo entries; requests percent-encodes it as %7C
ENTRY_DELIMITER = "|"

MIN_ALTERNATIVE_IDX = 0
MAX_ALTERNATIVE_IDX = 3

BAD_REQUEST = 400

# GPX versions gpxpy reads; anything else is not a track file
GPX_VERSIONS = ("1.0", "1.1")

Params = List[Tuple[str, str]]


#----------------
# Request encoding
#----------------

def format_number(value: float) -> str:
    """Render a coordinate/radius/weight: `100` for integral values, `13.405` otherwise."""
    value = float(value)
    if value.is_integer():
        return str(int(value))
    return repr(value)


def _join_numbers(values: Sequence[float]) -> str:
    return ",".join(format_number(v) for v in values)


def encode_lonlats(points: Sequence[Point]) -> str:
    """Convert points to 'lon,lat|lon,lat|...'. No points gives an empty string."""
    return ENTRY_DELIMITER.join(_join_numbers([p.lon, p.lat]) for p in points)


def _flatten(points: Sequence[Point], weight: Optional[float]) -> List[float]:
    values: List[float] = []
    for p in points:
        values.extend([p.lon, p.lat])
    # a trailing odd value is the weight
    if weight is not None:
        values.append(weight)
    return values


def encode_point_nogos(nogos: Sequence[Nogo]) -> str:
    entries = []
    for nogo in nogos:
        if not isinstance(nogo, PointNogo):
            continue
        values = [nogo.point.lon, nogo.point.lat, nogo.radius]
        if nogo.weight is not None:
            values.append(nogo.weight)
        entries.append(_join_numbers(values))
    return ENTRY_DELIMITER.join(entries)


def encode_line_nogos(nogos: Sequence[Nogo]) -> str:
    return ENTRY_DELIMITER.join(
        _join_numbers(_flatten(nogo.points, nogo.weight))
        for nogo in nogos
        if isinstance(nogo, LineNogo)
    )


def encode_polygon_nogos(nogos: Sequence[Nogo]) -> str:
    return ENTRY_DELIMITER.join(
        _join_numbers(_flatten(nogo.points, nogo.weight))
        for nogo in nogos
        if isinstance(nogo, PolygonNogo)
    )


def encode_route_params(request: RouteRequest) -> Params:
    """
    Build the ordered query parameters for GET /brouter.

    Raises:
        ValueError: alternativeidx is outside 0..3. Checked here so that a bad
        request never reaches the server.
    """
    params: Params = [
        ("lonlats", encode_lonlats(request.points)),
        ("profile", request.profile),
        ("format", TRACK_FORMAT),
    ]

    if request.alternativeidx is not None:
        if not MIN_ALTERNATIVE_IDX <= request.alternativeidx <= MAX_ALTERNATIVE_IDX:
            raise ValueError(
                f"alternativeidx must be between {MIN_ALTERNATIVE_IDX} and "
                f"{MAX_ALTERNATIVE_IDX}, got {request.alternativeidx}"
            )
        params.append(("alternativeidx", str(request.alternativeidx)))

    if request.timode is not None:
        params.append(("timode", str(int(request.timode))))

    # empty geo parameters are left out, never sent empty
    polygons = encode_polygon_nogos(request.nogos)
    if polygons:
        params.append(("polygons", polygons))

    nogos = encode_point_nogos(request.nogos)
    if nogos:
        params.append(("nogos", nogos))

    polylines = encode_line_nogos(request.nogos)
    if polylines:
        params.append(("polylines", polylines))

    if request.export_waypoints:
        params.append(("exportWaypoints", "1"))

    if request.name is not None:
        params.append(("trackname", request.name))

    return params


def route_url(base_url: str) -> str:
    return f"{base_url.rstrip('/')}/{ROUTE_PATH}"


def profile_upload_url(base_url: str) -> str:
    return f"{base_url.rstrip('/')}/{PROFILE_UPLOAD_PATH}"


def build_route_url(base_url: str, request: RouteRequest) -> str:
    """Fully percent-encoded GET URL, for logging and the CLI."""
    return f"{route_url(base_url)}?{urlencode(encode_route_params(request))}"


#----------------
# Response decoding
#----------------

def _text(raw: bytes) -> str:
    return raw.decode("utf-8", errors="replace")


def _is_gpx_document(text: str) -> bool:
    """True if `text` is XML rooted at a <gpx> element of a known version."""
    try:
        root = ElementTree.fromstring(text)
    except ElementTree.ParseError:
        return False
    # strip the namespace: "{http://www.topografix.com/GPX/1/1}gpx"
    if root.tag.rsplit("}", 1)[-1] != "gpx":
        return False
    return root.get("version") in GPX_VERSIONS


def _missing_data_file(match: re.Match) -> BrouterError:
    return MissingDataFileError(_text(match.group(1)))


def _no_route_found(match: re.Match) -> BrouterError:
    return NoRouteFoundError(int(match.group(1)))


def _pass_timeout(match: re.Match) -> BrouterError:
    return PassTimeoutError(pass_=_text(match.group(1)), timeout=_text(match.group(2)))


# Evaluated in order against the raw body. The trailing newline anchors keep a
# real GPX document from matching by accident.
ERROR_PATTERNS: List[Tuple[Pattern[bytes], Callable[[re.Match], BrouterError]]] = [
    (re.compile(rb"datafile (.*) not found\n"), _missing_data_file),
    (re.compile(rb"no track found at pass=(-?[0-9]+)\n"), _no_route_found),
    (re.compile(rb"pass([0-9]+) timeout after ([0-9]+) seconds\n"), _pass_timeout),
]


def match_error(body: bytes) -> Optional[BrouterError]:
    """Return the error described by a plain-text engine response, if any."""
    for pattern, make_error in ERROR_PATTERNS:
        match = pattern.search(body)
        if match:
            return make_error(match)
    return None


def decode_route_response(status_code: int, body: bytes) -> gpxpy.gpx.GPX:
    """
    Turn a /brouter response into a GPX document.

    The engine reports most errors as HTTP 200 with a line of text, so the
    known text patterns are checked before the status code, and the status
    code before trying to parse GPX.

    Raises:
        MissingDataFileError, NoRouteFoundError, PassTimeoutError: body matched
        OtherError: bare 400
        HttpError: any other non-2xx status
        InvalidGpxError: body is not a GPX document
    """
    error = match_error(body)
    if error is not None:
        raise error

    if status_code == BAD_REQUEST:
        raise OtherError(f"HTTP error: {status_code} Bad Request")

    if not 200 <= status_code < 300:
        raise HttpError(f"unexpected status {status_code}", status_code=status_code)

    text = _text(body)
    if not _is_gpx_document(text):
        raise InvalidGpxError(text)
    try:
        return gpxpy.parse(text)
    except gpxpy.gpx.GPXException as e:
        logger.debug(f"GPX parse failed: {e}")
        raise InvalidGpxError(text) from e


def decode_upload_response(payload: Dict[str, Any]) -> str:
    """
    Decode the JSON answer of POST /brouter/profile.

    Returns:
        the generated profile id, usable as `profile` in later route calls.
    """
    if not isinstance(payload, dict):
        raise InvalidResponseError(f"expected a JSON object, got {type(payload).__name__}")

    error = payload.get("error")
    if error is not None:
        raise UploadProfileError(str(error))

    profile_id = payload.get("profileid")
    if not profile_id:
        raise InvalidResponseError("upload response has no profileid")
    return str(profile_id)
