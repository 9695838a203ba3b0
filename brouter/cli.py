"""
broute: plan a route from the command line and print it as GPX.

    broute --profile trekking 13.4050,52.5200 2.3522,48.8566
    broute --profile fastbike --nogo point:13.0,52.0,500 --nogo line:13,52,13.1,52.1:5 LON,LAT LON,LAT

Points are "lon,lat" (longitude first, like the engine). Nogos are
TYPE:COORDS[:WEIGHT] with TYPE one of point, line, polygon:
- point:LON,LAT,RADIUS[,WEIGHT]
- line:LON,LAT,LON,LAT,...[,WEIGHT]    (an odd number of values ends in the weight)
- polygon:LON,LAT,LON,LAT,...[,WEIGHT]

Put "--" before the points if a longitude is negative.

Without --url a local engine is installed/started in the user's data directory.
"""

import argparse
import logging
import sys
from typing import List, Optional

from .client import BrouterClient
from .config import settings
from .errors import BrouterError
from .models import LineNogo, Nogo, Point, PointNogo, PolygonNogo, TurnInstructionMode

logger = logging.getLogger(__name__)

NOGO_TYPES = ("point", "line", "polygon")


def parse_point(token: str) -> Point:
    """'lon,lat' -> Point"""
    parts = token.split(",")
    if len(parts) != 2:
        raise argparse.ArgumentTypeError(f"expected LON,LAT, got {token!r}")
    try:
        lon, lat = (float(p) for p in parts)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid coordinates in {token!r}")
    return Point(lat=lat, lon=lon)


def _floats(text: str, token: str) -> List[float]:
    try:
        return [float(p) for p in text.split(",") if p != ""]
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid number in nogo {token!r}")


def _pairs_to_points(values: List[float]) -> List[Point]:
    return [Point(lat=values[i + 1], lon=values[i]) for i in range(0, len(values), 2)]


def parse_nogo(token: str) -> Nogo:
    """'type:coords[:weight]' -> PointNogo / LineNogo / PolygonNogo"""
    parts = token.split(":")
    if len(parts) not in (2, 3) or parts[0] not in NOGO_TYPES:
        raise argparse.ArgumentTypeError(
            f"expected TYPE:COORDS[:WEIGHT] with TYPE in {', '.join(NOGO_TYPES)}, got {token!r}"
        )
    kind, coords = parts[0], parts[1]
    values = _floats(coords, token)
    weight = _floats(parts[2], token)[0] if len(parts) == 3 and parts[2] else None

    try:
        if kind == "point":
            if len(values) not in (3, 4):
                raise argparse.ArgumentTypeError(f"point nogo needs LON,LAT,RADIUS[,WEIGHT], got {token!r}")
            if len(values) == 4:
                weight = values.pop()
            lon, lat, radius = values
            return PointNogo(Point(lat=lat, lon=lon), radius, weight)

        # if the number of values is odd, the last one is the weight
        if len(values) % 2 == 1:
            weight = values.pop()
        points = _pairs_to_points(values)
        if kind == "line":
            return LineNogo(points, weight)
        return PolygonNogo(points, weight)
    except ValueError as e:
        raise argparse.ArgumentTypeError(f"invalid nogo {token!r}: {e}")


def parse_timode(name: str) -> TurnInstructionMode:
    try:
        return TurnInstructionMode[name.upper().replace("-", "_")]
    except KeyError:
        raise argparse.ArgumentTypeError(f"unknown turn instruction mode {name!r}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="broute", description="Plan a route with BRouter")
    parser.add_argument("--profile", required=True, help="routing profile, e.g. trekking")
    parser.add_argument("--export-waypoints", action="store_true", help="include waypoints in the GPX")
    parser.add_argument("--name", help="name of the route")
    parser.add_argument("--nogo", dest="nogos", action="append", type=parse_nogo, default=[],
                        metavar="TYPE:COORDS[:WEIGHT]", help="area to avoid (repeatable)")
    parser.add_argument("--alternative-idx", type=int, choices=range(0, 4), help="alternative route index")
    parser.add_argument("--timode", type=parse_timode,
                        help="turn instructions: " + ", ".join(m.name.lower() for m in TurnInstructionMode))
    parser.add_argument("--url", help="use a running BRouter at this URL instead of a local one")
    parser.add_argument("--fetch-segments", action="store_true",
                        help="download the data tiles covering the points first (local engine only)")
    parser.add_argument("--output", "-o", help="write the GPX here instead of stdout")
    parser.add_argument("--verbose", "-v", action="store_true")
    parser.add_argument("points", nargs="*", type=parse_point, metavar="LON,LAT")
    return parser


def _make_client(args) -> BrouterClient:
    if args.url:
        return BrouterClient(args.url)

    from brouter_local.server import BRouterServer

    server = BRouterServer.home()
    if args.fetch_segments:
        server.download_segments_for(args.points)
    return BrouterClient.local(server=server)


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    with _make_client(args) as client:
        try:
            gpx = client.route(
                args.points,
                args.nogos,
                args.profile,
                alternativeidx=args.alternative_idx,
                timode=args.timode,
                name=args.name,
                export_waypoints=args.export_waypoints,
            )
        except BrouterError as e:
            print(f"broute: {e}", file=sys.stderr)
            return 1

    xml = gpx.to_xml()
    if args.output:
        with open(args.output, "w", encoding="utf-8") as f:
            f.write(xml)
        logger.info(f"Route written to {args.output}")
    else:
        sys.stdout.write(xml)
    return 0


if __name__ == "__main__":
    sys.exit(main())
