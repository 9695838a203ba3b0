import pytest

from fakes import GPX_ONE_ROUTE

from brouter import protocol
from brouter.errors import (
    HttpError,
    InvalidGpxError,
    InvalidResponseError,
    MissingDataFileError,
    NoRouteFoundError,
    OtherError,
    PassTimeoutError,
    UploadProfileError,
)
from brouter.models import LineNogo, Point, PointNogo, PolygonNogo, RouteRequest, TurnInstructionMode


def params_dict(request):
    return dict(protocol.encode_route_params(request))


#----------------
# encoding
#----------------

@pytest.mark.parametrize("value, expected", [(100.0, "100"), (13.405, "13.405"), (-0.5, "-0.5"), (0, "0")])
def test_format_number(value, expected):
    assert protocol.format_number(value) == expected


def test_encode_lonlats_empty():
    assert protocol.encode_lonlats([]) == ""


def test_encode_lonlats_is_longitude_first(berlin, paris):
    assert protocol.encode_lonlats([berlin, paris]) == "13.405,52.52|2.3522,48.8566"


def test_encode_point_nogo_weight_is_optional(berlin):
    assert protocol.encode_point_nogos([PointNogo(berlin, 100.0)]) == "13.405,52.52,100"
    assert protocol.encode_point_nogos([PointNogo(berlin, 100.0, weight=10.0)]) == "13.405,52.52,100,10"


def test_encode_point_nogos_joins_entries(berlin, paris):
    nogos = [PointNogo(berlin, 100.0), LineNogo([berlin]), PointNogo(paris, 50.5, weight=2.5)]
    assert protocol.encode_point_nogos(nogos) == "13.405,52.52,100|2.3522,48.8566,50.5,2.5"


def test_encode_line_nogos(berlin, paris):
    nogos = [LineNogo([berlin, paris]), LineNogo([paris], weight=3.0), PointNogo(berlin, 10.0)]
    assert protocol.encode_line_nogos(nogos) == "13.405,52.52,2.3522,48.8566|2.3522,48.8566,3"


def test_encode_polygon_nogos(berlin, paris):
    nogos = [PolygonNogo([berlin, paris, Point(50.0, 8.0)], weight=1.5)]
    assert protocol.encode_polygon_nogos(nogos) == "13.405,52.52,2.3522,48.8566,8,50,1.5"


def test_encode_route_params_minimal(berlin, paris):
    params = protocol.encode_route_params(RouteRequest([berlin, paris], profile="trekking"))
    assert params == [
        ("lonlats", "13.405,52.52|2.3522,48.8566"),
        ("profile", "trekking"),
        ("format", "gpx"),
    ]


def test_encode_route_params_with_no_points_sends_empty_lonlats():
    assert params_dict(RouteRequest([], profile="car-fast"))["lonlats"] == ""


def test_encode_route_params_full_order(berlin, paris):
    request = RouteRequest(
        [berlin, paris],
        nogos=[PointNogo(berlin, 100.0), LineNogo([berlin, paris]), PolygonNogo([paris])],
        profile="fastbike",
        alternativeidx=2,
        timode=TurnInstructionMode.OSMAND_STYLE,
        name="My Route",
        export_waypoints=True,
    )
    names = [name for name, _ in protocol.encode_route_params(request)]
    assert names == [
        "lonlats", "profile", "format", "alternativeidx", "timode",
        "polygons", "nogos", "polylines", "exportWaypoints", "trackname",
    ]
    params = params_dict(request)
    assert params["alternativeidx"] == "2"
    assert params["timode"] == "3"
    assert params["exportWaypoints"] == "1"
    assert params["trackname"] == "My Route"


def test_encode_route_params_omits_empty_optionals(berlin):
    params = params_dict(RouteRequest([berlin], nogos=[PointNogo(berlin, 10.0)]))
    assert "nogos" in params
    for name in ("polygons", "polylines", "alternativeidx", "timode", "exportWaypoints", "trackname"):
        assert name not in params


def test_encode_route_params_timode_none_is_sent_as_zero(berlin):
    assert params_dict(RouteRequest([berlin], timode=TurnInstructionMode.NONE))["timode"] == "0"


@pytest.mark.parametrize("alternativeidx", [-1, 4, 10])
def test_encode_route_params_rejects_bad_alternativeidx(berlin, alternativeidx):
    with pytest.raises(ValueError):
        protocol.encode_route_params(RouteRequest([berlin], alternativeidx=alternativeidx))


@pytest.mark.parametrize("alternativeidx", [0, 3])
def test_encode_route_params_accepts_alternativeidx_bounds(berlin, alternativeidx):
    assert params_dict(RouteRequest([berlin], alternativeidx=alternativeidx))["alternativeidx"] == str(alternativeidx)


def test_build_route_url_percent_encodes_delimiter(berlin, paris):
    url = protocol.build_route_url("http://localhost:17777/", RouteRequest([berlin, paris], name="a b"))
    assert url.startswith("http://localhost:17777/brouter?")
    assert "lonlats=13.405%2C52.52%7C2.3522%2C48.8566" in url
    assert "trackname=a+b" in url


#----------------
# decoding
#----------------

@pytest.mark.parametrize("status", [200, 400, 500])
def test_decode_missing_data_file_regardless_of_status(status):
    with pytest.raises(MissingDataFileError) as excinfo:
        protocol.decode_route_response(status, b"datafile europe.rd5 not found\n")
    assert excinfo.value.name == "europe.rd5"


def test_decode_no_route_found():
    with pytest.raises(NoRouteFoundError) as excinfo:
        protocol.decode_route_response(200, b"no track found at pass=3\n")
    assert excinfo.value.pass_number == 3


def test_decode_no_route_found_negative_pass():
    with pytest.raises(NoRouteFoundError) as excinfo:
        protocol.decode_route_response(200, b"no track found at pass=-1\n")
    assert excinfo.value.pass_number == -1


def test_decode_pass_timeout_keeps_text():
    with pytest.raises(PassTimeoutError) as excinfo:
        protocol.decode_route_response(200, b"pass2 timeout after 120 seconds\n")
    assert excinfo.value.pass_ == "2"
    assert excinfo.value.timeout == "120"
    assert str(excinfo.value) == "Pass 2 timeout after 120 seconds"


def test_decode_patterns_are_checked_in_order():
    body = b"no track found at pass=1\ndatafile E5_N45.rd5 not found\n"
    with pytest.raises(MissingDataFileError):
        protocol.decode_route_response(200, body)


def test_decode_pattern_needs_trailing_newline():
    with pytest.raises(InvalidGpxError):
        protocol.decode_route_response(200, b"no track found at pass=3")


def test_decode_bad_request():
    with pytest.raises(OtherError):
        protocol.decode_route_response(400, b"bad lonlats")


def test_decode_other_http_status():
    with pytest.raises(HttpError) as excinfo:
        protocol.decode_route_response(503, b"Service Unavailable")
    assert excinfo.value.status_code == 503


def test_decode_invalid_gpx_keeps_body():
    with pytest.raises(InvalidGpxError) as excinfo:
        protocol.decode_route_response(200, b"operation killed by thread-priority-watchdog")
    assert excinfo.value.body == "operation killed by thread-priority-watchdog"


@pytest.mark.parametrize("body", [
    b"<html><body>502 Bad Gateway</body></html>",
    b"<?xml version='1.0'?><foo/>",
    b"<gpx version='9.9'></gpx>",
])
def test_decode_xml_that_is_not_gpx(body):
    with pytest.raises(InvalidGpxError) as excinfo:
        protocol.decode_route_response(200, body)
    assert excinfo.value.body == body.decode("utf-8")


def test_decode_gpx_with_one_route():
    gpx = protocol.decode_route_response(200, GPX_ONE_ROUTE)
    assert len(gpx.routes) == 1
    route = gpx.routes[0]
    assert route.name == "My Route"
    assert [(p.latitude, p.longitude) for p in route.points] == [
        (52.52, 13.405),
        (52.53, 13.415),
        (48.8566, 2.3522),
    ]
    assert route.points[1].elevation == 36.5


def test_match_error_on_plain_gpx_is_none():
    assert protocol.match_error(GPX_ONE_ROUTE) is None


def test_decode_upload_response_profile_id():
    assert protocol.decode_upload_response({"profileid": "custom_1700000000", "error": None}) == "custom_1700000000"


def test_decode_upload_response_error():
    with pytest.raises(UploadProfileError) as excinfo:
        protocol.decode_upload_response({"profileid": "", "error": "syntax error at line 3"})
    assert excinfo.value.reason == "syntax error at line 3"


@pytest.mark.parametrize("payload", [{}, {"error": None}, ["custom_1"]])
def test_decode_upload_response_malformed(payload):
    with pytest.raises(InvalidResponseError):
        protocol.decode_upload_response(payload)
