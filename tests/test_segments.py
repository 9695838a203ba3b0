import pytest

from brouter.models import Point
from brouter_local.segments import (
    all_segment_names,
    is_valid_segment_name,
    segment_for_point,
    segment_name,
    segments_for_points,
)


@pytest.mark.parametrize("lon, lat, expected", [
    (0, 10, "E0_N10"),
    (10, 50, "E10_N50"),
    (-5, -10, "W5_S10"),
    (-180, 85, "W180_N85"),
])
def test_segment_name(lon, lat, expected):
    assert segment_name(lon, lat) == expected


@pytest.mark.parametrize("point, expected", [
    (Point(52.52, 13.405), "E10_N50"),      # Berlin
    (Point(48.8566, 2.3522), "E0_N45"),     # Paris
    (Point(51.5074, -0.1278), "W5_N50"),    # London
    (Point(-33.8688, 151.2093), "E150_S35"),  # Sydney
    (Point(-22.9, -43.2), "W45_S25"),       # Rio
    (Point(50.0, 10.0), "E10_N50"),         # exactly on a corner
])
def test_segment_for_point(point, expected):
    assert segment_for_point(point) == expected


def test_segments_for_points_deduplicates_in_order():
    points = [Point(52.52, 13.405), Point(48.8566, 2.3522), Point(52.4, 13.1)]
    assert segments_for_points(points) == ["E10_N50", "E0_N45"]


def test_all_segment_names_covers_the_grid():
    names = list(all_segment_names())
    assert len(names) == 2 * 36 * 2 * 19
    assert names[:3] == ["E0_N0", "E0_N5", "E0_N10"]
    assert names[19] == "E0_S0"
    assert names[38] == "E5_N0"
    assert "W175_S90" in names
    assert "E180_N0" not in names


@pytest.mark.parametrize("name, valid", [
    ("E0_N10", True),
    ("W175_S90", True),
    ("e0_n10", False),
    ("E0N10", False),
    ("E0_N10.rd5", False),
    ("../E0_N10", False),
])
def test_is_valid_segment_name(name, valid):
    assert is_valid_segment_name(name) is valid
