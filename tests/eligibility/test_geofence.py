import pytest

from attendflow.core.exceptions import ValidationError
from attendflow.eligibility.geofence import haversine_distance, within_any_office
from attendflow.policies.model import GeoPoint, OfficeLocation

HANOI = GeoPoint(21.0285, 105.8542)
SAIGON = GeoPoint(10.7769, 106.7009)


def test_identical_points_are_zero_apart():
    assert haversine_distance(HANOI, HANOI) == 0.0


def test_distance_is_symmetric():
    assert haversine_distance(HANOI, SAIGON) == haversine_distance(SAIGON, HANOI)


def test_distance_is_roughly_known_value():
    # Hanoi - Ho Chi Minh City is about 1,140 km as the crow flies.
    assert 1_100_000 < haversine_distance(HANOI, SAIGON) < 1_200_000


def test_point_exactly_on_radius_is_inside():
    point = GeoPoint(21.0300, 105.8542)
    radius = haversine_distance(point, HANOI)
    office = OfficeLocation(name="HQ", lat=HANOI.lat, lng=HANOI.lng, radius_meters=radius)

    assert within_any_office(point, [office]) is True
    assert within_any_office(point, [OfficeLocation("HQ", HANOI.lat, HANOI.lng, radius - 0.01)]) is False


def test_any_office_is_enough():
    far = OfficeLocation(name="South", lat=SAIGON.lat, lng=SAIGON.lng, radius_meters=500)
    near = OfficeLocation(name="North", lat=HANOI.lat, lng=HANOI.lng, radius_meters=500)

    assert within_any_office(HANOI, [far, near]) is True
    assert within_any_office(HANOI, [far]) is False


def test_no_offices_is_not_a_match():
    assert within_any_office(HANOI, []) is False


@pytest.mark.parametrize(
    "point",
    [GeoPoint(91.0, 0.0), GeoPoint(0.0, -180.5), GeoPoint("north", 0.0), GeoPoint(None, 0.0), GeoPoint(True, 0.0)],
)
def test_malformed_coordinates_raise(point):
    with pytest.raises(ValidationError):
        haversine_distance(point, HANOI)
