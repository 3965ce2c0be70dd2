import pytest

from parkboard.geo import DistanceUnit, distance_between, haversine


def test_same_point_is_zero():
    assert distance_between(37.788, -122.4075, 37.788, -122.4075) == 0.0


def test_one_degree_of_latitude_in_km():
    d = haversine(10.0, 20.0, 11.0, 20.0, 6371.0)
    assert d == pytest.approx(111.19492664455873, rel=1e-9)


def test_san_francisco_to_los_angeles():
    km = distance_between(37.7749, -122.4194, 34.0522, -118.2437, DistanceUnit.KM)
    mi = distance_between(37.7749, -122.4194, 34.0522, -118.2437, DistanceUnit.MI)
    assert km == pytest.approx(559.1, abs=2.0)
    assert mi == pytest.approx(347.4, abs=1.5)


def test_unit_matches_earth_radius():
    km = distance_between(40.0, -74.0, 40.5, -73.5, "km")
    mi = distance_between(40.0, -74.0, 40.5, -73.5, "mi")
    assert km / mi == pytest.approx(6371.0 / 3959.0)


def test_symmetric():
    a = distance_between(51.5, -0.12, 48.85, 2.35)
    b = distance_between(48.85, 2.35, 51.5, -0.12)
    assert a == pytest.approx(b)


def test_antipodes_do_not_blow_up():
    d = distance_between(0.0, 0.0, 0.0, 180.0, DistanceUnit.KM)
    assert d == pytest.approx(3.141592653589793 * 6371.0)


def test_antipodes_where_rounding_overshoots():
    lat, lng = 69.51232454868148, -46.70938587002465
    d = distance_between(lat, lng, -lat, 133.29061412997535, DistanceUnit.KM)
    assert d == pytest.approx(3.141592653589793 * 6371.0)
