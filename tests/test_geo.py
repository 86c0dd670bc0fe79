# tests/test_geo.py
import pytest

from transit_live.Services.geo import calculate_haversine_distance, is_within_radius


def test_same_point_is_zero():
    assert calculate_haversine_distance(10.9639, -74.7964, 10.9639, -74.7964) == 0.0


def test_one_thousandth_degree_of_latitude():
    distance = calculate_haversine_distance(10.0, -74.0, 10.001, -74.0)
    assert distance == pytest.approx(111.19, abs=0.05)


def test_distance_is_symmetric():
    a = calculate_haversine_distance(10.9639, -74.7964, 11.0041, -74.8070)
    b = calculate_haversine_distance(11.0041, -74.8070, 10.9639, -74.7964)
    assert a == pytest.approx(b)


def test_radius_is_inclusive():
    assert is_within_radius(0, 0, 1, 1, radius_m=42.0, distance_fn=lambda *_: 42.0)
    assert not is_within_radius(0, 0, 1, 1, radius_m=41.9, distance_fn=lambda *_: 42.0)


def test_within_100_m_of_a_stop():
    # ~55 m north of the stop
    assert is_within_radius(10.9644, -74.7964, 10.9639, -74.7964, radius_m=100)
    # ~1 km north of the stop
    assert not is_within_radius(10.9729, -74.7964, 10.9639, -74.7964, radius_m=100)
