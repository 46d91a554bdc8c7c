"""Tests for barber lookup and proximity search."""

from __future__ import annotations

import math

import pytest

from nextcut.core.exceptions import InvalidArgumentError, NotFoundError
from nextcut.core.geo import haversine_km

ORIGIN = (12.9716, 77.5946)


@pytest.fixture
def spread(registry):
    """Barbers at increasing distance from ORIGIN."""
    return [
        registry.register_barber("Here", "here", lat=12.9716, long=77.5946),
        registry.register_barber("Near", "near", lat=12.9784, long=77.6408),
        registry.register_barber("Mid", "mid", lat=12.9352, long=77.6245, minutes_per_customer=10),
        registry.register_barber("Far", "far", lat=13.1986, long=77.7066),
    ]


def test_haversine_known_distances():
    assert haversine_km(0, 0, 0, 0) == 0
    # One degree of arc on a 6371 km sphere
    assert haversine_km(0, 0, 1, 0) == pytest.approx(2 * math.pi * 6371 / 360)
    assert haversine_km(*ORIGIN, 12.9784, 77.6408) == haversine_km(12.9784, 77.6408, *ORIGIN)


def test_find_near_filters_and_sorts(directory, spread):
    radius = 10.0
    hits = directory.find_near(*ORIGIN, radius_km=radius)

    assert [b.name for b in hits] == ["Here", "Near", "Mid"]
    exact = [haversine_km(*ORIGIN, b.lat, b.long) for b in hits]
    assert all(d <= radius for d in exact)
    assert exact == sorted(exact)
    assert hits[0].distance_km == 0.0


def test_find_near_uses_default_radius(directory, spread):
    assert {b.name for b in directory.find_near(*ORIGIN)} == {"Here", "Near", "Mid"}


def test_find_near_annotates_load(directory, queue_engine, spread, make_customer):
    mid = spread[2]
    a, b = make_customer("A"), make_customer("B")
    queue_engine.join(a.id, mid.id, "haircut")
    queue_engine.join(b.id, mid.id, "beard")

    hit = next(h for h in directory.find_near(*ORIGIN, radius_km=10) if h.id == mid.id)
    assert hit.queue_length == 2
    assert hit.estimated_wait_minutes == 20
    assert [(q.position, q.customer.name) for q in hit.queue] == [(1, "A"), (2, "B")]


def test_find_near_empty_when_nothing_in_range(directory, spread):
    assert directory.find_near(-33.86, 151.21, radius_km=50) == []


@pytest.mark.parametrize("lat, long, radius", [
    (91, 0, 5),
    (-91, 0, 5),
    (0, 181, 5),
    (0, -181, 5),
    (0, 0, -1),
])
def test_find_near_rejects_bad_input(directory, lat, long, radius):
    with pytest.raises(InvalidArgumentError):
        directory.find_near(lat, long, radius_km=radius)


def test_get_barber_and_exists(directory, barber):
    assert directory.exists(barber.id) is True
    assert directory.exists(9999) is False
    assert directory.get_barber(barber.id).username == "b1"
    with pytest.raises(NotFoundError):
        directory.get_barber(9999)
