from __future__ import annotations

from unittest.mock import patch

import pytest

from chowkashi.geo.models import Coordinates
from chowkashi.search import cache as cache_module
from chowkashi.search.cache import (
    cache_get,
    cache_set,
    clear_cache,
    clear_cache_on_location_change,
    geocode_cache_get,
    geocode_cache_set,
    get_cache_stats,
    make_key,
)
from chowkashi.search.models import BusinessListing

USER = Coordinates(lat=12.9716, lng=77.5946)


@pytest.fixture(autouse=True)
def _fresh_cache():
    clear_cache()
    yield
    clear_cache()


def test_make_key_prefers_resolved_coordinates_then_postal_then_id():
    with_coords = BusinessListing(id="1", name="a", latitude=12.5, longitude=77.25, postal_code="560001")
    with_link = BusinessListing(id="2", name="b", postal_code="560001", map_link="https://x/@12.9816,77.6046")
    postal_only = BusinessListing(id="3", name="c", postal_code=" 560001 ", map_link="https://maps.app.goo.gl/abc")
    bare = BusinessListing(id="4", name="d")

    assert make_key(USER, with_coords) == "12.971600,77.594600->coords:12.500000,77.250000"
    assert make_key(USER, with_link) == "12.971600,77.594600->coords:12.981600,77.604600"
    assert make_key(USER, postal_only) == "12.971600,77.594600->postal:560001"
    assert make_key(USER, bare) == "12.971600,77.594600->id:4"


def test_listings_sharing_a_postal_code_get_distinct_keys():
    a = BusinessListing(id="a", name="a", postal_code="560001", map_link="https://x/@12.9816,77.6046")
    b = BusinessListing(id="b", name="b", postal_code="560001", map_link="https://x/@13.2000,77.8000")
    assert make_key(USER, a) != make_key(USER, b)


def test_cache_miss_then_hit():
    assert cache_get("k") is None
    cache_set("k", 3.2, True)
    assert cache_get("k") == {"distance_km": 3.2, "is_precise": True}
    stats = get_cache_stats()
    assert stats["hits"] == 1
    assert stats["misses"] == 1
    assert stats["hit_rate"] == 50.0


def test_expired_entry_is_dropped():
    cache_set("k", 1.0, False)
    assert cache_get("k", ttl=0) is None
    assert get_cache_stats()["size"] == 0


def test_geocode_cache_is_case_insensitive():
    geocode_cache_set(" Koramangala ", USER)
    assert geocode_cache_get("koramangala") == USER
    assert get_cache_stats()["geocoding_entries"] == 1


def test_location_change_over_threshold_clears():
    cache_set("k", 1.0, True)
    far = Coordinates(lat=13.0716, lng=77.5946)
    assert clear_cache_on_location_change(USER, far) is True
    assert get_cache_stats()["size"] == 0


def test_small_location_change_keeps_cache():
    cache_set("k", 1.0, True)
    near = Coordinates(lat=12.9816, lng=77.6046)
    assert clear_cache_on_location_change(USER, near) is False
    assert clear_cache_on_location_change(None, near) is False
    assert get_cache_stats()["size"] == 1


def test_location_change_reference_pairs():
    origin = Coordinates(lat=12.97, lng=77.59)
    cache_set("k", 1.0, True)
    assert clear_cache_on_location_change(origin, Coordinates(lat=12.979, lng=77.59)) is False
    assert get_cache_stats()["size"] == 1
    assert clear_cache_on_location_change(origin, Coordinates(lat=13.05, lng=77.60)) is True
    assert get_cache_stats()["size"] == 0


@patch.object(cache_module, "MAX_ENTRIES", 3)
def test_full_cache_prunes_expired_then_oldest():
    cache_set("old-1", 1.0, True)
    cache_set("old-2", 2.0, True)
    cache_set("fresh", 3.0, True)
    cache_set("new", 4.0, True, ttl=3600)
    stats = get_cache_stats()
    assert stats["size"] == 3
    assert cache_get("old-1") is None
    assert cache_get("new") is not None

    cache_set("expired-sweep", 5.0, True, ttl=0)
    assert get_cache_stats()["size"] == 1


def test_out_of_range_coordinates_key_on_map_link():
    listing = BusinessListing(id="5", name="e", latitude=123.0, longitude=77.0, map_link="https://x/@12.9816,77.6046")
    assert make_key(USER, listing) == "12.971600,77.594600->coords:12.981600,77.604600"
