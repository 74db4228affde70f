from __future__ import annotations

from datetime import datetime

from chowkashi.search.filters import apply_filters, is_open_now, price_tier
from chowkashi.search.models import BusinessListing, FilterSet

MONDAY_10AM = datetime(2024, 1, 1, 10, 0)


def _listing(id: str = "1", **kwargs) -> BusinessListing:
    return BusinessListing(id=id, name=f"Listing {id}", **kwargs)


def test_default_filters_keep_everything():
    listings = [_listing("a", rating=0, distance_km=49.0), _listing("b")]
    assert apply_filters(listings, FilterSet()) == listings


def test_distance_and_rating_thresholds():
    listings = [
        _listing("near", rating=4.5, distance_km=2.0),
        _listing("far", rating=4.5, distance_km=12.0),
        _listing("low", rating=2.0, distance_km=1.0),
        _listing("unknown", rating=4.0),
    ]
    result = apply_filters(listings, FilterSet(distance_km=10, min_rating=3.5))
    assert [l.id for l in result] == ["near", "unknown"]


def test_price_tiers():
    assert price_tier(_listing(price_range_min=200, price_range_max=400)) == 1
    assert price_tier(_listing(price_range_min=1000, price_range_max=1500)) == 2
    assert price_tier(_listing(price_range_min=3000)) == 3
    assert price_tier(_listing()) is None


def test_price_tier_filter_keeps_unpriced():
    listings = [
        _listing("cheap", price_range_min=100, price_range_max=300),
        _listing("pricey", price_range_min=2500, price_range_max=5000),
        _listing("unpriced"),
    ]
    result = apply_filters(listings, FilterSet(price_tier=2))
    assert [l.id for l in result] == ["cheap", "unpriced"]


def test_hidden_gem_and_must_visit():
    listings = [_listing("gem", is_hidden_gem=True), _listing("must", is_must_visit=True), _listing("plain")]
    assert [l.id for l in apply_filters(listings, FilterSet(hidden_gem_only=True))] == ["gem"]
    assert [l.id for l in apply_filters(listings, FilterSet(must_visit_only=True))] == ["must"]


def test_is_open_now_inside_window():
    listing = _listing(
        availability_days=["Monday", "Tuesday"],
        availability_start_time="09:00:00",
        availability_end_time="18:00:00",
    )
    assert is_open_now(listing, MONDAY_10AM) is True
    assert is_open_now(listing, datetime(2024, 1, 1, 19, 0)) is False
    assert is_open_now(listing, datetime(2024, 1, 3, 10, 0)) is False


def test_is_open_now_window_across_midnight():
    listing = _listing(availability_days=["monday"], availability_start_time="22:00", availability_end_time="02:00")
    assert is_open_now(listing, datetime(2024, 1, 1, 23, 30)) is True
    assert is_open_now(listing, datetime(2024, 1, 1, 12, 0)) is False


def test_open_now_only_checked_when_requested():
    closed = _listing("closed", availability_days=["Sunday"])
    filters = FilterSet(open_now=True)
    assert apply_filters([closed], filters, now=MONDAY_10AM) == [closed]
    assert apply_filters([closed], filters, check_open_now=True, now=MONDAY_10AM) == []


def test_is_open_now_compares_times_not_strings():
    listing = _listing(availability_days=["Monday"], availability_start_time="9:00", availability_end_time="18:00")
    assert is_open_now(listing, MONDAY_10AM) is True
    assert is_open_now(listing, datetime(2024, 1, 1, 8, 30)) is False


def test_is_open_now_unparseable_hours_stay_open():
    listing = _listing(availability_days=["Monday"], availability_start_time="noon", availability_end_time="late")
    assert is_open_now(listing, MONDAY_10AM) is True
