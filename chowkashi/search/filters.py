from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import datetime, time

from .models import BusinessListing, FilterSet

# Upper bounds of the price-range midpoint for tiers 1 and 2; anything above is tier 3
PRICE_TIER_BOUNDS: tuple[float, float] = (500.0, 2000.0)

_TIME_FORMATS = ("%H:%M:%S", "%H:%M")

logger = logging.getLogger(__name__)


def price_midpoint(listing: BusinessListing) -> float | None:
    low, high = listing.price_range_min, listing.price_range_max
    if low is not None and high is not None:
        return (low + high) / 2
    return low if low is not None else high


def price_tier(listing: BusinessListing) -> int | None:
    midpoint = price_midpoint(listing)
    if midpoint is None:
        return None
    for tier, bound in enumerate(PRICE_TIER_BOUNDS, start=1):
        if midpoint <= bound:
            return tier
    return len(PRICE_TIER_BOUNDS) + 1


def _parse_time(value: str) -> time | None:
    for fmt in _TIME_FORMATS:
        try:
            return datetime.strptime(value.strip(), fmt).time()
        except ValueError:
            continue
    logger.debug("Unparseable opening time %r", value)
    return None


def is_open_now(listing: BusinessListing, now: datetime | None = None) -> bool:
    """Whether *now* falls on an availability day and inside the opening window."""
    now = now or datetime.now()
    days = {day.strip().lower() for day in listing.availability_days}
    if not days or now.strftime("%A").lower() not in days:
        return False
    start, end = listing.availability_start_time, listing.availability_end_time
    if not start or not end:
        return True
    opens, closes = _parse_time(start), _parse_time(end)
    if opens is None or closes is None:
        return True
    current = now.time().replace(second=0, microsecond=0)
    if opens <= closes:
        return opens <= current <= closes
    # Window crosses midnight
    return current >= opens or current <= closes


def matches_filters(
    listing: BusinessListing,
    filters: FilterSet,
    *,
    check_open_now: bool = False,
    now: datetime | None = None,
) -> bool:
    if listing.rating < filters.min_rating:
        return False
    if listing.distance_km is not None and listing.distance_km > filters.distance_km:
        return False
    tier = price_tier(listing)
    if tier is not None and tier > filters.price_tier:
        return False
    if filters.hidden_gem_only and not listing.is_hidden_gem:
        return False
    if filters.must_visit_only and not listing.is_must_visit:
        return False
    if check_open_now and filters.open_now and not is_open_now(listing, now):
        return False
    return True


def apply_filters(
    listings: Sequence[BusinessListing],
    filters: FilterSet,
    *,
    check_open_now: bool = False,
    now: datetime | None = None,
) -> list[BusinessListing]:
    """Client-side thresholds applied after annotation.

    Listings without a computed distance are kept. Open-now is normally pushed
    down to the query; pass ``check_open_now`` for results that bypassed it.
    """
    return [
        listing
        for listing in listings
        if matches_filters(listing, filters, check_open_now=check_open_now, now=now)
    ]
