from __future__ import annotations

import re
from collections.abc import Sequence
from datetime import timezone
from functools import cmp_to_key

from .models import BusinessListing, SortKey

_LEADING_NUMBER_RE = re.compile(r"^[+-]?(?:\d+\.?\d*|\.\d+)")


def _label_distance(listing: BusinessListing) -> float:
    token = (listing.distance_label or "").split(" ")[0]
    match = _LEADING_NUMBER_RE.match(token)
    return float(match.group(0)) if match else 0.0


def _compare_distance(a: BusinessListing, b: BusinessListing) -> float:
    if a.distance_km is not None and b.distance_km is not None:
        return a.distance_km - b.distance_km
    return _label_distance(a) - _label_distance(b)


def _timestamp(listing: BusinessListing) -> float:
    created = listing.created_at
    if created is None:
        return 0.0
    if created.tzinfo is None:
        created = created.replace(tzinfo=timezone.utc)
    return created.timestamp()


def sort_listings(listings: Sequence[BusinessListing], key: str | SortKey) -> list[BusinessListing]:
    """Return a new list ordered by *key*; unknown keys keep the input order.

    Equal keys keep their relative input order.
    """
    key = key.value if isinstance(key, SortKey) else key

    if key == SortKey.rating.value:
        return sorted(listings, key=lambda item: item.rating, reverse=True)
    if key == SortKey.distance.value:
        return sorted(listings, key=cmp_to_key(_compare_distance))
    if key == SortKey.review_count.value:
        return sorted(listings, key=lambda item: item.review_count or 0, reverse=True)
    if key == SortKey.newest.value:
        return sorted(listings, key=_timestamp, reverse=True)
    return list(listings)
