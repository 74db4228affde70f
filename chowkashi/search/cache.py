from __future__ import annotations

import logging
import time
from typing import Any

from ..geo.distance import haversine_km, moved_beyond_threshold
from ..geo.map_links import extract_coordinates
from ..geo.models import Coordinates
from .config import DEFAULT_SEARCH_CONFIG
from .models import BusinessListing

logger = logging.getLogger(__name__)

# Expired entries are pruned, then the oldest dropped, once a cache reaches this size
MAX_ENTRIES = 5_000

_distance_cache: dict[str, dict[str, Any]] = {}
_geocode_cache: dict[str, Coordinates] = {}
_hits: int = 0
_misses: int = 0


def listing_location_key(listing: BusinessListing) -> str:
    """Name the position a distance was computed from.

    Explicit or map-link coordinates key on the coordinates themselves, a
    listing that can only be geocoded by postal code keys on the code, and
    anything else keys on its identifier.
    """
    if listing.latitude is not None and listing.longitude is not None:
        try:
            return f"coords:{Coordinates(lat=listing.latitude, lng=listing.longitude).cache_key()}"
        except ValueError:
            pass
    from_link = extract_coordinates(listing.map_link)
    if from_link is not None:
        return f"coords:{from_link.cache_key()}"
    if listing.postal_code:
        return f"postal:{listing.postal_code.strip()}"
    return f"id:{listing.id}"


def make_key(user_location: Coordinates, listing: BusinessListing | str) -> str:
    location_key = listing if isinstance(listing, str) else listing_location_key(listing)
    return f"{user_location.cache_key()}->{location_key}"


def cache_get(key: str, ttl: float = DEFAULT_SEARCH_CONFIG.cache_ttl_seconds) -> dict[str, Any] | None:
    global _hits, _misses
    entry = _distance_cache.get(key)
    if entry and time.time() - entry["created_at"] < ttl:
        _hits += 1
        return entry["value"]
    if entry:
        del _distance_cache[key]
    _misses += 1
    return None


def _prune(ttl: float) -> None:
    now = time.time()
    for key in [k for k, e in _distance_cache.items() if now - e["created_at"] >= ttl]:
        del _distance_cache[key]
    while len(_distance_cache) >= MAX_ENTRIES:
        del _distance_cache[next(iter(_distance_cache))]


def cache_set(
    key: str,
    distance_km: float,
    is_precise: bool,
    ttl: float = DEFAULT_SEARCH_CONFIG.cache_ttl_seconds,
) -> None:
    if key not in _distance_cache and len(_distance_cache) >= MAX_ENTRIES:
        _prune(ttl)
    _distance_cache[key] = {
        "value": {"distance_km": distance_km, "is_precise": is_precise},
        "created_at": time.time(),
    }


def geocode_cache_get(address: str) -> Coordinates | None:
    return _geocode_cache.get(address.strip().lower())


def geocode_cache_set(address: str, coordinates: Coordinates) -> None:
    if len(_geocode_cache) >= MAX_ENTRIES:
        del _geocode_cache[next(iter(_geocode_cache))]
    _geocode_cache[address.strip().lower()] = coordinates


def get_cache_stats(ttl: float = DEFAULT_SEARCH_CONFIG.cache_ttl_seconds) -> dict:
    total = _hits + _misses
    now = time.time()
    valid = sum(1 for e in _distance_cache.values() if now - e["created_at"] < ttl)
    return {
        "size": len(_distance_cache),
        "valid_entries": valid,
        "geocoding_entries": len(_geocode_cache),
        "hits": _hits,
        "misses": _misses,
        "hit_rate": round(_hits / total * 100, 1) if total > 0 else 0.0,
    }


def clear_cache() -> None:
    global _hits, _misses
    _distance_cache.clear()
    _geocode_cache.clear()
    _hits = 0
    _misses = 0


def clear_cache_on_location_change(
    old_location: Coordinates | None,
    new_location: Coordinates | None,
    threshold_km: float = DEFAULT_SEARCH_CONFIG.location_change_threshold_km,
) -> bool:
    """Drop every cached distance when the user moved more than *threshold_km*."""
    if not moved_beyond_threshold(old_location, new_location, threshold_km):
        return False
    clear_cache()
    logger.info(
        "Distance cache cleared after a %.2f km location change",
        haversine_km(old_location, new_location),
    )
    return True
