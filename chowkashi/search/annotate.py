from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Sequence

from ..geo.distance import format_distance_label, haversine_km
from ..geo.fallback import fallback_coordinates
from ..geo.map_links import extract_coordinates
from ..geo.models import Coordinates
from . import cache
from .models import BusinessListing

logger = logging.getLogger(__name__)

Geocoder = Callable[[str], Awaitable[Coordinates | None]]


def _explicit_coordinates(listing: BusinessListing) -> Coordinates | None:
    if listing.latitude is None or listing.longitude is None:
        return None
    try:
        return Coordinates(lat=listing.latitude, lng=listing.longitude)
    except ValueError:
        return None


def listing_coordinates(listing: BusinessListing) -> tuple[Coordinates, bool]:
    """Resolve a listing position without network access.

    Returns the coordinates and whether they are a real measurement.
    """
    coordinates = _explicit_coordinates(listing) or extract_coordinates(listing.map_link)
    if coordinates is not None:
        return coordinates, True
    return fallback_coordinates(listing.id), False


def _with_distance(listing: BusinessListing, distance_km: float, is_precise: bool) -> BusinessListing:
    return listing.model_copy(
        update={
            "distance_km": distance_km,
            "distance_label": format_distance_label(distance_km),
            "distance_is_precise": is_precise,
        }
    )


def annotate(listing: BusinessListing, user_location: Coordinates | None) -> BusinessListing:
    """Return a copy of *listing* carrying its distance from *user_location*."""
    if user_location is None:
        return listing
    coordinates, is_precise = listing_coordinates(listing)
    return _with_distance(listing, haversine_km(user_location, coordinates), is_precise)


async def _geocode_postal_code(
    postal_code: str,
    geocode: Geocoder,
    pending: dict[str, asyncio.Task],
) -> Coordinates | None:
    """Geocode *postal_code* once per batch; concurrent callers share the request."""
    coordinates = cache.geocode_cache_get(postal_code)
    if coordinates is not None:
        return coordinates

    key = postal_code.strip().lower()
    task = pending.get(key)
    if task is None:
        task = asyncio.ensure_future(geocode(postal_code))
        pending[key] = task
    try:
        coordinates = await task
    except Exception:
        logger.warning("Postal code geocoding failed for %s", postal_code, exc_info=True)
        return None
    if coordinates is not None:
        cache.geocode_cache_set(postal_code, coordinates)
    return coordinates


def _cached(listing: BusinessListing, key: str) -> BusinessListing | None:
    cached = cache.cache_get(key)
    if cached is None:
        return None
    logger.debug("Distance cache hit for %s", listing.id)
    return _with_distance(listing, cached["distance_km"], cached["is_precise"])


def _store(
    listing: BusinessListing,
    key: str,
    user_location: Coordinates,
    coordinates: Coordinates,
    is_precise: bool,
) -> BusinessListing:
    distance_km = haversine_km(user_location, coordinates)
    cache.cache_set(key, distance_km, is_precise)
    return _with_distance(listing, distance_km, is_precise)


async def _annotate_one(
    listing: BusinessListing,
    user_location: Coordinates,
    geocode: Geocoder | None,
    pending: dict[str, asyncio.Task],
) -> BusinessListing:
    key = cache.make_key(user_location, listing)
    hit = _cached(listing, key)
    if hit is not None:
        return hit

    coordinates = _explicit_coordinates(listing) or extract_coordinates(listing.map_link)
    if coordinates is not None:
        return _store(listing, key, user_location, coordinates, True)

    if listing.postal_code and geocode is not None:
        coordinates = await _geocode_postal_code(listing.postal_code, geocode, pending)
        if coordinates is not None:
            return _store(listing, key, user_location, coordinates, False)

    # The postal key only ever holds geocoded distances
    id_key = cache.make_key(user_location, f"id:{listing.id}")
    if id_key != key:
        hit = _cached(listing, id_key)
        if hit is not None:
            return hit
    return _store(listing, id_key, user_location, fallback_coordinates(listing.id), False)


async def annotate_batch(
    listings: Sequence[BusinessListing],
    user_location: Coordinates | None,
    geocode: Geocoder | None = None,
) -> list[BusinessListing]:
    """Annotate every listing concurrently and wait for all lookups to settle."""
    if user_location is None or not listings:
        return list(listings)
    pending: dict[str, asyncio.Task] = {}
    return list(
        await asyncio.gather(
            *(_annotate_one(listing, user_location, geocode, pending) for listing in listings)
        )
    )
