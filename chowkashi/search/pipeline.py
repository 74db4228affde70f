from __future__ import annotations

import asyncio
import logging
import time
from datetime import datetime
from typing import Any

from ..analytics.store import record_event
from ..datastore.functions import search_with_location
from ..datastore.listings import fetch_listings, search_providers
from ..datastore.reviews import ReviewAggregate, fetch_review_aggregates
from ..geo.models import Coordinates
from ..location.geocoder import geocode_address
from ..location.resolver import LocationResolver
from . import cache
from .annotate import Geocoder, annotate_batch
from .config import DEFAULT_SEARCH_CONFIG, SearchConfig
from .enhancement import enhance_query
from .filters import apply_filters
from .generation import GenerationTracker
from .models import BusinessListing, SearchRequest, SearchResponse
from .normalize import normalize_listing
from .postal import InvalidPostalCode
from .query_processing import process_natural_language_query
from .ranking import sort_listings
from .sanitize import sanitize_search_query, validate_postal_code

logger = logging.getLogger(__name__)

_generations = GenerationTracker()


def _merge_reviews(
    listings: list[BusinessListing], aggregates: dict[str, ReviewAggregate]
) -> list[BusinessListing]:
    merged = []
    for listing in listings:
        agg = aggregates.get(listing.id)
        if agg is not None and agg.review_count > 0:
            listing = listing.model_copy(
                update={"rating": round(agg.average_rating, 1), "review_count": agg.review_count}
            )
        merged.append(listing)
    return merged


async def _query_backend(
    query: str,
    category: str,
    request: SearchRequest,
    postal_code: str,
    user_location: Coordinates | None,
    now: datetime | None,
) -> tuple[list[dict[str, Any]], str, Coordinates | None]:
    """Pick the backend path; returns rows, the path name and any location it reported."""
    filters = request.filters
    subcategory = filters.subcategory or None

    if request.use_location_search:
        rows, reported = await asyncio.to_thread(
            search_with_location, query, category, user_location, postal_code or None
        )
        if subcategory:
            rows = [r for r in rows if subcategory in (r.get("subcategory") or [])]
        return rows, "location_function", reported

    if query:
        rows = await asyncio.to_thread(
            search_providers,
            query,
            category=category,
            subcategory=subcategory,
            postal_code=postal_code or None,
            open_now=filters.open_now,
            now=now,
        )
        return rows, "rpc", None

    rows = await asyncio.to_thread(
        fetch_listings,
        category=category,
        subcategory=subcategory,
        postal_code=postal_code or None,
        open_now=filters.open_now,
        now=now,
    )
    return rows, "table", None


async def run_search(
    request: SearchRequest,
    *,
    session_key: str = "default",
    previous_location: Coordinates | None = None,
    generations: GenerationTracker | None = None,
    resolver: LocationResolver | None = None,
    geocode: Geocoder | None = geocode_address,
    config: SearchConfig = DEFAULT_SEARCH_CONFIG,
    now: datetime | None = None,
) -> SearchResponse:
    """Run one search from raw request to sorted, annotated results.

    Raises InvalidPostalCode before any query when the postal code is malformed.
    A response whose generation was overtaken by a newer search for the same
    *session_key* comes back empty with ``superseded=True``.
    """
    postal_code = request.postal_code.strip()
    if postal_code and not validate_postal_code(postal_code):
        raise InvalidPostalCode("Invalid postal code", "Postal code must be 6 digits")

    generations = generations or _generations
    resolver = resolver or LocationResolver(geocode=geocode or geocode_address)
    start = time.time()
    generation = generations.begin(session_key)

    # 1. Location
    user_location = request.user_location
    location_label: str | None = None
    notice: str | None = None
    if user_location is None and (request.location_text or request.device is not None):
        resolved = await resolver.resolve(request.location_text, request.device)
        user_location, location_label, notice = resolved.coordinates, resolved.label, resolved.notice

    cache.clear_cache_on_location_change(
        previous_location, user_location, config.location_change_threshold_km
    )

    # 2. Query text and category
    query = sanitize_search_query(request.query)
    if request.enhance and query:
        query = await enhance_query(query, user_location is not None, user_location)
    query, category = await asyncio.to_thread(
        process_natural_language_query, query, request.filters.category
    )

    # 3. Backend
    rows, source, reported = await _query_backend(
        query, category, request, postal_code, user_location, now
    )
    if user_location is None and reported is not None:
        user_location = reported
    listings = [normalize_listing(row) for row in rows if row.get("id") or row.get("provider_id")]
    if listings:
        aggregates = await asyncio.to_thread(fetch_review_aggregates, [listing.id for listing in listings])
        listings = _merge_reviews(listings, aggregates)

    # 4. Annotate, filter, sort
    hits_before = cache.get_cache_stats()["hits"]
    annotated = await annotate_batch(listings, user_location, geocode)
    cache_hit = cache.get_cache_stats()["hits"] > hits_before
    filtered = apply_filters(
        annotated, request.filters, check_open_now=source != "table", now=now
    )
    limit = min(request.limit, config.max_results)
    results = sort_listings(filtered, request.filters.sort_by)[:limit]

    superseded = not generations.is_current(session_key, generation)
    elapsed_ms = round((time.time() - start) * 1000, 1)

    record_event("search", {
        "query": query,
        "category": category,
        "postal_code": postal_code or None,
        "location_label": location_label,
        "has_location": user_location is not None,
        "source": source,
        "sort_by": request.filters.sort_by,
        "min_rating": request.filters.min_rating,
        "distance_km": request.filters.distance_km,
        "price_tier": request.filters.price_tier,
        "open_now": request.filters.open_now,
        "hidden_gem_only": request.filters.hidden_gem_only,
        "must_visit_only": request.filters.must_visit_only,
        "results_count": 0 if superseded else len(results),
        "response_time_ms": elapsed_ms,
        "cache_hit": cache_hit,
        "superseded": superseded,
    })

    if superseded:
        logger.info("Search generation %d for %s superseded; dropping results", generation, session_key)
        return SearchResponse(
            results=[],
            total_candidates=0,
            query=query,
            category=category,
            user_location=user_location,
            location_label=location_label,
            notice=notice,
            generation=generation,
            superseded=True,
        )

    logger.info(
        "Search %r (%s via %s): %d candidates, %d results in %.1f ms",
        query, category, source, len(listings), len(results), elapsed_ms,
    )
    return SearchResponse(
        results=results,
        total_candidates=len(listings),
        query=query,
        category=category,
        user_location=user_location,
        location_label=location_label,
        notice=notice,
        generation=generation,
    )
