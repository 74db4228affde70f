from __future__ import annotations

import json
import logging
from datetime import datetime
from typing import Any

from .models import BusinessListing
from .sanitize import normalize_phone_number, validate_and_sanitize_price

logger = logging.getLogger(__name__)


def ensure_string_list(value: Any) -> list[str]:
    """Coerce a column that may hold a list, a JSON-encoded list or a scalar."""
    if isinstance(value, list):
        return [item for item in value if isinstance(item, str)]
    if isinstance(value, str):
        if not value.strip():
            return []
        try:
            parsed = json.loads(value)
        except ValueError:
            return [value]
        if isinstance(parsed, list):
            return [item for item in parsed if isinstance(item, str)]
        return [value]
    return []


def _parse_timestamp(value: Any) -> datetime | None:
    if isinstance(value, datetime):
        return value
    if not value or not isinstance(value, str):
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        logger.debug("Unparseable timestamp %r", value)
        return None


def _as_float(value: Any) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _first(raw: dict[str, Any], *keys: str) -> Any:
    for key in keys:
        if raw.get(key) is not None:
            return raw[key]
    return None


def normalize_listing(raw: dict[str, Any]) -> BusinessListing:
    """Map a raw ``service_providers`` row (or remote search record) to a listing."""
    area = raw.get("area") or ""
    city = raw.get("city") or ""
    address = raw.get("address") or ", ".join(part for part in (area, city) if part)

    rating = _as_float(_first(raw, "rating", "average_rating")) or 0.0
    review_count = _first(raw, "review_count", "reviewCount")

    return BusinessListing(
        id=str(_first(raw, "id", "provider_id") or ""),
        name=_first(raw, "name", "provider_name") or "",
        category=raw.get("category") or "",
        subcategory=ensure_string_list(raw.get("subcategory")),
        description=raw.get("description") or "",
        address=address,
        area=area,
        city=city,
        postal_code=(str(raw["postal_code"]).strip() or None) if raw.get("postal_code") else None,
        map_link=raw.get("map_link") or None,
        latitude=_as_float(raw.get("latitude")),
        longitude=_as_float(raw.get("longitude")),
        price_range_min=validate_and_sanitize_price(raw.get("price_range_min")),
        price_range_max=validate_and_sanitize_price(raw.get("price_range_max")),
        price_unit=raw.get("price_unit") or None,
        availability_days=ensure_string_list(raw.get("availability_days")),
        availability_start_time=raw.get("availability_start_time") or None,
        availability_end_time=raw.get("availability_end_time") or None,
        is_hidden_gem=bool(_first(raw, "is_hidden_gem", "isHiddenGem", "hidden_gem")),
        is_must_visit=bool(_first(raw, "is_must_visit", "isMustVisit", "must_visit")),
        rating=max(0.0, min(5.0, rating)),
        review_count=int(review_count) if isinstance(review_count, (int, float)) else 0,
        created_at=_parse_timestamp(raw.get("created_at")),
        images=ensure_string_list(raw.get("images")),
        tags=ensure_string_list(raw.get("tags")),
        contact_phone=normalize_phone_number(raw.get("contact_phone")) or raw.get("contact_phone") or None,
    )
