from __future__ import annotations

import json
import logging
from typing import Any

from ..geo.models import Coordinates
from .client import get_client
from .config import DEFAULT_SUPABASE_CONFIG, SupabaseConfig

logger = logging.getLogger(__name__)

ENHANCE_FUNCTION = "enhance-search"
LOCATION_SEARCH_FUNCTION = "enhanced-search-with-location"


def _decode(payload: Any) -> dict[str, Any]:
    """Edge functions answer with bytes, text or an already parsed body."""
    if isinstance(payload, (bytes, bytearray)):
        payload = payload.decode("utf-8")
    if isinstance(payload, str):
        payload = json.loads(payload) if payload.strip() else {}
    if not isinstance(payload, dict):
        raise ValueError(f"Unexpected function response: {payload!r}")
    return payload


def _invoke(name: str, body: dict[str, Any], config: SupabaseConfig) -> dict[str, Any] | None:
    client = get_client(config)
    if client is None:
        return None
    try:
        raw = client.functions.invoke(name, invoke_options={"body": body})
        return _decode(raw)
    except Exception:
        logger.warning("Edge function %s failed", name, exc_info=True)
        return None


def enhance_search(
    query: str,
    near_me: bool = True,
    user_location: Coordinates | None = None,
    config: SupabaseConfig = DEFAULT_SUPABASE_CONFIG,
) -> str:
    """Rewrite *query* remotely; the original query comes back on any failure."""
    body = {
        "query": query,
        "nearMe": near_me,
        "userLocation": user_location.model_dump() if user_location else None,
    }
    data = _invoke(ENHANCE_FUNCTION, body, config)
    enhanced = (data or {}).get("enhanced")
    if isinstance(enhanced, str) and enhanced.strip():
        return enhanced.strip()
    return query


def search_with_location(
    query: str,
    category: str = "all",
    user_location: Coordinates | None = None,
    postal_code: str | None = None,
    config: SupabaseConfig = DEFAULT_SUPABASE_CONFIG,
) -> tuple[list[dict[str, Any]], Coordinates | None]:
    """Location-aware search; returns the provider rows and the location the function used."""
    body = {
        "searchQuery": query,
        "categoryFilter": category,
        "userLat": user_location.lat if user_location else None,
        "userLng": user_location.lng if user_location else None,
        "postalCode": postal_code or None,
    }
    data = _invoke(LOCATION_SEARCH_FUNCTION, body, config)
    if data is None:
        return [], None

    providers = data.get("providers") or []
    location = None
    reported = data.get("userLocation")
    if isinstance(reported, dict):
        try:
            location = Coordinates(lat=reported["lat"], lng=reported["lng"])
        except (KeyError, ValueError):
            logger.warning("Ignoring malformed userLocation %r", reported)
    return providers, location
