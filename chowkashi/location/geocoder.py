from __future__ import annotations

import logging

import httpx
from pydantic import ValidationError

from ..geo.models import Coordinates
from .config import DEFAULT_GEOCODER_CONFIG, GeocoderConfig

logger = logging.getLogger(__name__)


async def geocode_address(
    address: str,
    config: GeocoderConfig = DEFAULT_GEOCODER_CONFIG,
    client: httpx.AsyncClient | None = None,
) -> Coordinates | None:
    """
    Resolve *address* (free text or a postal code) to coordinates.

    Returns None when geocoding is disabled, the service fails, or nothing
    matches; failures are logged, never raised.
    """
    address = address.strip()
    if not config.enabled or not address:
        return None

    params = {"format": "json", "q": address, "limit": 1}
    if config.country_codes:
        params["countrycodes"] = config.country_codes
    headers = {"User-Agent": config.user_agent}

    try:
        if client is None:
            async with httpx.AsyncClient(timeout=config.timeout) as owned:
                response = await owned.get(config.base_url, params=params, headers=headers)
        else:
            response = await client.get(config.base_url, params=params, headers=headers)
        response.raise_for_status()
        payload = response.json()
    except (httpx.HTTPError, ValueError):
        logger.warning("Geocoding request failed for %r", address, exc_info=True)
        return None

    if not isinstance(payload, list) or not payload:
        logger.info("No geocoding match for %r", address)
        return None

    first = payload[0]
    try:
        return Coordinates(lat=float(first["lat"]), lng=float(first["lon"]))
    except (KeyError, TypeError, ValueError, ValidationError):
        logger.warning("Malformed geocoding result for %r: %r", address, first)
        return None
