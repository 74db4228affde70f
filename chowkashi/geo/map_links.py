from __future__ import annotations

import logging
import re

from pydantic import ValidationError

from .models import Coordinates

logger = logging.getLogger(__name__)

# Matches ".../@12.9716,77.5946,15z" and "...?q=12.9716,77.5946"
_COORDINATES_RE = re.compile(
    r"@(-?\d+\.\d+),(-?\d+\.\d+)|q=(-?\d+\.\d+),(-?\d+\.\d+)"
)


def extract_coordinates(map_link: str | None) -> Coordinates | None:
    """Parse the coordinates embedded in a mapping-service link.

    Returns ``None`` for empty links, links without a coordinate pair and
    pairs outside the valid latitude/longitude range.
    """
    if not map_link:
        return None

    match = _COORDINATES_RE.search(map_link)
    if not match:
        logger.debug("No coordinates in map link %r", map_link)
        return None

    lat_raw = match.group(1) or match.group(3)
    lng_raw = match.group(2) or match.group(4)
    try:
        return Coordinates(lat=float(lat_raw), lng=float(lng_raw))
    except (ValueError, ValidationError):
        logger.debug("Out-of-range coordinates in map link %r", map_link)
        return None
