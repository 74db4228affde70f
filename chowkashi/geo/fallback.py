"""
Identifier-derived fallback coordinates.

Listings that carry neither coordinates nor a parsable map link still get a
distance so they are not dropped from results. The position is derived from
the listing identifier and offset from the Bengaluru city centre by less than
0.1 degree. It is an approximation, not a measurement.
"""
from __future__ import annotations

import hashlib
import math
import re

from .models import Coordinates

BASE_COORDINATES = Coordinates(lat=12.9716, lng=77.5946)
_SPAN = 0.1

_NUMERIC_PREFIX_RE = re.compile(r"^\s*[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")


def _numeric_prefix(identifier: str) -> float | None:
    match = _NUMERIC_PREFIX_RE.match(identifier)
    if not match:
        return None
    value = float(match.group(0))
    return value if math.isfinite(value) else None


def _hashed_offset(identifier: str) -> float:
    digest = hashlib.sha256(identifier.encode()).digest()
    return int.from_bytes(digest[:8], "big") / 2**64 * _SPAN


def fallback_coordinates(identifier: str | int | None) -> Coordinates:
    """Deterministic pseudo-coordinate for *identifier*.

    Numeric identifiers (or identifiers with a leading number) use
    ``fmod(n, 0.1)`` as the offset; anything else uses a stable hash.
    """
    raw = "" if identifier is None else str(identifier)
    number = _numeric_prefix(raw)
    offset = math.fmod(number, _SPAN) if number is not None else _hashed_offset(raw)
    return Coordinates(
        lat=BASE_COORDINATES.lat + offset,
        lng=BASE_COORDINATES.lng + offset,
    )
