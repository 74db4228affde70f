from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv

load_dotenv()


@dataclass(frozen=True)
class SearchConfig:
    cache_ttl_seconds: float = float(os.getenv("DISTANCE_CACHE_TTL_SECONDS", "3600"))
    location_change_threshold_km: float = float(os.getenv("LOCATION_CHANGE_THRESHOLD_KM", "5"))
    max_results: int = int(os.getenv("SEARCH_MAX_RESULTS", "50"))
    default_radius_km: float = float(os.getenv("DEFAULT_RADIUS_KM", "50"))


DEFAULT_SEARCH_CONFIG = SearchConfig()
