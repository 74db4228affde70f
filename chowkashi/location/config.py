from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv

load_dotenv()


@dataclass(frozen=True)
class GeocoderConfig:
    base_url: str = os.getenv("GEOCODER_URL", "https://nominatim.openstreetmap.org/search")
    user_agent: str = os.getenv("GEOCODER_USER_AGENT", "Chowkashi/1.0")
    country_codes: str = os.getenv("GEOCODER_COUNTRY_CODES", "in")
    timeout: float = 10.0
    enabled: bool = os.getenv("GEOCODER_ENABLED", "true").lower() in {"1", "true", "yes"}


DEFAULT_GEOCODER_CONFIG = GeocoderConfig()
