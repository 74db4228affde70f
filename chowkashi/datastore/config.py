from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv

load_dotenv()


class ConfigError(RuntimeError):
    """Raised when a required setting is missing."""


@dataclass(frozen=True)
class SupabaseConfig:
    url: str = os.getenv("SUPABASE_URL", "")
    key: str = os.getenv("SUPABASE_KEY", "")
    listings_table: str = "service_providers"
    reviews_table: str = "business_reviews"
    page_size: int = int(os.getenv("SUPABASE_PAGE_SIZE", "50"))

    def require(self) -> None:
        if not self.url:
            raise ConfigError("SUPABASE_URL is not set")
        if not self.key:
            raise ConfigError("SUPABASE_KEY is not set")


DEFAULT_SUPABASE_CONFIG = SupabaseConfig()
