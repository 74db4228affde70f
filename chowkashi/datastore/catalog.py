from __future__ import annotations

import logging

from .client import get_client
from .config import DEFAULT_SUPABASE_CONFIG, SupabaseConfig

logger = logging.getLogger(__name__)


def _names(table: str, config: SupabaseConfig) -> list[str]:
    client = get_client(config)
    if client is None:
        return []
    try:
        response = client.table(table).select("name").order("name").execute()
    except Exception:
        logger.warning("Failed to read %s", table, exc_info=True)
        return []
    return [row["name"] for row in response.data or [] if row.get("name")]


def fetch_categories(config: SupabaseConfig = DEFAULT_SUPABASE_CONFIG) -> list[str]:
    return _names("categories", config)


def fetch_languages(config: SupabaseConfig = DEFAULT_SUPABASE_CONFIG) -> list[str]:
    return _names("languages", config)
