from __future__ import annotations

import logging

from supabase import Client, create_client

from .config import DEFAULT_SUPABASE_CONFIG, ConfigError, SupabaseConfig

logger = logging.getLogger(__name__)

_client: Client | None = None


def create_supabase_client(config: SupabaseConfig = DEFAULT_SUPABASE_CONFIG) -> Client:
    config.require()
    return create_client(config.url, config.key)


def get_client(config: SupabaseConfig = DEFAULT_SUPABASE_CONFIG) -> Client | None:
    """Return the shared client, creating it on first call.

    Returns None when Supabase is not configured so callers can fall back to
    empty results instead of failing start-up.
    """
    global _client
    if _client is None:
        try:
            _client = create_supabase_client(config)
        except ConfigError as exc:
            logger.warning("Supabase unavailable: %s", exc)
            return None
        except Exception:
            logger.warning("Failed to create Supabase client", exc_info=True)
            return None
    return _client


def set_client(client: Client | None) -> None:
    """Install (or drop, with None) the shared client. Used by tests."""
    global _client
    _client = client
