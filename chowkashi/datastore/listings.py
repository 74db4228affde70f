from __future__ import annotations

import logging
from datetime import datetime
from typing import Any

from .client import get_client
from .config import DEFAULT_SUPABASE_CONFIG, SupabaseConfig

logger = logging.getLogger(__name__)

Row = dict[str, Any]

_TEXT_COLUMNS = ("name", "description", "area")


def _text_condition(text: str) -> str:
    # PostgREST or-syntax; commas and parentheses would split the expression
    cleaned = text.replace(",", " ").replace("(", " ").replace(")", " ").strip()
    return ",".join(f"{column}.ilike.%{cleaned}%" for column in _TEXT_COLUMNS)


def fetch_listings(
    *,
    category: str | None = None,
    subcategory: str | None = None,
    postal_code: str | None = None,
    open_now: bool = False,
    text: str | None = None,
    now: datetime | None = None,
    config: SupabaseConfig = DEFAULT_SUPABASE_CONFIG,
) -> list[Row]:
    """Read approved listings with the filters the table query can apply."""
    client = get_client(config)
    if client is None:
        return []

    query = client.table(config.listings_table).select("*").eq("approval_status", "approved")
    if category and category != "all":
        query = query.ilike("category", category)
    if subcategory:
        query = query.contains("subcategory", [subcategory])
    if postal_code:
        query = query.eq("postal_code", postal_code)
    if open_now:
        now = now or datetime.now()
        current = now.strftime("%H:%M")
        query = (
            query.contains("availability_days", [now.strftime("%A")])
            .lte("availability_start_time", current)
            .gte("availability_end_time", current)
        )
    if text and text.strip():
        query = query.or_(_text_condition(text))

    try:
        response = query.order("created_at", desc=True).limit(config.page_size).execute()
    except Exception:
        logger.warning("Listing query failed", exc_info=True)
        return []

    rows = response.data or []
    logger.info("Fetched %d listings (category=%s, postal_code=%s)", len(rows), category, postal_code)
    return rows


def _matches_category(row: Row, category: str | None, subcategory: str | None) -> bool:
    if category and category != "all" and str(row.get("category", "")).lower() != category.lower():
        return False
    if subcategory:
        values = row.get("subcategory") or []
        if isinstance(values, str):
            values = [values]
        if subcategory not in values:
            return False
    return True


def search_providers(
    text: str,
    *,
    category: str | None = None,
    subcategory: str | None = None,
    postal_code: str | None = None,
    open_now: bool = False,
    now: datetime | None = None,
    config: SupabaseConfig = DEFAULT_SUPABASE_CONFIG,
) -> list[Row]:
    """Ranked full-text search through the ``search_enhanced_providers`` RPC.

    Falls back to the plain table query when the RPC errors or finds nothing.
    """
    client = get_client(config)
    if client is None:
        return []

    rows: list[Row] = []
    try:
        response = client.rpc("search_enhanced_providers", {"search_query": text}).execute()
        rows = response.data or []
    except Exception:
        logger.warning("search_enhanced_providers failed for %r", text, exc_info=True)

    if rows:
        filtered = [r for r in rows if _matches_category(r, category, subcategory)]
        if postal_code:
            filtered = [r for r in filtered if str(r.get("postal_code") or "") == postal_code]
        logger.info("RPC search %r returned %d rows, %d after filters", text, len(rows), len(filtered))
        return filtered

    return fetch_listings(
        category=category,
        subcategory=subcategory,
        postal_code=postal_code,
        open_now=open_now,
        text=text,
        now=now,
        config=config,
    )
