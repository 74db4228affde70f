from __future__ import annotations

import asyncio
import logging

from ..datastore.functions import enhance_search
from ..geo.models import Coordinates
from .sanitize import sanitize_search_query

logger = logging.getLogger(__name__)


async def enhance_query(
    query: str,
    near_me: bool = True,
    user_location: Coordinates | None = None,
) -> str:
    """Sanitize *query* and let the remote function rewrite it.

    The sanitized query is returned unchanged when enhancement fails.
    """
    cleaned = sanitize_search_query(query)
    if not cleaned:
        return cleaned
    enhanced = await asyncio.to_thread(enhance_search, cleaned, near_me, user_location)
    enhanced = sanitize_search_query(enhanced) or cleaned
    if enhanced != cleaned:
        logger.info("Enhanced query %r -> %r", cleaned, enhanced)
    return enhanced
