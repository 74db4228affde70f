from __future__ import annotations

import json
import logging
from typing import Any

import pandas as pd
from pydantic import BaseModel, Field

from .client import get_client
from .config import DEFAULT_SUPABASE_CONFIG, SupabaseConfig

logger = logging.getLogger(__name__)


class ReviewAggregate(BaseModel):
    business_id: str
    average_rating: float = 0.0
    review_count: int = 0
    average_criteria_ratings: dict[str, float] = Field(default_factory=dict)


def _criteria(value: Any) -> dict[str, Any]:
    if isinstance(value, dict):
        return value
    if isinstance(value, str) and value.strip():
        try:
            parsed = json.loads(value)
        except json.JSONDecodeError:
            logger.warning("Ignoring malformed criteria_ratings: %r", value)
            return {}
        return parsed if isinstance(parsed, dict) else {}
    return {}


def aggregate_reviews(rows: list[dict[str, Any]], business_ids: list[str]) -> dict[str, ReviewAggregate]:
    """Average rating, review count and per-criterion averages per business.

    Every requested id appears in the result; ids without reviews get zeros.
    """
    result = {bid: ReviewAggregate(business_id=bid) for bid in business_ids}
    if not rows or not business_ids:
        return result

    df = pd.DataFrame(rows)
    if "business_id" not in df.columns:
        return result
    df["business_id"] = df["business_id"].astype(str)
    df = df[df["business_id"].isin(list(result))].copy()
    if df.empty:
        return result

    df["rating"] = pd.to_numeric(df["rating"], errors="coerce") if "rating" in df.columns else float("nan")
    summary = df.groupby("business_id")["rating"].agg(["mean", "size"])

    criteria_records = [
        {"business_id": bid, "criterion": str(name), "rating": score}
        for bid, raw in zip(df["business_id"], df.get("criteria_ratings", pd.Series(dtype=object)))
        for name, score in _criteria(raw).items()
    ]
    criteria_means: dict[str, dict[str, float]] = {}
    if criteria_records:
        cdf = pd.DataFrame(criteria_records)
        cdf["rating"] = pd.to_numeric(cdf["rating"], errors="coerce")
        for (bid, criterion), mean in cdf.groupby(["business_id", "criterion"])["rating"].mean().dropna().items():
            criteria_means.setdefault(bid, {})[criterion] = float(mean)

    for bid, row in summary.iterrows():
        mean = row["mean"]
        result[bid] = ReviewAggregate(
            business_id=bid,
            average_rating=0.0 if pd.isna(mean) else float(mean),
            review_count=int(row["size"]),
            average_criteria_ratings=criteria_means.get(bid, {}),
        )
    return result


def fetch_review_aggregates(
    business_ids: list[str],
    config: SupabaseConfig = DEFAULT_SUPABASE_CONFIG,
) -> dict[str, ReviewAggregate]:
    if not business_ids:
        return {}
    client = get_client(config)
    if client is None:
        return aggregate_reviews([], business_ids)

    try:
        response = (
            client.table(config.reviews_table)
            .select("business_id, rating, criteria_ratings")
            .in_("business_id", business_ids)
            .execute()
        )
    except Exception:
        logger.warning("Review aggregation query failed", exc_info=True)
        return aggregate_reviews([], business_ids)

    return aggregate_reviews(response.data or [], business_ids)
