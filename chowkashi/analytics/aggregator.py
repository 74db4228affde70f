from __future__ import annotations

from collections import Counter
from typing import Any

_FILTER_FLAGS = ("open_now", "hidden_gem_only", "must_visit_only")


def _top(counter: Counter[str], n: int = 10) -> list[dict[str, Any]]:
    return [{"name": name, "count": count} for name, count in counter.most_common(n)]


def compute_analytics(events: list[dict[str, Any]]) -> dict[str, Any]:
    searches = [e for e in events if e["type"] == "search"]
    total = len(searches)

    # Average response time
    times = [s["response_time_ms"] for s in searches if "response_time_ms" in s]
    avg_time = round(sum(times) / len(times), 1) if times else 0.0

    top_queries = _top(Counter(s["query"] for s in searches if s.get("query")))
    top_categories = _top(Counter(s.get("category") or "all" for s in searches))
    top_postal_codes = _top(Counter(s["postal_code"] for s in searches if s.get("postal_code")))
    sort_usage = dict(Counter(s.get("sort_by", "rating") for s in searches))
    source_usage = dict(Counter(s.get("source", "table") for s in searches))

    # Filter usage rates
    filter_counts = {"category": 0, "postal_code": 0, "rating": 0, "price_tier": 0, "location": 0}
    filter_counts.update({flag: 0 for flag in _FILTER_FLAGS})
    for s in searches:
        if s.get("category") not in (None, "", "all"):
            filter_counts["category"] += 1
        if s.get("postal_code"):
            filter_counts["postal_code"] += 1
        if s.get("min_rating", 0) > 0:
            filter_counts["rating"] += 1
        if s.get("price_tier", 3) < 3:
            filter_counts["price_tier"] += 1
        if s.get("has_location"):
            filter_counts["location"] += 1
        for flag in _FILTER_FLAGS:
            if s.get(flag):
                filter_counts[flag] += 1
    filter_usage = {
        k: round(v / total * 100, 1) if total else 0.0
        for k, v in filter_counts.items()
    }

    zero_results = sum(1 for s in searches if not s.get("superseded") and s.get("results_count", 0) == 0)
    superseded = sum(1 for s in searches if s.get("superseded"))

    # Distance cache usage per search
    cache_hits = sum(1 for s in searches if s.get("cache_hit"))
    cache_misses = total - cache_hits

    return {
        "total_searches": total,
        "avg_response_time_ms": avg_time,
        "top_queries": top_queries,
        "top_categories": top_categories,
        "top_postal_codes": top_postal_codes,
        "sort_usage": sort_usage,
        "source_usage": source_usage,
        "filter_usage": filter_usage,
        "zero_result_searches": zero_results,
        "superseded_searches": superseded,
        "cache_stats": {
            "hits": cache_hits,
            "misses": cache_misses,
            "hit_rate": round(cache_hits / total * 100, 1) if total else 0.0,
        },
    }
