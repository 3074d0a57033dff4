from __future__ import annotations

from collections import Counter
from typing import Any


def _average(values: list[float]) -> float:
    return round(sum(values) / len(values), 1) if values else 0.0


def _top(counter: Counter[str], n: int = 10) -> list[dict[str, Any]]:
    return [{"name": name, "count": count} for name, count in counter.most_common(n)]


def _summarize_searches(searches: list[dict[str, Any]]) -> dict[str, Any]:
    total = len(searches)

    query_counter: Counter[str] = Counter()
    loc_counter: Counter[str] = Counter()
    sort_counter: Counter[str] = Counter()
    for s in searches:
        query_counter[(s.get("query") or "unknown").lower()] += 1
        loc_counter[s.get("location", "unknown")] += 1
        sort_counter[s.get("sort_by", "smart")] += 1

    # Filter usage rates
    filter_counts = {"price_range": 0, "cuisine": 0, "rating": 0}
    for s in searches:
        if s.get("price_range"):
            filter_counts["price_range"] += 1
        if s.get("cuisine"):
            filter_counts["cuisine"] += 1
        if (s.get("min_rating") or 0) > 0:
            filter_counts["rating"] += 1

    cache_hits = sum(1 for s in searches if s.get("cache_hit"))
    single_source = sum(1 for s in searches if s.get("platforms_used", 0) < 2)

    return {
        "total_searches": total,
        "avg_response_time_ms": _average([s["response_time_ms"] for s in searches if "response_time_ms" in s]),
        "avg_results": _average([s["results_returned"] for s in searches if "results_returned" in s]),
        "top_queries": _top(query_counter),
        "top_locations": _top(loc_counter),
        "sort_usage": dict(sort_counter),
        "filter_usage": {
            k: round(v / total * 100, 1) if total else 0.0
            for k, v in filter_counts.items()
        },
        "degraded_searches": single_source,
        "cache_stats": {
            "hits": cache_hits,
            "misses": total - cache_hits,
            "hit_rate": round(cache_hits / total * 100, 1) if total else 0.0,
        },
    }


def _summarize_analyses(analyses: list[dict[str, Any]]) -> dict[str, Any]:
    quality_counter: Counter[str] = Counter(a.get("data_quality", "unknown") for a in analyses)
    return {
        "total_analyses": len(analyses),
        "avg_confidence": _average([a["confidence"] for a in analyses if "confidence" in a]),
        "avg_response_time_ms": _average([a["response_time_ms"] for a in analyses if "response_time_ms" in a]),
        "quality_distribution": dict(quality_counter),
        "synthetic_analyses": sum(1 for a in analyses if a.get("synthetic_sources")),
    }


def compute_analytics(events: list[dict[str, Any]]) -> dict[str, Any]:
    searches = [e for e in events if e["type"] == "search"]
    analyses = [e for e in events if e["type"] == "analysis"]
    return {
        **_summarize_searches(searches),
        "analyses": _summarize_analyses(analyses),
    }
