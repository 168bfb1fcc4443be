from __future__ import annotations

from collections import Counter
from typing import Any

from ..catalog.models import Facet
from .store import REVIEW_DELETED, REVIEW_RESTORED, REVIEW_SUBMITTED, SEARCH


def compute_analytics(events: list[dict[str, Any]]) -> dict[str, Any]:
    searches = [e for e in events if e["type"] == SEARCH]
    total = len(searches)

    # Average response time
    times = [s["response_time_ms"] for s in searches if "response_time_ms" in s]
    avg_time = round(sum(times) / len(times), 1) if times else 0.0

    # Top search terms (blank terms are plain browsing, not searches)
    term_counter: Counter[str] = Counter()
    for s in searches:
        term = (s.get("search_term") or "").strip().lower()
        if term:
            term_counter[term] += 1
    top_terms = [{"name": n, "count": c} for n, c in term_counter.most_common(10)]

    # Facet usage rates
    facet_counts = {f.value: 0 for f in Facet}
    for s in searches:
        for f in s.get("facets", []) or []:
            if f in facet_counts:
                facet_counts[f] += 1
    facet_usage = {
        k: round(v / total * 100, 1) if total else 0.0
        for k, v in facet_counts.items()
    }

    empty = sum(1 for s in searches if s.get("results_returned", 0) == 0)

    # Review activity
    submitted = [e for e in events if e["type"] == REVIEW_SUBMITTED]
    deleted = sum(1 for e in events if e["type"] == REVIEW_DELETED)
    restored = sum(1 for e in events if e["type"] == REVIEW_RESTORED)
    ratings = [e["rating"] for e in submitted if "rating" in e]

    return {
        "total_searches": total,
        "avg_response_time_ms": avg_time,
        "top_terms": top_terms,
        "facet_usage": facet_usage,
        "empty_result_rate": round(empty / total * 100, 1) if total else 0.0,
        "review_activity": {
            "submitted": len(submitted),
            "deleted": deleted,
            "restored": restored,
            "avg_submitted_rating": round(sum(ratings) / len(ratings), 1) if ratings else 0.0,
        },
    }
