from __future__ import annotations

from collections import Counter
from typing import Any

from .store import RESOLUTION_EVENT


def _rate(part: float, whole: float) -> float:
    return round(part / whole * 100, 1) if whole else 0.0


def compute_analytics(events: list[dict[str, Any]]) -> dict[str, Any]:
    runs = [e for e in events if e["type"] == RESOLUTION_EVENT]
    succeeded = [r for r in runs if r.get("success")]
    failed = [r for r in runs if not r.get("success")]

    # Average response time over every run, failed ones included
    times = [r["response_time_ms"] for r in runs if "response_time_ms" in r]
    avg_time = round(sum(times) / len(times), 1) if times else 0.0

    # Elimination rate: eliminated / (eliminated + ranked)
    eliminated = sum(r.get("eliminated_count", 0) for r in succeeded)
    ranked = sum(r.get("ranked_count", 0) for r in succeeded)
    dropped = sum(r.get("dropped_count", 0) for r in succeeded)

    # Which hard constraints knock candidates out most often
    kind_counter: Counter[str] = Counter()
    for r in succeeded:
        kind_counter.update(r.get("elimination_kinds", {}))
    top_elimination_kinds = [
        {"name": n, "count": c} for n, c in kind_counter.most_common()
    ]

    # Narrative service health
    explained = sum(r.get("explained_count", 0) for r in succeeded)
    fallbacks = sum(r.get("fallback_count", 0) for r in succeeded)

    error_counter: Counter[str] = Counter(r.get("error", "unknown") for r in failed)

    avg_members = (
        round(sum(r.get("member_count", 0) for r in succeeded) / len(succeeded), 1)
        if succeeded else 0.0
    )

    return {
        "total_resolutions": len(runs),
        "successful_resolutions": len(succeeded),
        "failed_resolutions": len(failed),
        "avg_response_time_ms": avg_time,
        "avg_member_count": avg_members,
        "candidates": {
            "eliminated": eliminated,
            "ranked": ranked,
            "dropped_malformed": dropped,
            "elimination_rate": _rate(eliminated, eliminated + ranked),
        },
        "top_elimination_kinds": top_elimination_kinds,
        "explanations": {
            "attempted": explained,
            "fallbacks": fallbacks,
            "fallback_rate": _rate(fallbacks, explained),
        },
        "errors": dict(error_counter),
    }
