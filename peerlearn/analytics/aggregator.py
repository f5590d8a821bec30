from __future__ import annotations

from collections import Counter
from typing import Any

RANKING_EVENT_TYPES = ("peer_match", "group_discovery")


def _avg(values: list[float]) -> float:
    return round(sum(values) / len(values), 1) if values else 0.0


def compute_analytics(events: list[dict[str, Any]]) -> dict[str, Any]:
    rankings = [e for e in events if e["type"] in RANKING_EVENT_TYPES]
    total = len(rankings)

    # Response time and result sizes
    times = [e["response_time_ms"] for e in rankings if "response_time_ms" in e]
    returned = [e["results_returned"] for e in rankings if "results_returned" in e]

    # Requests per strategy ("peer_match" has a single strategy)
    strategy_counter: Counter[str] = Counter()
    for e in rankings:
        strategy_counter[e.get("strategy") or e["type"]] += 1

    # Empty feeds per strategy
    empty_counter: Counter[str] = Counter()
    for e in rankings:
        if e.get("results_returned", 0) == 0:
            empty_counter[e.get("strategy") or e["type"]] += 1

    joins = [e for e in events if e["type"] == "group_join"]

    return {
        "total_rankings": total,
        "peer_match_requests": sum(1 for e in rankings if e["type"] == "peer_match"),
        "group_discovery_requests": sum(1 for e in rankings if e["type"] == "group_discovery"),
        "avg_response_time_ms": _avg(times),
        "avg_results_returned": _avg(returned),
        "strategy_usage": dict(strategy_counter),
        "empty_results": dict(empty_counter),
        "group_joins": len(joins),
    }
