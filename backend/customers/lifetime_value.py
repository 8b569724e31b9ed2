"""
Customer Lifetime Value — historical spend ranking and value tiers.

CLV here is cumulative completed spend inside the analysis window, used as a
ranking proxy rather than a forecast.

Tiers over the customers sorted by value (descending), n = cohort size:
  vip           top floor(n × 0.1)
  high_value    up to floor(n × 0.2)
  medium_value  floor(n × 0.5)         (count only)
  low_value     n − floor(n × 0.7)     (count only)

The four counts do not add up to n. Reports have always published these
numbers, so they are kept as-is.
"""

import math
from typing import Any

from analytics.features import CustomerActivity
from analytics.records import Customer


def calculate_lifetime_value(
    customers: list[Customer],
    activity: dict[str, CustomerActivity],
) -> dict[str, Any]:
    values = {c.id: activity[c.id].monetary if c.id in activity else 0.0 for c in customers}

    average_clv = sum(values.values()) / len(values) if values else 0

    # Stable sort: equal spenders keep cohort order
    ranked = sorted(values.items(), key=lambda item: item[1], reverse=True)
    total = len(ranked)
    top_ten = math.floor(total * 0.1)
    top_twenty = math.floor(total * 0.2)

    by_id = {c.id: c for c in customers}
    high_value_customers = [
        {
            "customer_id": customer_id,
            "name": by_id[customer_id].name or "Unknown",
            "email": by_id[customer_id].email,
            "lifetime_value": value,
        }
        for customer_id, value in ranked[:top_ten]
    ]

    def _min_value(count: int) -> float:
        return ranked[count - 1][1] if count > 0 else 0

    clv_segments = {
        "vip": {"count": top_ten, "min_value": _min_value(top_ten)},
        "high_value": {"count": top_twenty - top_ten, "min_value": _min_value(top_twenty)},
        "medium_value": {"count": math.floor(total * 0.5), "min_value": 0},
        "low_value": {"count": total - math.floor(total * 0.7), "min_value": 0},
    }

    return {
        "average_clv": average_clv,
        "high_value_customers": high_value_customers,
        "clv_segments": clv_segments,
    }
