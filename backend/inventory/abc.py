"""
ABC Classification — Pareto split of products by revenue contribution.

Products are ranked by line revenue (descending) and walked while tracking
the cumulative share of total revenue:

  cumulative share ≤ 0.80 → A
  cumulative share ≤ 0.95 → B
  otherwise               → C

Products without revenue in the window are left out of the map; callers
treat a missing product as class C.
"""

from typing import Literal

import structlog

from analytics.features import ProductSalesHistory

logger = structlog.get_logger()

AbcClass = Literal["A", "B", "C"]

A_THRESHOLD = 0.80
B_THRESHOLD = 0.95


def classify_abc(product_revenue: dict[str, float]) -> dict[str, AbcClass]:
    """
    Args:
        product_revenue: product_id → revenue in the analysis window

    Returns:
        product_id → "A" | "B" | "C", in ranking order.
    """
    ranked = sorted(
        ((pid, revenue) for pid, revenue in product_revenue.items() if revenue != 0),
        key=lambda item: item[1],
        reverse=True,
    )
    total_revenue = sum(revenue for _, revenue in ranked)
    if total_revenue == 0:
        return {}

    classification: dict[str, AbcClass] = {}
    cumulative = 0.0
    for product_id, revenue in ranked:
        cumulative += revenue
        share = cumulative / total_revenue
        if share <= A_THRESHOLD:
            classification[product_id] = "A"
        elif share <= B_THRESHOLD:
            classification[product_id] = "B"
        else:
            classification[product_id] = "C"

    logger.debug(
        "abc.classified",
        products=len(classification),
        a=sum(1 for c in classification.values() if c == "A"),
    )
    return classification


def classify_products(histories: dict[str, ProductSalesHistory]) -> dict[str, AbcClass]:
    """ABC classes straight from extracted sales histories."""
    return classify_abc({pid: history.revenue for pid, history in histories.items()})
