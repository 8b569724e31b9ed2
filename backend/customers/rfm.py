"""
RFM Scorer — quintile-based Recency / Frequency / Monetary scores.

Quintile boundaries are the values at positions floor(n×0.2), floor(n×0.4),
floor(n×0.6) and floor(n×0.8) of a sorted array:
  - recency sorted ascending (fewer days is better)
  - frequency and monetary sorted descending

A value scores 1 if ≤ q1, 2 if ≤ q2, 3 if ≤ q3, 4 if ≤ q4, else 5. The
recency score is inverted (6 − raw) so that 5 is always "best".

Because frequency / monetary boundaries come from a descending sort, q1 is
the largest cut point: in practice those dimensions resolve to 1 for most of
the cohort and 5 for the very top. That behavior is intentional and kept.

Usage:
    from customers.rfm import score_customers

    metrics = score_customers(customers, activity)
    metrics["cust-1"].rfm_score   # → 511
"""

import math
from dataclasses import asdict, dataclass

from analytics.features import CustomerActivity
from analytics.records import Customer

QUINTILE_POSITIONS = (0.2, 0.4, 0.6, 0.8)


@dataclass(frozen=True)
class Quintiles:
    q1: float
    q2: float
    q3: float
    q4: float


@dataclass(frozen=True)
class CustomerMetrics:
    """RFM inputs and scores for one customer."""

    customer_id: str
    name: str
    email: str | None
    recency: int
    frequency: int
    monetary: float
    r_score: int
    f_score: int
    m_score: int

    @property
    def rfm_score(self) -> int:
        return int(f"{self.r_score}{self.f_score}{self.m_score}")

    def to_dict(self) -> dict:
        payload = asdict(self)
        payload["rfm_score"] = self.rfm_score
        return payload


def calculate_quintiles(sorted_values: list[float]) -> Quintiles | None:
    """
    Cut points of an already-sorted array.

    Returns None for an empty array (there is nobody to score).
    """
    n = len(sorted_values)
    if n == 0:
        return None
    q1, q2, q3, q4 = (sorted_values[math.floor(n * pos)] for pos in QUINTILE_POSITIONS)
    return Quintiles(q1=q1, q2=q2, q3=q3, q4=q4)


def get_quintile_score(value: float, quintiles: Quintiles) -> int:
    """Map a value to 1-5 against the four cut points."""
    if value <= quintiles.q1:
        return 1
    if value <= quintiles.q2:
        return 2
    if value <= quintiles.q3:
        return 3
    if value <= quintiles.q4:
        return 4
    return 5


def score_customers(
    customers: list[Customer],
    activity: dict[str, CustomerActivity],
) -> dict[str, CustomerMetrics]:
    """
    Score every customer in the cohort.

    Args:
        customers: Full cohort, including customers without purchases
        activity: Feature-extractor output keyed by customer id

    Returns:
        CustomerMetrics keyed by customer id, in cohort order.
    """
    cohort = [activity[c.id] for c in customers if c.id in activity]
    recency_q = calculate_quintiles(sorted(a.recency for a in cohort))
    frequency_q = calculate_quintiles(sorted((a.frequency for a in cohort), reverse=True))
    monetary_q = calculate_quintiles(sorted((a.monetary for a in cohort), reverse=True))

    metrics: dict[str, CustomerMetrics] = {}
    for customer in customers:
        features = activity.get(customer.id)
        if features is None:
            continue
        metrics[customer.id] = CustomerMetrics(
            customer_id=customer.id,
            name=customer.name,
            email=customer.email,
            recency=features.recency,
            frequency=features.frequency,
            monetary=features.monetary,
            r_score=6 - get_quintile_score(features.recency, recency_q),
            f_score=get_quintile_score(features.frequency, frequency_q),
            m_score=get_quintile_score(features.monetary, monetary_q),
        )
    return metrics
