"""
Customer Segmentation — RFM score combinations to named behavioral segments.

Segments are independent predicate buckets, not a partition:
  - a customer can match several segments (e.g. new_customers + potential_loyalists)
  - a customer can match none
  - only loyal_customers explicitly excludes champions

Rules are evaluated in a fixed order so the output mapping is stable:
champions → loyal_customers → potential_loyalists → new_customers →
at_risk → cannot_lose → hibernating → lost
"""

from dataclasses import dataclass
from typing import Any, Callable, Literal

from customers.rfm import CustomerMetrics

SegmentKey = Literal[
    "champions",
    "loyal_customers",
    "potential_loyalists",
    "new_customers",
    "at_risk",
    "cannot_lose",
    "hibernating",
    "lost",
]


def _is_champion(m: CustomerMetrics) -> bool:
    return m.r_score >= 4 and m.f_score >= 4 and m.m_score >= 4


@dataclass(frozen=True)
class SegmentRule:
    key: SegmentKey
    name: str
    description: str
    matches: Callable[[CustomerMetrics], bool]
    characteristics: tuple[str, ...]
    recommendations: tuple[str, ...]


SEGMENT_RULES: tuple[SegmentRule, ...] = (
    SegmentRule(
        key="champions",
        name="Champions",
        description="Best customers - high value, frequent, recent purchases",
        matches=_is_champion,
        characteristics=("High frequency", "High monetary value", "Recent purchases"),
        recommendations=("Reward loyalty", "Ask for reviews", "Upsell premium products"),
    ),
    SegmentRule(
        key="loyal_customers",
        name="Loyal Customers",
        description="Regular customers with good value",
        matches=lambda m: m.r_score >= 3 and m.f_score >= 3 and m.m_score >= 3 and not _is_champion(m),
        characteristics=("Consistent purchases", "Good value", "Reliable"),
        recommendations=("Membership programs", "Cross-sell", "Increase purchase frequency"),
    ),
    SegmentRule(
        key="potential_loyalists",
        name="Potential Loyalists",
        description="Recent customers with potential",
        matches=lambda m: m.r_score >= 3 and m.f_score <= 2 and m.m_score >= 3,
        characteristics=("Recent purchases", "Low frequency", "Good value per transaction"),
        recommendations=("Onboarding campaigns", "Product education", "Frequency incentives"),
    ),
    SegmentRule(
        key="new_customers",
        name="New Customers",
        description="Recent first-time buyers",
        matches=lambda m: m.r_score >= 4 and m.f_score == 1,
        characteristics=("Very recent first purchase", "Unknown potential"),
        recommendations=("Welcome series", "Product recommendations", "Support onboarding"),
    ),
    SegmentRule(
        key="at_risk",
        name="At Risk",
        description="Good customers who haven't purchased recently",
        matches=lambda m: m.r_score <= 2 and m.f_score >= 3 and m.m_score >= 3,
        characteristics=("Was valuable", "Declining frequency", "Need attention"),
        recommendations=("Win-back campaigns", "Surveys", "Special offers"),
    ),
    SegmentRule(
        key="cannot_lose",
        name="Cannot Lose Them",
        description="High-value customers at risk of churning",
        matches=lambda m: m.r_score <= 2 and m.f_score >= 4 and m.m_score >= 4,
        characteristics=("High historical value", "At risk of leaving"),
        recommendations=("Immediate attention", "Personal outreach", "Exclusive offers"),
    ),
    SegmentRule(
        key="hibernating",
        name="Hibernating",
        description="Customers who haven't purchased in a long time",
        matches=lambda m: m.r_score <= 2 and m.f_score <= 2 and m.m_score >= 2,
        characteristics=("Long time since purchase", "Low recent activity"),
        recommendations=("Reactivation campaigns", "Product updates", "Significant incentives"),
    ),
    SegmentRule(
        key="lost",
        name="Lost",
        description="Customers who likely won't return",
        matches=lambda m: m.r_score <= 2 and m.f_score <= 2 and m.m_score <= 2,
        characteristics=("Very low engagement", "Low value", "Minimal activity"),
        recommendations=("Minimal investment", "Last-chance offers", "Unsubscribe options"),
    ),
)


def segment_customers(metrics: dict[str, CustomerMetrics]) -> dict[str, dict[str, Any]]:
    """
    Apply every segment rule to the scored cohort.

    Returns:
        {segment_key: {name, description, customers[], characteristics[], recommendations[]}}
        with all eight keys present, even for empty segments.
    """
    scored = list(metrics.values())
    segments: dict[str, dict[str, Any]] = {}
    for rule in SEGMENT_RULES:
        segments[rule.key] = {
            "name": rule.name,
            "description": rule.description,
            "customers": [m.to_dict() for m in scored if rule.matches(m)],
            "characteristics": list(rule.characteristics),
            "recommendations": list(rule.recommendations),
        }
    return segments


def segment_membership(metrics: CustomerMetrics) -> list[SegmentKey]:
    """All segment keys a single customer falls into, in rule order."""
    return [rule.key for rule in SEGMENT_RULES if rule.matches(metrics)]
