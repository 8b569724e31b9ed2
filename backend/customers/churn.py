"""
Churn analysis by days since last purchase.

  days ≤ 54 (90 × 0.6)   → active
  54 < days ≤ 90         → at risk
  days > 90              → churned
  no completed purchase  → churned
"""

from typing import Any

from analytics.features import CustomerActivity

CHURN_THRESHOLD_DAYS = 90
AT_RISK_FRACTION = 0.6

HIGH_CHURN_RATE_PCT = 30
AT_RISK_TO_ACTIVE_RATIO = 0.2


def classify_churn_status(activity: CustomerActivity) -> str:
    """Return "active", "at_risk" or "churned" for one customer."""
    if activity.frequency == 0:
        return "churned"
    if activity.recency > CHURN_THRESHOLD_DAYS:
        return "churned"
    if activity.recency > CHURN_THRESHOLD_DAYS * AT_RISK_FRACTION:
        return "at_risk"
    return "active"


def analyze_churn(activity: dict[str, CustomerActivity]) -> dict[str, Any]:
    """
    Count customers per churn status and surface advisory risk factors.

    The churn rate is a percentage of the whole cohort (0 for an empty one).
    """
    counts = {"active": 0, "at_risk": 0, "churned": 0}
    for customer_activity in activity.values():
        counts[classify_churn_status(customer_activity)] += 1

    total = len(activity)
    churn_rate = (counts["churned"] / total) * 100 if total > 0 else 0

    risk_factors: list[str] = []
    retention_recommendations: list[str] = []

    if churn_rate > HIGH_CHURN_RATE_PCT:
        risk_factors.append("High churn rate indicates customer satisfaction issues")
        retention_recommendations.append("Implement customer feedback surveys")
        retention_recommendations.append("Review product quality and service standards")

    if counts["at_risk"] > counts["active"] * AT_RISK_TO_ACTIVE_RATIO:
        risk_factors.append("Large number of customers at risk of churning")
        retention_recommendations.append("Launch targeted retention campaigns")
        retention_recommendations.append("Implement personalized outreach programs")

    return {
        "total_customers": total,
        "active_customers": counts["active"],
        "at_risk_customers": counts["at_risk"],
        "churned_customers": counts["churned"],
        "churn_rate": churn_rate,
        "risk_factors": risk_factors,
        "retention_recommendations": retention_recommendations,
    }
