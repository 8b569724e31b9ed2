"""
Inventory Recommendations — per-product health checks and store-level scoring.

Each product with an inventory record is run through an ordered rule chain.
Priority only ever escalates (low → medium → high → critical); the issue type
reflects the last rule that set one.

Rule chain:
  1. Stockout risk   stock ≤ ROP and selling: ≤3 days → critical, ≤7 days → high
  2. Overstock       more than 90 days of stock → medium
  3. Slow moving     decreasing trend and < 0.1 units/day → medium
  4. Seasonal        current month is a peak month, trend not increasing → medium
  5. ABC             class A at or below ROP → high
  6. ROP drift       stored ROP off by > 20% from the recomputed one → advisory

Health score:
  100 − 40×critical% − 20×high% − 10×medium%  (50 when nothing was analyzed)
"""

import math
from dataclasses import asdict, dataclass
from datetime import datetime, timedelta
from typing import Any, Literal

import structlog

from analytics.records import InventoryRecord, Product
from inventory.abc import AbcClass
from inventory.optimizer import NO_REQUIREMENT, ReorderRequirement
from inventory.seasonality import NO_SEASONALITY, SeasonalityProfile
from inventory.velocity import ZERO_VELOCITY, ProductVelocity

logger = structlog.get_logger()

Priority = Literal["critical", "high", "medium", "low"]
IssueType = Literal["stockout_risk", "reorder_needed", "overstock", "slow_moving", "none"]

PRIORITY_RANK: dict[str, int] = {"critical": 4, "high": 3, "medium": 2, "low": 1}

CRITICAL_STOCKOUT_DAYS = 3
REORDER_STOCKOUT_DAYS = 7
LOST_SALES_DAYS = 7
OVERSTOCK_DAYS = 90
TARGET_COVER_DAYS = 45
MONTHLY_CARRYING_COST_RATE = 0.02  # 2% of unit cost per month
SLOW_MOVING_DAILY_UNITS = 0.1
ROP_DRIFT_TOLERANCE = 0.2
MAX_RECOMMENDATIONS = 50
REVIEW_INTERVAL_DAYS = 7

HEALTH_PENALTIES = {"critical": 40, "high": 20, "medium": 10}
NEUTRAL_HEALTH_SCORE = 50


@dataclass
class FinancialImpact:
    cost_savings: float = 0.0
    revenue_opportunity: float = 0.0
    carrying_cost_reduction: float = 0.0


@dataclass
class InventoryRecommendation:
    product_id: str
    product_name: str
    sku: str
    category: str
    current_stock: int
    recommended_reorder_point: int
    recommended_safety_stock: int
    daily_usage: float
    abc_classification: AbcClass
    priority: Priority
    issue_type: IssueType
    recommendations: list[str]
    warnings: list[str]
    financial_impact: FinancialImpact
    velocity: ProductVelocity
    seasonality: SeasonalityProfile

    @property
    def impact_total(self) -> float:
        return self.financial_impact.cost_savings + self.financial_impact.revenue_opportunity

    def to_dict(self) -> dict[str, Any]:
        return {
            "product_id": self.product_id,
            "product_name": self.product_name,
            "sku": self.sku,
            "category": self.category,
            "current_stock": self.current_stock,
            "recommended_reorder_point": self.recommended_reorder_point,
            "recommended_safety_stock": self.recommended_safety_stock,
            "daily_usage": self.daily_usage,
            "abc_classification": self.abc_classification,
            "priority": self.priority,
            "issue_type": self.issue_type,
            "recommendations": list(self.recommendations),
            "warnings": list(self.warnings),
            "financial_impact": asdict(self.financial_impact),
            "velocity_metrics": self.velocity.to_dict(),
            "seasonality_info": self.seasonality.to_dict(),
        }


def escalate(current: Priority, candidate: Priority) -> Priority:
    """Return the more severe of two priorities."""
    return candidate if PRIORITY_RANK[candidate] > PRIORITY_RANK[current] else current


def analyze_product_inventory(
    product: Product,
    record: InventoryRecord,
    velocity: ProductVelocity,
    classification: AbcClass,
    seasonality: SeasonalityProfile,
    requirement: ReorderRequirement,
    as_of: datetime,
) -> InventoryRecommendation | None:
    """
    Run the rule chain for one product.

    Returns None when no rule fired.
    """
    messages: list[str] = []
    warnings: list[str] = []
    priority: Priority = "low"
    issue_type: IssueType = "none"
    impact = FinancialImpact()

    current_stock = record.quantity
    # A stored ROP of 0 / None means the store never configured one
    reorder_point = record.reorder_point or requirement.reorder_point
    daily_usage = velocity.daily_average

    # 1. Stockout risk
    if current_stock <= reorder_point and daily_usage > 0:
        days_until_stockout = current_stock / daily_usage
        if days_until_stockout <= CRITICAL_STOCKOUT_DAYS:
            messages.append(
                f"Critical: Reorder immediately - only {days_until_stockout:.1f} days of stock remaining"
            )
            priority = escalate(priority, "critical")
            issue_type = "stockout_risk"
            impact.revenue_opportunity = daily_usage * product.price * LOST_SALES_DAYS
        elif days_until_stockout <= REORDER_STOCKOUT_DAYS:
            messages.append(f"Reorder needed - {days_until_stockout:.1f} days of stock remaining")
            priority = escalate(priority, "high")
            issue_type = "reorder_needed"

    # 2. Overstock
    if daily_usage > 0:
        days_of_stock = current_stock / daily_usage
        if days_of_stock > OVERSTOCK_DAYS:
            messages.append(
                f"Overstocked: {days_of_stock:.0f} days of inventory. Consider promotions or reducing orders."
            )
            priority = escalate(priority, "medium")
            issue_type = "overstock"
            impact.carrying_cost_reduction = (
                (current_stock - daily_usage * TARGET_COVER_DAYS) * product.cost * MONTHLY_CARRYING_COST_RATE
            )

    # 3. Slow-moving
    if velocity.trend == "decreasing" and daily_usage < SLOW_MOVING_DAILY_UNITS:
        messages.append("Slow-moving item: Consider promotions, bundling, or discontinuation")
        warnings.append("Sales trend is declining")
        priority = escalate(priority, "medium")
        issue_type = "slow_moving"

    # 4. Seasonal uplift
    if (as_of.month - 1) in seasonality.peak_months and velocity.trend != "increasing":
        messages.append("Peak season approaching: Consider increasing stock levels")
        priority = escalate(priority, "medium")

    # 5. A-class products at or below ROP
    if classification == "A" and current_stock <= reorder_point:
        messages.append("High-value product requires immediate attention")
        priority = escalate(priority, "high")

    # 6. Stored ROP drift
    if abs(reorder_point - requirement.reorder_point) > requirement.reorder_point * ROP_DRIFT_TOLERANCE:
        messages.append(
            f"Update reorder point from {reorder_point} to {requirement.reorder_point} based on current sales velocity"
        )

    if not messages:
        return None

    return InventoryRecommendation(
        product_id=product.id,
        product_name=product.name,
        sku=product.sku,
        category=product.category_name or "Uncategorized",
        current_stock=current_stock,
        recommended_reorder_point=requirement.reorder_point,
        recommended_safety_stock=requirement.recommended_safety_stock,
        daily_usage=daily_usage,
        abc_classification=classification,
        priority=priority,
        issue_type=issue_type,
        recommendations=messages,
        warnings=warnings,
        financial_impact=impact,
        velocity=velocity,
        seasonality=seasonality,
    )


def generate_recommendations(
    products: list[Product],
    inventory: list[InventoryRecord],
    velocities: dict[str, ProductVelocity],
    abc: dict[str, AbcClass],
    seasonality: dict[str, SeasonalityProfile],
    requirements: dict[str, ReorderRequirement],
    as_of: datetime,
) -> tuple[list[InventoryRecommendation], int]:
    """
    Evaluate every stocked product.

    Returns:
        (recommendations sorted by priority then financial impact, products_analyzed)
        The list is NOT truncated; health and summary counts use all of it.
    """
    records: dict[str, InventoryRecord] = {}
    for record in inventory:
        records.setdefault(record.product_id, record)

    recommendations: list[InventoryRecommendation] = []
    analyzed = 0
    for product in products:
        record = records.get(product.id)
        if record is None:
            continue
        analyzed += 1

        result = analyze_product_inventory(
            product=product,
            record=record,
            velocity=velocities.get(product.id, ZERO_VELOCITY),
            classification=abc.get(product.id, "C"),
            seasonality=seasonality.get(product.id, NO_SEASONALITY),
            requirement=requirements.get(product.id, NO_REQUIREMENT),
            as_of=as_of,
        )
        if result is not None:
            recommendations.append(result)

    recommendations.sort(key=lambda r: (-PRIORITY_RANK[r.priority], -r.impact_total))

    logger.info(
        "inventory.recommendations_built",
        products_analyzed=analyzed,
        recommendations=len(recommendations),
        critical=sum(1 for r in recommendations if r.priority == "critical"),
    )
    return recommendations, analyzed


def calculate_health_score(recommendations: list[InventoryRecommendation], products_analyzed: int) -> int:
    """
    Aggregate inventory health, 0-100.

    Returns 50 (neutral) when nothing was analyzed so an empty store does
    not read as an emergency.
    """
    if products_analyzed == 0:
        return NEUTRAL_HEALTH_SCORE

    score = 100.0
    for priority, penalty in HEALTH_PENALTIES.items():
        count = sum(1 for r in recommendations if r.priority == priority)
        score -= (count / products_analyzed) * penalty

    # Half-up rounding, then clamp
    return max(0, min(100, math.floor(score + 0.5)))


def generate_strategic_insights(
    recommendations: list[InventoryRecommendation],
    abc: dict[str, AbcClass],
    seasonality: dict[str, SeasonalityProfile],
    as_of: datetime,
) -> dict[str, Any]:
    insights: list[str] = []
    actionable_steps: list[str] = []

    classified = len(abc)
    a_products = sum(1 for c in abc.values() if c == "A")
    if classified and a_products / classified > 0.3:
        insights.append("High concentration of A-class products requires focused inventory management")
        actionable_steps.append("Implement daily monitoring for top 20% revenue-generating products")

    seasonal_products = sum(1 for p in seasonality.values() if p.seasonal_factor > 0.5)
    if seasonal_products > classified * 0.2:
        insights.append("Significant seasonal patterns detected - consider seasonal forecasting models")
        actionable_steps.append("Develop season-specific inventory plans for high-variation products")

    critical_count = sum(1 for r in recommendations if r.priority == "critical")
    overstock_count = sum(1 for r in recommendations if r.issue_type == "overstock")

    if critical_count > 5:
        insights.append("Multiple critical stockout risks detected - review supplier relationships and lead times")
        actionable_steps.append("Establish backup suppliers for critical products")

    if overstock_count > classified * 0.15:
        insights.append("High overstock levels suggest opportunity to optimize order quantities")
        actionable_steps.append("Review and reduce order quantities for slow-moving products")

    return {
        "key_insights": insights,
        "actionable_steps": actionable_steps,
        "next_review_date": (as_of + timedelta(days=REVIEW_INTERVAL_DAYS)).date().isoformat(),
    }


def summarize_optimization(recommendations: list[InventoryRecommendation]) -> dict[str, int]:
    def _count(issue: IssueType) -> int:
        return sum(1 for r in recommendations if r.issue_type == issue)

    return {
        "overstocked_products": _count("overstock"),
        "understocked_products": _count("stockout_risk"),
        "slow_moving_products": _count("slow_moving"),
        "reorder_recommendations": _count("reorder_needed"),
    }
