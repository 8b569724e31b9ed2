"""
Tests for the recommendation rule chain, health score and store-level summaries.
"""

from datetime import datetime

import pytest

from inventory.optimizer import calculate_reorder_requirement
from inventory.recommendations import (
    PRIORITY_RANK,
    analyze_product_inventory,
    calculate_health_score,
    escalate,
    generate_recommendations,
    generate_strategic_insights,
    summarize_optimization,
)
from inventory.seasonality import NO_SEASONALITY, SeasonalityProfile
from inventory.velocity import ProductVelocity


def _velocity(daily_average: float, trend: str = "stable", volatility: float = 0.0) -> ProductVelocity:
    return ProductVelocity(
        daily_average=daily_average,
        trend=trend,
        volatility=volatility,
        total_sold=int(daily_average * 30),
        days_tracked=30.0,
    )


@pytest.fixture
def analyze(as_of, make_product, make_inventory):
    """Run the rule chain for one product with sensible defaults."""

    def _run(
        stock: int,
        reorder_point: int | None,
        velocity: ProductVelocity,
        classification: str = "C",
        seasonality: SeasonalityProfile = NO_SEASONALITY,
        price: float = 5.0,
        cost: float = 2.0,
    ):
        return analyze_product_inventory(
            product=make_product("p1", price=price, cost=cost),
            record=make_inventory("p1", stock, reorder_point),
            velocity=velocity,
            classification=classification,
            seasonality=seasonality,
            requirement=calculate_reorder_requirement(velocity),
            as_of=as_of,
        )

    return _run


# ── Rule chain ────────────────────────────────────────────────────────


class TestRuleChain:
    def test_critical_stockout(self, analyze):
        rec = analyze(stock=2, reorder_point=10, velocity=_velocity(1.0))

        assert rec.priority == "critical"
        assert rec.issue_type == "stockout_risk"
        assert rec.financial_impact.revenue_opportunity == pytest.approx(35.0)
        assert rec.recommendations[0].startswith("Critical: Reorder immediately - only 2.0 days")

    def test_reorder_needed(self, analyze):
        rec = analyze(stock=5, reorder_point=10, velocity=_velocity(1.0))

        assert rec.priority == "high"
        assert rec.issue_type == "reorder_needed"
        assert rec.financial_impact.revenue_opportunity == 0.0

    def test_overstock(self, analyze):
        rec = analyze(stock=200, reorder_point=10, velocity=_velocity(1.0))

        assert rec.priority == "medium"
        assert rec.issue_type == "overstock"
        assert rec.financial_impact.carrying_cost_reduction == pytest.approx((200 - 45) * 2.0 * 0.02)

    def test_slow_moving(self, analyze):
        rec = analyze(stock=2, reorder_point=1, velocity=_velocity(0.05, trend="decreasing"))

        assert rec.priority == "medium"
        assert rec.issue_type == "slow_moving"
        assert rec.warnings == ["Sales trend is declining"]

    def test_peak_season(self, analyze):
        """as_of is in June (month index 5)."""
        seasonality = SeasonalityProfile(seasonal_factor=1.0, peak_months=[5], average_monthly_sales=10.0)

        rec = analyze(stock=20, reorder_point=7, velocity=_velocity(1.0), seasonality=seasonality)

        assert rec.priority == "medium"
        assert rec.issue_type == "none"
        assert rec.recommendations == ["Peak season approaching: Consider increasing stock levels"]

    def test_peak_season_ignored_when_trend_rising(self, analyze):
        seasonality = SeasonalityProfile(seasonal_factor=1.0, peak_months=[5], average_monthly_sales=10.0)

        assert analyze(stock=20, reorder_point=7, velocity=_velocity(1.0, "increasing"), seasonality=seasonality) is None

    def test_a_class_at_reorder_point_escalates_to_high(self, analyze):
        rec = analyze(stock=3, reorder_point=5, velocity=_velocity(0.0), classification="A")

        assert rec.priority == "high"
        assert "High-value product requires immediate attention" in rec.recommendations

    def test_a_class_never_downgrades_critical(self, analyze):
        rec = analyze(stock=1, reorder_point=10, velocity=_velocity(1.0), classification="A")

        assert rec.priority == "critical"

    def test_reorder_point_drift(self, analyze):
        """Recomputed ROP for 1 unit/day with no volatility is 7."""
        rec = analyze(stock=20, reorder_point=12, velocity=_velocity(1.0))

        assert rec.priority == "low"
        assert rec.recommendations == ["Update reorder point from 12 to 7 based on current sales velocity"]

    def test_unconfigured_reorder_point_uses_recomputed(self, analyze):
        rec = analyze(stock=6, reorder_point=None, velocity=_velocity(1.0))

        assert rec.issue_type == "reorder_needed"
        assert rec.recommended_reorder_point == 7

    def test_nothing_fired(self, analyze):
        assert analyze(stock=20, reorder_point=7, velocity=_velocity(1.0)) is None

    def test_escalate_is_monotonic(self):
        assert escalate("critical", "medium") == "critical"
        assert escalate("low", "high") == "high"

    def test_serialized_shape(self, analyze):
        payload = analyze(stock=2, reorder_point=10, velocity=_velocity(1.0)).to_dict()

        assert payload["product_name"] == "Product p1"
        assert payload["category"] == "Uncategorized"
        assert set(payload["financial_impact"]) == {"cost_savings", "revenue_opportunity", "carrying_cost_reduction"}
        assert payload["velocity_metrics"]["daily_average"] == 1.0
        assert payload["seasonality_info"] == {"seasonal_factor": 1.0, "peak_months": [], "average_monthly_sales": 0.0}


# ── Batch generation ──────────────────────────────────────────────────


class TestGenerateRecommendations:
    def test_sorted_by_priority_then_impact(self, as_of, make_product, make_inventory):
        products = [make_product("slow"), make_product("cheap", price=1.0), make_product("dear", price=50.0)]
        inventory = [
            make_inventory("slow", 500, 10),
            make_inventory("cheap", 1, 10),
            make_inventory("dear", 1, 10),
        ]
        velocities = {pid: _velocity(1.0) for pid in ("slow", "cheap", "dear")}

        recs, analyzed = generate_recommendations(
            products, inventory, velocities, {}, {}, {}, as_of
        )

        assert analyzed == 3
        assert [r.product_id for r in recs] == ["dear", "cheap", "slow"]

    def test_products_without_inventory_are_skipped(self, as_of, make_product, make_inventory):
        recs, analyzed = generate_recommendations(
            [make_product("p1"), make_product("p2")],
            [make_inventory("p1", 2, 10)],
            {"p1": _velocity(1.0)},
            {},
            {},
            {},
            as_of,
        )

        assert analyzed == 1
        assert [r.product_id for r in recs] == ["p1"]

    def test_missing_inputs_use_defaults(self, as_of, make_product, make_inventory):
        """No velocity → zero demand, no requirement → ROP 0, so only drift can fire."""
        recs, analyzed = generate_recommendations(
            [make_product("p1")], [make_inventory("p1", 4, None)], {}, {}, {}, {}, as_of
        )

        assert analyzed == 1
        assert recs == []


# ── Health score ──────────────────────────────────────────────────────


class TestHealthScore:
    def test_nothing_analyzed_is_neutral(self):
        assert calculate_health_score([], 0) == 50

    def test_no_recommendations_is_perfect(self):
        assert calculate_health_score([], 12) == 100

    def test_penalties(self, analyze):
        critical = analyze(stock=2, reorder_point=10, velocity=_velocity(1.0))

        assert calculate_health_score([critical], 1) == 60
        assert calculate_health_score([critical], 2) == 80

    def test_rounds_half_up(self, analyze):
        """One medium out of four → 97.5 → 98."""
        medium = analyze(stock=200, reorder_point=10, velocity=_velocity(1.0))

        assert calculate_health_score([medium], 4) == 98

    def test_bounds(self, analyze):
        critical = analyze(stock=2, reorder_point=10, velocity=_velocity(1.0))

        assert 0 <= calculate_health_score([critical] * 5, 2) <= 100
        assert calculate_health_score([critical] * 5, 2) == 0


# ── Insights & summary ────────────────────────────────────────────────


class TestStoreSummaries:
    def test_empty_insights(self, as_of):
        insights = generate_strategic_insights([], {}, {}, as_of)

        assert insights == {"key_insights": [], "actionable_steps": [], "next_review_date": "2024-06-22"}

    def test_concentration_and_seasonality(self):
        abc = {"p1": "A", "p2": "A", "p3": "C"}
        seasonal = SeasonalityProfile(seasonal_factor=0.9, peak_months=[1], average_monthly_sales=5.0)

        insights = generate_strategic_insights([], abc, {"p1": seasonal}, datetime(2024, 1, 1))

        assert insights["key_insights"] == [
            "High concentration of A-class products requires focused inventory management",
            "Significant seasonal patterns detected - consider seasonal forecasting models",
        ]
        assert len(insights["actionable_steps"]) == 2
        assert insights["next_review_date"] == "2024-01-08"

    def test_optimization_summary(self, analyze):
        recs = [
            analyze(stock=2, reorder_point=10, velocity=_velocity(1.0)),
            analyze(stock=5, reorder_point=10, velocity=_velocity(1.0)),
            analyze(stock=200, reorder_point=10, velocity=_velocity(1.0)),
        ]

        assert summarize_optimization(recs) == {
            "overstocked_products": 1,
            "understocked_products": 1,
            "slow_moving_products": 0,
            "reorder_recommendations": 1,
        }

    def test_priority_rank_order(self):
        assert sorted(PRIORITY_RANK, key=PRIORITY_RANK.get, reverse=True) == ["critical", "high", "medium", "low"]
