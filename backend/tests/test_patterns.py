"""
Tests for purchase timing, loyalty, product preferences and monthly trends.
"""

from datetime import datetime

import pytest

from customers.patterns import (
    analyze_behavioral_trends,
    analyze_product_preferences,
    analyze_purchase_patterns,
    calculate_loyalty_metrics,
    get_season,
)

# ── Timing & basket ───────────────────────────────────────────────────


class TestPurchasePatterns:
    @pytest.mark.parametrize(
        "month, season",
        [(0, "Winter"), (1, "Winter"), (2, "Spring"), (4, "Spring"), (5, "Summer"), (8, "Fall"), (11, "Winter")],
    )
    def test_season(self, month, season):
        assert get_season(month) == season

    def test_empty_uses_defaults(self):
        result = analyze_purchase_patterns([])

        assert result["peak_hour"] == 12
        assert result["peak_day"] == "Sunday"
        assert result["peak_month"] == "Jan"
        assert result["average_basket_size"] == 0
        assert result["average_basket_value"] == 0
        assert result["hourly_distribution"] == {}

    def test_weekday_is_sunday_based(self, make_transaction):
        # 2024-06-10 is a Monday
        txn = make_transaction("c1", days_ago=0, total=10.0, created_at=datetime(2024, 6, 10, 15, 30))

        result = analyze_purchase_patterns([txn])

        assert result["daily_distribution"] == {1: 1}
        assert result["peak_day"] == "Monday"
        assert result["peak_month"] == "Jun"
        assert result["seasonal_patterns"] == {"Summer": 1}
        assert result["peak_hour"] == 15

    def test_ties_keep_first_seen(self, make_transaction):
        transactions = [
            make_transaction("c1", days_ago=0, total=10.0, created_at=datetime(2024, 6, 10, 9)),
            make_transaction("c2", days_ago=0, total=10.0, created_at=datetime(2024, 6, 10, 14)),
        ]

        assert analyze_purchase_patterns(transactions)["peak_hour"] == 9

    def test_basket_averages(self, make_transaction):
        transactions = [
            make_transaction("c1", days_ago=1, total=50.0, items=[("p1", 2, 10.0), ("p2", 3, 10.0)]),
            make_transaction("c2", days_ago=2, total=10.0),
        ]

        result = analyze_purchase_patterns(transactions)

        assert result["average_basket_size"] == 2.5
        assert result["average_basket_value"] == 30.0


# ── Loyalty ───────────────────────────────────────────────────────────


class TestLoyaltyMetrics:
    def test_rates_over_purchasing_customers(self, make_customer, make_transaction):
        customers = [make_customer("c1"), make_customer("c2"), make_customer("c3")]
        transactions = [
            make_transaction("c1", days_ago=0, total=10.0, created_at=datetime(2024, 5, 3)),
            make_transaction("c1", days_ago=0, total=10.0, created_at=datetime(2024, 6, 3)),
            make_transaction("c2", days_ago=0, total=10.0, created_at=datetime(2024, 6, 4)),
        ]

        result = calculate_loyalty_metrics(customers, transactions)

        assert result["repeat_purchase_rate"] == 50.0
        assert result["customer_retention_rate"] == 50.0
        assert result["average_purchase_frequency"] == 1.5

    def test_empty(self):
        assert calculate_loyalty_metrics([], []) == {
            "repeat_purchase_rate": 0,
            "customer_retention_rate": 0,
            "average_purchase_frequency": 0,
        }


# ── Preferences ───────────────────────────────────────────────────────


class TestProductPreferences:
    def test_categories_and_affinities(self, make_product, make_transaction):
        products = [
            make_product("p1", name="Chips", category_id="cat-a", category_name="Snacks"),
            make_product("p2", name="Soda", category_id="cat-b", category_name="Drinks"),
        ]
        transactions = [
            make_transaction("c1", days_ago=1, total=25.0, items=[("p1", 2, 5.0), ("p2", 1, 15.0)]),
            make_transaction("c2", days_ago=2, total=20.0, items=[("p2", 1, 15.0), ("p1", 1, 5.0)]),
        ]

        result = analyze_product_preferences(transactions, products)

        assert result["top_categories"] == [
            {"category": "Snacks", "purchases": 3},
            {"category": "Drinks", "purchases": 2},
        ]
        assert result["product_affinities"] == [{"product1": "Chips", "product2": "Soda", "frequency": 2}]

    def test_unknown_products_named_unknown(self, make_product, make_transaction):
        transactions = [make_transaction("c1", days_ago=1, total=5.0, items=[("p1", 1, 5.0), ("gone", 1, 5.0)])]

        result = analyze_product_preferences(transactions, [make_product("p1", name="Chips")])

        assert result["product_affinities"] == [{"product1": "Unknown", "product2": "Chips", "frequency": 1}]

    def test_empty(self):
        assert analyze_product_preferences([], []) == {"top_categories": [], "product_affinities": []}


# ── Behavioral trends ─────────────────────────────────────────────────


class TestBehavioralTrends:
    def test_month_over_month_growth(self, make_transaction):
        transactions = [
            make_transaction("c1", days_ago=0, total=100.0, created_at=datetime(2024, 4, 20)),
            make_transaction("c1", days_ago=0, total=100.0, created_at=datetime(2024, 5, 2)),
            make_transaction("c2", days_ago=0, total=50.0, created_at=datetime(2024, 5, 9)),
        ]

        result = analyze_behavioral_trends(transactions)

        assert result["monthly_trends"]["2024-05"] == {
            "transaction_count": 2,
            "total_revenue": 150.0,
            "average_basket_value": 75.0,
            "unique_customers": 2,
        }
        assert result["month_over_month_growth"] == {"revenue": 50.0, "transactions": 100.0, "customers": 100.0}

    def test_single_month_has_no_growth(self, make_transaction):
        result = analyze_behavioral_trends([make_transaction("c1", days_ago=1, total=10.0)])

        assert list(result["monthly_trends"]) == ["2024-06"]
        assert result["month_over_month_growth"] is None

    def test_zero_revenue_base_gives_zero_growth(self, make_transaction):
        transactions = [
            make_transaction("c1", days_ago=0, total=0.0, created_at=datetime(2024, 4, 20)),
            make_transaction("c1", days_ago=0, total=40.0, created_at=datetime(2024, 5, 2)),
        ]

        assert analyze_behavioral_trends(transactions)["month_over_month_growth"]["revenue"] == 0
