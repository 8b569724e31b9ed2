"""
Purchase behavior analysis: timing, basket, loyalty, preferences and monthly trends.

All functions take the completed transactions of the analysis window and
return JSON-ready dicts. Empty inputs produce zeros (never NaN) and the
historical defaults for peaks (12:00, Sunday, Jan).

Calendar conventions:
  - weekday 0 = Sunday … 6 = Saturday
  - month 0 = January … 11 = December
  - seasons: Spring 2-4, Summer 5-7, Fall 8-10, Winter 11, 0, 1
"""

from itertools import combinations
from typing import Any

import pandas as pd

from analytics.features import transactions_frame
from analytics.records import Customer, Product, Transaction

DAY_NAMES = ["Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday"]
MONTH_NAMES = ["Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]

DEFAULT_PEAK_HOUR = 12
TOP_CATEGORIES = 5
TOP_AFFINITIES = 10


def get_season(month: int) -> str:
    """Season name for a 0-based calendar month."""
    if 2 <= month <= 4:
        return "Spring"
    if 5 <= month <= 7:
        return "Summer"
    if 8 <= month <= 10:
        return "Fall"
    return "Winter"


def _completed(transactions: list[Transaction]) -> list[Transaction]:
    return [txn for txn in transactions if txn.is_completed]


def _peak(distribution: dict[int, int], default: int) -> int:
    # max() keeps the first key seen among ties
    return max(distribution, key=distribution.get) if distribution else default


def _pct(numerator: float, denominator: float) -> float:
    return (numerator / denominator) * 100 if denominator else 0


def _pct_change(current: float, previous: float) -> float:
    return ((current - previous) / previous) * 100 if previous else 0


# ──────────────────────────────────────────────────────────────────────────
# Timing & basket
# ──────────────────────────────────────────────────────────────────────────


def analyze_purchase_patterns(transactions: list[Transaction]) -> dict[str, Any]:
    txns = _completed(transactions)
    hourly: dict[int, int] = {}
    daily: dict[int, int] = {}
    monthly: dict[int, int] = {}
    seasonal: dict[str, int] = {}

    for txn in txns:
        ts = txn.created_at
        hour = ts.hour
        day_of_week = (ts.weekday() + 1) % 7
        month = ts.month - 1
        season = get_season(month)

        hourly[hour] = hourly.get(hour, 0) + 1
        daily[day_of_week] = daily.get(day_of_week, 0) + 1
        monthly[month] = monthly.get(month, 0) + 1
        seasonal[season] = seasonal.get(season, 0) + 1

    count = len(txns)
    total_items = sum(txn.item_quantity for txn in txns)
    total_value = sum(txn.total for txn in txns)

    return {
        "hourly_distribution": hourly,
        "daily_distribution": daily,
        "monthly_distribution": monthly,
        "seasonal_patterns": seasonal,
        "peak_hour": _peak(hourly, DEFAULT_PEAK_HOUR),
        "peak_day": DAY_NAMES[_peak(daily, 0)],
        "peak_month": MONTH_NAMES[_peak(monthly, 0)],
        "average_basket_size": total_items / count if count else 0,
        "average_basket_value": total_value / count if count else 0,
    }


# ──────────────────────────────────────────────────────────────────────────
# Loyalty
# ──────────────────────────────────────────────────────────────────────────


def calculate_loyalty_metrics(customers: list[Customer], transactions: list[Transaction]) -> dict[str, Any]:
    """
    Repeat-purchase rate, multi-month retention and purchase frequency.

    Rates are percentages of customers with at least one purchase.
    """
    txns = _completed(transactions)
    purchase_counts: dict[str, int] = {}
    active_months: dict[str, set[str]] = {}
    for txn in txns:
        if not txn.customer_id:
            continue
        purchase_counts[txn.customer_id] = purchase_counts.get(txn.customer_id, 0) + 1
        active_months.setdefault(txn.customer_id, set()).add(txn.created_at.strftime("%Y-%m"))

    purchasers = [c for c in customers if c.id in purchase_counts]
    repeaters = [c for c in purchasers if purchase_counts[c.id] > 1]
    retained = sum(1 for months in active_months.values() if len(months) > 1)

    return {
        "repeat_purchase_rate": _pct(len(repeaters), len(purchasers)),
        "customer_retention_rate": _pct(retained, len(purchasers)),
        "average_purchase_frequency": len(txns) / len(purchasers) if purchasers else 0,
    }


# ──────────────────────────────────────────────────────────────────────────
# Product preferences
# ──────────────────────────────────────────────────────────────────────────


def analyze_product_preferences(transactions: list[Transaction], products: list[Product]) -> dict[str, Any]:
    """Top categories by units purchased and most frequent co-purchased pairs."""
    by_id = {p.id: p for p in products}
    category_units: dict[str | None, int] = {}
    pair_counts: dict[tuple[str, str], int] = {}

    for txn in _completed(transactions):
        for item in txn.items:
            product = by_id.get(item.product_id)
            if product is not None:
                category_units[product.category_id] = category_units.get(product.category_id, 0) + item.quantity
        for first, second in combinations(txn.items, 2):
            pair = tuple(sorted((first.product_id, second.product_id)))
            pair_counts[pair] = pair_counts.get(pair, 0) + 1

    category_names: dict[str | None, str] = {}
    for product in products:
        category_names.setdefault(product.category_id, product.category_name or "Unknown")

    top_categories = [
        {"category": category_names.get(category_id, "Unknown"), "purchases": units}
        for category_id, units in sorted(category_units.items(), key=lambda kv: kv[1], reverse=True)[:TOP_CATEGORIES]
    ]

    def _name(product_id: str) -> str:
        product = by_id.get(product_id)
        return product.name if product else "Unknown"

    product_affinities = [
        {"product1": _name(first), "product2": _name(second), "frequency": count}
        for (first, second), count in sorted(pair_counts.items(), key=lambda kv: kv[1], reverse=True)[:TOP_AFFINITIES]
    ]

    return {"top_categories": top_categories, "product_affinities": product_affinities}


# ──────────────────────────────────────────────────────────────────────────
# Behavioral trends
# ──────────────────────────────────────────────────────────────────────────


def analyze_behavioral_trends(transactions: list[Transaction]) -> dict[str, Any]:
    """
    Per-month (YYYY-MM) volume, revenue and reach, plus growth between the
    two latest months. Growth is None with fewer than two months of data.
    """
    frame = transactions_frame(transactions)
    monthly_trends: dict[str, dict[str, Any]] = {}

    if not frame.empty:
        frame = frame.assign(month=pd.to_datetime(frame["created_at"]).dt.strftime("%Y-%m"))
        grouped = frame.groupby("month").agg(
            transaction_count=("transaction_id", "count"),
            total_revenue=("total", "sum"),
            unique_customers=("customer_id", "nunique"),
        )
        for month, row in grouped.iterrows():
            count = int(row["transaction_count"])
            revenue = float(row["total_revenue"])
            monthly_trends[str(month)] = {
                "transaction_count": count,
                "total_revenue": revenue,
                "average_basket_value": revenue / count if count else 0,
                "unique_customers": int(row["unique_customers"]),
            }

    growth = None
    months = sorted(monthly_trends)
    if len(months) >= 2:
        current = monthly_trends[months[-1]]
        previous = monthly_trends[months[-2]]
        growth = {
            "revenue": _pct_change(current["total_revenue"], previous["total_revenue"]),
            "transactions": _pct_change(current["transaction_count"], previous["transaction_count"]),
            "customers": _pct_change(current["unique_customers"], previous["unique_customers"]),
        }

    return {"monthly_trends": monthly_trends, "month_over_month_growth": growth}
