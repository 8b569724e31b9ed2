"""
Sales Velocity — daily demand, short-term trend and demand volatility.

  daily_average = units sold ÷ max(1, days since the first sale day)
  trend         = OLS slope over the last 14 daily points
                  (> 0.1 increasing, < -0.1 decreasing, else stable;
                   stable when 7 or fewer points exist)
  volatility    = coefficient of variation of daily totals (population σ ÷ mean)
"""

from dataclasses import asdict, dataclass
from datetime import datetime
from typing import Literal

import numpy as np

from analytics.features import ProductSalesHistory

Trend = Literal["increasing", "decreasing", "stable"]

TREND_WINDOW_POINTS = 14
MIN_TREND_POINTS = 7
TREND_SLOPE_THRESHOLD = 0.1
SECONDS_PER_DAY = 86400


@dataclass(frozen=True)
class ProductVelocity:
    daily_average: float
    trend: Trend
    volatility: float
    total_sold: int
    days_tracked: float

    def to_dict(self) -> dict:
        return asdict(self)


# Used for products with stock but no sales in the window
ZERO_VELOCITY = ProductVelocity(daily_average=0.0, trend="stable", volatility=0.0, total_sold=0, days_tracked=1.0)


def calculate_trend(quantities: list[float]) -> Trend:
    """
    Classify the least-squares slope of quantity against sequence index.

    Examples:
        [1, 2, 3, 4, 5, 6, 7, 8] → "increasing" (slope 1.0)
        [5, 5, 5, 5, 5, 5, 5, 5] → "stable"
    """
    n = len(quantities)
    if n < 3:
        return "stable"

    x = np.arange(n, dtype=float)
    y = np.asarray(quantities, dtype=float)
    sum_x, sum_y = x.sum(), y.sum()
    sum_xy, sum_xx = (x * y).sum(), (x * x).sum()
    slope = (n * sum_xy - sum_x * sum_y) / (n * sum_xx - sum_x * sum_x)

    if slope > TREND_SLOPE_THRESHOLD:
        return "increasing"
    if slope < -TREND_SLOPE_THRESHOLD:
        return "decreasing"
    return "stable"


def calculate_volatility(daily_totals: list[float]) -> float:
    """Coefficient of variation; 0 when there is no demand."""
    if not daily_totals:
        return 0.0
    values = np.asarray(daily_totals, dtype=float)
    mean = values.mean()
    if mean <= 0:
        return 0.0
    return float(values.std() / mean)


def calculate_velocity(history: ProductSalesHistory, as_of: datetime) -> ProductVelocity:
    first_sale = datetime.combine(history.first_sale_day, datetime.min.time())
    days_tracked = max(1.0, (as_of - first_sale).total_seconds() / SECONDS_PER_DAY)

    daily_totals = [qty for _, qty in history.daily_quantities]
    recent = daily_totals[-TREND_WINDOW_POINTS:]
    trend = calculate_trend(recent) if len(recent) > MIN_TREND_POINTS else "stable"

    return ProductVelocity(
        daily_average=history.total_quantity / days_tracked,
        trend=trend,
        volatility=calculate_volatility(daily_totals),
        total_sold=history.total_quantity,
        days_tracked=days_tracked,
    )


def calculate_sales_velocity(
    histories: dict[str, ProductSalesHistory],
    as_of: datetime,
) -> dict[str, ProductVelocity]:
    """Velocity for every product that sold in the window."""
    return {product_id: calculate_velocity(history, as_of) for product_id, history in histories.items()}
