"""
Inventory Optimizer — Safety Stock & Reorder Point Calculation.

Turns sales velocity into the stock levels a store should hold before
reordering. Fixed planning assumptions (no supplier data in the POS):

Algorithm:
  Lead Time Demand = Avg Daily Demand × Lead Time
  Safety Stock     = Z × √(Lead Time) × Avg Daily Demand × Volatility
  ROP              = ⌈Lead Time Demand + Safety Stock⌉

Inputs:
  - ProductVelocity per product (daily average + coefficient of variation)

Outputs:
  - ReorderRequirement per product (recommended safety stock, ROP, rationale)
"""

import math
from dataclasses import dataclass
from typing import Any

from inventory.velocity import ProductVelocity

LEAD_TIME_DAYS = 7
SERVICE_LEVEL = 0.95
# One-sided z for the 95% service level, rounded the way planners quote it
SAFETY_FACTOR = 1.65


@dataclass
class ReorderRequirement:
    """Result of a reorder point calculation."""

    recommended_safety_stock: int
    reorder_point: int
    lead_time_days: int
    lead_time_demand: float
    rationale: dict[str, Any]


# Used for products with stock but no sales in the window
NO_REQUIREMENT = ReorderRequirement(
    recommended_safety_stock=0,
    reorder_point=0,
    lead_time_days=LEAD_TIME_DAYS,
    lead_time_demand=0.0,
    rationale={},
)


def calculate_safety_stock(
    daily_average: float,
    volatility: float,
    lead_time_days: int = LEAD_TIME_DAYS,
    safety_factor: float = SAFETY_FACTOR,
) -> float:
    """
    Unrounded safety stock.

    Example: 2 units/day, CV 0.5, 7 days → 1.65 × √7 × 2 × 0.5 ≈ 4.37
    """
    return safety_factor * math.sqrt(lead_time_days) * daily_average * volatility


def calculate_reorder_requirement(
    velocity: ProductVelocity,
    lead_time_days: int = LEAD_TIME_DAYS,
    safety_factor: float = SAFETY_FACTOR,
) -> ReorderRequirement:
    """
    Calculate safety stock and ROP for one product.

    Both outputs are floored at 0 so a malformed negative velocity can never
    produce a negative stock target.
    """
    lead_time_demand = velocity.daily_average * lead_time_days
    safety_stock = calculate_safety_stock(velocity.daily_average, velocity.volatility, lead_time_days, safety_factor)

    rationale = {
        "lead_time_days": lead_time_days,
        "service_level": SERVICE_LEVEL,
        "safety_factor": safety_factor,
        "avg_daily_demand": round(velocity.daily_average, 2),
        "volatility": round(velocity.volatility, 3),
        "safety_stock_formula": (
            f"Z({safety_factor}) × √LT({lead_time_days}) × D({velocity.daily_average:.2f}) "
            f"× CV({velocity.volatility:.2f})"
        ),
    }

    return ReorderRequirement(
        recommended_safety_stock=max(0, math.ceil(safety_stock)),
        reorder_point=max(0, math.ceil(lead_time_demand + safety_stock)),
        lead_time_days=lead_time_days,
        lead_time_demand=lead_time_demand,
        rationale=rationale,
    )


def calculate_lead_time_requirements(velocities: dict[str, ProductVelocity]) -> dict[str, ReorderRequirement]:
    """Reorder requirements for every product with a velocity."""
    return {pid: calculate_reorder_requirement(velocity) for pid, velocity in velocities.items()}
