"""Seasonality — monthly demand profile, peak months and seasonal swing."""

from dataclasses import dataclass

from analytics.features import ProductSalesHistory

PEAK_MULTIPLIER = 1.2


@dataclass(frozen=True)
class SeasonalityProfile:
    seasonal_factor: float
    peak_months: list[int]
    average_monthly_sales: float

    def to_dict(self) -> dict:
        return {
            "seasonal_factor": self.seasonal_factor,
            "peak_months": list(self.peak_months),
            "average_monthly_sales": self.average_monthly_sales,
        }


# Used for products with stock but no sales in the window
NO_SEASONALITY = SeasonalityProfile(seasonal_factor=1.0, peak_months=[], average_monthly_sales=0.0)


def calculate_seasonality(monthly_quantities: dict[int, int]) -> SeasonalityProfile:
    """
    Profile a product from its per-month unit totals (months 0-11).

    seasonal_factor = (max − min) / average, 0 when the average is 0.
    """
    if not monthly_quantities:
        return SeasonalityProfile(seasonal_factor=0.0, peak_months=[], average_monthly_sales=0.0)

    quantities = list(monthly_quantities.values())
    average = sum(quantities) / len(quantities)
    peak_months = sorted(month for month, qty in monthly_quantities.items() if qty > average * PEAK_MULTIPLIER)
    factor = (max(quantities) - min(quantities)) / average if average > 0 else 0.0

    return SeasonalityProfile(
        seasonal_factor=factor,
        peak_months=peak_months,
        average_monthly_sales=average,
    )


def calculate_seasonality_patterns(histories: dict[str, ProductSalesHistory]) -> dict[str, SeasonalityProfile]:
    return {pid: calculate_seasonality(history.monthly_quantities) for pid, history in histories.items()}
