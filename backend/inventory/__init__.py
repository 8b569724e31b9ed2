"""Inventory analytics: velocity, ABC, seasonality, reorder points, recommendations."""
