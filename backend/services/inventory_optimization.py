"""
Inventory Optimization Report — per-product recommendations and store health.

Pipeline:
  sale lines → product sales histories → velocity → reorder requirements
                                       → ABC classes
                                       → seasonality
  + inventory snapshot + products → recommendations → health / insights / summary

The recommendation list in the report is capped at 50 entries; health score,
counts and summaries are computed over the full list.
"""

import asyncio
from datetime import datetime, timedelta
from typing import Any

import structlog

from analytics.features import extract_product_sales
from analytics.records import InventoryRecord, Product, SaleLine, to_naive_utc, utc_now
from core.config import Settings, get_settings
from insights.client import InsightServiceError, TextGenerationClient, TextGenerator
from insights.fallback import parse_insight_response
from insights.prompts import (
    INVENTORY_INSIGHT_KEYS,
    INVENTORY_SYSTEM_PROMPT,
    build_inventory_analysis_prompt,
    build_messages,
)
from inventory.abc import classify_products
from inventory.optimizer import calculate_lead_time_requirements
from inventory.recommendations import (
    MAX_RECOMMENDATIONS,
    calculate_health_score,
    generate_recommendations,
    generate_strategic_insights,
    summarize_optimization,
)
from inventory.seasonality import calculate_seasonality_patterns
from inventory.velocity import calculate_sales_velocity
from services.sources import AnalyticsDataSource

logger = structlog.get_logger()


def build_inventory_report(
    inventory: list[InventoryRecord],
    sales: list[SaleLine],
    products: list[Product],
    as_of: datetime,
) -> dict[str, Any]:
    """Compute the inventory report from already-fetched records. Pure for a fixed ``as_of``."""
    histories = extract_product_sales(sales)
    velocities = calculate_sales_velocity(histories, as_of)
    requirements = calculate_lead_time_requirements(velocities)
    abc = classify_products(histories)
    seasonality = calculate_seasonality_patterns(histories)

    recommendations, analyzed = generate_recommendations(
        products=products,
        inventory=inventory,
        velocities=velocities,
        abc=abc,
        seasonality=seasonality,
        requirements=requirements,
        as_of=as_of,
    )

    return {
        "overview": {
            "total_products": len(products),
            "products_analyzed": analyzed,
            "high_priority_actions": sum(1 for r in recommendations if r.priority == "high"),
            "potential_savings": sum(r.financial_impact.cost_savings for r in recommendations),
            "revenue_opportunities": sum(r.financial_impact.revenue_opportunity for r in recommendations),
            "health_score": calculate_health_score(recommendations, analyzed),
            "last_analyzed": as_of.isoformat(),
            "recommendations_count": len(recommendations),
        },
        "recommendations": [r.to_dict() for r in recommendations[:MAX_RECOMMENDATIONS]],
        "strategic_insights": generate_strategic_insights(recommendations, abc, seasonality, as_of),
        "abc_analysis": {
            "a_products": sum(1 for c in abc.values() if c == "A"),
            "b_products": sum(1 for c in abc.values() if c == "B"),
            "c_products": sum(1 for c in abc.values() if c == "C"),
        },
        "optimization_summary": summarize_optimization(recommendations),
    }


async def generate_inventory_insights(
    report: dict[str, Any],
    text_generator: TextGenerator,
    *,
    temperature: float = 0.3,
    max_tokens: int = 2000,
) -> dict[str, list[str]]:
    """
    Ask the text generator for extra insights and steps on a computed report.

    Raises:
        InsightServiceError when no model answered
        ValueError when the answer is not the expected JSON object
    """
    messages = build_messages(INVENTORY_SYSTEM_PROMPT, build_inventory_analysis_prompt(report))
    completion = await text_generator.complete(messages, temperature=temperature, max_tokens=max_tokens)
    payload = parse_insight_response(completion, INVENTORY_INSIGHT_KEYS)

    return {key: [str(v) for v in payload[key]] for key in INVENTORY_INSIGHT_KEYS}


async def optimize_inventory(
    source: AnalyticsDataSource,
    store_id: str,
    *,
    text_generator: TextGenerator | None = None,
    insights_enabled: bool | None = None,
    as_of: datetime | None = None,
    settings: Settings | None = None,
) -> dict[str, Any]:
    """
    Fetch one store's stock and recent sales and build its optimization report.

    Sales are read over the trailing ``settings.inventory_analysis_days``.
    Generated insights, when enabled and usable, are appended after the
    deterministic ones.
    """
    settings = settings or get_settings()
    as_of = to_naive_utc(as_of) if as_of is not None else utc_now()
    if insights_enabled is None:
        insights_enabled = settings.ai_enabled

    since = as_of - timedelta(days=settings.inventory_analysis_days)

    logger.info("inventory_optimization.started", store_id=store_id, since=since.isoformat(), insights=insights_enabled)

    inventory, sales, products = await asyncio.gather(
        source.get_inventory(store_id),
        source.get_sales(store_id, since),
        source.get_products(store_id),
    )

    report = build_inventory_report(inventory, sales, products, as_of)

    if insights_enabled:
        generator = text_generator or TextGenerationClient.from_settings(settings)
        try:
            extra = await generate_inventory_insights(
                report,
                generator,
                temperature=settings.ai_temperature,
                max_tokens=settings.ai_max_tokens,
            )
        except (InsightServiceError, ValueError) as exc:
            logger.warning("insights.fallback_used", report="inventory_optimization", store_id=store_id, error=str(exc))
        else:
            strategic = report["strategic_insights"]
            strategic["key_insights"].extend(extra["key_insights"])
            strategic["actionable_steps"].extend(extra["actionable_steps"])

    overview = report["overview"]
    logger.info(
        "inventory_optimization.completed",
        store_id=store_id,
        products_analyzed=overview["products_analyzed"],
        recommendations=overview["recommendations_count"],
        health_score=overview["health_score"],
    )
    return report
