"""
Customer Behavior Report — segmentation, churn, CLV and shopping patterns.

Pipeline (each stage consumes the previous stage's output once):
  records → customer activity → RFM scores → segments
                              → churn analysis
                              → lifetime value
  transactions → purchase patterns / loyalty / preferences / monthly trends

Narrative insights come from the text-generation client when enabled and
fall back to deterministic insights whenever it is disabled or unusable.
"""

import asyncio
from datetime import datetime, timedelta
from typing import Any

import pandas as pd
import structlog

from analytics.features import extract_customer_activity
from analytics.records import Customer, Product, Transaction, to_naive_utc, utc_now
from core.config import Settings, get_settings
from customers.churn import CHURN_THRESHOLD_DAYS, analyze_churn
from customers.lifetime_value import calculate_lifetime_value
from customers.patterns import (
    analyze_behavioral_trends,
    analyze_product_preferences,
    analyze_purchase_patterns,
    calculate_loyalty_metrics,
)
from customers.rfm import score_customers
from customers.segmentation import segment_customers
from insights.client import InsightServiceError, TextGenerationClient, TextGenerator
from insights.fallback import generate_fallback_insights, parse_insight_response
from insights.prompts import (
    CUSTOMER_INSIGHT_KEYS,
    CUSTOMER_SYSTEM_PROMPT,
    build_customer_analysis_prompt,
    build_messages,
)
from services.sources import AnalyticsDataSource

logger = structlog.get_logger()

DEFAULT_ANALYSIS_MONTHS = 6


def build_customer_behavior_report(
    customers: list[Customer],
    transactions: list[Transaction],
    products: list[Product],
    as_of: datetime,
    analysis_months: int = DEFAULT_ANALYSIS_MONTHS,
) -> dict[str, Any]:
    """
    Compute the full customer report from already-fetched records.

    Pure and deterministic for a fixed ``as_of``. ``ai_insights`` holds the
    deterministic fallback insights; the async service may replace them.
    """
    activity = extract_customer_activity(customers, transactions, as_of)
    metrics = score_customers(customers, activity)
    segments = segment_customers(metrics)
    patterns = analyze_purchase_patterns(transactions)
    churn = analyze_churn(activity)

    active_since = as_of - timedelta(days=CHURN_THRESHOLD_DAYS)
    active_customers = sum(1 for c in customers if c.last_visit is not None and c.last_visit > active_since)

    return {
        "overview": {
            "total_customers": len(customers),
            "active_customers": active_customers,
            "analysis_period": f"{analysis_months} months",
            "segments_identified": len(segments),
            "last_analyzed": as_of.isoformat(),
        },
        "customer_segments": segments,
        "purchase_patterns": patterns,
        "loyalty_metrics": calculate_loyalty_metrics(customers, transactions),
        "churn_analysis": churn,
        "product_preferences": analyze_product_preferences(transactions, products),
        "behavioral_trends": analyze_behavioral_trends(transactions),
        "lifetime_value": calculate_lifetime_value(customers, activity),
        "ai_insights": generate_fallback_insights(segments, patterns, churn),
    }


async def generate_customer_insights(
    report: dict[str, Any],
    text_generator: TextGenerator,
    *,
    analysis_type: str = "comprehensive",
    temperature: float = 0.3,
    max_tokens: int = 2000,
) -> dict[str, Any]:
    """
    Ask the text generator for narrative insights on a computed report.

    Raises:
        InsightServiceError when no model answered
        ValueError when the answer is not the expected JSON object
    """
    messages = build_messages(CUSTOMER_SYSTEM_PROMPT, build_customer_analysis_prompt(report, analysis_type))
    completion = await text_generator.complete(messages, temperature=temperature, max_tokens=max_tokens)
    return parse_insight_response(completion, CUSTOMER_INSIGHT_KEYS)


async def analyze_customer_behavior(
    source: AnalyticsDataSource,
    store_id: str,
    *,
    text_generator: TextGenerator | None = None,
    insights_enabled: bool | None = None,
    as_of: datetime | None = None,
    analysis_type: str = "comprehensive",
    settings: Settings | None = None,
) -> dict[str, Any]:
    """
    Fetch one store's customer history and build its behavior report.

    Args:
        source: Data-access collaborator; its errors propagate unchanged
        store_id: Store to analyze
        text_generator: Override for the chat-completions client
        insights_enabled: Use the text generator; defaults to ``settings.ai_enabled``
        as_of: Analysis time; defaults to now (UTC)
        analysis_type: Passed through to the insight prompt
    """
    settings = settings or get_settings()
    as_of = to_naive_utc(as_of) if as_of is not None else utc_now()
    if insights_enabled is None:
        insights_enabled = settings.ai_enabled

    months = settings.customer_analysis_months
    since = (pd.Timestamp(as_of) - pd.DateOffset(months=months)).to_pydatetime()

    logger.info("customer_behavior.started", store_id=store_id, since=since.isoformat(), insights=insights_enabled)

    customers, transactions, products = await asyncio.gather(
        source.get_customers(store_id),
        source.get_transactions(store_id, since),
        source.get_products(store_id),
    )

    report = build_customer_behavior_report(customers, transactions, products, as_of, analysis_months=months)

    if insights_enabled:
        generator = text_generator or TextGenerationClient.from_settings(settings)
        try:
            report["ai_insights"] = await generate_customer_insights(
                report,
                generator,
                analysis_type=analysis_type,
                temperature=settings.ai_temperature,
                max_tokens=settings.ai_max_tokens,
            )
        except (InsightServiceError, ValueError) as exc:
            logger.warning("insights.fallback_used", report="customer_behavior", store_id=store_id, error=str(exc))

    logger.info(
        "customer_behavior.completed",
        store_id=store_id,
        customers=len(customers),
        transactions=len(transactions),
        churn_rate=report["churn_analysis"]["churn_rate"],
    )
    return report
