"""
Narrative insights on top of computed analytics.

Usage:
    from insights import TextGenerationClient, generate_fallback_insights

    client = TextGenerationClient.from_settings()
    text = await client.complete(messages, temperature=0.3, max_tokens=2000)
"""

from insights.client import InsightServiceError, TextGenerationClient, TextGenerator
from insights.fallback import generate_fallback_insights, parse_insight_response
from insights.prompts import (
    CUSTOMER_INSIGHT_KEYS,
    CUSTOMER_SYSTEM_PROMPT,
    INVENTORY_INSIGHT_KEYS,
    INVENTORY_SYSTEM_PROMPT,
    build_customer_analysis_prompt,
    build_inventory_analysis_prompt,
    build_messages,
)

__all__ = [
    "InsightServiceError",
    "TextGenerationClient",
    "TextGenerator",
    "generate_fallback_insights",
    "parse_insight_response",
    "CUSTOMER_INSIGHT_KEYS",
    "CUSTOMER_SYSTEM_PROMPT",
    "INVENTORY_INSIGHT_KEYS",
    "INVENTORY_SYSTEM_PROMPT",
    "build_customer_analysis_prompt",
    "build_inventory_analysis_prompt",
    "build_messages",
]
