"""
Deterministic insights and response parsing.

When text generation is disabled, unreachable, or answers with something
that is not the expected JSON object, reports carry these canned insights
instead. They are derived only from computed metrics, so reruns are stable.
"""

import json
import re
from typing import Any

_CODE_FENCE = re.compile(r"^```(?:json)?\s*(.*?)\s*```$", re.DOTALL)


def parse_insight_response(text: str, required_keys: tuple[str, ...]) -> dict[str, Any]:
    """
    Parse a model response into a dict.

    Accepts a bare JSON object, optionally wrapped in a markdown code fence.
    Every required key must map to a JSON array.

    Raises:
        ValueError if the text is not a JSON object, lacks a required key,
        or a required key does not hold a list.
    """
    if not isinstance(text, str):
        raise ValueError(f"Expected response text, got {type(text).__name__}")

    body = text.strip()
    fenced = _CODE_FENCE.match(body)
    if fenced:
        body = fenced.group(1)

    payload = json.loads(body)
    if not isinstance(payload, dict):
        raise ValueError(f"Expected a JSON object, got {type(payload).__name__}")

    missing = [key for key in required_keys if key not in payload]
    if missing:
        raise ValueError(f"Insight response missing keys: {missing}")

    not_lists = [key for key in required_keys if not isinstance(payload[key], list)]
    if not_lists:
        raise ValueError(f"Insight response keys must hold lists: {not_lists}")
    return payload


def generate_fallback_insights(
    segments: dict[str, Any],
    patterns: dict[str, Any],
    churn: dict[str, Any],
) -> dict[str, Any]:
    return {
        "strategic_insights": [
            f"Customer base shows {len(segments)} distinct behavioral segments",
            f"Peak shopping occurs on {patterns['peak_day']} at {patterns['peak_hour']}:00",
            f"Current churn rate of {churn['churn_rate']:.1f}% requires attention",
        ],
        "marketing_recommendations": [
            "Implement targeted campaigns for each customer segment",
            "Focus acquisition efforts during peak shopping times",
            "Develop loyalty programs for repeat customers",
        ],
        "retention_strategies": [
            "Create win-back campaigns for at-risk customers",
            "Implement personalized recommendations",
            "Establish customer feedback loops",
        ],
        "growth_opportunities": [
            "Expand product offerings in high-performing categories",
            "Increase marketing during peak times",
            "Develop premium services for high-value customers",
        ],
        "risk_mitigation": [
            "Monitor churn indicators proactively",
            "Improve customer service response times",
            "Address product quality concerns",
        ],
        "personalization_suggestions": [
            "Customize product recommendations by segment",
            "Personalize promotional timing",
            "Tailor communication frequency by customer preference",
        ],
        "operational_improvements": [
            "Optimize staffing during peak hours",
            "Streamline checkout process",
            "Enhance inventory management for popular products",
        ],
        "priority_actions": [
            {"action": "Address customer churn immediately", "priority": "high", "impact": "high"},
            {"action": "Launch retention campaign for at-risk segment", "priority": "high", "impact": "medium"},
            {"action": "Optimize operations for peak times", "priority": "medium", "impact": "medium"},
        ],
    }
