"""
Prompt builders for narrative insights on computed analytics.

The prompts only summarise numbers the engine already produced; the model is
asked to return a single JSON object with a fixed set of keys.
"""

import json
from typing import Any

CUSTOMER_SYSTEM_PROMPT = (
    "You are a customer behavior analysis expert specializing in retail analytics and marketing strategy."
)
INVENTORY_SYSTEM_PROMPT = "You are an inventory planning expert for small and mid-sized retail stores."

CUSTOMER_INSIGHT_KEYS = (
    "strategic_insights",
    "marketing_recommendations",
    "retention_strategies",
    "growth_opportunities",
    "risk_mitigation",
    "personalization_suggestions",
    "operational_improvements",
    "priority_actions",
)
INVENTORY_INSIGHT_KEYS = ("key_insights", "actionable_steps")


def _segment_size(segments: dict[str, Any], key: str) -> int:
    return len(segments.get(key, {}).get("customers", []))


def build_customer_analysis_prompt(report: dict[str, Any], analysis_type: str = "comprehensive") -> str:
    segments = report["customer_segments"]
    patterns = report["purchase_patterns"]
    loyalty = report["loyalty_metrics"]
    churn = report["churn_analysis"]
    preferences = report["product_preferences"]
    trends = report["behavioral_trends"]
    clv = report["lifetime_value"]

    keys = "\n".join(f'{i}. "{key}"' for i, key in enumerate(CUSTOMER_INSIGHT_KEYS, start=1))

    return f"""
You are a customer behavior analysis expert. Based on the {analysis_type} customer data analysis provided, generate strategic insights and recommendations.

Customer Segmentation Analysis:
- Champions: {_segment_size(segments, "champions")} customers
- Loyal Customers: {_segment_size(segments, "loyal_customers")} customers
- At Risk: {_segment_size(segments, "at_risk")} customers
- New Customers: {_segment_size(segments, "new_customers")} customers

Purchase Patterns:
- Peak shopping hour: {patterns["peak_hour"]}:00
- Peak shopping day: {patterns["peak_day"]}
- Average basket value: ${patterns["average_basket_value"]:.2f}
- Average basket size: {patterns["average_basket_size"]:.1f} items

Loyalty Metrics:
- Repeat purchase rate: {loyalty["repeat_purchase_rate"]:.1f}%
- Customer retention rate: {loyalty["customer_retention_rate"]:.1f}%

Churn Analysis:
- Churn rate: {churn["churn_rate"]:.1f}%
- At-risk customers: {churn["at_risk_customers"]}
- Active customers: {churn["active_customers"]}

Product Preferences:
- Top product affinities: {json.dumps(preferences["product_affinities"][:3])}

Behavioral Trends:
- Monthly growth: {json.dumps(trends["month_over_month_growth"])}

Lifetime Value:
- Average CLV: ${clv["average_clv"]:.2f}
- High-value customers: {len(clv["high_value_customers"])}

Respond with a single JSON object with these keys, each an array:
{keys}

Focus on actionable, data-driven recommendations that can drive business growth and customer satisfaction.
"""


def build_inventory_analysis_prompt(report: dict[str, Any]) -> str:
    overview = report["overview"]
    abc = report["abc_analysis"]
    summary = report["optimization_summary"]
    top = [
        f"- {r['product_name']} ({r['priority']}, {r['issue_type']}): {'; '.join(r['recommendations'])}"
        for r in report["recommendations"][:10]
    ]
    top_text = "\n".join(top) if top else "- none"

    return f"""
Review this store's inventory health and propose next steps.

Overview:
- Health score: {overview["health_score"]}/100
- Products analyzed: {overview["products_analyzed"]}
- Revenue at risk from stockouts: ${overview["revenue_opportunities"]:.2f}

ABC split: A={abc["a_products"]}, B={abc["b_products"]}, C={abc["c_products"]}

Issues: {summary["understocked_products"]} stockout risks, {summary["reorder_recommendations"]} reorders due, {summary["overstocked_products"]} overstocked, {summary["slow_moving_products"]} slow-moving

Top recommendations:
{top_text}

Respond with a single JSON object with two keys, "key_insights" and "actionable_steps", each an array of short strings.
"""


def build_messages(system_prompt: str, prompt: str) -> list[dict[str, str]]:
    return [
        {"role": "system", "content": system_prompt},
        {"role": "user", "content": prompt},
    ]
