"""
Insights Scoring - rule-based scores, projections and prioritization.

These are fixed heuristics, not statistical models: the same inputs always
produce the same outputs.
"""

from typing import Any, Dict, List, Sequence

from app.services.analytics_metrics import round_decimal, round_half_up

# Assumed average ticket when no clicked item has a known price
DEFAULT_ITEM_PRICE = 15.0

# Share of item clicks assumed to become orders
CURRENT_CONVERSION = 0.3
POTENTIAL_CONVERSION = 0.5
IMPROVEMENT_CONVERSION = 0.2

LEVEL_SCORES = {"high": 3, "medium": 2, "low": 1}
INVERSE_EFFORT_SCORES = {"low": 3, "medium": 2, "high": 1}


def calculate_performance_score(ctr: float, engagement_level: str, bounce_rate: float) -> int:
    """0-100: click-through (40) + engagement (30) + inverse bounce (30)."""
    score = 0

    if ctr >= 20:
        score += 40
    elif ctr >= 15:
        score += 30
    elif ctr >= 10:
        score += 20
    elif ctr >= 5:
        score += 10

    if engagement_level == "high":
        score += 30
    elif engagement_level == "medium":
        score += 20
    elif engagement_level == "low":
        score += 10

    if bounce_rate <= 30:
        score += 30
    elif bounce_rate <= 50:
        score += 20
    elif bounce_rate <= 70:
        score += 10

    return min(score, 100)


def performance_rating(score: int) -> str:
    if score >= 80:
        return "excellent"
    if score >= 60:
        return "good"
    if score >= 40:
        return "average"
    return "needs-improvement"


def calculate_trend(ctr: float, engagement_level: str) -> str:
    if ctr >= 15 and engagement_level == "high":
        return "improving"
    if ctr >= 10 and engagement_level == "medium":
        return "stable"
    return "declining"


def growth_rate_for(ctr: float) -> float:
    if ctr > 15:
        return 1.2
    if ctr > 10:
        return 1.1
    return 1.05


def project_traffic_growth(current_views: int, ctr: float) -> Dict[str, Any]:
    """Multiplicative projection keyed on click-through rate only."""
    growth_rate = growth_rate_for(ctr)
    return {
        "current": current_views,
        "projected": round_half_up(current_views * growth_rate),
        "growth_rate": f"{(growth_rate - 1) * 100:.1f}%",
        "confidence": "high" if ctr > 15 else "medium" if ctr > 10 else "low",
    }


def average_item_price(item_analysis: Sequence[Dict[str, Any]]) -> float:
    """Mean price over clicked items; unknown prices count as the default."""
    if not item_analysis:
        return DEFAULT_ITEM_PRICE
    total = sum(item.get("price") or DEFAULT_ITEM_PRICE for item in item_analysis)
    return total / len(item_analysis)


def revenue_potential(clicks: int, avg_price: float) -> Dict[str, int]:
    """Illustrative revenue; no transaction data backs these numbers."""
    return {
        "current_clicks": clicks,
        "estimated_revenue": round_half_up(clicks * avg_price * CURRENT_CONVERSION),
        "potential_revenue": round_half_up(clicks * avg_price * POTENTIAL_CONVERSION),
        "improvement": round_half_up(clicks * avg_price * IMPROVEMENT_CONVERSION),
    }


def recommendation(action: str, impact: str, effort: str, timeline: str) -> Dict[str, str]:
    return {"action": action, "impact": impact, "effort": effort, "timeline": timeline}


SHORT_TERM_RECOMMENDATIONS = [
    recommendation("Optimize menu layout for mobile devices", "high", "medium", "1-2 weeks"),
    recommendation("Add high-quality photos to menu items", "high", "high", "2-3 weeks"),
    recommendation("Implement menu categories for better navigation", "medium", "medium", "1 week"),
]

LONG_TERM_RECOMMENDATIONS = [
    recommendation("Develop seasonal menu strategy", "high", "high", "1-2 months"),
    recommendation("Create customer loyalty program", "high", "high", "2-3 months"),
    recommendation("Implement advanced analytics tracking", "medium", "medium", "1 month"),
]


def immediate_recommendations(ctr: float, bounce_rate: float) -> List[Dict[str, str]]:
    recommendations = []
    if ctr < 10:
        recommendations.append(
            recommendation("Improve menu item descriptions", "high", "low", "1-2 days")
        )
    if bounce_rate > 60:
        recommendations.append(
            recommendation("Add engaging content to menu pages", "medium", "medium", "3-5 days")
        )
    return recommendations


def priority_score(item: Dict[str, str]) -> int:
    return LEVEL_SCORES.get(item["impact"], 1) + INVERSE_EFFORT_SCORES.get(item["effort"], 1)


def prioritize_recommendations(candidates: Sequence[Dict[str, str]]) -> List[Dict[str, str]]:
    """Highest impact-plus-ease first; ties keep candidate order."""
    return sorted(candidates, key=priority_score, reverse=True)


def calculate_percentile(current: float, industry: float) -> int:
    if current >= industry * 1.5:
        return 90
    if current >= industry * 1.2:
        return 75
    if current >= industry:
        return 50
    if current >= industry * 0.8:
        return 25
    return 10


def calculate_confidence(has_enough_data: bool, data_quality: str, total_events: int) -> float:
    """Base 0.5, raised by data sufficiency, quality and volume; at most 1.0."""
    confidence = 0.5
    if has_enough_data:
        confidence += 0.2
    if data_quality == "high":
        confidence += 0.2
    if total_events > 100:
        confidence += 0.1
    return min(round_decimal(confidence, 2), 1.0)


def season_for_month(month: int) -> str:
    """Northern-hemisphere season of a calendar month (1-12)."""
    if 3 <= month <= 5:
        return "spring"
    if 6 <= month <= 8:
        return "summer"
    if 9 <= month <= 11:
        return "fall"
    return "winter"
