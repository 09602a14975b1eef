"""
Insights Engine - turns an AnalyticsBundle into an InsightsReport.

Six categories are built from the bundle independently:
1. Performance (score, rating, trend, improvement areas)
2. Behavioral (peaks, journey, retention, patterns)
3. Predictive (growth, demand, risks, opportunities)
4. Optimization (prioritized recommendations)
5. Competitive (position against the industry baseline)
6. Summary (findings, actions, business impact)

The report is persisted as the user's latest insights and cached.
"""

import asyncio
import logging
import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional, Union

from app.cache import InMemoryTTLCache, TTLCache
from app.config import settings
from app.schemas.analytics import AnalyticsBundle, InsightsMetadata, InsightsReport
from app.services.analytics_collector import as_uuid, utc_now
from app.services.analytics_metrics import round_half_up
from app.services.analytics_store import AnalyticsStore
from app.services.industry_baseline import DEFAULT_SESSION_DURATION
from app.services.insights_scoring import (
    LONG_TERM_RECOMMENDATIONS,
    SHORT_TERM_RECOMMENDATIONS,
    average_item_price,
    calculate_confidence,
    calculate_percentile,
    calculate_performance_score,
    calculate_trend,
    immediate_recommendations,
    performance_rating,
    prioritize_recommendations,
    project_traffic_growth,
    revenue_potential,
    season_for_month,
)

logger = logging.getLogger(__name__)

DEFAULT_RESTAURANT_NAME = "Your Restaurant"
DEFAULT_INDUSTRY_CTR = 15.0
DEFAULT_INDUSTRY_MOBILE = 70.0


@dataclass
class GenerationResult:
    """A generated report plus what happened when storing it."""

    report: InsightsReport
    persistence_error: Optional[Exception] = None
    cached: bool = False

    @property
    def saved(self) -> bool:
        return not self.cached and self.persistence_error is None


# === Category builders (pure) ===

def build_performance_insights(bundle: AnalyticsBundle) -> Dict[str, Any]:
    processed = bundle.processed
    summary = processed["summary"]
    engagement_level = processed["engagement"]["engagement_level"]
    ctr = summary["click_through_rate"]

    score = calculate_performance_score(ctr, engagement_level, summary["bounce_rate"])
    top_menus = sorted(
        processed["menu_analysis"],
        key=lambda m: m["click_through_rate"],
        reverse=True,
    )

    return {
        "overall_performance": {
            "score": score,
            "rating": performance_rating(score),
            "trend": calculate_trend(ctr, engagement_level),
        },
        "key_metrics": {
            "total_views": summary["total_views"],
            "total_clicks": summary["total_clicks"],
            "click_through_rate": ctr,
            "average_session_duration": summary["average_session_duration"],
            "bounce_rate": summary["bounce_rate"],
        },
        "top_performers": {
            "menus": top_menus[:3],
            "items": processed["item_analysis"][:5],
        },
        "areas_for_improvement": identify_improvement_areas(processed),
        "recommendations": performance_recommendations(processed),
    }


def identify_improvement_areas(processed: Dict[str, Any]) -> List[str]:
    summary = processed["summary"]
    areas = []
    if summary["click_through_rate"] < 10:
        areas.append("click-through rate")
    if summary["bounce_rate"] > 60:
        areas.append("user engagement")
    if summary["average_session_duration"] < 2:
        areas.append("session duration")
    if processed["behavior"]["bounce_rate"] > 50:
        areas.append("user retention")
    return areas


def performance_recommendations(processed: Dict[str, Any]) -> List[str]:
    summary = processed["summary"]
    recommendations = []
    if summary["click_through_rate"] < 10:
        recommendations.append("Improve menu item descriptions and add photos")
    if processed["device_analysis"]["mobile"]["percentage"] < 50:
        recommendations.append("Optimize menu for mobile devices")
    if summary["bounce_rate"] > 60:
        recommendations.append("Add engaging content to reduce bounce rate")
    return recommendations


def build_behavioral_insights(bundle: AnalyticsBundle) -> Dict[str, Any]:
    processed = bundle.processed
    time_analysis = processed["time_analysis"]
    devices = processed["device_analysis"]
    behavior = processed["behavior"]
    journey = behavior["user_journey"]
    season = season_for_month(bundle.period.end.month)
    patterns = bundle.sample_data.get("sample_patterns", {})

    return {
        "user_behavior": {
            "peak_hours": time_analysis["peak_hours"],
            "peak_days": time_analysis["peak_days"],
            "device_preference": (
                "mobile"
                if devices["mobile"]["percentage"] > devices["desktop"]["percentage"]
                else "desktop"
            ),
            "engagement_level": processed["engagement"]["engagement_level"],
        },
        "customer_journey": {
            "average_session_length": behavior["average_session_length"],
            "average_journey_length": journey["average_journey_length"],
            "conversion_rate": journey["conversion_rate"],
            "common_paths": journey["common_paths"],
        },
        "retention": {
            "estimated_return_visitors": behavior["return_visitors"]["estimated_return_visitors"],
            "return_visitor_rate": behavior["return_visitors"]["return_visitor_rate"],
            "retention_score": processed["engagement"]["user_retention"]["retention_score"],
        },
        "patterns": {
            "seasonal_trends": {
                "current_season": season,
                "demand_multipliers": patterns.get("seasonal_trends", {}).get(season, {}),
            },
            "time_patterns": {
                "peak_times": [h["hour"] for h in time_analysis["peak_hours"] if h["count"] > 0],
                "meal_periods": patterns.get("time_patterns", {}),
            },
            "price_sensitivity": price_sensitivity(processed["item_analysis"]),
        },
    }


def price_sensitivity(item_analysis: List[Dict[str, Any]]) -> Dict[str, Any]:
    """Clicks split by price band of the clicked items (unknown prices skipped)."""
    bands = {"low_price": 0, "mid_price": 0, "high_price": 0}
    for item in item_analysis:
        price = item.get("price")
        if price is None:
            continue
        if price < 10:
            bands["low_price"] += item["clicks"]
        elif price < 25:
            bands["mid_price"] += item["clicks"]
        else:
            bands["high_price"] += item["clicks"]

    total = sum(bands.values())
    preferred = max(bands, key=bands.get) if total else None
    return {"clicks_by_band": bands, "preferred_band": preferred}


def build_predictive_insights(bundle: AnalyticsBundle) -> Dict[str, Any]:
    processed = bundle.processed
    summary = processed["summary"]
    ctr = summary["click_through_rate"]
    items = processed["item_analysis"]
    returning = processed["behavior"]["return_visitors"]["estimated_return_visitors"]
    season = season_for_month(bundle.period.end.month)

    return {
        "growth_projections": {
            "traffic_growth": project_traffic_growth(summary["total_views"], ctr),
            "revenue_potential": revenue_potential(
                summary["total_clicks"], average_item_price(items)
            ),
            "customer_acquisition": {
                "returning_visitors": returning,
                "new_visitors": max(summary["total_views"] - returning, 0),
            },
        },
        "demand_forecasting": {
            "peak_periods": [
                h["hour"] for h in processed["time_analysis"]["peak_hours"] if h["count"] > 0
            ],
            "seasonal_demand": season,
            "menu_item_demand": [
                {"name": item["name"], "clicks": item["clicks"], "performance": item["performance"]}
                for item in items[:5]
            ],
        },
        "risk_assessment": {
            "traffic_risks": traffic_risks(summary),
            "performance_risks": performance_risks(summary),
            "competitive_risks": ["Competitors improving their digital menus"],
        },
        "opportunities": {
            "market_expansion": market_opportunities(processed),
            "product_opportunities": {
                "suggestions": [
                    "Promote underperforming items with photos and specials",
                    "Feature star performers at the top of their category",
                ],
                "underperforming_items": [i["name"] for i in items if i["clicks"] < 3],
            },
            "timing_opportunities": [
                "Run promotions outside peak hours",
                "Align specials with the current season",
            ],
        },
    }


def traffic_risks(summary: Dict[str, Any]) -> List[str]:
    risks = []
    if summary["total_views"] < 100:
        risks.append("Low overall traffic volume")
    if summary["bounce_rate"] > 70:
        risks.append("High bounce rate may indicate poor first impression")
    return risks


def performance_risks(summary: Dict[str, Any]) -> List[str]:
    risks = []
    if summary["click_through_rate"] < 5:
        risks.append("Very low engagement with menu items")
    if summary["average_session_duration"] < 1:
        risks.append("Visitors leave almost immediately")
    return risks


def market_opportunities(processed: Dict[str, Any]) -> List[str]:
    opportunities = []
    if processed["device_analysis"]["mobile"]["percentage"] > 70:
        opportunities.append("Strong mobile presence - consider mobile ordering")
    if processed["summary"]["click_through_rate"] > 20:
        opportunities.append("High engagement - ready for online ordering")
    return opportunities


def build_optimization_recommendations(bundle: AnalyticsBundle) -> Dict[str, Any]:
    summary = bundle.processed["summary"]
    immediate = immediate_recommendations(summary["click_through_rate"], summary["bounce_rate"])
    short_term = [dict(r) for r in SHORT_TERM_RECOMMENDATIONS]
    long_term = [dict(r) for r in LONG_TERM_RECOMMENDATIONS]

    return {
        "immediate": immediate,
        "short_term": short_term,
        "long_term": long_term,
        "priority": prioritize_recommendations(immediate + short_term + long_term),
    }


def industry_reference(bundle: AnalyticsBundle) -> Dict[str, float]:
    """Industry CTR and mobile share; zero or missing falls back to defaults."""
    benchmarks = bundle.sample_data.get("industry_benchmarks", {})
    return {
        "click_through_rate": benchmarks.get("average_click_through_rate") or DEFAULT_INDUSTRY_CTR,
        "mobile_percentage": benchmarks.get("mobile_percentage") or DEFAULT_INDUSTRY_MOBILE,
        "session_duration": benchmarks.get("average_session_duration") or DEFAULT_SESSION_DURATION,
    }


def build_competitive_insights(bundle: AnalyticsBundle) -> Dict[str, Any]:
    processed = bundle.processed
    summary = processed["summary"]
    ctr = summary["click_through_rate"]
    mobile = processed["device_analysis"]["mobile"]["percentage"]
    industry = industry_reference(bundle)

    advantages = []
    if ctr > 20:
        advantages.append("High customer engagement")
    if processed["engagement"]["engagement_level"] == "high":
        advantages.append("Strong menu appeal")
    if summary["bounce_rate"] < 40:
        advantages.append("Visitors stay to explore the menu")

    gaps = []
    if ctr < industry["click_through_rate"]:
        gaps.append("Below industry average engagement")
    if mobile < industry["mobile_percentage"]:
        gaps.append("Mobile optimization needed")

    # Session duration is tracked in minutes, the industry baseline in seconds
    session_seconds = summary["average_session_duration"] * 60

    return {
        "market_position": {
            "click_through_rate": {
                "current": ctr,
                "industry": industry["click_through_rate"],
                "position": "above" if ctr > industry["click_through_rate"] else "below",
            },
            "mobile_optimization": {
                "current": mobile,
                "industry": industry["mobile_percentage"],
                "position": "above" if mobile > industry["mobile_percentage"] else "below",
            },
        },
        "competitive_advantages": {
            "advantages": advantages,
            "strength": "strong" if len(advantages) > 2 else "moderate" if len(advantages) > 1 else "weak",
        },
        "gaps": gaps,
        "benchmarks": {
            "click_through_rate": {
                "current": ctr,
                "industry": industry["click_through_rate"],
                "percentile": calculate_percentile(ctr, industry["click_through_rate"]),
            },
            "session_duration": {
                "current": session_seconds,
                "industry": industry["session_duration"],
                "percentile": calculate_percentile(session_seconds, industry["session_duration"]),
            },
        },
    }


def build_summary(bundle: AnalyticsBundle) -> Dict[str, Any]:
    processed = bundle.processed
    summary = processed["summary"]
    ctr = summary["click_through_rate"]
    clicks = summary["total_clicks"]
    avg_price = average_item_price(processed["item_analysis"])
    score = calculate_performance_score(
        ctr, processed["engagement"]["engagement_level"], summary["bounce_rate"]
    )

    key_findings = [
        f"{summary['total_views']} total menu views",
        f"{ctr}% click-through rate",
    ]
    peak_hours = processed["time_analysis"]["peak_hours"]
    if peak_hours and peak_hours[0]["count"] > 0:
        key_findings.append(f"Peak activity at {peak_hours[0]['hour']}:00")

    top_insights = [f"Performance rated {performance_rating(score)} ({score}/100)"]
    items = processed["item_analysis"]
    if items:
        top_insights.append(f"Most clicked item: {items[0]['name']}")
    top_insights.append(
        "Most visitors browse on mobile"
        if processed["device_analysis"]["mobile"]["percentage"] > 50
        else "Most visitors browse on desktop"
    )

    recommended = prioritize_recommendations(
        immediate_recommendations(ctr, summary["bounce_rate"]) + SHORT_TERM_RECOMMENDATIONS
    )

    return {
        "restaurant_name": bundle.user.restaurant_name or DEFAULT_RESTAURANT_NAME,
        "period": f"{bundle.period.days} days",
        "key_findings": key_findings,
        "top_insights": top_insights,
        "recommended_actions": [r["action"] for r in recommended[:3]],
        "business_impact": {
            "potential_revenue": round_half_up(clicks * avg_price * 0.3),
            "conversion_rate": f"{ctr}%",
            "improvement_potential": round_half_up(clicks * avg_price * 0.2),
            "roi": "High" if ctr > 15 else "Medium" if ctr > 10 else "Low",
        },
        "next_steps": [
            "Review the prioritized recommendations",
            "Implement the immediate actions this week",
            "Re-run insights after two weeks to measure impact",
        ],
    }


CATEGORY_BUILDERS: Dict[str, Callable[[AnalyticsBundle], Dict[str, Any]]] = {
    "performance_insights": build_performance_insights,
    "behavioral_insights": build_behavioral_insights,
    "predictive_insights": build_predictive_insights,
    "optimization_recommendations": build_optimization_recommendations,
    "competitive_insights": build_competitive_insights,
    "summary": build_summary,
}


class InsightsGenerator:
    """Generates, caches and persists insights reports."""

    def __init__(
        self,
        store: AnalyticsStore,
        cache: Optional[TTLCache] = None,
        ttl_seconds: Optional[int] = None,
        now: Callable[[], datetime] = utc_now,
    ):
        self.store = store
        self.cache = cache if cache is not None else InMemoryTTLCache()
        self.ttl_seconds = ttl_seconds or settings.insights_cache_ttl_seconds
        self.now = now

    async def generate(self, bundle: AnalyticsBundle, use_cache: bool = True) -> GenerationResult:
        """
        Build the report for a bundle and store it as the user's latest.

        A failed save does not lose the report: the error is logged and
        returned on the result.
        """
        user_id = bundle.user.id
        cache_key = f"insights:{user_id}:{bundle.period.days}"

        if use_cache:
            cached = await self.cache.get(cache_key)
            if cached:
                return GenerationResult(report=InsightsReport.model_validate(cached), cached=True)

        names = list(CATEGORY_BUILDERS)
        sections = await asyncio.gather(
            *(asyncio.to_thread(CATEGORY_BUILDERS[name], bundle) for name in names)
        )

        quality = bundle.metadata.data_quality
        report = InsightsReport(
            **dict(zip(names, sections)),
            metadata=InsightsMetadata(
                generated_at=self.now(),
                confidence=calculate_confidence(
                    bundle.metadata.has_enough_data,
                    quality.get("overall", "low"),
                    bundle.total_events,
                ),
                data_quality=quality,
                analysis_type=bundle.metadata.recommended_analysis,
                user_id=user_id,
            ),
        )

        persistence_error = None
        try:
            await self.store.save_insights(report.to_row())
        except Exception as e:
            logger.error(
                f"Failed to save insights for user {user_id}: {e}",
                exc_info=True,
                extra={"user_id": user_id},
            )
            persistence_error = e

        await self.cache.set(cache_key, report.model_dump(mode="json"), self.ttl_seconds)

        logger.info(
            f"Generated {report.metadata.analysis_type} insights for user {user_id} "
            f"(confidence {report.metadata.confidence})",
            extra={"user_id": user_id, "days": bundle.period.days},
        )
        return GenerationResult(report=report, persistence_error=persistence_error)

    async def latest(self, user_id: Union[str, uuid.UUID]) -> Optional[InsightsReport]:
        """Most recently stored report of a user, if any."""
        row = await self.store.get_insights_row(as_uuid(user_id))
        if row is None:
            return None
        return InsightsReport.from_row(row)
