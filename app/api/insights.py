"""
Insights API Router - collect analytics and generate AI-style insights
for a restaurant owner.
"""

import logging
import uuid

from fastapi import APIRouter, Depends, HTTPException, Query

from app.api.deps import get_collector, get_insights_generator, verify_admin_key
from app.config import settings
from app.exceptions import AnalyticsFetchError
from app.services.analytics_collector import AnalyticsCollector
from app.services.insights_engine import InsightsGenerator

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/ai-insights",
    tags=["Insights"],
    dependencies=[Depends(verify_admin_key)],
)


@router.get("/{user_id}/analytics")
async def get_processed_analytics(
    user_id: uuid.UUID,
    days: int = Query(settings.default_lookback_days, ge=1, le=365),
    collector: AnalyticsCollector = Depends(get_collector),
):
    """Derived metrics only, without generating insights."""
    try:
        return await collector.processed_summary(user_id, days)
    except AnalyticsFetchError as e:
        raise HTTPException(status_code=502, detail=f"Failed to load {e.source}")


@router.post("/{user_id}/generate")
async def generate_insights(
    user_id: uuid.UUID,
    days: int = Query(settings.default_lookback_days, ge=1, le=365),
    refresh: bool = Query(False),
    collector: AnalyticsCollector = Depends(get_collector),
    generator: InsightsGenerator = Depends(get_insights_generator),
):
    """
    Collect analytics for the window and generate a report.

    The report is returned even when storing it failed; `saved` says which.
    """
    try:
        bundle = await collector.collect(user_id, days, use_cache=not refresh)
    except AnalyticsFetchError as e:
        raise HTTPException(status_code=502, detail=f"Failed to load {e.source}")

    result = await generator.generate(bundle, use_cache=not refresh)
    return {
        "insights": result.report.model_dump(mode="json"),
        "saved": result.saved,
        "cached": result.cached,
    }


@router.get("/{user_id}/latest")
async def get_latest_insights(
    user_id: uuid.UUID,
    generator: InsightsGenerator = Depends(get_insights_generator),
):
    """Most recently stored report."""
    report = await generator.latest(user_id)
    if report is None:
        raise HTTPException(status_code=404, detail="No insights generated yet")
    return report.model_dump(mode="json")
