"""
Analytics API Router - event ingest and dashboard summaries.

Security:
- /track is public (called from public menu pages)
- Owner summaries require the X-Admin-Key service key
- Visitor IPs are hashed before storage
"""

import logging
import uuid
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field

from app.api.deps import get_dashboard_service, get_event_tracker, verify_admin_key
from app.services.dashboard_summary import DashboardService
from app.services.event_tracking import EventTracker

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/analytics", tags=["Analytics"])


class TrackEventRequest(BaseModel):
    """Body posted by public menu pages."""

    model_config = ConfigDict(populate_by_name=True)

    event: Optional[str] = None
    slug: Optional[str] = None
    item_name: Optional[str] = None
    timestamp: Optional[datetime] = None
    user_agent: Optional[str] = Field(None, alias="userAgent")
    referrer: Optional[str] = None
    session_id: Optional[str] = None
    country_code: Optional[str] = None


def get_client_ip(request: Request) -> Optional[str]:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    real_ip = request.headers.get("x-real-ip")
    if real_ip:
        return real_ip
    return request.client.host if request.client else None


@router.post("/track")
async def track_event(
    body: TrackEventRequest,
    request: Request,
    tracker: EventTracker = Depends(get_event_tracker),
):
    """Record a menu view or item click."""
    if not body.event or not body.slug:
        raise HTTPException(status_code=400, detail="Event and slug are required")

    try:
        await tracker.track(
            event=body.event,
            slug=body.slug,
            item_name=body.item_name,
            timestamp=body.timestamp,
            user_agent=body.user_agent or request.headers.get("user-agent"),
            referrer=body.referrer,
            session_id=body.session_id,
            country_code=body.country_code,
            client_ip=get_client_ip(request),
        )
    except Exception as e:
        logger.error(f"Failed to track {body.event} on {body.slug}: {e}")
        return JSONResponse(content={"error": "Failed to track event"}, status_code=500)

    return {"success": True}


@router.get("/summary/{slug}")
async def get_menu_summary(
    slug: str,
    dashboard: DashboardService = Depends(get_dashboard_service),
):
    """Last 7 days of one menu: views, clicks, mobile share."""
    return await dashboard.menu_summary(slug)


@router.get("/users/{user_id}/summary")
async def get_user_summary(
    user_id: uuid.UUID,
    period: str = Query("7d", pattern="^(7d|30d|90d)$"),
    dashboard: DashboardService = Depends(get_dashboard_service),
    _: str = Depends(verify_admin_key),
):
    """Dashboard summary across the owner's active menus."""
    return await dashboard.user_summary(user_id, period)


@router.get("/{slug}")
async def get_menu_analytics(
    slug: str,
    days: int = Query(30, ge=1, le=365),
    dashboard: DashboardService = Depends(get_dashboard_service),
    _: str = Depends(verify_admin_key),
):
    """Detailed analytics of one menu."""
    analytics = await dashboard.menu_analytics(slug, days)
    if analytics is None:
        raise HTTPException(status_code=404, detail="Menu not found")
    return analytics
