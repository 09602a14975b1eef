"""
Daily Insights Refresh Worker.

Regenerates the stored insights report of every owner with an active menu,
so the dashboard's "latest" view is at most a day old.
"""

import asyncio
import logging
from typing import Dict, Optional

from app.workers.celery_app import celery_app
from app.config import settings
from app.exceptions import AnalyticsFetchError

logger = logging.getLogger(__name__)


@celery_app.task(bind=True, max_retries=3)
def refresh_all_insights(self, days: Optional[int] = None):
    """
    Celery task to refresh insights for all active owners.

    Runs daily at 4:00 AM in the reporting timezone.
    """
    try:
        result = asyncio.run(refresh_insights(days or settings.default_lookback_days))
        logger.info(f"Insights refresh finished: {result}")
        return result
    except Exception as e:
        logger.error(f"Insights refresh failed: {e}", exc_info=True)
        raise self.retry(exc=e, countdown=60 * (2 ** self.request.retries))


async def refresh_insights(days: int, store=None) -> Dict[str, int]:
    """Collect and generate for each owner; one owner's failure does not stop the rest."""
    from app.database import get_session_factory
    from app.services.analytics_collector import AnalyticsCollector
    from app.services.analytics_store import AnalyticsStore
    from app.services.insights_engine import InsightsGenerator

    if store is None:
        store = AnalyticsStore(get_session_factory())

    collector = AnalyticsCollector(store)
    generator = InsightsGenerator(store)

    user_ids = await store.get_users_with_active_menus()
    refreshed = 0
    failed = 0

    for user_id in user_ids:
        try:
            bundle = await collector.collect(user_id, days, use_cache=False)
        except AnalyticsFetchError as e:
            logger.warning(f"Skipping insights for user {user_id}: {e}")
            failed += 1
            continue

        result = await generator.generate(bundle, use_cache=False)
        if result.persistence_error is not None:
            failed += 1
        else:
            refreshed += 1

    return {"users": len(user_ids), "refreshed": refreshed, "failed": failed}
