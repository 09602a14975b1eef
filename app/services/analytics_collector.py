"""
Analytics Collector - gathers everything known about a restaurant owner
for a lookback window and derives first-pass metrics.

Eight independent reads fan out concurrently; the first failure cancels
the rest and aborts the collection (no partial bundle).
"""

import asyncio
import logging
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Awaitable, Callable, Dict, List, Optional, Union
from zoneinfo import ZoneInfo

from app.cache import InMemoryTTLCache, TTLCache
from app.config import settings
from app.exceptions import AnalyticsFetchError
from app.schemas.analytics import (
    AnalyticsBundle,
    AnalyticsPeriod,
    BundleMetadata,
    Event,
    MenusOverview,
    UserProfile,
)
from app.services.analytics_metrics import (
    assess_data_quality,
    has_enough_data,
    process_events,
    recommend_analysis_type,
)
from app.services.analytics_store import AnalyticsStore
from app.services.industry_baseline import build_sample_data

logger = logging.getLogger(__name__)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def as_uuid(value: Union[str, uuid.UUID]) -> uuid.UUID:
    return value if isinstance(value, uuid.UUID) else uuid.UUID(str(value))


async def gather_fail_fast(*aws: Awaitable[Any]) -> List[Any]:
    """Await all concurrently; on the first error cancel the others and re-raise."""
    tasks = [asyncio.ensure_future(aw) for aw in aws]
    try:
        return await asyncio.gather(*tasks)
    except BaseException:
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise


class AnalyticsCollector:
    """Builds an AnalyticsBundle for one user and lookback window."""

    def __init__(
        self,
        store: AnalyticsStore,
        cache: Optional[TTLCache] = None,
        ttl_seconds: Optional[int] = None,
        timezone_name: Optional[str] = None,
        sample_limit: Optional[int] = None,
        now: Callable[[], datetime] = utc_now,
    ):
        self.store = store
        self.cache = cache if cache is not None else InMemoryTTLCache()
        self.ttl_seconds = ttl_seconds or settings.analytics_cache_ttl_seconds
        self.tz = ZoneInfo(timezone_name or settings.default_timezone)
        self.sample_limit = sample_limit or settings.industry_sample_limit
        self.now = now

    async def collect(
        self,
        user_id: Union[str, uuid.UUID],
        days: int = 30,
        use_cache: bool = True,
    ) -> AnalyticsBundle:
        """
        Collect analytics for a user over the last `days` days.

        Raises:
            AnalyticsFetchError: a read failed (network, auth, store error).
        """
        user_id = as_uuid(user_id)
        cache_key = f"analytics:{user_id}:{days}"

        if use_cache:
            cached = await self.cache.get(cache_key)
            if cached:
                return AnalyticsBundle.model_validate(cached)

        end_date = self.now()
        start_date = end_date - timedelta(days=days)

        try:
            (
                profile,
                menus,
                events,
                subscription,
                branding,
                organization,
                menu_items,
                sample,
            ) = await gather_fail_fast(
                self._fetch("profile", self.store.get_user_profile(user_id)),
                self._fetch("menus", self.store.get_user_menus(user_id)),
                self._fetch("events", self._get_user_events(user_id, start_date)),
                self._fetch("subscription", self.store.get_subscription(user_id)),
                self._fetch("branding", self.store.get_branding(user_id)),
                self._fetch("organization", self.store.get_organization_membership(user_id)),
                self._fetch("menu_items", self.store.get_menu_items(user_id)),
                self._fetch("industry_sample", self.store.get_industry_sample(start_date, self.sample_limit)),
            )
        except AnalyticsFetchError as e:
            logger.error(
                f"Analytics collection failed for user {user_id}: {e}",
                extra={"user_id": user_id, "days": days, "source": e.source},
            )
            raise

        if subscription is None:
            subscription = {
                "plan": "free",
                "status": "active",
                "created_at": end_date.isoformat(),
            }

        bundle = AnalyticsBundle(
            user=UserProfile(**profile, subscription=subscription),
            menus=MenusOverview(
                total=len(menus),
                active=sum(1 for m in menus if m.is_active),
                data=menus,
            ),
            menu_items=menu_items,
            events=events,
            period=AnalyticsPeriod(start=start_date, end=end_date, days=days),
            processed=process_events(events, menus, menu_items, self.tz),
            branding=branding,
            organization=organization,
            sample_data=build_sample_data(sample, self.tz),
            metadata=BundleMetadata(
                collected_at=end_date,
                data_quality=assess_data_quality(events, menus),
                has_enough_data=has_enough_data(len(events)),
                recommended_analysis=recommend_analysis_type(len(events), len(menus)),
            ),
        )

        await self.cache.set(cache_key, bundle.model_dump(mode="json"), self.ttl_seconds)

        logger.info(
            f"Collected {len(events)} events across {len(menus)} menus for user {user_id}",
            extra={"user_id": user_id, "days": days},
        )
        return bundle

    async def processed_summary(
        self,
        user_id: Union[str, uuid.UUID],
        days: int = 30,
    ) -> Dict[str, Any]:
        """Only the derived metrics, for dashboard widgets."""
        bundle = await self.collect(user_id, days)
        return bundle.processed

    async def _get_user_events(self, user_id: uuid.UUID, since: datetime) -> List[Event]:
        """Events of the user's menus; no menus means no event query at all."""
        slugs = await self.store.get_menu_slugs(user_id)
        if not slugs:
            return []
        return await self.store.get_events(slugs, since)

    async def _fetch(self, source: str, aw: Awaitable[Any]) -> Any:
        try:
            return await aw
        except Exception as e:
            raise AnalyticsFetchError(source, e) from e
