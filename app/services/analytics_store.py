"""
Analytics Store - the pipeline's narrow window onto the hosted database.

Each call opens its own session so independent reads can run concurrently.
Queries go in, plain schema objects / dicts come out; no ORM instance
leaves this module.
"""

import uuid
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.orm import selectinload

from app.models.analytics_event import AnalyticsEvent
from app.models.branding import BrandingSettings
from app.models.menu import Menu, MenuItem
from app.models.organization import OrganizationMember
from app.models.subscription import Subscription
from app.models.user_insights import UserInsights
from app.schemas.analytics import Event, MenuItemSummary, MenuSummary
from app.services.user_service import UserService

logger = logging.getLogger(__name__)


class AnalyticsStore:
    """Read / upsert operations used by the collector and insights engine."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory

    # === Tenant data ===

    async def get_user_profile(self, user_id: uuid.UUID) -> Dict[str, Any]:
        """Profile of the owner, created with defaults when missing."""
        async with self.session_factory() as db:
            user = await UserService(db).get_or_create_user(user_id)
            profile = {
                "id": user.id,
                "email": user.email,
                "restaurant_name": user.restaurant_name,
                "phone": user.phone,
                "created_at": user.created_at,
            }
            await db.commit()
            return profile

    async def get_user_menus(self, user_id: uuid.UUID) -> List[MenuSummary]:
        """All menus of the owner, newest first."""
        async with self.session_factory() as db:
            result = await db.execute(
                select(Menu)
                .where(Menu.user_id == user_id)
                .order_by(Menu.created_at.desc())
            )
            return [MenuSummary.model_validate(menu) for menu in result.scalars().all()]

    async def get_menu_slugs(
        self,
        user_id: uuid.UUID,
        active_only: bool = False,
    ) -> List[str]:
        async with self.session_factory() as db:
            query = select(Menu.slug).where(Menu.user_id == user_id)
            if active_only:
                query = query.where(Menu.is_active.is_(True))
            result = await db.execute(query)
            return [row[0] for row in result.fetchall()]

    async def get_menu_by_slug(self, slug: str) -> Optional[MenuSummary]:
        async with self.session_factory() as db:
            result = await db.execute(select(Menu).where(Menu.slug == slug))
            menu = result.scalar_one_or_none()
            return MenuSummary.model_validate(menu) if menu else None

    async def get_menu_items(self, user_id: uuid.UUID) -> List[MenuItemSummary]:
        """Items of the owner's active menus, flattened with menu context."""
        async with self.session_factory() as db:
            result = await db.execute(
                select(MenuItem, Menu)
                .join(Menu, MenuItem.menu_id == Menu.id)
                .where(Menu.user_id == user_id)
                .where(Menu.is_active.is_(True))
                .order_by(Menu.created_at.desc(), MenuItem.sort_order)
            )
            return [
                MenuItemSummary(
                    id=item.id,
                    menu_id=menu.id,
                    name=item.name,
                    description=item.description,
                    price=float(item.price) if item.price is not None else None,
                    category=item.category,
                    emoji=item.emoji,
                    image_url=item.image_url,
                    is_available=item.is_available,
                    sort_order=item.sort_order,
                    menu_title=menu.title,
                    menu_slug=menu.slug,
                )
                for item, menu in result.all()
            ]

    async def get_subscription(self, user_id: uuid.UUID) -> Optional[Dict[str, Any]]:
        async with self.session_factory() as db:
            result = await db.execute(
                select(Subscription).where(Subscription.user_id == user_id)
            )
            subscription = result.scalar_one_or_none()
            if not subscription:
                return None
            return {
                "plan": subscription.plan,
                "status": subscription.status,
                "current_period_end": _isoformat(subscription.current_period_end),
                "created_at": _isoformat(subscription.created_at),
            }

    async def get_branding(self, user_id: uuid.UUID) -> Optional[Dict[str, Any]]:
        async with self.session_factory() as db:
            result = await db.execute(
                select(BrandingSettings).where(BrandingSettings.user_id == user_id)
            )
            branding = result.scalar_one_or_none()
            if not branding:
                return None
            return {
                "logo_url": branding.logo_url,
                "primary_color": branding.primary_color,
                "secondary_color": branding.secondary_color,
                "accent_color": branding.accent_color,
                "font_family": branding.font_family,
                "menu_layout": branding.menu_layout,
                "corner_radius": branding.corner_radius,
                "show_item_images": branding.show_item_images,
                "is_active": branding.is_active,
                "updated_at": _isoformat(branding.updated_at),
            }

    async def get_organization_membership(self, user_id: uuid.UUID) -> Optional[Dict[str, Any]]:
        """Active membership with its organization and location, if any."""
        async with self.session_factory() as db:
            result = await db.execute(
                select(OrganizationMember)
                .options(
                    selectinload(OrganizationMember.organization),
                    selectinload(OrganizationMember.location),
                )
                .where(OrganizationMember.user_id == user_id)
                .where(OrganizationMember.is_active.is_(True))
                .order_by(OrganizationMember.joined_at)
                .limit(1)
            )
            member = result.scalar_one_or_none()
            if not member:
                return None

            organization = member.organization
            location = member.location
            return {
                "role": member.role,
                "is_active": member.is_active,
                "joined_at": _isoformat(member.joined_at),
                "organization": {
                    "id": str(organization.id),
                    "name": organization.name,
                    "slug": organization.slug,
                    "description": organization.description,
                    "city": organization.city,
                    "state": organization.state,
                    "country": organization.country,
                } if organization else None,
                "location": {
                    "id": str(location.id),
                    "name": location.name,
                    "slug": location.slug,
                    "address": location.address,
                    "city": location.city,
                    "state": location.state,
                } if location else None,
            }

    # === Events ===

    async def get_events(
        self,
        menu_slugs: List[str],
        since: datetime,
        until: Optional[datetime] = None,
    ) -> List[Event]:
        """Non-bot events of the given menus, newest first."""
        if not menu_slugs:
            return []

        async with self.session_factory() as db:
            query = (
                select(AnalyticsEvent)
                .where(AnalyticsEvent.menu_slug.in_(menu_slugs))
                .where(AnalyticsEvent.timestamp >= since)
                .where(AnalyticsEvent.is_bot.is_(False))
                .order_by(AnalyticsEvent.timestamp.desc())
            )
            if until is not None:
                query = query.where(AnalyticsEvent.timestamp <= until)
            result = await db.execute(query)
            return [Event.model_validate(row) for row in result.scalars().all()]

    async def get_industry_sample(self, since: datetime, limit: int = 1000) -> List[Event]:
        """Non-bot events across all tenants, capped."""
        async with self.session_factory() as db:
            result = await db.execute(
                select(AnalyticsEvent)
                .where(AnalyticsEvent.timestamp >= since)
                .where(AnalyticsEvent.is_bot.is_(False))
                .limit(limit)
            )
            return [Event.model_validate(row) for row in result.scalars().all()]

    async def record_event(self, **fields: Any) -> None:
        """Append one event to the log."""
        async with self.session_factory() as db:
            db.add(AnalyticsEvent(**fields))
            await db.commit()

    # === Insights ===

    async def save_insights(self, row: Dict[str, Any]) -> None:
        """Upsert the insights row of a user (one row per user, overwritten)."""
        async with self.session_factory() as db:
            user_id = row["user_id"]
            await UserService(db).get_or_create_user(user_id)

            result = await db.execute(
                select(UserInsights).where(UserInsights.user_id == user_id)
            )
            existing = result.scalar_one_or_none()

            if existing:
                existing.insights = row["insights"]
                existing.generated_at = row["generated_at"]
                existing.confidence = row["confidence"]
                existing.data_quality = row["data_quality"]
                existing.analysis_type = row["analysis_type"]
            else:
                db.add(UserInsights(**row))

            await db.commit()

    async def get_insights_row(self, user_id: uuid.UUID) -> Optional[Dict[str, Any]]:
        async with self.session_factory() as db:
            result = await db.execute(
                select(UserInsights).where(UserInsights.user_id == user_id)
            )
            stored = result.scalar_one_or_none()
            if not stored:
                return None
            return {
                "user_id": stored.user_id,
                "insights": stored.insights,
                "generated_at": stored.generated_at,
                "confidence": stored.confidence,
                "data_quality": stored.data_quality,
                "analysis_type": stored.analysis_type,
            }

    async def get_users_with_active_menus(self) -> List[uuid.UUID]:
        async with self.session_factory() as db:
            result = await db.execute(
                select(Menu.user_id)
                .where(Menu.is_active.is_(True))
                .distinct()
            )
            return [row[0] for row in result.fetchall()]


def _isoformat(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None
