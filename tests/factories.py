"""
Builders for test data: menus, items and analytics events.
"""

import uuid
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import List, Optional

from app.models import AnalyticsEvent, EventType, Menu, MenuItem

# Wednesday afternoon, UTC
NOW = datetime(2026, 3, 18, 18, 0, tzinfo=timezone.utc)


def fixed_now() -> datetime:
    return NOW


async def create_menu(
    session_factory,
    user_id: uuid.UUID,
    slug: str,
    title: str = "Main Menu",
    is_active: bool = True,
    items: Optional[List[tuple]] = None,
) -> uuid.UUID:
    """Insert a menu with (name, price, category) items; returns its id."""
    async with session_factory() as session:
        menu = Menu(user_id=user_id, slug=slug, title=title, is_active=is_active)
        menu.items = [
            MenuItem(
                name=name,
                price=Decimal(str(price)) if price is not None else None,
                category=category,
                sort_order=position,
            )
            for position, (name, price, category) in enumerate(items or [])
        ]
        session.add(menu)
        await session.commit()
        return menu.id


async def add_events(session_factory, events: List[dict]) -> None:
    async with session_factory() as session:
        session.add_all([AnalyticsEvent(**fields) for fields in events])
        await session.commit()


def view(slug: str, minutes_ago: int = 60, session_id: Optional[str] = None, **extra) -> dict:
    return {
        "event_type": EventType.MENU_VIEW,
        "menu_slug": slug,
        "timestamp": NOW - timedelta(minutes=minutes_ago),
        "session_id": session_id,
        **extra,
    }


def click(
    slug: str,
    item_name: str,
    minutes_ago: int = 59,
    session_id: Optional[str] = None,
    **extra,
) -> dict:
    return {
        "event_type": EventType.ITEM_CLICK,
        "menu_slug": slug,
        "item_name": item_name,
        "timestamp": NOW - timedelta(minutes=minutes_ago),
        "session_id": session_id,
        **extra,
    }
