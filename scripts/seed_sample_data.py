"""
Seed script to populate a demo restaurant with menus, items, a subscription,
an organization and 30 days of analytics events.
Run: python scripts/seed_sample_data.py <user-uuid> [email]
"""

import asyncio
import random
import sys
import os
import uuid
from datetime import datetime, timedelta, timezone
from decimal import Decimal

from dotenv import load_dotenv

load_dotenv()

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from sqlalchemy import select
from app.database import get_db_context, init_db
from app.models import (
    AnalyticsEvent,
    EventType,
    Location,
    Menu,
    MenuItem,
    Organization,
    OrganizationMember,
    Subscription,
)
from app.services.user_service import UserService


MENUS_DATA = [
    {
        "slug": "main-menu",
        "title": "Main Menu",
        "description": "Our signature dishes and favorites",
        "items": [
            ("Margherita Pizza", "Fresh mozzarella, tomato sauce, and basil", "16.99", "Pizza", "🍕"),
            ("Caesar Salad", "Crisp romaine, parmesan, croutons", "12.99", "Salads", "🥗"),
            ("Pasta Carbonara", "Roman pasta with eggs, cheese, and pancetta", "18.99", "Pasta", "🍝"),
            ("Grilled Salmon", "Atlantic salmon with seasonal vegetables", "24.99", "Seafood", "🐟"),
            ("Tiramisu", "Coffee and mascarpone dessert", "8.99", "Desserts", "🍰"),
        ],
    },
    {
        "slug": "drinks-menu",
        "title": "Beverages",
        "description": "Craft cocktails, wines, and specialty drinks",
        "items": [
            ("Craft Beer", "Local brewery selection on tap", "6.99", "Beer", "🍺"),
            ("House Wine", "Red or white by the glass", "9.99", "Wine", "🍷"),
            ("Craft Cocktail", "Artisanal cocktails made fresh", "12.99", "Cocktails", "🍸"),
            ("Fresh Juice", "Cold-pressed juice of the day", "5.99", "Non-Alcoholic", "🧃"),
        ],
    },
]

LOCATIONS_DATA = [
    ("Downtown Location", "downtown", "123 Main St"),
    ("Airport Branch", "airport", "456 Terminal Dr"),
    ("Midtown Restaurant", "midtown", "789 Broadway"),
]

MOBILE_UA = "Mozilla/5.0 (iPhone; CPU iPhone OS 16_0)"
DESKTOP_UA = "Mozilla/5.0 (Macintosh; Intel Mac OS X)"
COUNTRIES = ["US", "US", "US", "CA", "GB", "AU"]


def build_events(menus, days: int = 30, rng: random.Random = None):
    """Views between 7 AM and 9 PM, ~78% mobile, ~25% followed by a click."""
    rng = rng or random.Random()
    now = datetime.now(timezone.utc)
    events = []

    for d in range(days):
        day = now - timedelta(days=d)
        for _ in range(rng.randint(15, 59)):
            viewed_at = day.replace(
                hour=rng.randint(7, 20),
                minute=rng.randint(0, 59),
                second=rng.randint(0, 59),
            )
            if viewed_at > now:
                viewed_at -= timedelta(days=1)

            menu = rng.choice(menus)
            mobile = rng.random() > 0.22
            session_id = uuid.uuid4().hex[:12]
            common = {
                "menu_slug": menu.slug,
                "is_mobile": mobile,
                "is_bot": False,
                "user_agent": MOBILE_UA if mobile else DESKTOP_UA,
                "session_id": session_id,
                "country_code": rng.choice(COUNTRIES),
                "ip_hash": uuid.uuid4().hex[:16],
            }
            events.append(AnalyticsEvent(
                event_type=EventType.MENU_VIEW,
                timestamp=viewed_at,
                **common,
            ))

            if rng.random() > 0.75:
                item = rng.choice(menu.items)
                events.append(AnalyticsEvent(
                    event_type=EventType.ITEM_CLICK,
                    item_name=item.name,
                    timestamp=min(viewed_at + timedelta(seconds=rng.randint(5, 60)), now),
                    **common,
                ))

    return events


async def seed_sample_data(user_id: uuid.UUID, email: str):
    """Seed a demo restaurant for the given owner."""
    await init_db()

    async with get_db_context() as db:
        await UserService(db).get_or_create_user(
            user_id, email=email, restaurant_name="Demo Restaurant"
        )

        result = await db.execute(select(Menu).where(Menu.user_id == user_id).limit(1))
        if result.scalar_one_or_none():
            print("⚠️ Sample data already seeded for this user. Skipping.")
            return

        menus = []
        for menu_data in MENUS_DATA:
            menu = Menu(
                user_id=user_id,
                slug=f"{menu_data['slug']}-{str(user_id)[:8]}",
                title=menu_data["title"],
                description=menu_data["description"],
                is_active=True,
            )
            menu.items = [
                MenuItem(
                    name=name,
                    description=description,
                    price=Decimal(price),
                    category=category,
                    emoji=emoji,
                    sort_order=position,
                )
                for position, (name, description, price, category, emoji) in enumerate(menu_data["items"])
            ]
            db.add(menu)
            menus.append(menu)
            print(f"  ✅ Added menu: {menu.title} ({len(menu.items)} items)")

        organization = Organization(
            name="Demo Restaurant Group",
            slug=f"demo-restaurant-group-{str(user_id)[:8]}",
            description="Sample restaurant chain for testing",
            city="New York",
            state="NY",
            country="US",
        )
        db.add(organization)
        await db.flush()

        locations = [
            Location(
                organization_id=organization.id,
                name=name,
                slug=slug,
                address=address,
                city="New York",
                state="NY",
            )
            for name, slug, address in LOCATIONS_DATA
        ]
        db.add_all(locations)
        await db.flush()

        db.add(OrganizationMember(
            user_id=user_id,
            organization_id=organization.id,
            location_id=locations[0].id,
            role="owner",
            is_active=True,
        ))
        db.add(Subscription(
            user_id=user_id,
            plan="pro",
            status="active",
            current_period_end=datetime.now(timezone.utc) + timedelta(days=30),
        ))

        events = build_events(menus)
        db.add_all(events)
        print(f"  ✅ Added {len(events)} analytics events")

    print("\n🎉 Sample data seeded!")


if __name__ == "__main__":
    if len(sys.argv) < 2:
        print("Usage: python scripts/seed_sample_data.py <user-uuid> [email]")
        sys.exit(1)

    owner_id = uuid.UUID(sys.argv[1])
    owner_email = sys.argv[2] if len(sys.argv) > 2 else "demo@example.com"
    print("🍽️ Seeding demo restaurant...\n")
    asyncio.run(seed_sample_data(owner_id, owner_email))
