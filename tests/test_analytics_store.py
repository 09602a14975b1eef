"""
Tests for AnalyticsStore reads and upserts.
"""

import uuid
from datetime import timedelta

import pytest

from app.models import BrandingSettings, Location, Organization, OrganizationMember, Subscription
from factories import NOW, add_events, create_menu, view


@pytest.mark.asyncio
async def test_user_menus_newest_first(store, session_factory, owner_id):
    await create_menu(session_factory, owner_id, "first", title="First")
    await create_menu(session_factory, owner_id, "second", title="Second")

    menus = await store.get_user_menus(owner_id)

    assert {m.slug for m in menus} == {"first", "second"}
    assert menus[0].created_at >= menus[1].created_at


@pytest.mark.asyncio
async def test_menu_slugs_active_filter(store, session_factory, owner_id):
    await create_menu(session_factory, owner_id, "on")
    await create_menu(session_factory, owner_id, "off", is_active=False)

    assert set(await store.get_menu_slugs(owner_id)) == {"on", "off"}
    assert await store.get_menu_slugs(owner_id, active_only=True) == ["on"]


@pytest.mark.asyncio
async def test_get_events_window_and_order(store, session_factory, owner_id):
    await create_menu(session_factory, owner_id, "main")
    await add_events(session_factory, [
        view("main", minutes_ago=120),
        view("main", minutes_ago=10),
        view("main", minutes_ago=60 * 24 * 10),
    ])

    events = await store.get_events(["main"], NOW - timedelta(days=7))

    assert len(events) == 2
    assert events[0].timestamp > events[1].timestamp

    bounded = await store.get_events(["main"], NOW - timedelta(days=7), NOW - timedelta(minutes=60))
    assert len(bounded) == 1


@pytest.mark.asyncio
async def test_get_events_without_slugs_is_empty(store):
    assert await store.get_events([], NOW - timedelta(days=7)) == []


@pytest.mark.asyncio
async def test_optional_tenant_records(store, session_factory, owner_id):
    assert await store.get_subscription(owner_id) is None
    assert await store.get_branding(owner_id) is None
    assert await store.get_organization_membership(owner_id) is None

    async with session_factory() as session:
        organization = Organization(name="Group", slug="group", city="Austin")
        session.add(organization)
        await session.flush()
        location = Location(organization_id=organization.id, name="Downtown", slug="downtown")
        session.add(location)
        await session.flush()
        session.add(OrganizationMember(
            user_id=owner_id,
            organization_id=organization.id,
            location_id=location.id,
            role="owner",
            is_active=True,
        ))
        session.add(Subscription(user_id=owner_id, plan="pro", status="active"))
        session.add(BrandingSettings(user_id=owner_id, primary_color="#112233"))
        await session.commit()

    subscription = await store.get_subscription(owner_id)
    assert subscription["plan"] == "pro"

    branding = await store.get_branding(owner_id)
    assert branding["primary_color"] == "#112233"

    membership = await store.get_organization_membership(owner_id)
    assert membership["role"] == "owner"
    assert membership["organization"]["name"] == "Group"
    assert membership["location"]["name"] == "Downtown"


@pytest.mark.asyncio
async def test_record_event_and_industry_sample(store):
    await store.record_event(event_type="menu_view", menu_slug="a", timestamp=NOW, is_bot=False)
    await store.record_event(event_type="menu_view", menu_slug="b", timestamp=NOW, is_bot=True)

    sample = await store.get_industry_sample(NOW - timedelta(days=1), limit=10)

    assert [e.menu_slug for e in sample] == ["a"]


@pytest.mark.asyncio
async def test_users_with_active_menus(store, session_factory):
    active_owner = uuid.uuid4()
    idle_owner = uuid.uuid4()
    await store.get_user_profile(active_owner)
    await store.get_user_profile(idle_owner)
    await create_menu(session_factory, active_owner, "live")
    await create_menu(session_factory, active_owner, "live-2")
    await create_menu(session_factory, idle_owner, "paused", is_active=False)

    assert await store.get_users_with_active_menus() == [active_owner]
