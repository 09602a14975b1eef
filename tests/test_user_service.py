"""
Tests for UserService.
"""

import pytest
import uuid
from sqlalchemy import select

from app.models.user import User
from app.services.user_service import UserService


@pytest.mark.asyncio
async def test_get_or_create_user_new(db):
    """Test creating a new user with defaults."""
    service = UserService(db)
    user_id = uuid.uuid4()

    user = await service.get_or_create_user(user_id)

    assert user.id == user_id
    assert user.email == "user@example.com"
    assert user.restaurant_name == "My Restaurant"

    # Verify in DB
    result = await db.execute(select(User).where(User.id == user_id))
    db_user = result.scalar_one()
    assert db_user.id == user.id


@pytest.mark.asyncio
async def test_get_or_create_user_with_details(db):
    service = UserService(db)

    user = await service.get_or_create_user(
        uuid.uuid4(), email="chef@example.com", restaurant_name="Chez Test"
    )

    assert user.email == "chef@example.com"
    assert user.restaurant_name == "Chez Test"


@pytest.mark.asyncio
async def test_get_or_create_user_existing(db):
    """Test retrieving an existing user keeps its profile."""
    service = UserService(db)
    user_id = uuid.uuid4()

    await service.get_or_create_user(user_id, restaurant_name="First Name")
    retrieved = await service.get_or_create_user(user_id, restaurant_name="Second Name")

    assert retrieved.id == user_id
    assert retrieved.restaurant_name == "First Name"


@pytest.mark.asyncio
async def test_get_user_by_id_missing(db):
    assert await UserService(db).get_user_by_id(uuid.uuid4()) is None
