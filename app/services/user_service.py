"""
User Service - restaurant owner profiles.
"""

import uuid
import logging
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.user import User, DEFAULT_EMAIL, DEFAULT_RESTAURANT_NAME

logger = logging.getLogger(__name__)


class UserService:
    """Service for user profile lookup and lazy creation."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_user_by_id(self, user_id: uuid.UUID) -> Optional[User]:
        """Get user by ID."""
        result = await self.db.execute(
            select(User).where(User.id == user_id)
        )
        return result.scalar_one_or_none()

    async def get_or_create_user(
        self,
        user_id: uuid.UUID,
        email: Optional[str] = None,
        restaurant_name: Optional[str] = None,
    ) -> User:
        """
        Get existing user or create a default profile.

        Auth lives with the hosted provider, so a signed-in owner may not
        have a profile row yet. Creation is keyed by id and safe to repeat.
        """
        result = await self.db.execute(
            select(User).where(User.id == user_id).with_for_update()
        )
        user = result.scalar_one_or_none()

        if user:
            return user

        user = User(
            id=user_id,
            email=email or DEFAULT_EMAIL,
            restaurant_name=restaurant_name or DEFAULT_RESTAURANT_NAME,
        )
        self.db.add(user)
        try:
            await self.db.flush()
        except IntegrityError:
            # Another request created the row first
            await self.db.rollback()
            existing = await self.get_user_by_id(user_id)
            if existing is None:
                raise
            return existing

        logger.info(f"Created default profile for user {user_id}")
        return user
