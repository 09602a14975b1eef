"""
Event Tracking - ingest path for public menu events.

Visitors are never identified: the client IP is reduced to a short hash and
the user agent only drives the bot / mobile flags.
"""

import hashlib
import logging
import re
from datetime import datetime
from typing import Optional

from app.services.analytics_collector import utc_now
from app.services.analytics_store import AnalyticsStore

logger = logging.getLogger(__name__)

BOT_PATTERN = re.compile(r"bot|crawler|spider|crawling", re.IGNORECASE)
MOBILE_PATTERN = re.compile(r"mobile|android|iphone|ipad", re.IGNORECASE)

UNKNOWN_IP = "0.0.0.0"


def is_bot(user_agent: Optional[str]) -> bool:
    return bool(BOT_PATTERN.search(user_agent or ""))


def is_mobile(user_agent: Optional[str]) -> bool:
    return bool(MOBILE_PATTERN.search(user_agent or ""))


def hash_ip(ip: Optional[str]) -> str:
    """First 16 hex characters of the SHA-256 of the address."""
    return hashlib.sha256((ip or UNKNOWN_IP).encode("utf-8")).hexdigest()[:16]


class EventTracker:
    """Records menu views and item clicks from public menu pages."""

    def __init__(self, store: AnalyticsStore):
        self.store = store

    async def track(
        self,
        event: str,
        slug: str,
        item_name: Optional[str] = None,
        timestamp: Optional[datetime] = None,
        user_agent: Optional[str] = None,
        referrer: Optional[str] = None,
        session_id: Optional[str] = None,
        country_code: Optional[str] = None,
        client_ip: Optional[str] = None,
    ) -> None:
        bot = is_bot(user_agent)
        await self.store.record_event(
            event_type=event,
            menu_slug=slug,
            item_name=item_name or None,
            timestamp=timestamp or utc_now(),
            session_id=session_id,
            user_agent=user_agent,
            referrer=referrer,
            country_code=country_code,
            is_bot=bot,
            is_mobile=is_mobile(user_agent),
            ip_hash=hash_ip(client_ip),
        )
        if bot:
            logger.debug(f"Recorded bot {event} on {slug}")
