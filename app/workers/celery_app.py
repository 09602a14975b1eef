"""
Celery application configuration.
"""

from celery import Celery
from celery.schedules import crontab

from app.config import settings

# Create Celery app
celery_app = Celery(
    "menu_insights",
    broker=settings.redis_url,
    backend=settings.redis_url,
    include=[
        "app.workers.refresh_insights",
    ],
)

# Celery configuration
celery_app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone=settings.default_timezone,
    enable_utc=True,
    task_track_started=True,
    task_time_limit=900,  # 15 minutes
    worker_prefetch_multiplier=1,
    task_acks_late=True,
)

# Beat schedule for periodic tasks
celery_app.conf.beat_schedule = {
    # Regenerate stored insights before owners open the dashboard
    "daily-insights-refresh": {
        "task": "app.workers.refresh_insights.refresh_all_insights",
        "schedule": crontab(hour=4, minute=0),
    },
}
