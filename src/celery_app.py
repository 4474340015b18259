"""Celery application configuration."""

from celery import Celery

from src.config import get_settings

settings = get_settings()

app = Celery(
    "productivity_api",
    broker=settings.redis_url,
    backend=settings.redis_url,
    include=["src.tasks.notifications"],
)

# Celery configuration
app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,
    task_track_started=True,
    task_time_limit=300,  # 5 minutes max per task
    task_soft_time_limit=240,  # 4 minutes soft limit
    # The sweep runs to completion within the minute; expire queued runs instead of piling up
    beat_schedule={
        "notification-sweep": {
            "task": "src.tasks.notifications.process_notification_sweep",
            "schedule": 60.0,
            "options": {"expires": 55},
        },
    },
)
