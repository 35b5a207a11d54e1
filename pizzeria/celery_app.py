"""Celery application configuration."""

from celery import Celery

from pizzeria.config import get_settings

settings = get_settings()

app = Celery(
    "pizzeria",
    broker=settings.redis_url,
    backend=settings.redis_url,
    include=["pizzeria.tasks.inventory"],
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
    beat_schedule={
        "check-inventory-levels": {
            "task": "pizzeria.tasks.inventory.check_inventory_levels",
            "schedule": settings.inventory_check_interval_minutes * 60.0,
        },
    },
)
