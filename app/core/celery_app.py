"""Celery application for periodic subscription maintenance."""
from celery import Celery
from celery.schedules import crontab

from app.core.config import settings

celery_app = Celery(
    "festiva",
    broker=settings.REDIS_URL,
    backend=settings.REDIS_URL,
    include=["app.tasks.subscription_tasks"],
)

celery_app.conf.update(
    timezone=settings.CELERY_TIMEZONE,
    task_serializer="json",
    result_serializer="json",
    accept_content=["json"],
    task_track_started=True,
    beat_schedule={
        "expire-lapsed-subscriptions": {
            "task": "tasks.expire_lapsed_subscriptions",
            "schedule": crontab(hour=settings.EXPIRY_CHECK_HOUR, minute=settings.EXPIRY_CHECK_MINUTE),
        },
    },
)
