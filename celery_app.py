"""Celery application factory for background deploy notifications."""
from __future__ import annotations

import os
from celery import Celery

DEFAULT_BROKER_URL = os.getenv("CELERY_BROKER_URL", os.getenv("REDIS_URL", "redis://localhost:6379/0"))
DEFAULT_BACKEND_URL = os.getenv("CELERY_RESULT_BACKEND", DEFAULT_BROKER_URL)


def create_celery_app() -> Celery:
    """Create and configure the Celery app that runs notification tasks."""
    celery_app = Celery(
        "deploy_notifications",
        broker=DEFAULT_BROKER_URL,
        backend=DEFAULT_BACKEND_URL,
        include=["deploy_notifications.tasks"],
    )

    celery_app.conf.update(
        task_serializer="json",
        result_serializer="json",
        accept_content=["json"],
        timezone=os.getenv("CELERY_TIMEZONE", "UTC"),
        enable_utc=True,
        worker_concurrency=int(os.getenv("NOTIFY_WORKER_CONCURRENCY", "4")),
        task_ignore_result=True,
    )

    return celery_app


celery_app = create_celery_app()
