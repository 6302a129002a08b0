from __future__ import annotations

import logging
import os
from functools import lru_cache
from typing import Any, Dict

from celery import shared_task

from .config import DatabaseSettings, NotifierSettings
from .dispatcher import NotificationDispatcher
from .models import DeploymentEvent
from .repositories import GitCommitMessages, SqlDeploymentRepository, create_session_factory

LOGGER = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def get_dispatcher() -> NotificationDispatcher:
    """Dispatcher wired from the environment, built once per worker process."""
    repository = SqlDeploymentRepository(create_session_factory(DatabaseSettings.from_env()))
    commit_messages = GitCommitMessages(os.getenv("DEPLOY_REPO_PATH") or None)
    return NotificationDispatcher(NotifierSettings.from_env(), repository, commit_messages)


@shared_task(name="deploy_notifications.tasks.send_deploy_notification", ignore_result=True)
def send_deploy_notification(payload: Dict[str, Any]) -> bool:
    try:
        event = DeploymentEvent.from_dict(payload)
    except (KeyError, TypeError, ValueError) as exc:
        LOGGER.error("Discarding malformed deploy event %r: %s", payload, exc)
        return False
    try:
        delivered = get_dispatcher().deliver(event)
    except Exception:
        LOGGER.exception("Unexpected error while notifying apply %s", event.apply_id)
        return False
    LOGGER.info("Deploy notification for apply %s delivered=%s", event.apply_id, delivered)
    return delivered


def enqueue_deploy_notification(event: DeploymentEvent) -> bool:
    """Hand ``event`` to the Celery workers; broker errors are logged, not raised."""
    try:
        send_deploy_notification.delay(event.to_dict())
    except Exception:
        LOGGER.exception("Failed to enqueue deploy notification for apply %s", event.apply_id)
        return False
    return True
