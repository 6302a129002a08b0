from __future__ import annotations

import logging
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Optional

from .channels import send_feishu
from .collectors import resolve_context
from .config import NotifierSettings
from .errors import ResolutionError, SigningError
from .models import DeploymentEvent, NotificationPayload
from .repositories import CommitMessageSource, DeploymentRepository
from .service import build_payload

LOGGER = logging.getLogger(__name__)

Transport = Callable[[str, NotificationPayload, Optional[float]], bool]


class NotificationDispatcher:
    """Announces deployment outcomes on a bounded pool of background workers.

    ``notify`` never blocks the deploy workflow: it either hands the event to
    the pool or, when ``max_pending`` events are already in flight, drops it
    with a warning. Every failure inside a task is logged and swallowed.
    """

    def __init__(
        self,
        settings: NotifierSettings,
        repository: DeploymentRepository,
        commit_messages: CommitMessageSource,
        transport: Transport = send_feishu,
        clock: Callable[[], float] = time.time,
    ):
        self.settings = settings
        self.repository = repository
        self.commit_messages = commit_messages
        self.transport = transport
        self.clock = clock
        self._slots = threading.BoundedSemaphore(settings.max_pending)
        self._executor = ThreadPoolExecutor(
            max_workers=settings.max_workers,
            thread_name_prefix="deploy-notify",
        )

    def notify(self, event: DeploymentEvent) -> bool:
        """Schedule a notification for ``event``; returns False if it was dropped."""
        if not self._slots.acquire(blocking=False):
            LOGGER.warning("Notification queue full; dropping deploy notification for apply %s", event.apply_id)
            return False
        try:
            self._executor.submit(self._run, event)
        except RuntimeError:
            self._slots.release()
            LOGGER.warning("Dispatcher is shut down; dropping deploy notification for apply %s", event.apply_id)
            return False
        return True

    def _run(self, event: DeploymentEvent) -> bool:
        try:
            return self.deliver(event)
        except Exception:
            LOGGER.exception("Unexpected error while notifying apply %s", event.apply_id)
            return False
        finally:
            self._slots.release()

    def deliver(self, event: DeploymentEvent) -> bool:
        """Resolve, render, sign and post one notification synchronously."""
        if not self.settings.enabled:
            LOGGER.info("Skipping deploy notification for apply %s: no webhook configured", event.apply_id)
            return False

        try:
            context = resolve_context(event, self.repository, self.commit_messages)
        except ResolutionError as exc:
            LOGGER.info("Skipping deploy notification: %s", exc)
            return False

        try:
            timestamp = int(self.clock())
            payload = build_payload(context, self.settings.secret, self.settings.app_host, timestamp)
        except (SigningError, TypeError, ValueError, OverflowError) as exc:
            LOGGER.error("Could not build deploy notification for apply %s: %s", event.apply_id, exc)
            return False

        return self.transport(self.settings.webhook_url, payload, self.settings.timeout)

    def shutdown(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)

    def __enter__(self) -> "NotificationDispatcher":
        return self

    def __exit__(self, *exc_info) -> None:
        self.shutdown()
