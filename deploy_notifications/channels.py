from __future__ import annotations

import json
import logging
from typing import Optional

import requests

from .models import NotificationPayload

LOGGER = logging.getLogger(__name__)


def send_feishu(webhook_url: str, payload: NotificationPayload, timeout: Optional[float] = None) -> bool:
    """Post the signed message to the bot webhook. Failures are logged, never raised."""
    headers = {"Content-Type": "application/json"}
    data = json.dumps(payload.to_dict(), ensure_ascii=False).encode("utf-8")

    try:
        resp = requests.post(webhook_url, headers=headers, data=data, timeout=timeout)
    except requests.RequestException as exc:
        LOGGER.exception("Failed to send deploy notification: %s", exc)
        return False

    if resp.status_code >= 400:
        LOGGER.error("Feishu webhook responded with %s: %s", resp.status_code, resp.text[:120])
        return False
    LOGGER.info("Sent deploy notification '%s' to %s", payload.body.title, webhook_url)
    return True
