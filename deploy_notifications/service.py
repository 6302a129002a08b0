from __future__ import annotations

from typing import List, Tuple

from .config import DEPLOY_LINK_LABEL, MSG_TYPE_POST, STATUS_TITLES
from .models import ContentCell, DeployStatus, NotificationContext, NotificationPayload, PostBody
from .signing import gen_sign


def deploy_link(app_host: str, apply_id: int) -> str:
    return f"{app_host.rstrip('/')}/deploy/deploy?id={apply_id}"


def status_title(status: DeployStatus) -> str:
    try:
        return STATUS_TITLES[status]
    except KeyError:
        raise ValueError(f"no title for deploy status {status!r}") from None


def _text(text: str) -> ContentCell:
    return ContentCell(tag="text", text=text)


def _link(href: str) -> ContentCell:
    return ContentCell(tag="a", text=DEPLOY_LINK_LABEL, href=href)


def render_post(context: NotificationContext, app_host: str) -> PostBody:
    """Render the seven-row rich post announcing a deployment."""
    apply = context.apply
    link = deploy_link(app_host, apply.id)

    version_row: List[ContentCell] = [_text(f"Service version: {apply.version_label}")]
    if apply.commit_version:
        version_row.append(_text(f"commitVersion:{apply.commit_version}"))

    rows: List[Tuple[ContentCell, ...]] = [
        (_text(f"Service name: {context.project.name}"),),
        tuple(version_row),
        (_text(f"Commit message: {context.commit_message}"),),
        (_text(f"Instance count: {context.server_count}"),),
        (_text(f"Environment: {context.group_label}"), _link(link)),
        (_text("Deploy detail: "), _link(link)),
        (_text(f"Publisher: {context.username}"),),
    ]
    return PostBody(title=status_title(context.event.status), rows=tuple(rows))


def build_payload(context: NotificationContext, secret: str, app_host: str, timestamp: int) -> NotificationPayload:
    """Render and sign the webhook request; ``timestamp`` feeds both fields."""
    body = render_post(context, app_host)
    return NotificationPayload(
        msg_type=MSG_TYPE_POST,
        body=body,
        timestamp=str(int(timestamp)),
        sign=gen_sign(secret, timestamp),
    )
