from __future__ import annotations

from .errors import ResolutionError
from .models import DeploymentEvent, NotificationContext
from .repositories import CommitMessageSource, DeploymentRepository


def resolve_context(
    event: DeploymentEvent,
    repository: DeploymentRepository,
    commit_messages: CommitMessageSource,
) -> NotificationContext:
    """Look up everything the deploy message shows for ``event``.

    Lookups run in a fixed order and the first failure aborts resolution
    with :class:`ResolutionError`; nothing partial is returned.
    """
    step = "apply"
    try:
        apply = repository.get_apply(event.apply_id)
        step = "project"
        project = repository.get_project(apply.project_id)
        step = "server groups"
        groups = repository.get_groups_by_ids(project.online_cluster)
        step = "servers"
        servers = repository.get_servers_by_group_ids(project.online_cluster)
        step = "user"
        user = repository.get_user(apply.user_id)
        step = "commit message"
        commit_message = commit_messages.latest()
    except Exception as exc:
        raise ResolutionError(f"apply {event.apply_id}: failed to resolve {step}: {exc}") from exc

    return NotificationContext(
        event=event,
        apply=apply,
        project=project,
        server_count=len(servers),
        group_names=tuple(group.name for group in groups),
        commit_message=commit_message,
        username=user.username,
    )


__all__ = ["resolve_context"]
