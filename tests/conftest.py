import pytest

from deploy_notifications.config import NotifierSettings
from deploy_notifications.errors import EntityNotFound
from deploy_notifications.models import Apply, Project, Server, ServerGroup, User


class FakeRepository:
    def __init__(self, applies=None, projects=None, groups=None, servers=None, users=None, failures=None):
        self.applies = {a.id: a for a in applies or []}
        self.projects = {p.id: p for p in projects or []}
        self.groups = {g.id: g for g in groups or []}
        self.servers = list(servers or [])
        self.users = {u.id: u for u in users or []}
        self.calls = []
        self.failures = dict(failures or {})

    def _check(self, step):
        if step in self.failures:
            raise self.failures[step]

    def get_apply(self, apply_id):
        self.calls.append(("apply", apply_id))
        self._check("apply")
        if apply_id not in self.applies:
            raise EntityNotFound("apply", apply_id)
        return self.applies[apply_id]

    def get_project(self, project_id):
        self.calls.append(("project", project_id))
        self._check("project")
        if project_id not in self.projects:
            raise EntityNotFound("project", project_id)
        return self.projects[project_id]

    def get_groups_by_ids(self, group_ids):
        self.calls.append(("groups", tuple(group_ids)))
        self._check("groups")
        return [self.groups[gid] for gid in group_ids if gid in self.groups]

    def get_servers_by_group_ids(self, group_ids):
        self.calls.append(("servers", tuple(group_ids)))
        self._check("servers")
        return [s for s in self.servers if s.group_id in set(group_ids)]

    def get_user(self, user_id):
        self.calls.append(("user", user_id))
        self._check("user")
        if user_id not in self.users:
            raise EntityNotFound("user", user_id)
        return self.users[user_id]


class FakeCommitMessages:
    def __init__(self, message="fix bug", error=None):
        self.message = message
        self.error = error

    def latest(self):
        if self.error is not None:
            raise self.error
        return self.message


class RecordingTransport:
    def __init__(self, result=True):
        self.result = result
        self.calls = []

    def __call__(self, webhook_url, payload, timeout):
        self.calls.append((webhook_url, payload, timeout))
        return self.result


@pytest.fixture
def repository():
    return FakeRepository(
        applies=[Apply(id=42, project_id=7, user_id=3, branch_name="main", commit_version="")],
        projects=[Project(id=7, name="checkout", online_cluster=(1, 2))],
        groups=[ServerGroup(id=1, name="prod"), ServerGroup(id=2, name="staging")],
        servers=[Server(id=10, group_id=1), Server(id=11, group_id=1), Server(id=12, group_id=2), Server(id=13, group_id=9)],
        users=[User(id=3, username="alice")],
    )


@pytest.fixture
def commit_messages():
    return FakeCommitMessages("fix bug")


@pytest.fixture
def transport():
    return RecordingTransport()


@pytest.fixture
def settings():
    return NotifierSettings(
        webhook_url="https://open.feishu.example/hook/abc",
        secret="secret-key",
        app_host="https://deploy.example",
        max_workers=2,
        max_pending=4,
    )
