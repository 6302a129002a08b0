"""Read-only lookups of the deploy tool's records."""
from __future__ import annotations

import logging
import subprocess
from typing import Iterable, List, Optional, Protocol, Sequence, Tuple

from sqlalchemy import Column, Integer, String, create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

from .config import DatabaseSettings
from .errors import EntityNotFound
from .models import Apply, Project, Server, ServerGroup, User

LOGGER = logging.getLogger(__name__)

Base = declarative_base()


class ApplyModel(Base):
    __tablename__ = "syd_deploy_apply"
    id = Column(Integer, primary_key=True)
    project_id = Column(Integer, nullable=False, default=0)
    user_id = Column(Integer, nullable=False, default=0)
    mode = Column(Integer, nullable=False, default=0)
    branch_name = Column(String(100), nullable=False, default="")
    commit_version = Column(String(50), nullable=False, default="")
    status = Column(Integer, nullable=False, default=0)


class ProjectModel(Base):
    __tablename__ = "syd_project"
    id = Column(Integer, primary_key=True)
    name = Column(String(100), nullable=False, default="")
    online_cluster = Column(String(1000), nullable=False, default="")


class ServerGroupModel(Base):
    __tablename__ = "syd_server_group"
    id = Column(Integer, primary_key=True)
    name = Column(String(100), nullable=False, default="")


class ServerModel(Base):
    __tablename__ = "syd_server"
    id = Column(Integer, primary_key=True)
    group_id = Column(Integer, nullable=False, default=0, index=True)
    name = Column(String(100), nullable=False, default="")
    ip = Column(String(100), nullable=False, default="")


class UserModel(Base):
    __tablename__ = "syd_user"
    id = Column(Integer, primary_key=True)
    username = Column(String(20), nullable=False, default="")
    email = Column(String(500), nullable=False, default="")


class DeploymentRepository(Protocol):
    def get_apply(self, apply_id: int) -> Apply: ...

    def get_project(self, project_id: int) -> Project: ...

    def get_groups_by_ids(self, group_ids: Sequence[int]) -> List[ServerGroup]: ...

    def get_servers_by_group_ids(self, group_ids: Sequence[int]) -> List[Server]: ...

    def get_user(self, user_id: int) -> User: ...


class CommitMessageSource(Protocol):
    def latest(self) -> str: ...


def parse_cluster_ids(raw: Optional[str]) -> Tuple[int, ...]:
    """Split the comma separated ``online_cluster`` column into group ids."""
    ids: List[int] = []
    for part in (raw or "").split(","):
        part = part.strip()
        if part.isdigit():
            ids.append(int(part))
    return tuple(ids)


def create_session_factory(settings: DatabaseSettings) -> sessionmaker:
    engine = create_engine(settings.url(), future=True, **settings.engine_kwargs())
    return sessionmaker(bind=engine, autoflush=False, autocommit=False, expire_on_commit=False, future=True)


class SqlDeploymentRepository:
    """Repository backed by the deploy tool's SQL tables."""

    def __init__(self, session_factory: sessionmaker):
        self.session_factory = session_factory

    def get_apply(self, apply_id: int) -> Apply:
        with self.session_factory() as session:
            row = session.query(ApplyModel).filter(ApplyModel.id == apply_id).first()
            if row is None:
                raise EntityNotFound("apply", apply_id)
            return Apply(
                id=row.id,
                project_id=row.project_id,
                user_id=row.user_id,
                branch_name=row.branch_name or "",
                commit_version=row.commit_version or "",
            )

    def get_project(self, project_id: int) -> Project:
        with self.session_factory() as session:
            row = session.query(ProjectModel).filter(ProjectModel.id == project_id).first()
            if row is None:
                raise EntityNotFound("project", project_id)
            return Project(id=row.id, name=row.name or "", online_cluster=parse_cluster_ids(row.online_cluster))

    def get_groups_by_ids(self, group_ids: Sequence[int]) -> List[ServerGroup]:
        ids = list(group_ids)
        if not ids:
            return []
        with self.session_factory() as session:
            rows = (
                session.query(ServerGroupModel)
                .filter(ServerGroupModel.id.in_(ids))
                .order_by(ServerGroupModel.id)
                .all()
            )
            return [ServerGroup(id=row.id, name=row.name or "") for row in rows]

    def get_servers_by_group_ids(self, group_ids: Sequence[int]) -> List[Server]:
        ids = list(group_ids)
        if not ids:
            return []
        with self.session_factory() as session:
            rows = (
                session.query(ServerModel)
                .filter(ServerModel.group_id.in_(ids))
                .order_by(ServerModel.id)
                .all()
            )
            return [Server(id=row.id, group_id=row.group_id) for row in rows]

    def get_user(self, user_id: int) -> User:
        with self.session_factory() as session:
            row = session.query(UserModel).filter(UserModel.id == user_id).first()
            if row is None:
                raise EntityNotFound("user", user_id)
            return User(id=row.id, username=row.username or "")


class GitCommitMessages:
    """Reads the subject of the latest commit in a working copy."""

    def __init__(self, repo_path: Optional[str] = None, command: Optional[Iterable[str]] = None):
        self.repo_path = repo_path
        self.command = list(command or ["git", "log", "-1", "--pretty=%s"])

    def latest(self) -> str:
        try:
            result = subprocess.run(
                self.command,
                cwd=self.repo_path,
                capture_output=True,
                text=True,
                check=True,
            )
        except (OSError, subprocess.CalledProcessError) as exc:
            raise RuntimeError(f"could not read latest commit message: {exc}") from exc
        return result.stdout.strip()
