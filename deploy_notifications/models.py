from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any, Dict, List, Tuple


class DeployStatus(IntEnum):
    FAILED = 0
    SUCCESS = 1


@dataclass(frozen=True, slots=True)
class DeploymentEvent:
    """Outcome of a single deployment, raised by the deploy workflow."""

    apply_id: int
    mode: int
    status: DeployStatus
    title: str = ""

    def __post_init__(self) -> None:
        object.__setattr__(self, "status", DeployStatus(self.status))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "apply_id": self.apply_id,
            "mode": self.mode,
            "status": int(self.status),
            "title": self.title,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DeploymentEvent":
        return cls(
            apply_id=int(data["apply_id"]),
            mode=int(data.get("mode", 0)),
            status=DeployStatus(int(data["status"])),
            title=str(data.get("title") or ""),
        )


@dataclass(frozen=True, slots=True)
class Apply:
    """A deployment request tying a project, a user and a revision together."""

    id: int
    project_id: int
    user_id: int
    branch_name: str
    commit_version: str = ""

    @property
    def version_label(self) -> str:
        return self.commit_version or self.branch_name


@dataclass(frozen=True, slots=True)
class Project:
    id: int
    name: str
    online_cluster: Tuple[int, ...] = ()


@dataclass(frozen=True, slots=True)
class ServerGroup:
    id: int
    name: str


@dataclass(frozen=True, slots=True)
class Server:
    id: int
    group_id: int


@dataclass(frozen=True, slots=True)
class User:
    id: int
    username: str


@dataclass(frozen=True, slots=True)
class NotificationContext:
    """Everything the message needs, resolved once per dispatch."""

    event: DeploymentEvent
    apply: Apply
    project: Project
    server_count: int
    group_names: Tuple[str, ...]
    commit_message: str
    username: str

    @property
    def group_label(self) -> str:
        return ",".join(self.group_names)


@dataclass(frozen=True, slots=True)
class ContentCell:
    tag: str
    text: str
    href: str = ""

    def to_dict(self) -> Dict[str, str]:
        data = {"tag": self.tag, "text": self.text}
        if self.href:
            data["href"] = self.href
        return data


@dataclass(frozen=True, slots=True)
class PostBody:
    title: str
    rows: Tuple[Tuple[ContentCell, ...], ...] = field(default_factory=tuple)

    def content(self) -> List[List[Dict[str, str]]]:
        return [[cell.to_dict() for cell in row] for row in self.rows]


@dataclass(frozen=True, slots=True)
class NotificationPayload:
    """Wire-ready webhook request, built and signed once."""

    msg_type: str
    body: PostBody
    timestamp: str
    sign: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "msg_type": self.msg_type,
            "content": {
                "post": {
                    "zh_cn": {
                        "title": self.body.title,
                        "content": self.body.content(),
                    }
                }
            },
            "timestamp": self.timestamp,
            "sign": self.sign,
        }
