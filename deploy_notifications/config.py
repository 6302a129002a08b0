"""Shared configuration for the deployment notification system."""
from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Any, Dict, Optional
from urllib.parse import quote_plus

from .models import DeployStatus

MSG_TYPE_POST = "post"
DEPLOY_LINK_LABEL = "Deploy link"

STATUS_TITLES = {
    DeployStatus.SUCCESS: "Deployment succeeded",
    DeployStatus.FAILED: "Deployment failed",
}

DEFAULT_APP_HOST = "http://localhost:8878"
DEFAULT_MAX_WORKERS = 4
DEFAULT_MAX_PENDING = 64


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return int(raw)


def _env_float(name: str) -> Optional[float]:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return None
    return float(raw)


@dataclass(frozen=True, slots=True)
class NotifierSettings:
    """Read-only settings handed to the dispatcher at construction."""

    webhook_url: str = ""
    secret: str = ""
    app_host: str = DEFAULT_APP_HOST
    timeout: Optional[float] = None
    max_workers: int = DEFAULT_MAX_WORKERS
    max_pending: int = DEFAULT_MAX_PENDING

    def __post_init__(self) -> None:
        if self.max_workers < 1:
            raise ValueError("max_workers must be at least 1")
        if self.max_pending < self.max_workers:
            raise ValueError("max_pending must be >= max_workers")

    @property
    def enabled(self) -> bool:
        return bool(self.webhook_url)

    @classmethod
    def from_env(cls) -> "NotifierSettings":
        return cls(
            webhook_url=os.getenv("FEISHU_WEBHOOK_URL", ""),
            secret=os.getenv("FEISHU_SECRET", ""),
            app_host=os.getenv("APP_HOST", DEFAULT_APP_HOST),
            timeout=_env_float("FEISHU_TIMEOUT"),
            max_workers=_env_int("NOTIFY_MAX_WORKERS", DEFAULT_MAX_WORKERS),
            max_pending=_env_int("NOTIFY_MAX_PENDING", DEFAULT_MAX_PENDING),
        )


@dataclass(frozen=True, slots=True)
class DatabaseSettings:
    """Connection settings for the deploy tool's MySQL database."""

    host: str = "127.0.0.1"
    port: int = 3306
    unix: str = ""
    user: str = "root"
    password: str = ""
    name: str = "syncd"
    charset: str = "utf8mb4"
    max_idle_conns: int = 10
    max_open_conns: int = 20
    conn_max_lifetime: int = 500  # seconds
    database_url: str = ""

    @classmethod
    def from_env(cls) -> "DatabaseSettings":
        return cls(
            host=os.getenv("DB_HOST", "127.0.0.1"),
            port=_env_int("DB_PORT", 3306),
            unix=os.getenv("DB_UNIX", ""),
            user=os.getenv("DB_USER", "root"),
            password=os.getenv("DB_PASS", ""),
            name=os.getenv("DB_NAME", "syncd"),
            charset=os.getenv("DB_CHARSET", "utf8mb4"),
            max_idle_conns=_env_int("DB_MAX_IDLE_CONNS", 10),
            max_open_conns=_env_int("DB_MAX_OPEN_CONNS", 20),
            conn_max_lifetime=_env_int("DB_CONN_MAX_LIFETIME", 500),
            database_url=os.getenv("DATABASE_URL", ""),
        )

    def url(self) -> str:
        if self.database_url:
            return self.database_url
        credentials = quote_plus(self.user)
        if self.password:
            credentials += ":" + quote_plus(self.password)
        if self.unix:
            # Socket connections leave the host empty and pass the path as a query arg.
            return (
                f"mysql+pymysql://{credentials}@/{self.name}"
                f"?unix_socket={self.unix}&charset={self.charset}"
            )
        return f"mysql+pymysql://{credentials}@{self.host}:{self.port}/{self.name}?charset={self.charset}"

    def engine_kwargs(self) -> Dict[str, Any]:
        if self.url().startswith("sqlite"):
            return {"connect_args": {"check_same_thread": False}}
        return {
            "pool_pre_ping": True,
            "pool_size": self.max_idle_conns,
            "max_overflow": max(self.max_open_conns - self.max_idle_conns, 0),
            "pool_recycle": self.conn_max_lifetime,
        }
