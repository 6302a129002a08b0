"""Exceptions raised inside the deployment notification pipeline."""
from __future__ import annotations


class NotificationError(Exception):
    """Base class for failures that abort a single notification."""


class ResolutionError(NotificationError):
    """An entity needed by the message could not be looked up."""


class SigningError(NotificationError):
    """The webhook signature could not be computed."""


class EntityNotFound(LookupError):
    """A repository lookup found no row for the requested id."""

    def __init__(self, entity: str, key) -> None:
        super().__init__(f"{entity} {key!r} not found")
        self.entity = entity
        self.key = key
