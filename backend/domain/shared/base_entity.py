"""
Base Entity class for all domain entities.

Entities have identity and lifecycle.
Two entities are equal if they have the same ID.
"""

from __future__ import annotations
from abc import ABC
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Optional
from uuid import UUID, uuid4

from .exceptions import InvalidOperationException


def utcnow() -> datetime:
    """Timezone-aware current UTC time."""
    return datetime.now(timezone.utc)


@dataclass(eq=False)
class Entity(ABC):
    """
    Base class for all domain entities.

    Entities are objects that have a distinct identity that runs through time
    and different representations. They are defined by their identity, not their attributes.
    """

    id: UUID = field(default_factory=uuid4)
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, Entity):
            return False
        return self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} id={self.id}>"


@dataclass(eq=False)
class VersionedEntity(Entity):
    """
    Entity with optimistic locking support.
    Every mutation bumps the version and re-stamps updated_at.
    """

    version: int = 1

    def increment_version(self) -> None:
        """Increment version for optimistic locking."""
        self.version += 1
        self.updated_at = utcnow()


@dataclass(eq=False)
class SoftDeletableEntity(VersionedEntity):
    """
    Entity that is removed by stamping deleted_at instead of being dropped.
    A soft-deleted entity rejects every mutation until restored.
    """

    deleted_at: Optional[datetime] = None

    @property
    def entity_label(self) -> str:
        """Human name used in error messages."""
        return self.__class__.__name__.lower()

    @property
    def is_deleted(self) -> bool:
        """Check if entity is soft-deleted."""
        return self.deleted_at is not None

    def ensure_not_deleted(self) -> None:
        if self.is_deleted:
            raise InvalidOperationException(
                f"Cannot modify deleted {self.entity_label}",
                current_state="deleted",
            )

    def soft_delete(self) -> None:
        """Mark entity as deleted without removing it from storage."""
        if self.is_deleted:
            raise InvalidOperationException(
                f"{self.entity_label.capitalize()} is already deleted",
                current_state="deleted",
            )
        self.deleted_at = utcnow()
        self.increment_version()

    def restore(self) -> None:
        """Restore soft-deleted entity."""
        if not self.is_deleted:
            raise InvalidOperationException(
                f"{self.entity_label.capitalize()} is not deleted",
                current_state="active",
            )
        self.deleted_at = None
        self.increment_version()
