"""Base classes for domain layer.

Provides foundational abstractions for entities, value objects
and aggregates following DDD patterns.
"""

from abc import ABC
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Generic, TypeVar


# ============================================================================
# Value Object Base
# ============================================================================


@dataclass(frozen=True)
class ValueObject(ABC):
    """Base class for value objects.

    Value objects are immutable and compared by their attributes,
    not by identity. They have no lifecycle and are interchangeable
    when their values are equal.

    Example:
        @dataclass(frozen=True)
        class AddressInfo(ValueObject):
            line1: str
            country: str
    """

    pass


# ============================================================================
# Entity Base
# ============================================================================


T = TypeVar("T")


@dataclass
class Entity(ABC, Generic[T]):
    """Base class for entities.

    Entities have identity that persists across state changes.
    Two entities are equal if they have the same identity,
    regardless of their other attributes.

    Attributes:
        id: Unique identifier for this entity.
    """

    id: T

    def __eq__(self, other: object) -> bool:
        """Compare entities by identity.

        Args:
            other: Object to compare with.

        Returns:
            True if other is same type with same id.
        """
        if not isinstance(other, self.__class__):
            return False
        return self.id == other.id

    def __hash__(self) -> int:
        """Hash entity by identity.

        Returns:
            Hash of the entity id.
        """
        return hash(self.id)


# ============================================================================
# Aggregate Root Base
# ============================================================================


@dataclass(kw_only=True, eq=False)
class AggregateRoot(Entity[T], Generic[T]):
    """Base class for aggregate roots.

    Aggregate roots are the entry point to a cluster of domain objects
    and guard the consistency of everything inside them.

    Attributes:
        created_at: Timestamp when the aggregate was created.
        updated_at: Timestamp of last modification.
    """

    created_at: datetime = field(
        default_factory=lambda: datetime.now(timezone.utc),
        compare=False,
    )
    updated_at: datetime = field(
        default_factory=lambda: datetime.now(timezone.utc),
        compare=False,
    )

    def _touch(self) -> None:
        """Update the updated_at timestamp."""
        self.updated_at = datetime.now(timezone.utc)
