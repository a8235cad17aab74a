"""
Domain Events.

Domain events are records of significant business occurrences.
They are used for decoupling and eventual consistency.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Optional
from uuid import UUID, uuid4

from .base_entity import utcnow


@dataclass(frozen=True)
class DomainEvent:
    """
    Base class for all domain events.

    Domain events are immutable records of something that happened in the domain.
    They are used for:
    - Decoupling bounded contexts
    - Triggering side effects (search indexing, cache invalidation)
    - Audit trail
    """

    event_id: UUID = field(default_factory=uuid4)
    occurred_at: datetime = field(default_factory=utcnow)

    @property
    def event_type(self) -> str:
        """Get the event type name."""
        return self.__class__.__name__


# =============================================================================
# PRODUCT EVENTS
# =============================================================================

@dataclass(frozen=True)
class ProductCreated(DomainEvent):
    """Event raised when a new product is created."""

    product_id: Optional[UUID] = None
    sku: str = ""
    name: str = ""


@dataclass(frozen=True)
class ProductUpdated(DomainEvent):
    """Event raised when basic product information changes."""

    product_id: Optional[UUID] = None
    changes: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class ProductPriceChanged(DomainEvent):
    """Event raised when list or sale price changes."""

    product_id: Optional[UUID] = None
    old_price: str = ""
    new_price: str = ""
    sale_price: Optional[str] = None


@dataclass(frozen=True)
class ProductStockChanged(DomainEvent):
    """Event raised when the stock level changes."""

    product_id: Optional[UUID] = None
    old_quantity: int = 0
    new_quantity: int = 0


@dataclass(frozen=True)
class ProductStatusChanged(DomainEvent):
    """Event raised when the lifecycle status changes."""

    product_id: Optional[UUID] = None
    old_status: str = ""
    new_status: str = ""


@dataclass(frozen=True)
class ProductDeleted(DomainEvent):
    """Event raised when a product is soft-deleted."""

    product_id: Optional[UUID] = None


@dataclass(frozen=True)
class ProductRestored(DomainEvent):
    """Event raised when a soft-deleted product is restored."""

    product_id: Optional[UUID] = None


# =============================================================================
# CATEGORY EVENTS
# =============================================================================

@dataclass(frozen=True)
class CategoryCreated(DomainEvent):
    """Event raised when a new category is created."""

    category_id: Optional[UUID] = None
    name: str = ""
    parent_id: Optional[UUID] = None


@dataclass(frozen=True)
class CategoryMoved(DomainEvent):
    """Event raised when a category is attached to a different parent."""

    category_id: Optional[UUID] = None
    old_parent_id: Optional[UUID] = None
    new_parent_id: Optional[UUID] = None


@dataclass(frozen=True)
class CategoryDeleted(DomainEvent):
    """Event raised when a category is soft-deleted."""

    category_id: Optional[UUID] = None


@dataclass(frozen=True)
class CategoryRestored(DomainEvent):
    """Event raised when a soft-deleted category is restored."""

    category_id: Optional[UUID] = None

