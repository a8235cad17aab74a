"""
Query contract shared by catalog collections.

Filtering, sorting and offset pagination are applied the same way to every
aggregate collection: filter first, count, sort, then slice.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, Generic, Iterable, List, Optional, Protocol, TypeVar

from .exceptions import ValidationException


T = TypeVar("T")


class SortDirection(str, Enum):
    """Sort direction."""

    ASC = "ASC"
    DESC = "DESC"

    @classmethod
    def from_string(cls, value: str) -> SortDirection:
        try:
            return cls(value.upper())
        except ValueError:
            raise ValidationException(
                f"Invalid sort direction: {value}", "direction", value
            ) from None


@dataclass(frozen=True)
class SortOptions:
    """Sort specification: a field name and a direction."""

    field: str
    direction: SortDirection = SortDirection.ASC

    def __post_init__(self):
        if isinstance(self.direction, str) and not isinstance(self.direction, SortDirection):
            object.__setattr__(self, "direction", SortDirection.from_string(self.direction))

    @property
    def descending(self) -> bool:
        return self.direction == SortDirection.DESC


@dataclass(frozen=True)
class Pagination:
    """
    Offset pagination window.

    MAX_LIMIT mirrors the largest page the API layer ever serves; callers
    narrow it further from settings.
    """

    offset: int = 0
    limit: int = 50

    MAX_LIMIT = 1000

    def __post_init__(self):
        if self.offset < 0:
            raise ValidationException("Offset cannot be negative", "offset", self.offset)
        if self.limit < 1:
            raise ValidationException("Limit must be at least 1", "limit", self.limit)
        if self.limit > self.MAX_LIMIT:
            raise ValidationException(
                f"Limit cannot exceed {self.MAX_LIMIT}", "limit", self.limit
            )

    @property
    def end(self) -> int:
        return self.offset + self.limit


@dataclass
class Page(Generic[T]):
    """Result envelope for a paginated query."""

    items: List[T] = field(default_factory=list)
    total: int = 0
    has_more: bool = False

    def __len__(self) -> int:
        return len(self.items)

    def __iter__(self):
        return iter(self.items)


class Filter(Protocol[T]):
    """Anything that can decide whether an item belongs to a result set."""

    def matches(self, item: T) -> bool:
        ...


SortKeys = Dict[str, Callable[[Any], Any]]


def sort_items(items: List[T], sort: SortOptions, keys: SortKeys) -> List[T]:
    """Stable sort by one of the allowed keys."""
    key = keys.get(sort.field)
    if key is None:
        raise ValidationException(
            f"Cannot sort by '{sort.field}'. Allowed fields: {sorted(keys)}",
            "sort",
            sort.field,
        )
    return sorted(items, key=key, reverse=sort.descending)


def apply_query(
    items: Iterable[T],
    filters: Optional[Filter] = None,
    sort: Optional[SortOptions] = None,
    pagination: Optional[Pagination] = None,
    sort_keys: Optional[SortKeys] = None,
) -> Page[T]:
    """
    Run the filter -> sort -> paginate pipeline over an in-memory collection.

    `total` counts every match before slicing. `has_more` is only True when a
    pagination window was requested and more matches lie beyond it.
    """
    result = [item for item in items if filters is None or filters.matches(item)]

    if sort is not None:
        result = sort_items(result, sort, sort_keys or {})

    total = len(result)

    if pagination is None:
        return Page(items=result, total=total, has_more=False)

    return Page(
        items=result[pagination.offset:pagination.end],
        total=total,
        has_more=pagination.end < total,
    )
