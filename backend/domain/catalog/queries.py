"""
Catalog Domain - Query filters.

Plain attribute filters for product and category collections. Deleted
aggregates never match; callers that need them look them up by id.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import List, Optional, Union
from uuid import UUID

from domain.shared.query import SortKeys
from domain.shared.value_objects import Money

from .aggregates import Category, Product
from .value_objects import ProductStatus


class Unset:
    """Marker for a filter that was not supplied (distinct from None)."""

    def __repr__(self) -> str:
        return "UNSET"


UNSET = Unset()


def _text_matches(needle: Optional[str], *haystacks: Optional[str]) -> bool:
    if not needle:
        return True
    needle = needle.lower()
    return any(needle in (text or "").lower() for text in haystacks)


@dataclass
class ProductFilters:
    """
    Product filter set. Every supplied criterion must hold.

    Price bounds apply to the effective price. A product priced in another
    currency than a supplied bound never matches it.
    category_ids matches a product that belongs to any of them.
    """

    category_ids: List[UUID] = field(default_factory=list)
    status: Optional[ProductStatus] = None
    search: Optional[str] = None
    min_price: Optional[Money] = None
    max_price: Optional[Money] = None
    in_stock: Optional[bool] = None
    is_active: Optional[bool] = None
    on_sale: Optional[bool] = None

    def matches(self, product: Product) -> bool:
        if product.is_deleted:
            return False
        if self.category_ids and not any(cid in product.category_ids for cid in self.category_ids):
            return False
        if self.status is not None and product.status != self.status:
            return False
        if not _text_matches(
            self.search, product.name, product.description, product.short_description
        ):
            return False
        if not self._price_in_range(product.effective_price):
            return False
        if self.in_stock is not None and product.is_in_stock != self.in_stock:
            return False
        if self.is_active is not None and product.is_active != self.is_active:
            return False
        if self.on_sale is not None and product.is_on_sale != self.on_sale:
            return False
        return True

    def _price_in_range(self, price: Money) -> bool:
        for bound in (self.min_price, self.max_price):
            if bound is not None and bound.currency != price.currency:
                return False
        if self.min_price is not None and price.is_less_than(self.min_price):
            return False
        if self.max_price is not None and price.is_greater_than(self.max_price):
            return False
        return True


@dataclass
class CategoryFilters:
    """
    Category filter set.

    parent_id: UNSET ignores the parent, None selects roots, an id selects
    that category's direct children.
    """

    parent_id: Union[UUID, None, Unset] = UNSET
    is_active: Optional[bool] = None
    search: Optional[str] = None

    def matches(self, category: Category) -> bool:
        if category.is_deleted:
            return False
        if self.parent_id is not UNSET and category.parent_id != self.parent_id:
            return False
        if self.is_active is not None and category.is_active != self.is_active:
            return False
        if not _text_matches(self.search, category.name, category.description):
            return False
        return True


PRODUCT_SORT_KEYS: SortKeys = {
    "name": lambda p: p.name.lower(),
    "price": lambda p: p.effective_price.amount,
    "created_at": lambda p: p.created_at,
    "updated_at": lambda p: p.updated_at,
    "average_rating": lambda p: p.average_rating,
    "review_count": lambda p: p.review_count,
    "stock_quantity": lambda p: p.stock_quantity,
}

CATEGORY_SORT_KEYS: SortKeys = {
    "name": lambda c: c.name.lower(),
    "sort_order": lambda c: c.sort_order,
    "created_at": lambda c: c.created_at,
    "updated_at": lambda c: c.updated_at,
}
