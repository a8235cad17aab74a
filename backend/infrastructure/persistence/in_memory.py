"""
In-memory implementations of the catalog repositories.

Aggregates are stored as deep copies so callers must save() to persist a
change, the same contract a database-backed repository has. Slug and SKU
uniqueness is enforced inside save(): the check and the write happen with
no await in between, so concurrent coroutines cannot both pass the check.
"""

from copy import deepcopy
from dataclasses import replace
from typing import Dict, Iterable, List, Mapping, Optional, TypeVar
from uuid import UUID
import logging

from domain.catalog.aggregates import Category, Product
from domain.catalog.hierarchy import Breadcrumb, CategoryHierarchy, CategoryTreeNode
from domain.catalog.queries import (
    CATEGORY_SORT_KEYS,
    PRODUCT_SORT_KEYS,
    CategoryFilters,
    ProductFilters,
)
from domain.catalog.repositories import (
    CategoryRepository,
    ProductCountSource,
    ProductRepository,
)
from domain.catalog.value_objects import Sku
from domain.shared.exceptions import EntityAlreadyExistsException
from domain.shared.query import (
    Page,
    Pagination,
    SortDirection,
    SortOptions,
    apply_query,
    sort_items,
)


logger = logging.getLogger(__name__)

T = TypeVar("T")

FEATURED_MIN_RATING = 4


def _copies(items: Iterable[T]) -> List[T]:
    return [deepcopy(item) for item in items]


class InMemoryProductRepository(ProductRepository, ProductCountSource):
    """Product repository backed by a dict keyed by product id."""

    def __init__(self, products: Optional[Iterable[Product]] = None):
        self._products: Dict[UUID, Product] = {}
        for product in products or []:
            self._store(product)

    # =========================================================================
    # WRITE
    # =========================================================================

    async def save(self, product: Product) -> Product:
        self._store(product)
        return deepcopy(self._products[product.id])

    def _store(self, product: Product) -> None:
        if not product.is_deleted:
            for other in self._live():
                if other.id == product.id:
                    continue
                if other.slug == product.slug:
                    raise EntityAlreadyExistsException("Product", product.slug, field="slug")
                if other.sku == product.sku:
                    raise EntityAlreadyExistsException("Product", product.sku.value, field="sku")
        stored = deepcopy(product)
        stored.clear_domain_events()
        self._products[product.id] = stored

    async def delete(self, product_id: UUID) -> None:
        product = self._products.get(product_id)
        if product is not None and not product.is_deleted:
            product.delete()
            product.clear_domain_events()

    async def permanently_delete(self, product_id: UUID) -> None:
        if self._products.pop(product_id, None) is not None:
            logger.info(f"Product {product_id} permanently deleted")

    async def restore(self, product_id: UUID) -> None:
        product = self._products.get(product_id)
        if product is not None and product.is_deleted:
            restored = deepcopy(product)
            restored.restore()
            self._store(restored)

    async def update_stock(self, product_id: UUID, quantity: int) -> None:
        product = self._products.get(product_id)
        if product is None:
            logger.debug(f"Stock update skipped, product {product_id} not found")
            return
        updated = deepcopy(product)
        updated.update_stock(quantity)
        self._store(updated)

    async def bulk_update_stock(self, quantities: Mapping[UUID, int]) -> None:
        for product_id, quantity in quantities.items():
            await self.update_stock(product_id, quantity)

    # =========================================================================
    # READ
    # =========================================================================

    def _live(self) -> List[Product]:
        return [p for p in self._products.values() if not p.is_deleted]

    def _active(self) -> List[Product]:
        return [p for p in self._products.values() if p.is_active]

    async def find_by_id(self, product_id: UUID, include_deleted: bool = False) -> Optional[Product]:
        product = self._products.get(product_id)
        if product is None or (product.is_deleted and not include_deleted):
            return None
        return deepcopy(product)

    async def find_by_slug(self, slug: str) -> Optional[Product]:
        for product in self._live():
            if product.slug == slug:
                return deepcopy(product)
        return None

    async def find_by_sku(self, sku: Sku) -> Optional[Product]:
        for product in self._live():
            if product.sku == sku:
                return deepcopy(product)
        return None

    async def find_all(
        self,
        filters: Optional[ProductFilters] = None,
        sort: Optional[SortOptions] = None,
        pagination: Optional[Pagination] = None,
    ) -> Page[Product]:
        page = apply_query(
            self._products.values(),
            filters=filters or ProductFilters(),
            sort=sort,
            pagination=pagination,
            sort_keys=PRODUCT_SORT_KEYS,
        )
        page.items = _copies(page.items)
        return page

    async def find_by_category(
        self,
        category_id: UUID,
        sort: Optional[SortOptions] = None,
        pagination: Optional[Pagination] = None,
    ) -> Page[Product]:
        return await self.find_all(ProductFilters(category_ids=[category_id]), sort, pagination)

    async def search(
        self,
        query: str,
        filters: Optional[ProductFilters] = None,
        sort: Optional[SortOptions] = None,
        pagination: Optional[Pagination] = None,
    ) -> Page[Product]:
        return await self.find_all(replace(filters or ProductFilters(), search=query), sort, pagination)

    async def exists(self, product_id: UUID) -> bool:
        return product_id in self._products

    async def exists_by_slug(self, slug: str, exclude_id: Optional[UUID] = None) -> bool:
        return any(p.slug == slug and p.id != exclude_id for p in self._live())

    async def exists_by_sku(self, sku: Sku, exclude_id: Optional[UUID] = None) -> bool:
        return any(p.sku == sku and p.id != exclude_id for p in self._live())

    async def count(self, filters: Optional[ProductFilters] = None) -> int:
        filters = filters or ProductFilters()
        return sum(1 for p in self._products.values() if filters.matches(p))

    async def find_related(self, product_id: UUID, limit: int = 5) -> List[Product]:
        product = self._products.get(product_id)
        if product is None:
            return []
        related = [
            p for p in self._active()
            if p.id != product_id and any(cid in p.category_ids for cid in product.category_ids)
        ]
        return _copies(related[:limit])

    async def find_popular(self, limit: int = 10) -> List[Product]:
        popular = sorted(
            self._active(),
            key=lambda p: (p.review_count, p.average_rating),
            reverse=True,
        )
        return _copies(popular[:limit])

    async def find_recent(self, limit: int = 10) -> List[Product]:
        recent = sort_items(
            self._active(), SortOptions("created_at", SortDirection.DESC), PRODUCT_SORT_KEYS
        )
        return _copies(recent[:limit])

    async def find_featured(self, limit: int = 10) -> List[Product]:
        featured = [p for p in self._active() if p.average_rating >= FEATURED_MIN_RATING]
        featured = sort_items(
            featured, SortOptions("average_rating", SortDirection.DESC), PRODUCT_SORT_KEYS
        )
        return _copies(featured[:limit])

    async def find_on_sale(self, limit: int = 10) -> List[Product]:
        return _copies([p for p in self._active() if p.is_on_sale][:limit])

    async def find_low_stock(self, threshold: int = 10) -> List[Product]:
        return _copies(
            p for p in self._live()
            if p.manage_stock and 0 < p.stock_quantity <= threshold
        )

    async def find_out_of_stock(self) -> List[Product]:
        return _copies(p for p in self._live() if p.manage_stock and p.stock_quantity == 0)

    async def count_by_category(self) -> Mapping[UUID, int]:
        return CategoryHierarchy.count_products_by_category(self._products.values())


class InMemoryCategoryRepository(CategoryRepository):
    """
    Category repository backed by a dict keyed by category id.

    Hierarchy queries run CategoryHierarchy over a copy of the whole store.
    Product counts come from an optional ProductCountSource.
    """

    def __init__(
        self,
        categories: Optional[Iterable[Category]] = None,
        product_counts: Optional[ProductCountSource] = None,
    ):
        self._categories: Dict[UUID, Category] = {}
        self._product_counts = product_counts
        for category in categories or []:
            self._store(category)

    def _snapshot(self) -> CategoryHierarchy:
        return CategoryHierarchy(_copies(self._categories.values()))

    async def _counts(self) -> Mapping[UUID, int]:
        if self._product_counts is None:
            return {}
        return await self._product_counts.count_by_category()

    # =========================================================================
    # WRITE
    # =========================================================================

    async def save(self, category: Category) -> Category:
        self._store(category)
        return deepcopy(self._categories[category.id])

    def _store(self, category: Category) -> None:
        if not category.is_deleted:
            for other in self._categories.values():
                if other.id != category.id and not other.is_deleted and other.slug == category.slug:
                    raise EntityAlreadyExistsException("Category", category.slug, field="slug")
        stored = deepcopy(category)
        stored.clear_domain_events()
        self._categories[category.id] = stored

    async def delete(self, category_id: UUID) -> None:
        category = self._categories.get(category_id)
        if category is not None and not category.is_deleted:
            category.delete()
            category.clear_domain_events()

    async def permanently_delete(self, category_id: UUID) -> None:
        if self._categories.pop(category_id, None) is not None:
            logger.info(f"Category {category_id} permanently deleted")

    async def restore(self, category_id: UUID) -> None:
        category = self._categories.get(category_id)
        if category is not None and category.is_deleted:
            restored = deepcopy(category)
            restored.restore()
            self._store(restored)

    async def move(self, category_id: UUID, new_parent_id: Optional[UUID]) -> None:
        category = self._categories.get(category_id)
        if category is None or category.is_deleted:
            logger.debug(f"Move skipped, category {category_id} not found")
            return
        self._snapshot().ensure_can_move(category_id, new_parent_id)
        moved = deepcopy(category)
        moved.set_parent(new_parent_id)
        self._store(moved)

    async def reorder(self, category_id: UUID, sort_order: int) -> None:
        category = self._categories.get(category_id)
        if category is None or category.is_deleted:
            logger.debug(f"Reorder skipped, category {category_id} not found")
            return
        reordered = deepcopy(category)
        reordered.set_sort_order(sort_order)
        self._store(reordered)

    # =========================================================================
    # READ
    # =========================================================================

    async def find_by_id(self, category_id: UUID, include_deleted: bool = False) -> Optional[Category]:
        category = self._categories.get(category_id)
        if category is None or (category.is_deleted and not include_deleted):
            return None
        return deepcopy(category)

    async def find_by_slug(self, slug: str) -> Optional[Category]:
        for category in self._categories.values():
            if category.slug == slug and not category.is_deleted:
                return deepcopy(category)
        return None

    async def find_all(
        self,
        filters: Optional[CategoryFilters] = None,
        sort: Optional[SortOptions] = None,
        pagination: Optional[Pagination] = None,
    ) -> Page[Category]:
        page = apply_query(
            self._categories.values(),
            filters=filters or CategoryFilters(),
            sort=sort,
            pagination=pagination,
            sort_keys=CATEGORY_SORT_KEYS,
        )
        page.items = _copies(page.items)
        return page

    async def find_root_categories(self, sort: Optional[SortOptions] = None) -> List[Category]:
        page = await self.find_all(CategoryFilters(parent_id=None), sort or SortOptions("sort_order"))
        return page.items

    async def find_children(
        self,
        parent_id: UUID,
        sort: Optional[SortOptions] = None,
    ) -> List[Category]:
        page = await self.find_all(CategoryFilters(parent_id=parent_id), sort or SortOptions("sort_order"))
        return page.items

    async def find_ancestors(self, category_id: UUID) -> List[Category]:
        return self._snapshot().ancestors(category_id)

    async def find_descendants(self, category_id: UUID) -> List[Category]:
        return self._snapshot().descendants(category_id)

    async def find_path(self, category_id: UUID) -> List[Category]:
        return self._snapshot().path(category_id)

    async def find_breadcrumb(self, category_id: UUID) -> List[Breadcrumb]:
        return self._snapshot().breadcrumb(category_id)

    async def build_tree(
        self,
        root_id: Optional[UUID] = None,
        include_product_count: bool = False,
    ) -> List[CategoryTreeNode]:
        counts = await self._counts() if include_product_count else None
        return self._snapshot().build_tree(root_id, product_counts=counts, include_descendants=True)

    async def validate_hierarchy(self, category_id: UUID, new_parent_id: Optional[UUID]) -> bool:
        return self._snapshot().validate_move(category_id, new_parent_id)

    async def exists(self, category_id: UUID) -> bool:
        return category_id in self._categories

    async def exists_by_slug(self, slug: str, exclude_id: Optional[UUID] = None) -> bool:
        return any(
            c.slug == slug and c.id != exclude_id and not c.is_deleted
            for c in self._categories.values()
        )

    async def count(self, filters: Optional[CategoryFilters] = None) -> int:
        filters = filters or CategoryFilters()
        return sum(1 for c in self._categories.values() if filters.matches(c))

    async def get_product_count(self, category_id: UUID, include_descendants: bool = False) -> int:
        counts = await self._counts()
        return self._snapshot().product_count(category_id, counts, include_descendants)

    async def find_categories_with_products(self) -> List[Category]:
        counts = await self._counts()
        return _copies(
            c for c in self._categories.values()
            if not c.is_deleted and counts.get(c.id, 0) > 0
        )

    async def find_empty_categories(self) -> List[Category]:
        counts = await self._counts()
        return _copies(
            c for c in self._categories.values()
            if not c.is_deleted and counts.get(c.id, 0) == 0
        )
