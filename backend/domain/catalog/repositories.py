"""
Catalog Domain - Repository Interfaces (Ports).

These are abstract interfaces that define how the domain interacts with persistence.
The actual implementations are in the infrastructure layer.

Lookups return None or an empty collection when nothing matches; deciding
whether absence is an error is left to the caller.
"""

from abc import ABC, abstractmethod
from typing import List, Mapping, Optional
from uuid import UUID

from domain.shared.query import Page, Pagination, SortOptions

from .aggregates import Category, Product
from .hierarchy import Breadcrumb, CategoryTreeNode
from .queries import CategoryFilters, ProductFilters
from .value_objects import Sku


class ProductRepository(ABC):
    """Repository interface for Product aggregate."""

    @abstractmethod
    async def save(self, product: Product) -> Product:
        """
        Save (create or update) a product.

        Raises EntityAlreadyExistsException when another live product owns
        the same slug or SKU.
        """
        pass

    @abstractmethod
    async def find_by_id(self, product_id: UUID, include_deleted: bool = False) -> Optional[Product]:
        """Get product by ID."""
        pass

    @abstractmethod
    async def find_by_slug(self, slug: str) -> Optional[Product]:
        """Get live product by slug."""
        pass

    @abstractmethod
    async def find_by_sku(self, sku: Sku) -> Optional[Product]:
        """Get live product by SKU."""
        pass

    @abstractmethod
    async def find_all(
        self,
        filters: Optional[ProductFilters] = None,
        sort: Optional[SortOptions] = None,
        pagination: Optional[Pagination] = None,
    ) -> Page[Product]:
        """Filter, sort and paginate live products."""
        pass

    @abstractmethod
    async def find_by_category(
        self,
        category_id: UUID,
        sort: Optional[SortOptions] = None,
        pagination: Optional[Pagination] = None,
    ) -> Page[Product]:
        """Get live products filed directly under a category."""
        pass

    @abstractmethod
    async def search(
        self,
        query: str,
        filters: Optional[ProductFilters] = None,
        sort: Optional[SortOptions] = None,
        pagination: Optional[Pagination] = None,
    ) -> Page[Product]:
        """Case-insensitive substring search over name and descriptions."""
        pass

    @abstractmethod
    async def delete(self, product_id: UUID) -> None:
        """Soft delete a product."""
        pass

    @abstractmethod
    async def permanently_delete(self, product_id: UUID) -> None:
        """Remove a product from storage."""
        pass

    @abstractmethod
    async def restore(self, product_id: UUID) -> None:
        """Restore a soft-deleted product."""
        pass

    @abstractmethod
    async def exists(self, product_id: UUID) -> bool:
        pass

    @abstractmethod
    async def exists_by_slug(self, slug: str, exclude_id: Optional[UUID] = None) -> bool:
        """Check if a live product other than exclude_id uses the slug."""
        pass

    @abstractmethod
    async def exists_by_sku(self, sku: Sku, exclude_id: Optional[UUID] = None) -> bool:
        """Check if a live product other than exclude_id uses the SKU."""
        pass

    @abstractmethod
    async def count(self, filters: Optional[ProductFilters] = None) -> int:
        pass

    @abstractmethod
    async def find_related(self, product_id: UUID, limit: int = 5) -> List[Product]:
        """Active products sharing at least one category."""
        pass

    @abstractmethod
    async def find_popular(self, limit: int = 10) -> List[Product]:
        """Active products by review count, then rating."""
        pass

    @abstractmethod
    async def find_recent(self, limit: int = 10) -> List[Product]:
        """Active products, newest first."""
        pass

    @abstractmethod
    async def find_featured(self, limit: int = 10) -> List[Product]:
        """Active, highly rated products."""
        pass

    @abstractmethod
    async def find_on_sale(self, limit: int = 10) -> List[Product]:
        pass

    @abstractmethod
    async def update_stock(self, product_id: UUID, quantity: int) -> None:
        pass

    @abstractmethod
    async def bulk_update_stock(self, quantities: Mapping[UUID, int]) -> None:
        pass

    @abstractmethod
    async def find_low_stock(self, threshold: int = 10) -> List[Product]:
        """Stock-managed products with 0 < stock <= threshold."""
        pass

    @abstractmethod
    async def find_out_of_stock(self) -> List[Product]:
        pass


class CategoryRepository(ABC):
    """Repository interface for Category aggregate."""

    @abstractmethod
    async def save(self, category: Category) -> Category:
        """
        Save (create or update) a category.

        Raises EntityAlreadyExistsException when another live category owns
        the same slug.
        """
        pass

    @abstractmethod
    async def find_by_id(self, category_id: UUID, include_deleted: bool = False) -> Optional[Category]:
        """Get category by ID."""
        pass

    @abstractmethod
    async def find_by_slug(self, slug: str) -> Optional[Category]:
        """Get live category by slug."""
        pass

    @abstractmethod
    async def find_all(
        self,
        filters: Optional[CategoryFilters] = None,
        sort: Optional[SortOptions] = None,
        pagination: Optional[Pagination] = None,
    ) -> Page[Category]:
        """Filter, sort and paginate live categories."""
        pass

    @abstractmethod
    async def find_root_categories(self, sort: Optional[SortOptions] = None) -> List[Category]:
        pass

    @abstractmethod
    async def find_children(
        self,
        parent_id: UUID,
        sort: Optional[SortOptions] = None,
    ) -> List[Category]:
        pass

    @abstractmethod
    async def find_ancestors(self, category_id: UUID) -> List[Category]:
        """Root-to-parent chain."""
        pass

    @abstractmethod
    async def find_descendants(self, category_id: UUID) -> List[Category]:
        """Live descendants in depth-first pre-order."""
        pass

    @abstractmethod
    async def find_path(self, category_id: UUID) -> List[Category]:
        """Root-to-self chain."""
        pass

    @abstractmethod
    async def build_tree(
        self,
        root_id: Optional[UUID] = None,
        include_product_count: bool = False,
    ) -> List[CategoryTreeNode]:
        pass

    @abstractmethod
    async def delete(self, category_id: UUID) -> None:
        """Soft delete a category."""
        pass

    @abstractmethod
    async def permanently_delete(self, category_id: UUID) -> None:
        """Remove a category from storage."""
        pass

    @abstractmethod
    async def restore(self, category_id: UUID) -> None:
        """Restore a soft-deleted category."""
        pass

    @abstractmethod
    async def exists(self, category_id: UUID) -> bool:
        pass

    @abstractmethod
    async def exists_by_slug(self, slug: str, exclude_id: Optional[UUID] = None) -> bool:
        """Check if a live category other than exclude_id uses the slug."""
        pass

    @abstractmethod
    async def count(self, filters: Optional[CategoryFilters] = None) -> int:
        pass

    @abstractmethod
    async def move(self, category_id: UUID, new_parent_id: Optional[UUID]) -> None:
        """
        Reparent a category.

        Raises CircularReferenceException when new_parent_id lies in the
        category's own subtree.
        """
        pass

    @abstractmethod
    async def reorder(self, category_id: UUID, sort_order: int) -> None:
        pass

    @abstractmethod
    async def find_breadcrumb(self, category_id: UUID) -> List[Breadcrumb]:
        pass

    @abstractmethod
    async def validate_hierarchy(self, category_id: UUID, new_parent_id: Optional[UUID]) -> bool:
        """True when moving category_id under new_parent_id keeps the tree acyclic."""
        pass

    @abstractmethod
    async def get_product_count(self, category_id: UUID, include_descendants: bool = False) -> int:
        pass

    @abstractmethod
    async def find_categories_with_products(self) -> List[Category]:
        pass

    @abstractmethod
    async def find_empty_categories(self) -> List[Category]:
        pass


class ProductCountSource(ABC):
    """Supplies direct product membership counts to category queries."""

    @abstractmethod
    async def count_by_category(self) -> Mapping[UUID, int]:
        """Live product count per category id."""
        pass
