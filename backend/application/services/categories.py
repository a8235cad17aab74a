"""
Category use cases.

Cross-category rules the aggregate cannot see on its own (slug uniqueness,
parent existence, cycles, live children) are checked here against a
snapshot of the live categories.
"""

from dataclasses import dataclass
from typing import Callable, List, Optional, Union
from uuid import UUID
import logging

from config import settings
from domain.catalog.aggregates import Category
from domain.catalog.hierarchy import Breadcrumb, CategoryHierarchy, CategoryTreeNode
from domain.catalog.queries import UNSET, ProductFilters, Unset
from domain.catalog.repositories import CategoryRepository, ProductRepository
from domain.catalog.value_objects import slug_from_name
from domain.shared.events import DomainEvent
from domain.shared.exceptions import (
    BusinessRuleViolationException,
    DomainException,
    EntityAlreadyExistsException,
    EntityNotFoundException,
)

logger = logging.getLogger(__name__)

EventPublisher = Callable[[DomainEvent], None]


# =============================================================================
# COMMANDS
# =============================================================================

@dataclass
class CreateCategoryCommand:
    name: str
    slug: Optional[str] = None
    description: Optional[str] = None
    parent_id: Optional[UUID] = None
    image_url: Optional[str] = None
    sort_order: int = 0
    is_active: bool = True


@dataclass
class UpdateCategoryCommand:
    """Fields left as None are not touched; parent_id uses UNSET for that."""

    category_id: UUID
    name: Optional[str] = None
    description: Optional[str] = None
    slug: Optional[str] = None
    parent_id: Union[UUID, None, Unset] = UNSET
    image_url: Optional[str] = None
    sort_order: Optional[int] = None
    is_active: Optional[bool] = None


# =============================================================================
# SERVICE
# =============================================================================

class CategoryService:
    """Application service for category use cases."""

    def __init__(
        self,
        categories: CategoryRepository,
        products: Optional[ProductRepository] = None,
        publish: Optional[EventPublisher] = None,
        block_delete_with_products: Optional[bool] = None,
    ):
        self.categories = categories
        self.products = products
        self.publish = publish
        if block_delete_with_products is None:
            block_delete_with_products = settings.CATALOG_BLOCK_DELETE_WITH_PRODUCTS
        self.block_delete_with_products = block_delete_with_products

    async def create_category(self, command: CreateCategoryCommand) -> Category:
        slug = command.slug or slug_from_name(command.name)
        if await self.categories.exists_by_slug(slug):
            logger.warning(f"Rejected category create: slug {slug} already exists")
            raise EntityAlreadyExistsException("Category", slug, field="slug")
        if command.parent_id is not None:
            await self._ensure_parent_exists(command.parent_id)

        category = Category.create(
            name=command.name,
            slug=slug,
            description=command.description,
            parent_id=command.parent_id,
        )
        if command.image_url:
            category.set_image(command.image_url)
        if command.sort_order:
            category.set_sort_order(command.sort_order)
        if not command.is_active:
            category.deactivate()

        saved = await self.categories.save(category)
        self._dispatch(category)
        logger.info(f"Category created: {saved.slug} ({saved.id})")
        return saved

    async def update_category(self, command: UpdateCategoryCommand) -> Category:
        category = await self.get_category(command.category_id)

        if command.slug is not None and command.slug != category.slug:
            if await self.categories.exists_by_slug(command.slug, exclude_id=category.id):
                logger.warning(f"Rejected category update: slug {command.slug} already exists")
                raise EntityAlreadyExistsException("Category", command.slug, field="slug")
            category.update_slug(command.slug)

        if command.name is not None or command.description is not None:
            category.update_basic_info(
                command.name if command.name is not None else category.name,
                command.description if command.description is not None else category.description,
            )

        if command.parent_id is not UNSET and command.parent_id != category.parent_id:
            await self._check_move(category.id, command.parent_id)
            category.set_parent(command.parent_id)

        if command.image_url is not None:
            category.set_image(command.image_url or None)
        if command.sort_order is not None:
            category.set_sort_order(command.sort_order)
        if command.is_active is not None:
            if command.is_active:
                category.activate()
            else:
                category.deactivate()

        saved = await self.categories.save(category)
        self._dispatch(category)
        logger.info(f"Category updated: {saved.id}")
        return saved

    async def move_category(self, category_id: UUID, new_parent_id: Optional[UUID]) -> Category:
        category = await self.get_category(category_id)
        if new_parent_id == category.parent_id:
            return category
        await self._check_move(category_id, new_parent_id)
        category.set_parent(new_parent_id)
        saved = await self.categories.save(category)
        self._dispatch(category)
        logger.info(f"Category {category_id} moved under {new_parent_id}")
        return saved

    async def delete_category(self, category_id: UUID, permanent: bool = False) -> None:
        category = await self.categories.find_by_id(category_id, include_deleted=permanent)
        if category is None:
            raise EntityNotFoundException("Category", category_id)

        hierarchy = await self._snapshot()
        try:
            hierarchy.ensure_can_delete(category_id)
        except BusinessRuleViolationException:
            logger.warning(f"Rejected category delete: {category_id} has subcategories")
            raise

        if self.block_delete_with_products and self.products is not None:
            product_count = await self.products.count(ProductFilters(category_ids=[category_id]))
            if product_count:
                logger.warning(f"Rejected category delete: {category_id} has {product_count} products")
                raise BusinessRuleViolationException(
                    "CATEGORY_HAS_PRODUCTS",
                    "Cannot delete category that has products. "
                    "Please move or delete the products first.",
                )

        if permanent:
            await self.categories.permanently_delete(category_id)
            logger.info(f"Category permanently deleted: {category_id}")
            return

        category.delete()
        await self.categories.save(category)
        self._dispatch(category)
        logger.info(f"Category deleted: {category_id}")

    async def restore_category(self, category_id: UUID) -> Category:
        category = await self.categories.find_by_id(category_id, include_deleted=True)
        if category is None:
            raise EntityNotFoundException("Category", category_id)
        category.restore()
        saved = await self.categories.save(category)
        self._dispatch(category)
        logger.info(f"Category restored: {category_id}")
        return saved

    async def get_category(self, category_id: UUID) -> Category:
        category = await self.categories.find_by_id(category_id)
        if category is None:
            raise EntityNotFoundException("Category", category_id)
        return category

    async def get_category_tree(
        self,
        root_id: Optional[UUID] = None,
        include_product_count: bool = False,
    ) -> List[CategoryTreeNode]:
        if root_id is not None:
            await self.get_category(root_id)
        return await self.categories.build_tree(root_id, include_product_count)

    async def get_breadcrumb(self, category_id: UUID) -> List[Breadcrumb]:
        await self.get_category(category_id)
        return await self.categories.find_breadcrumb(category_id)

    async def _snapshot(self) -> CategoryHierarchy:
        page = await self.categories.find_all()
        return CategoryHierarchy(page.items)

    async def _ensure_parent_exists(self, parent_id: UUID) -> None:
        if await self.categories.find_by_id(parent_id) is None:
            logger.warning(f"Rejected category change: parent {parent_id} not found")
            raise EntityNotFoundException("Category", parent_id)

    async def _check_move(self, category_id: UUID, new_parent_id: Optional[UUID]) -> None:
        if new_parent_id is None:
            return
        await self._ensure_parent_exists(new_parent_id)
        hierarchy = await self._snapshot()
        try:
            hierarchy.ensure_can_move(category_id, new_parent_id)
        except DomainException as exc:
            logger.warning(f"Rejected move of {category_id} under {new_parent_id}: {exc.message}")
            raise

    def _dispatch(self, category: Category) -> None:
        for event in category.clear_domain_events():
            logger.debug(f"{event.event_type} for category {category.id}")
            if self.publish is not None:
                self.publish(event)
