"""
Product use cases.

Each command loads aggregates through the repository ports, runs the
domain operation, saves, and hands the recorded domain events to the
configured publisher.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Callable, Dict, List, Optional, Union
from uuid import UUID
import logging

from config import settings
from domain.catalog.aggregates import Product
from domain.catalog.queries import ProductFilters
from domain.catalog.repositories import CategoryRepository, ProductRepository
from domain.catalog.value_objects import ProductImages, ProductStatus, Sku, slug_from_name
from domain.shared.events import DomainEvent
from domain.shared.exceptions import (
    EntityAlreadyExistsException,
    EntityNotFoundException,
    ValidationException,
)
from domain.shared.query import Page, Pagination, SortOptions
from domain.shared.value_objects import Dimensions, Money, Weight

logger = logging.getLogger(__name__)

Amount = Union[int, str, Decimal]
EventPublisher = Callable[[DomainEvent], None]


# =============================================================================
# COMMANDS
# =============================================================================

@dataclass
class CreateProductCommand:
    name: str
    description: str
    price: Amount
    short_description: str = ""
    sku: Optional[str] = None
    sku_prefix: Optional[str] = None
    slug: Optional[str] = None
    currency: Optional[str] = None
    sale_price: Optional[Amount] = None
    stock_quantity: int = 0
    manage_stock: bool = True
    status: Optional[ProductStatus] = None
    weight: Optional[Weight] = None
    dimensions: Optional[Dimensions] = None
    attributes: Dict[str, Any] = field(default_factory=dict)
    featured_image: Optional[str] = None
    gallery: List[str] = field(default_factory=list)
    category_ids: List[UUID] = field(default_factory=list)


@dataclass
class UpdateProductCommand:
    """Fields left as None are not touched."""

    product_id: UUID
    name: Optional[str] = None
    description: Optional[str] = None
    short_description: Optional[str] = None
    slug: Optional[str] = None
    price: Optional[Amount] = None
    sale_price: Optional[Amount] = None
    clear_sale_price: bool = False
    stock_quantity: Optional[int] = None
    status: Optional[ProductStatus] = None
    weight: Optional[Weight] = None
    dimensions: Optional[Dimensions] = None
    attributes: Optional[Dict[str, Any]] = None
    featured_image: Optional[str] = None
    gallery: Optional[List[str]] = None
    category_ids: Optional[List[UUID]] = None


@dataclass
class ListProductsQuery:
    filters: ProductFilters = field(default_factory=ProductFilters)
    sort: Optional[SortOptions] = None
    offset: int = 0
    limit: Optional[int] = None


# =============================================================================
# SERVICE
# =============================================================================

class ProductService:
    """Application service for product use cases."""

    def __init__(
        self,
        products: ProductRepository,
        categories: CategoryRepository,
        publish: Optional[EventPublisher] = None,
        default_currency: Optional[str] = None,
        default_page_size: Optional[int] = None,
        max_page_size: Optional[int] = None,
    ):
        self.products = products
        self.categories = categories
        self.publish = publish
        self.default_currency = default_currency or settings.CATALOG_DEFAULT_CURRENCY
        self.default_page_size = default_page_size or settings.CATALOG_DEFAULT_PAGE_SIZE
        self.max_page_size = max_page_size or settings.CATALOG_MAX_PAGE_SIZE

    async def create_product(self, command: CreateProductCommand) -> Product:
        currency = command.currency or self.default_currency
        sku = Sku.create(command.sku) if command.sku else Sku.generate(command.sku_prefix)
        slug = command.slug or slug_from_name(command.name)

        if await self.products.exists_by_sku(sku):
            logger.warning(f"Rejected product create: SKU {sku} already exists")
            raise EntityAlreadyExistsException("Product", sku.value, field="sku")
        if await self.products.exists_by_slug(slug):
            logger.warning(f"Rejected product create: slug {slug} already exists")
            raise EntityAlreadyExistsException("Product", slug, field="slug")
        await self._ensure_categories_exist(command.category_ids)

        product = Product.create(
            name=command.name,
            slug=slug,
            description=command.description,
            short_description=command.short_description,
            sku=sku,
            price=Money.create(command.price, currency),
            stock_quantity=command.stock_quantity,
            manage_stock=command.manage_stock,
        )
        if command.sale_price is not None:
            product.update_price(product.price, Money.create(command.sale_price, currency))
        if command.weight is not None:
            product.update_weight(command.weight)
        if command.dimensions is not None:
            product.update_dimensions(command.dimensions)
        if command.attributes:
            product.update_attributes(command.attributes)
        if command.featured_image or command.gallery:
            product.update_images(ProductImages(command.featured_image, tuple(command.gallery)))
        if command.category_ids:
            product.assign_to_categories(command.category_ids)
        if command.status is not None:
            product.set_status(command.status)

        saved = await self.products.save(product)
        self._dispatch(product)
        logger.info(f"Product created: {saved.sku} ({saved.id})")
        return saved

    async def update_product(self, command: UpdateProductCommand) -> Product:
        product = await self.get_product(command.product_id)

        if command.slug is not None and command.slug != product.slug:
            if await self.products.exists_by_slug(command.slug, exclude_id=product.id):
                logger.warning(f"Rejected product update: slug {command.slug} already exists")
                raise EntityAlreadyExistsException("Product", command.slug, field="slug")
            product.update_slug(command.slug)

        if any(v is not None for v in (command.name, command.description, command.short_description)):
            product.update_basic_info(
                command.name if command.name is not None else product.name,
                command.description if command.description is not None else product.description,
                command.short_description
                if command.short_description is not None else product.short_description,
            )

        if command.price is not None or command.sale_price is not None or command.clear_sale_price:
            currency = product.price.currency
            price = Money.create(command.price, currency) if command.price is not None else product.price
            if command.clear_sale_price:
                sale_price = None
            elif command.sale_price is not None:
                sale_price = Money.create(command.sale_price, currency)
            else:
                sale_price = product.sale_price
            product.update_price(price, sale_price)

        if command.stock_quantity is not None:
            product.update_stock(command.stock_quantity)
        if command.weight is not None:
            product.update_weight(command.weight)
        if command.dimensions is not None:
            product.update_dimensions(command.dimensions)
        if command.attributes is not None:
            product.update_attributes(command.attributes)
        if command.gallery is not None:
            product.update_images(ProductImages(
                command.featured_image or product.images.featured_image,
                tuple(command.gallery),
            ))
        elif command.featured_image is not None:
            product.set_featured_image(command.featured_image)
        if command.category_ids is not None:
            await self._ensure_categories_exist(command.category_ids)
            product.assign_to_categories(command.category_ids)
        if command.status is not None:
            product.set_status(command.status)

        saved = await self.products.save(product)
        self._dispatch(product)
        logger.info(f"Product updated: {saved.id}")
        return saved

    async def delete_product(self, product_id: UUID, permanent: bool = False) -> None:
        product = await self.products.find_by_id(product_id, include_deleted=permanent)
        if product is None:
            raise EntityNotFoundException("Product", product_id)

        if permanent:
            await self.products.permanently_delete(product_id)
            logger.info(f"Product permanently deleted: {product_id}")
            return

        product.delete()
        await self.products.save(product)
        self._dispatch(product)
        logger.info(f"Product deleted: {product_id}")

    async def restore_product(self, product_id: UUID) -> Product:
        product = await self.products.find_by_id(product_id, include_deleted=True)
        if product is None:
            raise EntityNotFoundException("Product", product_id)
        product.restore()
        saved = await self.products.save(product)
        self._dispatch(product)
        logger.info(f"Product restored: {product_id}")
        return saved

    async def adjust_stock(self, product_id: UUID, delta: int) -> Product:
        """Apply a positive (receive) or negative (sell) stock movement."""
        if delta == 0:
            raise ValidationException("Stock adjustment cannot be zero", "delta", delta)
        product = await self.get_product(product_id)
        if delta > 0:
            product.increase_stock(delta)
        else:
            product.reduce_stock(-delta)
        saved = await self.products.save(product)
        self._dispatch(product)
        if saved.manage_stock and 0 < saved.stock_quantity <= settings.CATALOG_LOW_STOCK_THRESHOLD:
            logger.warning(f"Product {saved.sku} is low on stock: {saved.stock_quantity} left")
        return saved

    async def get_product(self, product_id: UUID) -> Product:
        product = await self.products.find_by_id(product_id)
        if product is None:
            raise EntityNotFoundException("Product", product_id)
        return product

    async def get_product_by_slug(self, slug: str) -> Product:
        product = await self.products.find_by_slug(slug)
        if product is None:
            raise EntityNotFoundException("Product", slug)
        return product

    async def list_products(self, query: Optional[ListProductsQuery] = None) -> Page[Product]:
        query = query or ListProductsQuery()
        limit = min(query.limit or self.default_page_size, self.max_page_size)
        return await self.products.find_all(
            query.filters,
            query.sort,
            Pagination(offset=query.offset, limit=limit),
        )

    async def _ensure_categories_exist(self, category_ids: List[UUID]) -> None:
        for category_id in category_ids:
            if await self.categories.find_by_id(category_id) is None:
                logger.warning(f"Rejected product change: category {category_id} not found")
                raise EntityNotFoundException("Category", category_id)

    def _dispatch(self, product: Product) -> None:
        for event in product.clear_domain_events():
            logger.debug(f"{event.event_type} for product {product.id}")
            if self.publish is not None:
                self.publish(event)
