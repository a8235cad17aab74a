"""
Catalog Domain - Aggregates.

Product and Category are the aggregate roots of the catalog.
A category holds only a reference to its parent; relationships to other
categories are resolved over a supplied collection (see hierarchy.py).
"""

from __future__ import annotations
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional, Union
from uuid import UUID

from domain.shared.base_aggregate import AggregateRoot
from domain.shared.value_objects import Dimensions, Money, Number, Weight, to_decimal
from domain.shared.events import (
    CategoryCreated,
    CategoryDeleted,
    CategoryMoved,
    CategoryRestored,
    ProductCreated,
    ProductDeleted,
    ProductPriceChanged,
    ProductRestored,
    ProductStatusChanged,
    ProductStockChanged,
    ProductUpdated,
)
from domain.shared.exceptions import (
    BusinessRuleViolationException,
    CurrencyMismatchException,
    InsufficientStockException,
    ValidationException,
)

from .hierarchy import CategoryHierarchy
from .value_objects import SLUG_PATTERN, ProductImages, ProductStatus, Sku, validate_slug


AttributeValue = Union[str, List[str]]

MAX_RATING = Decimal("5")


@dataclass(eq=False)
class Product(AggregateRoot):
    """
    Aggregate root for sellable products.

    Holds pricing, stock, physical measurements and category membership.
    A soft-deleted product rejects every mutation until restored.
    """

    # Core identification
    name: str = ""
    slug: str = ""
    sku: Optional[Sku] = None

    # Descriptions
    description: str = ""
    short_description: str = ""

    # Pricing
    price: Money = field(default_factory=Money.zero)
    sale_price: Optional[Money] = None

    # Inventory
    stock_quantity: int = 0
    manage_stock: bool = True

    status: ProductStatus = ProductStatus.DRAFT

    # Physical measurements
    weight: Optional[Weight] = None
    dimensions: Optional[Dimensions] = None

    attributes: Dict[str, AttributeValue] = field(default_factory=dict)
    images: ProductImages = field(default_factory=ProductImages)
    category_ids: List[UUID] = field(default_factory=list)

    # Reviews
    average_rating: Decimal = Decimal("0")
    review_count: int = 0

    def __post_init__(self):
        if not self.name or not self.name.strip():
            raise ValidationException("Product name cannot be empty", "name")
        if self.sku is None:
            raise ValidationException("Product SKU is required", "sku")
        self._validate_prices(self.price, self.sale_price)
        if self.stock_quantity < 0:
            raise ValidationException(
                "Stock quantity cannot be negative", "stock_quantity", self.stock_quantity
            )
        self.average_rating = self._validate_rating(self.average_rating, self.review_count)
        self.category_ids = list(dict.fromkeys(self.category_ids))

    # =========================================================================
    # PROPERTIES
    # =========================================================================

    @property
    def is_active(self) -> bool:
        """Active and not soft-deleted."""
        return self.status == ProductStatus.ACTIVE and not self.is_deleted

    @property
    def is_in_stock(self) -> bool:
        """Always in stock when stock is not managed."""
        if not self.manage_stock:
            return True
        return self.stock_quantity > 0

    @property
    def is_on_sale(self) -> bool:
        """True when a sale price below the list price is set."""
        return self.sale_price is not None and self.sale_price.is_less_than(self.price)

    @property
    def effective_price(self) -> Money:
        """Sale price while on sale, otherwise the list price."""
        if self.is_on_sale:
            return self.sale_price
        return self.price

    @property
    def can_be_purchased(self) -> bool:
        """Active and in stock."""
        return self.is_active and self.is_in_stock

    @property
    def can_be_displayed(self) -> bool:
        """Visible on the storefront."""
        return self.is_active and not self.is_deleted

    @property
    def has_images(self) -> bool:
        return self.images.has_images

    @property
    def main_image(self) -> Optional[str]:
        return self.images.main_image

    @property
    def has_reviews(self) -> bool:
        return self.review_count > 0

    def has_attribute(self, key: str) -> bool:
        return key in self.attributes

    def get_attribute(self, key: str) -> Optional[AttributeValue]:
        return self.attributes.get(key)

    def is_in_category(self, category_id: UUID) -> bool:
        return category_id in self.category_ids

    # =========================================================================
    # COMMANDS
    # =========================================================================

    def update_basic_info(
        self,
        name: str,
        description: str,
        short_description: str,
    ) -> None:
        """Replace name and both descriptions. The name is trimmed."""
        self.ensure_not_deleted()
        if not name or not name.strip():
            raise ValidationException("Product name cannot be empty", "name")

        changes = {}
        if name.strip() != self.name:
            changes["name"] = name.strip()
        if description != self.description:
            changes["description"] = description
        if short_description != self.short_description:
            changes["short_description"] = short_description

        self.name = name.strip()
        self.description = description
        self.short_description = short_description
        self.increment_version()

        if changes:
            self.add_domain_event(ProductUpdated(product_id=self.id, changes=changes))

    def update_slug(self, slug: str) -> None:
        """Replace the URL slug."""
        self.ensure_not_deleted()
        old_slug = self.slug
        self.slug = validate_slug(slug)
        self.increment_version()
        if old_slug != self.slug:
            self.add_domain_event(ProductUpdated(product_id=self.id, changes={"slug": self.slug}))

    def update_price(self, price: Money, sale_price: Optional[Money] = None) -> None:
        """Set list price and optional sale price; sale price may not exceed the list price."""
        self.ensure_not_deleted()
        self._validate_prices(price, sale_price)

        old_price = self.price
        self.price = price
        self.sale_price = sale_price
        self.increment_version()

        self.add_domain_event(ProductPriceChanged(
            product_id=self.id,
            old_price=str(old_price),
            new_price=str(price),
            sale_price=str(sale_price) if sale_price else None,
        ))

    def update_stock(self, quantity: int) -> None:
        """Set the stock level outright."""
        self.ensure_not_deleted()
        if quantity < 0:
            raise ValidationException("Stock quantity cannot be negative", "stock_quantity", quantity)
        self._set_stock(quantity)

    def reduce_stock(self, quantity: int) -> None:
        """Take quantity out of stock. Succeeds without change when stock is not managed."""
        self.ensure_not_deleted()
        if not self.manage_stock:
            return
        if quantity <= 0:
            raise ValidationException("Quantity to reduce must be positive", "quantity", quantity)
        if self.stock_quantity < quantity:
            raise InsufficientStockException(self.id, quantity, self.stock_quantity)
        self._set_stock(self.stock_quantity - quantity)

    def increase_stock(self, quantity: int) -> None:
        """Add received quantity to stock."""
        self.ensure_not_deleted()
        if quantity <= 0:
            raise ValidationException("Quantity to increase must be positive", "quantity", quantity)
        self._set_stock(self.stock_quantity + quantity)

    def set_stock_management(self, manage_stock: bool) -> None:
        """Turn stock tracking on or off."""
        self.ensure_not_deleted()
        self.manage_stock = manage_stock
        self.increment_version()

    def set_status(self, status: ProductStatus) -> None:
        """Assign any status directly; no transition table is enforced."""
        self.ensure_not_deleted()
        if not isinstance(status, ProductStatus):
            status = ProductStatus.from_string(status)
        old_status = self.status
        self.status = status
        self.increment_version()
        if old_status != status:
            self.add_domain_event(ProductStatusChanged(
                product_id=self.id,
                old_status=old_status.value,
                new_status=status.value,
            ))

    def activate(self) -> None:
        """Publish the product."""
        self.set_status(ProductStatus.ACTIVE)

    def deactivate(self) -> None:
        """Take the product off the storefront."""
        self.set_status(ProductStatus.INACTIVE)

    def archive(self) -> None:
        """Retire the product."""
        self.set_status(ProductStatus.ARCHIVED)

    def update_weight(self, weight: Optional[Weight]) -> None:
        """Set or clear the shipping weight."""
        self.ensure_not_deleted()
        self.weight = weight
        self.increment_version()

    def update_dimensions(self, dimensions: Optional[Dimensions]) -> None:
        """Set or clear the package dimensions."""
        self.ensure_not_deleted()
        self.dimensions = dimensions
        self.increment_version()

    def update_attributes(self, attributes: Dict[str, AttributeValue]) -> None:
        """Replace all attributes."""
        self.ensure_not_deleted()
        self.attributes = dict(attributes)
        self.increment_version()

    def add_attribute(self, key: str, value: AttributeValue) -> None:
        """Set a single attribute."""
        self.ensure_not_deleted()
        self.attributes[key] = value
        self.increment_version()

    def remove_attribute(self, key: str) -> None:
        """Remove an attribute; missing keys are ignored."""
        self.ensure_not_deleted()
        self.attributes.pop(key, None)
        self.increment_version()

    def update_images(self, images: ProductImages) -> None:
        """Replace featured image and gallery."""
        self.ensure_not_deleted()
        self.images = images
        self.increment_version()

    def set_featured_image(self, url: Optional[str]) -> None:
        """Set or clear the featured image."""
        self.ensure_not_deleted()
        self.images = self.images.with_featured(url)
        self.increment_version()

    def add_image(self, url: str) -> None:
        """Append an image to the gallery."""
        self.ensure_not_deleted()
        self.images = self.images.with_image(url)
        self.increment_version()

    def remove_image(self, url: str) -> None:
        """Remove an image from the gallery."""
        self.ensure_not_deleted()
        self.images = self.images.without_image(url)
        self.increment_version()

    def assign_to_categories(self, category_ids: Iterable[UUID]) -> None:
        """Replace membership; duplicates collapse onto their first occurrence."""
        self.ensure_not_deleted()
        self.category_ids = list(dict.fromkeys(category_ids))
        self.increment_version()

    def add_to_category(self, category_id: UUID) -> None:
        """File the product under one more category."""
        self.ensure_not_deleted()
        if category_id not in self.category_ids:
            self.category_ids.append(category_id)
            self.increment_version()

    def remove_from_category(self, category_id: UUID) -> None:
        """Remove the product from a category."""
        self.ensure_not_deleted()
        if category_id in self.category_ids:
            self.category_ids.remove(category_id)
            self.increment_version()

    def update_rating(self, average_rating: Number, review_count: int) -> None:
        """Record review aggregates."""
        self.ensure_not_deleted()
        self.average_rating = self._validate_rating(average_rating, review_count)
        self.review_count = review_count
        self.increment_version()

    def delete(self) -> None:
        """Soft-delete the product."""
        self.soft_delete()
        self.add_domain_event(ProductDeleted(product_id=self.id))

    def restore(self) -> None:
        """Restore a soft-deleted product."""
        super().restore()
        self.add_domain_event(ProductRestored(product_id=self.id))

    # =========================================================================
    # VALIDATION
    # =========================================================================

    def validate_for_publication(self) -> List[str]:
        """Pre-publish checklist. Returns messages instead of raising."""
        errors = []
        if not self.name or not self.name.strip():
            errors.append("Product name is required")
        if not self.description or not self.description.strip():
            errors.append("Product description is required")
        if not self.price.is_positive:
            errors.append("Product price must be greater than 0")
        if not self.category_ids:
            errors.append("Product must be assigned to at least one category")
        if not self.has_images:
            errors.append("Product must have at least one image")
        return errors

    @staticmethod
    def _validate_prices(price: Money, sale_price: Optional[Money]) -> None:
        if sale_price is None:
            return
        if sale_price.currency != price.currency:
            raise CurrencyMismatchException(price.currency, sale_price.currency)
        if sale_price.is_greater_than(price):
            raise ValidationException(
                "Sale price cannot be greater than regular price", "sale_price", sale_price
            )

    @staticmethod
    def _validate_rating(average_rating: Any, review_count: int) -> Decimal:
        rating = to_decimal(average_rating, "average_rating")
        if rating.is_nan() or rating < 0 or rating > MAX_RATING:
            raise ValidationException(
                "Average rating must be between 0 and 5", "average_rating", average_rating
            )
        if review_count < 0:
            raise ValidationException("Review count cannot be negative", "review_count", review_count)
        return rating

    def _set_stock(self, quantity: int) -> None:
        old_quantity = self.stock_quantity
        self.stock_quantity = quantity
        self.increment_version()
        if old_quantity != quantity:
            self.add_domain_event(ProductStockChanged(
                product_id=self.id,
                old_quantity=old_quantity,
                new_quantity=quantity,
            ))

    # =========================================================================
    # FACTORY METHODS
    # =========================================================================

    @classmethod
    def create(
        cls,
        name: str,
        slug: str,
        description: str,
        short_description: str,
        sku: Sku,
        price: Money,
        stock_quantity: int = 0,
        manage_stock: bool = True,
    ) -> Product:
        """Create a draft product with no attributes, images or categories."""
        product = cls(
            name=(name or "").strip(),
            slug=validate_slug(slug),
            description=description or "",
            short_description=short_description or "",
            sku=sku,
            price=price,
            stock_quantity=stock_quantity,
            manage_stock=manage_stock,
        )
        product.add_domain_event(ProductCreated(
            product_id=product.id,
            sku=sku.value,
            name=product.name,
        ))
        return product


@dataclass(eq=False)
class Category(AggregateRoot):
    """
    Aggregate root for catalog categories.

    Only the parent reference is stored. Cycle prevention on reparenting is
    done by the caller through CategoryHierarchy before set_parent.
    """

    name: str = ""
    slug: str = ""
    description: Optional[str] = None
    parent_id: Optional[UUID] = None
    image_url: Optional[str] = None
    is_active: bool = True
    sort_order: int = 0

    def __post_init__(self):
        if not self.name or not self.name.strip():
            raise ValidationException("Category name cannot be empty", "name")
        validate_slug(self.slug)
        if self.parent_id is not None and self.parent_id == self.id:
            raise BusinessRuleViolationException("SELF_PARENT", "Category cannot be its own parent")
        if self.sort_order < 0:
            raise ValidationException("Sort order cannot be negative", "sort_order", self.sort_order)

    # =========================================================================
    # PROPERTIES
    # =========================================================================

    @property
    def is_root(self) -> bool:
        """True for a top-level category."""
        return self.parent_id is None

    @property
    def has_parent(self) -> bool:
        return self.parent_id is not None

    @property
    def has_image(self) -> bool:
        return bool(self.image_url)

    @property
    def can_be_displayed(self) -> bool:
        """Active and not soft-deleted."""
        return self.is_active and not self.is_deleted

    # =========================================================================
    # COMMANDS
    # =========================================================================

    def update_basic_info(self, name: str, description: Optional[str] = None) -> None:
        """Rename and replace the description."""
        self.ensure_not_deleted()
        if not name or not name.strip():
            raise ValidationException("Category name cannot be empty", "name")
        self.name = name.strip()
        self.description = description or None
        self.increment_version()

    def update_slug(self, slug: str) -> None:
        """Replace the URL slug."""
        self.ensure_not_deleted()
        self.slug = validate_slug(slug)
        self.increment_version()

    def set_parent(self, parent_id: Optional[UUID]) -> None:
        """Attach under parent_id, or make root with None. Only self-parenting is rejected here."""
        self.ensure_not_deleted()
        if parent_id is not None and parent_id == self.id:
            raise BusinessRuleViolationException("SELF_PARENT", "Category cannot be its own parent")
        old_parent_id = self.parent_id
        self.parent_id = parent_id
        self.increment_version()
        if old_parent_id != parent_id:
            self.add_domain_event(CategoryMoved(
                category_id=self.id,
                old_parent_id=old_parent_id,
                new_parent_id=parent_id,
            ))

    def set_image(self, image_url: Optional[str]) -> None:
        """Set or clear the category image."""
        self.ensure_not_deleted()
        self.image_url = image_url
        self.increment_version()

    def activate(self) -> None:
        """Show the category."""
        self.ensure_not_deleted()
        self.is_active = True
        self.increment_version()

    def deactivate(self) -> None:
        """Hide the category."""
        self.ensure_not_deleted()
        self.is_active = False
        self.increment_version()

    def set_sort_order(self, sort_order: int) -> None:
        """Set the position among siblings."""
        self.ensure_not_deleted()
        if sort_order < 0:
            raise ValidationException("Sort order cannot be negative", "sort_order", sort_order)
        self.sort_order = sort_order
        self.increment_version()

    def delete(self) -> None:
        """Soft-delete the category."""
        self.soft_delete()
        self.add_domain_event(CategoryDeleted(category_id=self.id))

    def restore(self) -> None:
        """Restore a soft-deleted category."""
        super().restore()
        self.add_domain_event(CategoryRestored(category_id=self.id))

    def validate_for_publication(self) -> List[str]:
        """Pre-publish checklist. Returns messages instead of raising."""
        errors = []
        if not self.name or not self.name.strip():
            errors.append("Category name is required")
        if not self.slug or not self.slug.strip():
            errors.append("Category slug is required")
        elif not SLUG_PATTERN.match(self.slug):
            errors.append(
                "Category slug can only contain lowercase letters, numbers, and hyphens"
            )
        return errors

    # =========================================================================
    # HIERARCHY
    # =========================================================================

    def _hierarchy(self, categories: Iterable[Category]) -> CategoryHierarchy:
        return CategoryHierarchy([*categories, self])

    def get_path(self, categories: Iterable[Category]) -> List[Category]:
        """Root-to-self chain over the supplied collection."""
        return self._hierarchy(categories).path(self.id)

    def get_children(self, categories: Iterable[Category]) -> List[Category]:
        """Live direct children, by sort order."""
        return self._hierarchy(categories).children(self.id)

    def get_descendants(self, categories: Iterable[Category]) -> List[Category]:
        """Live descendants in depth-first pre-order."""
        return self._hierarchy(categories).descendants(self.id)

    def get_ancestors(self, categories: Iterable[Category]) -> List[Category]:
        """Root-to-parent chain."""
        return self._hierarchy(categories).ancestors(self.id)

    def is_ancestor_of(self, other: Category, categories: Iterable[Category]) -> bool:
        return self._hierarchy(categories).is_ancestor_of(self.id, other.id)

    def is_descendant_of(self, other: Category, categories: Iterable[Category]) -> bool:
        return self._hierarchy(categories).is_ancestor_of(other.id, self.id)

    def get_level(self, categories: Iterable[Category]) -> int:
        """Distance from the root; 0 for a root category."""
        return self._hierarchy(categories).level(self.id)

    # =========================================================================
    # FACTORY METHODS
    # =========================================================================

    @classmethod
    def create(
        cls,
        name: str,
        slug: str,
        description: Optional[str] = None,
        parent_id: Optional[UUID] = None,
    ) -> Category:
        """Create an active category with sort order 0."""
        category = cls(
            name=(name or "").strip(),
            slug=slug,
            description=description or None,
            parent_id=parent_id,
        )
        category.add_domain_event(CategoryCreated(
            category_id=category.id,
            name=category.name,
            parent_id=parent_id,
        ))
        return category
