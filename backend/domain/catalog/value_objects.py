"""
Catalog Domain - Value Objects.

Identifiers and small immutable records specific to the product catalog.
Money, Weight and Dimensions live in the shared kernel.
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional, Tuple
import re
import secrets
import time

from domain.shared.exceptions import EntityAlreadyExistsException, ValidationException


# =============================================================================
# SKU
# =============================================================================

_SKU_PATTERN = re.compile(r"^[A-Z0-9][A-Z0-9\-_]*[A-Z0-9]$")
_GENERATED_SKU_PATTERN = re.compile(r"^[A-Z]+-[A-Z0-9]+-[A-Z0-9]+$")
_BASE36 = "0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZ"

SKU_MIN_LENGTH = 3
SKU_MAX_LENGTH = 50


def _to_base36(number: int) -> str:
    if number == 0:
        return "0"
    digits = []
    while number:
        number, remainder = divmod(number, 36)
        digits.append(_BASE36[remainder])
    return "".join(reversed(digits))


@dataclass(frozen=True)
class Sku:
    """
    Stock keeping unit.

    Uppercase letters, digits, hyphens and underscores; must start and end
    with a letter or digit.
    """

    value: str

    def __post_init__(self):
        value = self.value
        if not value or not isinstance(value, str):
            raise ValidationException("SKU must be a non-empty string", "sku", value)
        if len(value) < SKU_MIN_LENGTH:
            raise ValidationException(
                f"SKU must be at least {SKU_MIN_LENGTH} characters long", "sku", value
            )
        if len(value) > SKU_MAX_LENGTH:
            raise ValidationException(
                f"SKU cannot be longer than {SKU_MAX_LENGTH} characters", "sku", value
            )
        if not _SKU_PATTERN.match(value):
            raise ValidationException(
                "SKU must contain only uppercase letters, numbers, hyphens, and underscores, "
                "and cannot start or end with special characters",
                "sku",
                value,
            )

    @classmethod
    def create(cls, value: str) -> Sku:
        """Create from user input, trimmed and uppercased."""
        if not isinstance(value, str):
            raise ValidationException("SKU must be a non-empty string", "sku", value)
        return cls(value.strip().upper())

    @classmethod
    def generate(cls, prefix: Optional[str] = None) -> Sku:
        """Build PREFIX-<base36 ms timestamp>-<4 random base36 chars>."""
        timestamp = _to_base36(int(time.time() * 1000))
        suffix = "".join(secrets.choice(_BASE36) for _ in range(4))
        head = prefix.strip().upper() if prefix else "SKU"
        return cls(f"{head}-{timestamp}-{suffix}")

    @staticmethod
    def is_valid(value: str) -> bool:
        try:
            Sku.create(value)
        except ValidationException:
            return False
        return True

    @staticmethod
    def validate_uniqueness(sku: Sku, existing: Iterable[Sku]) -> None:
        if any(sku.equals(other) for other in existing):
            raise EntityAlreadyExistsException("Product", sku.value, field="sku")

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def equals(self, other: Sku) -> bool:
        return self.value == other.value

    def is_generated(self) -> bool:
        """
        Best-effort guess whether this SKU came from generate().

        A hand-entered SKU can have the same shape, so never rely on this
        for anything that must be correct.
        """
        return "-" in self.value and (
            self.value.startswith("SKU") or bool(_GENERATED_SKU_PATTERN.match(self.value))
        )

    def is_custom(self) -> bool:
        return not self.is_generated()

    def has_prefix(self, prefix: str) -> bool:
        return self.value.startswith(prefix.upper())

    def has_suffix(self, suffix: str) -> bool:
        return self.value.endswith(suffix.upper())

    def contains(self, text: str) -> bool:
        return text.upper() in self.value

    def prefix(self, delimiter: str = "-") -> str:
        return self.value.split(delimiter)[0]

    def suffix(self, delimiter: str = "-") -> str:
        return self.value.split(delimiter)[-1]

    def __str__(self) -> str:
        return self.value


# =============================================================================
# SLUG
# =============================================================================

SLUG_PATTERN = re.compile(r"^[a-z0-9-]+$")


def validate_slug(slug: str, field: str = "slug") -> str:
    """Return the slug unchanged or raise when it is not lowercase-dashed."""
    if not slug or not isinstance(slug, str) or not slug.strip():
        raise ValidationException("Slug cannot be empty", field, slug)
    if not SLUG_PATTERN.match(slug):
        raise ValidationException(
            "Slug must contain only lowercase letters, numbers, and hyphens", field, slug
        )
    return slug


def slug_from_name(name: str) -> str:
    """Derive a slug from a display name: lowercase, runs of other chars become '-'."""
    slug = re.sub(r"[^a-z0-9]+", "-", (name or "").strip().lower()).strip("-")
    if not slug:
        raise ValidationException("Cannot derive slug from name", "slug", name)
    return slug


# =============================================================================
# PRODUCT STATUS
# =============================================================================

class ProductStatus(str, Enum):
    """Lifecycle state of a product."""

    DRAFT = "draft"
    ACTIVE = "active"
    INACTIVE = "inactive"
    ARCHIVED = "archived"

    @classmethod
    def from_string(cls, value: str) -> ProductStatus:
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise ValidationException(f"Invalid product status: {value}", "status", value) from None

    @property
    def can_be_published(self) -> bool:
        return self in (ProductStatus.DRAFT, ProductStatus.INACTIVE)

    @property
    def can_be_deactivated(self) -> bool:
        return self == ProductStatus.ACTIVE

    @property
    def can_be_archived(self) -> bool:
        return self in (ProductStatus.ACTIVE, ProductStatus.INACTIVE)

    @property
    def can_be_restored(self) -> bool:
        return self == ProductStatus.ARCHIVED

    @property
    def is_publicly_visible(self) -> bool:
        return self == ProductStatus.ACTIVE

    @property
    def allows_modification(self) -> bool:
        return self != ProductStatus.ARCHIVED

    @property
    def display_name(self) -> str:
        return self.value.capitalize()

    @property
    def description(self) -> str:
        return _STATUS_DESCRIPTIONS[self]


_STATUS_DESCRIPTIONS = {
    ProductStatus.DRAFT: "Product is being prepared and not visible to customers",
    ProductStatus.ACTIVE: "Product is live and available for purchase",
    ProductStatus.INACTIVE: "Product is temporarily hidden from customers",
    ProductStatus.ARCHIVED: "Product is no longer available and archived",
}


# =============================================================================
# PRODUCT IMAGES
# =============================================================================

@dataclass(frozen=True)
class ProductImages:
    """Featured image plus an ordered, duplicate-free gallery."""

    featured_image: Optional[str] = None
    gallery: Tuple[str, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "gallery", tuple(dict.fromkeys(self.gallery)))

    @property
    def main_image(self) -> Optional[str]:
        if self.featured_image:
            return self.featured_image
        return self.gallery[0] if self.gallery else None

    @property
    def has_images(self) -> bool:
        return bool(self.featured_image) or bool(self.gallery)

    def with_featured(self, url: Optional[str]) -> ProductImages:
        return ProductImages(url, self.gallery)

    def with_image(self, url: str) -> ProductImages:
        return ProductImages(self.featured_image, self.gallery + (url,))

    def without_image(self, url: str) -> ProductImages:
        """Drop url from the gallery; a removed featured image falls back to the first gallery entry."""
        gallery = tuple(item for item in self.gallery if item != url)
        featured = self.featured_image
        if featured == url:
            featured = gallery[0] if gallery else None
        return ProductImages(featured, gallery)

    def to_dict(self):
        return {"featured_image": self.featured_image, "gallery": list(self.gallery)}
