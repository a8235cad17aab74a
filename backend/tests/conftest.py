"""
Shared fixtures for catalog tests.
"""

from typing import Dict

import pytest

from domain.catalog.aggregates import Category, Product
from domain.catalog.value_objects import Sku
from domain.shared.value_objects import Money
from infrastructure.persistence import InMemoryCategoryRepository, InMemoryProductRepository


def make_product(
    name: str = "Jasmine Rice",
    slug: str = "jasmine-rice",
    sku: str = "RICE-001",
    price=1000,
    currency: str = "THB",
    **kwargs,
) -> Product:
    """Build a draft product; extra kwargs go to Product.create."""
    return Product.create(
        name=name,
        slug=slug,
        description=kwargs.pop("description", "Fragrant long grain rice"),
        short_description=kwargs.pop("short_description", "Rice"),
        sku=Sku.create(sku),
        price=Money.create(price, currency),
        **kwargs,
    )


def make_category(name: str, slug: str, parent: Category = None, sort_order: int = 0) -> Category:
    category = Category.create(name=name, slug=slug, parent_id=parent.id if parent else None)
    if sort_order:
        category.set_sort_order(sort_order)
    return category


@pytest.fixture
def product() -> Product:
    return make_product()


@pytest.fixture
def tree() -> Dict[str, Category]:
    """
    R
    +-- C1
    |   +-- C3
    +-- C2
    """
    root = make_category("Root", "root")
    c1 = make_category("Child One", "child-one", root, sort_order=1)
    c2 = make_category("Child Two", "child-two", root, sort_order=2)
    c3 = make_category("Grandchild", "grandchild", c1)
    return {"R": root, "C1": c1, "C2": c2, "C3": c3}


@pytest.fixture
def product_repository() -> InMemoryProductRepository:
    return InMemoryProductRepository()


@pytest.fixture
def category_repository(product_repository) -> InMemoryCategoryRepository:
    return InMemoryCategoryRepository(product_counts=product_repository)
