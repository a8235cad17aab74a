"""
Tests for the product and category application services.
"""

import logging
from decimal import Decimal
from uuid import uuid4

import pytest

from application.services import (
    CategoryService,
    CreateCategoryCommand,
    CreateProductCommand,
    ListProductsQuery,
    ProductService,
    UpdateCategoryCommand,
    UpdateProductCommand,
)
from domain.catalog.queries import ProductFilters
from domain.catalog.value_objects import ProductStatus
from domain.shared.events import (
    CategoryCreated,
    CategoryMoved,
    ProductCreated,
    ProductDeleted,
    ProductStockChanged,
)
from domain.shared.exceptions import (
    BusinessRuleViolationException,
    CircularReferenceException,
    EntityAlreadyExistsException,
    EntityNotFoundException,
    InsufficientStockException,
    InvalidOperationException,
    ValidationException,
)
from domain.shared.query import SortOptions


@pytest.fixture
def events():
    return []


@pytest.fixture
def product_service(product_repository, category_repository, events):
    return ProductService(
        product_repository,
        category_repository,
        publish=events.append,
        default_currency="THB",
        default_page_size=2,
        max_page_size=3,
    )


@pytest.fixture
def category_service(category_repository, product_repository, events):
    return CategoryService(
        category_repository,
        product_repository,
        publish=events.append,
        block_delete_with_products=False,
    )


def rice_command(**kwargs):
    values = dict(name="Jasmine Rice", description="Fragrant long grain rice", price="1000", sku="RICE-001")
    values.update(kwargs)
    return CreateProductCommand(**values)


class TestProductService:
    """ProductService use cases"""

    @pytest.mark.asyncio
    async def test_create_product(self, product_service, events):
        product = await product_service.create_product(rice_command(sale_price="800"))

        assert product.slug == "jasmine-rice"
        assert product.price.currency == "THB"
        assert product.effective_price.amount == Decimal("800")
        assert product.status == ProductStatus.DRAFT
        assert isinstance(events[0], ProductCreated)
        assert product.domain_events == []

    @pytest.mark.asyncio
    async def test_create_generates_sku(self, product_service):
        product = await product_service.create_product(rice_command(sku=None, sku_prefix="rice"))

        assert product.sku.is_generated()
        assert product.sku.prefix() == "RICE"

    @pytest.mark.asyncio
    async def test_duplicate_sku_and_slug(self, product_service):
        await product_service.create_product(rice_command())

        with pytest.raises(EntityAlreadyExistsException, match="sku"):
            await product_service.create_product(rice_command(slug="rice-two"))
        with pytest.raises(EntityAlreadyExistsException, match="slug"):
            await product_service.create_product(rice_command(sku="RICE-002"))

    @pytest.mark.asyncio
    async def test_unknown_category_rejected(self, product_service):
        with pytest.raises(EntityNotFoundException, match="Category"):
            await product_service.create_product(rice_command(category_ids=[uuid4()]))

    @pytest.mark.asyncio
    async def test_sale_price_above_price_rejected(self, product_service):
        product = await product_service.create_product(rice_command())

        with pytest.raises(ValidationException):
            await product_service.update_product(
                UpdateProductCommand(product_id=product.id, sale_price="1200")
            )
        assert (await product_service.get_product(product.id)).sale_price is None

    @pytest.mark.asyncio
    async def test_update_product(self, product_service, category_service):
        category = await category_service.create_category(CreateCategoryCommand(name="Rice"))
        product = await product_service.create_product(rice_command(sale_price="900"))

        updated = await product_service.update_product(UpdateProductCommand(
            product_id=product.id,
            name="Thai Jasmine Rice",
            price="1100",
            stock_quantity=12,
            status=ProductStatus.ACTIVE,
            category_ids=[category.id],
            gallery=["a.jpg"],
        ))

        assert updated.name == "Thai Jasmine Rice"
        assert updated.price.amount == Decimal("1100")
        assert updated.sale_price.amount == Decimal("900")
        assert updated.can_be_purchased
        assert updated.main_image == "a.jpg"
        assert updated.validate_for_publication() == []

        cleared = await product_service.update_product(
            UpdateProductCommand(product_id=product.id, clear_sale_price=True)
        )
        assert not cleared.is_on_sale

    @pytest.mark.asyncio
    async def test_delete_and_restore(self, product_service, events):
        product = await product_service.create_product(rice_command())

        await product_service.delete_product(product.id)
        assert isinstance(events[-1], ProductDeleted)
        with pytest.raises(EntityNotFoundException):
            await product_service.get_product(product.id)
        with pytest.raises(EntityNotFoundException):
            await product_service.delete_product(product.id)

        restored = await product_service.restore_product(product.id)
        assert not restored.is_deleted
        with pytest.raises(InvalidOperationException):
            await product_service.restore_product(product.id)

    @pytest.mark.asyncio
    async def test_permanent_delete(self, product_service, product_repository):
        product = await product_service.create_product(rice_command())

        await product_service.delete_product(product.id, permanent=True)

        assert not await product_repository.exists(product.id)

    @pytest.mark.asyncio
    async def test_adjust_stock(self, product_service, events, caplog):
        product = await product_service.create_product(rice_command(stock_quantity=20))

        with caplog.at_level(logging.WARNING, logger="application"):
            adjusted = await product_service.adjust_stock(product.id, -15)

        assert adjusted.stock_quantity == 5
        assert isinstance(events[-1], ProductStockChanged)
        assert "low on stock" in caplog.text

        with pytest.raises(InsufficientStockException):
            await product_service.adjust_stock(product.id, -6)
        with pytest.raises(ValidationException):
            await product_service.adjust_stock(product.id, 0)
        assert (await product_service.adjust_stock(product.id, 10)).stock_quantity == 15

    @pytest.mark.asyncio
    async def test_list_products_clamps_page_size(self, product_service):
        for index in range(5):
            await product_service.create_product(
                rice_command(name=f"Rice {index}", sku=f"RICE-00{index}", price=str(100 + index))
            )

        default_page = await product_service.list_products()
        clamped = await product_service.list_products(
            ListProductsQuery(sort=SortOptions("price", "DESC"), limit=50)
        )

        assert len(default_page) == 2
        assert default_page.total == 5
        assert [p.name for p in clamped] == ["Rice 4", "Rice 3", "Rice 2"]
        assert clamped.has_more

    @pytest.mark.asyncio
    async def test_get_by_slug(self, product_service):
        await product_service.create_product(rice_command())

        assert (await product_service.get_product_by_slug("jasmine-rice")).sku.value == "RICE-001"
        with pytest.raises(EntityNotFoundException):
            await product_service.get_product_by_slug("nope")


class TestCategoryService:
    """CategoryService use cases"""

    @pytest.mark.asyncio
    async def test_create_category(self, category_service, events):
        root = await category_service.create_category(CreateCategoryCommand(name="Fresh Fruit"))
        child = await category_service.create_category(
            CreateCategoryCommand(name="Mango", parent_id=root.id, sort_order=3, is_active=False)
        )

        assert root.slug == "fresh-fruit"
        assert child.parent_id == root.id
        assert child.sort_order == 3
        assert not child.is_active
        assert isinstance(events[0], CategoryCreated)

    @pytest.mark.asyncio
    async def test_create_rejects_duplicates_and_missing_parent(self, category_service):
        await category_service.create_category(CreateCategoryCommand(name="Fruit"))

        with pytest.raises(EntityAlreadyExistsException):
            await category_service.create_category(CreateCategoryCommand(name="Fruit"))
        with pytest.raises(EntityNotFoundException):
            await category_service.create_category(
                CreateCategoryCommand(name="Mango", parent_id=uuid4())
            )

    @pytest.mark.asyncio
    async def test_move_into_descendant_rejected(self, category_service, category_repository, tree):
        for category in tree.values():
            await category_repository.save(category)

        with pytest.raises(CircularReferenceException):
            await category_service.move_category(tree["R"].id, tree["C3"].id)
        with pytest.raises(CircularReferenceException):
            await category_service.update_category(
                UpdateCategoryCommand(category_id=tree["C1"].id, parent_id=tree["C3"].id)
            )

    @pytest.mark.asyncio
    async def test_move_category(self, category_service, category_repository, tree, events):
        for category in tree.values():
            await category_repository.save(category)

        moved = await category_service.move_category(tree["C3"].id, tree["C2"].id)
        assert moved.parent_id == tree["C2"].id
        assert isinstance(events[-1], CategoryMoved)

        promoted = await category_service.update_category(
            UpdateCategoryCommand(category_id=tree["C3"].id, parent_id=None, name="Top")
        )
        assert promoted.is_root
        assert promoted.name == "Top"

    @pytest.mark.asyncio
    async def test_delete_with_children_conflicts(self, category_service, category_repository, tree):
        for category in tree.values():
            await category_repository.save(category)

        with pytest.raises(BusinessRuleViolationException, match="subcategories"):
            await category_service.delete_category(tree["C1"].id)

        await category_service.delete_category(tree["C3"].id)
        await category_service.delete_category(tree["C1"].id)

        assert await category_repository.find_children(tree["R"].id) == [tree["C2"]]

    @pytest.mark.asyncio
    async def test_delete_with_products(self, category_repository, product_repository, product_service):
        category = await CategoryService(category_repository).create_category(
            CreateCategoryCommand(name="Rice")
        )
        await product_service.create_product(rice_command(category_ids=[category.id]))

        blocking = CategoryService(
            category_repository, product_repository, block_delete_with_products=True
        )
        with pytest.raises(BusinessRuleViolationException, match="has products"):
            await blocking.delete_category(category.id)

        permissive = CategoryService(
            category_repository, product_repository, block_delete_with_products=False
        )
        await permissive.delete_category(category.id)
        assert await product_repository.count(ProductFilters(category_ids=[category.id])) == 1

    @pytest.mark.asyncio
    async def test_restore_category(self, category_service):
        category = await category_service.create_category(CreateCategoryCommand(name="Fruit"))
        await category_service.delete_category(category.id)

        restored = await category_service.restore_category(category.id)

        assert not restored.is_deleted

    @pytest.mark.asyncio
    async def test_tree_and_breadcrumb(self, category_service, category_repository, tree):
        for category in tree.values():
            await category_repository.save(category)

        forest = await category_service.get_category_tree(include_product_count=True)
        crumbs = await category_service.get_breadcrumb(tree["C3"].id)

        assert [n.category.slug for n in forest[0].children] == ["child-one", "child-two"]
        assert forest[0].product_count == 0
        assert [c.slug for c in crumbs] == ["root", "child-one", "grandchild"]
        with pytest.raises(EntityNotFoundException):
            await category_service.get_category_tree(uuid4())

    @pytest.mark.asyncio
    async def test_update_slug_conflict(self, category_service):
        await category_service.create_category(CreateCategoryCommand(name="Fruit"))
        veg = await category_service.create_category(CreateCategoryCommand(name="Veg"))

        with pytest.raises(EntityAlreadyExistsException):
            await category_service.update_category(
                UpdateCategoryCommand(category_id=veg.id, slug="fruit")
            )
