"""
Tests for the Product aggregate.
"""

from decimal import Decimal
from uuid import uuid4

import pytest

from conftest import make_product
from domain.catalog.value_objects import ProductImages, ProductStatus
from domain.shared.events import (
    ProductCreated,
    ProductDeleted,
    ProductPriceChanged,
    ProductStatusChanged,
    ProductStockChanged,
)
from domain.shared.exceptions import (
    CurrencyMismatchException,
    InsufficientStockException,
    InvalidOperationException,
    ValidationException,
)
from domain.shared.value_objects import Dimensions, Money, Weight


class TestProductCreation:
    """Product.create defaults"""

    def test_defaults(self, product):
        assert product.status == ProductStatus.DRAFT
        assert product.stock_quantity == 0
        assert product.manage_stock
        assert product.attributes == {}
        assert not product.has_images
        assert product.category_ids == []
        assert product.average_rating == 0
        assert product.review_count == 0
        assert product.version == 1
        assert not product.is_deleted

    def test_records_created_event(self, product):
        events = product.domain_events

        assert len(events) == 1
        assert isinstance(events[0], ProductCreated)
        assert events[0].sku == "RICE-001"

    def test_empty_name_fails(self):
        with pytest.raises(ValidationException, match="name cannot be empty"):
            make_product(name="   ")

    def test_negative_initial_stock_fails(self):
        with pytest.raises(ValidationException):
            make_product(stock_quantity=-1)


class TestProductPricing:
    """update_price and price queries"""

    def test_not_on_sale_without_sale_price(self, product):
        assert not product.is_on_sale
        assert product.effective_price == Money.create(1000, "THB")

    def test_sale_price_above_price_fails(self, product):
        with pytest.raises(ValidationException, match="Sale price cannot be greater than regular price"):
            product.update_price(product.price, Money.create(1200, "THB"))

        assert product.sale_price is None

    def test_sale_price_in_other_currency_fails(self, product):
        with pytest.raises(CurrencyMismatchException):
            product.update_price(product.price, Money.create(10, "USD"))

    def test_on_sale(self, product):
        product.update_price(Money.create(1000), Money.create(800))

        assert product.is_on_sale
        assert product.effective_price.amount == Decimal("800")
        assert isinstance(product.domain_events[-1], ProductPriceChanged)

    def test_sale_price_equal_to_price_is_not_on_sale(self, product):
        product.update_price(Money.create(1000), Money.create(1000))

        assert not product.is_on_sale
        assert product.effective_price == product.price


class TestProductStock:
    """Stock-managed arithmetic"""

    def test_update_stock(self, product):
        product.update_stock(5)

        assert product.stock_quantity == 5
        assert isinstance(product.domain_events[-1], ProductStockChanged)
        with pytest.raises(ValidationException, match="cannot be negative"):
            product.update_stock(-1)

    def test_reduce_and_increase(self, product):
        product.update_stock(5)
        product.reduce_stock(3)
        product.increase_stock(10)

        assert product.stock_quantity == 12

    def test_insufficient_stock(self, product):
        product.update_stock(2)

        with pytest.raises(InsufficientStockException, match="Insufficient stock"):
            product.reduce_stock(3)
        assert product.stock_quantity == 2

    @pytest.mark.parametrize("quantity", [0, -1])
    def test_reduce_requires_positive_quantity(self, product, quantity):
        product.update_stock(5)

        with pytest.raises(ValidationException, match="must be positive"):
            product.reduce_stock(quantity)

    def test_reduce_is_noop_when_stock_not_managed(self):
        product = make_product(manage_stock=False)

        product.reduce_stock(100)

        assert product.stock_quantity == 0
        assert product.is_in_stock

    def test_in_stock(self, product):
        assert not product.is_in_stock
        product.increase_stock(1)
        assert product.is_in_stock


class TestProductStatusAndQueries:
    """Status changes and derived queries"""

    def test_any_status_can_be_set_directly(self, product):
        product.archive()
        product.activate()

        assert product.status == ProductStatus.ACTIVE
        assert isinstance(product.domain_events[-1], ProductStatusChanged)

    def test_set_status_accepts_strings(self, product):
        product.set_status("inactive")

        assert product.status == ProductStatus.INACTIVE

    def test_can_be_purchased(self, product):
        product.activate()
        assert not product.can_be_purchased

        product.update_stock(1)
        assert product.can_be_purchased
        assert product.can_be_displayed

        product.deactivate()
        assert not product.is_active

    def test_rating(self, product):
        product.update_rating("4.5", 12)

        assert product.average_rating == Decimal("4.5")
        assert product.has_reviews
        with pytest.raises(ValidationException, match="between 0 and 5"):
            product.update_rating(6, 1)
        with pytest.raises(ValidationException, match="Review count cannot be negative"):
            product.update_rating(3, -1)


class TestProductDetails:
    """Measurements, attributes, images and categories"""

    def test_measurements(self, product):
        product.update_weight(Weight.create(1, "kg"))
        product.update_dimensions(Dimensions.create(10, 10, 20, "cm"))

        assert product.weight.to_grams() == 1000
        assert product.dimensions.volume == 2000

    def test_attributes(self, product):
        product.update_attributes({"origin": "Thailand"})
        product.add_attribute("sizes", ["1kg", "5kg"])
        product.remove_attribute("origin")
        product.remove_attribute("missing")

        assert not product.has_attribute("origin")
        assert product.get_attribute("sizes") == ["1kg", "5kg"]

    def test_images(self, product):
        product.add_image("a.jpg")
        product.add_image("b.jpg")
        product.add_image("a.jpg")
        product.set_featured_image("b.jpg")

        assert product.images.gallery == ("a.jpg", "b.jpg")
        assert product.main_image == "b.jpg"

        product.remove_image("b.jpg")
        assert product.main_image == "a.jpg"

        product.update_images(ProductImages())
        assert product.main_image is None

    def test_categories(self, product):
        first, second = uuid4(), uuid4()

        product.assign_to_categories([first, second, first])
        product.add_to_category(second)

        assert product.category_ids == [first, second]

        product.remove_from_category(first)
        assert not product.is_in_category(first)
        assert product.is_in_category(second)


class TestProductLifecycle:
    """Soft delete and restore"""

    def test_delete_and_restore(self, product):
        product.delete()

        assert product.is_deleted
        assert isinstance(product.domain_events[-1], ProductDeleted)
        assert not product.is_active

        product.restore()
        assert not product.is_deleted

    def test_double_delete_fails(self, product):
        product.delete()

        with pytest.raises(InvalidOperationException, match="Product is already deleted"):
            product.delete()

    def test_restore_live_product_fails(self, product):
        with pytest.raises(InvalidOperationException, match="Product is not deleted"):
            product.restore()

    @pytest.mark.parametrize(
        "mutate",
        [
            lambda p: p.update_basic_info("New", "d", "s"),
            lambda p: p.update_price(Money.create(1)),
            lambda p: p.update_stock(1),
            lambda p: p.activate(),
            lambda p: p.add_image("x.jpg"),
            lambda p: p.add_to_category(uuid4()),
            lambda p: p.update_rating(1, 1),
        ],
    )
    def test_deleted_product_rejects_mutation(self, product, mutate):
        product.delete()

        with pytest.raises(InvalidOperationException, match="Cannot modify deleted product"):
            mutate(product)

    def test_mutations_bump_version_and_timestamp(self, product):
        before = product.updated_at

        product.update_basic_info("  Brown Rice ", "Whole grain", "Rice")

        assert product.name == "Brown Rice"
        assert product.version == 2
        assert product.updated_at >= before


class TestPublicationChecklist:

    def test_lists_every_problem(self):
        product = make_product(price=0, description="")

        assert product.validate_for_publication() == [
            "Product description is required",
            "Product price must be greater than 0",
            "Product must be assigned to at least one category",
            "Product must have at least one image",
        ]

    def test_ready_product_has_no_problems(self, product):
        product.add_to_category(uuid4())
        product.add_image("rice.jpg")

        assert product.validate_for_publication() == []
