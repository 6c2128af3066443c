"""Tests for the Product aggregate and its conditional stock decrement."""

import pytest
from protean.exceptions import ValidationError

from marketplace.product.events import ProductListed, ProductPriceChanged, StockDecremented, StockRestored
from marketplace.product.product import Product


def _make_product(**overrides):
    defaults = {"name": "Lamp", "price": 10.0, "stock": 5, "store_id": "store-001"}
    defaults.update(overrides)
    return Product.create(**defaults)


class TestProductCreation:
    def test_create_sets_fields(self):
        product = _make_product()
        assert product.name == "Lamp"
        assert product.price == 10.0
        assert product.stock == 5
        assert product.store_id == "store-001"
        assert product.listed_at is not None

    def test_price_is_rounded_to_cents(self):
        product = _make_product(price=9.999)
        assert product.price == 10.0

    def test_create_raises_listed_event(self):
        product = _make_product()
        assert len(product._events) == 1
        event = product._events[0]
        assert isinstance(event, ProductListed)
        assert event.product_id == str(product.id)
        assert event.stock == 5

    def test_negative_stock_is_rejected(self):
        with pytest.raises(ValidationError):
            _make_product(stock=-1)


class TestDecrementIfAvailable:
    def test_decrement_applies_when_stock_covers_quantity(self):
        product = _make_product(stock=5)
        outcome = product.decrement_if_available(3)

        assert outcome.applied is True
        assert outcome.available == 5
        assert outcome.requested == 3
        assert product.stock == 2

    def test_decrement_of_entire_stock_leaves_zero(self):
        product = _make_product(stock=4)
        outcome = product.decrement_if_available(4)
        assert outcome.applied is True
        assert product.stock == 0

    def test_shortfall_is_reported_not_raised(self):
        product = _make_product(name="Desk", stock=3)
        outcome = product.decrement_if_available(5)

        assert outcome.applied is False
        assert product.stock == 3
        shortfall = outcome.shortfall()
        assert shortfall.product_name == "Desk"
        assert shortfall.requested == 5
        assert shortfall.available == 3

    def test_outcome_snapshots_price_and_store(self):
        product = _make_product(price=12.5, store_id="store-042")
        outcome = product.decrement_if_available(1)
        assert outcome.unit_price == 12.5
        assert outcome.store_id == "store-042"

    def test_decrement_raises_event(self):
        product = _make_product(stock=5)
        product._events.clear()
        product.decrement_if_available(2)

        assert len(product._events) == 1
        event = product._events[0]
        assert isinstance(event, StockDecremented)
        assert event.previous_stock == 5
        assert event.new_stock == 3

    def test_shortfall_raises_no_event(self):
        product = _make_product(stock=1)
        product._events.clear()
        product.decrement_if_available(2)
        assert product._events == []

    @pytest.mark.parametrize("quantity", [0, -2])
    def test_non_positive_quantity_is_rejected(self, quantity):
        product = _make_product()
        with pytest.raises(ValidationError):
            product.decrement_if_available(quantity)


class TestPriceAndRestock:
    def test_change_price(self):
        product = _make_product(price=10.0)
        product._events.clear()
        product.change_price(7.25)

        assert product.price == 7.25
        event = product._events[0]
        assert isinstance(event, ProductPriceChanged)
        assert event.previous_price == 10.0
        assert event.new_price == 7.25

    def test_negative_price_is_rejected(self):
        product = _make_product()
        with pytest.raises(ValidationError):
            product.change_price(-1.0)

    def test_restock_adds_quantity(self):
        product = _make_product(stock=2)
        product._events.clear()
        product.restock(3)

        assert product.stock == 5
        assert isinstance(product._events[0], StockRestored)

    def test_has_stock_for(self):
        product = _make_product(stock=3)
        assert product.has_stock_for(3)
        assert not product.has_stock_for(4)
