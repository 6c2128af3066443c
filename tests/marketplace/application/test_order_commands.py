"""Application tests for direct order placement and the order lifecycle."""

import random
import threading

import pytest
from protean import current_domain
from protean.exceptions import ExpectedVersionError

from marketplace.checkout.engine import CheckoutEngine
from marketplace.config import CheckoutConfig
from marketplace.domain import marketplace
from marketplace.errors import (
    ConcurrentUpdateError,
    EmptyOrderError,
    InsufficientStockError,
    OrderNotFoundError,
    OrderOwnershipError,
    OrderStateError,
    ProductNotFoundError,
)
from marketplace.order.lifecycle import CompleteOrder, DeleteOrder
from marketplace.order.order import Order, OrderStatus
from marketplace.product.product import Product


@pytest.fixture()
def engine():
    return CheckoutEngine(config=CheckoutConfig(), rng=random.Random(1))


def _stock_of(product):
    return current_domain.repository_for(Product).get(product.id).stock


def _items(*pairs):
    return [{"product_id": str(product.id), "quantity": qty} for product, qty in pairs]


class TestPlaceOrder:
    def test_place_order_from_items(self, engine, make_product):
        lamp = make_product(name="Lamp", price=10.0, stock=5)
        rug = make_product(name="Rug", price=5.0, stock=2)

        result = engine.place_order("cust-001", _items((lamp, 2), (rug, 1)))

        assert result.order.total == 25.0
        assert result.order.cart_id is None
        assert _stock_of(lamp) == 3
        assert _stock_of(rug) == 1

    def test_repeated_items_are_merged(self, engine, make_product):
        lamp = make_product(price=10.0, stock=5)

        order = engine.place_order("cust-001", _items((lamp, 1), (lamp, 2))).order

        assert len(order.items) == 1
        assert order.items[0].quantity == 3
        assert _stock_of(lamp) == 2

    def test_empty_items(self, engine):
        with pytest.raises(EmptyOrderError):
            engine.place_order("cust-001", [])

    def test_unknown_product(self, engine):
        with pytest.raises(ProductNotFoundError):
            engine.place_order("cust-001", [{"product_id": "nope", "quantity": 1}])

    def test_insufficient_stock_leaves_stock_alone(self, engine, make_product):
        lamp = make_product(stock=5)
        desk = make_product(name="Desk", stock=1)

        with pytest.raises(InsufficientStockError):
            engine.place_order("cust-001", _items((lamp, 2), (desk, 2)))

        assert _stock_of(lamp) == 5
        assert _stock_of(desk) == 1

    def test_customer_may_hold_many_pending_orders(self, engine, make_product):
        lamp = make_product(stock=5)
        engine.place_order("cust-001", _items((lamp, 1)))
        engine.place_order("cust-001", _items((lamp, 1)))

        orders = current_domain.repository_for(Order).for_customer("cust-001")
        assert len(orders) == 2
        assert all(o.status == OrderStatus.PENDING.value for o in orders)


class TestCompleteOrder:
    def test_complete(self, engine, make_product):
        lamp = make_product()
        order = engine.place_order("cust-001", _items((lamp, 1))).order

        current_domain.process(CompleteOrder(order_id=str(order.id)), asynchronous=False)

        stored = current_domain.repository_for(Order).get(order.id)
        assert stored.status == OrderStatus.COMPLETED.value

    def test_complete_twice(self, engine, make_product):
        lamp = make_product()
        order = engine.place_order("cust-001", _items((lamp, 1))).order
        current_domain.process(CompleteOrder(order_id=str(order.id)), asynchronous=False)

        with pytest.raises(OrderStateError):
            current_domain.process(CompleteOrder(order_id=str(order.id)), asynchronous=False)

    def test_complete_unknown_order(self):
        with pytest.raises(OrderNotFoundError):
            current_domain.process(CompleteOrder(order_id="missing"), asynchronous=False)


class TestDeleteOrder:
    def test_owner_deletes_pending_order_and_stock_returns(self, engine, make_product):
        lamp = make_product(stock=5)
        order = engine.place_order("cust-001", _items((lamp, 2))).order
        assert _stock_of(lamp) == 3

        current_domain.process(
            DeleteOrder(order_id=str(order.id), customer_id="cust-001"),
            asynchronous=False,
        )

        assert _stock_of(lamp) == 5
        assert current_domain.repository_for(Order).for_customer("cust-001") == []

    def test_other_customer_cannot_delete(self, engine, make_product):
        lamp = make_product(stock=5)
        order = engine.place_order("cust-001", _items((lamp, 2))).order

        with pytest.raises(OrderOwnershipError):
            current_domain.process(
                DeleteOrder(order_id=str(order.id), customer_id="cust-002"),
                asynchronous=False,
            )
        assert _stock_of(lamp) == 3
        assert current_domain.repository_for(Order).get(order.id) is not None

    def test_completed_order_cannot_be_deleted(self, engine, make_product):
        lamp = make_product(stock=5)
        order = engine.place_order("cust-001", _items((lamp, 1))).order
        current_domain.process(CompleteOrder(order_id=str(order.id)), asynchronous=False)

        with pytest.raises(OrderStateError):
            current_domain.process(
                DeleteOrder(order_id=str(order.id), customer_id="cust-001"),
                asynchronous=False,
            )

    def test_delete_skips_removed_products(self, engine, make_product):
        lamp = make_product(stock=5)
        rug = make_product(stock=5)
        order = engine.place_order("cust-001", _items((lamp, 1), (rug, 1))).order

        repo = current_domain.repository_for(Product)
        repo._dao.delete(repo.get(rug.id))

        current_domain.process(
            DeleteOrder(order_id=str(order.id), customer_id="cust-001"),
            asynchronous=False,
        )
        assert _stock_of(lamp) == 5

    def test_delete_unknown_order(self):
        with pytest.raises(OrderNotFoundError):
            current_domain.process(
                DeleteOrder(order_id="missing", customer_id="cust-001"),
                asynchronous=False,
            )


class TestEngineDeleteOrder:
    def test_delete_restores_stock(self, engine, make_product):
        lamp = make_product(stock=5)
        order = engine.place_order("cust-001", _items((lamp, 2))).order

        engine.delete_order("cust-001", str(order.id))

        assert _stock_of(lamp) == 5
        assert current_domain.repository_for(Order).for_customer("cust-001") == []

    def test_delete_unknown_order(self, engine):
        with pytest.raises(OrderNotFoundError):
            engine.delete_order("cust-001", "missing")

    def test_delete_someone_elses_order(self, engine, make_product):
        lamp = make_product(stock=5)
        order = engine.place_order("cust-001", _items((lamp, 1))).order

        with pytest.raises(OrderOwnershipError):
            engine.delete_order("cust-002", str(order.id))
        assert _stock_of(lamp) == 4

    def test_version_conflict_is_retryable(self, engine, make_product, monkeypatch):
        lamp = make_product(stock=5)
        order = engine.place_order("cust-001", _items((lamp, 2))).order

        def lose_race(self, quantity):
            raise ExpectedVersionError("Wrong expected version")

        monkeypatch.setattr(Product, "restock", lose_race)

        with pytest.raises(ConcurrentUpdateError) as exc:
            engine.delete_order("cust-001", str(order.id))

        assert exc.value.retryable is True
        assert exc.value.status_code == 409
        assert _stock_of(lamp) == 3
        assert current_domain.repository_for(Order).get(order.id) is not None


class TestDeletesRacingCheckouts:
    def test_concurrent_checkouts_and_deletes_keep_stock_consistent(self, engine, make_product):
        lamp = make_product(stock=100)
        placed = [
            engine.place_order(f"cust-{n:03}", _items((lamp, 1))).order
            for n in range(10)
        ]
        assert _stock_of(lamp) == 90

        outcomes = []
        start = threading.Barrier(20)

        def checkout(customer_id):
            with marketplace.domain_context():
                start.wait()
                try:
                    engine.place_order(customer_id, _items((lamp, 1)))
                    outcomes.append("checkout-ok")
                except Exception as exc:
                    outcomes.append(f"checkout-{type(exc).__name__}")

        def delete(order):
            with marketplace.domain_context():
                start.wait()
                try:
                    engine.delete_order(order.customer_id, str(order.id))
                    outcomes.append("delete-ok")
                except Exception as exc:
                    outcomes.append(f"delete-{type(exc).__name__}")

        threads = [threading.Thread(target=checkout, args=(f"buyer-{n:03}",)) for n in range(10)]
        threads += [threading.Thread(target=delete, args=(order,)) for order in placed]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join(timeout=10)

        assert sorted(outcomes) == ["checkout-ok"] * 10 + ["delete-ok"] * 10
        assert _stock_of(lamp) == 90
        orders = current_domain.repository_for(Order)._dao.query.all().items
        assert sorted(o.customer_id for o in orders) == [f"buyer-{n:03}" for n in range(10)]
