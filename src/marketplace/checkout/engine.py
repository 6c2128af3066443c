"""Checkout engine — turns a cart (or a list of items) into an order.

Checkout runs in three phases:

1. Validation: every product is re-read and every shortfall collected.
   Nothing is written if any product falls short.
2. Commit: the ``PlaceOrder`` command is processed while the stock locks of
   every product involved are held. Its unit of work decrements stock,
   creates the order and deletes the cart, all or nothing.
3. Delivery estimate: best-effort, after the commit. It never fails the
   checkout.

Deleting an order restores stock, so it takes the same stock locks as the
commit phase.
"""

import json
import random
from dataclasses import dataclass

from protean.exceptions import ExpectedVersionError, ObjectNotFoundError
from protean.utils.globals import current_domain

from marketplace.cart.view import load_cart
from marketplace.checkout.delivery_time import DeliveryEstimate, DeliveryTimeEstimator
from marketplace.config import CheckoutConfig
from marketplace.delivery import get_estimator
from marketplace.delivery.port import DeliveryEstimator
from marketplace.errors import (
    CheckoutTransactionError,
    ConcurrentUpdateError,
    EmptyCartError,
    EmptyOrderError,
    InsufficientStockError,
    OrderNotFoundError,
    ProductNotFoundError,
    StockDepletedError,
    StockShortfall,
)
from marketplace.order.lifecycle import DeleteOrder
from marketplace.order.order import Order
from marketplace.order.placement import PlaceOrder
from marketplace.product.locks import stock_locks
from marketplace.product.product import Product
from marketplace.utils.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class CheckoutResult:
    order: Order
    delivery: DeliveryEstimate


class CheckoutEngine:
    def __init__(
        self,
        config: CheckoutConfig | None = None,
        estimator: DeliveryEstimator | None = None,
        rng: random.Random | None = None,
    ):
        self.config = config or CheckoutConfig.from_env()
        if estimator is None and self.config.estimator_enabled:
            estimator = get_estimator(self.config)
        self.delivery = DeliveryTimeEstimator(self.config, estimator, rng)

    def convert_cart_to_order(self, customer_id) -> CheckoutResult:
        """Convert the customer's cart into a pending order.

        Raises:
            EmptyCartError: the customer has no cart, or it has no items.
            ProductNotFoundError: a carted product no longer exists.
            InsufficientStockError: one or more products fall short.
            CheckoutTransactionError: the commit failed and was rolled back.
        """
        cart = load_cart(customer_id)
        if cart.cart_id is None or cart.is_empty:
            raise EmptyCartError()

        requested = [(line.product_id, line.quantity) for line in cart.lines]
        return self._checkout(customer_id, requested, cart_id=cart.cart_id)

    def place_order(self, customer_id, items) -> CheckoutResult:
        """Place an order for explicit ``items`` without touching any cart.

        ``items`` is a list of ``{"product_id": ..., "quantity": ...}`` dicts.
        Repeated products are merged.
        """
        if not items:
            raise EmptyOrderError()

        merged: dict[str, int] = {}
        for item in items:
            product_id = str(item["product_id"])
            merged[product_id] = merged.get(product_id, 0) + int(item["quantity"])
        return self._checkout(customer_id, list(merged.items()))

    def _checkout(self, customer_id, requested, cart_id=None) -> CheckoutResult:
        log = logger.bind(customer_id=str(customer_id), cart_id=cart_id)

        try:
            self._validate_stock(requested)
        except InsufficientStockError as exc:
            log.info("Checkout rejected", shortfalls=exc.errors)
            raise

        order = self._commit(customer_id, requested, cart_id, log)
        delivery = self.delivery.estimate_for(order)

        log.info(
            "Order placed",
            order_id=str(order.id),
            total=order.total,
            delivery_minutes=delivery.minutes,
            delivery_source=delivery.source,
        )
        return CheckoutResult(order=order, delivery=delivery)

    def _validate_stock(self, requested) -> None:
        products = current_domain.repository_for(Product)
        shortfalls = []
        for product_id, quantity in requested:
            product = products.find(product_id)
            if product is None:
                raise ProductNotFoundError(product_id)
            if not product.has_stock_for(quantity):
                shortfalls.append(
                    StockShortfall(
                        product_id=str(product.id),
                        product_name=product.name,
                        requested=quantity,
                        available=product.stock,
                    )
                )
        if shortfalls:
            raise InsufficientStockError(shortfalls)

    def _commit(self, customer_id, requested, cart_id, log) -> Order:
        command = PlaceOrder(
            customer_id=customer_id,
            items=json.dumps([{"product_id": pid, "quantity": qty} for pid, qty in requested]),
            cart_id=cart_id,
        )
        try:
            with stock_locks(pid for pid, _ in requested):
                order_id = current_domain.process(command, asynchronous=False)
        except StockDepletedError as exc:
            log.warning(
                "Stock depleted during commit",
                shortfalls=[s.describe() for s in exc.shortfalls],
            )
            raise CheckoutTransactionError(
                "Stock became insufficient while placing the order, please retry",
                shortfalls=exc.shortfalls,
            ) from exc
        except Exception as exc:
            log.exception("Checkout commit failed")
            raise CheckoutTransactionError() from exc

        return current_domain.repository_for(Order).get(order_id)

    def delete_order(self, customer_id, order_id) -> None:
        """Withdraw a pending order and put its stock back.

        Raises:
            OrderNotFoundError: no such order.
            OrderOwnershipError: the order belongs to someone else.
            OrderStateError: the order is no longer pending.
            ConcurrentUpdateError: a competing write won; the call can be retried.
        """
        try:
            order = current_domain.repository_for(Order).get(order_id)
        except ObjectNotFoundError as exc:
            raise OrderNotFoundError(order_id) from exc

        command = DeleteOrder(order_id=order_id, customer_id=customer_id)
        try:
            with stock_locks(item.product_id for item in order.items):
                current_domain.process(command, asynchronous=False)
        except ExpectedVersionError as exc:
            logger.warning(
                "Order deletion lost a concurrent update",
                order_id=str(order_id),
                customer_id=str(customer_id),
            )
            raise ConcurrentUpdateError() from exc
