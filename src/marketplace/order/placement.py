"""Order placement — command and handler.

The handler runs inside a single unit of work: every stock decrement, the
new order and the cart deletion are committed together or not at all.
Callers are expected to hold the stock locks of every product in the order
(see ``marketplace.product.locks``) while the command is processed.
"""

import json

from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import Identifier, Text
from protean.utils.globals import current_domain

from marketplace.cart.cart import Cart
from marketplace.domain import marketplace
from marketplace.errors import CartNotFoundError, ProductNotFoundError, StockDepletedError
from marketplace.order.order import Order
from marketplace.product.product import Product


@marketplace.command(part_of="Order")
class PlaceOrder:
    customer_id = Identifier(required=True)
    items = Text(required=True)  # JSON: list of {"product_id", "quantity"}
    cart_id = Identifier()  # cart to delete on success


@marketplace.command_handler(part_of=Order)
class PlaceOrderHandler:
    @handle(PlaceOrder)
    def place_order(self, command):
        items = json.loads(command.items) if isinstance(command.items, str) else command.items
        products = current_domain.repository_for(Product)

        lines = []
        shortfalls = []
        for item in items:
            try:
                outcome = products.decrement_if_available(item["product_id"], item["quantity"])
            except ObjectNotFoundError as exc:
                raise ProductNotFoundError(item["product_id"]) from exc

            if not outcome.applied:
                shortfalls.append(outcome.shortfall())
                continue

            lines.append(
                {
                    "product_id": outcome.product_id,
                    "product_name": outcome.product_name,
                    "quantity": outcome.requested,
                    "price": outcome.unit_price,
                    "store_id": outcome.store_id,
                }
            )

        if shortfalls:
            raise StockDepletedError(shortfalls)

        order = Order.place(
            customer_id=command.customer_id,
            lines=lines,
            cart_id=command.cart_id,
        )
        current_domain.repository_for(Order).add(order)

        if command.cart_id:
            carts = current_domain.repository_for(Cart)
            try:
                cart = carts.get(command.cart_id)
            except ObjectNotFoundError as exc:
                raise CartNotFoundError() from exc
            carts.remove(cart)

        return str(order.id)
