"""Cart item management — commands and handler.

A customer's cart is created on first add and deleted as soon as its last
line is removed, so "no cart" and "empty cart" look the same to callers.
"""

from protean import handle
from protean.fields import Identifier, Integer
from protean.utils.globals import current_domain

from marketplace.cart.cart import Cart
from marketplace.domain import marketplace
from marketplace.errors import (
    CartNotFoundError,
    InsufficientStockError,
    ProductNotFoundError,
    StockShortfall,
)
from marketplace.product.product import Product


@marketplace.command(part_of="Cart")
class AddToCart:
    customer_id = Identifier(required=True)
    product_id = Identifier(required=True)
    quantity = Integer(required=True, min_value=1)


@marketplace.command(part_of="Cart")
class RemoveFromCart:
    customer_id = Identifier(required=True)
    product_id = Identifier(required=True)


@marketplace.command(part_of="Cart")
class ClearCart:
    customer_id = Identifier(required=True)


@marketplace.command_handler(part_of=Cart)
class ManageCartItemsHandler:
    @handle(AddToCart)
    def add_to_cart(self, command):
        product = current_domain.repository_for(Product).find(command.product_id)
        if product is None:
            raise ProductNotFoundError(command.product_id)

        # Advisory only; stock is re-checked when the order is placed
        if not product.has_stock_for(command.quantity):
            raise InsufficientStockError(
                [
                    StockShortfall(
                        product_id=str(product.id),
                        product_name=product.name,
                        requested=command.quantity,
                        available=product.stock,
                    )
                ]
            )

        repo = current_domain.repository_for(Cart)
        cart = repo.get_by_customer(command.customer_id) or Cart.create(command.customer_id)
        cart.add_item(
            product_id=command.product_id,
            quantity=command.quantity,
            unit_price=product.price,
        )
        repo.add(cart)
        return str(cart.id)

    @handle(RemoveFromCart)
    def remove_from_cart(self, command):
        """Returns the cart id, or None when the last line went and the cart with it."""
        repo = current_domain.repository_for(Cart)
        cart = repo.get_by_customer(command.customer_id)
        if cart is None:
            raise CartNotFoundError()

        product = current_domain.repository_for(Product).find(command.product_id)
        cart.remove_item(
            product_id=command.product_id,
            unit_price=product.price if product else 0.0,
        )

        if cart.is_empty:
            repo.remove(cart)
            return None

        repo.add(cart)
        return str(cart.id)

    @handle(ClearCart)
    def clear_cart(self, command):
        repo = current_domain.repository_for(Cart)
        cart = repo.get_by_customer(command.customer_id)
        if cart is None:
            raise CartNotFoundError()
        repo.remove(cart)
