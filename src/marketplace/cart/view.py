"""Read-side helpers that join a cart with the current product catalogue."""

from dataclasses import dataclass, field

from protean.utils.globals import current_domain

from marketplace.cart.cart import Cart
from marketplace.product.product import Product


@dataclass(frozen=True)
class CartLine:
    product_id: str
    quantity: int
    product: Product | None

    @property
    def is_available(self) -> bool:
        return self.product is not None


@dataclass(frozen=True)
class CartDetails:
    cart_id: str | None
    customer_id: str
    lines: list[CartLine] = field(default_factory=list)
    total: float = 0.0

    @property
    def is_empty(self) -> bool:
        return not self.lines


def load_cart(customer_id) -> CartDetails:
    """Return the customer's cart with each line's product resolved.

    A customer without a cart gets an empty ``CartDetails``. Lines whose
    product has since been removed keep ``product=None``.
    """
    cart = current_domain.repository_for(Cart).get_by_customer(customer_id)
    if cart is None:
        return CartDetails(cart_id=None, customer_id=str(customer_id))

    products = current_domain.repository_for(Product)
    lines = [
        CartLine(
            product_id=str(item.product_id),
            quantity=item.quantity,
            product=products.find(item.product_id),
        )
        for item in cart.items
    ]
    return CartDetails(
        cart_id=str(cart.id),
        customer_id=str(cart.customer_id),
        lines=lines,
        total=cart.total or 0.0,
    )
