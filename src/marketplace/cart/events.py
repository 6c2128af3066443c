"""Domain events for the Cart aggregate."""

from protean.fields import Float, Identifier, Integer

from marketplace.domain import marketplace


@marketplace.event(part_of="Cart")
class CartItemAdded:
    """A product was added to a customer's cart, or its quantity was raised."""

    __version__ = 1

    cart_id = Identifier(required=True)
    customer_id = Identifier(required=True)
    product_id = Identifier(required=True)
    quantity = Integer(required=True)
    cart_total = Float(required=True)


@marketplace.event(part_of="Cart")
class CartItemRemoved:
    """A product line was taken out of a customer's cart."""

    __version__ = 1

    cart_id = Identifier(required=True)
    customer_id = Identifier(required=True)
    product_id = Identifier(required=True)
    cart_total = Float(required=True)
